"""Catalog storage engine.

Provides the storage interfaces for categories and products, the SQL and
in-memory implementations, and the list parameter types they share.
"""

from catalog_service.catalog.interfaces import CatalogStore, CategoryStore, ProductStore
from catalog_service.catalog.memory import InMemoryCatalogStore
from catalog_service.catalog.params import (
    PRODUCT_SORT_FIELDS,
    SORT_ORDERS,
    ListCategoriesParams,
    ListProductsParams,
)
from catalog_service.catalog.repository import SqlCatalogStore

__all__ = [
    # Interfaces
    "CatalogStore",
    "CategoryStore",
    "ProductStore",
    # Params
    "PRODUCT_SORT_FIELDS",
    "SORT_ORDERS",
    "ListCategoriesParams",
    "ListProductsParams",
    # Implementations
    "InMemoryCatalogStore",
    "SqlCatalogStore",
]
