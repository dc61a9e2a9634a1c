"""Domain layer - catalog entities and the error taxonomy.

Example usage:
    from catalog_service.domain import Category, ProductNotFoundError

    category = Category(name="Garden", description="Outdoor tools")
"""

from catalog_service.domain.entities import (
    MAX_ID,
    MAX_STOCK_QUANTITY,
    PRICE_DECIMAL_PLACES,
    PRICE_MAX_DIGITS,
    Category,
    Product,
)
from catalog_service.domain.exceptions import (
    CategoryNameExistsError,
    CategoryNotFoundError,
    CategoryReferenceError,
    ConflictError,
    DomainError,
    ErrorKind,
    InsufficientStockError,
    InvalidReferenceError,
    NotFoundError,
    ProductNotFoundError,
    ProductSKUExistsError,
    StorageError,
    ValidationFailedError,
)

__all__ = [
    # Entities
    "MAX_ID",
    "MAX_STOCK_QUANTITY",
    "PRICE_DECIMAL_PLACES",
    "PRICE_MAX_DIGITS",
    "Category",
    "Product",
    # Exceptions
    "CategoryNameExistsError",
    "CategoryNotFoundError",
    "CategoryReferenceError",
    "ConflictError",
    "DomainError",
    "ErrorKind",
    "InsufficientStockError",
    "InvalidReferenceError",
    "NotFoundError",
    "ProductNotFoundError",
    "ProductSKUExistsError",
    "StorageError",
    "ValidationFailedError",
]
