"""Storage capability interfaces.

Both handler families depend on these protocols rather than on a concrete
store, so the SQL store and the in-memory store are interchangeable.
"""

from typing import Protocol

from catalog_service.catalog.params import ListCategoriesParams, ListProductsParams
from catalog_service.domain import Category, Product


class CategoryStore(Protocol):
    """Category operations."""

    async def create_category(self, category: Category) -> Category:
        """Insert a category and return it with store-assigned fields.

        Raises:
            CategoryNameExistsError: If the name is taken.
            CategoryReferenceError: If the parent does not exist.
            StorageError: On any other store failure.
        """
        ...

    async def get_category(self, category_id: int) -> Category:
        """Fetch a category.

        Raises:
            CategoryNotFoundError: If no row matches.
        """
        ...

    async def list_categories(
        self, params: ListCategoriesParams
    ) -> tuple[list[Category], int]:
        """Return one page of categories (name ascending) and the total count."""
        ...

    async def update_category(self, category: Category) -> Category:
        """Replace name, description and parent of ``category.id``.

        Raises:
            CategoryNotFoundError: If no row matches.
            CategoryNameExistsError: If the new name is taken.
        """
        ...

    async def delete_category(self, category_id: int) -> None:
        """Delete a category.

        Raises:
            CategoryNotFoundError: If no row matches.
        """
        ...


class ProductStore(Protocol):
    """Product operations."""

    async def create_product(self, product: Product) -> Product:
        """Insert a product and return it with store-assigned fields.

        Raises:
            ProductSKUExistsError: If the SKU is taken.
            CategoryReferenceError: If the category does not exist.
            StorageError: On any other store failure.
        """
        ...

    async def get_product(self, product_id: int) -> Product:
        """Fetch a product.

        Raises:
            ProductNotFoundError: If no row matches.
        """
        ...

    async def list_products(
        self, params: ListProductsParams
    ) -> tuple[list[Product], int]:
        """Return one filtered, sorted page of products and the total count."""
        ...

    async def update_product(self, product: Product) -> Product:
        """Replace every mutable field of ``product.id``.

        Raises:
            ProductNotFoundError: If no row matches.
            ProductSKUExistsError: If the new SKU is taken.
        """
        ...

    async def delete_product(self, product_id: int) -> None:
        """Delete a product.

        Raises:
            ProductNotFoundError: If no row matches.
        """
        ...

    async def update_stock(self, product_id: int, quantity_change: int) -> Product:
        """Atomically add ``quantity_change`` to the stock quantity.

        Raises:
            ProductNotFoundError: If no row matches.
            InsufficientStockError: If the result would be negative.
        """
        ...

    async def get_recent_products(self, limit: int) -> list[Product]:
        """Return up to ``limit`` active products, newest first."""
        ...


class CatalogStore(CategoryStore, ProductStore, Protocol):
    """Full store, as wired at startup."""

    async def ping(self) -> bool:
        """Return whether the store is reachable."""
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...
