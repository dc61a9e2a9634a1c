"""In-memory catalog store.

Test fake with the same contract as ``SqlCatalogStore``, including
constraint classification, ordering and stock guard semantics. The REST
and RPC handler tests run against it.
"""

import asyncio
import copy
from dataclasses import replace
from datetime import datetime, timezone

from catalog_service.catalog.params import ListCategoriesParams, ListProductsParams
from catalog_service.domain import (
    MAX_STOCK_QUANTITY,
    Category,
    CategoryNameExistsError,
    CategoryNotFoundError,
    CategoryReferenceError,
    InsufficientStockError,
    Product,
    ProductNotFoundError,
    ProductSKUExistsError,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _matches(product: Product, params: ListProductsParams) -> bool:
    """Apply the listing filter to one product."""
    if params.search:
        term = params.search.lower()
        haystacks = (product.name, product.description or "")
        if not any(term in text.lower() for text in haystacks):
            return False
    if params.category_id is not None and product.category_id != params.category_id:
        return False
    if params.min_price is not None and product.price < params.min_price:
        return False
    if params.max_price is not None and product.price > params.max_price:
        return False
    if params.is_active is not None and product.is_active != params.is_active:
        return False
    if params.product_ids and product.id not in params.product_ids:
        return False
    return True


class InMemoryCatalogStore:
    """Catalog store holding entities in dictionaries.

    A single lock serializes writes, which gives the stock guard the same
    atomicity as the SQL statement.
    """

    def __init__(self) -> None:
        self._categories: dict[int, Category] = {}
        self._products: dict[int, Product] = {}
        self._next_category_id = 1
        self._next_product_id = 1
        self._lock = asyncio.Lock()
        self.available = True

    # Categories

    def _check_category_name(self, name: str, exclude_id: int = 0) -> None:
        for existing in self._categories.values():
            if existing.name == name and existing.id != exclude_id:
                raise CategoryNameExistsError()

    def _check_category_ref(self, category_id: int | None, field: str) -> None:
        if category_id is not None and category_id not in self._categories:
            raise CategoryReferenceError(field)

    async def create_category(self, category: Category) -> Category:
        async with self._lock:
            self._check_category_name(category.name)
            self._check_category_ref(category.parent_category_id, "parent_category_id")
            now = _now()
            stored = replace(
                category,
                id=self._next_category_id,
                created_at=now,
                updated_at=now,
            )
            self._categories[stored.id] = stored
            self._next_category_id += 1
            return replace(stored)

    async def get_category(self, category_id: int) -> Category:
        stored = self._categories.get(category_id)
        if stored is None:
            raise CategoryNotFoundError(category_id)
        return replace(stored)

    async def list_categories(
        self, params: ListCategoriesParams
    ) -> tuple[list[Category], int]:
        matching = [
            c
            for c in self._categories.values()
            if params.parent_category_id is None
            or c.parent_category_id == params.parent_category_id
        ]
        matching.sort(key=lambda c: (c.name, c.id))
        page = matching[params.offset : params.offset + params.limit]
        return [replace(c) for c in page], len(matching)

    async def update_category(self, category: Category) -> Category:
        async with self._lock:
            stored = self._categories.get(category.id)
            if stored is None:
                raise CategoryNotFoundError(category.id)
            self._check_category_name(category.name, exclude_id=category.id)
            self._check_category_ref(category.parent_category_id, "parent_category_id")
            updated = replace(
                stored,
                name=category.name,
                description=category.description,
                parent_category_id=category.parent_category_id,
                updated_at=_now(),
            )
            self._categories[updated.id] = updated
            return replace(updated)

    async def delete_category(self, category_id: int) -> None:
        async with self._lock:
            if self._categories.pop(category_id, None) is None:
                raise CategoryNotFoundError(category_id)
            # ON DELETE SET NULL
            for cid, child in self._categories.items():
                if child.parent_category_id == category_id:
                    self._categories[cid] = replace(child, parent_category_id=None)
            for pid, product in self._products.items():
                if product.category_id == category_id:
                    self._products[pid] = replace(product, category_id=None)

    # Products

    def _check_sku(self, sku: str, exclude_id: int = 0) -> None:
        for existing in self._products.values():
            if existing.sku == sku and existing.id != exclude_id:
                raise ProductSKUExistsError()

    @staticmethod
    def _copy(product: Product) -> Product:
        return replace(product, attributes=copy.deepcopy(product.attributes))

    async def create_product(self, product: Product) -> Product:
        async with self._lock:
            self._check_sku(product.sku)
            self._check_category_ref(product.category_id, "category_id")
            now = _now()
            stored = replace(
                self._copy(product),
                id=self._next_product_id,
                created_at=now,
                updated_at=now,
            )
            self._products[stored.id] = stored
            self._next_product_id += 1
            return self._copy(stored)

    async def get_product(self, product_id: int) -> Product:
        stored = self._products.get(product_id)
        if stored is None:
            raise ProductNotFoundError(product_id)
        return self._copy(stored)

    async def list_products(
        self, params: ListProductsParams
    ) -> tuple[list[Product], int]:
        matching = [p for p in self._products.values() if _matches(p, params)]
        # Stable sorts: id ascending first, then the requested column
        matching.sort(key=lambda p: p.id)
        matching.sort(
            key=lambda p: getattr(p, params.resolved_sort_by),
            reverse=params.descending,
        )
        page = matching[params.offset : params.offset + params.limit]
        return [self._copy(p) for p in page], len(matching)

    async def update_product(self, product: Product) -> Product:
        async with self._lock:
            stored = self._products.get(product.id)
            if stored is None:
                raise ProductNotFoundError(product.id)
            self._check_sku(product.sku, exclude_id=product.id)
            self._check_category_ref(product.category_id, "category_id")
            updated = replace(
                self._copy(product),
                created_at=stored.created_at,
                updated_at=_now(),
            )
            self._products[updated.id] = updated
            return self._copy(updated)

    async def delete_product(self, product_id: int) -> None:
        async with self._lock:
            if self._products.pop(product_id, None) is None:
                raise ProductNotFoundError(product_id)

    async def update_stock(self, product_id: int, quantity_change: int) -> Product:
        async with self._lock:
            stored = self._products.get(product_id)
            if stored is None:
                raise ProductNotFoundError(product_id)
            new_quantity = stored.stock_quantity + quantity_change
            if not 0 <= new_quantity <= MAX_STOCK_QUANTITY:
                raise InsufficientStockError(product_id, quantity_change)
            updated = replace(stored, stock_quantity=new_quantity, updated_at=_now())
            self._products[product_id] = updated
            return self._copy(updated)

    async def get_recent_products(self, limit: int) -> list[Product]:
        if limit <= 0:
            return []
        active = [p for p in self._products.values() if p.is_active]
        active.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return [self._copy(p) for p in active[:limit]]

    # Lifecycle

    async def ping(self) -> bool:
        return self.available

    async def close(self) -> None:
        return None
