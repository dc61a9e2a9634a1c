"""Tests for the SQL catalog store (SQLite backend)."""

from decimal import Decimal

import pytest

from catalog_service.catalog import ListCategoriesParams, ListProductsParams, SqlCatalogStore
from catalog_service.domain import (
    MAX_STOCK_QUANTITY,
    CategoryNameExistsError,
    CategoryNotFoundError,
    CategoryReferenceError,
    ErrorKind,
    InsufficientStockError,
    ProductNotFoundError,
    ProductSKUExistsError,
)


class TestCategories:
    """Category operations."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        created = await sql_store.create_category(
            make_category("Garden", description="Outdoor tools")
        )
        assert created.id > 0
        assert created.name == "Garden"
        assert created.description == "Outdoor tools"
        assert created.created_at is not None
        assert created.updated_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_name_is_name_conflict(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        await sql_store.create_category(make_category("Garden"))
        with pytest.raises(CategoryNameExistsError) as exc_info:
            await sql_store.create_category(make_category("Garden"))
        assert exc_info.value.kind == ErrorKind.NAME_CONFLICT

    @pytest.mark.asyncio
    async def test_missing_parent_is_invalid_reference(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        with pytest.raises(CategoryReferenceError) as exc_info:
            await sql_store.create_category(make_category("Orphan", parent_category_id=999))
        assert exc_info.value.details == {"field": "parent_category_id"}

    @pytest.mark.asyncio
    async def test_get_missing_is_not_found(self, sql_store: SqlCatalogStore) -> None:
        with pytest.raises(CategoryNotFoundError):
            await sql_store.get_category(12345)

    @pytest.mark.asyncio
    async def test_list_returns_all_rows_and_total(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        await sql_store.create_category(make_category("Toys"))
        await sql_store.create_category(make_category("Books"))

        categories, total = await sql_store.list_categories(
            ListCategoriesParams(limit=10, offset=0)
        )
        assert total == 2
        assert [c.name for c in categories] == ["Books", "Toys"]

    @pytest.mark.asyncio
    async def test_list_empty(self, sql_store: SqlCatalogStore) -> None:
        categories, total = await sql_store.list_categories(ListCategoriesParams())
        assert categories == []
        assert total == 0

    @pytest.mark.asyncio
    async def test_list_filters_by_parent(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        parent = await sql_store.create_category(make_category("Home"))
        await sql_store.create_category(make_category("Kitchen", parent_category_id=parent.id))
        await sql_store.create_category(make_category("Sports"))

        categories, total = await sql_store.list_categories(
            ListCategoriesParams(parent_category_id=parent.id)
        )
        assert total == 1
        assert categories[0].name == "Kitchen"

    @pytest.mark.asyncio
    async def test_list_pages_independently_of_total(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        for name in ("A", "B", "C"):
            await sql_store.create_category(make_category(name))

        categories, total = await sql_store.list_categories(
            ListCategoriesParams(limit=2, offset=2)
        )
        assert total == 3
        assert [c.name for c in categories] == ["C"]

    @pytest.mark.asyncio
    async def test_update_replaces_fields(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        created = await sql_store.create_category(make_category("Garden", description="old"))
        created.name = "Garden & Patio"
        created.description = None

        updated = await sql_store.update_category(created)
        assert updated.id == created.id
        assert updated.name == "Garden & Patio"
        assert updated.description is None

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        with pytest.raises(CategoryNotFoundError):
            await sql_store.update_category(make_category("Ghost", id=777))

    @pytest.mark.asyncio
    async def test_update_to_taken_name_is_conflict(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        await sql_store.create_category(make_category("Books"))
        toys = await sql_store.create_category(make_category("Toys"))
        toys.name = "Books"
        with pytest.raises(CategoryNameExistsError):
            await sql_store.update_category(toys)

    @pytest.mark.asyncio
    async def test_delete_twice_is_not_found(
        self, sql_store: SqlCatalogStore, make_category
    ) -> None:
        created = await sql_store.create_category(make_category("Garden"))
        await sql_store.delete_category(created.id)
        with pytest.raises(CategoryNotFoundError):
            await sql_store.delete_category(created.id)

    @pytest.mark.asyncio
    async def test_delete_keeps_products(
        self, sql_store: SqlCatalogStore, make_category, make_product
    ) -> None:
        category = await sql_store.create_category(make_category("Garden"))
        product = await sql_store.create_product(make_product(category_id=category.id))

        await sql_store.delete_category(category.id)

        reloaded = await sql_store.get_product(product.id)
        assert reloaded.category_id is None


class TestProducts:
    """Product operations."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, sql_store: SqlCatalogStore, make_product) -> None:
        created = await sql_store.create_product(
            make_product("SKU-1", image_url="https://img.example.com/1.png")
        )
        assert created.id > 0
        assert created.is_active is True
        assert created.created_at is not None

        fetched = await sql_store.get_product(created.id)
        assert fetched.sku == "SKU-1"
        assert fetched.price == Decimal("19.99")
        assert fetched.stock_quantity == 10
        assert fetched.image_url == "https://img.example.com/1.png"

    @pytest.mark.asyncio
    async def test_duplicate_sku_is_sku_conflict(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        await sql_store.create_product(make_product("SKU-1"))
        with pytest.raises(ProductSKUExistsError) as exc_info:
            await sql_store.create_product(make_product("SKU-1", name="Other"))
        assert exc_info.value.kind == ErrorKind.SKU_CONFLICT

    @pytest.mark.asyncio
    async def test_missing_category_is_invalid_reference(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        with pytest.raises(CategoryReferenceError) as exc_info:
            await sql_store.create_product(make_product(category_id=4242))
        assert exc_info.value.kind == ErrorKind.INVALID_REFERENCE
        assert exc_info.value.details == {"field": "category_id"}

    @pytest.mark.asyncio
    async def test_attributes_round_trip(self, sql_store: SqlCatalogStore, make_product) -> None:
        attributes = {"color": "red", "sizes": [1, 2], "dims": {"w": 3}}
        created = await sql_store.create_product(make_product(attributes=attributes))
        fetched = await sql_store.get_product(created.id)
        assert fetched.attributes == attributes

    @pytest.mark.asyncio
    async def test_absent_attributes_read_back_as_none(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        created = await sql_store.create_product(make_product())
        fetched = await sql_store.get_product(created.id)
        assert fetched.attributes is None

    @pytest.mark.asyncio
    async def test_get_missing_is_not_found(self, sql_store: SqlCatalogStore) -> None:
        with pytest.raises(ProductNotFoundError):
            await sql_store.get_product(99)

    @pytest.mark.asyncio
    async def test_update_replaces_all_fields(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        created = await sql_store.create_product(
            make_product("SKU-1", attributes={"color": "red"})
        )
        created.name = "Renamed"
        created.price = Decimal("5.50")
        created.is_active = False
        created.attributes = None

        updated = await sql_store.update_product(created)
        assert updated.name == "Renamed"
        assert updated.price == Decimal("5.50")
        assert updated.is_active is False
        assert updated.attributes is None

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        with pytest.raises(ProductNotFoundError):
            await sql_store.update_product(make_product(id=31337))

    @pytest.mark.asyncio
    async def test_update_to_taken_sku_is_conflict(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        await sql_store.create_product(make_product("SKU-1"))
        second = await sql_store.create_product(make_product("SKU-2"))
        second.sku = "SKU-1"
        with pytest.raises(ProductSKUExistsError):
            await sql_store.update_product(second)

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_found(self, sql_store: SqlCatalogStore) -> None:
        with pytest.raises(ProductNotFoundError):
            await sql_store.delete_product(5)


class TestProductListing:
    """Filtering, sorting and pagination of products."""

    @pytest.fixture
    def catalog(self, make_product):
        return [
            make_product("SKU-A", name="Red Shovel", price=Decimal("25.00"), description="Steel"),
            make_product("SKU-B", name="Blue Rake", price=Decimal("15.00")),
            make_product("SKU-C", name="Hose 100%", price=Decimal("40.00"), is_active=False),
        ]

    async def _seed(self, store: SqlCatalogStore, products) -> list:
        return [await store.create_product(p) for p in products]

    @pytest.mark.asyncio
    async def test_no_filters_returns_everything(
        self, sql_store: SqlCatalogStore, catalog
    ) -> None:
        await self._seed(sql_store, catalog)
        products, total = await sql_store.list_products(ListProductsParams())
        assert total == 3
        assert [p.sku for p in products] == ["SKU-A", "SKU-B", "SKU-C"]

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_over_name_and_description(
        self, sql_store: SqlCatalogStore, catalog
    ) -> None:
        await self._seed(sql_store, catalog)

        products, total = await sql_store.list_products(ListProductsParams(search="rake"))
        assert total == 1
        assert products[0].sku == "SKU-B"

        products, _ = await sql_store.list_products(ListProductsParams(search="STEEL"))
        assert [p.sku for p in products] == ["SKU-A"]

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, sql_store: SqlCatalogStore, catalog) -> None:
        await self._seed(sql_store, catalog)
        products, total = await sql_store.list_products(ListProductsParams(search="100%"))
        assert total == 1
        assert products[0].sku == "SKU-C"

        _, total = await sql_store.list_products(ListProductsParams(search="%"))
        assert total == 1

    @pytest.mark.asyncio
    async def test_price_range_is_inclusive(self, sql_store: SqlCatalogStore, catalog) -> None:
        await self._seed(sql_store, catalog)
        products, total = await sql_store.list_products(
            ListProductsParams(min_price=Decimal("15"), max_price=Decimal("25"))
        )
        assert total == 2
        assert {p.sku for p in products} == {"SKU-A", "SKU-B"}

    @pytest.mark.asyncio
    async def test_active_filter(self, sql_store: SqlCatalogStore, catalog) -> None:
        await self._seed(sql_store, catalog)
        _, active_total = await sql_store.list_products(ListProductsParams(is_active=True))
        inactive, inactive_total = await sql_store.list_products(
            ListProductsParams(is_active=False)
        )
        assert active_total == 2
        assert inactive_total == 1
        assert inactive[0].sku == "SKU-C"

    @pytest.mark.asyncio
    async def test_category_and_id_filters(
        self, sql_store: SqlCatalogStore, make_category, catalog
    ) -> None:
        category = await sql_store.create_category(make_category("Tools"))
        catalog[0].category_id = category.id
        seeded = await self._seed(sql_store, catalog)

        products, total = await sql_store.list_products(
            ListProductsParams(category_id=category.id)
        )
        assert total == 1
        assert products[0].sku == "SKU-A"

        ids = [seeded[1].id, seeded[2].id]
        products, total = await sql_store.list_products(ListProductsParams(product_ids=ids))
        assert total == 2
        assert {p.id for p in products} == set(ids)

    @pytest.mark.asyncio
    async def test_sort_by_price_descending(self, sql_store: SqlCatalogStore, catalog) -> None:
        await self._seed(sql_store, catalog)
        products, _ = await sql_store.list_products(
            ListProductsParams(sort_by="price", sort_order="DESC")
        )
        assert [p.sku for p in products] == ["SKU-C", "SKU-A", "SKU-B"]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_falls_back_to_default(
        self, sql_store: SqlCatalogStore, catalog
    ) -> None:
        await self._seed(sql_store, catalog)
        products, _ = await sql_store.list_products(
            ListProductsParams(sort_by="stock_quantity; DROP TABLE products")
        )
        assert [p.sku for p in products] == ["SKU-A", "SKU-B", "SKU-C"]

    @pytest.mark.asyncio
    async def test_pagination_total_is_independent_of_limit(
        self, sql_store: SqlCatalogStore, catalog
    ) -> None:
        await self._seed(sql_store, catalog)
        products, total = await sql_store.list_products(
            ListProductsParams(limit=1, offset=1, sort_by="name")
        )
        assert total == 3
        assert [p.sku for p in products] == ["SKU-C"]

    @pytest.mark.asyncio
    async def test_recent_products_are_active_and_newest_first(
        self, sql_store: SqlCatalogStore, catalog
    ) -> None:
        await self._seed(sql_store, catalog)
        recent = await sql_store.get_recent_products(5)
        assert [p.sku for p in recent] == ["SKU-B", "SKU-A"]

        assert await sql_store.get_recent_products(0) == []


class TestStock:
    """Guarded stock adjustment."""

    @pytest.mark.asyncio
    async def test_adjusts_quantity(self, sql_store: SqlCatalogStore, make_product) -> None:
        created = await sql_store.create_product(make_product(stock_quantity=10))

        updated = await sql_store.update_stock(created.id, -4)
        assert updated.stock_quantity == 6

        updated = await sql_store.update_stock(created.id, 3)
        assert updated.stock_quantity == 9

    @pytest.mark.asyncio
    async def test_draining_to_zero_is_allowed(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        created = await sql_store.create_product(make_product(stock_quantity=2))
        updated = await sql_store.update_stock(created.id, -2)
        assert updated.stock_quantity == 0

    @pytest.mark.asyncio
    async def test_going_negative_is_insufficient_stock(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        created = await sql_store.create_product(make_product(stock_quantity=3))

        with pytest.raises(InsufficientStockError):
            await sql_store.update_stock(created.id, -4)

        reloaded = await sql_store.get_product(created.id)
        assert reloaded.stock_quantity == 3

    @pytest.mark.asyncio
    async def test_overflowing_column_is_insufficient_stock(
        self, sql_store: SqlCatalogStore, make_product
    ) -> None:
        created = await sql_store.create_product(
            make_product(stock_quantity=MAX_STOCK_QUANTITY - 1)
        )

        updated = await sql_store.update_stock(created.id, 1)
        assert updated.stock_quantity == MAX_STOCK_QUANTITY
        with pytest.raises(InsufficientStockError):
            await sql_store.update_stock(created.id, 1)

        reloaded = await sql_store.get_product(created.id)
        assert reloaded.stock_quantity == MAX_STOCK_QUANTITY

    @pytest.mark.asyncio
    async def test_unknown_product_is_not_found(self, sql_store: SqlCatalogStore) -> None:
        with pytest.raises(ProductNotFoundError):
            await sql_store.update_stock(404, 1)


class TestLifecycle:
    """Connectivity checks."""

    @pytest.mark.asyncio
    async def test_ping(self, sql_store: SqlCatalogStore) -> None:
        assert await sql_store.ping() is True
