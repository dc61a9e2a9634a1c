"""SQL catalog store.

Implements the category and product storage interfaces on top of async
SQLAlchemy. Every operation runs in its own short-lived session and
transaction drawn from the shared engine pool; the store itself keeps no
per-request state.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import (
    JSON,
    BigInteger,
    cast,
    delete,
    exists,
    func,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from catalog_service.catalog.errors import classify_integrity_error
from catalog_service.catalog.models import CategoryRecord, ProductRecord
from catalog_service.catalog.params import ListCategoriesParams, ListProductsParams
from catalog_service.catalog.query import (
    category_predicates,
    product_predicates,
    product_sort_column,
)
from catalog_service.domain import (
    MAX_STOCK_QUANTITY,
    Category,
    CategoryNotFoundError,
    DomainError,
    InsufficientStockError,
    Product,
    ProductNotFoundError,
    StorageError,
)
from catalog_service.infrastructure.database import create_session_factory

logger = structlog.get_logger()


def _attributes_value(attributes: Any) -> Any:
    """Value bound for the attributes column.

    Absent attributes are written as JSON ``null`` so the column always
    holds a document.
    """
    if attributes is None or attributes == "":
        return JSON.NULL
    return attributes


def _product_values(product: Product) -> dict[str, Any]:
    """Column values for insert/update of a product."""
    return {
        "name": product.name,
        "description": product.description,
        "sku": product.sku,
        "price": product.price,
        "stock_quantity": product.stock_quantity,
        "category_id": product.category_id,
        "image_url": product.image_url,
        "is_active": product.is_active,
        "attributes": _attributes_value(product.attributes),
    }


class SqlCatalogStore:
    """Catalog store backed by a relational database.

    Example usage:
        engine = create_engine(settings)
        store = SqlCatalogStore(engine)
        product = await store.get_product(42)
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Initialize store.

        Args:
            engine: Async engine owning the connection pool.
            session_factory: Session factory; one bound to ``engine`` is
                created when omitted.
        """
        self.engine = engine
        self.session_factory = session_factory or create_session_factory(engine)

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run a block in one transaction, translating store failures.

        Domain errors raised inside the block pass through untouched.
        Integrity errors are classified by constraint; everything else
        becomes ``StorageError`` with the cause logged.

        Args:
            operation: Name used in log records and error messages.

        Yields:
            Session with an open transaction.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except DomainError:
            raise
        except IntegrityError as e:
            classified = classify_integrity_error(e)
            if classified is not None:
                logger.info(
                    "Constraint violation",
                    operation=operation,
                    error_kind=classified.kind.value,
                )
                raise classified from e
            logger.error("Unclassified integrity error", operation=operation, error=str(e))
            raise StorageError(f"store: {operation} failed") from e
        except SQLAlchemyError as e:
            logger.error("Store operation failed", operation=operation, error=str(e))
            raise StorageError(f"store: {operation} failed") from e

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def create_category(self, category: Category) -> Category:
        statement = (
            insert(CategoryRecord)
            .values(
                name=category.name,
                description=category.description,
                parent_category_id=category.parent_category_id,
            )
            .returning(CategoryRecord)
        )
        async with self._transaction("create_category") as session:
            record = (await session.execute(statement)).scalar_one()
            return record.to_entity()

    async def get_category(self, category_id: int) -> Category:
        async with self._transaction("get_category") as session:
            record = await session.scalar(
                select(CategoryRecord).where(CategoryRecord.id == category_id)
            )
            if record is None:
                raise CategoryNotFoundError(category_id)
            return record.to_entity()

    async def list_categories(
        self, params: ListCategoriesParams
    ) -> tuple[list[Category], int]:
        """Return one page of categories ordered by name.

        Args:
            params: Pagination and parent filter.

        Returns:
            Tuple of (categories, total matching count).
        """
        predicates = category_predicates(params)
        async with self._transaction("list_categories") as session:
            total = await session.scalar(
                predicates.apply(select(func.count()).select_from(CategoryRecord))
            )
            if not total:
                return [], 0

            query = (
                predicates.apply(select(CategoryRecord))
                .order_by(CategoryRecord.name.asc(), CategoryRecord.id.asc())
                .limit(params.limit)
                .offset(params.offset)
            )
            records = (await session.scalars(query)).all()
            return [record.to_entity() for record in records], total

    async def update_category(self, category: Category) -> Category:
        statement = (
            update(CategoryRecord)
            .where(CategoryRecord.id == category.id)
            .values(
                name=category.name,
                description=category.description,
                parent_category_id=category.parent_category_id,
                updated_at=func.now(),
            )
            .returning(CategoryRecord)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("update_category") as session:
            record = (await session.execute(statement)).scalar_one_or_none()
            if record is None:
                raise CategoryNotFoundError(category.id)
            return record.to_entity()

    async def delete_category(self, category_id: int) -> None:
        statement = (
            delete(CategoryRecord)
            .where(CategoryRecord.id == category_id)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("delete_category") as session:
            result = await session.execute(statement)
            if result.rowcount == 0:
                raise CategoryNotFoundError(category_id)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def create_product(self, product: Product) -> Product:
        statement = (
            insert(ProductRecord)
            .values(**_product_values(product))
            .returning(ProductRecord)
        )
        async with self._transaction("create_product") as session:
            record = (await session.execute(statement)).scalar_one()
            return record.to_entity()

    async def get_product(self, product_id: int) -> Product:
        async with self._transaction("get_product") as session:
            record = await session.scalar(
                select(ProductRecord).where(ProductRecord.id == product_id)
            )
            if record is None:
                raise ProductNotFoundError(product_id)
            return record.to_entity()

    async def list_products(
        self, params: ListProductsParams
    ) -> tuple[list[Product], int]:
        """Find products with filtering, sorting, and pagination.

        The count and the page are read by two statements without a shared
        snapshot, so under concurrent writes the total may disagree with
        the page contents.

        Args:
            params: Filter, sort and pagination parameters.

        Returns:
            Tuple of (products, total matching count).
        """
        predicates = product_predicates(params)
        async with self._transaction("list_products") as session:
            total = await session.scalar(
                predicates.apply(select(func.count()).select_from(ProductRecord))
            )
            if not total:
                return [], 0

            query = (
                predicates.apply(select(ProductRecord))
                .order_by(product_sort_column(params), ProductRecord.id.asc())
                .limit(params.limit)
                .offset(params.offset)
            )
            records = (await session.scalars(query)).all()
            return [record.to_entity() for record in records], total

    async def update_product(self, product: Product) -> Product:
        statement = (
            update(ProductRecord)
            .where(ProductRecord.id == product.id)
            .values(**_product_values(product), updated_at=func.now())
            .returning(ProductRecord)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("update_product") as session:
            record = (await session.execute(statement)).scalar_one_or_none()
            if record is None:
                raise ProductNotFoundError(product.id)
            return record.to_entity()

    async def delete_product(self, product_id: int) -> None:
        statement = (
            delete(ProductRecord)
            .where(ProductRecord.id == product_id)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("delete_product") as session:
            result = await session.execute(statement)
            if result.rowcount == 0:
                raise ProductNotFoundError(product_id)

    async def update_stock(self, product_id: int, quantity_change: int) -> Product:
        """Adjust stock in one guarded statement.

        The quantity change and the range guard are evaluated by a single
        UPDATE, so concurrent adjustments of the same row cannot interleave
        between a read and a write. The sum is computed as BIGINT so that a
        result beyond the column range fails the guard instead of the
        statement.

        Args:
            product_id: Product to adjust.
            quantity_change: Delta to add (negative to remove stock).

        Returns:
            Updated product.

        Raises:
            ProductNotFoundError: If the product does not exist.
            InsufficientStockError: If the guard rejected the change.
        """
        new_quantity = cast(ProductRecord.stock_quantity, BigInteger) + quantity_change
        statement = (
            update(ProductRecord)
            .where(
                ProductRecord.id == product_id,
                new_quantity >= 0,
                new_quantity <= MAX_STOCK_QUANTITY,
            )
            .values(stock_quantity=new_quantity, updated_at=func.now())
            .returning(ProductRecord)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("update_stock") as session:
            record = (await session.execute(statement)).scalar_one_or_none()
            if record is not None:
                return record.to_entity()

            found = await session.scalar(
                select(exists().where(ProductRecord.id == product_id))
            )
            if not found:
                raise ProductNotFoundError(product_id)
            raise InsufficientStockError(product_id, quantity_change)

    async def get_recent_products(self, limit: int) -> list[Product]:
        if limit <= 0:
            return []
        query = (
            select(ProductRecord)
            .where(ProductRecord.is_active == True)  # noqa: E712
            .order_by(ProductRecord.created_at.desc(), ProductRecord.id.desc())
            .limit(limit)
        )
        async with self._transaction("get_recent_products") as session:
            records = (await session.scalars(query)).all()
            return [record.to_entity() for record in records]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database ping failed", error=str(e))
            return False

    async def close(self) -> None:
        """Dispose of the connection pool."""
        logger.info("Closing database connection pool")
        await self.engine.dispose()
