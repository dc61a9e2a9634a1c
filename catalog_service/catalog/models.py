"""SQLAlchemy models for the product catalog.

Defines the ``categories`` and ``products`` tables. Constraint names are
fixed so that violations can be classified by name (see
``catalog_service.catalog.errors``).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from catalog_service.domain import (
    PRICE_DECIMAL_PLACES,
    PRICE_MAX_DIGITS,
    Category,
    Product,
)
from catalog_service.infrastructure.database import Base

# Constraint names
CATEGORY_NAME_KEY = "categories_name_key"
CATEGORY_PARENT_FKEY = "categories_parent_category_id_fkey"
PRODUCT_SKU_KEY = "products_sku_key"
PRODUCT_CATEGORY_FKEY = "products_category_id_fkey"

# SQLite only auto-increments INTEGER primary keys
Identifier = BigInteger().with_variant(Integer(), "sqlite")

# Plain JSON text elsewhere, JSONB on PostgreSQL
Document = JSON().with_variant(JSONB(), "postgresql")


class CategoryRecord(Base):
    """Row in the ``categories`` table."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_category_id: Mapped[int | None] = mapped_column(
        Identifier,
        ForeignKey("categories.id", ondelete="SET NULL", name=CATEGORY_PARENT_FKEY),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (UniqueConstraint("name", name=CATEGORY_NAME_KEY),)

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryRecord(id={self.id}, name={self.name})>"

    def to_entity(self) -> Category:
        """Convert to a domain entity."""
        return Category(
            id=self.id,
            name=self.name,
            description=self.description,
            parent_category_id=self.parent_category_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ProductRecord(Base):
    """Row in the ``products`` table.

    ``attributes`` holds an arbitrary JSON document. Absent attributes are
    stored as JSON ``null`` rather than SQL NULL and read back as ``None``.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(PRICE_MAX_DIGITS, PRICE_DECIMAL_PLACES), nullable=False
    )
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_id: Mapped[int | None] = mapped_column(
        Identifier,
        ForeignKey("categories.id", ondelete="SET NULL", name=PRODUCT_CATEGORY_FKEY),
        nullable=True,
        index=True,
    )
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    attributes: Mapped[Any] = mapped_column(Document, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (UniqueConstraint("sku", name=PRODUCT_SKU_KEY),)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductRecord(id={self.id}, sku={self.sku}, name={self.name[:30]})>"

    def to_entity(self) -> Product:
        """Convert to a domain entity."""
        return Product(
            id=self.id,
            name=self.name,
            description=self.description,
            sku=self.sku,
            price=self.price,
            stock_quantity=self.stock_quantity,
            category_id=self.category_id,
            image_url=self.image_url,
            is_active=self.is_active,
            attributes=self.attributes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
