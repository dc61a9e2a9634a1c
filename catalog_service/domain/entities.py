"""Catalog entities.

Plain data holders for the two persisted entity types. Identifiers and
timestamps are assigned by the store; optional fields are ``None`` when
absent.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from catalog_service.domain.exceptions import ValidationFailedError

# Value ranges of the persisted columns
MAX_ID = 2**63 - 1
MAX_STOCK_QUANTITY = 2**31 - 1
PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2


@dataclass
class Category:
    """A product category.

    Attributes:
        id: Store-assigned identifier (0 before insert).
        name: Unique category name.
        description: Optional free text.
        parent_category_id: Optional parent category reference.
        created_at: Creation timestamp (store-assigned).
        updated_at: Last update timestamp (store-assigned).
    """

    name: str
    description: str | None = None
    parent_category_id: int | None = None
    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def check_parent(self) -> None:
        """Reject a category that names itself as its parent.

        Raises:
            ValidationFailedError: If ``parent_category_id`` equals ``id``.
        """
        if self.id and self.parent_category_id == self.id:
            raise ValidationFailedError(
                "Category cannot be its own parent",
                details={"field": "parent_category_id"},
            )


@dataclass
class Product:
    """A catalog product.

    Attributes:
        id: Store-assigned identifier (0 before insert).
        name: Product name.
        sku: Unique stock keeping unit.
        price: Non-negative unit price.
        stock_quantity: Non-negative quantity on hand.
        description: Optional free text.
        category_id: Optional category reference.
        image_url: Optional image URL.
        is_active: Whether the product is offered.
        attributes: Opaque JSON document, ``None`` when absent.
        created_at: Creation timestamp (store-assigned).
        updated_at: Last update timestamp (store-assigned).
    """

    name: str
    sku: str
    price: Decimal
    stock_quantity: int
    description: str | None = None
    category_id: int | None = None
    image_url: str | None = None
    is_active: bool = True
    attributes: Any = None
    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
