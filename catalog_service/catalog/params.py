"""List parameters shared by every store implementation.

Attributes that are ``None`` (or an empty id list) do not filter.
"""

from dataclasses import dataclass, field
from decimal import Decimal

# Product sort fields accepted by the store, in API spelling
PRODUCT_SORT_FIELDS = ("name", "price", "created_at", "updated_at")
DEFAULT_PRODUCT_SORT = "created_at"
SORT_ORDERS = ("asc", "desc")


@dataclass
class ListCategoriesParams:
    """Parameters for listing categories.

    Attributes:
        limit: Maximum rows to return.
        offset: Rows to skip.
        parent_category_id: Only children of this category.
    """

    limit: int = 10
    offset: int = 0
    parent_category_id: int | None = None


@dataclass
class ListProductsParams:
    """Parameters for listing products.

    Attributes:
        limit: Maximum rows to return.
        offset: Rows to skip.
        search: Case-insensitive substring matched against name or description.
        category_id: Exact category match.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        is_active: Active flag match.
        sort_by: One of ``PRODUCT_SORT_FIELDS``; anything else sorts by
            ``created_at``.
        sort_order: ``asc`` or ``desc`` (case-insensitive); anything else is
            ascending.
        product_ids: Restrict to these identifiers.
    """

    limit: int = 10
    offset: int = 0
    search: str | None = None
    category_id: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    sort_by: str = DEFAULT_PRODUCT_SORT
    sort_order: str = "asc"
    product_ids: list[int] = field(default_factory=list)

    @property
    def resolved_sort_by(self) -> str:
        """Sort field after falling back to the default."""
        sort_by = (self.sort_by or "").lower()
        return sort_by if sort_by in PRODUCT_SORT_FIELDS else DEFAULT_PRODUCT_SORT

    @property
    def descending(self) -> bool:
        """Whether the sort order is descending."""
        return (self.sort_order or "").lower() == "desc"
