"""RPC message types.

Pydantic counterparts of the protobuf messages in ``protos/catalog.proto``
(``catalog.v1.ProductCatalogService``). Every field has a zero-value
default so that omitted fields behave like unset proto3 scalar fields.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Messages
# ============================================================================


class PageInfoRequest(BaseModel):
    """Page request of a list call.

    ``page_token`` is the ``next_page_token`` of the previous page.
    """

    page_size: int = 0
    page_token: str = ""


class PageInfoResponse(BaseModel):
    """Page metadata of a list response."""

    next_page_token: str = ""
    total_size: int = 0


# ============================================================================
# Entity Messages
# ============================================================================


class CategoryMessage(BaseModel):
    id: int
    name: str
    description: str | None = None
    parent_category_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductMessage(BaseModel):
    """Product as seen by other services.

    ``attributes`` is always a key-value document when present.
    """

    id: int
    name: str
    description: str | None = None
    sku: str
    price: float
    stock_quantity: int
    category_id: int | None = None
    image_url: str | None = None
    is_active: bool
    attributes: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================================================
# Category Calls
# ============================================================================


class GetCategoryDetailsRequest(BaseModel):
    category_id: int = 0


class GetCategoryDetailsResponse(BaseModel):
    category: CategoryMessage


class ListCategoriesInternalRequest(BaseModel):
    page_info: PageInfoRequest = Field(default_factory=PageInfoRequest)
    parent_category_id: int = 0


class ListCategoriesInternalResponse(BaseModel):
    categories: list[CategoryMessage] = Field(default_factory=list)
    page_info: PageInfoResponse = Field(default_factory=PageInfoResponse)


# ============================================================================
# Product Calls
# ============================================================================


class GetProductDetailsRequest(BaseModel):
    product_id: int = 0


class GetProductDetailsResponse(BaseModel):
    product: ProductMessage


class ListProductsInternalRequest(BaseModel):
    """Product listing for other services.

    Only active products are listed unless ``include_inactive`` is set.
    """

    page_info: PageInfoRequest = Field(default_factory=PageInfoRequest)
    category_id: int = 0
    product_ids: list[int] = Field(default_factory=list)
    include_inactive: bool = False


class ListProductsInternalResponse(BaseModel):
    products: list[ProductMessage] = Field(default_factory=list)
    page_info: PageInfoResponse = Field(default_factory=PageInfoResponse)


# ============================================================================
# Stock Calls
# ============================================================================


class StockUpdateItem(BaseModel):
    product_id: int = 0
    quantity_change: int = 0


class UpdateStockRequest(BaseModel):
    items: list[StockUpdateItem] = Field(default_factory=list)
    order_id: str = ""


class UpdateStockResponse(BaseModel):
    updated_products: list[ProductMessage] = Field(default_factory=list)


class AvailabilityItem(BaseModel):
    product_id: int = 0
    required_quantity: int = 0


class CheckProductsAvailabilityRequest(BaseModel):
    items: list[AvailabilityItem] = Field(default_factory=list)


class ProductAvailabilityStatus(BaseModel):
    """Availability decision for one requested product.

    ``name``, ``current_price`` and ``available_quantity`` are filled in
    whenever the product was found.
    """

    product_id: int
    is_available: bool = False
    name: str = ""
    current_price: float = 0.0
    available_quantity: int = 0
    reason_not_available: str | None = None


class CheckProductsAvailabilityResponse(BaseModel):
    statuses: list[ProductAvailabilityStatus] = Field(default_factory=list)
