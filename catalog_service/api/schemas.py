"""API schemas for the product catalog.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import (
    AnyUrl,
    BaseModel,
    Field,
    SerializerFunctionWrapHandler,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_serializer,
)

from catalog_service.domain import (
    MAX_ID,
    MAX_STOCK_QUANTITY,
    PRICE_DECIMAL_PLACES,
    PRICE_MAX_DIGITS,
    Category,
    Product,
)

_url_adapter = TypeAdapter(AnyUrl)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginationInfo(BaseModel):
    """Pagination metadata of a list response."""

    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    total_items: int = Field(..., description="Total number of matching items")
    total_pages: int = Field(..., description="Total number of pages")

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> "PaginationInfo":
        """Compute page count from the total."""
        total_pages = (total_items + limit - 1) // limit if total_items > 0 else 0
        return cls(page=page, limit=limit, total_items=total_items, total_pages=total_pages)


class OmitNoneModel(BaseModel):
    """Response model that leaves absent optional fields out of the JSON."""

    @model_serializer(mode="wrap")
    def _omit_none(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryWriteRequest(BaseModel):
    """Request body to create or replace a category."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique category name")
    description: str | None = Field(default=None, description="Free text description")
    parent_category_id: int | None = Field(
        default=None, gt=0, le=MAX_ID, description="Parent category identifier"
    )

    def to_entity(self, category_id: int = 0) -> Category:
        return Category(
            id=category_id,
            name=self.name,
            description=self.description,
            parent_category_id=self.parent_category_id,
        )


class CategoryResponse(OmitNoneModel):
    """Category representation."""

    id: int
    name: str
    description: str | None = None
    parent_category_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            parent_category_id=category.parent_category_id,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class CategoryListResponse(BaseModel):
    """Paginated list of categories."""

    data: list[CategoryResponse] = Field(default_factory=list)
    pagination: PaginationInfo


# ============================================================================
# Product Schemas
# ============================================================================


class ProductWriteRequest(BaseModel):
    """Request body to create or replace a product.

    ``is_active`` defaults to true when omitted. ``attributes`` is stored
    verbatim; any JSON value is accepted.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: str | None = Field(default=None, description="Free text description")
    sku: str = Field(..., min_length=1, max_length=100, description="Stock keeping unit")
    price: Decimal = Field(
        ...,
        ge=0,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        description="Unit price",
    )
    stock_quantity: int = Field(
        ..., ge=0, le=MAX_STOCK_QUANTITY, description="Quantity on hand"
    )
    category_id: int | None = Field(
        default=None, gt=0, le=MAX_ID, description="Category identifier"
    )
    image_url: str | None = Field(default=None, max_length=2048, description="Image URL")
    is_active: bool | None = Field(default=None, description="Whether the product is offered")
    attributes: Any = Field(default=None, description="Opaque attribute document")

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, value: str | None) -> str | None:
        """Reject image URLs that do not parse as absolute URLs."""
        if value is None:
            return value
        try:
            _url_adapter.validate_python(value)
        except ValidationError as e:
            raise ValueError("image_url must be a valid URL") from e
        return value

    def to_entity(self, product_id: int = 0) -> Product:
        return Product(
            id=product_id,
            name=self.name,
            description=self.description,
            sku=self.sku,
            price=self.price,
            stock_quantity=self.stock_quantity,
            category_id=self.category_id,
            image_url=self.image_url,
            is_active=True if self.is_active is None else self.is_active,
            attributes=self.attributes,
        )


class ProductResponse(OmitNoneModel):
    """Product representation."""

    id: int
    name: str
    description: str | None = None
    sku: str
    price: float
    stock_quantity: int
    category_id: int | None = None
    image_url: str | None = None
    is_active: bool
    attributes: Any = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            sku=product.sku,
            price=float(product.price),
            stock_quantity=product.stock_quantity,
            category_id=product.category_id,
            image_url=product.image_url,
            is_active=product.is_active,
            attributes=product.attributes,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(BaseModel):
    """Paginated list of products."""

    data: list[ProductResponse] = Field(default_factory=list)
    pagination: PaginationInfo
