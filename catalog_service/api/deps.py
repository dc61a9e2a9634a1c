"""Request dependencies and query normalization.

Query parameters are accepted as raw strings and normalized here, so that
bad pagination values fall back to defaults while bad filter values fail
with ``INVALID_QUERY_PARAMETER``.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Annotated

from fastapi import Depends, Query, Request, status

from catalog_service.api.errors import INVALID_ID, INVALID_QUERY_PARAMETER, api_error
from catalog_service.catalog import PRODUCT_SORT_FIELDS, SORT_ORDERS, CatalogStore
from catalog_service.domain import MAX_ID
from catalog_service.infrastructure.config import Settings

_INTEGER = re.compile(r"[+-]?[0-9]+")
_TRUE_VALUES = {"1", "t", "true"}
_FALSE_VALUES = {"0", "f", "false"}


# ============================================================================
# Application state
# ============================================================================


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_store(request: Request) -> CatalogStore:
    """Catalog store wired at startup."""
    return request.app.state.store


SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[CatalogStore, Depends(get_store)]


# ============================================================================
# Parsing helpers
# ============================================================================


def parse_int(value: str | None) -> int | None:
    """Parse a base-10 64-bit integer.

    Returns ``None`` when the value is absent, malformed or outside the
    signed 64-bit range.
    """
    if value is None or not _INTEGER.fullmatch(value):
        return None
    parsed = int(value)
    if not -MAX_ID - 1 <= parsed <= MAX_ID:
        return None
    return parsed


def parse_entity_id(raw: str, entity: str) -> int:
    """Parse a path identifier.

    Args:
        raw: Path segment.
        entity: "category" or "product", used in the error message.

    Returns:
        Positive identifier.

    Raises:
        HTTPException: 400 ``INVALID_ID`` for non-integers and ids <= 0.
    """
    value = parse_int(raw)
    if value is None or value <= 0:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            INVALID_ID,
            f"Invalid {entity} ID format",
        )
    return value


def _invalid_query(message: str):
    return api_error(status.HTTP_400_BAD_REQUEST, INVALID_QUERY_PARAMETER, message)


def _parse_price(raw: str | None, name: str) -> Decimal | None:
    if raw is None or raw == "":
        return None
    try:
        price = Decimal(raw.strip())
    except InvalidOperation:
        raise _invalid_query(f"Invalid {name} format") from None
    if not price.is_finite() or price < 0:
        raise _invalid_query(f"Invalid {name} format")
    return price


def _parse_bool(raw: str | None, name: str) -> bool | None:
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise _invalid_query(f"Invalid {name} value: must be true or false")


# ============================================================================
# Pagination
# ============================================================================


@dataclass
class Pagination:
    """Normalized page request."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination(
    settings: SettingsDep,
    page: Annotated[str | None, Query(description="Page number (1-based)")] = None,
    limit: Annotated[str | None, Query(description="Items per page")] = None,
) -> Pagination:
    """Normalize ``page`` and ``limit``.

    Unparsable or non-positive values fall back to the defaults; limits
    above the configured maximum are clamped. A page whose offset would
    not fit a 64-bit integer is out of range and falls back to page 1.
    """
    page_size = parse_int(limit)
    if page_size is None or page_size <= 0:
        page_size = settings.default_page_size
    page_size = min(page_size, settings.max_page_size)

    page_number = parse_int(page)
    if page_number is None or page_number <= 0 or (page_number - 1) * page_size > MAX_ID:
        page_number = 1

    return Pagination(page=page_number, limit=page_size)


PaginationDep = Annotated[Pagination, Depends(get_pagination)]


# ============================================================================
# Filters
# ============================================================================


@dataclass
class ProductFilters:
    """Validated product listing filters."""

    search: str | None = None
    category_id: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    sort_by: str = ""
    sort_order: str = ""


def get_product_filters(
    q: Annotated[str | None, Query(description="Search name and description")] = None,
    category_id: Annotated[str | None, Query()] = None,
    min_price: Annotated[str | None, Query()] = None,
    max_price: Annotated[str | None, Query()] = None,
    is_active: Annotated[str | None, Query()] = None,
    sort_by: Annotated[str | None, Query(description="name, price, created_at or updated_at")] = None,
    sort_order: Annotated[str | None, Query(description="asc or desc")] = None,
) -> ProductFilters:
    """Validate product listing filters.

    Raises:
        HTTPException: 400 ``INVALID_QUERY_PARAMETER`` on any bad value.
    """
    filters = ProductFilters(search=q or None)

    if category_id:
        parsed = parse_int(category_id)
        if parsed is None or parsed <= 0:
            raise _invalid_query("Invalid category_id format")
        filters.category_id = parsed

    filters.min_price = _parse_price(min_price, "min_price")
    filters.max_price = _parse_price(max_price, "max_price")
    if (
        filters.min_price is not None
        and filters.max_price is not None
        and filters.min_price > filters.max_price
    ):
        raise _invalid_query("min_price cannot exceed max_price")

    filters.is_active = _parse_bool(is_active, "is_active")

    filters.sort_by = sort_by or ""
    if filters.sort_by and filters.sort_by not in PRODUCT_SORT_FIELDS:
        raise _invalid_query(
            f"Invalid sort_by field. Allowed: {', '.join(PRODUCT_SORT_FIELDS)}"
        )

    filters.sort_order = sort_order or ""
    if filters.sort_order and filters.sort_order.lower() not in SORT_ORDERS:
        raise _invalid_query("Invalid sort_order value. Allowed: asc, desc")

    return filters


def get_category_parent(
    parent_category_id: Annotated[str | None, Query()] = None,
) -> int | None:
    """Validate the optional parent filter of the category listing."""
    if not parent_category_id:
        return None
    parsed = parse_int(parent_category_id)
    if parsed is None or parsed <= 0:
        raise _invalid_query("Invalid parent_category_id format")
    return parsed


def get_recommendation_limit(
    settings: SettingsDep,
    limit: Annotated[str | None, Query(description="Number of products")] = None,
) -> int:
    """Normalize the recommendations limit (default and clamp)."""
    value = parse_int(limit)
    if value is None or value <= 0:
        value = settings.default_recommendations
    return min(value, settings.max_recommendations)
