"""Product API endpoints.

Provides CRUD, search and recommendation endpoints for products.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from catalog_service.api.deps import (
    PaginationDep,
    ProductFilters,
    StoreDep,
    get_product_filters,
    get_recommendation_limit,
    parse_entity_id,
)
from catalog_service.api.errors import raise_domain_error
from catalog_service.api.schemas import (
    ErrorResponse,
    PaginationInfo,
    ProductListResponse,
    ProductResponse,
    ProductWriteRequest,
)
from catalog_service.catalog import ListProductsParams
from catalog_service.domain import DomainError

router = APIRouter(prefix="/products", tags=["Products"])

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERRORS, 409: {"model": ErrorResponse}},
    summary="Create product",
)
async def create_product(body: ProductWriteRequest, store: StoreDep) -> ProductResponse:
    """Create a product.

    Returns 409 when the SKU is taken and 400 when the category does not
    exist.
    """
    try:
        created = await store.create_product(body.to_entity())
    except DomainError as e:
        raise_domain_error(e, "Failed to create product")
    return ProductResponse.from_entity(created)


@router.get(
    "",
    response_model=ProductListResponse,
    responses=_ERRORS,
    summary="Search products",
    description="Filter, sort and paginate products.",
)
async def list_products(
    store: StoreDep,
    pagination: PaginationDep,
    filters: Annotated[ProductFilters, Depends(get_product_filters)],
) -> ProductListResponse:
    """List products.

    Args:
        store: Catalog store.
        pagination: Normalized page and limit.
        filters: Validated filters and sort options.

    Returns:
        One page of products with pagination metadata.
    """
    params = ListProductsParams(
        limit=pagination.limit,
        offset=pagination.offset,
        search=filters.search,
        category_id=filters.category_id,
        min_price=filters.min_price,
        max_price=filters.max_price,
        is_active=filters.is_active,
        sort_by=filters.sort_by,
        sort_order=filters.sort_order,
    )
    try:
        products, total = await store.list_products(params)
    except DomainError as e:
        raise_domain_error(e, "Failed to retrieve products")

    return ProductListResponse(
        data=[ProductResponse.from_entity(p) for p in products],
        pagination=PaginationInfo.build(pagination.page, pagination.limit, total),
    )


# Registered before /{product_id} so "recommendations" is not read as an ID
@router.get(
    "/recommendations",
    response_model=list[ProductResponse],
    responses={500: {"model": ErrorResponse}},
    summary="Product recommendations",
    description="Most recently added active products.",
)
async def get_recommendations(
    store: StoreDep,
    limit: Annotated[int, Depends(get_recommendation_limit)],
) -> list[ProductResponse]:
    """Return recommended products (newest active products first)."""
    try:
        products = await store.get_recent_products(limit)
    except DomainError as e:
        raise_domain_error(e, "Failed to fetch product recommendations")
    return [ProductResponse.from_entity(p) for p in products]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(product_id: str, store: StoreDep) -> ProductResponse:
    """Get a product by ID."""
    pid = parse_entity_id(product_id, "product")
    try:
        product = await store.get_product(pid)
    except DomainError as e:
        raise_domain_error(e, "Failed to retrieve product")
    return ProductResponse.from_entity(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Update product",
)
async def update_product(
    product_id: str,
    body: ProductWriteRequest,
    store: StoreDep,
) -> ProductResponse:
    """Replace every mutable field of a product.

    Omitting ``is_active`` re-activates the product; omitting
    ``attributes`` clears them.
    """
    pid = parse_entity_id(product_id, "product")
    try:
        updated = await store.update_product(body.to_entity(pid))
    except DomainError as e:
        raise_domain_error(e, "Failed to update product")
    return ProductResponse.from_entity(updated)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(product_id: str, store: StoreDep) -> Response:
    """Delete a product."""
    pid = parse_entity_id(product_id, "product")
    try:
        await store.delete_product(pid)
    except DomainError as e:
        raise_domain_error(e, "Failed to delete product")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
