"""Category API endpoints.

Provides CRUD endpoints for catalog categories.
"""

from fastapi import APIRouter, Depends, Response, status

from catalog_service.api.deps import (
    PaginationDep,
    StoreDep,
    get_category_parent,
    parse_entity_id,
)
from catalog_service.api.errors import raise_domain_error
from catalog_service.api.schemas import (
    CategoryListResponse,
    CategoryResponse,
    CategoryWriteRequest,
    ErrorResponse,
    PaginationInfo,
)
from catalog_service.catalog import ListCategoriesParams
from catalog_service.domain import DomainError

router = APIRouter(prefix="/categories", tags=["Categories"])

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERRORS, 409: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(
    body: CategoryWriteRequest,
    store: StoreDep,
) -> CategoryResponse:
    """Create a category.

    Returns 409 when the name is taken and 400 when the parent does not
    exist.
    """
    try:
        created = await store.create_category(body.to_entity())
    except DomainError as e:
        raise_domain_error(e, "Failed to create category")
    return CategoryResponse.from_entity(created)


@router.get(
    "",
    response_model=CategoryListResponse,
    responses=_ERRORS,
    summary="List categories",
)
async def list_categories(
    store: StoreDep,
    pagination: PaginationDep,
    parent_category_id: int | None = Depends(get_category_parent),
) -> CategoryListResponse:
    """List categories ordered by name."""
    params = ListCategoriesParams(
        limit=pagination.limit,
        offset=pagination.offset,
        parent_category_id=parent_category_id,
    )
    try:
        categories, total = await store.list_categories(params)
    except DomainError as e:
        raise_domain_error(e, "Failed to retrieve categories")

    return CategoryListResponse(
        data=[CategoryResponse.from_entity(c) for c in categories],
        pagination=PaginationInfo.build(pagination.page, pagination.limit, total),
    )


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
    summary="Get category",
)
async def get_category(category_id: str, store: StoreDep) -> CategoryResponse:
    """Get a category by ID."""
    cid = parse_entity_id(category_id, "category")
    try:
        category = await store.get_category(cid)
    except DomainError as e:
        raise_domain_error(e, "Failed to retrieve category")
    return CategoryResponse.from_entity(category)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Update category",
)
async def update_category(
    category_id: str,
    body: CategoryWriteRequest,
    store: StoreDep,
) -> CategoryResponse:
    """Replace name, description and parent of a category.

    A category cannot be its own parent; such requests are rejected
    without touching the store.
    """
    cid = parse_entity_id(category_id, "category")
    category = body.to_entity(cid)
    try:
        category.check_parent()
        updated = await store.update_category(category)
    except DomainError as e:
        raise_domain_error(e, "Failed to update category")
    return CategoryResponse.from_entity(updated)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
    summary="Delete category",
)
async def delete_category(category_id: str, store: StoreDep) -> Response:
    """Delete a category. Products in it keep existing without a category."""
    cid = parse_entity_id(category_id, "category")
    try:
        await store.delete_category(cid)
    except DomainError as e:
        raise_domain_error(e, "Failed to delete category")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
