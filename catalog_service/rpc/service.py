"""Catalog RPC service.

Transport-independent implementation of ``catalog.v1.ProductCatalogService``
for other services: entity lookups, internal listings with token
pagination, batch stock updates and availability checks. The gRPC adapter
in ``catalog_service.rpc.server`` only encodes and decodes messages.
"""

from dataclasses import dataclass

import grpc
import structlog

from catalog_service.catalog import (
    CatalogStore,
    ListCategoriesParams,
    ListProductsParams,
)
from catalog_service.domain import (
    MAX_ID,
    MAX_STOCK_QUANTITY,
    Category,
    DomainError,
    Product,
)
from catalog_service.infrastructure.config import Settings
from catalog_service.rpc.errors import RpcError, invalid_argument, map_domain_error
from catalog_service.rpc.schemas import (
    CategoryMessage,
    CheckProductsAvailabilityRequest,
    CheckProductsAvailabilityResponse,
    GetCategoryDetailsRequest,
    GetCategoryDetailsResponse,
    GetProductDetailsRequest,
    GetProductDetailsResponse,
    ListCategoriesInternalRequest,
    ListCategoriesInternalResponse,
    ListProductsInternalRequest,
    ListProductsInternalResponse,
    PageInfoRequest,
    PageInfoResponse,
    ProductAvailabilityStatus,
    ProductMessage,
    UpdateStockRequest,
    UpdateStockResponse,
)

logger = structlog.get_logger()

REASON_NOT_FOUND = "Product not found."
REASON_INACTIVE = "Product is not active."
REASON_INSUFFICIENT_STOCK = "Insufficient stock."


class AttributeConversionError(ValueError):
    """Stored attributes are not a key-value document."""


def valid_id(value: int) -> bool:
    """Whether ``value`` is a positive identifier within the BIGINT range."""
    return 0 < value <= MAX_ID


def filter_id(value: int, field: str) -> int | None:
    """Optional identifier filter; zero or less means no filter.

    Raises:
        RpcError: ``INVALID_ARGUMENT`` when the value exceeds the BIGINT
            range.
    """
    if value <= 0:
        return None
    if value > MAX_ID:
        raise invalid_argument(f"{field} is out of range: {value}")
    return value


# ============================================================================
# Converters
# ============================================================================


def category_message(category: Category) -> CategoryMessage:
    return CategoryMessage(
        id=category.id,
        name=category.name,
        description=category.description,
        parent_category_id=category.parent_category_id,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def product_message(product: Product) -> ProductMessage:
    """Convert a product entity to its RPC message.

    Raises:
        AttributeConversionError: If the stored attributes are not a JSON
            object.
    """
    attributes = product.attributes
    if attributes is not None and not isinstance(attributes, dict):
        raise AttributeConversionError(
            f"attributes of product {product.id} are {type(attributes).__name__}, "
            "expected an object"
        )

    return ProductMessage(
        id=product.id,
        name=product.name,
        description=product.description,
        sku=product.sku,
        price=float(product.price),
        stock_quantity=product.stock_quantity,
        category_id=product.category_id,
        image_url=product.image_url,
        is_active=product.is_active,
        attributes=attributes,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


# ============================================================================
# Pagination
# ============================================================================


@dataclass
class PageWindow:
    """Resolved limit/offset of a token-paginated call."""

    limit: int
    offset: int

    def page_info(self, returned: int, total: int) -> PageInfoResponse:
        """Build response metadata; a token is emitted only if more remain."""
        next_offset = self.offset + returned
        token = str(next_offset) if next_offset < total else ""
        return PageInfoResponse(next_page_token=token, total_size=total)


def resolve_page(page_info: PageInfoRequest, settings: Settings) -> PageWindow:
    """Turn a page request into limit and offset.

    Non-positive sizes get the default and large sizes are clamped. The
    token is the offset as plain decimal digits; anything else (signs,
    spaces, separators, values beyond 64 bits) starts from the beginning.
    """
    limit = page_info.page_size
    if limit <= 0:
        limit = settings.default_page_size
    limit = min(limit, settings.max_page_size)

    offset = 0
    token = page_info.page_token
    if token:
        if token.isascii() and token.isdigit() and int(token) <= MAX_ID:
            offset = int(token)
        else:
            logger.warning(
                "Could not parse page token, defaulting to offset 0",
                page_token=token,
            )

    return PageWindow(limit=limit, offset=offset)


# ============================================================================
# Batch outcomes
# ============================================================================


@dataclass
class StockUpdateOutcome:
    """Result of one item of a batch stock update."""

    product_id: int
    product: ProductMessage | None = None
    error: RpcError | None = None


def aggregate_stock_outcomes(outcomes: list[StockUpdateOutcome]) -> UpdateStockResponse:
    """Derive the batch result from per-item outcomes.

    Returns:
        Response with every updated product when no item failed.

    Raises:
        RpcError: The first item error. It carries the partial response
            when at least one item succeeded.
    """
    updated = [o.product for o in outcomes if o.product is not None]
    errors = [o.error for o in outcomes if o.error is not None]
    response = UpdateStockResponse(updated_products=updated)

    if not errors:
        return response

    first = errors[0]
    if updated:
        raise RpcError(first.code, first.message, partial_response=response)
    raise first


# ============================================================================
# Service
# ============================================================================


class CatalogRpcService:
    """Product catalog RPC service.

    Example usage:
        service = CatalogRpcService(store, settings)
        response = await service.get_product_details(
            GetProductDetailsRequest(product_id=42)
        )
    """

    def __init__(self, store: CatalogStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    async def get_category_details(
        self, request: GetCategoryDetailsRequest
    ) -> GetCategoryDetailsResponse:
        category_id = request.category_id
        logger.info("GetCategoryDetails", category_id=category_id)
        if not valid_id(category_id):
            raise invalid_argument("Category ID must be a positive integer")

        try:
            category = await self._store.get_category(category_id)
        except DomainError as e:
            raise map_domain_error(e, "Category", category_id) from e
        return GetCategoryDetailsResponse(category=category_message(category))

    async def list_categories_internal(
        self, request: ListCategoriesInternalRequest
    ) -> ListCategoriesInternalResponse:
        window = resolve_page(request.page_info, self._settings)
        params = ListCategoriesParams(
            limit=window.limit,
            offset=window.offset,
            parent_category_id=filter_id(request.parent_category_id, "parent_category_id"),
        )
        logger.info(
            "ListCategoriesInternal",
            limit=window.limit,
            offset=window.offset,
            parent_category_id=params.parent_category_id,
        )

        try:
            categories, total = await self._store.list_categories(params)
        except DomainError as e:
            raise map_domain_error(e, "Category", "list") from e

        messages = [category_message(c) for c in categories]
        return ListCategoriesInternalResponse(
            categories=messages,
            page_info=window.page_info(len(messages), total),
        )

    async def get_product_details(
        self, request: GetProductDetailsRequest
    ) -> GetProductDetailsResponse:
        product_id = request.product_id
        logger.info("GetProductDetails", product_id=product_id)
        if not valid_id(product_id):
            raise invalid_argument("Product ID must be a positive integer")

        try:
            product = await self._store.get_product(product_id)
        except DomainError as e:
            raise map_domain_error(e, "Product", product_id) from e

        try:
            message = product_message(product)
        except AttributeConversionError as e:
            logger.error("Failed to convert product", product_id=product_id, error=str(e))
            raise RpcError(
                grpc.StatusCode.INTERNAL,
                f"Failed to process product data for ID {product_id}",
            ) from e
        return GetProductDetailsResponse(product=message)

    async def list_products_internal(
        self, request: ListProductsInternalRequest
    ) -> ListProductsInternalResponse:
        """List products for other services.

        Products whose attributes cannot be converted are left out of the
        page (and logged) instead of failing the call.
        """
        window = resolve_page(request.page_info, self._settings)
        for product_id in request.product_ids:
            if not valid_id(product_id):
                raise invalid_argument(f"Invalid Product ID in filter: {product_id}")
        params = ListProductsParams(
            limit=window.limit,
            offset=window.offset,
            category_id=filter_id(request.category_id, "category_id"),
            product_ids=list(request.product_ids),
            is_active=None if request.include_inactive else True,
        )
        logger.info(
            "ListProductsInternal",
            limit=window.limit,
            offset=window.offset,
            category_id=params.category_id,
            product_ids=params.product_ids,
            include_inactive=request.include_inactive,
        )

        try:
            products, total = await self._store.list_products(params)
        except DomainError as e:
            raise map_domain_error(e, "Product", "list") from e

        messages = []
        for product in products:
            try:
                messages.append(product_message(product))
            except AttributeConversionError as e:
                logger.error(
                    "Skipping product that failed conversion",
                    product_id=product.id,
                    error=str(e),
                )

        return ListProductsInternalResponse(
            products=messages,
            page_info=window.page_info(len(messages), total),
        )

    async def update_stock(self, request: UpdateStockRequest) -> UpdateStockResponse:
        """Apply a batch of stock adjustments.

        Items are applied one by one, each in its own transaction. The batch
        is not atomic: when an item fails, adjustments already applied for
        earlier items stay committed and later items are still attempted.

        Raises:
            RpcError: ``INVALID_ARGUMENT`` for an empty batch; otherwise the
                first item error, carrying the partial response when some
                items succeeded.
        """
        logger.info(
            "UpdateStock",
            item_count=len(request.items),
            order_id=request.order_id or None,
        )
        if not request.items:
            raise invalid_argument("No items provided for stock update")

        outcomes: list[StockUpdateOutcome] = []
        for item in request.items:
            outcome = StockUpdateOutcome(product_id=item.product_id)
            outcomes.append(outcome)

            if not valid_id(item.product_id):
                logger.warning("Invalid product ID in stock update", product_id=item.product_id)
                outcome.error = invalid_argument(
                    f"Item has invalid Product ID: {item.product_id}"
                )
                continue

            if not -MAX_STOCK_QUANTITY - 1 <= item.quantity_change <= MAX_STOCK_QUANTITY:
                outcome.error = invalid_argument(
                    f"Item Product ID {item.product_id} has out of range quantity "
                    f"change: {item.quantity_change}"
                )
                continue

            try:
                product = await self._store.update_stock(item.product_id, item.quantity_change)
            except DomainError as e:
                outcome.error = map_domain_error(e, "Product", item.product_id)
                continue

            try:
                outcome.product = product_message(product)
            except AttributeConversionError as e:
                logger.error(
                    "Failed to convert updated product",
                    product_id=product.id,
                    error=str(e),
                )
                outcome.error = RpcError(
                    grpc.StatusCode.INTERNAL,
                    f"Failed to process data for product ID {product.id}",
                )

        response = aggregate_stock_outcomes(outcomes)
        logger.info("Stock updated", updated_count=len(response.updated_products))
        return response

    async def check_products_availability(
        self, request: CheckProductsAvailabilityRequest
    ) -> CheckProductsAvailabilityResponse:
        """Report for each requested item whether it can be fulfilled.

        Raises:
            RpcError: ``INVALID_ARGUMENT`` when the request is empty or any
                item has a non-positive ID or quantity.
        """
        if not request.items:
            raise invalid_argument("No items provided for availability check")
        for item in request.items:
            if not valid_id(item.product_id):
                raise invalid_argument(
                    f"Item contains invalid Product ID: {item.product_id}"
                )
            if item.required_quantity <= 0:
                raise invalid_argument(
                    f"Item Product ID {item.product_id} has invalid required "
                    f"quantity: {item.required_quantity}"
                )

        product_ids = [item.product_id for item in request.items]
        params = ListProductsParams(
            limit=len(product_ids),
            offset=0,
            product_ids=product_ids,
            is_active=True,
        )
        try:
            products, _ = await self._store.list_products(params)
        except DomainError as e:
            logger.error("Failed to fetch products for availability check", error=e.message)
            raise RpcError(
                grpc.StatusCode.INTERNAL,
                "Error retrieving product data for availability check",
            ) from e

        found = {product.id: product for product in products}
        statuses = []
        for item in request.items:
            status = ProductAvailabilityStatus(product_id=item.product_id)
            product = found.get(item.product_id)
            if product is None:
                status.reason_not_available = REASON_NOT_FOUND
            else:
                status.name = product.name
                status.current_price = float(product.price)
                status.available_quantity = product.stock_quantity
                if not product.is_active:
                    status.reason_not_available = REASON_INACTIVE
                elif product.stock_quantity < item.required_quantity:
                    status.reason_not_available = REASON_INSUFFICIENT_STOCK
                else:
                    status.is_available = True
            statuses.append(status)

        logger.info("Availability checked", item_count=len(statuses))
        return CheckProductsAvailabilityResponse(statuses=statuses)
