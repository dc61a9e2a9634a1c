"""gRPC transport for the catalog RPC service.

Methods are registered through a generic handler on raw bytes, so that
undecodable requests can be answered with ``INVALID_ARGUMENT``. The bytes
are the protobuf messages of ``protos/catalog.proto``; ``codec`` converts
them to and from the pydantic messages the service works with. The
standard ``grpc.health.v1.Health`` service is registered next to the
catalog service.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import grpc
import structlog
from google.protobuf.message import DecodeError
from grpc_health.v1 import health, health_pb2, health_pb2_grpc
from pydantic import BaseModel, ValidationError

from catalog_service.infrastructure.config import Settings
from catalog_service.rpc import schemas
from catalog_service.rpc.codec import (
    decode_message,
    encode_message,
    request_pb_type,
    response_pb_type,
)
from catalog_service.rpc.errors import RpcError
from catalog_service.rpc.service import CatalogRpcService

logger = structlog.get_logger()

SERVICE_NAME = "catalog.v1.ProductCatalogService"
PARTIAL_RESPONSE_KEY = "partial-response-bin"


def _unary_handler(
    method_name: str,
    method: Callable[[Any], Awaitable[BaseModel]],
    request_type: type[BaseModel],
) -> grpc.RpcMethodHandler:
    """Wrap a service method as a unary-unary handler on raw bytes.

    Args:
        method_name: RPC method name; also names the protobuf request and
            response messages.
        method: Bound service coroutine.
        request_type: Pydantic message the request decodes to.

    Returns:
        Method handler without (de)serializers; the wrapper does the
        protobuf work itself.
    """
    request_pb = request_pb_type(method_name)
    response_pb = response_pb_type(method_name)

    async def handler(request_bytes: bytes, context: grpc.aio.ServicerContext) -> bytes:
        try:
            request = decode_message(request_pb.FromString(request_bytes), request_type)
        except (DecodeError, ValidationError) as e:
            logger.warning("Malformed RPC request", method=method_name, error=str(e))
            await context.abort(
                grpc.StatusCode.INVALID_ARGUMENT,
                f"Malformed {request_pb.DESCRIPTOR.name}",
            )

        failure: RpcError | None = None
        try:
            response = await method(request)
        except RpcError as e:
            failure = e
        except Exception:
            logger.exception("Unhandled exception in RPC handler", method=method_name)
            failure = RpcError(grpc.StatusCode.INTERNAL, "Internal server error")

        if failure is not None:
            logger.info(
                "RPC failed",
                method=method_name,
                code=failure.code.name,
                message=failure.message,
                partial=failure.partial_response is not None,
            )
            trailing_metadata: tuple[tuple[str, bytes], ...] = ()
            if failure.partial_response is not None:
                partial = encode_message(failure.partial_response, response_pb)
                trailing_metadata = ((PARTIAL_RESPONSE_KEY, partial.SerializeToString()),)
            await context.abort(failure.code, failure.message, trailing_metadata)

        return encode_message(response, response_pb).SerializeToString()

    return grpc.unary_unary_rpc_method_handler(handler)


def catalog_generic_handler(service: CatalogRpcService) -> grpc.GenericRpcHandler:
    """Build the generic handler routing every catalog method."""
    methods = {
        "GetCategoryDetails": (
            service.get_category_details,
            schemas.GetCategoryDetailsRequest,
        ),
        "ListCategoriesInternal": (
            service.list_categories_internal,
            schemas.ListCategoriesInternalRequest,
        ),
        "GetProductDetails": (
            service.get_product_details,
            schemas.GetProductDetailsRequest,
        ),
        "ListProductsInternal": (
            service.list_products_internal,
            schemas.ListProductsInternalRequest,
        ),
        "UpdateStock": (
            service.update_stock,
            schemas.UpdateStockRequest,
        ),
        "CheckProductsAvailability": (
            service.check_products_availability,
            schemas.CheckProductsAvailabilityRequest,
        ),
    }
    return grpc.method_handlers_generic_handler(
        SERVICE_NAME,
        {
            name: _unary_handler(name, method, request_type)
            for name, (method, request_type) in methods.items()
        },
    )


async def build_grpc_server(
    service: CatalogRpcService,
    settings: Settings,
    port: int | None = None,
) -> tuple[grpc.aio.Server, int]:
    """Create the gRPC server with the catalog and health services.

    Args:
        service: Catalog RPC service.
        settings: Application settings (host and port).
        port: Port override; 0 binds an ephemeral port.

    Returns:
        Tuple of (unstarted server, bound port).
    """
    server = grpc.aio.server()
    server.add_generic_rpc_handlers((catalog_generic_handler(service),))

    health_servicer = health.aio.HealthServicer()
    health_pb2_grpc.add_HealthServicer_to_server(health_servicer, server)
    for name in ("", SERVICE_NAME):
        await health_servicer.set(name, health_pb2.HealthCheckResponse.SERVING)

    bind_port = settings.grpc_port if port is None else port
    bound = server.add_insecure_port(f"{settings.grpc_host}:{bind_port}")
    logger.info("gRPC server configured", host=settings.grpc_host, port=bound)
    return server, bound
