"""RPC errors.

``RpcError`` carries a gRPC status code and, for batch calls that partly
succeeded, the partial response. Domain errors are mapped to status codes
by kind only.
"""

import grpc
import structlog
from pydantic import BaseModel

from catalog_service.domain import DomainError, ErrorKind

logger = structlog.get_logger()


class RpcError(Exception):
    """Failure of an RPC call.

    Attributes:
        code: gRPC status code sent to the caller.
        message: Status details sent to the caller.
        partial_response: Response holding the items that did succeed,
            sent alongside the status.
    """

    def __init__(
        self,
        code: grpc.StatusCode,
        message: str,
        partial_response: BaseModel | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.partial_response = partial_response


def invalid_argument(message: str) -> RpcError:
    return RpcError(grpc.StatusCode.INVALID_ARGUMENT, message)


def map_domain_error(exc: DomainError, resource: str, resource_id: object) -> RpcError:
    """Map a store error to an RPC error.

    Args:
        exc: Domain error raised by the store.
        resource: "Category" or "Product".
        resource_id: Identifier the call was about.

    Returns:
        RPC error with a public message. Internal causes are logged, never
        echoed.
    """
    logger.warning(
        "Store operation failed",
        resource=resource,
        resource_id=resource_id,
        error_kind=exc.kind.value,
        error=exc.message,
    )

    if exc.kind == ErrorKind.NOT_FOUND:
        return RpcError(
            grpc.StatusCode.NOT_FOUND, f"{resource} with ID {resource_id} not found"
        )
    if exc.kind == ErrorKind.NAME_CONFLICT:
        return RpcError(
            grpc.StatusCode.ALREADY_EXISTS,
            f"A {resource} with the given name already exists",
        )
    if exc.kind == ErrorKind.SKU_CONFLICT:
        return RpcError(
            grpc.StatusCode.ALREADY_EXISTS,
            f"A {resource} with the given SKU already exists",
        )
    if exc.kind == ErrorKind.INSUFFICIENT_STOCK:
        return RpcError(
            grpc.StatusCode.FAILED_PRECONDITION,
            f"Insufficient stock for {resource} ID {resource_id}, "
            "or operation violates constraints",
        )
    if exc.kind == ErrorKind.VALIDATION_FAILED:
        return RpcError(grpc.StatusCode.INVALID_ARGUMENT, exc.message)

    logger.error(
        "Internal store failure",
        resource=resource,
        resource_id=resource_id,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return RpcError(
        grpc.StatusCode.INTERNAL,
        f"Failed to process request for {resource} ID {resource_id}",
    )
