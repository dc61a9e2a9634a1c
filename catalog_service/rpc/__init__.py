"""RPC layer module.

Contains the catalog RPC service, its message types and the gRPC server.
"""

from catalog_service.rpc.errors import RpcError
from catalog_service.rpc.server import SERVICE_NAME, build_grpc_server
from catalog_service.rpc.service import CatalogRpcService

__all__ = [
    "SERVICE_NAME",
    "CatalogRpcService",
    "RpcError",
    "build_grpc_server",
]
