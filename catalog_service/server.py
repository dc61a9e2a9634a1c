"""Process entry point.

Runs the HTTP API (uvicorn) and the gRPC server in one event loop over a
single shared store. SIGINT/SIGTERM stop the HTTP server first, then the
gRPC server within the configured grace period, then the connection pool
is released.
"""

import asyncio
import signal

import structlog
import uvicorn

from catalog_service.infrastructure.config import Settings
from catalog_service.infrastructure.logging_config import configure_logging
from catalog_service.main import create_app, create_store
from catalog_service.rpc import CatalogRpcService, build_grpc_server

logger = structlog.get_logger()


def _log_signal(sig: signal.Signals) -> None:
    logger.info("Shutdown signal received", signal=sig.name)


async def serve(settings: Settings) -> None:
    """Run both servers until a shutdown signal arrives.

    Args:
        settings: Application settings.
    """
    store = await create_store(settings)
    if not await store.ping():
        logger.error("Database is unreachable", database_url=settings.database_url.split("@")[-1])
        await store.close()
        raise SystemExit(1)

    grpc_server, grpc_port = await build_grpc_server(
        CatalogRpcService(store, settings), settings
    )

    app = create_app(settings, store)
    http_server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.http_host,
            port=settings.http_port,
            log_config=None,
            timeout_graceful_shutdown=int(settings.shutdown_grace_period),
        )
    )

    # uvicorn handles the signal while serving, then restores these handlers
    # and re-raises it; the re-raised signal must not cancel the shutdown below
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _log_signal, sig)

    await grpc_server.start()
    logger.info("gRPC server listening", port=grpc_port)
    logger.info("HTTP server listening", host=settings.http_host, port=settings.http_port)

    try:
        # Returns once uvicorn has handled a shutdown signal
        await http_server.serve()
    finally:
        logger.info("Stopping gRPC server", grace_period=settings.shutdown_grace_period)
        await grpc_server.stop(settings.shutdown_grace_period)
        await store.close()
        logger.info("Service shutdown complete")


def main() -> None:
    """Console entry point."""
    settings = Settings()
    configure_logging(settings)
    logger.info(
        "Starting product catalog service",
        service=settings.service_name,
        version=settings.api_version,
        env=settings.app_env,
    )
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
