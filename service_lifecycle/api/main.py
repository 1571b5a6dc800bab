"""
service_lifecycle/api/main.py
FastAPI application and process entry point.

Architecture:
- create_app(): thin app creation (routes only, no lifespan hooks)
- create_service(): wires config + collaborators + listener into a ServiceLifecycle
- serve()/main(): bootstrapping glue - settings, logging, signals
"""

import asyncio
import signal
import sys
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..core.config import ServiceConfig, Settings, get_settings
from ..core.exceptions import LifecycleException
from ..core.logging import get_logger, setup_logging
from ..services.collaborators import Cache, Database
from ..services.lifecycle import ServiceLifecycle, ServiceStatus
from .listener import UvicornListener
from .routes import health, metrics, status

logger = get_logger("main")


# ============================================================================
# Create Application
# ============================================================================

def create_app(config: ServiceConfig) -> FastAPI:
    """
    Create FastAPI application exposing the status surface.

    The ServiceLifecycle is attached afterwards as app.state.lifecycle.
    """
    app = FastAPI(
        title=config.service_name,
        version=config.version,
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(status.router, prefix="/api/v1")
    app.include_router(metrics.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Service info endpoint"""
        return {
            "service": config.service_name,
            "version": config.version,
            "endpoints": {
                "health": "/health",
                "liveness": "/health/live",
                "readiness": "/health/ready",
                "status": "/api/v1/status",
                "metrics": "/metrics",
            },
        }

    return app


def create_service(
    config: ServiceConfig,
    database: Optional[Database] = None,
    cache: Optional[Cache] = None,
    logger=None,
) -> ServiceLifecycle:
    """
    Build a ServiceLifecycle whose listener serves the status app.

    Args:
        config: Immutable service configuration
        database: Optional database collaborator
        cache: Optional cache collaborator
        logger: Logger injected into the lifecycle
    """
    app = create_app(config)
    listener = UvicornListener(app, host=config.host, port=config.port, log_level=config.log_level)
    lifecycle = ServiceLifecycle(config, database, cache, listener=listener, logger=logger)
    app.state.lifecycle = lifecycle
    return lifecycle


# ============================================================================
# Process Entry Point
# ============================================================================

async def serve(
    settings: Settings,
    database: Optional[Database] = None,
    cache: Optional[Cache] = None,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    """
    Start the service, wait for SIGINT/SIGTERM (or shutdown_event), stop it.
    """
    config = settings.to_service_config()
    lifecycle = create_service(config, database, cache)
    shutdown_event = shutdown_event or asyncio.Event()

    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform / not the main thread
            pass

    try:
        await lifecycle.start()
        try:
            await shutdown_event.wait()
            logger.info("shutdown_requested")
        finally:
            if lifecycle.status is ServiceStatus.RUNNING:
                await lifecycle.stop()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main() -> int:
    """Console entry point. Returns the process exit code."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    logger.info(
        "launching_service",
        name=settings.SERVICE_NAME,
        version=settings.APP_VERSION,
        host=settings.API_HOST,
        port=settings.API_PORT,
    )

    try:
        asyncio.run(serve(settings))
    except LifecycleException as e:
        logger.error("service_exited_with_error", **e.to_dict())
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())


# ============================================================================
# Exports
# ============================================================================

__all__ = ["create_app", "create_service", "serve", "main"]
