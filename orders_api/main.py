"""Main entry point for the Orders API.

Sets up the FastAPI application: configuration is loaded and the order store
connected in the lifespan, then routes and error handlers are mounted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from . import __version__
from .infrastructure.api.dependencies import get_configuration_port
from .infrastructure.api.error_handlers import register_error_handlers
from .infrastructure.api.routes import router
from .infrastructure.connection_manager import ConnectionManager, set_connection_manager

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan manager.

    Opens the store handle on startup and always releases it on exit.
    """
    logger.info("Starting Orders API")
    connection_manager: ConnectionManager | None = None

    try:
        config = get_configuration_port().load_configuration()

        logger.info(f"Service configured for environment: {config.environment}")
        logger.info(f"Order id strategy: {config.order_id_strategy}")
        logger.info(f"Order codec: {config.order_codec}")

        connection_manager = ConnectionManager(config)
        await connection_manager.startup()
        set_connection_manager(connection_manager)

        logger.info("Service is ready to handle requests")
        yield

    except Exception as e:
        logger.error(f"Failed to start service: {e}")
        raise
    finally:
        logger.info("Shutting down Orders API")
        if connection_manager is not None:
            await connection_manager.shutdown()
        set_connection_manager(None)


app = FastAPI(
    title="Orders API",
    description="Order storage on Redis with a created/shipped/completed lifecycle",
    version=__version__,
    lifespan=lifespan,
)

# Register error handlers
register_error_handlers(app)

app.include_router(router)


def run() -> None:
    """Run the API with uvicorn on the configured port."""
    config = get_configuration_port().load_configuration()
    uvicorn.run(
        "orders_api.main:app",
        host="0.0.0.0",  # nosec B104
        port=config.server_port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    run()
