"""
Subscriptions Service - FastAPI Application
CRUD and cost aggregation for user subscriptions
"""
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.api.errors import register_exception_handlers
from app.api.routes import health
from app.api.v1 import subscriptions
from app.config import settings
from app.database import init_db

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send application logs to stdout at the configured level."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Starting %s...", settings.app_name)
    init_db()
    logger.info("Database initialized")
    logger.info("API running on %s environment", settings.app_env)
    yield
    logger.info("Shutting down %s...", settings.app_name)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description="API for managing user subscriptions",
        version="1.0.0",
        debug=settings.app_debug,
        lifespan=lifespan,
    )

    app.include_router(health.router, prefix=settings.api_v1_prefix, tags=["Health"])
    app.include_router(
        subscriptions.router,
        prefix=f"{settings.api_v1_prefix}/subscriptions",
        tags=["Subscriptions"],
    )
    # Unversioned paths kept for existing clients.
    app.include_router(subscriptions.router, prefix="/subscriptions", include_in_schema=False)

    register_exception_handlers(app)
    return app


app = create_app()


def run() -> None:
    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_config=None)


if __name__ == "__main__":
    run()
