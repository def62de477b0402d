"""Main application entrypoint for AskData Engine."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from askdata.api.v1 import routes_health
from askdata.api.v1.routes_nlq import router as nlq_router
from askdata.api.v1.routes_schema import router as schema_router
from askdata.core.config import settings
from askdata.core.logging import setup_logging
from askdata.nlq.schema_context import initialize_schema_context


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the schema snapshot once, before the first request is served."""
    initialize_schema_context()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(nlq_router, tags=["nlq"])
    app.include_router(schema_router, tags=["schema"])

    return app


# Export app instance for ASGI servers
app = create_app()
