"""Health check endpoint for AskData Engine."""

from fastapi import APIRouter

from askdata.core.config import settings
from askdata.nlq.schema_context import get_schema_context

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns service status, name and version, plus whether a database
    schema was loaded at startup. No external calls are made.

    Returns:
        dict: Health status response
    """
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "schema_loaded": get_schema_context().available,
    }
