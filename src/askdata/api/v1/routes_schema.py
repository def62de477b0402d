"""Schema inspection endpoint."""

import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from askdata.db.introspect import fetch_schema_columns

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schema")


@router.get("/get-schema")
def get_schema() -> list[dict[str, str]]:
    """Return the live column listing of the configured database schema."""
    try:
        columns = fetch_schema_columns()
    except SQLAlchemyError as e:
        logger.error("Schema introspection failed", extra={"error": str(e)})
        raise HTTPException(status_code=500, detail="Could not read the database schema")

    return [column.to_dict() for column in columns]
