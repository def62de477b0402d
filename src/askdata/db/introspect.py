"""Startup schema introspection for the relational store."""

import logging
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.engine import Engine

from askdata.core.config import settings
from askdata.db.session import get_engine

logger = logging.getLogger(__name__)


SCHEMA_COLUMNS_QUERY = """
SELECT table_name, column_name, data_type
FROM information_schema.columns
WHERE table_schema = :schema
ORDER BY table_name, ordinal_position
"""


@dataclass(frozen=True)
class SchemaColumnInfo:
    """One column of one table, as reported by the store."""

    table_name: str
    column_name: str
    data_type: str

    def to_dict(self) -> dict[str, str]:
        return {
            "table_name": self.table_name,
            "column_name": self.column_name,
            "data_type": self.data_type,
        }


def fetch_schema_columns(
    engine: Engine | None = None,
    schema: str | None = None,
) -> list[SchemaColumnInfo]:
    """Enumerate (table, column, data_type) triples for a schema.

    Args:
        engine: Engine to query (default: shared engine)
        schema: Schema name (default: settings.DB_SCHEMA)

    Returns:
        Columns ordered by table name, then column position

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the store cannot be queried
    """
    engine = engine or get_engine()
    schema = schema or settings.DB_SCHEMA

    with engine.connect() as conn:
        result = conn.execute(text(SCHEMA_COLUMNS_QUERY), {"schema": schema})
        columns = [
            SchemaColumnInfo(
                table_name=row.table_name,
                column_name=row.column_name,
                data_type=row.data_type,
            )
            for row in result
        ]

    logger.info(
        f"Introspected {len(columns)} columns",
        extra={"db_schema": schema},
    )
    return columns
