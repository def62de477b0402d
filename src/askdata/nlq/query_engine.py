"""Query execution engine for NLQ.

Executes validated SQL against the relational store and returns rows as
ordered column-name mappings.
"""

import logging
import time
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from askdata.db.session import get_engine
from askdata.nlq.errors import QueryExecutionError

logger = logging.getLogger(__name__)

EXECUTION_FAILED_MESSAGE = "Error executing the query against the database."


def run_readonly_query(
    sql: str,
    engine: Engine | None = None,
    correlation_id: str | None = None,
) -> list[dict[str, Any]]:
    """Execute a validated SQL query.

    The statement is handed to the driver as-is, without bind parameter
    parsing, so casts and literal colons survive.

    Args:
        sql: Query accepted by the safety gate
        engine: Engine to run on (default: shared engine)
        correlation_id: Optional correlation ID for logging

    Returns:
        List of result rows as dictionaries, column order preserved

    Raises:
        QueryExecutionError: If execution fails, with a generic message
    """
    log_extra = {"correlation_id": correlation_id} if correlation_id else {}

    logger.info("Executing generated query", extra={**log_extra, "sql": sql})

    start_time = time.time()

    try:
        engine = engine or get_engine()
        with engine.connect() as conn:
            result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
            rows = [dict(row._mapping) for row in result] if result.returns_rows else []

    except SQLAlchemyError as e:
        logger.error(
            "Database query execution failed",
            extra={
                **log_extra,
                "sql": sql,
                "error": str(e),
                "execution_time_seconds": round(time.time() - start_time, 2),
            },
        )
        raise QueryExecutionError(EXECUTION_FAILED_MESSAGE) from e

    except Exception as e:
        logger.error(
            "Unexpected error executing query",
            extra={
                **log_extra,
                "sql": sql,
                "error": str(e),
                "execution_time_seconds": round(time.time() - start_time, 2),
            },
            exc_info=True,
        )
        raise QueryExecutionError(EXECUTION_FAILED_MESSAGE) from e

    logger.info(
        f"Successfully retrieved {len(rows)} rows",
        extra={**log_extra, "execution_time_seconds": round(time.time() - start_time, 2)},
    )
    return rows
