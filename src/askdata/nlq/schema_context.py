"""Schema context module for NLQ.

Formats introspected column metadata into the text block embedded in the
query-generation prompt, and holds the process-wide snapshot of it.

The snapshot is loaded once at startup. A failed load leaves the empty
sentinel in place and is not retried; ``refresh_schema_context`` is the only
way to replace it, and it swaps the reference instead of mutating the old one.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from askdata.db.introspect import SchemaColumnInfo, fetch_schema_columns

logger = logging.getLogger(__name__)


NO_SCHEMA_SENTINEL = "No schema information available."


def format_schema_for_prompt(columns: Sequence[SchemaColumnInfo]) -> str:
    """Render columns grouped by table, in the order they were received.

    Args:
        columns: Column metadata rows

    Returns:
        Multi-line schema description, or NO_SCHEMA_SENTINEL for empty input
    """
    if not columns:
        return NO_SCHEMA_SENTINEL

    tables: dict[str, list[SchemaColumnInfo]] = {}
    for column in columns:
        tables.setdefault(column.table_name, []).append(column)

    lines = ["Database Schema:"]
    for table_name, table_columns in tables.items():
        lines.append(f"Table: {table_name}")
        lines.append("  Columns:")
        for column in table_columns:
            lines.append(f"    - {column.column_name}: {column.data_type}")
        lines.append("")

    return "\n".join(lines).strip() or NO_SCHEMA_SENTINEL


@dataclass(frozen=True)
class SchemaContext:
    """Immutable snapshot of the introspected schema."""

    columns: tuple[SchemaColumnInfo, ...]
    formatted: str

    @property
    def available(self) -> bool:
        return bool(self.formatted) and self.formatted != NO_SCHEMA_SENTINEL

    @classmethod
    def from_columns(cls, columns: Sequence[SchemaColumnInfo]) -> "SchemaContext":
        return cls(columns=tuple(columns), formatted=format_schema_for_prompt(columns))


EMPTY_SCHEMA_CONTEXT = SchemaContext(columns=(), formatted=NO_SCHEMA_SENTINEL)

SchemaLoader = Callable[[], Sequence[SchemaColumnInfo]]

# Module-level snapshot, written only by initialize/refresh
_schema_context: SchemaContext = EMPTY_SCHEMA_CONTEXT
_initialized = False


def initialize_schema_context(loader: SchemaLoader | None = None) -> SchemaContext:
    """Load the schema snapshot once, before traffic is served.

    Subsequent calls return the existing snapshot without reloading. A loader
    failure is logged and leaves the empty sentinel in place.

    Args:
        loader: Callable returning column metadata (default: live introspection)

    Returns:
        The active SchemaContext
    """
    global _schema_context, _initialized

    if _initialized:
        return _schema_context

    loader = loader or fetch_schema_columns
    try:
        context = SchemaContext.from_columns(loader())
    except Exception as e:
        logger.error(
            "Failed to load database schema, query generation is unavailable",
            extra={"error": str(e)},
            exc_info=True,
        )
        context = EMPTY_SCHEMA_CONTEXT

    _schema_context = context
    _initialized = True

    logger.info(
        "Schema context initialized",
        extra={
            "tables": len({c.table_name for c in context.columns}),
            "columns": len(context.columns),
            "schema_available": context.available,
        },
    )
    return context


def refresh_schema_context(loader: SchemaLoader | None = None) -> SchemaContext:
    """Explicitly reload the schema and atomically swap the snapshot.

    Unlike initialization, a loader failure propagates and the previous
    snapshot stays active.

    Args:
        loader: Callable returning column metadata (default: live introspection)

    Returns:
        The new SchemaContext
    """
    global _schema_context, _initialized

    loader = loader or fetch_schema_columns
    context = SchemaContext.from_columns(loader())
    _schema_context = context
    _initialized = True

    logger.info(
        "Schema context refreshed",
        extra={"columns": len(context.columns), "schema_available": context.available},
    )
    return context


def get_schema_context() -> SchemaContext:
    """Return the active schema snapshot."""
    return _schema_context
