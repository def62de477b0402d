"""Extraction of a SQL statement from free-form model output."""

import logging
import re

logger = logging.getLogger(__name__)

_SQL_FENCE_RE = re.compile(r"```sql\s*([\s\S]*?)\s*```", re.IGNORECASE)
_GENERIC_FENCE_RE = re.compile(r"```([\s\S]*?)```")

FENCED_SQL_PREFIXES = ("select", "with", "update", "insert", "delete")
SQL_LINE_PREFIXES = ("select", "insert", "update", "delete", "with", "create", "alter", "drop")


def extract_sql(raw_response: str | None) -> str | None:
    """Pull a SQL statement out of a model response.

    Tries, in order:
      1. a ```sql fenced block
      2. a generic fenced block whose content starts with a SQL keyword
      3. the first line starting with a SQL keyword, through the end of the text

    Prefixes are matched case-insensitively and are not word-bounded.

    Args:
        raw_response: Text returned by the model

    Returns:
        The extracted statement, or None if nothing looks like SQL
    """
    if not raw_response:
        return None

    sql_block = _SQL_FENCE_RE.search(raw_response)
    if sql_block and sql_block.group(1):
        return sql_block.group(1).strip()

    generic_block = _GENERIC_FENCE_RE.search(raw_response)
    if generic_block and generic_block.group(1):
        candidate = generic_block.group(1).strip()
        if candidate.lower().startswith(FENCED_SQL_PREFIXES):
            return candidate

    trimmed = raw_response.strip()
    lines = trimmed.split("\n")
    for index, line in enumerate(lines):
        if line.strip().lower().startswith(SQL_LINE_PREFIXES):
            if index > 0:
                logger.debug(f"Skipped {index} leading non-SQL line(s) in model response")
            return "\n".join(lines[index:]).strip()

    return None
