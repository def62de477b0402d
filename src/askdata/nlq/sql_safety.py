"""Deny-list safety gate for generated SQL.

This is a textual heuristic, not a parser. A keyword is matched as a whole
word anywhere in the statement, so it also catches writes hidden in a CTE or
subquery. It reports false positives on identifiers spelled exactly like a
keyword (a column named "set"), and comments or encoding tricks can evade it.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


FORBIDDEN_SQL_KEYWORDS = (
    "DELETE",
    "UPDATE",
    "INSERT",
    "DROP",
    "ALTER",
    "TRUNCATE",
    "CREATE",
    "GRANT",
    "REVOKE",
    "EXEC",
    "EXECUTE",
    "SET",
    "MERGE",
)

_FORBIDDEN_PATTERNS = tuple(
    (keyword, re.compile(rf"\b{keyword}\b")) for keyword in FORBIDDEN_SQL_KEYWORDS
)


@dataclass(frozen=True)
class SafetyVerdict:
    """Outcome of the safety gate."""

    is_safe: bool
    keyword: str | None = None


def check_query_safety(sql: str | None, correlation_id: str | None = None) -> SafetyVerdict:
    """Check a candidate statement against the deny-list.

    Args:
        sql: Extracted SQL statement
        correlation_id: Optional correlation ID for logging

    Returns:
        SafetyVerdict, with the first offending keyword when rejected
    """
    log_extra = {"correlation_id": correlation_id} if correlation_id else {}

    if not sql:
        return SafetyVerdict(is_safe=False)

    sql_upper = sql.upper()
    for keyword, pattern in _FORBIDDEN_PATTERNS:
        if pattern.search(sql_upper):
            logger.warning(
                f"Forbidden keyword {keyword} detected in query",
                extra={**log_extra, "keyword": keyword},
            )
            return SafetyVerdict(is_safe=False, keyword=keyword)

    return SafetyVerdict(is_safe=True)
