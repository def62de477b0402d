"""Natural Language Query (NLQ) module.

This module answers plain-language questions about a PostgreSQL database by
generating a read-only SQL query with a language model, executing it, and
explaining the result.
"""

from askdata.nlq.errors import ErrorKind, NlqError
from askdata.nlq.pipeline import NlqPipeline, PipelineOutcome, PipelineStage
from askdata.nlq.schema_context import (
    format_schema_for_prompt,
    get_schema_context,
    initialize_schema_context,
    refresh_schema_context,
)
from askdata.nlq.sql_extract import extract_sql
from askdata.nlq.sql_safety import SafetyVerdict, check_query_safety

__all__ = [
    "ErrorKind",
    "NlqError",
    "NlqPipeline",
    "PipelineOutcome",
    "PipelineStage",
    "format_schema_for_prompt",
    "get_schema_context",
    "initialize_schema_context",
    "refresh_schema_context",
    "extract_sql",
    "SafetyVerdict",
    "check_query_safety",
]
