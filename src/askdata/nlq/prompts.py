"""Prompt builders for the two model calls of a question.

The query prompt asks for a single read-only PostgreSQL statement; the
explanation prompt turns the fetched rows back into a plain answer.
"""

import json
from typing import Any

from askdata.core.config import settings
from askdata.nlq.errors import SchemaUnavailableError
from askdata.nlq.schema_context import NO_SCHEMA_SENTINEL

TRUNCATION_MARKER = "\n... (results truncated)"


def build_query_prompt(user_question: str, formatted_schema: str) -> str:
    """Build the SQL generation prompt.

    Args:
        user_question: Natural language question from user
        formatted_schema: Output of format_schema_for_prompt

    Returns:
        Prompt text for the model

    Raises:
        ValueError: If the question is empty
        SchemaUnavailableError: If no schema is loaded
    """
    if not user_question or not user_question.strip():
        raise ValueError("Question must not be empty")

    if not formatted_schema or formatted_schema == NO_SCHEMA_SENTINEL:
        raise SchemaUnavailableError(
            "Database schema was not loaded successfully, cannot generate a query"
        )

    return f"""You are an expert SQL assistant. Your task is to write a robust and complete SQL query that answers the user's question using the database schema below. Aim for the most useful and complete answer the data allows.
Database: PostgreSQL

Database Schema:
---
{formatted_schema}
---

User Question: "{user_question.strip()}"

Key Instructions:
1. Analyze the schema and the question carefully.
2. Write the MOST COMPLETE and ROBUST query that answers the question with the available tables and columns, anticipating common ambiguities in data analysis.
3. **Minimums, maximums and ties:** If the question asks for a minimum, maximum, "top N", "bottom N" or similar (e.g. "Who sold the fewest/most products?"), the query MUST return ALL rows that meet the extreme condition, including ties. Never return a single arbitrary row when several share the minimum/maximum value. For example, if several users sold the minimum quantity of 3 products and the question is "Who sold the least?", return all of those users.
4. **Aggregations:** If the question involves an aggregation (sum, average, count, minimum, maximum) over groups, make sure the query groups correctly with GROUP BY.
5. Use correct PostgreSQL syntax. Common Table Expressions (WITH) are welcome when they make complex logic clearer.
6. **IDENTIFIERS:** PostgreSQL folds unquoted identifiers to lower case. To preserve the original capitalization (e.g. "userId", "createdAt"), you MUST wrap EVERY table and column name in double quotes. For example: SELECT s."userId", s."quantity" FROM "sales" s JOIN "users" u ON s."userId" = u."id"; Simple table aliases such as s or u do not need quotes.
7. Write a single read-only statement.
8. **Return ONLY the SQL query.** No explanations, comments, introductory or closing text, and no code blocks such as ```sql ... ```. Just the plain query text.

Generated SQL Query:
"""


def serialize_results(
    rows: list[dict[str, Any]],
    max_chars: int | None = None,
) -> str:
    """Serialize query rows for the explanation prompt.

    Output longer than ``max_chars`` is cut to that length and suffixed with
    TRUNCATION_MARKER.

    Args:
        rows: Query result rows
        max_chars: Size ceiling (default: settings.NLQ_RESULTS_MAX_CHARS)

    Returns:
        Pretty-printed JSON, possibly truncated
    """
    max_chars = max_chars if max_chars is not None else settings.NLQ_RESULTS_MAX_CHARS
    serialized = json.dumps(rows, indent=2, default=str, ensure_ascii=False)

    if len(serialized) > max_chars:
        return serialized[:max_chars] + TRUNCATION_MARKER
    return serialized


def build_explanation_prompt(user_question: str, results_text: str) -> str:
    """Build the prompt that explains query results to the user.

    Args:
        user_question: The user's original question
        results_text: Output of serialize_results

    Returns:
        Prompt text for the model
    """
    return f"""Context: You are a friendly and helpful AI assistant. Your task is to explain the results of a data lookup clearly and concisely to an end user, based on their original question.
The user must NOT learn anything about SQL or databases.

User's Original Question: "{user_question.strip()}"

Results (JSON):
---
{results_text}
---

Response Instructions:
1. Analyze the Original Question and the Results.
2. Write a natural language answer that responds DIRECTLY to the Original Question using the information in the Results.
3. Be clear, concise and friendly.
4. **NEVER mention "SQL", "query", "database", "JSON", "records", "rows" or "columns".** Speak as if you simply have the requested information.
5. If the results are empty (e.g. "[]"), say kindly that no matching information was found. Example: "It looks like there is no data about [topic] right now."
6. If the question asked for a single value (e.g. "who sold the most", "the cheapest product") but the results show several tied entries, say so clearly and name every one of them. Example: "Several users are tied for the most sales: [User A] and [User B] sold [X] products each."
7. If the results were truncated (they end with "... (results truncated)"), you may mention that there are more results than shown when it matters to the question, but do not focus on the truncation itself.
8. **Reply ONLY with the final explanation for the user.** No greetings ("Hi"), no introductory phrases ("Here is the answer:"), no sign-offs. Just the explanation text.

Explanation for the User:
"""
