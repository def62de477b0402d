"""Pytest configuration and shared fixtures."""

from typing import Any

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from askdata.db.introspect import SchemaColumnInfo
from askdata.nlq import schema_context
from askdata.nlq.llm_client import LLMClient
from askdata.nlq.schema_context import EMPTY_SCHEMA_CONTEXT, refresh_schema_context

SALES_SCHEMA_COLUMNS = [
    SchemaColumnInfo("users", "id", "integer"),
    SchemaColumnInfo("users", "name", "character varying"),
    SchemaColumnInfo("sales", "id", "integer"),
    SchemaColumnInfo("sales", "userId", "integer"),
    SchemaColumnInfo("sales", "quantity", "integer"),
]


class FakeLLMClient(LLMClient):
    """LLM client that replays scripted responses and records prompts.

    A scripted response that is an exception instance is raised instead of
    returned.
    """

    provider_name = "Fake"

    def __init__(self, responses: list[Any]):
        super().__init__(model="fake-model", timeout_seconds=1)
        self.responses = list(responses)
        self.prompts: list[str] = []

    def _call_provider(self, prompt: str, log_extra: dict[str, Any]) -> Any:
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def _extract_text(self, response: Any, log_extra: dict[str, Any]) -> str | None:
        return response


@pytest.fixture(autouse=True)
def reset_schema_context(monkeypatch):
    """Start every test with no schema loaded."""
    monkeypatch.setattr(schema_context, "_schema_context", EMPTY_SCHEMA_CONTEXT)
    monkeypatch.setattr(schema_context, "_initialized", False)


@pytest.fixture
def loaded_schema():
    """Load the users/sales schema into the process-wide snapshot."""
    return refresh_schema_context(loader=lambda: SALES_SCHEMA_COLUMNS)


@pytest.fixture
def sales_engine():
    """In-memory SQLite database with users and sales.

    Ben and Cleo are tied for the fewest items sold (2 each).
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.execute(text('CREATE TABLE "users" ("id" INTEGER PRIMARY KEY, "name" VARCHAR(100))'))
        conn.execute(
            text(
                'CREATE TABLE "sales" ("id" INTEGER PRIMARY KEY, "userId" INTEGER, "quantity" INTEGER)'
            )
        )
        conn.execute(text("INSERT INTO \"users\" VALUES (1, 'Ana'), (2, 'Ben'), (3, 'Cleo')"))
        conn.execute(
            text('INSERT INTO "sales" VALUES (1, 1, 4), (2, 1, 3), (3, 2, 2), (4, 3, 1), (5, 3, 1)')
        )
    yield engine
    engine.dispose()


@pytest.fixture
def fake_llm():
    """Factory for FakeLLMClient instances with scripted responses."""
    return FakeLLMClient
