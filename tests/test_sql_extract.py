"""Unit tests for SQL extraction from model responses."""

import pytest

from askdata.nlq.sql_extract import extract_sql


class TestExtractSql:
    """Tests for the ordered extraction heuristics."""

    def test_sql_fenced_block_returns_trimmed_inner_text(self):
        """Test that a ```sql block returns exactly its trimmed content."""
        raw = 'Here you go:\n```sql\n  SELECT "id" FROM "users";  \n```\nHope it helps.'

        assert extract_sql(raw) == 'SELECT "id" FROM "users";'

    def test_sql_fence_tag_is_case_insensitive(self):
        """Test that ```SQL is treated like ```sql."""
        assert extract_sql("```SQL\nSELECT 1\n```") == "SELECT 1"

    def test_sql_fence_wins_over_earlier_generic_fence(self):
        """Test that the sql-tagged block takes priority over a generic one."""
        raw = "```\nSELECT 'generic'\n```\n```sql\nSELECT 'tagged'\n```"

        assert extract_sql(raw) == "SELECT 'tagged'"

    def test_generic_fence_starting_with_select(self):
        """Test that a generic block whose content starts with select is returned."""
        raw = "```\nselect * from \"users\"\n```"

        assert extract_sql(raw) == 'select * from "users"'

    @pytest.mark.parametrize("keyword", ["SELECT", "WITH", "UPDATE", "INSERT", "DELETE"])
    def test_generic_fence_keywords(self, keyword):
        """Test every keyword accepted inside a generic fence."""
        raw = f"```\n{keyword} something\n```"

        assert extract_sql(raw) == f"{keyword} something"

    def test_generic_fence_without_sql_falls_through(self):
        """Test that a non-SQL generic block is ignored and line scan still applies."""
        raw = "```\nprint('hi')\n```\nSELECT 1"

        assert extract_sql(raw) == "SELECT 1"

    def test_raw_query_returned(self):
        """Test that plain query text is returned trimmed."""
        raw = '\n  SELECT u."name"\nFROM "users" u\n  '

        assert extract_sql(raw) == 'SELECT u."name"\nFROM "users" u'

    def test_prose_before_insert_is_dropped(self):
        """Test that introductory prose lines are skipped up to the insert line."""
        raw = "Sure, this is what you need:\nINSERT INTO \"users\" (\"name\") VALUES ('x');\n-- done"

        assert extract_sql(raw) == "INSERT INTO \"users\" (\"name\") VALUES ('x');\n-- done"

    @pytest.mark.parametrize(
        "keyword", ["select", "insert", "update", "delete", "with", "create", "alter", "drop"]
    )
    def test_raw_text_keywords(self, keyword):
        """Test every keyword accepted at the start of a line."""
        raw = f"{keyword.upper()} rest of statement"

        assert extract_sql(raw) == raw

    def test_text_without_keywords_fails(self):
        """Test that text with no recognized keyword yields None."""
        assert extract_sql("I'm sorry, I cannot answer that question.") is None

    @pytest.mark.parametrize("raw", ["", None, "   \n  "])
    def test_empty_input_fails(self, raw):
        """Test that empty responses yield None."""
        assert extract_sql(raw) is None
