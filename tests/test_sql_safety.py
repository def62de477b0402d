"""Unit tests for the SQL deny-list safety gate."""

import pytest

from askdata.nlq.sql_safety import FORBIDDEN_SQL_KEYWORDS, SafetyVerdict, check_query_safety


class TestCheckQuerySafety:
    """Tests for keyword deny-list validation."""

    def test_read_only_query_is_safe(self):
        """Test that a plain SELECT passes."""
        verdict = check_query_safety('SELECT u."name" FROM "users" u ORDER BY u."name"')

        assert verdict == SafetyVerdict(is_safe=True, keyword=None)

    def test_cte_query_is_safe(self):
        """Test that a read-only CTE passes."""
        sql = (
            'WITH totals AS (SELECT "userId", SUM("quantity") AS total FROM "sales" GROUP BY "userId") '
            "SELECT * FROM totals WHERE total = (SELECT MIN(total) FROM totals)"
        )

        assert check_query_safety(sql).is_safe is True

    @pytest.mark.parametrize("keyword", FORBIDDEN_SQL_KEYWORDS)
    def test_every_forbidden_keyword_is_rejected(self, keyword):
        """Test that each deny-list keyword is rejected and reported."""
        verdict = check_query_safety(f"{keyword} something")

        assert verdict.is_safe is False
        assert verdict.keyword == keyword

    @pytest.mark.parametrize("keyword", FORBIDDEN_SQL_KEYWORDS)
    def test_keyword_inside_subquery_in_lower_case(self, keyword):
        """Test that a keyword deep in the statement is caught regardless of case."""
        sql = f'SELECT * FROM "users" WHERE "id" IN (SELECT 1 FROM x WHERE {keyword.lower()} y)'

        verdict = check_query_safety(sql)

        assert verdict.is_safe is False
        assert verdict.keyword == keyword

    def test_update_with_set_reports_first_deny_list_match(self):
        """Test that the first keyword in deny-list order is reported."""
        verdict = check_query_safety('UPDATE "sales" SET "quantity" = 0')

        assert verdict.is_safe is False
        assert verdict.keyword == "UPDATE"

    @pytest.mark.parametrize(
        "sql",
        [
            'SELECT "status_update" FROM "orders"',
            'SELECT "createdAt" FROM "users"',
            'SELECT "name" FROM "users" OFFSET 10',
            'SELECT "dataset" FROM "t"',
            'SELECT "updated_at" FROM "t"',
        ],
    )
    def test_keywords_inside_longer_words_are_allowed(self, sql):
        """Test whole-word matching: substrings of identifiers do not trigger."""
        assert check_query_safety(sql).is_safe is True

    def test_identifier_equal_to_keyword_is_rejected(self):
        """Test the known false positive on an identifier named like a keyword."""
        verdict = check_query_safety('SELECT "set" FROM "preferences"')

        assert verdict.is_safe is False
        assert verdict.keyword == "SET"

    @pytest.mark.parametrize("sql", ["", None])
    def test_empty_query_is_unsafe(self, sql):
        """Test that an empty candidate is never accepted."""
        assert check_query_safety(sql).is_safe is False
