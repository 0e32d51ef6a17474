"""Tests for statement splitting and CREATE EXTERNAL TABLE parsing."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st
from klaw_dbase_sql import ExternalTable, QueryError, parse_external_table, split_statements
from klaw_dbase_sql.statements import is_ddl


class TestSplitStatements:
    """Tests for split_statements()."""

    def test_single_statement(self) -> None:
        assert split_statements('SELECT 1') == ['SELECT 1']

    def test_trailing_semicolon_and_blanks(self) -> None:
        assert split_statements(' SELECT 1 ;; ;\n SELECT 2; ') == ['SELECT 1', 'SELECT 2']

    def test_empty_text(self) -> None:
        assert split_statements('') == []
        assert split_statements(' ; \n ;') == []

    def test_semicolon_in_string_literal(self) -> None:
        text = "SELECT 'a;b' AS x; SELECT 'it''s;' AS y"
        assert split_statements(text) == ["SELECT 'a;b' AS x", "SELECT 'it''s;' AS y"]

    def test_semicolon_in_quoted_identifier(self) -> None:
        assert split_statements('SELECT "a;b" FROM t') == ['SELECT "a;b" FROM t']

    def test_comments_are_dropped(self) -> None:
        text = 'SELECT 1; -- a comment; with a semicolon\nSELECT /* ; */ 2;\n-- trailing'
        assert split_statements(text) == ['SELECT 1', 'SELECT   2']

    @pytest.mark.hypothesis_property
    @given(st.lists(st.from_regex(r'SELECT [a-z0-9_]{1,10}', fullmatch=True), min_size=1, max_size=10))
    def test_join_then_split(self, statements: list[str]) -> None:
        """Statements joined by semicolons split back into the same list."""
        assert split_statements(';\n'.join(statements)) == statements


class TestParseExternalTable:
    """Tests for parse_external_table()."""

    def test_not_external_table(self) -> None:
        assert parse_external_table('SELECT * FROM t') is None
        assert parse_external_table('CREATE TABLE t AS SELECT 1') is None

    def test_minimal(self) -> None:
        table = parse_external_table("CREATE EXTERNAL TABLE t STORED AS dbase LOCATION 'x.dbf'")
        assert table == ExternalTable(name='t', file_type='DBASE', location='x.dbf')

    def test_case_insensitive_and_multiline(self) -> None:
        table = parse_external_table("create external table\n  people\n  stored as DBase\n  location 'data/p.dbf'")
        assert table is not None
        assert table.name == 'people'
        assert table.file_type == 'DBASE'
        assert table.location == 'data/p.dbf'

    def test_clause_order_and_options(self) -> None:
        table = parse_external_table(
            "CREATE UNBOUNDED EXTERNAL TABLE IF NOT EXISTS \"My Table\" LOCATION 'it''s.csv' "
            "STORED AS csv WITH HEADER ROW OPTIONS ('format.delimiter' ';', has_header true)"
        )
        assert table == ExternalTable(
            name='My Table',
            file_type='CSV',
            location="it's.csv",
            options={'format.delimiter': ';', 'has_header': 'true'},
            if_not_exists=True,
            has_header=True,
        )

    def test_missing_location(self) -> None:
        with pytest.raises(QueryError, match='LOCATION'):
            parse_external_table('CREATE EXTERNAL TABLE t STORED AS dbase')

    def test_missing_stored_as(self) -> None:
        with pytest.raises(QueryError, match='STORED AS'):
            parse_external_table("CREATE EXTERNAL TABLE t LOCATION 'x.dbf'")

    def test_unexpected_clause(self) -> None:
        with pytest.raises(QueryError, match='unexpected'):
            parse_external_table("CREATE EXTERNAL TABLE t STORED AS dbase LOCATION 'x.dbf' PARTITIONED BY (a)")

    def test_malformed_options(self) -> None:
        with pytest.raises(QueryError, match='OPTIONS'):
            parse_external_table("CREATE EXTERNAL TABLE t STORED AS dbase LOCATION 'x.dbf' OPTIONS ('encoding')")

    def test_malformed_name(self) -> None:
        with pytest.raises(QueryError, match='malformed'):
            parse_external_table("CREATE EXTERNAL TABLE 1t STORED AS dbase LOCATION 'x.dbf'")


@pytest.mark.parametrize(
    ('statement', 'expected'),
    [
        ('CREATE TABLE t AS SELECT 1', True),
        ('drop table t', True),
        ('TRUNCATE TABLE t', True),
        ('SELECT * FROM created', False),
        ('SHOW TABLES', False),
    ],
)
def test_is_ddl(statement: str, expected: bool) -> None:
    assert is_ddl(statement) is expected
