from __future__ import annotations

from src.lib.sql_statements import (
    clean_statement,
    clean_statements,
    join_scripts,
    split_statements,
)


def test_split_drops_blank_and_comment_only_statements() -> None:
    sql = "CREATE TABLE a(x);\n  ;\n# only a comment\n;-- another\n;SELECT 1;"

    assert split_statements(sql) == ["CREATE TABLE a(x)", "SELECT 1"]


def test_line_comments_are_stripped_to_end_of_line() -> None:
    sql = "CREATE TABLE a(\n  x integer, # first\n  y text -- second\n)"

    (statement,) = split_statements(sql)

    assert "#" not in statement
    assert "first" not in statement
    assert "second" not in statement
    assert "y text" in statement


def test_block_comments_hide_separators() -> None:
    sql = "/* one; two */ INSERT INTO t VALUES (1); SELECT 2"

    assert split_statements(sql) == ["INSERT INTO t VALUES (1)", "SELECT 2"]


def test_auto_increment_removed_case_insensitively() -> None:
    sql = "CREATE TABLE a(id integer auto_increment primary key, b integer AUTO_INCREMENT)"

    (statement,) = split_statements(sql)

    assert "auto_increment" not in statement.lower()
    assert "primary key" in statement


def test_auto_increment_inside_identifier_is_kept() -> None:
    (statement,) = split_statements("CREATE TABLE my_auto_increment_log(x)")

    assert "my_auto_increment_log" in statement


def test_quoted_text_is_left_untouched() -> None:
    sql = (
        "INSERT INTO t VALUES ('a;b', 'it''s # fine', \"auto_increment\", `--col`);"
        "SELECT 1"
    )

    statements = split_statements(sql)

    assert statements == [
        "INSERT INTO t VALUES ('a;b', 'it''s # fine', \"auto_increment\", `--col`)",
        "SELECT 1",
    ]


def test_unterminated_literal_runs_to_end() -> None:
    assert split_statements("SELECT 'abc; def") == ["SELECT 'abc; def"]


def test_clean_statement_keeps_separators_in_presplit_input() -> None:
    assert clean_statement("SELECT 1; # trailing") == "SELECT 1;"
    assert clean_statement("  # nothing here  ") == ""


def test_clean_statements_skips_empty_entries() -> None:
    cleaned = clean_statements(["CREATE TABLE a(id integer auto_increment)", "-- gone", ""])

    assert cleaned == ["CREATE TABLE a(id integer )"]


def test_join_scripts_inserts_separator() -> None:
    assert split_statements(join_scripts("SELECT 1", "SELECT 2")) == ["SELECT 1", "SELECT 2"]
