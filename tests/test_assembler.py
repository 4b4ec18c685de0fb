from __future__ import annotations

import pytest

from dbrestore.config import ImportSettings
from dbrestore.dump.assembler import (
    AssemblerState,
    StatementAssembler,
    delimiter_found,
    is_comment,
    iter_statements,
    sanitize,
    step,
)

DUMP = [
    "-- MySQL dump 10.13\n",
    "/*!40101 SET NAMES utf8 */;\n",
    "DROP TABLE IF EXISTS `t`;\n",
    "CREATE TABLE `t` (\n",
    "  `id` int NOT NULL\n",
    ");\n",
    "# comment\n",
    "INSERT INTO `t` VALUES (1);\n",
    "INSERT INTO `t` VALUES (2);\n",
]


def test_two_inserts_keep_separator_on_following_statement():
    lines = ["INSERT INTO t VALUES (1);\n", "INSERT INTO t VALUES (2);\n"]
    assert list(iter_statements(lines)) == [
        "INSERT INTO t VALUES (1)",
        "\nINSERT INTO t VALUES (2)",
    ]


def test_multiline_statement_and_comments():
    stmts = [s.strip() for s in iter_statements(DUMP)]
    assert stmts == [
        "DROP TABLE IF EXISTS `t`",
        "CREATE TABLE `t` (\n  `id` int NOT NULL\n)",
        "INSERT INTO `t` VALUES (1)",
        "INSERT INTO `t` VALUES (2)",
    ]


def test_comment_lines_never_reach_statements():
    stmts = "".join(iter_statements(DUMP))
    assert "MySQL dump" not in stmts
    assert "SET NAMES" not in stmts
    assert "# comment" not in stmts


def test_indented_comment_is_skipped():
    assert list(iter_statements(["  -- note;\n", "SELECT 1;\n"])) == ["SELECT 1"]


def test_delimiter_pragma_is_skipped():
    stmts = list(iter_statements(["DELIMITER ;;\n", "SELECT 1;\n"]))
    assert stmts == ["SELECT 1"]


def test_empty_delimiter_emits_every_line():
    settings = ImportSettings(delimiter="")
    lines = ["-- header\n", "SELECT 1\n", "SELECT 2\n", "SELECT 3"]
    assert list(iter_statements(lines, settings)) == ["SELECT 1", "SELECT 2", "SELECT 3"]


def test_empty_line_stops_processing():
    lines = ["SELECT 1;\n", "", "SELECT 2;\n"]
    assert list(iter_statements(lines)) == ["SELECT 1"]


def test_unterminated_tail_is_not_emitted():
    lines = ["SELECT 1;\n", "INSERT INTO t VALUES (3)\n"]
    assert list(iter_statements(lines)) == ["SELECT 1"]


def test_flush_reports_nothing_for_unterminated_buffer():
    asm = StatementAssembler()
    assert asm.feed("INSERT INTO t\n") is None
    assert asm.pending == "INSERT INTO t\n"
    assert asm.flush() is None
    assert asm.pending == ""


def test_multichar_regex_delimiter_is_literal():
    settings = ImportSettings(delimiter="$$")
    lines = ["SELECT 1$$\n", "SELECT 2 $\n", "SELECT 3$$\n"]
    stmts = [s.strip() for s in iter_statements(lines, settings)]
    assert stmts == ["SELECT 1", "SELECT 2 $\nSELECT 3"]


def test_delimiter_with_trailing_whitespace():
    assert list(iter_statements(["SELECT 1;   \t\n"])) == ["SELECT 1"]


def test_bom_stripped_only_on_first_line():
    lines = ["\ufeffSELECT 1;\n", "\ufeffSELECT 2;\n"]
    assert list(iter_statements(lines)) == ["SELECT 1", "\n\ufeffSELECT 2"]


def test_bom_on_first_line_makes_comment_visible():
    assert list(iter_statements(["\ufeff-- dump\n", "SELECT 1;\n"])) == ["SELECT 1"]


def test_sanitize():
    assert sanitize("\ufeffa\r\n", 0) == "a\n"
    assert sanitize("\ufeffa\r", 1) == "\ufeffa\n"
    assert sanitize("'C:\\\\temp'\n", 3) == "'C:temp'\n"


def test_is_comment_and_delimiter_found():
    prefixes = ImportSettings().comment_prefixes
    assert is_comment("", prefixes)
    assert is_comment("/*!40014 SET */;\n", prefixes)
    assert not is_comment("\n", prefixes)
    assert not is_comment("--no-space\n", prefixes)
    assert delimiter_found("x;\n", ";")
    assert not delimiter_found("x;y\n", ";")
    assert not delimiter_found("x;\n", "")


def test_step_is_pure():
    settings = ImportSettings()
    start = AssemblerState()
    state, stmt = step(start, "SELECT 1\n", settings)
    assert stmt is None
    assert start == AssemblerState()
    assert state == AssemblerState("SELECT 1\n", 1)
    state, stmt = step(state, "-- skip\n", settings)
    assert state == AssemblerState("SELECT 1\n", 2)
    state, stmt = step(state, ";\n", settings)
    assert stmt == "SELECT 1\n"
    assert state == AssemblerState("\n", 3)


def test_round_trip_reproduces_statements():
    first = list(iter_statements(DUMP))
    text = "".join(s + ";" for s in first)
    second = list(iter_statements(text.splitlines(keepends=True)))
    assert second == first


@pytest.mark.parametrize("n", [1, 5, 50])
def test_order_is_preserved(n):
    lines = [f"INSERT INTO t VALUES ({i});\n" for i in range(n)]
    stmts = [s.strip() for s in iter_statements(lines)]
    assert stmts == [f"INSERT INTO t VALUES ({i})" for i in range(n)]


def test_flush_keeps_discarded_tail():
    asm = StatementAssembler()
    stmts = list(iter_statements(["SELECT 1;\n", "SELECT 2\n"], assembler=asm))
    assert stmts == ["SELECT 1"]
    assert asm.discarded == "\nSELECT 2\n"
    assert asm.pending == ""


def test_flush_ignores_whitespace_tail():
    asm = StatementAssembler()
    list(iter_statements(["SELECT 1;\n"], assembler=asm))
    assert asm.discarded == ""
