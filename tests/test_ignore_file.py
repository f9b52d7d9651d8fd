"""Tests for .auditignore parsing."""

from diff_auditor.utils.ignore_file import (
    AUDIT_IGNORE_FILE,
    load_ignore_patterns,
    parse_ignore_patterns,
)


def test_parse_skips_comments_and_blank_lines():
    content = "# generated code\n\n^dist/\n   # indented comment\n  \\.lock$  \n\t\n"
    assert parse_ignore_patterns(content) == ["^dist/", "\\.lock$"]


def test_parse_keeps_file_order():
    assert parse_ignore_patterns("b\na\nc\n") == ["b", "a", "c"]


def test_parse_hash_inside_pattern_is_not_a_comment():
    assert parse_ignore_patterns("docs/#draft\n") == ["docs/#draft"]


def test_load_missing_file_returns_none(tmp_path):
    assert load_ignore_patterns(tmp_path) is None


def test_load_empty_file_returns_empty_list(tmp_path):
    (tmp_path / AUDIT_IGNORE_FILE).write_text("# nothing yet\n", encoding="utf-8")
    assert load_ignore_patterns(tmp_path) == []


def test_load_existing_file(tmp_path):
    (tmp_path / AUDIT_IGNORE_FILE).write_text("node_modules/\n\\.min\\.js$\n", encoding="utf-8")
    assert load_ignore_patterns(str(tmp_path)) == ["node_modules/", "\\.min\\.js$"]
