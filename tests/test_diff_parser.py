"""Tests for the unified diff tokenizer and segment splitter."""

import pytest

from diff_auditor.models import DiffTokenKind
from diff_auditor.utils.diff_parser import (
    header_paths,
    parse_diff,
    parse_header_paths,
    split_lines,
    tokenize_diff,
    unquote_path,
)


# ---------------------------------------------------------------------------
# split_lines
# ---------------------------------------------------------------------------

def test_split_lines_keeps_terminators():
    assert split_lines("a\nb\n") == ["a\n", "b\n"]


def test_split_lines_without_trailing_newline():
    assert split_lines("a\nb") == ["a\n", "b"]


def test_split_lines_does_not_break_on_carriage_return():
    text = "+line with\rcarriage return\n+next\n"
    lines = split_lines(text)
    assert len(lines) == 2
    assert "".join(lines) == text


def test_split_lines_empty():
    assert split_lines("") == []


# ---------------------------------------------------------------------------
# parse_header_paths
# ---------------------------------------------------------------------------

class TestParseHeaderPaths:
    def test_plain_header(self):
        assert parse_header_paths("diff --git a/src/app.ts b/src/app.ts\n") == ("src/app.ts", "src/app.ts")

    def test_rename_header(self):
        assert parse_header_paths("diff --git a/old/name.ts b/new/name.ts") == ("old/name.ts", "new/name.ts")

    def test_path_containing_b_slash(self):
        line = "diff --git a/my b/file.txt b/my b/file.txt\n"
        assert parse_header_paths(line) == ("my b/file.txt", "my b/file.txt")

    def test_quoted_header(self):
        line = 'diff --git "a/with space.txt" "b/with space.txt"\n'
        assert parse_header_paths(line) == ("with space.txt", "with space.txt")

    def test_octal_escaped_header_decodes_utf8(self):
        line = 'diff --git "a/\\346\\227\\245\\346\\234\\254.txt" "b/\\346\\227\\245\\346\\234\\254.txt"\n'
        assert parse_header_paths(line) == ("日本.txt", "日本.txt")

    def test_c_escapes_in_quoted_header(self):
        line = 'diff --git "a/tab\\there" "b/say \\"hi\\"\\\\x"\n'
        assert parse_header_paths(line) == ("tab\there", 'say "hi"\\x')

    def test_only_one_side_quoted(self):
        assert parse_header_paths('diff --git "a/tab\\tname" b/plain.txt') == ("tab\tname", "plain.txt")
        assert parse_header_paths('diff --git a/plain.txt "b/tab\\tname"') == ("plain.txt", "tab\tname")

    def test_unquoted_non_ascii_header(self):
        assert parse_header_paths("diff --git a/日本.txt b/日本.txt") == ("日本.txt", "日本.txt")

    def test_crlf_terminator(self):
        assert parse_header_paths("diff --git a/x.txt b/x.txt\r\n") == ("x.txt", "x.txt")

    @pytest.mark.parametrize("line", [
        "+diff --git a/x.txt b/x.txt",
        "--- a/x.txt",
        "+++ b/x.txt",
        "diff --git",
        "diff --git x.txt y.txt",
        "",
    ])
    def test_non_header_lines(self, line):
        assert parse_header_paths(line) is None


# ---------------------------------------------------------------------------
# tokenize_diff / parse_diff
# ---------------------------------------------------------------------------

class TestTokenizeDiff:
    def test_token_kinds(self):
        tokens = list(tokenize_diff("diff --git a/x.txt b/x.txt\n+hello\n"))
        assert [t.kind for t in tokens] == [DiffTokenKind.HEADER, DiffTokenKind.LINE]
        assert tokens[0].old_path == "x.txt"
        assert tokens[0].new_path == "x.txt"
        assert tokens[1].new_path is None

    def test_added_line_that_looks_like_header_is_a_line(self):
        tokens = list(tokenize_diff("diff --git a/x.txt b/x.txt\n+diff --git a/y b/y\n"))
        assert tokens[1].kind == DiffTokenKind.LINE


class TestParseDiff:
    def test_single_segment_without_trailing_newline(self):
        doc = parse_diff("diff --git a/x.txt b/x.txt\n+hello")
        assert doc.paths == ["x.txt"]
        assert doc.segments[0].text == "diff --git a/x.txt b/x.txt\n+hello"

    def test_segments_in_order(self, make_diff):
        text = make_diff(["b.ts", "a.ts", "c.ts"])
        doc = parse_diff(text)
        assert doc.paths == ["b.ts", "a.ts", "c.ts"]

    def test_concatenation_reconstructs_input(self, make_diff):
        text = make_diff(["a.ts", "b.ts"])
        doc = parse_diff(text)
        assert "".join(segment.text for segment in doc.segments) == text
        assert doc.text == text

    def test_preamble_is_preserved(self, make_segment):
        text = "warning: something\n" + make_segment("a.ts")
        doc = parse_diff(text)
        assert doc.preamble == "warning: something\n"
        assert doc.paths == ["a.ts"]
        assert doc.text == text

    def test_no_headers(self):
        doc = parse_diff("just some text\n")
        assert doc.segments == []
        assert doc.text == "just some text\n"

    def test_empty(self):
        doc = parse_diff("")
        assert doc.segments == []
        assert doc.text == ""

    def test_rename_segment_uses_new_path(self):
        text = (
            "diff --git a/old.ts b/new.ts\n"
            "similarity index 100%\n"
            "rename from old.ts\n"
            "rename to new.ts\n"
        )
        segment = parse_diff(text).segments[0]
        assert segment.path == "new.ts"
        assert segment.old_path == "old.ts"
        assert segment.is_rename is True


def test_header_paths(make_diff):
    assert header_paths(make_diff(["a.ts", "lib/b.ts"])) == ["a.ts", "lib/b.ts"]
    assert header_paths("") == []


def test_unquote_path():
    assert unquote_path("plain.txt") == "plain.txt"
    assert unquote_path('"a/\\303\\251t\\303\\251.md"') == "a/été.md"
    assert unquote_path('"a/back\\\\slash"') == "a/back\\slash"
