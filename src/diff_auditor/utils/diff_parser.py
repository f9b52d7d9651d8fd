"""Tokenizer and segment splitter for git unified diffs."""

import re
from collections.abc import Iterator

from diff_auditor.models.diff_models import (
    DiffDocument,
    DiffToken,
    DiffTokenKind,
    FileSegment,
)

HEADER_PREFIX = "diff --git "

_QUOTED = r'"(?:[^"\\]|\\.)*"'
# git quotes either side independently when it holds a tab, quote, backslash
# or (with core.quotepath on) a non-ASCII byte.
_QUOTED_PATHS_RES = [
    re.compile(rf"^(?P<old>{_QUOTED}) (?P<new>{_QUOTED})$"),
    re.compile(rf"^(?P<old>{_QUOTED}) (?P<new>b/.+)$"),
    re.compile(rf"^(?P<old>a/.+) (?P<new>{_QUOTED})$"),
]
_PLAIN_PATHS_RE = re.compile(r"^a/(?P<old>.+) b/(?P<new>.+)$")
_ESCAPE_RE = re.compile(r"\\([0-3][0-7]{2}|.)")
_C_ESCAPES = {
    "a": b"\a", "b": b"\b", "t": b"\t", "n": b"\n", "v": b"\v",
    "f": b"\f", "r": b"\r", '"': b'"', "\\": b"\\",
}


def split_lines(text: str) -> list[str]:
    """Split on "\\n" only, keeping terminators.

    Unlike str.splitlines this never breaks on a bare carriage return or
    form feed inside a hunk, so "".join(split_lines(t)) == t always holds.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def parse_header_paths(line: str) -> tuple[str, str] | None:
    """Return (old_path, new_path) for a `diff --git` header line.

    Args:
        line: A single diff line, with or without its terminator.

    Returns:
        Tuple of paths without the a/ b/ prefixes, or None if the line
        is not a file header.
    """
    stripped = line.rstrip("\r\n")
    if not stripped.startswith(HEADER_PREFIX):
        return None
    rest = stripped[len(HEADER_PREFIX):]

    if '"' in rest:
        for pattern in _QUOTED_PATHS_RES:
            quoted = pattern.match(rest)
            if quoted:
                old = _strip_prefix(unquote_path(quoted.group("old")), "a/")
                new = _strip_prefix(unquote_path(quoted.group("new")), "b/")
                if old is not None and new is not None:
                    return old, new

    # Unrenamed paths may contain " b/" themselves; when both halves are the
    # same path the split point is unambiguous.
    if rest.startswith("a/") and (len(rest) - 5) % 2 == 0:
        half = (len(rest) - 5) // 2
        old = rest[2:2 + half]
        if half > 0 and rest == f"a/{old} b/{old}":
            return old, old

    plain = _PLAIN_PATHS_RE.match(rest)
    if plain:
        return plain.group("old"), plain.group("new")
    return None


def unquote_path(token: str) -> str:
    """Decode a C-style quoted git path such as "a/\\346\\227\\245.txt".

    Unquoted tokens are returned unchanged. Octal escapes are raw bytes and
    the result is decoded as UTF-8.
    """
    if len(token) < 2 or not (token.startswith('"') and token.endswith('"')):
        return token
    body = token[1:-1]
    decoded = bytearray()
    pos = 0
    for match in _ESCAPE_RE.finditer(body):
        decoded += body[pos:match.start()].encode("utf-8")
        code = match.group(1)
        if len(code) == 3:
            decoded.append(int(code, 8))
        else:
            decoded += _C_ESCAPES.get(code, code.encode("utf-8"))
        pos = match.end()
    decoded += body[pos:].encode("utf-8")
    return decoded.decode("utf-8", errors="replace")


def _strip_prefix(path: str, prefix: str) -> str | None:
    return path[len(prefix):] if path.startswith(prefix) and len(path) > len(prefix) else None


def tokenize_diff(text: str) -> Iterator[DiffToken]:
    """Yield a typed token for every line of a unified diff."""
    for line in split_lines(text):
        paths = parse_header_paths(line)
        if paths is None:
            yield DiffToken(kind=DiffTokenKind.LINE, text=line)
        else:
            yield DiffToken(
                kind=DiffTokenKind.HEADER,
                text=line,
                old_path=paths[0],
                new_path=paths[1],
            )


def parse_diff(text: str) -> DiffDocument:
    """Split a unified diff into per-file segments.

    Every header token opens a new segment that runs until the next header
    or end of input. Lines before the first header become the preamble.

    Args:
        text: Raw diff text (e.g. `git diff` output).

    Returns:
        DiffDocument whose `text` equals the input.
    """
    preamble: list[str] = []
    segments: list[FileSegment] = []
    current: DiffToken | None = None
    body: list[str] = []

    for token in tokenize_diff(text):
        if token.kind == DiffTokenKind.HEADER:
            if current is not None:
                segments.append(_make_segment(current, body))
            current = token
            body = []
        elif current is None:
            preamble.append(token.text)
        else:
            body.append(token.text)

    if current is not None:
        segments.append(_make_segment(current, body))

    return DiffDocument(preamble="".join(preamble), segments=segments)


def header_paths(text: str) -> list[str]:
    """Return the new-side path of every file header, in order."""
    return [
        token.new_path
        for token in tokenize_diff(text)
        if token.kind == DiffTokenKind.HEADER and token.new_path is not None
    ]


def _make_segment(header: DiffToken, body: list[str]) -> FileSegment:
    return FileSegment(
        old_path=header.old_path or "",
        new_path=header.new_path or "",
        text=header.text + "".join(body),
    )
