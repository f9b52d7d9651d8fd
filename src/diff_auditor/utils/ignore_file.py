"""Reading `.auditignore` pattern files."""

import re
from pathlib import Path

AUDIT_IGNORE_FILE = ".auditignore"

_COMMENT_RE = re.compile(r"^\s*#")


def parse_ignore_patterns(content: str) -> list[str]:
    """Return the patterns in an ignore file body, in file order.

    Blank lines and lines whose first non-blank character is '#' are
    skipped; surrounding whitespace is trimmed from each pattern.
    """
    patterns: list[str] = []
    for line in content.splitlines():
        if not line.strip() or _COMMENT_RE.match(line):
            continue
        patterns.append(line.strip())
    return patterns


def load_ignore_patterns(directory: str | Path, filename: str = AUDIT_IGNORE_FILE) -> list[str] | None:
    """Load ignore patterns from `directory/filename`.

    Returns:
        The pattern list, or None when the file does not exist (meaning no
        filtering at all, as opposed to an empty pattern list).
    """
    path = Path(directory) / filename
    if not path.is_file():
        return None
    return parse_ignore_patterns(path.read_text(encoding="utf-8"))
