"""Scope Filter: narrows the changed-file list to the authorized subset."""

import logging
import os
import re
from pathlib import Path

from diff_auditor.models import IgnorePatternStat, ScopeFilterResult

logger = logging.getLogger(__name__)

# POSIX bracket classes understood by `grep -E`, as `re` set members.
_POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": "!-/:-@\\[-`{-~",
    "space": " \\t\\n\\r\\f\\v",
    "upper": "A-Z",
    "xdigit": "0-9A-Fa-f",
}
_POSIX_CLASS_RE = re.compile(r"\[:([a-z]*):\]")


class ScopeFilter:
    """Applies the working-directory boundary and the ignore patterns.

    Paths stay repository-relative throughout so they keep matching the
    diff headers; the boundary check only uses the derived position.
    """

    def filter(
        self,
        files: list[str],
        boundary: str | Path,
        repo_root: str | Path | None = None,
        ignore_patterns: list[str] | None = None,
    ) -> ScopeFilterResult:
        """Return the AuthorizedScope for a ChangeSet.

        Args:
            files: Repository-relative changed paths.
            boundary: Directory the audit was invoked from; only files at or
                below it survive.
            repo_root: Repository top level. Defaults to boundary.
            ignore_patterns: Extended regex patterns (`grep -E`) applied in
                order; a path is dropped when a pattern is found anywhere in
                it. None means no filtering.

        Returns:
            ScopeFilterResult with the surviving paths and drop counts.
        """
        boundary_path = os.path.realpath(str(boundary))
        root_path = os.path.realpath(str(repo_root)) if repo_root is not None else boundary_path

        inside = [f for f in files if within_boundary(f, root_path, boundary_path)]
        boundary_excluded = len(files) - len(inside)
        logger.info(
            "Changed files: %d total, %d below %s", len(files), len(inside), boundary_path
        )

        surviving = inside
        stats: list[IgnorePatternStat] = []
        invalid: list[str] = []
        for pattern in ignore_patterns or []:
            try:
                compiled = re.compile(translate_ere(pattern))
            except re.error as exc:
                logger.warning("Skipping invalid ignore pattern %r: %s", pattern, exc)
                invalid.append(pattern)
                continue
            kept = [f for f in surviving if not compiled.search(f)]
            stats.append(IgnorePatternStat(pattern=pattern, excluded=len(surviving) - len(kept)))
            surviving = kept

        if ignore_patterns:
            logger.info(
                "Ignore patterns excluded %d file(s)", sum(s.excluded for s in stats)
            )
        if not surviving:
            logger.warning("No files left to audit; continuing with an empty scope")

        return ScopeFilterResult(
            authorized=surviving,
            total=len(files),
            boundary_excluded=boundary_excluded,
            pattern_stats=stats,
            invalid_patterns=invalid,
        )


def within_boundary(path: str, repo_root: str, boundary: str) -> bool:
    """True if repo_root/path lies at or below boundary."""
    if not path:
        return False
    try:
        relative = os.path.relpath(os.path.join(repo_root, path), boundary)
    except ValueError:
        # Different drives on Windows: unresolvable.
        return False
    if not relative or relative == "." or os.path.isabs(relative):
        return False
    return relative != os.pardir and not relative.startswith(os.pardir + os.sep)


def translate_ere(pattern: str) -> str:
    """Rewrite a POSIX extended regex into `re` syntax.

    Inside bracket expressions, `[:class:]` becomes the equivalent ranges and
    `[` and `\\` are literal, as they are for `grep -E`. Everything outside
    brackets is passed through unchanged.

    Raises:
        re.error: On an unknown character class name.
    """
    parts: list[str] = []
    pos = 0
    bracket_start: int | None = None  # Index of the first member of the open bracket
    while pos < len(pattern):
        char = pattern[pos]
        if bracket_start is None:
            if char == "\\":
                parts.append(pattern[pos:pos + 2])
                pos += 2
                continue
            parts.append(char)
            pos += 1
            if char == "[":
                if pattern.startswith("^", pos):
                    parts.append("^")
                    pos += 1
                bracket_start = pos
            continue

        posix_class = _POSIX_CLASS_RE.match(pattern, pos)
        if posix_class:
            name = posix_class.group(1)
            if name not in _POSIX_CLASSES:
                raise re.error(f"invalid character class [:{name}:]", pattern, pos)
            parts.append(_POSIX_CLASSES[name])
            pos = posix_class.end()
            continue
        if char == "]" and pos != bracket_start:
            bracket_start = None
            parts.append(char)
        elif char in "[\\":
            parts.append("\\" + char)
        else:
            parts.append(char)
        pos += 1
    return "".join(parts)
