"""Utilities for the diff auditor."""

from diff_auditor.utils.diff_parser import (
    header_paths,
    parse_diff,
    parse_header_paths,
    split_lines,
    tokenize_diff,
)
from diff_auditor.utils.ignore_file import (
    AUDIT_IGNORE_FILE,
    load_ignore_patterns,
    parse_ignore_patterns,
)

__all__ = [
    "AUDIT_IGNORE_FILE",
    "header_paths",
    "load_ignore_patterns",
    "parse_diff",
    "parse_header_paths",
    "parse_ignore_patterns",
    "split_lines",
    "tokenize_diff",
]
