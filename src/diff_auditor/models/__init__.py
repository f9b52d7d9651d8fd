"""Data models for the diff auditor."""

from diff_auditor.models.diff_models import (
    DiffDocument,
    DiffToken,
    DiffTokenKind,
    FileSegment,
    ScopedDiff,
)
from diff_auditor.models.report_models import (
    AuditReport,
    AuditRequest,
    DispatchMode,
    SegmentResult,
)
from diff_auditor.models.scope_models import (
    ChangeSet,
    IgnorePatternStat,
    ScopeFilterResult,
)

__all__ = [
    "AuditReport",
    "AuditRequest",
    "ChangeSet",
    "DiffDocument",
    "DiffToken",
    "DiffTokenKind",
    "DispatchMode",
    "FileSegment",
    "IgnorePatternStat",
    "ScopeFilterResult",
    "ScopedDiff",
    "SegmentResult",
]
