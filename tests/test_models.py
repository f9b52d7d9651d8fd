"""Tests for the pydantic data models."""

import pytest
from pydantic import ValidationError

from diff_auditor.models import (
    AuditReport,
    AuditRequest,
    ChangeSet,
    DiffDocument,
    FileSegment,
    IgnorePatternStat,
    ScopedDiff,
    ScopeFilterResult,
)


def test_file_segment_path_is_new_side():
    segment = FileSegment(old_path="old.ts", new_path="new.ts", text="diff --git a/old.ts b/new.ts\n")
    assert segment.path == "new.ts"
    assert segment.is_rename is True


def test_diff_document_text_and_paths():
    doc = DiffDocument(
        preamble="p\n",
        segments=[
            FileSegment(old_path="a", new_path="a", text="A\n"),
            FileSegment(old_path="b", new_path="b", text="B\n"),
        ],
    )
    assert doc.text == "p\nA\nB\n"
    assert doc.paths == ["a", "b"]


def test_scoped_diff_discrepancy_count():
    scoped = ScopedDiff(text="", unexpected_files=["b.ts", "c.ts"])
    assert scoped.discrepancy_count == 2
    assert scoped.retained_paths == []


def test_change_set_used_staged():
    assert ChangeSet(staged_diff="diff", diff_text="diff").used_staged is True
    assert ChangeSet(staged_diff=" \n", unstaged_diff="u", diff_text="u").used_staged is False


def test_scope_filter_result_pattern_excluded():
    result = ScopeFilterResult(
        pattern_stats=[IgnorePatternStat(pattern="a", excluded=2), IgnorePatternStat(pattern="b")]
    )
    assert result.pattern_excluded == 2


def test_audit_request_requires_strings():
    with pytest.raises(ValidationError):
        AuditRequest(request="r", modification_description="d", code_changes="c")


def test_audit_request_is_frozen():
    request = AuditRequest(request="r", modification_description="d", code_changes="c", function_list="f")
    with pytest.raises(ValidationError):
        request.code_changes = "other"


class TestAuditReport:
    def test_wire_names(self):
        report = AuditReport(
            status="success",
            message="ok",
            report_path="/tmp/r.txt",
            ai_report="text",
            files_audited=2,
            processing_seconds=1.5,
        )
        assert report.to_wire() == {
            "status": "success",
            "message": "ok",
            "reportPath": "/tmp/r.txt",
            "aiReport": "text",
            "filesAudited": 2,
            "processingSeconds": 1.5,
            "unexpectedFiles": [],
        }

    def test_accepts_wire_names(self):
        report = AuditReport.model_validate(
            {"status": "success", "message": "ok", "reportPath": "/r", "aiReport": "t"}
        )
        assert report.report_path == "/r"
        assert report.ai_report == "t"
