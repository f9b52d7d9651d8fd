"""Tests for the orchestrator service layer (perform_audit, run_pipeline)."""

from pathlib import Path
from unittest.mock import patch

import pytest

from diff_auditor.agents.exceptions import ProviderRequestError
from diff_auditor.agents.source_resolver import SourceResolver
from diff_auditor.models import AuditRequest, ChangeSet
from diff_auditor.orchestrator.service import (
    SUCCESS_MESSAGE,
    SUCCESS_STATUS,
    build_report,
    create_graph,
    perform_audit,
    run_pipeline,
)
from diff_auditor.orchestrator.state import make_initial_state


def make_request(code_changes: str, changed_files=None) -> AuditRequest:
    return AuditRequest(
        request="r",
        modification_description="Add login",
        code_changes=code_changes,
        function_list="f",
        changed_files=changed_files,
    )


@pytest.fixture
def graph(config, gateway):
    return create_graph(config, gateway=gateway)


class TestPerformAudit:
    def test_success_report(self, graph, gateway, config, make_segment):
        gateway.complete.return_value = "full report"
        report = perform_audit(graph, make_request(make_segment("a.ts"), ["a.ts"]))
        assert report.status == SUCCESS_STATUS
        assert report.message == SUCCESS_MESSAGE
        assert report.ai_report == "full report"
        assert report.files_audited == 1
        assert report.processing_seconds is not None
        assert Path(report.report_path).parent == Path(config.reports_dir)
        assert Path(report.report_path).read_text(encoding="utf-8") == "full report"

    def test_changed_files_scope_the_diff(self, graph, gateway, make_segment):
        diff = make_segment("a.ts") + make_segment("secret.env")
        report = perform_audit(graph, make_request(diff, ["a.ts"]))
        sent = gateway.complete.call_args.args[0][1]["content"]
        assert "secret.env" not in sent
        assert report.unexpected_files == ["secret.env"]
        assert report.files_audited == 1

    def test_without_changed_files_whole_diff_is_sent(self, graph, gateway, make_diff):
        diff = make_diff(["a.ts", "b.ts"])
        report = perform_audit(graph, make_request(diff))
        assert diff in gateway.complete.call_args.args[0][1]["content"]
        assert report.files_audited == 2
        assert report.unexpected_files == []

    def test_fatal_error_propagates_and_nothing_is_written(self, graph, gateway, config, make_segment):
        gateway.complete.side_effect = ProviderRequestError("boom", provider="deepseek", status_code=500)
        with pytest.raises(ProviderRequestError):
            perform_audit(graph, make_request(make_segment("a.ts")))
        assert not Path(config.reports_dir).exists()


def test_run_pipeline_prepare_only(graph, gateway, tmp_path, make_segment):
    change_set = ChangeSet(diff_text=make_segment("a.ts"), files=["a.ts"], repo_root=str(tmp_path))
    with patch.object(SourceResolver, "resolve", return_value=change_set):
        state = run_pipeline(
            graph,
            working_dir=tmp_path,
            modification_description="Add login",
            function_list="f",
            ignore_patterns=None,
            prepare_only=True,
        )
    assert state["audit_request"].code_changes == make_segment("a.ts")
    assert state["working_dir"] == str(tmp_path)
    gateway.complete.assert_not_called()


def test_build_report_from_empty_state():
    report = build_report(make_initial_state(), 0.123)
    assert report.files_audited == 0
    assert report.ai_report == ""
    assert report.report_path == ""
    assert report.processing_seconds == 0.12
