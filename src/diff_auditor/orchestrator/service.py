"""Entry points shared by the CLI and the transports."""

import logging
import time
from pathlib import Path

from diff_auditor.agents.completion_gateway import CompletionGateway
from diff_auditor.agents.diff_scoper import DiffScoper
from diff_auditor.agents.report_aggregator import ReportAggregator
from diff_auditor.agents.report_store import ReportStore
from diff_auditor.agents.scope_filter import ScopeFilter
from diff_auditor.agents.segment_dispatcher import SegmentDispatcher
from diff_auditor.agents.source_resolver import SourceResolver
from diff_auditor.config import AuditConfig
from diff_auditor.models import AuditReport, AuditRequest
from diff_auditor.orchestrator.graph import build_graph
from diff_auditor.orchestrator.state import AuditState, make_initial_state
from diff_auditor.utils.diff_parser import header_paths

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "success"
SUCCESS_MESSAGE = "監査レポートを生成しました。"


def create_graph(config: AuditConfig, gateway: CompletionGateway | None = None):
    """Build the audit graph with real components for the given config."""
    gateway = gateway or CompletionGateway(config)
    return build_graph(
        resolver=SourceResolver(),
        scope_filter=ScopeFilter(),
        scoper=DiffScoper(),
        dispatcher=SegmentDispatcher(gateway),
        aggregator=ReportAggregator(gateway),
        store=ReportStore(config.reports_dir),
    )


def perform_audit(graph, request: AuditRequest) -> AuditReport:
    """Audit a ready-made request (the transport path).

    When the request names its changed files, the diff is first scoped to
    them so that no segment outside that list reaches the provider.

    Raises:
        ProviderConfigError, ProviderRequestError, ReportPersistError: Fatal.
    """
    logger.info("Starting code audit")
    started = time.monotonic()

    unexpected: list[str] = []
    if request.changed_files:
        scoped = DiffScoper().scope(request.code_changes, request.changed_files)
        unexpected = scoped.unexpected_files
        request = request.model_copy(update={"code_changes": scoped.text})

    result = graph.invoke(make_initial_state(audit_request=request))
    report = build_report(result, time.monotonic() - started)
    if unexpected:
        report = report.model_copy(update={"unexpected_files": unexpected})
    return report


def run_pipeline(
    graph,
    working_dir: str | Path,
    modification_description: str,
    function_list: str,
    ignore_patterns: list[str] | None,
    prepare_only: bool = False,
) -> AuditState:
    """Run the full pipeline from git collection onwards.

    With prepare_only the graph stops once the request is built and no
    completion call is made.
    """
    state = make_initial_state(
        working_dir=str(working_dir),
        modification_description=modification_description,
        function_list=function_list,
        ignore_patterns=ignore_patterns,
        prepare_only=prepare_only,
    )
    return graph.invoke(state)


def build_report(result: AuditState, elapsed_seconds: float) -> AuditReport:
    """Convert a finished graph state into the AuditReport artifact."""
    report_text = result.get("report_text") or ""
    request = result.get("audit_request")
    files_audited = len(header_paths(request.code_changes)) if request is not None else 0
    scoped = result.get("scoped_diff")

    logger.info(
        "Audit complete in %.2fs: report=%s (%d chars)",
        elapsed_seconds,
        result.get("report_path"),
        len(report_text),
    )
    return AuditReport(
        status=SUCCESS_STATUS,
        message=SUCCESS_MESSAGE,
        report_path=result.get("report_path") or "",
        ai_report=report_text,
        files_audited=files_audited,
        processing_seconds=round(elapsed_seconds, 2),
        unexpected_files=scoped.unexpected_files if scoped is not None else [],
    )
