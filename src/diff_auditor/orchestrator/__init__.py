"""LangGraph orchestrator package for the audit pipeline."""

from diff_auditor.orchestrator.exceptions import GraphBuildError, OrchestratorError
from diff_auditor.orchestrator.graph import build_graph
from diff_auditor.orchestrator.service import create_graph, perform_audit, run_pipeline
from diff_auditor.orchestrator.state import AuditState, make_initial_state

__all__ = [
    "AuditState",
    "GraphBuildError",
    "OrchestratorError",
    "build_graph",
    "create_graph",
    "make_initial_state",
    "perform_audit",
    "run_pipeline",
]
