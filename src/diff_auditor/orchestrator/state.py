"""State definition for the LangGraph audit pipeline."""

import operator
from typing import Annotated, TypedDict

from diff_auditor.agents.request_builder import DEFAULT_REQUEST_TEXT, MISSING_FUNCTION_LIST
from diff_auditor.models import (
    AuditRequest,
    ChangeSet,
    DispatchMode,
    ScopedDiff,
    ScopeFilterResult,
    SegmentResult,
)


class AuditState(TypedDict):
    """State for the audit graph.

    `errors` accumulates non-fatal diagnostics across nodes; every other
    field is written once by the node that owns it.
    """

    # Input
    working_dir: str
    ignore_patterns: list[str] | None
    request_text: str
    modification_description: str
    function_list: str
    prepare_only: bool

    # Collection
    change_set: ChangeSet | None
    scope_result: ScopeFilterResult | None
    scoped_diff: ScopedDiff | None

    # Dispatch
    audit_request: AuditRequest | None
    dispatch_mode: DispatchMode | None
    segment_results: list[SegmentResult]

    # Output
    report_text: str | None
    report_path: str | None

    # Diagnostics
    errors: Annotated[list[str], operator.add]


def make_initial_state(
    working_dir: str = ".",
    modification_description: str = "",
    function_list: str = MISSING_FUNCTION_LIST,
    ignore_patterns: list[str] | None = None,
    request_text: str = DEFAULT_REQUEST_TEXT,
    prepare_only: bool = False,
    audit_request: AuditRequest | None = None,
) -> AuditState:
    """Create the initial state for an audit run.

    Args:
        working_dir: Directory the audit runs from; also the scope boundary.
        modification_description: Contents of task_list.txt.
        function_list: Contents of function_list.txt.
        ignore_patterns: .auditignore patterns, or None for no filtering.
        request_text: Free-form request line sent to the provider.
        prepare_only: Stop after the request is built (no completion calls).
        audit_request: A ready-made request (from a transport); when set the
            graph skips collection and starts at dispatch.

    Returns:
        AuditState with all fields initialised.
    """
    if audit_request is not None:
        modification_description = audit_request.modification_description
        function_list = audit_request.function_list
        request_text = audit_request.request
    return {
        "working_dir": working_dir,
        "ignore_patterns": ignore_patterns,
        "request_text": request_text,
        "modification_description": modification_description,
        "function_list": function_list,
        "prepare_only": prepare_only,
        "change_set": None,
        "scope_result": None,
        "scoped_diff": None,
        "audit_request": audit_request,
        "dispatch_mode": None,
        "segment_results": [],
        "report_text": None,
        "report_path": None,
        "errors": [],
    }
