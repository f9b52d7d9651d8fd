"""LangGraph orchestrator for the audit pipeline.

Wires SourceResolver, ScopeFilter, DiffScoper, SegmentDispatcher,
ReportAggregator and ReportStore into a StateGraph. Collection stages
never fail on "found nothing"; provider, config and persistence errors
propagate out of graph.invoke unchanged.
"""

from typing import Callable

from langgraph.graph import END, START, StateGraph

from diff_auditor.agents.diff_scoper import DiffScoper
from diff_auditor.agents.report_aggregator import ReportAggregator
from diff_auditor.agents.report_store import ReportStore
from diff_auditor.agents.request_builder import build_request
from diff_auditor.agents.scope_filter import ScopeFilter
from diff_auditor.agents.segment_dispatcher import SegmentDispatcher
from diff_auditor.agents.source_resolver import SourceResolver
from diff_auditor.models import DispatchMode
from diff_auditor.orchestrator.exceptions import GraphBuildError
from diff_auditor.orchestrator.state import AuditState


def make_resolve_node(resolver: SourceResolver) -> Callable[[AuditState], dict]:
    """Factory: returns a node closure that reads the ChangeSet from git."""

    def resolve_node(state: AuditState) -> dict:
        change_set = resolver.resolve(state["working_dir"])
        errors = []
        if change_set.repo_root is None:
            errors.append(f"resolve_node: {state['working_dir']} is not inside a git repository")
        return {"change_set": change_set, "errors": errors}

    return resolve_node


def make_filter_node(scope_filter: ScopeFilter) -> Callable[[AuditState], dict]:
    """Factory: returns a node closure that computes the AuthorizedScope."""

    def filter_node(state: AuditState) -> dict:
        change_set = state["change_set"]
        result = scope_filter.filter(
            files=change_set.files if change_set is not None else [],
            boundary=state["working_dir"],
            repo_root=change_set.repo_root if change_set is not None else None,
            ignore_patterns=state["ignore_patterns"],
        )
        errors = [
            f"filter_node: invalid ignore pattern skipped: {pattern}"
            for pattern in result.invalid_patterns
        ]
        return {"scope_result": result, "errors": errors}

    return filter_node


def make_scope_node(scoper: DiffScoper) -> Callable[[AuditState], dict]:
    """Factory: returns a node closure that restricts the diff to the scope.

    Unexpected files are recorded as diagnostics; their segments are
    already stripped from the returned diff.
    """

    def scope_node(state: AuditState) -> dict:
        change_set = state["change_set"]
        scope_result = state["scope_result"]
        diff_text = change_set.diff_text if change_set is not None else ""
        authorized = scope_result.authorized if scope_result is not None else []

        scoped = scoper.scope(diff_text, authorized)
        errors = [
            f"scope_node: file outside audit scope stripped from diff: {path}"
            for path in scoped.unexpected_files
        ]
        return {"scoped_diff": scoped, "errors": errors}

    return scope_node


def build_request_node(state: AuditState) -> dict:
    """Assemble the AuditRequest from the scoped diff.

    Raises:
        RequestBuildError: If the modification description is blank.
    """
    scope_result = state["scope_result"]
    request = build_request(
        modification_description=state["modification_description"],
        scoped=state["scoped_diff"],
        authorized=scope_result.authorized if scope_result is not None else [],
        function_list=state["function_list"],
        request_text=state["request_text"],
    )
    return {"audit_request": request}


def make_dispatch_node(dispatcher: SegmentDispatcher) -> Callable[[AuditState], dict]:
    """Factory: returns a node closure that sends the completion request(s).

    On the single-request path the one completion is the report itself.
    """

    def dispatch_node(state: AuditState) -> dict:
        mode, results = dispatcher.dispatch(state["audit_request"])
        update: dict = {"dispatch_mode": mode, "segment_results": results}
        if mode == DispatchMode.SINGLE:
            update["report_text"] = results[0].completion
        failed = [result.file_path for result in results if result.failed]
        if failed:
            update["errors"] = [f"dispatch_node: audit failed for {path}" for path in failed]
        return update

    return dispatch_node


def make_aggregate_node(aggregator: ReportAggregator) -> Callable[[AuditState], dict]:
    """Factory: returns a node closure that merges segment results."""

    def aggregate_node(state: AuditState) -> dict:
        report_text = aggregator.aggregate(
            modification_description=state["modification_description"],
            results=state["segment_results"],
        )
        return {"report_text": report_text}

    return aggregate_node


def make_persist_node(store: ReportStore) -> Callable[[AuditState], dict]:
    """Factory: returns a node closure that writes the report file.

    Raises:
        ReportPersistError: If the write fails.
    """

    def persist_node(state: AuditState) -> dict:
        path = store.save(state["report_text"] or "")
        return {"report_path": str(path)}

    return persist_node


def route_entry(state: AuditState) -> str:
    """Skip collection when a transport already supplied the request."""
    return "audit" if state["audit_request"] is not None else "collect"


def route_after_build(state: AuditState) -> str:
    return "stop" if state["prepare_only"] else "audit"


def route_after_dispatch(state: AuditState) -> str:
    if state["dispatch_mode"] == DispatchMode.SINGLE:
        return "persist"
    return "aggregate"


def build_graph(
    resolver: SourceResolver,
    scope_filter: ScopeFilter,
    scoper: DiffScoper,
    dispatcher: SegmentDispatcher,
    aggregator: ReportAggregator,
    store: ReportStore,
):
    """Build and compile the audit StateGraph.

    Edge topology:
      START -> conditional(route_entry) -> {resolve_node, dispatch_node}
      resolve_node -> filter_node -> scope_node -> build_request_node
      build_request_node -> conditional(route_after_build) -> {dispatch_node, END}
      dispatch_node -> conditional(route_after_dispatch) -> {persist_node, aggregate_node}
      aggregate_node -> persist_node -> END

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(AuditState)

        graph.add_node("resolve_node", make_resolve_node(resolver))
        graph.add_node("filter_node", make_filter_node(scope_filter))
        graph.add_node("scope_node", make_scope_node(scoper))
        graph.add_node("build_request_node", build_request_node)
        graph.add_node("dispatch_node", make_dispatch_node(dispatcher))
        graph.add_node("aggregate_node", make_aggregate_node(aggregator))
        graph.add_node("persist_node", make_persist_node(store))

        graph.add_conditional_edges(
            START,
            route_entry,
            {
                "collect": "resolve_node",
                "audit": "dispatch_node",
            },
        )
        graph.add_edge("resolve_node", "filter_node")
        graph.add_edge("filter_node", "scope_node")
        graph.add_edge("scope_node", "build_request_node")
        graph.add_conditional_edges(
            "build_request_node",
            route_after_build,
            {
                "audit": "dispatch_node",
                "stop": END,
            },
        )
        graph.add_conditional_edges(
            "dispatch_node",
            route_after_dispatch,
            {
                "persist": "persist_node",
                "aggregate": "aggregate_node",
            },
        )
        graph.add_edge("aggregate_node", "persist_node")
        graph.add_edge("persist_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build audit graph: {exc}") from exc
