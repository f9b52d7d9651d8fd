"""Pipeline stages of the diff auditor."""

from diff_auditor.agents.exceptions import (
    AgentError,
    ProviderConfigError,
    ProviderError,
    ProviderRequestError,
    ReportPersistError,
    RequestBuildError,
    ScopeViolationError,
    SourceUnavailableError,
)
from diff_auditor.agents.completion_gateway import CompletionGateway
from diff_auditor.agents.diff_scoper import DiffScoper
from diff_auditor.agents.report_aggregator import ReportAggregator
from diff_auditor.agents.report_store import ReportStore
from diff_auditor.agents.scope_filter import ScopeFilter
from diff_auditor.agents.segment_dispatcher import SegmentDispatcher
from diff_auditor.agents.source_resolver import SourceResolver

__all__ = [
    "AgentError",
    "CompletionGateway",
    "DiffScoper",
    "ProviderConfigError",
    "ProviderError",
    "ProviderRequestError",
    "ReportAggregator",
    "ReportPersistError",
    "ReportStore",
    "RequestBuildError",
    "ScopeFilter",
    "ScopeViolationError",
    "SegmentDispatcher",
    "SourceResolver",
    "SourceUnavailableError",
]
