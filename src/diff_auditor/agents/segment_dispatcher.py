"""Segment Dispatcher: one completion per diff, or one per file segment."""

import logging

from diff_auditor.agents.completion_gateway import CompletionGateway
from diff_auditor.agents.exceptions import ProviderRequestError
from diff_auditor.agents.prompts import build_audit_messages
from diff_auditor.models import AuditRequest, DispatchMode, FileSegment, SegmentResult
from diff_auditor.utils.diff_parser import parse_diff

logger = logging.getLogger(__name__)

MAX_SINGLE_REQUEST_FILES = 2
SPLIT_THRESHOLD_CHARS = 10_000
ERROR_MARKER_PREFIX = "エラー: "
WHOLE_DIFF_LABEL = "(all files)"


def choose_dispatch_mode(segment_count: int, code_changes: str) -> DispatchMode:
    """Decide how a diff is sent.

    Split only when there are more than MAX_SINGLE_REQUEST_FILES segments
    and the diff is at least SPLIT_THRESHOLD_CHARS long. A blank diff with
    no segments needs no request at all.
    """
    if segment_count == 0 and not code_changes.strip():
        return DispatchMode.NONE
    if segment_count <= MAX_SINGLE_REQUEST_FILES or len(code_changes) < SPLIT_THRESHOLD_CHARS:
        return DispatchMode.SINGLE
    return DispatchMode.SPLIT


def build_segment_request(request: AuditRequest, segment: FileSegment) -> AuditRequest:
    """Derive the single-file request for one segment."""
    return AuditRequest(
        request=f"{request.request} - ファイル: {segment.path}",
        modification_description=(
            f"{request.modification_description} - "
            f"このリクエストはファイル \"{segment.path}\" のみを対象としています。"
        ),
        code_changes=segment.text,
        function_list=request.function_list,
        changed_files=[segment.path],
    )


class SegmentDispatcher:
    """Dispatches audit requests to the completion gateway.

    Segments are sent sequentially, in diff order, and results are returned
    in that same order. On the split path a failing segment becomes an
    error-marker result; on the single path the error propagates.
    """

    def __init__(self, gateway: CompletionGateway) -> None:
        self.gateway = gateway

    def dispatch(self, request: AuditRequest) -> tuple[DispatchMode, list[SegmentResult]]:
        """Send the request and collect per-segment results.

        Returns:
            (mode, results). NONE yields no results, SINGLE exactly one.

        Raises:
            ProviderConfigError: Always fatal.
            ProviderRequestError: Fatal on the single-request path.
        """
        document = parse_diff(request.code_changes)
        mode = choose_dispatch_mode(len(document.segments), request.code_changes)

        if mode == DispatchMode.NONE:
            logger.info("No file changes to audit; skipping completion requests")
            return mode, []

        if mode == DispatchMode.SINGLE:
            logger.info(
                "Sending one audit request (%d file(s), %d chars)",
                len(document.segments),
                len(request.code_changes),
            )
            completion = self.gateway.complete(build_audit_messages(request))
            label = document.segments[0].path if len(document.segments) == 1 else WHOLE_DIFF_LABEL
            return mode, [SegmentResult(file_path=label, completion=completion)]

        logger.info("Splitting large diff into %d per-file audits", len(document.segments))
        results: list[SegmentResult] = []
        for index, segment in enumerate(document.segments, start=1):
            logger.info("Auditing file %d/%d: %s", index, len(document.segments), segment.path)
            results.append(self._dispatch_segment(request, segment))
        return mode, results

    def _dispatch_segment(self, request: AuditRequest, segment: FileSegment) -> SegmentResult:
        segment_request = build_segment_request(request, segment)
        try:
            completion = self.gateway.complete(build_audit_messages(segment_request))
        except ProviderRequestError as exc:
            logger.warning("Audit of %s failed: %s", segment.path, exc)
            return SegmentResult(
                file_path=segment.path,
                completion=f"{ERROR_MARKER_PREFIX}{exc}",
                failed=True,
            )
        return SegmentResult(file_path=segment.path, completion=completion)

