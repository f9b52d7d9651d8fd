"""Report Aggregator: summary rollup followed by per-file detail sections."""

import logging

from diff_auditor.agents.completion_gateway import CompletionGateway
from diff_auditor.agents.prompts import build_summary_messages
from diff_auditor.models import SegmentResult

logger = logging.getLogger(__name__)

SUMMARY_HEADING = "# 監査サマリー"
DETAILS_HEADING = "# 詳細な監査結果"
SECTION_SEPARATOR = "\n---\n\n"
NO_FILES_SUMMARY = "監査対象のファイルはありませんでした。"


def render_section(result: SegmentResult) -> str:
    return f"## {result.file_path} の監査結果\n\n{result.completion}\n"


def render_sections(results: list[SegmentResult]) -> str:
    """Join per-file sections in dispatch order."""
    return SECTION_SEPARATOR.join(render_section(result) for result in results)


def render_report(summary: str, details: str) -> str:
    return f"{SUMMARY_HEADING}\n\n{summary}\n\n{DETAILS_HEADING}\n\n{details}"


class ReportAggregator:
    """Merges per-segment completions into one report.

    The summary comes from one extra completion call over a truncated view
    of every segment result; the details are the untruncated sections.
    """

    def __init__(self, gateway: CompletionGateway) -> None:
        self.gateway = gateway

    def aggregate(self, modification_description: str, results: list[SegmentResult]) -> str:
        """Return the final report text.

        With no results no completion is requested and the summary states
        that nothing was audited.

        Raises:
            ProviderConfigError, ProviderRequestError: From the summary call.
        """
        if not results:
            return render_report(NO_FILES_SUMMARY, "")

        details = render_sections(results)
        failed = sum(1 for result in results if result.failed)
        logger.info(
            "Generating summary over %d file result(s) (%d failed)", len(results), failed
        )
        summary = self.gateway.complete(build_summary_messages(modification_description, results))
        return render_report(summary, details)
