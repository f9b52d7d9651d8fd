"""Filesystem store for audit reports."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from diff_auditor.agents.exceptions import ReportPersistError

logger = logging.getLogger(__name__)

REPORT_PREFIX = "audit-report-"
REPORT_SUFFIX = ".txt"


def report_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, ':' and '.' replaced by '-'.

    e.g. 2026-10-18T09:15:02.123Z -> 2026-10-18T09-15-02-123Z
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


class ReportStore:
    """Append-only report directory: one new timestamped file per run."""

    def __init__(self, reports_dir: str | Path) -> None:
        self.reports_dir = Path(reports_dir)

    def save(self, report_text: str, moment: datetime | None = None) -> Path:
        """Persist the report and return its path.

        Raises:
            ReportPersistError: If the directory or file cannot be written.
        """
        path = self.reports_dir / f"{REPORT_PREFIX}{report_timestamp(moment)}{REPORT_SUFFIX}"
        try:
            self.reports_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(report_text, encoding="utf-8")
        except OSError as exc:
            raise ReportPersistError(f"Failed to write report to {path}: {exc}", path=str(path)) from exc
        logger.info("Report saved: %s (%d chars)", path, len(report_text))
        return path
