"""Diff Scoper: restricts a diff to authorized files and strips leakage."""

import logging

from diff_auditor.agents.exceptions import ScopeViolationError
from diff_auditor.models import DiffDocument, ScopedDiff
from diff_auditor.utils.diff_parser import parse_diff

logger = logging.getLogger(__name__)


class DiffScoper:
    """Keeps only the file segments whose path is in the authorized scope.

    Segments are keyed on their new (b/) path, so a rename is retained when
    its destination is authorized. Any header in the original diff whose
    path is not authorized is reported as an unexpected file: the file list
    and the diff text disagree upstream. The segment is stripped either way
    unless strict mode is on, in which case ScopeViolationError is raised.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def scope(self, diff: str | DiffDocument, authorized: list[str]) -> ScopedDiff:
        """Return the diff restricted to authorized paths, in original order.

        Args:
            diff: Raw diff text or an already parsed document.
            authorized: The AuthorizedScope.

        Returns:
            ScopedDiff; its text is empty when the scope is empty.

        Raises:
            ScopeViolationError: In strict mode, when unexpected files exist.
        """
        document = parse_diff(diff) if isinstance(diff, str) else diff
        allowed = set(authorized)

        retained = [segment for segment in document.segments if segment.path in allowed]

        unexpected: list[str] = []
        for path in document.paths:
            if path not in allowed and path not in unexpected:
                unexpected.append(path)

        if unexpected:
            logger.warning(
                "%d file(s) present in the diff but outside the audit scope; stripping: %s",
                len(unexpected),
                ", ".join(unexpected),
            )
            if self.strict:
                raise ScopeViolationError(
                    f"Diff contains {len(unexpected)} file(s) outside the audit scope",
                    unexpected_files=unexpected,
                )

        present = set(document.paths)
        missing = [path for path in authorized if path not in present]
        if missing:
            logger.info("%d authorized file(s) have no diff segment", len(missing))

        logger.info(
            "Diff files: %d, retained: %d, authorized: %d",
            len(document.segments),
            len(retained),
            len(authorized),
        )

        return ScopedDiff(
            text="".join(segment.text for segment in retained),
            segments=retained,
            unexpected_files=unexpected,
        )
