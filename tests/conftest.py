from unittest.mock import MagicMock

import pytest

from diff_auditor.config import AuditConfig


def segment_text(path: str, body: str = "+changed\n") -> str:
    return (
        f"diff --git a/{path} b/{path}\n"
        f"index 0000000..1111111 100644\n"
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
        f"@@ -1 +1 @@\n"
        f"{body}"
    )


@pytest.fixture
def make_segment():
    """Factory for a single-file unified diff segment."""
    return segment_text


@pytest.fixture
def make_diff():
    """Factory for a diff over `paths` padded to exactly `total_chars`."""

    def _make(paths: list[str], total_chars: int | None = None) -> str:
        text = "".join(segment_text(path) for path in paths)
        if total_chars is None:
            return text
        pad = total_chars - len(text)
        assert pad >= 2, "total_chars too small for the requested segments"
        return text + "+" + "x" * (pad - 2) + "\n"

    return _make


@pytest.fixture
def config(tmp_path):
    return AuditConfig(
        provider="deepseek",
        openai_api_key="sk-test",
        deepseek_api_key="ds-test",
        reports_dir=str(tmp_path / "reports"),
    )


@pytest.fixture
def gateway():
    """Completion gateway double answering every call with a fixed report."""
    mock = MagicMock()
    mock.complete.return_value = "audit text"
    return mock
