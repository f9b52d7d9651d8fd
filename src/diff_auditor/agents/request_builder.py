"""Builds audit requests from the working directory's audit inputs."""

import json
import logging
from pathlib import Path
from typing import Any

from diff_auditor.agents.exceptions import RequestBuildError
from diff_auditor.models import AuditRequest, ScopedDiff

logger = logging.getLogger(__name__)

TASK_LIST_FILE = "task_list.txt"
FUNCTION_LIST_FILE = "function_list.txt"
DEFAULT_REQUEST_TEXT = "直近のコード変更の監査をお願いします"
MISSING_FUNCTION_LIST = "// function_list.txtが見つかりません"

JSONRPC_VERSION = "2.0"
AUDIT_METHOD = "tool/audit"


def read_modification_description(directory: str | Path, filename: str = TASK_LIST_FILE) -> str:
    """Read the modification description from task_list.txt.

    Raises:
        RequestBuildError: If the file is missing or blank.
    """
    path = Path(directory) / filename
    if not path.is_file():
        raise RequestBuildError(f"{filename} does not exist. Create it and describe the change.")
    description = path.read_text(encoding="utf-8")
    if not description.strip():
        raise RequestBuildError(f"{filename} is empty. Describe the change to audit.")
    logger.info("Loaded modification description from %s", path)
    return description


def read_function_list(directory: str | Path, filename: str = FUNCTION_LIST_FILE) -> str:
    path = Path(directory) / filename
    if not path.is_file():
        logger.info("%s not found", filename)
        return MISSING_FUNCTION_LIST
    return path.read_text(encoding="utf-8")


def build_request(
    modification_description: str,
    scoped: ScopedDiff,
    authorized: list[str],
    function_list: str,
    request_text: str = DEFAULT_REQUEST_TEXT,
) -> AuditRequest:
    """Assemble the AuditRequest handed to dispatch.

    Raises:
        RequestBuildError: If the modification description is blank.
    """
    if not modification_description.strip():
        raise RequestBuildError("modification_description must not be empty")
    return AuditRequest(
        request=request_text,
        modification_description=modification_description,
        code_changes=scoped.text,
        function_list=function_list,
        changed_files=list(authorized),
    )


def to_jsonrpc(request: AuditRequest, request_id: int | str = 1) -> dict[str, Any]:
    """Wrap a request in the JSON-RPC envelope the HTTP transport accepts."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": AUDIT_METHOD,
        "params": request.model_dump(),
    }


def format_jsonrpc(request: AuditRequest, request_id: int | str = 1) -> str:
    return json.dumps(to_jsonrpc(request, request_id), ensure_ascii=False, indent=2)
