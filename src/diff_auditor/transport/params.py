"""Validation of `tool/audit` parameters received by a transport."""

from typing import Any

from pydantic import ValidationError

from diff_auditor.models import AuditRequest


class InvalidParamsError(ValueError):
    """Raised when transport parameters do not form a valid AuditRequest."""


def parse_audit_params(params: Any) -> AuditRequest:
    """Validate raw parameters into an AuditRequest.

    Rejects a blank modification description here, before the core sees it.

    Raises:
        InvalidParamsError: On schema violations or a blank description.
    """
    if not isinstance(params, dict):
        raise InvalidParamsError("params must be an object")
    try:
        request = AuditRequest.model_validate(params)
    except ValidationError as exc:
        raise InvalidParamsError(f"Invalid params: {exc}") from exc
    if not request.modification_description.strip():
        raise InvalidParamsError("modification_description must not be empty")
    return request
