"""Transports that deliver `tool/audit` requests to the pipeline.

Submodules are imported on demand so that the CLI only loads the server
stack it actually runs.
"""

from diff_auditor.transport.params import InvalidParamsError, parse_audit_params

__all__ = ["InvalidParamsError", "parse_audit_params"]
