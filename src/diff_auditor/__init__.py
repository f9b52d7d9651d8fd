"""Diff auditor: scoped, provider-agnostic LLM review of git changes."""

__version__ = "0.1.0"
