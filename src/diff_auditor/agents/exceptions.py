"""Exceptions for audit pipeline stages."""


class AgentError(Exception):
    """Base exception for all audit pipeline stages."""


class SourceUnavailableError(AgentError):
    """Raised when a git query fails (git missing, not a repository)."""


class ScopeViolationError(AgentError):
    """Raised in strict mode when a diff segment falls outside the authorized scope."""

    def __init__(self, message: str, unexpected_files: list[str] | None = None) -> None:
        super().__init__(message)
        self.unexpected_files = list(unexpected_files or [])


class RequestBuildError(AgentError):
    """Raised when the audit inputs cannot form a valid request."""


class ProviderError(AgentError):
    """Base exception for completion provider failures."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderConfigError(ProviderError):
    """Raised for a missing credential or an unsupported provider selector."""


class ProviderRequestError(ProviderError):
    """Raised when a completion call fails or returns a non-success status."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider=provider)
        self.status_code = status_code


class ReportPersistError(AgentError):
    """Raised when the audit report cannot be written."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
