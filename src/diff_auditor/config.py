"""Runtime configuration for the completion gateway and report store."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

PROVIDER_OPENAI = "openai"
PROVIDER_DEEPSEEK = "deepseek"
SUPPORTED_PROVIDERS = (PROVIDER_OPENAI, PROVIDER_DEEPSEEK)

DEFAULT_PROVIDER = PROVIDER_DEEPSEEK
DEFAULT_OPENAI_MODEL = "gpt-4"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_MAX_TOKENS = 1500
DEFAULT_TEMPERATURE = 0.2
DEFAULT_TIMEOUT = 120
DEFAULT_MAX_RETRIES = 2
DEFAULT_REPORTS_DIR = "./audits/reports"
DEFAULT_PORT = 3000


class AuditConfig(BaseModel):
    """Explicit configuration passed to the gateway and the report store.

    Nothing in the pipeline reads the process environment directly; only
    `from_env` does, and only the CLI calls it.
    """

    model_config = ConfigDict(frozen=True)

    provider: str = DEFAULT_PROVIDER
    openai_api_key: str | None = Field(default=None, repr=False)
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    deepseek_api_key: str | None = Field(default=None, repr=False)
    deepseek_model: str = DEFAULT_DEEPSEEK_MODEL
    deepseek_base_url: str = DEFAULT_DEEPSEEK_BASE_URL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout_seconds: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    reports_dir: str = DEFAULT_REPORTS_DIR
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "AuditConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ).
            **overrides: Field values that win over the environment
                (e.g. CLI flags). None values are ignored.
        """
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        values: dict = {
            "provider": (_get("AI_PROVIDER") or _get("DEFAULT_AI_PROVIDER") or DEFAULT_PROVIDER).lower(),
            "openai_api_key": _get("OPENAI_API_KEY"),
            "openai_model": _get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            "openai_base_url": _get("OPENAI_BASE_URL") or DEFAULT_OPENAI_BASE_URL,
            "deepseek_api_key": _get("DEEPSEEK_API_KEY"),
            "deepseek_model": _get("DEEPSEEK_MODEL") or DEFAULT_DEEPSEEK_MODEL,
            "deepseek_base_url": _get("DEEPSEEK_BASE_URL") or DEFAULT_DEEPSEEK_BASE_URL,
            "reports_dir": _get("AUDIT_REPORTS_DIR") or DEFAULT_REPORTS_DIR,
        }
        numeric = {
            "max_tokens": "AUDIT_MAX_TOKENS",
            "temperature": "AUDIT_TEMPERATURE",
            "timeout_seconds": "AUDIT_TIMEOUT",
            "max_retries": "AUDIT_MAX_RETRIES",
            "port": "PORT",
        }
        for field_name, env_name in numeric.items():
            raw = _get(env_name)
            if raw is not None:
                values[field_name] = raw  # pydantic coerces and validates

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def api_key_for(self, provider: str) -> str | None:
        if provider == PROVIDER_OPENAI:
            return self.openai_api_key
        if provider == PROVIDER_DEEPSEEK:
            return self.deepseek_api_key
        return None

    def model_for(self, provider: str) -> str | None:
        if provider == PROVIDER_OPENAI:
            return self.openai_model
        if provider == PROVIDER_DEEPSEEK:
            return self.deepseek_model
        return None

    def base_url_for(self, provider: str) -> str | None:
        if provider == PROVIDER_OPENAI:
            return self.openai_base_url
        if provider == PROVIDER_DEEPSEEK:
            return self.deepseek_base_url
        return None

    def safe_dict(self) -> dict:
        """Configuration without secrets, for printing."""
        data = self.model_dump(exclude={"openai_api_key", "deepseek_api_key"})
        data["openai_api_key_set"] = bool(self.openai_api_key)
        data["deepseek_api_key_set"] = bool(self.deepseek_api_key)
        return data
