"""Completion Gateway: one operation, messages -> text, over OpenAI-compatible providers."""

import json
import logging
from typing import Any

import openai

from diff_auditor.agents.exceptions import ProviderConfigError, ProviderRequestError
from diff_auditor.config import SUPPORTED_PROVIDERS, AuditConfig

logger = logging.getLogger(__name__)

_KEY_ENV_NAMES = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


class CompletionGateway:
    """Sends chat-completion requests to the configured provider.

    Both providers speak the OpenAI chat-completions protocol, so one SDK
    client per provider (with its own base URL and key) is enough. Clients
    are built lazily: a missing credential only breaks the provider that
    needs it.
    """

    def __init__(self, config: AuditConfig) -> None:
        self.config = config
        self._clients: dict[str, openai.OpenAI] = {}

    @property
    def provider(self) -> str:
        return self.config.provider

    def complete(self, messages: list[dict[str, str]], provider: str | None = None) -> str:
        """Return the first completion's text for the given messages.

        Args:
            messages: Ordered role-tagged messages ({"role", "content"}).
            provider: Override for the configured provider selector.

        Returns:
            Completion text; "" when the response carries no content.

        Raises:
            ProviderConfigError: Unsupported selector or missing credential.
            ProviderRequestError: Non-success status or transport failure.
        """
        selected = provider or self.config.provider
        client = self._client_for(selected)
        model = self.config.model_for(selected)

        logger.info("Sending completion request: provider=%s model=%s", selected, model)
        logger.debug(
            "Request messages: %s", json.dumps(messages, ensure_ascii=False, indent=2)
        )

        try:
            response = client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except openai.APIStatusError as exc:
            raise ProviderRequestError(
                f"{selected} API error: {exc.status_code}\n{exc.message}",
                provider=selected,
                status_code=exc.status_code,
            ) from exc
        except openai.APIError as exc:
            raise ProviderRequestError(
                f"{selected} API request failed: {exc}",
                provider=selected,
            ) from exc

        content = _first_content(response)
        logger.info("Received completion: %d chars", len(content))
        logger.debug("Completion head: %s...", content[:100])
        return content

    def _client_for(self, provider: str) -> openai.OpenAI:
        if provider not in SUPPORTED_PROVIDERS:
            raise ProviderConfigError(
                f"Unsupported AI provider: {provider} "
                f"(expected one of: {', '.join(SUPPORTED_PROVIDERS)})",
                provider=provider,
            )
        if provider in self._clients:
            return self._clients[provider]

        api_key = self.config.api_key_for(provider)
        if not api_key:
            raise ProviderConfigError(
                f"{_KEY_ENV_NAMES[provider]} is not set.", provider=provider
            )
        client = openai.OpenAI(
            api_key=api_key,
            base_url=self.config.base_url_for(provider),
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries,
        )
        self._clients[provider] = client
        return client


def _first_content(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    return content or ""
