"""Minimal Anthropic Messages API client used by the summarize endpoint."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from nexus_crm.core.config import Settings, get_settings

ANTHROPIC_VERSION = "2023-06-01"
REQUEST_TIMEOUT_SECONDS = 30.0

logger = logging.getLogger(__name__)


class AnthropicError(Exception):
    """Base error for Anthropic API operations."""


class AnthropicNotConfiguredError(AnthropicError):
    """Raised when no API key is configured."""


class AnthropicAPIError(AnthropicError):
    """Raised when the API cannot be reached or answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AnthropicClient:
    """Send single-turn prompts to the Messages API and return the text reply."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    def _require_configured(self) -> None:
        if not self.settings.anthropic_api_key:
            raise AnthropicNotConfiguredError("ANTHROPIC_API_KEY not configured")

    async def complete(self, prompt: str, *, max_tokens: int = 400) -> str:
        """Return the first text block of the model's reply to ``prompt``."""

        self._require_configured()
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.settings.anthropic_api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        body = {
            "model": self.settings.anthropic_model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            async with httpx.AsyncClient(
                timeout=REQUEST_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                response = await client.post(
                    self.settings.anthropic_api_url, headers=headers, json=body
                )
        except httpx.HTTPError as exc:
            logger.error("Anthropic request failed", exc_info=exc)
            raise AnthropicAPIError("Failed to communicate with Anthropic API") from exc

        if response.status_code >= 400:
            logger.error(
                "Anthropic API error",
                extra={"status_code": response.status_code, "body": response.text},
            )
            raise AnthropicAPIError(
                f"Anthropic API error {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error(
                "Anthropic API returned invalid JSON", extra={"body": response.text[:500]}
            )
            raise AnthropicAPIError(
                "Anthropic API returned invalid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        content = data.get("content") if isinstance(data, dict) else None
        if content and isinstance(content, list):
            first = content[0]
            if isinstance(first, dict) and first.get("type") == "text":
                return str(first.get("text", ""))
        return ""


def get_anthropic_client() -> AnthropicClient:
    return AnthropicClient(get_settings())
