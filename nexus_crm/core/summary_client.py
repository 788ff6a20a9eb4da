"""Client for the external dossier summary generation endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from nexus_crm.core.config import Settings, get_settings

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from nexus_crm.services.narrative import CompiledNarrative

logger = logging.getLogger(__name__)


class GenerationUnavailableError(Exception):
    """Raised when no summary could be obtained from the generation endpoint.

    Configuration gaps, transport failures, timeouts, error statuses and
    malformed bodies all collapse into this one error; callers fall back to a
    locally derived summary rather than distinguishing between them.
    """


@dataclass(frozen=True)
class GeneratedSummary:
    summary: str
    oneliner: str | None = None


class SummaryGenerator(Protocol):
    async def generate(self, narrative: "CompiledNarrative") -> GeneratedSummary:
        ...


class SummaryEndpointClient:
    """POST compiled dossier context to the configured generation endpoint."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    async def generate(self, narrative: "CompiledNarrative") -> GeneratedSummary:
        url = self.settings.summary_endpoint_url
        if not url:
            raise GenerationUnavailableError("Summary endpoint is not configured")

        payload = {
            "facts": narrative.facts,
            "notes": narrative.notes,
            "urls": list(narrative.urls),
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.summary_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "Summary endpoint request failed",
                extra={"error_type": type(exc).__name__},
            )
            raise GenerationUnavailableError("Unable to reach summary endpoint") from exc

        if not response.is_success:
            logger.warning(
                "Summary endpoint returned an error",
                extra={"status_code": response.status_code, "body": response.text[:500]},
            )
            raise GenerationUnavailableError(
                f"Summary endpoint returned status {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise GenerationUnavailableError("Summary endpoint returned invalid JSON") from exc
        return self._parse_body(body)

    @staticmethod
    def _parse_body(body: Any) -> GeneratedSummary:
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        if not isinstance(body, dict):
            raise GenerationUnavailableError("Summary endpoint returned an unexpected body")

        summary = body.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise GenerationUnavailableError("Summary endpoint response is missing a summary")

        oneliner = body.get("oneliner")
        if isinstance(oneliner, str) and oneliner.strip():
            return GeneratedSummary(summary=summary.strip(), oneliner=oneliner.strip())
        return GeneratedSummary(summary=summary.strip())


def get_summary_generator() -> SummaryGenerator:
    return SummaryEndpointClient(get_settings())
