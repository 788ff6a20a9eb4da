from __future__ import annotations

import json

import httpx
import pytest

from nexus_crm.core.config import Settings
from nexus_crm.core.summary_client import (
    GeneratedSummary,
    GenerationUnavailableError,
    SummaryEndpointClient,
)
from nexus_crm.services.narrative import CompiledNarrative

ENDPOINT = "http://generator.test/summarize"

NARRATIVE = CompiledNarrative(
    facts="Name: Jane Doe",
    notes="(No notes yet)",
    urls=["https://jane.dev"],
)


def _client(handler, url: str = ENDPOINT) -> SummaryEndpointClient:
    settings = Settings(summary_endpoint_url=url, summary_timeout_seconds=2)
    return SummaryEndpointClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.anyio("asyncio")
async def test_posts_compiled_narrative_and_reads_summary():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"summary": " Jane builds things. ", "oneliner": "Builder"})

    result = await _client(handler).generate(NARRATIVE)

    assert result == GeneratedSummary(summary="Jane builds things.", oneliner="Builder")
    assert seen["url"] == ENDPOINT
    assert seen["body"] == {
        "facts": "Name: Jane Doe",
        "notes": "(No notes yet)",
        "urls": ["https://jane.dev"],
    }


@pytest.mark.anyio("asyncio")
async def test_accepts_data_envelope_without_oneliner():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"summary": "Enveloped.", "oneliner": "  "}})

    result = await _client(handler).generate(NARRATIVE)

    assert result == GeneratedSummary(summary="Enveloped.")


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(404, json={"error": "missing"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"summary": ""}),
        httpx.Response(200, json={"oneliner": "no summary"}),
        httpx.Response(200, json=["unexpected"]),
    ],
)
async def test_bad_responses_are_unavailable(response):
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(GenerationUnavailableError):
        await _client(handler).generate(NARRATIVE)


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("error_cls", [httpx.ConnectError, httpx.ReadTimeout])
async def test_transport_failures_are_unavailable(error_cls):
    def handler(request: httpx.Request) -> httpx.Response:
        raise error_cls("boom", request=request)

    with pytest.raises(GenerationUnavailableError):
        await _client(handler).generate(NARRATIVE)


@pytest.mark.anyio("asyncio")
async def test_unconfigured_endpoint_is_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - never called
        raise AssertionError("no request expected")

    with pytest.raises(GenerationUnavailableError):
        await _client(handler, url="").generate(NARRATIVE)
