"""Prompt assembly and reply parsing for the summarize endpoint."""
from __future__ import annotations

import asyncio
import logging
import re

import httpx

from nexus_crm.schemas import SummarizeRequest, SummarizeResult

SOURCE_FETCH_TIMEOUT_SECONDS = 8.0
SOURCE_TEXT_LIMIT = 4000
USER_AGENT = "Mozilla/5.0 (compatible; NexusCRM/1.0)"

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")
_SUMMARY_RE = re.compile(r"SUMMARY:\s*([\s\S]*?)(?=ONELINER:|$)", re.IGNORECASE)
_ONELINER_RE = re.compile(r"ONELINER:\s*(.*)", re.IGNORECASE)

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are writing two things about a person for a networking CRM, based ONLY on the contact context and linked source material below.

TASK 1 - FULL SUMMARY:
Write 2-3 sentences in a measured, professional tone. Be factual and specific. State their current role, organization, location and career highlights where known. No promotional language. No speculation.

TASK 2 - ONE-LINER:
Write a single short phrase (under 15 words) describing what this person actually does, not just their job title.

Contact context:
{contact_info}
{source_section}
{source_hint}
Respond in this exact format:
SUMMARY: [your summary]
ONELINER: [your one-line description]"""


def strip_html(html: str) -> str:
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()[:SOURCE_TEXT_LIMIT]


async def fetch_source_material(
    urls: list[str],
    *,
    limit: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[str]:
    """Fetch up to ``limit`` pages and return one labelled text block per URL.

    A page that cannot be fetched still yields a block saying so, so the
    model knows the source existed.
    """

    selected = urls[:limit]
    if not selected:
        return []

    async with httpx.AsyncClient(
        timeout=SOURCE_FETCH_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
        transport=transport,
    ) as client:
        return list(await asyncio.gather(*(_fetch_one(client, url) for url in selected)))


async def _fetch_one(client: httpx.AsyncClient, url: str) -> str:
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.info("Source page unavailable", extra={"url": url, "error_type": type(exc).__name__})
        return f"[{url}: could not be retrieved]"
    if not response.is_success:
        return f"[{url}: failed to fetch, status {response.status_code}]"
    return f"[Content from {url}]:\n{strip_html(response.text)}"


def build_contact_info(request: SummarizeRequest) -> str:
    sections = [request.facts.strip()]
    if request.notes.strip():
        sections.append(f"Notes:\n{request.notes.strip()}")
    return "\n\n".join(section for section in sections if section)


def build_summary_prompt(contact_info: str, source_material: list[str]) -> str:
    if source_material:
        joined = "\n\n".join(source_material)
        source_section = f"\nSource material from linked pages:\n{joined}\n"
        source_hint = ""
    else:
        source_section = ""
        source_hint = "\nNo source URLs provided. Use only the contact fields above.\n"
    return PROMPT_TEMPLATE.format(
        contact_info=contact_info,
        source_section=source_section,
        source_hint=source_hint,
    )


def parse_summary_reply(text: str) -> SummarizeResult:
    """Split a ``SUMMARY:``/``ONELINER:`` reply; unlabelled text is all summary."""

    summary_match = _SUMMARY_RE.search(text)
    oneliner_match = _ONELINER_RE.search(text)
    summary = summary_match.group(1).strip() if summary_match else text.strip()
    oneliner = oneliner_match.group(1).strip() if oneliner_match else ""
    return SummarizeResult(summary=summary, oneliner=oneliner)
