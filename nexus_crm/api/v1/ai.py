"""Text generation endpoints backed by the Anthropic API."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from nexus_crm.api.v1.common import data_response
from nexus_crm.core import anthropic_client
from nexus_crm.core.anthropic_client import AnthropicAPIError, AnthropicNotConfiguredError
from nexus_crm.core.config import get_settings
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.schemas import SummarizeRequest, SummarizeResult
from nexus_crm.services import summarize

router = APIRouter(prefix="/ai", tags=["ai"])

logger = logging.getLogger(__name__)


@router.post("/summarize")
async def summarize_contact(
    payload: SummarizeRequest,
    owner: OwnerContext = Depends(get_owner_context),
) -> dict[str, SummarizeResult]:
    """Write a dossier summary and one-liner from compiled contact context.

    A request carrying ``prompt`` is sent as-is; otherwise the prompt is
    built from ``facts``, ``notes`` and the text of the first few ``urls``.
    Only identified callers may use it, since it fetches arbitrary URLs.
    """

    if payload.prompt:
        prompt = payload.prompt
    else:
        source_material = await summarize.fetch_source_material(
            payload.urls, limit=get_settings().source_fetch_limit
        )
        prompt = summarize.build_summary_prompt(
            summarize.build_contact_info(payload), source_material
        )

    client = anthropic_client.get_anthropic_client()
    try:
        reply = await client.complete(prompt)
    except AnthropicNotConfiguredError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": "AI_NOT_CONFIGURED", "message": str(exc)},
        ) from exc
    except AnthropicAPIError as exc:
        logger.warning("Summary generation failed", extra={"owner_id": owner.owner_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "AI_UPSTREAM_ERROR", "message": "Summary generation failed"},
        ) from exc

    result = summarize.parse_summary_reply(reply)
    if not result.summary:
        logger.warning("Model reply contained no summary", extra={"owner_id": owner.owner_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "AI_UPSTREAM_ERROR", "message": "Model returned an empty summary"},
        )
    return data_response(result)
