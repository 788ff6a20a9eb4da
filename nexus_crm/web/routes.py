"""Server-rendered views for the personal CRM."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.core import summary_client
from nexus_crm.core.db import get_session
from nexus_crm.core.errors import PersistenceError
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.models import Contact
from nexus_crm.services.contact_display import last_name_key, mini_description
from nexus_crm.services.context_collector import ContextCollector, SynthesizedProfile
from nexus_crm.services.narrative import URL_PATTERN, visible_key_links
from nexus_crm.services.summary_resolver import SummaryResolver, should_auto_generate

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

router = APIRouter()

logger = logging.getLogger(__name__)

ALPHABET = [chr(code) for code in range(ord("A"), ord("Z") + 1)]


@router.get("/", response_class=HTMLResponse, name="web_contacts")
async def contacts_page(
    request: Request,
    q: str | None = Query(None),
    letter: str | None = Query(None, max_length=1),
    sort: Literal["alpha", "recent"] = "alpha",
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> HTMLResponse:
    """Render the contacts index page."""

    stmt = select(Contact).where(Contact.owner_id == owner.owner_id)
    if q:
        lowered = f"%{q.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Contact.full_name).like(lowered),
                func.lower(Contact.company).like(lowered),
                func.lower(Contact.role).like(lowered),
            )
        )
    result = await session.execute(stmt)
    contacts = list(result.scalars())

    if letter:
        contacts = [c for c in contacts if last_name_key(c.full_name).startswith(letter.lower())]
    if sort == "recent":
        contacts.sort(key=lambda c: c.updated_at or c.created_at, reverse=True)
    else:
        contacts.sort(key=lambda c: (last_name_key(c.full_name), c.full_name.lower()))

    contacts_payload = [
        {
            "id": contact.id,
            "full_name": contact.full_name,
            "initials": _initials(contact.full_name),
            "mini_description": mini_description(contact),
            "relationship_type": contact.relationship_type or "",
            "linked": contact.linked_profile_id is not None,
            "updated_at": contact.updated_at,
        }
        for contact in contacts
    ]

    return templates.TemplateResponse(
        "contacts/list.html",
        {
            "request": request,
            "contacts": contacts_payload,
            "q": q or "",
            "sort": sort,
            "active_letter": (letter or "").upper(),
            "alphabet": ALPHABET,
        },
    )


@router.get(
    "/contacts/{contact_id}",
    response_class=HTMLResponse,
    name="web_contact_detail",
)
async def contact_detail_page(
    request: Request,
    contact_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> HTMLResponse:
    """Render the detail page for a specific contact.

    A linked contact without a summary gets one generated during this page
    load; a reload after that finds the stored summary and skips it.
    """

    collector = ContextCollector(session)
    context = await collector.collect(owner, contact_id)

    summary_error = ""
    if should_auto_generate(context.contact):
        resolver = SummaryResolver(session, summary_client.get_summary_generator())
        try:
            await resolver.generate(owner, contact_id)
        except PersistenceError as exc:
            logger.warning("Automatic summary was not saved", extra={"contact_id": contact_id})
            summary_error = str(exc)
        context = await collector.collect(owner, contact_id)

    contact = context.contact
    profile_payload: dict[str, Any] | None = None
    if context.linked_profile is not None:
        snapshot = context.linked_profile.profile
        profile_payload = {
            "full_name": snapshot.full_name,
            "headline": snapshot.headline or "",
            "bio": snapshot.bio or "",
            "location": snapshot.location or "",
            "website": snapshot.website or "",
            "key_links": [
                {"type": link.type, "url": link.url} for link in visible_key_links(snapshot)
            ],
            "synthesized": isinstance(context.linked_profile, SynthesizedProfile),
        }

    notes = [
        {
            "id": note.id,
            "entry_date": note.entry_date,
            "context": note.context or "",
            "segments": _split_links(note.content),
            "action_text": note.action_text or "",
            "action_due_date": note.action_due_date,
            "action_completed": note.action_completed,
        }
        for note in context.notes
    ]

    contact_payload = {
        "id": contact.id,
        "full_name": contact.full_name,
        "initials": _initials(contact.full_name),
        "role": contact.role or "",
        "company": contact.company or "",
        "location": contact.location or "",
        "email": contact.email or "",
        "phone": contact.phone or "",
        "relationship_type": contact.relationship_type or "",
        "how_we_met": contact.how_we_met or "",
        "follow_up_status": contact.follow_up_status.value if contact.follow_up_status else "",
        "next_action_date": contact.next_action_date,
        "next_action_note": contact.next_action_note or "",
        "ai_summary": contact.ai_summary or "",
        "mini_description": mini_description(contact),
    }

    return templates.TemplateResponse(
        "contacts/detail.html",
        {
            "request": request,
            "contact": contact_payload,
            "profile": profile_payload,
            "work_entries": context.work_entries,
            "education_entries": context.education_entries,
            "chronicle_entries": context.chronicle_entries,
            "notes": notes,
            "summary_error": summary_error,
            "summary_url": f"/api/v1/contacts/{contact.id}/summary",
        },
    )


def _initials(name: str) -> str:
    parts = name.split()
    if len(parts) >= 2:
        return (parts[0][0] + parts[-1][0]).upper()
    return name[:2].upper()


def _split_links(text: str) -> list[dict[str, str]]:
    """Split note text into plain and link segments for rendering."""

    segments: list[dict[str, str]] = []
    position = 0
    for match in URL_PATTERN.finditer(text):
        if match.start() > position:
            segments.append({"kind": "text", "value": text[position : match.start()]})
        segments.append({"kind": "link", "value": match.group(0)})
        position = match.end()
    if position < len(text):
        segments.append({"kind": "text", "value": text[position:]})
    return segments
