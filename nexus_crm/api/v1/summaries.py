"""Dossier and summary generation API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.api.v1.common import data_response
from nexus_crm.core import summary_client
from nexus_crm.core.db import get_session
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.schemas import (
    ChronicleEntryRead,
    DossierRead,
    EducationRead,
    KeyLink,
    LinkedProfileRead,
    NarrativeRead,
    SummaryRead,
    WorkEntryRead,
)
from nexus_crm.services.context_collector import (
    ContextCollector,
    DossierContext,
    SynthesizedProfile,
)
from nexus_crm.services.narrative import compile_narrative
from nexus_crm.services.summary_resolver import SummaryResolver

router = APIRouter(prefix="/contacts", tags=["dossier"])


@router.get("/{contact_id}/dossier")
async def retrieve_dossier(
    contact_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, DossierRead]:
    """Return everything known about a contact plus the compiled narrative."""

    context = await ContextCollector(session).collect(owner, contact_id)
    return data_response(serialize_dossier(context))


@router.post("/{contact_id}/summary")
async def generate_summary(
    contact_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, SummaryRead]:
    """Generate (or regenerate) and store the contact's dossier summary."""

    resolver = SummaryResolver(session, summary_client.get_summary_generator())
    outcome = await resolver.generate(owner, contact_id)
    return data_response(
        SummaryRead(
            contact_id=outcome.contact_id,
            ai_summary=outcome.ai_summary,
            mini_summary=outcome.mini_summary,
        )
    )


def serialize_dossier(context: DossierContext) -> DossierRead:
    linked_profile = None
    if context.linked_profile is not None:
        snapshot = context.linked_profile.profile
        linked_profile = LinkedProfileRead(
            full_name=snapshot.full_name,
            headline=snapshot.headline,
            bio=snapshot.bio,
            location=snapshot.location,
            website=snapshot.website,
            avatar_url=snapshot.avatar_url,
            key_links=[
                KeyLink(type=link.type, url=link.url, visible=link.visible)
                for link in snapshot.key_links
            ],
            synthesized=isinstance(context.linked_profile, SynthesizedProfile),
        )

    narrative = compile_narrative(context)
    return DossierRead(
        contact_id=context.contact.id,
        linked_profile=linked_profile,
        work_entries=[WorkEntryRead.model_validate(row) for row in context.work_entries],
        chronicle_entries=[
            ChronicleEntryRead.model_validate(row) for row in context.chronicle_entries
        ],
        education_entries=[
            EducationRead.model_validate(row) for row in context.education_entries
        ],
        narrative=NarrativeRead(
            facts=narrative.facts, notes=narrative.notes, urls=narrative.urls
        ),
    )
