"""Produce and persist a contact's dossier summary."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.core.identity import OwnerContext
from nexus_crm.core.summary_client import GenerationUnavailableError, SummaryGenerator
from nexus_crm.models import Contact
from nexus_crm.services.contact_display import clean, describe_contact, role_at_company
from nexus_crm.services.context_collector import ContextCollector
from nexus_crm.services.narrative import compile_narrative
from nexus_crm.services.persistence import update_first_accepted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SummaryOutcome:
    contact_id: int
    ai_summary: str
    mini_summary: str | None
    generated: bool


def build_fallback_summary(contact: Contact) -> str:
    """Deterministic summary from structured fields alone.

    Name, role/company and location are joined with ". " and closed with a
    single period; how-we-met and relationship type follow as sentences of
    their own. With only a name this yields ``"{name}."``.
    """

    fragments = [
        contact.full_name,
        role_at_company(contact.role, contact.company),
        contact.location,
    ]
    cleaned = [fragment.rstrip(".") for fragment in map(clean, fragments) if fragment]
    text = ". ".join(part for part in cleaned if part) + "."

    how_we_met = clean(contact.how_we_met)
    if how_we_met:
        text += f" Connection originated via {how_we_met.rstrip('.')}."
    relationship = clean(contact.relationship_type)
    if relationship:
        text += f" Classified as {relationship.lower().rstrip('.')}."
    return text


def should_auto_generate(contact: Contact) -> bool:
    """Linked contacts that have never had a summary get one on first view."""

    return contact.linked_profile_id is not None and not clean(contact.ai_summary)


class SummaryResolver:
    """Collect, compile, generate (or fall back) and persist in one pass."""

    def __init__(self, session: AsyncSession, generator: SummaryGenerator) -> None:
        self.session = session
        self.generator = generator

    async def generate(self, owner: OwnerContext, contact_id: int) -> SummaryOutcome:
        context = await ContextCollector(self.session).collect(owner, contact_id)
        contact = context.contact
        previous_mini = contact.mini_summary
        narrative = compile_narrative(context)

        try:
            result = await self.generator.generate(narrative)
        except GenerationUnavailableError as exc:
            logger.warning(
                "Summary generation unavailable, using fallback",
                extra={"contact_id": contact_id, "reason": str(exc)},
            )
            summary = build_fallback_summary(contact)
            mini = describe_contact(contact) or None
            generated = False
        else:
            summary, mini, generated = result.summary, result.oneliner, True

        variants = [{"ai_summary": summary}]
        if mini:
            variants.insert(0, {"ai_summary": summary, "mini_summary": mini})

        stored = await update_first_accepted(
            self.session,
            Contact,
            (Contact.id == contact_id, Contact.owner_id == owner.owner_id),
            variants,
            operation="save summary",
        )
        logger.info(
            "Contact summary saved",
            extra={"contact_id": contact_id, "generated": generated},
        )
        return SummaryOutcome(
            contact_id=contact_id,
            ai_summary=summary,
            mini_summary=stored.get("mini_summary", previous_mini),
            generated=generated,
        )
