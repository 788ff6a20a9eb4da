"""Follow-up action API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.api.v1.common import data_response
from nexus_crm.core.db import get_session
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.models import Contact, ContactNote
from nexus_crm.schemas import ActionRead

router = APIRouter(prefix="/actions", tags=["actions"])


@router.get("")
async def list_actions(
    completed: bool | None = False,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[ActionRead]]:
    """List note actions across all contacts, soonest due first."""

    stmt = (
        select(ContactNote, Contact.full_name)
        .join(Contact, Contact.id == ContactNote.contact_id)
        .where(
            ContactNote.owner_id == owner.owner_id,
            Contact.owner_id == owner.owner_id,
            ContactNote.action_text.is_not(None),
        )
    )
    if completed is not None:
        stmt = stmt.where(ContactNote.action_completed.is_(completed))
    stmt = stmt.order_by(
        ContactNote.action_due_date.is_(None),
        ContactNote.action_due_date,
        ContactNote.id,
    )

    result = await session.execute(stmt)
    payload = [
        ActionRead(
            note_id=note.id,
            contact_id=note.contact_id,
            contact_name=contact_name,
            action_text=note.action_text or "",
            action_due_date=note.action_due_date,
            action_completed=note.action_completed,
        )
        for note, contact_name in result.all()
    ]
    return data_response(payload)
