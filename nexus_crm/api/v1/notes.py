"""Contact note API routes."""
from __future__ import annotations

from datetime import UTC, date, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.api.v1.common import data_response, get_contact_or_404
from nexus_crm.core.db import get_session
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.models import Contact, ContactNote
from nexus_crm.schemas import NoteCreate, NoteRead, NoteUpdate
from nexus_crm.services.persistence import commit_or_fail

router = APIRouter(tags=["notes"])


@router.post("/contacts/{contact_id}/notes", status_code=status.HTTP_201_CREATED)
async def create_note(
    contact_id: int,
    payload: NoteCreate,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, NoteRead]:
    """Attach a note to one of the caller's contacts."""

    contact = await get_contact_or_404(session, owner, contact_id)
    note = ContactNote(
        contact_id=contact.id,
        owner_id=owner.owner_id,
        content=payload.content.strip(),
        context=payload.context,
        entry_date=payload.entry_date or date.today(),
        action_text=payload.action_text,
        action_due_date=payload.action_due_date,
        action_completed=False,
    )
    session.add(note)
    _touch_contact(contact)
    await commit_or_fail(session, "add note")
    await session.refresh(note)
    return data_response(NoteRead.model_validate(note))


@router.get("/contacts/{contact_id}/notes")
async def list_notes(
    contact_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[NoteRead]]:
    """List a contact's notes, most recent entry date first."""

    contact = await get_contact_or_404(session, owner, contact_id)
    result = await session.execute(
        select(ContactNote)
        .where(ContactNote.contact_id == contact.id, ContactNote.owner_id == owner.owner_id)
        .order_by(ContactNote.entry_date.desc(), ContactNote.id)
    )
    payload = [NoteRead.model_validate(note) for note in result.scalars().all()]
    return data_response(payload)


@router.put("/notes/{note_id}")
async def update_note(
    note_id: int,
    payload: NoteUpdate,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, NoteRead]:
    """Edit any field of a note in place, including action completion."""

    note = await _get_note_or_404(session, owner, note_id)
    updates = payload.model_dump(exclude_unset=True)
    for required in ("content", "entry_date", "action_completed"):
        if required in updates and updates[required] is None:
            updates.pop(required)
    if "action_text" in updates and not (updates["action_text"] or "").strip():
        updates["action_text"] = None
        updates["action_due_date"] = None
        updates["action_completed"] = False
    action_text = updates.get("action_text", note.action_text)
    action_due_date = updates.get("action_due_date", note.action_due_date)
    if action_text is None and action_due_date is not None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="An action due date requires action text",
        )

    for field, value in updates.items():
        setattr(note, field, value)

    contact = await session.get(Contact, note.contact_id)
    if contact is not None:
        _touch_contact(contact)
    await commit_or_fail(session, "save note")
    await session.refresh(note)
    return data_response(NoteRead.model_validate(note))


@router.delete("/notes/{note_id}")
async def delete_note(
    note_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    """Delete a note; nothing of it is retained."""

    note = await _get_note_or_404(session, owner, note_id)
    contact = await session.get(Contact, note.contact_id)
    await session.delete(note)
    if contact is not None:
        _touch_contact(contact)
    await commit_or_fail(session, "delete note")
    return data_response({"deleted": True})


async def _get_note_or_404(
    session: AsyncSession, owner: OwnerContext, note_id: int
) -> ContactNote:
    result = await session.execute(
        select(ContactNote).where(
            ContactNote.id == note_id, ContactNote.owner_id == owner.owner_id
        )
    )
    note = result.scalar_one_or_none()
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return note


def _touch_contact(contact: Contact) -> None:
    """Bump ``updated_at`` so recency ordering follows note activity."""

    contact.updated_at = datetime.now(UTC).replace(tzinfo=None)
