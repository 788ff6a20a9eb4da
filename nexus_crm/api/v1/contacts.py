"""Contacts API routes."""
from __future__ import annotations

from typing import Literal, Sequence

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.api.v1.common import data_response, ensure_profile_exists, get_contact_or_404
from nexus_crm.core.db import get_session
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.models import Contact, ContactNote
from nexus_crm.schemas import (
    ContactCreate,
    ContactListItem,
    ContactRead,
    ContactUpdate,
    PendingAction,
)
from nexus_crm.services.contact_display import last_name_key, mini_description
from nexus_crm.services.persistence import commit_or_fail

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contact(
    payload: ContactCreate,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ContactRead]:
    """Create a new contact owned by the caller."""

    if payload.linked_profile_id is not None:
        await ensure_profile_exists(session, payload.linked_profile_id)

    contact = Contact(owner_id=owner.owner_id, **payload.model_dump())
    session.add(contact)
    await commit_or_fail(session, "save contact")
    await session.refresh(contact)
    return data_response(ContactRead.model_validate(contact))


@router.get("")
async def list_contacts(
    q: str | None = None,
    letter: str | None = Query(None, min_length=1, max_length=1),
    sort: Literal["alpha", "recent"] = "alpha",
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[ContactListItem]]:
    """List the caller's contacts with search, initial filter and sorting."""

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
    contacts = list(result.scalars().all())

    if letter:
        initial = letter.lower()
        contacts = [c for c in contacts if last_name_key(c.full_name).startswith(initial)]

    if sort == "recent":
        contacts.sort(key=lambda c: c.updated_at or c.created_at, reverse=True)
    else:
        contacts.sort(key=lambda c: (last_name_key(c.full_name), c.full_name.lower()))

    offset = (page - 1) * size
    page_contacts = contacts[offset : offset + size]
    actions = await _load_pending_actions(session, owner, [c.id for c in page_contacts])
    payload = [
        ContactListItem(
            id=contact.id,
            full_name=contact.full_name,
            company=contact.company,
            role=contact.role,
            relationship_type=contact.relationship_type,
            mini_description=mini_description(contact),
            linked_profile_id=contact.linked_profile_id,
            pending_action=actions.get(contact.id),
            updated_at=contact.updated_at,
            created_at=contact.created_at,
        )
        for contact in page_contacts
    ]
    return data_response(payload)


@router.get("/{contact_id}")
async def retrieve_contact(
    contact_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ContactRead]:
    """Retrieve a single contact by identifier."""

    contact = await get_contact_or_404(session, owner, contact_id)
    return data_response(ContactRead.model_validate(contact))


@router.put("/{contact_id}")
async def update_contact(
    contact_id: int,
    payload: ContactUpdate,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ContactRead]:
    """Update the provided contact; ``linked_profile_id: null`` unlinks it."""

    contact = await get_contact_or_404(session, owner, contact_id)
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("full_name") is None:
        updates.pop("full_name", None)
    linked_profile_id = updates.get("linked_profile_id")
    if linked_profile_id is not None and linked_profile_id != contact.linked_profile_id:
        await ensure_profile_exists(session, linked_profile_id)

    for field, value in updates.items():
        setattr(contact, field, value)

    await commit_or_fail(session, "save contact")
    await session.refresh(contact)
    return data_response(ContactRead.model_validate(contact))


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    """Delete the contact and its notes; a linked profile is left untouched."""

    contact = await get_contact_or_404(session, owner, contact_id)
    await session.delete(contact)
    await commit_or_fail(session, "delete contact")
    return data_response({"deleted": True})


async def _load_pending_actions(
    session: AsyncSession, owner: OwnerContext, contact_ids: Sequence[int]
) -> dict[int, PendingAction]:
    if not contact_ids:
        return {}

    result = await session.execute(
        select(ContactNote)
        .where(
            ContactNote.owner_id == owner.owner_id,
            ContactNote.contact_id.in_(contact_ids),
            ContactNote.action_completed.is_(False),
            ContactNote.action_text.is_not(None),
        )
        .order_by(
            ContactNote.action_due_date.is_(None),
            ContactNote.action_due_date,
            ContactNote.id,
        )
    )
    actions: dict[int, PendingAction] = {}
    for note in result.scalars():
        actions.setdefault(
            note.contact_id,
            PendingAction(
                note_id=note.id,
                action_text=note.action_text or "",
                action_due_date=note.action_due_date,
            ),
        )
    return actions
