"""Common helpers for API responses and owner-scoped lookups."""
from __future__ import annotations

from typing import TypeVar

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.core.identity import OwnerContext
from nexus_crm.models import Contact, Profile

T = TypeVar("T")


def data_response(payload: T) -> dict[str, T]:
    """Wrap a payload in the standard data envelope."""

    return {"data": payload}


async def get_contact_or_404(
    session: AsyncSession, owner: OwnerContext, contact_id: int
) -> Contact:
    """Return the owner's contact; another owner's contact is reported as missing."""

    result = await session.execute(
        select(Contact).where(Contact.id == contact_id, Contact.owner_id == owner.owner_id)
    )
    contact = result.scalar_one_or_none()
    if contact is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return contact


async def ensure_profile_exists(session: AsyncSession, profile_id: str) -> None:
    if await session.get(Profile, profile_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Linked profile not found"
        )
