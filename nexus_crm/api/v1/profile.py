"""Profile API routes for the current user."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.api.v1.common import data_response
from nexus_crm.core.db import get_session
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.models import (
    ChronicleEntry,
    EducationEntry,
    Profile,
    Project,
    Skill,
    WorkEntry,
)
from nexus_crm.schemas import ProfileRead, ProfileUpsert
from nexus_crm.services.persistence import commit_or_fail

router = APIRouter(prefix="/profile", tags=["profile"])

RESUME_MODELS = (WorkEntry, EducationEntry, ChronicleEntry, Project, Skill)


@router.get("")
async def retrieve_profile(
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ProfileRead]:
    """Return the caller's profile."""

    profile = await session.get(Profile, owner.owner_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return data_response(ProfileRead.model_validate(profile))


@router.put("")
async def upsert_profile(
    payload: ProfileUpsert,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ProfileRead]:
    """Create or update the caller's profile."""

    updates = payload.model_dump(exclude_unset=True, mode="json")
    profile = await session.get(Profile, owner.owner_id)
    if profile is None:
        if not updates.get("full_name"):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="full_name is required when creating a profile",
            )
        profile = Profile(id=owner.owner_id, **updates)
        session.add(profile)
    else:
        if updates.get("full_name") is None:
            updates.pop("full_name", None)
        for field, value in updates.items():
            setattr(profile, field, value)

    await commit_or_fail(session, "save profile")
    await session.refresh(profile)
    return data_response(ProfileRead.model_validate(profile))


@router.delete("")
async def delete_profile(
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    """Delete the caller's profile and résumé.

    Contacts other users hold that link here keep their own fields and fall
    back to a synthesized profile.
    """

    profile = await session.get(Profile, owner.owner_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    for model in RESUME_MODELS:
        await session.execute(delete(model).where(model.user_id == owner.owner_id))
    await session.delete(profile)
    await commit_or_fail(session, "delete profile")
    return data_response({"deleted": True})
