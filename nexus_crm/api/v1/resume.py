"""Résumé API routes: work, education, chronicle, projects and skills."""
from __future__ import annotations

from typing import Any, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.api.v1.common import data_response
from nexus_crm.core.db import get_session
from nexus_crm.core.identity import OwnerContext, get_owner_context
from nexus_crm.models import (
    Base,
    ChronicleEntry,
    EducationEntry,
    Project,
    Skill,
    WorkEntry,
)
from nexus_crm.schemas import (
    ChronicleEntryRead,
    ChronicleEntryWrite,
    EducationRead,
    EducationWrite,
    ProjectRead,
    ProjectWrite,
    SkillRead,
    SkillWrite,
    WorkEntryRead,
    WorkEntryWrite,
)
from nexus_crm.services.persistence import commit_or_fail

router = APIRouter(prefix="/resume", tags=["resume"])

ModelT = TypeVar("ModelT", bound=Base)

NOT_FOUND_MESSAGES = {
    WorkEntry: "Work entry not found",
    EducationEntry: "Education entry not found",
    ChronicleEntry: "Chronicle entry not found",
    Project: "Project not found",
    Skill: "Skill not found",
}


# Work history


@router.get("/work")
async def list_work_entries(
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[WorkEntryRead]]:
    """List work entries, current positions first, then newest start date."""

    result = await session.execute(
        select(WorkEntry)
        .where(WorkEntry.user_id == owner.owner_id)
        .order_by(
            WorkEntry.is_current.desc(),
            WorkEntry.start_date.is_(None),
            WorkEntry.start_date.desc(),
            WorkEntry.id,
        )
    )
    return data_response([WorkEntryRead.model_validate(row) for row in result.scalars()])


@router.post("/work", status_code=status.HTTP_201_CREATED)
async def create_work_entry(
    payload: WorkEntryWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, WorkEntryRead]:
    entry = await _create(session, owner, WorkEntry, payload, "save work entry")
    return data_response(WorkEntryRead.model_validate(entry))


@router.put("/work/{entry_id}")
async def update_work_entry(
    entry_id: int,
    payload: WorkEntryWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, WorkEntryRead]:
    entry = await _update(session, owner, WorkEntry, entry_id, payload, "save work entry")
    return data_response(WorkEntryRead.model_validate(entry))


@router.delete("/work/{entry_id}")
async def delete_work_entry(
    entry_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    await _delete(session, owner, WorkEntry, entry_id, "delete work entry")
    return data_response({"deleted": True})


# Education


@router.get("/education")
async def list_education(
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[EducationRead]]:
    result = await session.execute(
        select(EducationEntry)
        .where(EducationEntry.user_id == owner.owner_id)
        .order_by(EducationEntry.start_date.desc(), EducationEntry.id)
    )
    return data_response([EducationRead.model_validate(row) for row in result.scalars()])


@router.post("/education", status_code=status.HTTP_201_CREATED)
async def create_education(
    payload: EducationWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, EducationRead]:
    entry = await _create(session, owner, EducationEntry, payload, "save education")
    return data_response(EducationRead.model_validate(entry))


@router.put("/education/{entry_id}")
async def update_education(
    entry_id: int,
    payload: EducationWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, EducationRead]:
    entry = await _update(session, owner, EducationEntry, entry_id, payload, "save education")
    return data_response(EducationRead.model_validate(entry))


@router.delete("/education/{entry_id}")
async def delete_education(
    entry_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    await _delete(session, owner, EducationEntry, entry_id, "delete education")
    return data_response({"deleted": True})


# Chronicle


@router.get("/chronicle")
async def list_chronicle_entries(
    resume_only: bool = False,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[ChronicleEntryRead]]:
    """List chronicle entries; ``resume_only`` keeps those shown on the résumé."""

    stmt = select(ChronicleEntry).where(ChronicleEntry.user_id == owner.owner_id)
    if resume_only:
        stmt = stmt.where(ChronicleEntry.show_on_resume.is_(True))
    result = await session.execute(
        stmt.order_by(ChronicleEntry.start_date.desc(), ChronicleEntry.id)
    )
    return data_response([ChronicleEntryRead.model_validate(row) for row in result.scalars()])


@router.post("/chronicle", status_code=status.HTTP_201_CREATED)
async def create_chronicle_entry(
    payload: ChronicleEntryWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ChronicleEntryRead]:
    entry = await _create(session, owner, ChronicleEntry, payload, "save chronicle entry")
    return data_response(ChronicleEntryRead.model_validate(entry))


@router.put("/chronicle/{entry_id}")
async def update_chronicle_entry(
    entry_id: int,
    payload: ChronicleEntryWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ChronicleEntryRead]:
    entry = await _update(
        session, owner, ChronicleEntry, entry_id, payload, "save chronicle entry"
    )
    return data_response(ChronicleEntryRead.model_validate(entry))


@router.delete("/chronicle/{entry_id}")
async def delete_chronicle_entry(
    entry_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    await _delete(session, owner, ChronicleEntry, entry_id, "delete chronicle entry")
    return data_response({"deleted": True})


# Projects


@router.get("/projects")
async def list_projects(
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[ProjectRead]]:
    result = await session.execute(
        select(Project)
        .where(Project.user_id == owner.owner_id)
        .order_by(Project.is_current.desc(), Project.start_date.desc(), Project.id)
    )
    return data_response([ProjectRead.model_validate(row) for row in result.scalars()])


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ProjectRead]:
    project = await _create(session, owner, Project, payload, "save project")
    return data_response(ProjectRead.model_validate(project))


@router.put("/projects/{project_id}")
async def update_project(
    project_id: int,
    payload: ProjectWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, ProjectRead]:
    project = await _update(session, owner, Project, project_id, payload, "save project")
    return data_response(ProjectRead.model_validate(project))


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    await _delete(session, owner, Project, project_id, "delete project")
    return data_response({"deleted": True})


# Skills


@router.get("/skills")
async def list_skills(
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, list[SkillRead]]:
    result = await session.execute(
        select(Skill)
        .where(Skill.user_id == owner.owner_id)
        .order_by(Skill.is_primary.desc(), Skill.name)
    )
    return data_response([SkillRead.model_validate(row) for row in result.scalars()])


@router.post("/skills", status_code=status.HTTP_201_CREATED)
async def create_skill(
    payload: SkillWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, SkillRead]:
    skill = await _create(session, owner, Skill, payload, "save skill")
    return data_response(SkillRead.model_validate(skill))


@router.put("/skills/{skill_id}")
async def update_skill(
    skill_id: int,
    payload: SkillWrite,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, SkillRead]:
    skill = await _update(session, owner, Skill, skill_id, payload, "save skill")
    return data_response(SkillRead.model_validate(skill))


@router.delete("/skills/{skill_id}")
async def delete_skill(
    skill_id: int,
    owner: OwnerContext = Depends(get_owner_context),
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, bool]]:
    await _delete(session, owner, Skill, skill_id, "delete skill")
    return data_response({"deleted": True})


async def _create(
    session: AsyncSession,
    owner: OwnerContext,
    model: type[ModelT],
    payload: BaseModel,
    operation: str,
) -> ModelT:
    row = model(user_id=owner.owner_id, **payload.model_dump())
    session.add(row)
    await commit_or_fail(session, operation)
    await session.refresh(row)
    return row


async def _update(
    session: AsyncSession,
    owner: OwnerContext,
    model: type[ModelT],
    row_id: int,
    payload: BaseModel,
    operation: str,
) -> ModelT:
    row = await _get_owned_or_404(session, owner, model, row_id)
    values: dict[str, Any] = payload.model_dump()
    for field, value in values.items():
        setattr(row, field, value)
    await commit_or_fail(session, operation)
    await session.refresh(row)
    return row


async def _delete(
    session: AsyncSession,
    owner: OwnerContext,
    model: type[ModelT],
    row_id: int,
    operation: str,
) -> None:
    row = await _get_owned_or_404(session, owner, model, row_id)
    await session.delete(row)
    await commit_or_fail(session, operation)


async def _get_owned_or_404(
    session: AsyncSession, owner: OwnerContext, model: type[ModelT], row_id: int
) -> ModelT:
    row = await session.get(model, row_id)
    if row is None or row.user_id != owner.owner_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGES[model]
        )
    return row
