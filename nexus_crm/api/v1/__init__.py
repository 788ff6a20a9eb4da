"""Version 1 API routes for the personal CRM."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from nexus_crm.api.v1.actions import router as actions_router
from nexus_crm.api.v1.ai import router as ai_router
from nexus_crm.api.v1.contacts import router as contacts_router
from nexus_crm.api.v1.notes import router as notes_router
from nexus_crm.api.v1.profile import router as profile_router
from nexus_crm.api.v1.resume import router as resume_router
from nexus_crm.api.v1.summaries import router as summaries_router
from nexus_crm.core.config import Settings, get_settings

router = APIRouter()
router.include_router(contacts_router)
router.include_router(summaries_router)
router.include_router(notes_router)
router.include_router(actions_router)
router.include_router(profile_router)
router.include_router(resume_router)
router.include_router(ai_router)


@router.get("/health", tags=["health"])
async def health_check(settings: Settings = Depends(get_settings)) -> dict[str, dict[str, str]]:
    """Report the service health information."""
    return {"data": {"status": "ok", "version": settings.version}}
