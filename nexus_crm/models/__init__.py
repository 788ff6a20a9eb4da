"""Database models package for the personal CRM."""

from .base import Base
from .contact import Contact, FollowUpStatus
from .note import ContactNote
from .profile import Profile
from .resume import (
    ChronicleEntry,
    EducationEntry,
    EngagementType,
    Project,
    Skill,
    SkillProficiency,
    WorkEntry,
)

__all__ = [
    "Base",
    "ChronicleEntry",
    "Contact",
    "ContactNote",
    "EducationEntry",
    "EngagementType",
    "FollowUpStatus",
    "Profile",
    "Project",
    "Skill",
    "SkillProficiency",
    "WorkEntry",
]
