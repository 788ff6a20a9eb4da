"""Pydantic schemas for the personal CRM."""

from .contact import ContactCreate, ContactListItem, ContactRead, ContactUpdate, PendingAction
from .note import ActionRead, NoteCreate, NoteRead, NoteUpdate
from .profile import KeyLink, ProfileRead, ProfileUpsert
from .resume import (
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
from .summary import (
    DossierRead,
    LinkedProfileRead,
    NarrativeRead,
    SummarizeRequest,
    SummarizeResult,
    SummaryRead,
)

__all__ = [
    "ActionRead",
    "ChronicleEntryRead",
    "ChronicleEntryWrite",
    "ContactCreate",
    "ContactListItem",
    "ContactRead",
    "ContactUpdate",
    "DossierRead",
    "EducationRead",
    "EducationWrite",
    "KeyLink",
    "LinkedProfileRead",
    "NarrativeRead",
    "NoteCreate",
    "NoteRead",
    "NoteUpdate",
    "PendingAction",
    "ProfileRead",
    "ProfileUpsert",
    "ProjectRead",
    "ProjectWrite",
    "SkillRead",
    "SkillWrite",
    "SummarizeRequest",
    "SummarizeResult",
    "SummaryRead",
    "WorkEntryRead",
    "WorkEntryWrite",
]
