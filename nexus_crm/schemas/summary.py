"""Pydantic schemas for the dossier and summary endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field

from nexus_crm.schemas.profile import KeyLink
from nexus_crm.schemas.resume import ChronicleEntryRead, EducationRead, WorkEntryRead


class LinkedProfileRead(BaseModel):
    full_name: str
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    avatar_url: str | None = None
    key_links: list[KeyLink] = Field(default_factory=list)
    synthesized: bool = False


class NarrativeRead(BaseModel):
    facts: str
    notes: str
    urls: list[str]


class DossierRead(BaseModel):
    contact_id: int
    linked_profile: LinkedProfileRead | None = None
    work_entries: list[WorkEntryRead] = Field(default_factory=list)
    chronicle_entries: list[ChronicleEntryRead] = Field(default_factory=list)
    education_entries: list[EducationRead] = Field(default_factory=list)
    narrative: NarrativeRead


class SummaryRead(BaseModel):
    contact_id: int
    ai_summary: str
    mini_summary: str | None = None


class SummarizeRequest(BaseModel):
    facts: str = ""
    notes: str = ""
    urls: list[str] = Field(default_factory=list, max_length=50)
    prompt: str | None = None


class SummarizeResult(BaseModel):
    summary: str
    oneliner: str = ""
