"""Pydantic schemas for contact resources."""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
)

from nexus_crm.models.contact import FollowUpStatus

PhoneNumber = Annotated[
    str, Field(min_length=7, max_length=32, pattern=r"^[+0-9().\- ]+$")
]
FullName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)
]


class ContactBase(BaseModel):
    email: EmailStr | None = None
    phone: PhoneNumber | None = None
    company: str | None = Field(default=None, max_length=120)
    role: str | None = Field(default=None, max_length=120)
    location: str | None = Field(default=None, max_length=120)
    website: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=500)
    relationship_type: str | None = Field(default=None, max_length=60)
    how_we_met: str | None = None
    met_date: date | None = None
    follow_up_status: FollowUpStatus | None = None
    last_contact_date: date | None = None
    next_action_date: date | None = None
    next_action_note: str | None = None
    linked_profile_id: str | None = Field(default=None, max_length=64)

    @field_validator(
        "company",
        "role",
        "location",
        "website",
        "avatar_url",
        "relationship_type",
        "how_we_met",
        "next_action_note",
        "linked_profile_id",
    )
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class ContactCreate(ContactBase):
    full_name: FullName


class ContactUpdate(ContactBase):
    full_name: FullName | None = None
    ai_summary: str | None = None
    mini_summary: str | None = Field(default=None, max_length=255)


class PendingAction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    note_id: int
    action_text: str
    action_due_date: date | None = None


class ContactRead(ContactBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    full_name: str
    ai_summary: str | None = None
    mini_summary: str | None = None
    created_at: datetime
    updated_at: datetime


class ContactListItem(BaseModel):
    id: int
    full_name: str
    company: str | None = None
    role: str | None = None
    relationship_type: str | None = None
    mini_description: str
    linked_profile_id: str | None = None
    pending_action: PendingAction | None = None
    updated_at: datetime
    created_at: datetime
