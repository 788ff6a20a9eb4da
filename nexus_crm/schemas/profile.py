"""Pydantic schemas for user profiles."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from nexus_crm.schemas.contact import FullName


class KeyLink(BaseModel):
    type: Annotated[str, Field(min_length=1, max_length=40)]
    url: str = ""
    visible: bool = True

    @field_validator("url")
    @classmethod
    def strip_url(cls, value: str) -> str:
        return value.strip()


class ProfileBase(BaseModel):
    email: EmailStr | None = None
    headline: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    location: str | None = Field(default=None, max_length=120)
    website: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=500)
    key_links: list[KeyLink] | None = Field(default=None, max_length=30)


class ProfileUpsert(ProfileBase):
    full_name: FullName | None = None


class ProfileRead(ProfileBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    created_at: datetime
    updated_at: datetime
