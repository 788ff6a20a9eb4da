"""Pydantic schemas for contact notes."""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

NoteContent = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class NoteBase(BaseModel):
    context: str | None = Field(default=None, max_length=120)
    action_text: str | None = None
    action_due_date: date | None = None


class NoteCreate(NoteBase):
    content: NoteContent
    entry_date: date | None = None

    @model_validator(mode="after")
    def validate_action(self) -> "NoteCreate":
        if self.action_text is not None and not self.action_text.strip():
            self.action_text = None
        if self.action_text is None and self.action_due_date is not None:
            msg = "An action due date requires action text"
            raise ValueError(msg)
        return self


class NoteUpdate(NoteBase):
    content: NoteContent | None = None
    entry_date: date | None = None
    action_completed: bool | None = None


class NoteRead(NoteBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int
    content: str
    entry_date: date
    action_completed: bool
    created_at: datetime


class ActionRead(BaseModel):
    note_id: int
    contact_id: int
    contact_name: str
    action_text: str
    action_due_date: date | None = None
    action_completed: bool
