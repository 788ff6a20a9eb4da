"""Pydantic schemas for résumé sections."""
from __future__ import annotations

import re
from datetime import date
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nexus_crm.models.resume import EngagementType, SkillProficiency

FUZZY_DATE_PATTERN = re.compile(r"^\d{4}(-\d{2}){0,2}$")


def _validate_fuzzy_date(value: str | None) -> str | None:
    if value is None:
        return None
    if not FUZZY_DATE_PATTERN.fullmatch(value):
        msg = "Dates must look like YYYY, YYYY-MM or YYYY-MM-DD"
        raise ValueError(msg)
    return value


class _DateRangeMixin(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool = False

    @model_validator(mode="after")
    def validate_range(self):  # noqa: ANN201
        if self.start_date and self.end_date and self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class WorkEntryWrite(_DateRangeMixin):
    title: Annotated[str, Field(min_length=1, max_length=255)]
    company: str | None = Field(default=None, max_length=255)
    engagement_type: EngagementType | None = None
    description: str | None = None
    location: str | None = Field(default=None, max_length=120)
    show_on_resume: bool = True


class WorkEntryRead(WorkEntryWrite):
    model_config = ConfigDict(from_attributes=True)

    id: int


class EducationWrite(_DateRangeMixin):
    institution: Annotated[str, Field(min_length=1, max_length=255)]
    degree: str | None = Field(default=None, max_length=255)
    field_of_study: str | None = Field(default=None, max_length=255)
    description: str | None = None


class EducationRead(EducationWrite):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ChronicleEntryWrite(BaseModel):
    type: Annotated[str, Field(min_length=1, max_length=40)]
    title: Annotated[str, Field(min_length=1, max_length=255)]
    description: str | None = None
    start_date: str
    end_date: str | None = None
    canvas_col: str | None = Field(default=None, max_length=40)
    note: str | None = None
    show_on_resume: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, value: str | None) -> str | None:
        return _validate_fuzzy_date(value)


class ChronicleEntryRead(ChronicleEntryWrite):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ProjectWrite(_DateRangeMixin):
    name: Annotated[str, Field(min_length=1, max_length=255)]
    description: str | None = None
    url: str | None = Field(default=None, max_length=500)
    role: str | None = Field(default=None, max_length=120)


class ProjectRead(ProjectWrite):
    model_config = ConfigDict(from_attributes=True)

    id: int


class SkillWrite(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=120)]
    category: str | None = Field(default=None, max_length=120)
    proficiency: SkillProficiency | None = None
    is_primary: bool = False


class SkillRead(SkillWrite):
    model_config = ConfigDict(from_attributes=True)

    id: int
