"""Résumé models: work history, education, chronicle, projects and skills."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from nexus_crm.models.base import Base


class EngagementType(str, Enum):
    """How a work entry was engaged."""

    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    FREELANCE = "freelance"
    CONSULTING = "consulting"
    VOLUNTEER = "volunteer"
    INTERNSHIP = "internship"
    PROJECT_BASED = "project-based"


class SkillProficiency(str, Enum):
    """Self-assessed skill level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


def _values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class WorkEntry(Base):
    """A position held by a user."""

    __tablename__ = "work_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str | None] = mapped_column(String(255))
    engagement_type: Mapped[EngagementType | None] = mapped_column(
        SQLEnum(EngagementType, name="engagement_type", values_callable=_values)
    )
    start_date: Mapped[date | None] = mapped_column(Date())
    end_date: Mapped[date | None] = mapped_column(Date())
    is_current: Mapped[bool] = mapped_column(
        Boolean(), default=False, server_default=text("0"), nullable=False
    )
    description: Mapped[str | None] = mapped_column(Text())
    location: Mapped[str | None] = mapped_column(String(120))
    show_on_resume: Mapped[bool] = mapped_column(
        Boolean(), default=True, server_default=text("1"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )


class EducationEntry(Base):
    """A course of study completed or in progress."""

    __tablename__ = "education"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    institution: Mapped[str] = mapped_column(String(255), nullable=False)
    degree: Mapped[str | None] = mapped_column(String(255))
    field_of_study: Mapped[str | None] = mapped_column(String(255))
    start_date: Mapped[date | None] = mapped_column(Date())
    end_date: Mapped[date | None] = mapped_column(Date())
    is_current: Mapped[bool] = mapped_column(
        Boolean(), default=False, server_default=text("0"), nullable=False
    )
    description: Mapped[str | None] = mapped_column(Text())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )


class ChronicleEntry(Base):
    """A timeline item such as a project, milestone or personal event.

    Dates are free text (``YYYY`` or ``YYYY-MM`` are both common) because
    chronicle entries may only be known to the month or year.
    """

    __tablename__ = "chronicle_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)
    end_date: Mapped[str | None] = mapped_column(String(10))
    canvas_col: Mapped[str | None] = mapped_column(String(40))
    note: Mapped[str | None] = mapped_column(Text())
    show_on_resume: Mapped[bool] = mapped_column(
        Boolean(), default=False, server_default=text("0"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )


class Project(Base):
    """A project a user worked on."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    url: Mapped[str | None] = mapped_column(String(500))
    role: Mapped[str | None] = mapped_column(String(120))
    start_date: Mapped[date | None] = mapped_column(Date())
    end_date: Mapped[date | None] = mapped_column(Date())
    is_current: Mapped[bool] = mapped_column(
        Boolean(), default=False, server_default=text("0"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )


class Skill(Base):
    """A skill listed on a user's résumé."""

    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[str | None] = mapped_column(String(120))
    proficiency: Mapped[SkillProficiency | None] = mapped_column(
        SQLEnum(SkillProficiency, name="skill_proficiency", values_callable=_values)
    )
    is_primary: Mapped[bool] = mapped_column(
        Boolean(), default=False, server_default=text("0"), nullable=False
    )
