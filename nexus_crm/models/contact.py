"""Contact model definition."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Enum as SQLEnum, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nexus_crm.models.base import Base

if TYPE_CHECKING:
    from nexus_crm.models.note import ContactNote


class FollowUpStatus(str, Enum):
    """Workflow state of the next follow-up with a contact."""

    NONE = "None"
    PENDING = "Pending"
    SCHEDULED = "Scheduled"
    OVERDUE = "Overdue"


class Contact(Base):
    """A person tracked by one owner."""

    __tablename__ = "contacts"
    __table_args__ = (Index("ix_contacts_owner_id", "owner_id"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(32))
    company: Mapped[str | None] = mapped_column(String(120))
    role: Mapped[str | None] = mapped_column(String(120))
    location: Mapped[str | None] = mapped_column(String(120))
    website: Mapped[str | None] = mapped_column(String(255))
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    relationship_type: Mapped[str | None] = mapped_column(String(60))
    how_we_met: Mapped[str | None] = mapped_column(Text())
    met_date: Mapped[date | None] = mapped_column(Date())
    follow_up_status: Mapped[FollowUpStatus | None] = mapped_column(
        SQLEnum(
            FollowUpStatus,
            name="follow_up_status",
            values_callable=lambda members: [member.value for member in members],
        )
    )
    last_contact_date: Mapped[date | None] = mapped_column(Date())
    next_action_date: Mapped[date | None] = mapped_column(Date())
    next_action_note: Mapped[str | None] = mapped_column(Text())
    ai_summary: Mapped[str | None] = mapped_column(Text())
    mini_summary: Mapped[str | None] = mapped_column(String(255))
    # Reference to another user's profile; never a foreign key so the linked
    # user's data can disappear without touching this row.
    linked_profile_id: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    notes: Mapped[list["ContactNote"]] = relationship(
        back_populates="contact", cascade="all, delete-orphan"
    )
