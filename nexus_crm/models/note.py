"""Contact note model definition."""
from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nexus_crm.models.base import Base

if TYPE_CHECKING:
    from nexus_crm.models.contact import Contact


class ContactNote(Base):
    """A dated note about a contact, optionally carrying one follow-up action."""

    __tablename__ = "contact_notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    contact_id: Mapped[int] = mapped_column(
        ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text(), nullable=False)
    context: Mapped[str | None] = mapped_column(String(120))
    entry_date: Mapped[date] = mapped_column(Date(), nullable=False)
    action_text: Mapped[str | None] = mapped_column(Text())
    action_due_date: Mapped[date | None] = mapped_column(Date())
    action_completed: Mapped[bool] = mapped_column(
        Boolean(), default=False, server_default=text("0"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )

    contact: Mapped["Contact"] = relationship(back_populates="notes")
