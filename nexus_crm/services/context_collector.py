"""Collect every record needed to narrate a single contact."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_crm.core.errors import ContactNotFoundError
from nexus_crm.core.identity import OwnerContext
from nexus_crm.models import (
    ChronicleEntry,
    Contact,
    ContactNote,
    EducationEntry,
    Profile,
    WorkEntry,
)
from nexus_crm.services.contact_display import clean, role_at_company

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class KeyLinkSnapshot:
    type: str
    url: str
    visible: bool = True


@dataclass(frozen=True)
class ProfileSnapshot:
    """Read-only view of a linked user's profile at collection time."""

    full_name: str
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    avatar_url: str | None = None
    key_links: tuple[KeyLinkSnapshot, ...] = ()

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSnapshot":
        return cls(
            full_name=profile.full_name,
            headline=profile.headline,
            bio=profile.bio,
            location=profile.location,
            website=profile.website,
            avatar_url=profile.avatar_url,
            key_links=_parse_key_links(profile.key_links),
        )

    @classmethod
    def from_contact(cls, contact: Contact) -> "ProfileSnapshot":
        return cls(
            full_name=contact.full_name,
            headline=role_at_company(contact.role, contact.company),
            location=clean(contact.location),
        )


@dataclass(frozen=True)
class FetchedProfile:
    """The linked profile row was found and read live."""

    profile: ProfileSnapshot


@dataclass(frozen=True)
class SynthesizedProfile:
    """The link exists but the profile row is gone; stand-in built from the contact."""

    profile: ProfileSnapshot


LinkedProfileSource = FetchedProfile | SynthesizedProfile


@dataclass
class DossierContext:
    contact: Contact
    notes: list[ContactNote] = field(default_factory=list)
    linked_profile: LinkedProfileSource | None = None
    work_entries: list[WorkEntry] = field(default_factory=list)
    chronicle_entries: list[ChronicleEntry] = field(default_factory=list)
    education_entries: list[EducationEntry] = field(default_factory=list)


class ContextCollector:
    """Read a contact, its notes and its linked profile history.

    Only the contact lookup is fatal. Every other read degrades to an empty
    or synthesized value so the dossier can always be rendered.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def collect(self, owner: OwnerContext, contact_id: int) -> DossierContext:
        contact = await self.fetch_contact(owner, contact_id)
        context = DossierContext(contact=contact)
        context.notes = await self._load_section(
            "notes", contact.id, self.fetch_notes, owner, contact.id
        )

        profile_id = contact.linked_profile_id
        if profile_id is None:
            return context

        context.linked_profile = await self.resolve_linked_profile(contact)
        context.work_entries = await self._load_section(
            "work", contact.id, self.fetch_work_entries, profile_id
        )
        context.chronicle_entries = await self._load_section(
            "chronicle", contact.id, self.fetch_chronicle_entries, profile_id
        )
        context.education_entries = await self._load_section(
            "education", contact.id, self.fetch_education_entries, profile_id
        )
        return context

    async def fetch_contact(self, owner: OwnerContext, contact_id: int) -> Contact:
        result = await self.session.execute(
            select(Contact)
            .where(Contact.id == contact_id, Contact.owner_id == owner.owner_id)
            .execution_options(populate_existing=True)
        )
        contact = result.scalar_one_or_none()
        if contact is None:
            raise ContactNotFoundError(contact_id)
        return contact

    async def fetch_notes(self, owner: OwnerContext, contact_id: int) -> Sequence[ContactNote]:
        result = await self.session.execute(
            select(ContactNote)
            .where(ContactNote.contact_id == contact_id, ContactNote.owner_id == owner.owner_id)
            .order_by(ContactNote.entry_date.desc(), ContactNote.id)
        )
        return result.scalars().all()

    async def resolve_linked_profile(self, contact: Contact) -> LinkedProfileSource:
        try:
            profile = await self.session.get(Profile, contact.linked_profile_id)
        except SQLAlchemyError:
            logger.warning(
                "Linked profile lookup failed",
                extra={"contact_id": contact.id, "profile_id": contact.linked_profile_id},
                exc_info=True,
            )
            profile = None

        if profile is None:
            return SynthesizedProfile(ProfileSnapshot.from_contact(contact))
        return FetchedProfile(ProfileSnapshot.from_profile(profile))

    async def fetch_work_entries(self, profile_id: str) -> Sequence[WorkEntry]:
        result = await self.session.execute(
            select(WorkEntry)
            .where(WorkEntry.user_id == profile_id)
            .order_by(
                WorkEntry.is_current.desc(),
                WorkEntry.start_date.is_(None),
                WorkEntry.start_date.desc(),
                WorkEntry.id,
            )
        )
        return result.scalars().all()

    async def fetch_chronicle_entries(self, profile_id: str) -> Sequence[ChronicleEntry]:
        result = await self.session.execute(
            select(ChronicleEntry)
            .where(ChronicleEntry.user_id == profile_id, ChronicleEntry.show_on_resume.is_(True))
            .order_by(ChronicleEntry.start_date.desc(), ChronicleEntry.id)
        )
        return result.scalars().all()

    async def fetch_education_entries(self, profile_id: str) -> Sequence[EducationEntry]:
        result = await self.session.execute(
            select(EducationEntry)
            .where(EducationEntry.user_id == profile_id)
            .order_by(
                EducationEntry.is_current.desc(),
                EducationEntry.start_date.is_(None),
                EducationEntry.start_date.desc(),
                EducationEntry.id,
            )
        )
        return result.scalars().all()

    async def _load_section(
        self,
        section: str,
        contact_id: int,
        loader: Callable[..., Awaitable[Sequence[T]]],
        *args: Any,
    ) -> list[T]:
        try:
            return list(await loader(*args))
        except SQLAlchemyError:
            logger.warning(
                "Dossier section unavailable",
                extra={"contact_id": contact_id, "section": section},
                exc_info=True,
            )
            return []


def _parse_key_links(raw: Any) -> tuple[KeyLinkSnapshot, ...]:
    if not isinstance(raw, list):
        return ()
    links: list[KeyLinkSnapshot] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        url = item.get("url")
        links.append(
            KeyLinkSnapshot(
                type=str(item.get("type") or "link"),
                url=url.strip() if isinstance(url, str) else "",
                visible=bool(item.get("visible", True)),
            )
        )
    return tuple(links)
