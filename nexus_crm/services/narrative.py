"""Flatten a collected dossier into the text context for summary generation.

Everything here is pure: the same :class:`DossierContext` always yields the
same facts block, notes block and URL list.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from nexus_crm.models import ContactNote
from nexus_crm.services.contact_display import clean
from nexus_crm.services.context_collector import DossierContext, KeyLinkSnapshot, ProfileSnapshot

# Lexical match only; trailing punctuation is kept as part of the URL.
URL_PATTERN = re.compile(r"https?://[^\s<]+")
NO_NOTES_MARKER = "(No notes yet)"


@dataclass
class CompiledNarrative:
    facts: str
    notes: str
    urls: list[str] = field(default_factory=list)


def compile_narrative(context: DossierContext) -> CompiledNarrative:
    profile = context.linked_profile.profile if context.linked_profile else None
    return CompiledNarrative(
        facts=build_facts_block(context),
        notes=build_notes_block(context.notes),
        urls=collect_urls(profile, context.notes),
    )


def build_facts_block(context: DossierContext) -> str:
    contact = context.contact
    pairs: list[tuple[str, str | None]] = [
        ("Name", contact.full_name),
        ("Role", contact.role),
        ("Company", contact.company),
        ("Location", contact.location),
        ("Email", contact.email),
        ("Relationship", contact.relationship_type),
    ]
    if context.linked_profile is not None:
        profile = context.linked_profile.profile
        pairs.extend(
            [
                ("Headline", profile.headline),
                ("Bio", profile.bio),
                ("Profile location", profile.location),
                ("Website", profile.website),
            ]
        )
        pairs.extend((link.type, link.url) for link in visible_key_links(profile))

    lines = []
    for label, value in pairs:
        cleaned = clean(value)
        if cleaned:
            lines.append(f"{label}: {cleaned}")
    return "\n".join(lines)


def build_notes_block(notes: Iterable[ContactNote]) -> str:
    lines = [format_note_line(note) for note in notes]
    if not lines:
        return NO_NOTES_MARKER
    return "\n".join(lines)


def format_note_line(note: ContactNote) -> str:
    content = " ".join(note.content.splitlines())
    line = f"[{note.entry_date.isoformat()}] {content}"
    action = clean(note.action_text)
    if action:
        line += f" [Action: {action}]"
    return line


def visible_key_links(profile: ProfileSnapshot) -> list[KeyLinkSnapshot]:
    return [link for link in profile.key_links if link.visible and link.url]


def extract_urls(text: str) -> list[str]:
    return URL_PATTERN.findall(text)


def collect_urls(
    profile: ProfileSnapshot | None, notes: Iterable[ContactNote]
) -> list[str]:
    """Key-link URLs first, then URLs found in note content, deduplicated in order."""

    candidates: list[str] = []
    if profile is not None:
        candidates.extend(link.url for link in visible_key_links(profile))
    for note in notes:
        candidates.extend(extract_urls(note.content))
    return list(dict.fromkeys(candidates))
