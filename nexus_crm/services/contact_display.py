"""Display fields derived from a contact's structured data."""
from __future__ import annotations

from nexus_crm.models import Contact


def clean(value: str | None) -> str | None:
    """Return ``value`` stripped, or ``None`` when it is blank."""

    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def role_at_company(role: str | None, company: str | None) -> str | None:
    role, company = clean(role), clean(company)
    if role and company:
        return f"{role} at {company}"
    return role or company


def describe_contact(contact: Contact) -> str:
    """One-line description built only from structured fields."""

    role, company = clean(contact.role), clean(contact.company)
    if role and company:
        return f"{role} at {company}"
    if role:
        return role
    if company:
        return f"Works at {company}"
    return clean(contact.relationship_type) or ""


def mini_description(contact: Contact) -> str:
    """Stored synopsis when present, otherwise the structured description."""

    return clean(contact.mini_summary) or describe_contact(contact)


def last_name_key(full_name: str) -> str:
    parts = full_name.split()
    if not parts:
        return ""
    return parts[-1].lower()
