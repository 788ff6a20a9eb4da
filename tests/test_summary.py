from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from nexus_crm.core.errors import PersistenceError
from nexus_crm.core.summary_client import GeneratedSummary, GenerationUnavailableError
from nexus_crm.models import Contact
from nexus_crm.services.context_collector import ContextCollector
from nexus_crm.services.persistence import update_first_accepted
from nexus_crm.services.summary_resolver import build_fallback_summary, should_auto_generate

OTHER_OWNER = {"X-Owner-Id": "owner-2"}


class FakeGenerator:
    def __init__(self, summary="Generated summary.", oneliner=None):
        self.summary = summary
        self.oneliner = oneliner
        self.narratives = []

    async def generate(self, narrative):
        self.narratives.append(narrative)
        return GeneratedSummary(summary=self.summary, oneliner=self.oneliner)


class UnavailableGenerator:
    async def generate(self, narrative):
        raise GenerationUnavailableError("endpoint down")


def _install_generator(monkeypatch, generator) -> None:
    monkeypatch.setattr(
        "nexus_crm.core.summary_client.get_summary_generator", lambda: generator
    )


async def _linked_contact(client, **fields):
    await client.put(
        "/api/v1/profile",
        json={
            "full_name": "Jane Doe",
            "headline": "Database engineer",
            "key_links": [{"type": "Website", "url": "https://jane.dev"}],
        },
        headers=OTHER_OWNER,
    )
    payload = {"full_name": "Jane Doe", "linked_profile_id": "owner-2", **fields}
    response = await client.post("/api/v1/contacts", json=payload)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def test_fallback_with_only_a_name_is_the_name_sentence():
    assert build_fallback_summary(Contact(full_name="Jane Doe")) == "Jane Doe."


def test_fallback_orders_fragments_before_sentences():
    contact = Contact(
        full_name="Jane Doe",
        role="Engineer",
        company="Acme",
        location="Remote",
        relationship_type="Client",
    )

    assert build_fallback_summary(contact) == (
        "Jane Doe. Engineer at Acme. Remote. Classified as client."
    )


def test_fallback_never_doubles_periods():
    contact = Contact(
        full_name="Dr. Ann Smith.",
        company="Acme Inc.",
        how_we_met="A mutual friend.",
    )

    assert build_fallback_summary(contact) == (
        "Dr. Ann Smith. Acme Inc. Connection originated via A mutual friend."
    )


def test_auto_generation_only_for_linked_contacts_without_summary():
    assert should_auto_generate(Contact(full_name="A", linked_profile_id="u1"))
    assert not should_auto_generate(Contact(full_name="A"))
    assert not should_auto_generate(
        Contact(full_name="A", linked_profile_id="u1", ai_summary="Known.")
    )
    assert should_auto_generate(Contact(full_name="A", linked_profile_id="u1", ai_summary=" "))


@pytest.mark.anyio("asyncio")
async def test_generate_summary_stores_generated_text(client, monkeypatch):
    generator = FakeGenerator(summary="Jane builds databases.", oneliner="Database builder")
    _install_generator(monkeypatch, generator)
    contact_id = await _linked_contact(client, role="Engineer", company="Acme")
    await client.post(
        f"/api/v1/contacts/{contact_id}/notes",
        json={"content": "Shared https://y.com/b", "entry_date": "2024-01-01"},
    )

    response = await client.post(f"/api/v1/contacts/{contact_id}/summary")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data == {
        "contact_id": contact_id,
        "ai_summary": "Jane builds databases.",
        "mini_summary": "Database builder",
    }

    narrative = generator.narratives[0]
    assert "Headline: Database engineer" in narrative.facts
    assert narrative.notes == "[2024-01-01] Shared https://y.com/b"
    assert narrative.urls == ["https://jane.dev", "https://y.com/b"]

    contact = (await client.get(f"/api/v1/contacts/{contact_id}")).json()["data"]
    assert contact["ai_summary"] == "Jane builds databases."
    assert contact["mini_summary"] == "Database builder"


@pytest.mark.anyio("asyncio")
async def test_generate_summary_falls_back_when_endpoint_unavailable(client, monkeypatch):
    _install_generator(monkeypatch, UnavailableGenerator())
    contact_response = await client.post(
        "/api/v1/contacts",
        json={
            "full_name": "Jane Doe",
            "role": "Engineer",
            "company": "Acme",
            "location": "Remote",
            "relationship_type": "Client",
        },
    )
    contact_id = contact_response.json()["data"]["id"]

    response = await client.post(f"/api/v1/contacts/{contact_id}/summary")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["ai_summary"] == "Jane Doe. Engineer at Acme. Remote. Classified as client."
    assert data["mini_summary"] == "Engineer at Acme"
    assert "generated" not in data


@pytest.mark.anyio("asyncio")
async def test_fallback_without_description_keeps_previous_mini_summary(client, monkeypatch):
    _install_generator(monkeypatch, UnavailableGenerator())
    contact_id = (
        await client.post("/api/v1/contacts", json={"full_name": "Only Name"})
    ).json()["data"]["id"]
    await client.put(f"/api/v1/contacts/{contact_id}", json={"mini_summary": "Kept line"})

    data = (await client.post(f"/api/v1/contacts/{contact_id}/summary")).json()["data"]
    assert data["ai_summary"] == "Only Name."
    assert data["mini_summary"] == "Kept line"


@pytest.mark.anyio("asyncio")
async def test_regenerating_overwrites_previous_summary(client, monkeypatch):
    generator = FakeGenerator(summary="First pass.")
    _install_generator(monkeypatch, generator)
    contact_id = await _linked_contact(client)

    first = await client.post(f"/api/v1/contacts/{contact_id}/summary")
    assert first.status_code == 200

    generator.summary = "Second pass."
    second = await client.post(f"/api/v1/contacts/{contact_id}/summary")
    assert second.status_code == 200
    assert second.json()["data"]["ai_summary"] == "Second pass."

    stored = (await client.get(f"/api/v1/contacts/{contact_id}")).json()["data"]
    assert stored["ai_summary"] == "Second pass."


@pytest.mark.anyio("asyncio")
async def test_regenerating_with_unchanged_data_succeeds_twice(client, monkeypatch):
    _install_generator(monkeypatch, UnavailableGenerator())
    contact_id = await _linked_contact(client, role="Engineer")

    first = await client.post(f"/api/v1/contacts/{contact_id}/summary")
    second = await client.post(f"/api/v1/contacts/{contact_id}/summary")

    assert first.status_code == second.status_code == 200
    assert first.json()["data"] == second.json()["data"]
    assert second.json()["data"]["ai_summary"] == "Jane Doe. Engineer."


@pytest.mark.anyio("asyncio")
async def test_summary_for_other_owner_contact_is_not_found(client, monkeypatch):
    generator = FakeGenerator()
    _install_generator(monkeypatch, generator)
    contact_id = await _linked_contact(client)

    response = await client.post(f"/api/v1/contacts/{contact_id}/summary", headers=OTHER_OWNER)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert generator.narratives == []


@pytest.mark.anyio("asyncio")
async def test_summary_persistence_failure_is_reported(client, monkeypatch):
    _install_generator(monkeypatch, FakeGenerator())
    contact_id = await _linked_contact(client)

    async def reject_all(*args, operation, **kwargs):
        raise PersistenceError(operation)

    monkeypatch.setattr("nexus_crm.services.summary_resolver.update_first_accepted", reject_all)

    response = await client.post(f"/api/v1/contacts/{contact_id}/summary")
    assert response.status_code == 500
    assert response.json()["error"] == {
        "code": "PERSISTENCE_FAILURE",
        "message": "Failed to save summary",
    }


@pytest.mark.anyio("asyncio")
async def test_dossier_survives_failed_education_fetch(client, monkeypatch):
    contact_id = await _linked_contact(client)
    await client.post(
        "/api/v1/resume/work",
        json={"title": "Engineer", "company": "Acme", "is_current": True},
        headers=OTHER_OWNER,
    )
    await client.post(
        "/api/v1/resume/chronicle",
        json={"type": "talk", "title": "Keynote", "start_date": "2023", "show_on_resume": True},
        headers=OTHER_OWNER,
    )
    await client.post(
        "/api/v1/resume/chronicle",
        json={"type": "note", "title": "Private", "start_date": "2022"},
        headers=OTHER_OWNER,
    )
    await client.post(
        "/api/v1/resume/education", json={"institution": "State U"}, headers=OTHER_OWNER
    )

    async def broken_education(self, profile_id):
        raise OperationalError("SELECT education", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ContextCollector, "fetch_education_entries", broken_education)

    response = await client.get(f"/api/v1/contacts/{contact_id}/dossier")
    assert response.status_code == 200
    dossier = response.json()["data"]
    assert [entry["title"] for entry in dossier["work_entries"]] == ["Engineer"]
    assert [entry["title"] for entry in dossier["chronicle_entries"]] == ["Keynote"]
    assert dossier["education_entries"] == []
    assert dossier["linked_profile"]["synthesized"] is False


@pytest.mark.anyio("asyncio")
async def test_dossier_synthesizes_profile_when_link_target_is_gone(client):
    contact_id = await _linked_contact(client, role="Engineer", company="Acme", location="Oslo")
    delete_resp = await client.delete("/api/v1/profile", headers=OTHER_OWNER)
    assert delete_resp.status_code == 200

    response = await client.get(f"/api/v1/contacts/{contact_id}/dossier")
    assert response.status_code == 200
    dossier = response.json()["data"]
    profile = dossier["linked_profile"]
    assert profile["synthesized"] is True
    assert profile["full_name"] == "Jane Doe"
    assert profile["headline"] == "Engineer at Acme"
    assert profile["location"] == "Oslo"
    assert profile["key_links"] == []
    assert dossier["work_entries"] == []
    assert dossier["narrative"]["urls"] == []


@pytest.mark.anyio("asyncio")
async def test_dossier_without_link_has_no_profile_sections(client):
    contact_id = (
        await client.post("/api/v1/contacts", json={"full_name": "Unlinked"})
    ).json()["data"]["id"]

    dossier = (await client.get(f"/api/v1/contacts/{contact_id}/dossier")).json()["data"]
    assert dossier["linked_profile"] is None
    assert dossier["narrative"] == {
        "facts": "Name: Unlinked",
        "notes": "(No notes yet)",
        "urls": [],
    }


class RejectingSession:
    """Stands in for an AsyncSession whose first ``failures`` writes are rejected."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.executed = 0
        self.commits = 0
        self.rollbacks = 0

    async def execute(self, statement):
        self.executed += 1
        if self.executed <= self.failures:
            raise OperationalError("UPDATE contacts", {}, Exception("no such column"))

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


@pytest.mark.anyio("asyncio")
async def test_update_variants_fall_through_to_smaller_payload():
    session = RejectingSession(failures=1)
    variants = [{"ai_summary": "Text", "mini_summary": "Line"}, {"ai_summary": "Text"}]

    stored = await update_first_accepted(
        session, Contact, (Contact.id == 1,), variants, operation="save summary"
    )

    assert stored == {"ai_summary": "Text"}
    assert session.rollbacks == 1
    assert session.commits == 1


@pytest.mark.anyio("asyncio")
async def test_update_variants_all_rejected_raise_persistence_error():
    session = RejectingSession(failures=2)
    variants = [{"ai_summary": "Text", "mini_summary": "Line"}, {"ai_summary": "Text"}]

    with pytest.raises(PersistenceError) as exc_info:
        await update_first_accepted(
            session, Contact, (Contact.id == 1,), variants, operation="save summary"
        )

    assert str(exc_info.value) == "Failed to save summary"
    assert session.rollbacks == 2
