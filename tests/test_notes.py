from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import func, select, update

from nexus_crm.core.db import AsyncSessionLocal
from nexus_crm.models import Contact, ContactNote


async def _create_contact(client, full_name="Nora Notes"):
    response = await client.post("/api/v1/contacts", json={"full_name": full_name})
    assert response.status_code == 201
    return response.json()["data"]["id"]


async def _age_contact(contact_id: int) -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(
            update(Contact).where(Contact.id == contact_id).values(updated_at=datetime(2020, 1, 1))
        )
        await session.commit()


async def _updated_at(client, contact_id: int) -> datetime:
    response = await client.get(f"/api/v1/contacts/{contact_id}")
    return datetime.fromisoformat(response.json()["data"]["updated_at"])


@pytest.mark.anyio("asyncio")
async def test_notes_are_listed_newest_entry_date_first(client):
    contact_id = await _create_contact(client)

    for entry_date in ("2024-02-01", "2024-03-01", "2024-01-01"):
        response = await client.post(
            f"/api/v1/contacts/{contact_id}/notes",
            json={"content": f"Note from {entry_date}", "entry_date": entry_date},
        )
        assert response.status_code == 201

    list_resp = await client.get(f"/api/v1/contacts/{contact_id}/notes")
    assert list_resp.status_code == 200
    assert [note["entry_date"] for note in list_resp.json()["data"]] == [
        "2024-03-01",
        "2024-02-01",
        "2024-01-01",
    ]


@pytest.mark.anyio("asyncio")
async def test_notes_on_same_day_keep_insertion_order(client):
    contact_id = await _create_contact(client)
    for content in ("first", "second", "third"):
        await client.post(
            f"/api/v1/contacts/{contact_id}/notes",
            json={"content": content, "entry_date": "2024-05-05"},
        )

    notes = (await client.get(f"/api/v1/contacts/{contact_id}/notes")).json()["data"]
    assert [note["content"] for note in notes] == ["first", "second", "third"]


@pytest.mark.anyio("asyncio")
async def test_note_entry_date_defaults_to_today(client):
    contact_id = await _create_contact(client)

    response = await client.post(
        f"/api/v1/contacts/{contact_id}/notes", json={"content": "Quick thought"}
    )
    assert response.status_code == 201
    assert response.json()["data"]["entry_date"] == date.today().isoformat()


@pytest.mark.anyio("asyncio")
async def test_note_changes_touch_parent_contact(client):
    contact_id = await _create_contact(client)
    await _age_contact(contact_id)

    create_resp = await client.post(
        f"/api/v1/contacts/{contact_id}/notes", json={"content": "Coffee chat"}
    )
    note_id = create_resp.json()["data"]["id"]
    assert (await _updated_at(client, contact_id)).year > 2020

    await _age_contact(contact_id)
    update_resp = await client.put(f"/api/v1/notes/{note_id}", json={"content": "Long lunch"})
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["content"] == "Long lunch"
    assert (await _updated_at(client, contact_id)).year > 2020

    await _age_contact(contact_id)
    delete_resp = await client.delete(f"/api/v1/notes/{note_id}")
    assert delete_resp.status_code == 200
    assert (await _updated_at(client, contact_id)).year > 2020

    notes = (await client.get(f"/api/v1/contacts/{contact_id}/notes")).json()["data"]
    assert notes == []


@pytest.mark.anyio("asyncio")
async def test_note_action_lifecycle(client):
    contact_id = await _create_contact(client)

    invalid = await client.post(
        f"/api/v1/contacts/{contact_id}/notes",
        json={"content": "Due date alone", "action_due_date": "2024-06-01"},
    )
    assert invalid.status_code == 422

    create_resp = await client.post(
        f"/api/v1/contacts/{contact_id}/notes",
        json={
            "content": "Promised an intro",
            "action_text": "Intro to Sam",
            "action_due_date": "2024-06-01",
        },
    )
    note = create_resp.json()["data"]
    assert note["action_text"] == "Intro to Sam"
    assert note["action_completed"] is False

    complete_resp = await client.put(
        f"/api/v1/notes/{note['id']}", json={"action_completed": True}
    )
    assert complete_resp.json()["data"]["action_completed"] is True

    clear_resp = await client.put(f"/api/v1/notes/{note['id']}", json={"action_text": ""})
    cleared = clear_resp.json()["data"]
    assert cleared["action_text"] is None
    assert cleared["action_due_date"] is None
    assert cleared["action_completed"] is False


@pytest.mark.anyio("asyncio")
async def test_notes_are_isolated_per_owner(client):
    contact_id = await _create_contact(client)
    note_resp = await client.post(
        f"/api/v1/contacts/{contact_id}/notes", json={"content": "Private"}
    )
    note_id = note_resp.json()["data"]["id"]
    other = {"X-Owner-Id": "owner-2"}

    assert (
        await client.get(f"/api/v1/contacts/{contact_id}/notes", headers=other)
    ).status_code == 404
    assert (
        await client.post(
            f"/api/v1/contacts/{contact_id}/notes", json={"content": "Sneaky"}, headers=other
        )
    ).status_code == 404
    assert (
        await client.put(f"/api/v1/notes/{note_id}", json={"content": "x"}, headers=other)
    ).status_code == 404
    assert (await client.delete(f"/api/v1/notes/{note_id}", headers=other)).status_code == 404


@pytest.mark.anyio("asyncio")
async def test_deleting_contact_removes_its_notes(client):
    contact_id = await _create_contact(client)
    for content in ("one", "two"):
        await client.post(f"/api/v1/contacts/{contact_id}/notes", json={"content": content})

    delete_resp = await client.delete(f"/api/v1/contacts/{contact_id}")
    assert delete_resp.status_code == 200

    async with AsyncSessionLocal() as session:
        remaining = await session.scalar(
            select(func.count()).select_from(ContactNote).where(
                ContactNote.contact_id == contact_id
            )
        )
    assert remaining == 0


@pytest.mark.anyio("asyncio")
async def test_actions_listed_by_due_date_with_contact_name(client):
    alice = await _create_contact(client, "Alice Action")
    bob = await _create_contact(client, "Bob Action")

    await client.post(
        f"/api/v1/contacts/{alice}/notes",
        json={"content": "a", "action_text": "Send deck", "action_due_date": "2024-09-01"},
    )
    await client.post(
        f"/api/v1/contacts/{bob}/notes",
        json={"content": "b", "action_text": "Call back"},
    )
    early = await client.post(
        f"/api/v1/contacts/{bob}/notes",
        json={"content": "c", "action_text": "Book dinner", "action_due_date": "2024-07-01"},
    )
    await client.post(f"/api/v1/contacts/{alice}/notes", json={"content": "no action"})

    actions = (await client.get("/api/v1/actions")).json()["data"]
    assert [item["action_text"] for item in actions] == ["Book dinner", "Send deck", "Call back"]
    assert actions[0]["contact_name"] == "Bob Action"

    contacts = (await client.get("/api/v1/contacts")).json()["data"]
    pending = {item["full_name"]: item["pending_action"] for item in contacts}
    assert pending["Bob Action"]["action_text"] == "Book dinner"
    assert pending["Alice Action"]["action_text"] == "Send deck"

    await client.put(
        f"/api/v1/notes/{early.json()['data']['id']}", json={"action_completed": True}
    )
    open_actions = (await client.get("/api/v1/actions")).json()["data"]
    assert [item["action_text"] for item in open_actions] == ["Send deck", "Call back"]

    done_actions = (
        await client.get("/api/v1/actions", params={"completed": "true"})
    ).json()["data"]
    assert [item["action_text"] for item in done_actions] == ["Book dinner"]

    other_actions = (
        await client.get("/api/v1/actions", headers={"X-Owner-Id": "owner-2"})
    ).json()["data"]
    assert other_actions == []


@pytest.mark.anyio("asyncio")
async def test_note_update_keeps_action_fields_consistent(client):
    contact_id = await _create_contact(client)
    create_resp = await client.post(
        f"/api/v1/contacts/{contact_id}/notes", json={"content": "Plain note"}
    )
    note_id = create_resp.json()["data"]["id"]

    due_only = await client.put(
        f"/api/v1/notes/{note_id}", json={"action_due_date": "2024-06-01"}
    )
    assert due_only.status_code == 422
    assert due_only.json()["error"]["code"] == "VALIDATION_ERROR"

    blank_content = await client.put(f"/api/v1/notes/{note_id}", json={"content": "   "})
    assert blank_content.status_code == 422

    listed = await client.get(f"/api/v1/contacts/{contact_id}/notes")
    stored = listed.json()["data"][0]
    assert stored["content"] == "Plain note"
    assert stored["action_due_date"] is None

    with_action = await client.put(
        f"/api/v1/notes/{note_id}",
        json={"action_text": "Send deck", "action_due_date": "2024-06-01"},
    )
    assert with_action.status_code == 200
    assert with_action.json()["data"]["action_due_date"] == "2024-06-01"


@pytest.mark.anyio("asyncio")
async def test_note_content_is_stripped_and_must_not_be_blank(client):
    contact_id = await _create_contact(client)

    blank = await client.post(f"/api/v1/contacts/{contact_id}/notes", json={"content": "  "})
    assert blank.status_code == 422

    padded = await client.post(
        f"/api/v1/contacts/{contact_id}/notes", json={"content": "  Coffee chat  "}
    )
    assert padded.json()["data"]["content"] == "Coffee chat"
