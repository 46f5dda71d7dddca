"""HTTP tests for the notes routes."""

import uuid

import httpx
import pytest

from worldnotes.core.db import get_db
from worldnotes.core.security import create_access_token
from worldnotes.main import app


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(user_id: uuid.UUID, name: str, campaign_id: uuid.UUID, role: str = "player") -> dict:
    token = create_access_token({"sub": str(user_id), "name": name, "roles": {str(campaign_id): role}})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def users(campaign_id):
    return {
        "alice": auth_headers(uuid.uuid4(), "Alice", campaign_id),
        "bob": auth_headers(uuid.uuid4(), "Bob", campaign_id),
        "gm": auth_headers(uuid.uuid4(), "Game Master", campaign_id, role="owner"),
    }


@pytest.fixture
def notes_url(campaign_id):
    return f"/campaigns/{campaign_id}/notes"


async def _create_shared_note(client, notes_url, headers) -> str:
    response = await client.post(
        f"{notes_url}/",
        json={"title": "Session 1", "content": [{"text": "hello"}], "visibility": "shared"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["uuid"]


class TestAuth:
    """Bearer token handling."""

    async def test_missing_token(self, client, notes_url) -> None:
        response = await client.get(f"{notes_url}/")
        assert response.status_code == 401

    async def test_invalid_token(self, client, notes_url) -> None:
        response = await client.get(f"{notes_url}/", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    async def test_non_member_gets_not_found(self, client, notes_url) -> None:
        headers = auth_headers(uuid.uuid4(), "Stranger", uuid.uuid4())
        response = await client.get(f"{notes_url}/", headers=headers)
        assert response.status_code == 404


class TestLockRoutes:
    """Lock, heartbeat, unlock and force-unlock."""

    async def test_lock_reports_lease_timing(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])

        response = await client.post(f"{notes_url}/{note_id}/lock", headers=users["bob"])

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "granted"
        assert body["holder_name"] == "Bob"
        assert body["lease_ttl_seconds"] == 300
        assert body["heartbeat_interval_seconds"] == 120

    async def test_lock_conflict_is_409(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])
        await client.post(f"{notes_url}/{note_id}/lock", headers=users["bob"])

        response = await client.post(f"{notes_url}/{note_id}/lock", headers=users["alice"])

        assert response.status_code == 409
        assert response.json()["status"] == "conflict"
        assert response.json()["holder_name"] == "Bob"

    async def test_heartbeat_and_unlock(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])
        await client.post(f"{notes_url}/{note_id}/lock", headers=users["bob"])

        heartbeat = await client.post(f"{notes_url}/{note_id}/heartbeat", headers=users["bob"])
        unlock = await client.post(f"{notes_url}/{note_id}/unlock", headers=users["bob"])

        assert heartbeat.json()["status"] == "renewed"
        assert unlock.json()["status"] == "released"

    async def test_force_unlock_requires_owner_role(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])
        await client.post(f"{notes_url}/{note_id}/lock", headers=users["bob"])

        refused = await client.post(f"{notes_url}/{note_id}/force-unlock", headers=users["alice"])
        forced = await client.post(f"{notes_url}/{note_id}/force-unlock", headers=users["gm"])

        assert refused.status_code == 403
        assert forced.status_code == 200
        assert forced.json()["status"] == "released"


class TestContentRoutes:
    """Saving content and browsing versions."""

    async def test_save_without_lock_is_409(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])
        await client.post(f"{notes_url}/{note_id}/lock", headers=users["bob"])

        response = await client.put(
            f"{notes_url}/{note_id}/content",
            json={"title": "Mine", "content": []},
            headers=users["alice"],
        )

        assert response.status_code == 409
        assert response.json()["type"] == "conflict"
        assert response.json()["holder_name"] == "Bob"

    async def test_missing_content_is_422(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])
        await client.post(f"{notes_url}/{note_id}/lock", headers=users["alice"])

        response = await client.put(
            f"{notes_url}/{note_id}/content",
            json={"title": "No content"},
            headers=users["alice"],
        )

        assert response.status_code == 422

    async def test_save_list_get_and_restore(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])
        await client.post(f"{notes_url}/{note_id}/lock", headers=users["bob"])

        saved = await client.put(
            f"{notes_url}/{note_id}/content",
            json={"title": "Session 1 (edited)", "content": [{"text": "edited"}], "content_html": "<p>edited</p>"},
            headers=users["bob"],
        )
        assert saved.status_code == 200
        assert saved.json()["title"] == "Session 1 (edited)"

        listing = await client.get(f"{notes_url}/{note_id}/versions", headers=users["bob"])
        assert listing.status_code == 200
        assert listing.json()["total"] == 1
        summary = listing.json()["versions"][0]
        assert summary["title_preview"] == "Session 1"

        version = await client.get(f"{notes_url}/{note_id}/versions/{summary['version_id']}", headers=users["bob"])
        assert version.json()["content"] == [{"text": "hello"}]

        restored = await client.post(
            f"{notes_url}/{note_id}/versions/{summary['version_id']}/restore",
            headers=users["bob"],
        )
        assert restored.status_code == 200
        assert restored.json()["title"] == "Session 1"

    async def test_unknown_note_is_404(self, client, notes_url, users) -> None:
        response = await client.get(f"{notes_url}/{uuid.uuid4()}/versions", headers=users["alice"])
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"


class TestNoteRoutes:
    async def test_private_note_hidden_from_others(self, client, notes_url, users) -> None:
        created = await client.post(f"{notes_url}/", json={"title": "Secret"}, headers=users["alice"])
        note_id = created.json()["uuid"]

        assert (await client.get(f"{notes_url}/{note_id}", headers=users["alice"])).status_code == 200
        assert (await client.get(f"{notes_url}/{note_id}", headers=users["bob"])).status_code == 404

    async def test_settings_and_delete(self, client, notes_url, users) -> None:
        note_id = await _create_shared_note(client, notes_url, users["alice"])

        pinned = await client.patch(f"{notes_url}/{note_id}", json={"pinned": True}, headers=users["alice"])
        refused = await client.delete(f"{notes_url}/{note_id}", headers=users["bob"])
        deleted = await client.delete(f"{notes_url}/{note_id}", headers=users["alice"])

        assert pinned.json()["pinned"] is True
        assert refused.status_code == 403
        assert deleted.status_code == 204


async def test_health(client) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
