"""Tests for brand voice templates, user settings and user stats."""
import pytest
from httpx import AsyncClient

from app.routers.users import DEFAULT_NOTIFICATION_SETTINGS, DEFAULT_PREFERENCES, calculate_writing_score
from tests.conftest import AUTH_HEADERS, AUTH_HEADERS_USER2, create_document, create_project


@pytest.mark.asyncio
async def test_templates_lists_public_seed(client: AsyncClient, seeded_templates):
    resp = await client.get("/api/templates")
    assert resp.status_code == 200
    templates = resp.json()["templates"]
    assert len(templates) == seeded_templates
    assert all(t["is_public"] for t in templates)
    assert all("tone" in t["voice_profile"] for t in templates)


@pytest.mark.asyncio
async def test_templates_empty_without_seed(client: AsyncClient):
    resp = await client.get("/api/templates")
    assert resp.json() == {"templates": []}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_settings_defaults(client: AsyncClient):
    resp = await client.get("/api/user/settings", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    settings = resp.json()["settings"]
    assert settings["preferences"] == DEFAULT_PREFERENCES
    assert settings["notification_settings"] == DEFAULT_NOTIFICATION_SETTINGS
    assert settings["id"] is None


@pytest.mark.asyncio
async def test_settings_requires_a_blob(client: AsyncClient):
    resp = await client.put("/api/user/settings", json={}, headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "At least one of preferences or notification_settings is required"
    }


@pytest.mark.asyncio
async def test_settings_insert_then_update(client: AsyncClient):
    prefs = {"theme": "dark", "language": "de", "auto_save": False, "spell_check": True}
    resp = await client.put("/api/user/settings", json={"preferences": prefs}, headers=AUTH_HEADERS)
    assert resp.status_code == 200
    settings = resp.json()["settings"]
    assert settings["preferences"] == prefs
    assert settings["notification_settings"] == DEFAULT_NOTIFICATION_SETTINGS
    assert settings["id"]

    notifications = dict(DEFAULT_NOTIFICATION_SETTINGS, push_notifications=True)
    resp = await client.put(
        "/api/user/settings", json={"notification_settings": notifications}, headers=AUTH_HEADERS
    )
    settings = resp.json()["settings"]
    assert settings["preferences"] == prefs
    assert settings["notification_settings"]["push_notifications"] is True

    resp = await client.get("/api/user/settings", headers=AUTH_HEADERS_USER2)
    assert resp.json()["settings"]["preferences"] == DEFAULT_PREFERENCES


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

def test_writing_score_formula():
    assert calculate_writing_score([]) == 0
    # avg 100 words -> 60, one document -> bonus 4
    assert calculate_writing_score([100]) == 64
    # five documents -> bonus 20
    assert calculate_writing_score([50] * 5) == 50
    assert calculate_writing_score([1000] * 5) == 100


@pytest.mark.asyncio
async def test_stats(client: AsyncClient):
    resp = await client.get("/api/user/stats", headers=AUTH_HEADERS)
    assert resp.json() == {"writingScore": 0, "documentCount": 0, "projectCount": 0, "totalWords": 0}

    await create_document(client, content=" ".join(["word"] * 100))
    await create_document(client, content=" ".join(["word"] * 50))
    await create_project(client)

    resp = await client.get("/api/user/stats", headers=AUTH_HEADERS)
    data = resp.json()
    assert data["documentCount"] == 2
    assert data["projectCount"] == 1
    assert data["totalWords"] == 150
    # avg 75 words -> 45, two documents -> bonus 8
    assert data["writingScore"] == 53


@pytest.mark.asyncio
async def test_settings_accepts_empty_preferences(client: AsyncClient):
    resp = await client.put("/api/user/settings", json={"preferences": {}}, headers=AUTH_HEADERS)
    assert resp.status_code == 200
    settings = resp.json()["settings"]
    assert settings["preferences"] == {}
    assert settings["notification_settings"] == DEFAULT_NOTIFICATION_SETTINGS
