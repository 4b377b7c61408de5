"""Tests for authentication boundaries.

Verifies that data endpoints require X-User-Id (unless the demo user is
enabled) and that users cannot reach each other's documents and projects.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import auth
from app.models.database_models import User
from tests.conftest import AUTH_HEADERS, AUTH_HEADERS_USER2, create_document, create_project


@pytest.mark.asyncio
async def test_documents_requires_auth_header(client: AsyncClient):
    """GET /api/documents without X-User-Id should return 401."""
    resp = await client.get("/api/documents")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication required"}


@pytest.mark.asyncio
async def test_create_project_requires_auth_header(client: AsyncClient):
    resp = await client.post("/api/projects", json={"title": "Unauthed"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_demo_user_when_enabled(client: AsyncClient, monkeypatch):
    """With ALLOW_DEMO_USER, header-less requests act as the demo user."""
    monkeypatch.setattr(auth.settings, "ALLOW_DEMO_USER", True)

    resp = await client.post("/api/documents", json={"title": "Demo doc", "content": "hi"})
    assert resp.status_code == 201
    assert resp.json()["document"]["user_id"] == auth.settings.DEMO_USER_ID

    resp = await client.get("/api/documents")
    assert resp.status_code == 200
    assert len(resp.json()["documents"]) == 1


@pytest.mark.asyncio
async def test_wrong_user_cannot_access_document(client: AsyncClient):
    """User 2 should get 404 when accessing user 1's document."""
    document = await create_document(client, title="Private")

    resp = await client.get(f"/api/documents/{document['id']}", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404

    resp = await client.delete(f"/api/documents/{document['id']}", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_wrong_user_cannot_access_project(client: AsyncClient):
    project = await create_project(client, title="Private Carousel")

    resp = await client.get(f"/api/projects/{project['id']}", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Project not found"}

    resp = await client.post(
        f"/api/projects/{project['id']}/export-zip", headers=AUTH_HEADERS_USER2
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_wrong_user_cannot_edit_slide(client: AsyncClient):
    project = await create_project(client)
    slide_id = project["slides"][0]["id"]

    resp = await client.put(
        f"/api/slides/{slide_id}", json={"content": "hijack"}, headers=AUTH_HEADERS_USER2
    )
    assert resp.status_code == 404

    resp = await client.put(f"/api/slides/{slide_id}", json={"content": "mine"}, headers=AUTH_HEADERS)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_project_cannot_link_foreign_document(client: AsyncClient):
    document = await create_document(client, headers=AUTH_HEADERS_USER2)

    resp = await client.post(
        "/api/projects",
        json={"title": "Borrowed", "document_id": document["id"]},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Document not found"


@pytest.mark.asyncio
async def test_new_user_with_taken_email_gets_local_address(client: AsyncClient, db_session: AsyncSession):
    await create_document(client)
    headers = {"X-User-Id": "test-user-3", "X-User-Email": AUTH_HEADERS["X-User-Email"]}

    resp = await client.post("/api/documents", json={"title": "Mine"}, headers=headers)
    assert resp.status_code == 201

    user = await db_session.get(User, "test-user-3")
    assert user.email == "test-user-3@wordwise.local"
