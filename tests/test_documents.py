"""Tests for document CRUD, import, export, readability and document-to-carousel."""
import pytest
from httpx import AsyncClient

from app.config import settings
from tests.conftest import AUTH_HEADERS, LONG_TEXT, create_document, create_project


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_documents_empty(client: AsyncClient):
    resp = await client.get("/api/documents", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"documents": []}


@pytest.mark.asyncio
async def test_create_document_computes_counts(client: AsyncClient):
    document = await create_document(client, title="  Notes  ", content="Hello  world\nagain")
    assert document["title"] == "Notes"
    assert document["word_count"] == 3
    assert document["char_count"] == len("Hello  world\nagain")
    assert document["user_id"] == AUTH_HEADERS["X-User-Id"]


@pytest.mark.asyncio
async def test_create_document_without_content(client: AsyncClient):
    resp = await client.post("/api/documents", json={"title": "Empty"}, headers=AUTH_HEADERS)
    assert resp.status_code == 201
    document = resp.json()["document"]
    assert document["content"] == ""
    assert document["word_count"] == 0


@pytest.mark.asyncio
async def test_create_document_requires_title(client: AsyncClient):
    resp = await client.post("/api/documents", json={"title": "   ", "content": "x"}, headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Title is required"}


@pytest.mark.asyncio
async def test_new_document_placeholder(client: AsyncClient):
    resp = await client.get("/api/documents/new", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"document": None}


@pytest.mark.asyncio
async def test_update_document(client: AsyncClient):
    document = await create_document(client)
    resp = await client.put(
        f"/api/documents/{document['id']}",
        json={"title": "Renamed", "content": "one two"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    updated = resp.json()["document"]
    assert updated["title"] == "Renamed"
    assert updated["word_count"] == 2
    assert updated["char_count"] == 7


@pytest.mark.asyncio
async def test_update_and_delete_new_are_rejected(client: AsyncClient):
    resp = await client.put("/api/documents/new", json={"title": "x"}, headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cannot update new document"

    resp = await client.delete("/api/documents/new", headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cannot delete new document"


@pytest.mark.asyncio
async def test_delete_document(client: AsyncClient):
    document = await create_document(client)
    resp = await client.delete(f"/api/documents/{document['id']}", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = await client.get(f"/api/documents/{document['id']}", headers=AUTH_HEADERS)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Document not found"}


@pytest.mark.asyncio
async def test_delete_document_unlinks_projects(client: AsyncClient):
    document = await create_document(client)
    project = await create_project(client, document_id=document["id"])
    assert project["document_id"] == document["id"]

    resp = await client.delete(f"/api/documents/{document['id']}", headers=AUTH_HEADERS)
    assert resp.status_code == 200

    resp = await client.get(f"/api/projects/{project['id']}", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["project"]["document_id"] is None


@pytest.mark.asyncio
async def test_create_document_title_too_long(client: AsyncClient):
    resp = await client.post("/api/documents", json={"title": "t" * 256}, headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("title:")


@pytest.mark.asyncio
async def test_untitled_name_skips_taken_numbers(client: AsyncClient):
    resp = await client.get("/api/documents/untitled-name", headers=AUTH_HEADERS)
    assert resp.json() == {"title": "Untitled"}

    await create_document(client, title="Untitled")
    await create_document(client, title="Untitled 2")
    resp = await client.get("/api/documents/untitled-name", headers=AUTH_HEADERS)
    assert resp.json() == {"title": "Untitled 3"}


# ---------------------------------------------------------------------------
# Import / export / readability
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_import_markdown_file(client: AsyncClient):
    resp = await client.post(
        "/api/documents/import",
        headers=AUTH_HEADERS,
        files={"file": ("launch-notes.md", "# Launch\n\nWe shipped it.".encode(), "text/markdown")},
    )
    assert resp.status_code == 201
    document = resp.json()["document"]
    assert document["title"] == "launch-notes"
    assert document["file_name"] == "launch-notes.md"
    assert document["word_count"] == 5


@pytest.mark.asyncio
async def test_import_unsupported_type(client: AsyncClient):
    resp = await client.post(
        "/api/documents/import",
        headers=AUTH_HEADERS,
        files={"file": ("paper.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert resp.status_code == 400
    assert "Unsupported file type" in resp.json()["error"]


@pytest.mark.asyncio
async def test_import_rejects_oversized_file(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "MAX_IMPORT_SIZE", 16)
    resp = await client.post(
        "/api/documents/import",
        headers=AUTH_HEADERS,
        files={"file": ("big.txt", b"x" * 17, "text/plain")},
    )
    assert resp.status_code == 413


@pytest.mark.asyncio
async def test_import_truncates_long_file_name(client: AsyncClient):
    name = "n" * 300 + ".txt"
    resp = await client.post(
        "/api/documents/import",
        headers=AUTH_HEADERS,
        files={"file": (name, b"hello", "text/plain")},
    )
    assert resp.status_code == 201
    document = resp.json()["document"]
    assert len(document["file_name"]) == 255
    assert len(document["title"]) == 255


@pytest.mark.asyncio
async def test_import_rejects_non_utf8(client: AsyncClient):
    resp = await client.post(
        "/api/documents/import",
        headers=AUTH_HEADERS,
        files={"file": ("latin.txt", "café".encode("latin-1"), "text/plain")},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_export_formats(client: AsyncClient):
    document = await create_document(client, title="Tips & Tricks", content="<b>bold</b> move")

    resp = await client.get(f"/api/documents/{document['id']}/export?format=md", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.text.startswith("# Tips & Tricks\n\n")
    assert "attachment" in resp.headers["content-disposition"]

    resp = await client.get(f"/api/documents/{document['id']}/export?format=html", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert "&lt;b&gt;bold&lt;/b&gt;" in resp.text
    assert "Word count: 2" in resp.text

    resp = await client.get(f"/api/documents/{document['id']}/export?format=docx", headers=AUTH_HEADERS)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_readability(client: AsyncClient):
    document = await create_document(client, content="The cat sat on the mat. It was warm.")
    resp = await client.get(f"/api/documents/{document['id']}/readability", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert 0 <= data["score"] <= 100
    assert data["level"]


# ---------------------------------------------------------------------------
# Document -> carousel
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_document_to_carousel_without_generation(client: AsyncClient):
    document = await create_document(client, title="Our Story")
    resp = await client.post(
        f"/api/documents/{document['id']}/carousel",
        json={"generate": False},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    project = resp.json()["project"]
    assert project["title"] == "Our Story - Carousel"
    assert project["document_id"] == document["id"]
    assert project["template_type"] in ("NEWS", "STORY", "PRODUCT")
    assert len(project["slides"]) == 1
    assert project["slides"][0]["content"] == ""


@pytest.mark.asyncio
async def test_document_to_carousel_generates_slides(client: AsyncClient, fake_llm):
    document = await create_document(client)
    resp = await client.post(
        f"/api/documents/{document['id']}/carousel",
        json={"template_type": "STORY", "slide_count": 4},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    project = resp.json()["project"]
    assert project["template_type"] == "STORY"
    assert [s["slide_number"] for s in project["slides"]] == [1, 2, 3, 4]
    assert all(s["tone"] == "ai_generated" for s in project["slides"])
    assert len(fake_llm.calls) == 4


@pytest.mark.asyncio
async def test_document_to_carousel_rejects_short_content(client: AsyncClient):
    document = await create_document(client, content="Too short.")
    resp = await client.post(f"/api/documents/{document['id']}/carousel", headers=AUTH_HEADERS)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_document_to_carousel_rejects_long_content(client: AsyncClient):
    document = await create_document(client, content="word " * 2001)
    resp = await client.post(f"/api/documents/{document['id']}/carousel", headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert "too long" in resp.json()["error"]


@pytest.mark.asyncio
async def test_document_to_carousel_long_title_fits_column(client: AsyncClient):
    document = await create_document(client, title="T" * 250)
    resp = await client.post(
        f"/api/documents/{document['id']}/carousel", json={"generate": False}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 201
    title = resp.json()["project"]["title"]
    assert len(title) == 255
    assert title.endswith(" - Carousel")


@pytest.mark.asyncio
async def test_document_to_carousel_without_llm_key(client: AsyncClient, fake_llm):
    fake_llm.configured = False
    document = await create_document(client, content=LONG_TEXT)
    resp = await client.post(f"/api/documents/{document['id']}/carousel", headers=AUTH_HEADERS)
    assert resp.status_code == 500
    assert resp.json() == {"error": "OpenAI API key not configured"}
