"""Tests for grammar-check post-processing and POST /api/documents/check-grammar."""
import json

import pytest
from httpx import AsyncClient

from app.services.grammar_checker import anchor_issue, normalize_grammar_result, reclassify_issue_type
from app.services.openai_client import LLMResponseFormatError
from tests.conftest import AUTH_HEADERS

TEXT = "She go to school every day."


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def test_reclassify_grammar_with_style_wording():
    assert reclassify_issue_type("grammar", "This sentence is wordy") == "style"


def test_reclassify_style_with_grammar_wording():
    assert reclassify_issue_type("style", "Subject-verb agreement error") == "grammar"


def test_reclassify_leaves_spelling_alone():
    assert reclassify_issue_type("spelling", "awkward spelling") == "spelling"


def test_anchor_keeps_correct_offsets():
    issue = anchor_issue({"start": 4, "end": 6, "originalText": "go"}, TEXT)
    assert (issue["start"], issue["end"]) == (4, 6)


def test_anchor_moves_to_original_text():
    issue = anchor_issue({"start": 0, "end": 2, "originalText": "school"}, TEXT)
    assert (issue["start"], issue["end"]) == (10, 16)


def test_anchor_fills_missing_original_text():
    issue = anchor_issue({"start": 4, "end": 6}, TEXT)
    assert issue["originalText"] == "go"


def test_anchor_drops_unplaceable_issue():
    assert anchor_issue({"start": 100, "end": 200, "originalText": "missing"}, TEXT) is None
    assert anchor_issue({"start": 5, "end": 5}, TEXT) is None


def test_normalize_backfills_and_summarizes():
    raw = {
        "issues": [
            {"type": "grammar", "message": "Subject-verb agreement", "start": 4, "end": 6,
             "originalText": "go", "suggestions": ["goes"]},
            {"type": "grammar", "message": "Awkward phrasing", "originalText": "every day"},
            {"type": "spelling", "message": "typo", "originalText": "nowhere"},
        ],
        "correctedText": "She goes to school every day.",
    }
    result = normalize_grammar_result(raw, TEXT)
    assert [i["id"] for i in result["issues"]] == ["issue-0", "issue-1"]
    assert [i["type"] for i in result["issues"]] == ["grammar", "style"]
    assert result["issues"][0]["severity"] == "medium"
    assert result["summary"] == {
        "totalIssues": 2,
        "grammarIssues": 1,
        "spellingIssues": 0,
        "styleIssues": 1,
    }


def test_normalize_coerces_non_string_fields():
    raw = {
        "issues": [
            {"type": "spelling", "message": "typo", "start": 4, "end": 6,
             "originalText": "go", "explanation": {"why": "typo"}},
            {"type": "grammar", "message": "Number format", "originalText": 5, "explanation": ""},
        ],
    }
    result = normalize_grammar_result(raw, "Room 5 is open")
    first, second = result["issues"]
    assert first["explanation"] == "{'why': 'typo'}"
    assert second["originalText"] == "5"
    assert (second["start"], second["end"]) == (5, 6)
    assert second["explanation"] is None


def test_normalize_rejects_non_object():
    with pytest.raises(LLMResponseFormatError):
        normalize_grammar_result(["not", "an", "object"], TEXT)


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_check_grammar_endpoint(client: AsyncClient, fake_llm):
    fake_llm.replies = [json.dumps({
        "issues": [{"id": "a1", "type": "grammar", "severity": "high", "message": "Verb tense",
                    "start": 4, "end": 6, "originalText": "go", "suggestions": ["goes"]}],
        "correctedText": "She goes to school every day.",
    })]

    resp = await client.post(
        "/api/documents/check-grammar", json={"text": TEXT, "checkType": "grammar"}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["issues"][0]["originalText"] == "go"
    assert data["correctedText"] == "She goes to school every day."
    assert data["summary"]["totalIssues"] == 1

    call = fake_llm.calls[0]
    assert call["temperature"] == 0.1
    assert call["max_tokens"] == 2000
    assert "FOCUS: report only grammar issues." in call["user"]


@pytest.mark.asyncio
async def test_check_grammar_requires_text(client: AsyncClient, fake_llm):
    resp = await client.post("/api/documents/check-grammar", json={"text": "  "}, headers=AUTH_HEADERS)
    assert resp.status_code == 400
    assert fake_llm.calls == []


@pytest.mark.asyncio
async def test_check_grammar_invalid_json_is_not_retried(client: AsyncClient, fake_llm):
    fake_llm.replies = ["Sure! Here are the issues: ..."]
    resp = await client.post("/api/documents/check-grammar", json={"text": TEXT}, headers=AUTH_HEADERS)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Invalid response format from OpenAI"}
    assert len(fake_llm.calls) == 1


@pytest.mark.asyncio
async def test_check_grammar_without_key(client: AsyncClient, fake_llm):
    fake_llm.configured = False
    resp = await client.post("/api/documents/check-grammar", json={"text": TEXT}, headers=AUTH_HEADERS)
    assert resp.status_code == 500
    assert resp.json() == {"error": "OpenAI API key not configured"}


@pytest.mark.asyncio
async def test_check_grammar_structured_explanation(client: AsyncClient, fake_llm):
    fake_llm.replies = [json.dumps({
        "issues": [{"type": "grammar", "message": "Verb tense", "start": 4, "end": 6,
                    "originalText": "go", "explanation": {"why": "third person singular"}}],
    })]
    resp = await client.post("/api/documents/check-grammar", json={"text": TEXT}, headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert "third person singular" in resp.json()["issues"][0]["explanation"]
