"""
Grammar, spelling and style checking through the chat-completion API.

The model is asked for a strict JSON report. Its classification and offsets
are then re-checked against the submitted text because the model frequently
mislabels style advice as grammar and miscounts character positions.

Public API
----------
GrammarChecker.check(text, check_type)   -> Dict (camelCase report)
normalize_grammar_result(raw, text)      -> Dict
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from app.config import settings
from app.services.openai_client import LLMResponseFormatError, OpenAIChatService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_GRAMMAR_SYSTEM_PROMPT = (
    "You are a professional writing assistant that provides grammar, spelling, "
    "and style suggestions. Always respond with valid JSON."
)

_GRAMMAR_PROMPT = """\
You are a professional writing assistant. Analyze the following text ONLY for grammar, spelling, and style issues.

Text to analyze:
"{text}"

Please provide a JSON response with the following structure:
{{
  "issues": [
    {{
      "id": "unique_id",
      "type": "grammar|spelling|style",
      "severity": "low|medium|high",
      "message": "Brief description of the issue",
      "start": number (character position),
      "end": number (character position),
      "originalText": "exact text with issue",
      "suggestions": ["suggestion1", "suggestion2"],
      "explanation": "Optional detailed explanation"
    }}
  ],
  "correctedText": "The fully corrected version of the text",
  "summary": {{
    "totalIssues": number,
    "grammarIssues": number,
    "spellingIssues": number,
    "styleIssues": number
  }}
}}

CRITICAL CLASSIFICATION RULES:

**GRAMMAR issues** (type: "grammar") - ONLY these types:
- Subject-verb disagreement (e.g., "He don't" -> "He doesn't")
- Incorrect verb tenses (e.g., "I have went" -> "I have gone")
- Wrong pronoun usage (e.g., "Me and him" -> "He and I")
- Article errors (e.g., "a apple" -> "an apple")
- Preposition mistakes (e.g., "different than" -> "different from")
- Comma splices and run-on sentences
- Incorrect word forms (e.g., "good" vs "well")

**SPELLING issues** (type: "spelling") - ONLY these:
- Misspelled words (e.g., "ultiple" -> "multiple")
- Typos (e.g., "teh" -> "the")
- Wrong word entirely due to spelling (e.g., "there" vs "their")

**STYLE issues** (type: "style") - Everything else including:
- Sentence fragments
- Unclear or awkward phrasing
- Wordiness or redundancy
- Passive voice suggestions
- Tone or clarity improvements
- Word choice recommendations
- Flow and readability suggestions

IMPORTANT:
- If it's about sentence structure, clarity, or readability -> type: "style"
- If it's about correct grammar rules -> type: "grammar"
- If it's a misspelled word -> type: "spelling"
- Be VERY conservative with grammar classification
- Most "consider rephrasing" suggestions should be "style"
- Sentence fragments are "style", not "grammar"
{focus}
OTHER RULES:
1. The "originalText" field MUST contain the EXACT text from the document
2. For spelling: only the misspelled word
3. For grammar: the specific phrase with the error
4. For style: the phrase that could be improved
5. Calculate positions by counting from start (0-based)
6. Ensure positions exactly match "originalText"
7. Give 1-3 suggestions per issue
8. Use clear, concise messages
9. Return valid JSON only

Examples:
- Text: "He don't like it" -> type: "grammar", originalText: "don't", suggestions: ["doesn't"]
- Text: "I have ultiple cats" -> type: "spelling", originalText: "ultiple", suggestions: ["multiple"]
- Text: "Which is good." -> type: "style", originalText: "Which is good.", suggestions: ["This is good."]
"""

# Messages containing these phrases describe style advice, not grammar errors
STYLE_INDICATORS = (
    "sentence fragment",
    "consider rephrasing",
    "unclear",
    "awkward",
    "wordy",
    "passive voice",
    "flow",
    "readability",
    "clarity",
    "tone",
    "word choice",
    "redundant",
    "verbose",
    "concise",
    "better to",
    "might be better",
    "could be improved",
    "consider using",
    "sounds better",
    "more natural",
)

GRAMMAR_INDICATORS = (
    "subject-verb",
    "verb tense",
    "pronoun",
    "article",
    "preposition",
    "comma splice",
    "run-on",
    "agreement",
    "conjugation",
    "should be",
    "incorrect use of",
    "wrong form",
)

ISSUE_TYPES = ("grammar", "spelling", "style")


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def reclassify_issue_type(issue_type: str, message: str) -> str:
    """Move grammar issues with style wording to style, and vice versa."""
    lowered = (message or "").lower()
    if issue_type == "grammar" and any(ind in lowered for ind in STYLE_INDICATORS):
        logger.debug("Reclassifying %r from grammar to style", message)
        return "style"
    if issue_type == "style" and any(ind in lowered for ind in GRAMMAR_INDICATORS):
        logger.debug("Reclassifying %r from style to grammar", message)
        return "grammar"
    return issue_type


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def anchor_issue(issue: Dict[str, Any], text: str) -> Optional[Dict[str, Any]]:
    """
    Make ``start``/``end``/``originalText`` agree with *text*.

    Returns the repaired issue, or None when it cannot be placed in the text.
    """
    start = _as_int(issue.get("start"))
    end = _as_int(issue.get("end"))
    original = issue.get("originalText") or ""

    if start is not None and end is not None and 0 <= start < end <= len(text):
        at_position = text[start:end]
        if original and original != at_position:
            found = text.find(original)
            if found != -1:
                logger.debug(
                    "Position mismatch for %s: moved %d-%d to %d-%d",
                    issue.get("id"), start, end, found, found + len(original),
                )
                start, end = found, found + len(original)
            else:
                original = at_position
        elif not original:
            original = at_position
    else:
        if not original:
            logger.warning("Invalid positions and no originalText for issue %s", issue.get("id"))
            return None
        found = text.find(original)
        if found == -1:
            logger.warning(
                "Invalid positions and originalText not found for issue %s", issue.get("id")
            )
            return None
        start, end = found, found + len(original)

    issue["start"] = start
    issue["end"] = end
    issue["originalText"] = original
    return issue


def summarize_issues(issues: List[Dict[str, Any]]) -> Dict[str, int]:
    return {
        "totalIssues": len(issues),
        "grammarIssues": sum(1 for i in issues if i.get("type") == "grammar"),
        "spellingIssues": sum(1 for i in issues if i.get("type") == "spelling"),
        "styleIssues": sum(1 for i in issues if i.get("type") == "style"),
    }


def normalize_grammar_result(raw: Dict[str, Any], text: str) -> Dict[str, Any]:
    """
    Clean a parsed model report against the original *text*.

    Back-fills ids, reclassifies types from the message wording, repairs or
    drops badly anchored issues and recomputes the summary.

    Raises:
        LLMResponseFormatError: *raw* is not an object with an issue list.
    """
    if not isinstance(raw, dict):
        raise LLMResponseFormatError("Invalid response format from OpenAI")
    raw_issues = raw.get("issues") or []
    if not isinstance(raw_issues, list):
        raise LLMResponseFormatError("Invalid response format from OpenAI")

    issues: List[Dict[str, Any]] = []
    for index, item in enumerate(raw_issues):
        if not isinstance(item, dict):
            continue
        issue = dict(item)
        issue["id"] = str(issue.get("id") or f"issue-{index}")
        issue["message"] = str(issue.get("message") or "")
        issue_type = str(issue.get("type") or "style").lower()
        if issue_type not in ISSUE_TYPES:
            issue_type = "style"
        issue["type"] = reclassify_issue_type(issue_type, issue["message"])
        if issue.get("severity") not in ("low", "medium", "high"):
            issue["severity"] = "medium"
        suggestions = issue.get("suggestions") or []
        issue["suggestions"] = [str(s) for s in suggestions] if isinstance(suggestions, list) else []
        explanation = issue.get("explanation")
        issue["explanation"] = str(explanation) if explanation not in (None, "") else None
        original = issue.get("originalText")
        issue["originalText"] = "" if original is None else str(original)

        anchored = anchor_issue(issue, text)
        if anchored is not None:
            issues.append(anchored)

    corrected = raw.get("correctedText")
    return {
        "issues": issues,
        "correctedText": corrected if isinstance(corrected, str) else None,
        "summary": summarize_issues(issues),
    }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class GrammarChecker:
    """Runs the grammar prompt and returns a normalized camelCase report."""

    TEMPERATURE = 0.1
    MAX_TOKENS = 2000

    def __init__(self, llm: OpenAIChatService) -> None:
        self.llm = llm

    @staticmethod
    def build_prompt(text: str, check_type: str = "all") -> str:
        focus = ""
        if check_type and check_type != "all":
            focus = f"\nFOCUS: report only {check_type} issues.\n"
        return _GRAMMAR_PROMPT.format(text=text, focus=focus)

    async def check(self, text: str, check_type: str = "all") -> Dict[str, Any]:
        """
        Check *text* and return ``{issues, correctedText, summary}``.

        Raises:
            LLMNotConfiguredError / LLMServiceError: from the client.
            LLMResponseFormatError: the reply is not valid JSON.
        """
        reply = await self.llm.complete(
            _GRAMMAR_SYSTEM_PROMPT,
            self.build_prompt(text, check_type),
            model=settings.OPENAI_MODEL,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        try:
            raw = json.loads(reply)
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Error parsing grammar response: %s", reply[:400])
            raise LLMResponseFormatError("Invalid response format from OpenAI", raw=reply) from exc

        result = normalize_grammar_result(raw, text)
        logger.info(
            "Grammar check: %d chars, %d issues", len(text), result["summary"]["totalIssues"]
        )
        return result
