"""
Rule-based carousel planning: no LLM calls.

Turns a document into carousel metadata (template type, slide count, title,
description) and scores content against the three templates to recommend
one, with lightweight optimization advice.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


MIN_CONTENT_CHARS = 50
MAX_CONTENT_CHARS = 10000
MAX_TITLE_CHARS = 255  # carousel_projects.title column

PRODUCT_KEYWORDS = (
    "product", "launch", "feature", "buy", "pricing", "offer",
    "sale", "discount", "free trial", "subscription", "plan",
    "purchase", "order", "checkout", "payment", "upgrade",
    "benefits", "features", "advantage", "solution",
)

NEWS_KEYWORDS = (
    "news", "announced", "breaking", "update", "report",
    "today", "yesterday", "this week", "new study", "research",
    "statement", "press release", "official", "confirmed",
    "revealed", "disclosed", "published", "released",
)

# (max trimmed length, slide count)
SLIDE_COUNT_RANGES: Tuple[Tuple[float, int], ...] = (
    (400, 3),
    (800, 5),
    (1200, 6),
    (1600, 7),
    (float("inf"), 8),
)

TEMPLATE_KEYWORDS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "NEWS": {
        "primary": ("news", "breaking", "announced", "update", "report", "study", "research", "released", "launched"),
        "secondary": ("today", "yesterday", "this week", "new", "latest", "recent", "confirmed", "revealed"),
        "negative": ("story", "journey", "personal", "experience", "lesson", "learned"),
    },
    "PRODUCT": {
        "primary": ("product", "launch", "feature", "solution", "tool", "service", "offer", "pricing", "buy"),
        "secondary": ("benefits", "advantages", "problems", "solves", "helps", "improves", "saves", "increases"),
        "negative": ("news", "story", "personal", "journey", "experience"),
    },
    "STORY": {
        "primary": ("story", "journey", "experience", "learned", "lesson", "personal", "challenge", "overcome"),
        # Matched against lowercased content, so "I" never contributes.
        "secondary": ("my", "me", "I", "we", "our", "journey", "transformation", "growth", "success"),
        "negative": ("product", "launch", "news", "breaking", "announced"),
    },
}

OPTIMIZATION_RULES: Dict[str, Dict[str, Any]] = {
    "NEWS": {
        "max_chars": 160,
        "avoid_words": ("maybe", "perhaps", "might", "possibly"),
        "prefer_words": ("confirmed", "reported", "announced", "revealed"),
    },
    "PRODUCT": {
        "max_chars": 180,
        "avoid_words": ("complicated", "difficult", "hard", "complex"),
        "prefer_words": ("easy", "simple", "effective", "proven", "results"),
    },
    "STORY": {
        "max_chars": 200,
        "avoid_words": ("perfect", "always", "never", "everyone"),
        "prefer_words": ("learned", "discovered", "realized", "experienced"),
    },
}

RECOMMENDED_SLIDE_RANGES: Dict[str, Dict[str, int]] = {
    "NEWS": {"min": 4, "max": 6, "optimal": 5},
    "PRODUCT": {"min": 5, "max": 8, "optimal": 6},
    "STORY": {"min": 4, "max": 10, "optimal": 7},
}


class CarouselContentError(ValueError):
    """Document content cannot be turned into a carousel."""


# ---------------------------------------------------------------------------
# Document -> carousel
# ---------------------------------------------------------------------------

def detect_template_type(content: str) -> str:
    """Keyword-count detection; product wins ties with news, STORY is the default."""
    if not content or not content.strip():
        return "STORY"

    lowered = content.lower()
    product_matches = sum(1 for k in PRODUCT_KEYWORDS if k in lowered)
    news_matches = sum(1 for k in NEWS_KEYWORDS if k in lowered)

    if product_matches >= 2:
        return "PRODUCT"
    if news_matches >= 2:
        return "NEWS"
    if any(p in lowered for p in ("product launch", "buy now", "pricing")):
        return "PRODUCT"
    if any(p in lowered for p in ("breaking news", "just announced", "press release")):
        return "NEWS"
    return "STORY"


def calculate_slide_count(content: str) -> int:
    if not content or not content.strip():
        return 5
    length = len(content.strip())
    for max_chars, slides in SLIDE_COUNT_RANGES:
        if length <= max_chars:
            return slides
    return 8


def generate_carousel_title(document_title: str) -> str:
    title = (document_title or "").strip()
    if not title:
        return "Untitled Carousel"
    lowered = title.lower()
    if "carousel" in lowered or "slides" in lowered:
        return title[:MAX_TITLE_CHARS]
    suffix = " - Carousel"
    return f"{title[:MAX_TITLE_CHARS - len(suffix)].rstrip()}{suffix}"


def generate_carousel_description(document_title: str) -> str:
    title = (document_title or "").strip()
    if not title:
        return "Carousel created from document"
    return f"Carousel created from: {title}"


def validate_document_content(content: str) -> Optional[str]:
    """Return an error message, or None when the content is usable."""
    trimmed = (content or "").strip()
    if not trimmed:
        return "Document content is empty"
    if len(trimmed) < MIN_CONTENT_CHARS:
        return f"Content too short ({len(trimmed)} chars). Minimum {MIN_CONTENT_CHARS} characters required."
    if len(trimmed) > MAX_CONTENT_CHARS:
        return "Content too long (max 10,000 characters). Consider splitting into multiple carousels."
    return None


def build_carousel_plan(title: str, content: str) -> Dict[str, Any]:
    """
    Collect everything needed to create a carousel project from a document.

    Raises:
        CarouselContentError: content is empty, too short or too long.
    """
    error = validate_document_content(content)
    if error:
        raise CarouselContentError(error)

    return {
        "title": generate_carousel_title(title),
        "description": generate_carousel_description(title),
        "source_text": content.strip(),
        "template_type": detect_template_type(content),
        "slide_count": calculate_slide_count(content),
    }


def get_recommended_slide_range(template_type: str) -> Dict[str, int]:
    return dict(RECOMMENDED_SLIDE_RANGES.get(template_type, {"min": 3, "max": 10, "optimal": 5}))


# ---------------------------------------------------------------------------
# Template recommendation
# ---------------------------------------------------------------------------

def score_templates(content: str) -> Dict[str, int]:
    lowered = content.lower()
    scores = {name: 0 for name in TEMPLATE_KEYWORDS}
    for name, groups in TEMPLATE_KEYWORDS.items():
        scores[name] += 3 * sum(1 for k in groups["primary"] if k in lowered)
        scores[name] += sum(1 for k in groups["secondary"] if k in lowered)
        scores[name] -= 2 * sum(1 for k in groups["negative"] if k in lowered)
    return scores


def _recommendation_reasoning(recommended: str, scores: Dict[str, int], lowered: str) -> str:
    reasons: List[str] = []
    if recommended == "NEWS":
        if "announced" in lowered or "breaking" in lowered:
            reasons.append("Contains announcement or breaking news language")
        if "study" in lowered or "research" in lowered:
            reasons.append("References studies or research")
    elif recommended == "PRODUCT":
        if "solution" in lowered or "helps" in lowered:
            reasons.append("Focuses on solutions and benefits")
        if "product" in lowered or "feature" in lowered:
            reasons.append("Mentions products or features")
    else:
        if "my" in lowered or "i " in lowered:
            reasons.append("Uses personal pronouns")
        if "learned" in lowered or "experience" in lowered:
            reasons.append("Shares personal experiences or lessons")

    if reasons:
        return "; ".join(reasons)
    return f"Best match based on content analysis (score: {scores[recommended]})"


def recommend_template_type(content: str) -> Dict[str, Any]:
    """
    Recommend NEWS, PRODUCT or STORY for *content*.

    Returns:
        Dict with ``recommended``, ``confidence`` (0..0.95), ``reasoning``
        and the raw ``scores``.
    """
    if not content or len(content.strip()) < 20:
        return {
            "recommended": "STORY",
            "confidence": 0.3,
            "reasoning": "Content too short for accurate analysis. Defaulting to STORY template.",
            "scores": {name: 0 for name in TEMPLATE_KEYWORDS},
        }

    scores = score_templates(content)
    max_score = max(scores.values())
    recommended = next(name for name, score in scores.items() if score == max_score)
    total_positive = sum(max(0, score) for score in scores.values())
    confidence = min(0.95, max_score / total_positive) if total_positive > 0 else 0.3

    return {
        "recommended": recommended,
        "confidence": round(confidence, 4),
        "reasoning": _recommendation_reasoning(recommended, scores, content.lower()),
        "scores": scores,
    }


def get_content_optimization_suggestions(content: str, template_type: str) -> List[Dict[str, str]]:
    """Up to three rule-based suggestions: length, weak words and engagement punctuation."""
    rules = OPTIMIZATION_RULES[template_type]
    suggestions: List[Dict[str, str]] = []

    if len(content) > rules["max_chars"]:
        suggestions.append(
            {
                "type": "length",
                "priority": "high",
                "suggestion": f"Shorten content to {rules['max_chars']} characters or less",
                "reason": f"{template_type} templates work best with concise content. Current: {len(content)} chars",
            }
        )

    lowered = content.lower()
    alternatives = " or ".join(rules["prefer_words"][:2])
    for word in rules["avoid_words"]:
        if word in lowered:
            suggestions.append(
                {
                    "type": "words",
                    "priority": "medium",
                    "suggestion": f'Consider replacing "{word}" with {alternatives}',
                    "reason": f'"{word}" weakens your message. {template_type} content should be more definitive.',
                }
            )

    if template_type == "STORY" and "?" not in content and "!" not in content:
        suggestions.append(
            {
                "type": "engagement",
                "priority": "medium",
                "suggestion": "Add a question or exclamation to increase engagement",
                "reason": "Story content performs better with emotional punctuation",
            }
        )

    return suggestions[:3]
