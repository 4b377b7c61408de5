"""
LLM-backed content generation for carousel slides.

All prompts are module-level constants so they can be tuned without touching
logic code.

Public API
----------
intelligent_text_split(text, slide_count)               -> List[str]
ContentGenerator.generate_slides(text, type, count)     -> List[Dict]
ContentGenerator.generate_variations(content)           -> List[Dict]
ContentGenerator.generate_suggestions(content, ...)     -> List[Dict]
ContentGenerator.analyze_style(content, template_type)  -> Dict
"""
from __future__ import annotations

import logging
import math
import re
import time
from typing import Any, Dict, List, Optional

from app.services.openai_client import (
    LLMError,
    LLMResponseFormatError,
    OpenAIChatService,
)
from app.utils.helpers import clamp, truncate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TEMPLATE_TYPES = ("NEWS", "STORY", "PRODUCT")

INSTAGRAM_LIMITS = {
    "title": 60,
    "content": 180,
}

# Slide roles per template; slides beyond the fifth reuse the fifth role.
TEMPLATE_STRUCTURES: Dict[str, List[Dict[str, str]]] = {
    "NEWS": [
        {"type": "hook", "prompt": "Create an attention-grabbing headline that summarizes the main news"},
        {"type": "key_points", "prompt": "Extract 3-4 main facts, statistics, or key points as bullet points"},
        {"type": "context", "prompt": "Provide background information and context"},
        {"type": "implications", "prompt": "Explain what this means and why it matters"},
        {"type": "cta", "prompt": "Create a call-to-action encouraging engagement"},
    ],
    "STORY": [
        {"type": "hook", "prompt": "Create a compelling opening scene or question"},
        {"type": "setup", "prompt": "Set the scene with context, background, and setting"},
        {"type": "challenge", "prompt": "Describe the main problem, conflict, or obstacle"},
        {"type": "resolution", "prompt": "Explain how the challenge was solved or overcome"},
        {"type": "takeaway", "prompt": "Share the key lesson learned or insight gained"},
    ],
    "PRODUCT": [
        {"type": "problem", "prompt": "Identify the pain point or need your audience faces"},
        {"type": "solution", "prompt": "Explain how your product solves this problem"},
        {"type": "features", "prompt": "Highlight key product capabilities and features"},
        {"type": "benefits", "prompt": "Focus on concrete benefits users will experience"},
        {"type": "cta", "prompt": "Create a compelling call-to-action for purchase/signup"},
    ],
}

STYLE_GUIDELINES: Dict[str, Dict[str, str]] = {
    "NEWS": {
        "focus": "breaking news format with hook, facts, context, and implications",
        "style": "professional, authoritative, clear",
        "hashtags": "news-related, current events, trending topics",
        "structure": "headline -> key facts -> context -> implications",
    },
    "STORY": {
        "focus": "narrative storytelling with hook, setup, challenge, resolution",
        "style": "engaging, relatable, emotional connection",
        "hashtags": "story-related, personal development, inspiration",
        "structure": "hook -> setup -> challenge -> resolution -> takeaway",
    },
    "PRODUCT": {
        "focus": "problem-solution format with features, benefits, and CTA",
        "style": "persuasive, benefit-focused, action-oriented",
        "hashtags": "product-related, problem-solving, benefits",
        "structure": "problem -> solution -> features -> benefits -> call-to-action",
    },
}

SUGGESTION_TYPES = ("grammar", "tone", "engagement", "clarity", "style")
SUGGESTION_IMPACTS = ("high", "medium", "low")
STYLE_SUGGESTION_TYPES = ("emphasis", "hashtag", "emoji", "mention", "structure")
VARIATION_TONES = ("casual", "professional")


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SLIDE_SYSTEM_PROMPT = """\
You are an expert Instagram carousel content creator. Generate engaging, concise content optimized for Instagram.

IMPORTANT CONSTRAINTS:
- Title: Maximum {title_limit} characters
- Content: Maximum {content_limit} characters
- Use emojis appropriately
- Make content engaging and actionable
- Keep sentences short and punchy

Template type: {template_type}
Slide {slide_number} of {total_slides}"""

_SLIDE_USER_PROMPT = """\
{role_prompt}

Source content: "{source_text}"

Generate:
1. A catchy title (max {title_limit} chars)
2. Main content (max {content_limit} chars)

Format your response as JSON:
{{
  "title": "Your title here",
  "content": "Your content here"
}}"""

_VARIATION_SYSTEM_PROMPT = (
    "You are an expert social media content editor. Respond only with the rewritten content."
)

_VARIATION_PROMPT = """\
Rewrite this Instagram slide content with a {tone} tone:

"{content}"

Requirements:
- Keep the same core message
- Make it more {tone_description}
- Stay under 180 characters
- Make it engaging for Instagram

Provide ONLY the rewritten content, no explanations."""

_SUGGESTIONS_SYSTEM_PROMPT = (
    "You are an expert writing coach and content improvement specialist. "
    "Provide specific, actionable suggestions to improve writing quality. "
    "Always respond with valid JSON array of suggestions."
)

_SUGGESTIONS_PROMPT = """\
Analyze the following content and provide improvement suggestions in JSON format.

Content to analyze:
"{content}"

{context_line}

{type_filter}

Return a JSON array with the following structure (max 5 suggestions):
[
  {{
    "id": "1",
    "type": "grammar|tone|engagement|clarity|style",
    "title": "Brief title",
    "description": "What's the issue",
    "suggestion": "How to improve it",
    "impact": "high|medium|low"
  }}
]

Requirements:
- Each suggestion must be actionable and specific
- Type must be one of: grammar, tone, engagement, clarity, style
- Title should be concise (max 5 words)
- Suggestion should explain how to improve (max 100 words)
- Impact: high (critical), medium (important), low (nice to have)
- Only return valid JSON array, no other text"""

_STYLE_SYSTEM_PROMPT = (
    "You are an expert Instagram content strategist specializing in {template_type} "
    "template optimization. You analyze content and provide specific, actionable styling "
    "suggestions that improve engagement and readability. Always respond with valid JSON "
    "matching the exact format requested."
)

_STYLE_PROMPT = """\
Analyze this Instagram carousel slide content and provide specific styling suggestions to improve engagement and readability.

CONTENT TO ANALYZE:
"{content}"

TEMPLATE TYPE: {template_type}
FOCUS: {focus}
STYLE: {style}
HASHTAG STRATEGY: {hashtags}
STRUCTURE: {structure}

INSTAGRAM OPTIMIZATION GUIDELINES:
- Character limit: 180 characters optimal for readability
- Use **bold** for key emphasis (markdown format)
- Use *italic* for subtle emphasis
- Hashtags should be relevant and specific
- Emojis should enhance, not overwhelm
- Structure should guide the reader's eye

PROVIDE SUGGESTIONS IN THIS EXACT JSON FORMAT:
{{
  "suggestions": [
    {{
      "id": "unique-id",
      "type": "emphasis|hashtag|emoji|mention|structure",
      "original": "exact text from content",
      "suggestion": "improved version",
      "reason": "explanation of why this improves engagement",
      "confidence": 0.0-1.0,
      "position": {{ "start": 0, "end": 10 }}
    }}
  ]
}}

SUGGESTION TYPES:
1. **emphasis** - Bold/italic formatting for key phrases
2. **hashtag** - Relevant hashtags to add
3. **emoji** - Strategic emoji placement
4. **mention** - @mentions for engagement
5. **structure** - Line breaks, spacing, or reordering

RULES:
- Provide 2-5 specific suggestions
- Focus on {template_type} template optimization
- Suggest hashtags relevant to the content theme
- Suggest emojis that match the tone
- Only suggest realistic improvements
- Confidence should reflect how certain you are the suggestion will improve engagement

Analyze the content and provide actionable suggestions:"""


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def slide_role(template_type: str, slide_number: int) -> Dict[str, str]:
    """Role for a 1-based slide number; numbers past 5 reuse the last role."""
    roles = TEMPLATE_STRUCTURES[template_type]
    return roles[min(slide_number, len(roles)) - 1]


def intelligent_text_split(text: str, slide_count: int) -> List[str]:
    """
    Split *text* into exactly *slide_count* source segments.

    Blank-line separated paragraphs are distributed in even groups when there
    are at least as many paragraphs as slides. Otherwise sentences are
    grouped towards an even target length and the last segment is repeated
    to pad the list.
    """
    paragraphs = [
        re.sub(r"\s+", " ", p).strip()
        for p in re.split(r"\n\s*\n", (text or "").strip())
    ]
    paragraphs = [p for p in paragraphs if p]
    clean_text = re.sub(r"\s+", " ", (text or "").strip())

    if slide_count <= 0:
        return []

    if len(paragraphs) >= slide_count:
        per_slide = math.ceil(len(paragraphs) / slide_count)
        return [
            "\n\n".join(paragraphs[i * per_slide:(i + 1) * per_slide])
            for i in range(slide_count)
        ]

    sentences = [s.strip() for s in re.split(r"[.!?]+", clean_text) if s.strip()]
    target_length = len(clean_text) // slide_count
    segments: List[str] = []
    current = ""

    for sentence in sentences:
        if current and len(current) + len(sentence) > target_length:
            segments.append(current.strip())
            current = sentence
        else:
            current = f"{current}. {sentence}" if current else sentence

    if current:
        segments.append(current.strip())

    while len(segments) < slide_count:
        segments.append(segments[-1] if segments else clean_text)

    return segments[:slide_count]


def validate_suggestion_items(items: List[Any]) -> List[Dict[str, str]]:
    """Coerce raw suggestion objects to the response shape (max 5)."""
    validated: List[Dict[str, str]] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        raw_type = str(item.get("type") or "").lower()
        raw_impact = str(item.get("impact") or "").lower()
        suggestion = {
            "id": str(item.get("id") or index + 1),
            "type": raw_type if raw_type in SUGGESTION_TYPES else "clarity",
            "title": truncate(str(item.get("title") or "Suggestion"), 50),
            "description": truncate(str(item.get("description") or ""), 100),
            "suggestion": truncate(str(item.get("suggestion") or ""), 200),
            "impact": raw_impact if raw_impact in SUGGESTION_IMPACTS else "medium",
        }
        if suggestion["title"] and suggestion["description"] and suggestion["suggestion"]:
            validated.append(suggestion)
    return validated[:5]


def default_suggestions() -> List[Dict[str, str]]:
    return [
        {
            "id": "1",
            "type": "clarity",
            "title": "Content Received",
            "description": "Ready for analysis",
            "suggestion": "Your content has been received. Enable OpenAI API key for intelligent suggestions.",
            "impact": "low",
        }
    ]


def parse_suggestions(reply: str) -> List[Dict[str, str]]:
    """Pull the first JSON array out of *reply*; fall back to the default suggestion."""
    match = re.search(r"\[.*\]", reply or "", flags=re.DOTALL)
    if not match:
        logger.warning("No JSON array found in suggestions response")
        return default_suggestions()

    ok, parsed = OpenAIChatService.parse_json_lenient(match.group(0))
    if not ok or not isinstance(parsed, list):
        logger.warning("Suggestions response is not a JSON array")
        return default_suggestions()
    return validate_suggestion_items(parsed)


def _position(value: Any) -> Dict[str, int]:
    if isinstance(value, dict):
        try:
            return {"start": int(value.get("start", 0)), "end": int(value.get("end", 0))}
        except (TypeError, ValueError):
            pass
    return {"start": 0, "end": 0}


def validate_style_suggestions(items: List[Any]) -> List[Dict[str, Any]]:
    """Fill defaults, clamp confidence and drop incomplete style suggestions (max 5)."""
    stamp = int(time.time() * 1000)
    validated: List[Dict[str, Any]] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        suggestion = {
            "id": str(item.get("id") or f"suggestion-{stamp}-{index}"),
            "type": str(item.get("type") or "structure"),
            "original": str(item.get("original") or ""),
            "suggestion": str(item.get("suggestion") or ""),
            "reason": str(item.get("reason") or "Improves engagement"),
            "confidence": clamp(item.get("confidence") or 0.7, 0.1, 1.0),
            "position": _position(item.get("position")),
        }
        if suggestion["original"] and suggestion["suggestion"]:
            validated.append(suggestion)
    return validated[:5]


def summarize_style_suggestions(suggestions: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {t: sum(1 for s in suggestions if s["type"] == t) for t in STYLE_SUGGESTION_TYPES}
    return {
        "totalSuggestions": len(suggestions),
        "emphasisSuggestions": counts["emphasis"],
        "hashtagSuggestions": counts["hashtag"],
        "emojiSuggestions": counts["emoji"],
        "mentionSuggestions": counts["mention"],
        "structureSuggestions": counts["structure"],
    }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ContentGenerator:
    """Slide, variation, suggestion and style generation over one LLM client."""

    SLIDE_TEMPERATURE = 0.7
    SLIDE_MAX_TOKENS = 500
    VARIATION_MAX_TOKENS = 200
    ANALYSIS_MAX_TOKENS = 1000

    def __init__(self, llm: OpenAIChatService) -> None:
        self.llm = llm

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------

    async def generate_slide_content(
        self,
        role_prompt: str,
        source_text: str,
        template_type: str,
        slide_number: int,
        total_slides: int,
    ) -> Dict[str, str]:
        """Generate one slide's title and content, falling back on any LLM failure."""
        title_limit = INSTAGRAM_LIMITS["title"]
        content_limit = INSTAGRAM_LIMITS["content"]

        system_prompt = _SLIDE_SYSTEM_PROMPT.format(
            title_limit=title_limit,
            content_limit=content_limit,
            template_type=template_type,
            slide_number=slide_number,
            total_slides=total_slides,
        )
        user_prompt = _SLIDE_USER_PROMPT.format(
            role_prompt=role_prompt,
            source_text=source_text,
            title_limit=title_limit,
            content_limit=content_limit,
        )

        try:
            reply = await self.llm.complete(
                system_prompt,
                user_prompt,
                temperature=self.SLIDE_TEMPERATURE,
                max_tokens=self.SLIDE_MAX_TOKENS,
            )
        except LLMError as exc:
            logger.error("Error generating slide %d content: %s", slide_number, exc)
            return {
                "title": f"Slide {slide_number}",
                "content": f"Generated content for {template_type.lower()} slide {slide_number}...",
            }

        ok, parsed = OpenAIChatService.parse_json_lenient(reply)
        if not ok or not isinstance(parsed, dict):
            logger.warning("Failed to parse slide %d JSON response, using raw text", slide_number)
            return {"title": f"Slide {slide_number}", "content": truncate(reply, content_limit)}

        return {
            "title": truncate(str(parsed.get("title") or ""), title_limit) or f"Slide {slide_number}",
            "content": truncate(str(parsed.get("content") or ""), content_limit)
            or "Content generated here...",
        }

    async def generate_slides(
        self, source_text: str, template_type: str, slide_count: int
    ) -> List[Dict[str, Any]]:
        """
        Generate *slide_count* slides following the template's role sequence.

        Slides are generated one at a time so the numbering and roles stay in
        order. Individual slide failures produce fallback text.

        Raises:
            LLMNotConfiguredError: no API key.
        """
        self.llm.ensure_configured()
        logger.info("Generating %d slides for %s template", slide_count, template_type)

        segments = intelligent_text_split(source_text, slide_count)
        slides: List[Dict[str, Any]] = []
        for number in range(1, slide_count + 1):
            role = slide_role(template_type, number)
            segment = segments[number - 1] if number - 1 < len(segments) else ""
            generated = await self.generate_slide_content(
                role["prompt"],
                segment or source_text,
                template_type,
                number,
                slide_count,
            )
            slides.append(
                {
                    "slide_number": number,
                    "title": generated["title"],
                    "content": generated["content"],
                    "slide_type": role["type"],
                }
            )

        logger.info("Successfully generated %d slides", len(slides))
        return slides

    # ------------------------------------------------------------------
    # Variations
    # ------------------------------------------------------------------

    async def generate_variations(self, original_content: str) -> List[Dict[str, Any]]:
        """Rewrite *original_content* once per tone; failing tones are skipped."""
        self.llm.ensure_configured()

        suggestions: List[Dict[str, Any]] = []
        for tone in VARIATION_TONES:
            prompt = _VARIATION_PROMPT.format(
                tone=tone,
                content=original_content,
                tone_description=(
                    "friendly and conversational" if tone == "casual" else "polished and professional"
                ),
            )
            try:
                reply = await self.llm.complete(
                    _VARIATION_SYSTEM_PROMPT,
                    prompt,
                    temperature=0.7,
                    max_tokens=self.VARIATION_MAX_TOKENS,
                )
            except LLMError as exc:
                logger.error("Error generating %s suggestion: %s", tone, exc)
                continue

            clean = re.sub(r"^[\"']|[\"']$", "", reply.strip())
            clean = truncate(clean, INSTAGRAM_LIMITS["content"])
            if not clean:
                continue
            suggestions.append(
                {
                    "id": f"{tone}-{int(time.time() * 1000)}",
                    "content": clean,
                    "char_count": len(clean),
                    "tone": tone,
                }
            )
        return suggestions

    # ------------------------------------------------------------------
    # Writing suggestions
    # ------------------------------------------------------------------

    @staticmethod
    def build_suggestions_prompt(
        content: str, context: Optional[str] = None, suggestion_type: Optional[str] = None
    ) -> str:
        type_filter = (
            f"Focus on {suggestion_type} improvements."
            if suggestion_type and suggestion_type != "all"
            else ""
        )
        return _SUGGESTIONS_PROMPT.format(
            content=content,
            context_line=f"Context: {context}" if context else "",
            type_filter=type_filter,
        )

    async def generate_suggestions(
        self, content: str, context: Optional[str] = None, suggestion_type: str = "all"
    ) -> List[Dict[str, str]]:
        """
        Ask for up to five improvement suggestions.

        Raises:
            LLMNotConfiguredError / LLMServiceError: from the client.
        """
        reply = await self.llm.complete(
            _SUGGESTIONS_SYSTEM_PROMPT,
            self.build_suggestions_prompt(content, context, suggestion_type),
            temperature=0.7,
            max_tokens=self.ANALYSIS_MAX_TOKENS,
        )
        return parse_suggestions(reply)

    # ------------------------------------------------------------------
    # Style analysis
    # ------------------------------------------------------------------

    async def analyze_style(self, content: str, template_type: str = "STORY") -> Dict[str, Any]:
        """
        Instagram styling suggestions for one slide's content.

        Raises:
            LLMResponseFormatError: the reply is not a JSON object.
        """
        guidelines = STYLE_GUIDELINES.get(template_type, STYLE_GUIDELINES["STORY"])
        reply = await self.llm.complete(
            _STYLE_SYSTEM_PROMPT.format(template_type=template_type),
            _STYLE_PROMPT.format(content=content, template_type=template_type, **guidelines),
            temperature=0.7,
            max_tokens=self.ANALYSIS_MAX_TOKENS,
        )

        ok, parsed = OpenAIChatService.parse_json_lenient(reply)
        if not ok or not isinstance(parsed, dict):
            logger.error("Error parsing style analysis response: %s", reply[:400])
            raise LLMResponseFormatError("Failed to parse style analysis results", raw=reply)

        raw_items = parsed.get("suggestions") or []
        suggestions = validate_style_suggestions(raw_items if isinstance(raw_items, list) else [])
        return {
            "suggestions": suggestions,
            "summary": summarize_style_suggestions(suggestions),
        }
