"""
AI content endpoints.

Route summary
-------------
POST /api/generate-slides          - LLM slides following a template structure
POST /api/generate-variations      - casual/professional rewrites of a slide
POST /api/generate-suggestions     - writing improvement suggestions
POST /api/analyze-style            - Instagram styling suggestions
POST /api/recommend-template       - keyword-based template recommendation (no LLM)
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies.auth import get_current_user_id
from app.dependencies.llm import get_content_generator, llm_http_error
from app.models.schemas import (
    GenerateSlidesRequest,
    GenerateSlidesResponse,
    StyleAnalysisRequest,
    StyleAnalysisResponse,
    SuggestionsRequest,
    SuggestionsResponse,
    TemplateRecommendationRequest,
    TemplateRecommendationResponse,
    VariationsRequest,
    VariationsResponse,
)
from app.services.carousel_builder import (
    MIN_CONTENT_CHARS,
    get_content_optimization_suggestions,
    get_recommended_slide_range,
    recommend_template_type,
)
from app.services.content_generator import TEMPLATE_TYPES, ContentGenerator
from app.services.openai_client import LLMError

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_SLIDES = 3
MAX_SLIDES = 10
MIN_VARIATION_CHARS = 10
MIN_STYLE_CHARS = 10


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ═══════════════════════════════════════════════════════════════════════════════
# SLIDES
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/generate-slides", response_model=GenerateSlidesResponse)
async def generate_slides(
    body: GenerateSlidesRequest,
    user_id: str = Depends(get_current_user_id),
    generator: ContentGenerator = Depends(get_content_generator),
) -> GenerateSlidesResponse:
    """
    Generate carousel slides from source text.

    - source_text: at least 50 characters
    - template_type: NEWS, STORY or PRODUCT
    - slide_count: 3..10
    """
    source_text = body.source_text or ""
    if len(source_text.strip()) < MIN_CONTENT_CHARS:
        raise _bad_request("Source text must be at least 50 characters long")
    if body.template_type not in TEMPLATE_TYPES:
        raise _bad_request("Template type must be NEWS, STORY, or PRODUCT")
    if body.slide_count is None or not MIN_SLIDES <= body.slide_count <= MAX_SLIDES:
        raise _bad_request("Slide count must be between 3 and 10")

    try:
        slides = await generator.generate_slides(source_text, body.template_type, body.slide_count)
    except LLMError as exc:
        raise llm_http_error(exc, "Failed to generate slides")

    return GenerateSlidesResponse(
        slides=slides,
        success=True,
        message=f"Generated {len(slides)} slides for {body.template_type} template",
    )


@router.post("/generate-variations", response_model=VariationsResponse)
async def generate_variations(
    body: VariationsRequest,
    user_id: str = Depends(get_current_user_id),
    generator: ContentGenerator = Depends(get_content_generator),
) -> VariationsResponse:
    content = (body.original_content or "").strip()
    if len(content) < MIN_VARIATION_CHARS:
        raise _bad_request("Content too short for suggestions")

    try:
        suggestions = await generator.generate_variations(content)
    except LLMError as exc:
        raise llm_http_error(exc, "Failed to generate suggestions")

    if not suggestions:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to generate suggestions",
        )
    return VariationsResponse(suggestions=suggestions, success=True)


# ═══════════════════════════════════════════════════════════════════════════════
# ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/generate-suggestions", response_model=SuggestionsResponse)
async def generate_suggestions(
    body: SuggestionsRequest,
    user_id: str = Depends(get_current_user_id),
    generator: ContentGenerator = Depends(get_content_generator),
) -> SuggestionsResponse:
    if not body.content or not body.content.strip():
        raise _bad_request("Content is required")

    try:
        suggestions = await generator.generate_suggestions(body.content, body.context, body.type)
    except LLMError as exc:
        raise llm_http_error(exc, "Failed to generate suggestions")

    return SuggestionsResponse(suggestions=suggestions)


@router.post("/analyze-style", response_model=StyleAnalysisResponse)
async def analyze_style(
    body: StyleAnalysisRequest,
    user_id: str = Depends(get_current_user_id),
    generator: ContentGenerator = Depends(get_content_generator),
) -> StyleAnalysisResponse:
    content = body.content or ""
    if len(content.strip()) < MIN_STYLE_CHARS:
        raise _bad_request("Content is required and must be at least 10 characters long")

    template_type = body.template_type or "STORY"
    if template_type not in TEMPLATE_TYPES:
        raise _bad_request("Invalid template_type. Must be NEWS, STORY, or PRODUCT")

    try:
        result = await generator.analyze_style(content, template_type)
    except LLMError as exc:
        raise llm_http_error(exc, "Failed to analyze style")

    return StyleAnalysisResponse(**result)


@router.post("/recommend-template", response_model=TemplateRecommendationResponse)
async def recommend_template(
    body: TemplateRecommendationRequest,
    user_id: str = Depends(get_current_user_id),
) -> TemplateRecommendationResponse:
    """Pick NEWS, STORY or PRODUCT from keywords, with slide range and content tips."""
    recommendation = recommend_template_type(body.content)
    recommended = recommendation["recommended"]
    return TemplateRecommendationResponse(
        **recommendation,
        slide_range=get_recommended_slide_range(recommended),
        optimizations=get_content_optimization_suggestions(body.content, recommended),
    )
