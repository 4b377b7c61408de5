"""
Pydantic schemas for request/response validation.

Response bodies are wrapped in resource-named envelopes
(``{"document": ...}``, ``{"projects": [...]}``) as the frontend expects.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# Enums (matching database enums)
class TemplateTypeSchema(str, Enum):
    """Carousel template types for API payloads."""

    NEWS = "NEWS"
    STORY = "STORY"
    PRODUCT = "PRODUCT"


class ProjectStatusSchema(str, Enum):
    """Project lifecycle states for API payloads."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class SuccessResponse(BaseModel):
    """Generic acknowledgement."""

    success: bool = True
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Document Schemas
# ---------------------------------------------------------------------------

class DocumentWriteRequest(BaseModel):
    """Body for creating or updating a document. Title is checked by the handler."""

    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None


class DocumentResponse(BaseModel):
    """Schema for document details."""

    id: str
    user_id: str
    title: str
    content: str
    word_count: int
    char_count: int
    language: str = "en"
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DocumentEnvelope(BaseModel):
    document: Optional[DocumentResponse] = None


class DocumentListEnvelope(BaseModel):
    documents: List[DocumentResponse]


class UntitledNameResponse(BaseModel):
    title: str


class ReadabilityResponse(BaseModel):
    """Flesch reading-ease result."""

    score: float
    level: str
    suggestions: List[str] = []


class DocumentCarouselRequest(BaseModel):
    """Options for turning a document into a carousel project."""

    generate: bool = True
    template_type: Optional[TemplateTypeSchema] = None
    slide_count: Optional[int] = Field(None, ge=3, le=10)


# ---------------------------------------------------------------------------
# Template Schemas
# ---------------------------------------------------------------------------

class BrandVoiceTemplateResponse(BaseModel):
    """Full brand voice template."""

    id: str
    name: str
    description: Optional[str] = None
    voice_profile: Dict[str, Any] = {}
    is_public: bool
    usage_count: int
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TemplateSummary(BaseModel):
    """Template fields embedded in project responses."""

    id: str
    name: str
    voice_profile: Dict[str, Any] = {}

    model_config = ConfigDict(from_attributes=True)


class TemplateListEnvelope(BaseModel):
    templates: List[BrandVoiceTemplateResponse]


# ---------------------------------------------------------------------------
# Slide Schemas
# ---------------------------------------------------------------------------

class SlideCreateRequest(BaseModel):
    slide_number: Optional[int] = None
    content: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    tone: Optional[str] = Field(None, max_length=50)


class SlideUpdateRequest(BaseModel):
    content: Optional[str] = None
    tone: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = Field(None, max_length=255)


class SlideResponse(BaseModel):
    id: str
    project_id: str
    slide_number: int
    title: Optional[str] = None
    content: str
    char_count: int
    tone: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SlideEnvelope(BaseModel):
    slide: SlideResponse


# ---------------------------------------------------------------------------
# Project Schemas
# ---------------------------------------------------------------------------

class ProjectCreateRequest(BaseModel):
    """Schema for creating a carousel project. Title is checked by the handler."""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    template_id: Optional[str] = None
    document_id: Optional[str] = None
    template_type: Optional[TemplateTypeSchema] = None
    target_audience: Optional[str] = Field(None, max_length=255)


class ProjectUpdateRequest(ProjectCreateRequest):
    status: Optional[ProjectStatusSchema] = None


class ProjectResponse(BaseModel):
    """Project with its slides and template summary."""

    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    template_id: Optional[str] = None
    document_id: Optional[str] = None
    template_type: Optional[TemplateTypeSchema] = None
    status: ProjectStatusSchema = ProjectStatusSchema.DRAFT
    target_audience: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    slides: List[SlideResponse] = []
    template: Optional[TemplateSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ProjectEnvelope(BaseModel):
    project: ProjectResponse
    message: Optional[str] = None


class ProjectListEnvelope(BaseModel):
    projects: List[ProjectResponse]


# ---------------------------------------------------------------------------
# User Schemas
# ---------------------------------------------------------------------------

class UserSettingsUpdateRequest(BaseModel):
    preferences: Optional[Dict[str, Any]] = None
    notification_settings: Optional[Dict[str, Any]] = None


class UserSettingsResponse(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    preferences: Dict[str, Any]
    notification_settings: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserSettingsEnvelope(BaseModel):
    settings: UserSettingsResponse


class UserStatsResponse(BaseModel):
    """camelCase on the wire, like the grammar report."""

    writing_score: int = Field(..., alias="writingScore")
    document_count: int = Field(..., alias="documentCount")
    project_count: int = Field(..., alias="projectCount")
    total_words: int = Field(..., alias="totalWords")

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Grammar Schemas (camelCase on the wire)
# ---------------------------------------------------------------------------

class GrammarCheckRequest(BaseModel):
    text: Optional[str] = None
    check_type: str = Field("all", alias="checkType")

    model_config = ConfigDict(populate_by_name=True)


class GrammarIssue(BaseModel):
    id: str
    type: str
    severity: str = "medium"
    message: str = ""
    start: int
    end: int
    original_text: str = Field(..., alias="originalText")
    suggestions: List[str] = []
    explanation: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class GrammarSummary(BaseModel):
    total_issues: int = Field(..., alias="totalIssues")
    grammar_issues: int = Field(..., alias="grammarIssues")
    spelling_issues: int = Field(..., alias="spellingIssues")
    style_issues: int = Field(..., alias="styleIssues")

    model_config = ConfigDict(populate_by_name=True)


class GrammarCheckResponse(BaseModel):
    issues: List[GrammarIssue]
    corrected_text: Optional[str] = Field(None, alias="correctedText")
    summary: GrammarSummary

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Generation Schemas
# ---------------------------------------------------------------------------

class GenerateSlidesRequest(BaseModel):
    source_text: Optional[str] = None
    template_type: Optional[str] = None
    slide_count: Optional[int] = None


class GeneratedSlide(BaseModel):
    slide_number: int
    title: str
    content: str
    slide_type: str


class GenerateSlidesResponse(BaseModel):
    slides: List[GeneratedSlide]
    success: bool = True
    message: str


class VariationsRequest(BaseModel):
    original_content: Optional[str] = None


class ContentVariation(BaseModel):
    id: str
    content: str
    char_count: int
    tone: Optional[str] = None


class VariationsResponse(BaseModel):
    suggestions: List[ContentVariation]
    success: bool = True


class SuggestionsRequest(BaseModel):
    content: Optional[str] = None
    context: Optional[str] = None
    type: str = "all"


class WritingSuggestion(BaseModel):
    id: str
    type: str
    title: str
    description: str
    suggestion: str
    impact: str


class SuggestionsResponse(BaseModel):
    suggestions: List[WritingSuggestion]


class StyleAnalysisRequest(BaseModel):
    content: Optional[str] = None
    template_type: Optional[str] = "STORY"


class TextPosition(BaseModel):
    start: int = 0
    end: int = 0


class StyleSuggestion(BaseModel):
    id: str
    type: str
    original: str
    suggestion: str
    reason: str
    confidence: float
    position: TextPosition = TextPosition()


class StyleSummary(BaseModel):
    total_suggestions: int = Field(..., alias="totalSuggestions")
    emphasis_suggestions: int = Field(..., alias="emphasisSuggestions")
    hashtag_suggestions: int = Field(..., alias="hashtagSuggestions")
    emoji_suggestions: int = Field(..., alias="emojiSuggestions")
    mention_suggestions: int = Field(..., alias="mentionSuggestions")
    structure_suggestions: int = Field(..., alias="structureSuggestions")

    model_config = ConfigDict(populate_by_name=True)


class StyleAnalysisResponse(BaseModel):
    suggestions: List[StyleSuggestion]
    summary: StyleSummary


class TemplateRecommendationRequest(BaseModel):
    content: str = ""


class SlideRange(BaseModel):
    min: int
    max: int
    optimal: int


class OptimizationSuggestion(BaseModel):
    type: str
    priority: str
    suggestion: str
    reason: str


class TemplateRecommendationResponse(BaseModel):
    recommended: TemplateTypeSchema
    confidence: float
    reasoning: str
    scores: Dict[str, int]
    slide_range: SlideRange
    optimizations: List[OptimizationSuggestion] = []


# ---------------------------------------------------------------------------
# Export Schemas
# ---------------------------------------------------------------------------

class PdfExportRequest(BaseModel):
    include_images: bool = True
    text_only: bool = False


class ImageExportRequest(BaseModel):
    slide_ids: Optional[List[str]] = None


class ExportedImage(BaseModel):
    slide_id: str
    slide_number: int
    file_name: str
    content: str
    image_url: str  # data: URL
    size: int
    warnings: List[str] = []


class ImageExportResponse(BaseModel):
    success: bool = True
    project_id: str
    project_title: str
    total_slides: int
    images: List[ExportedImage]
    generated_at: datetime


class ZipExportRequest(BaseModel):
    include_caption: bool = True


# ---------------------------------------------------------------------------
# Health Schemas
# ---------------------------------------------------------------------------

class DependencyCheck(BaseModel):
    status: str
    error: Optional[str] = None
    version: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    timestamp: datetime
    response_time: str
    checks: Dict[str, DependencyCheck]
    environment: Dict[str, str] = {}
