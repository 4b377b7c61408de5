"""Database and schema models for WordWise."""
from app.models.database_models import (
    User,
    Document,
    BrandVoiceTemplate,
    CarouselProject,
    Slide,
    UserSettings,
    PlanType,
    TemplateType,
    ProjectStatus,
)
from app.models.schemas import (
    DocumentResponse,
    ProjectResponse,
    SlideResponse,
    BrandVoiceTemplateResponse,
    UserSettingsResponse,
    GrammarCheckResponse,
    HealthCheckResponse,
)

__all__ = [
    # Database models
    "User",
    "Document",
    "BrandVoiceTemplate",
    "CarouselProject",
    "Slide",
    "UserSettings",
    "PlanType",
    "TemplateType",
    "ProjectStatus",
    # Pydantic schemas
    "DocumentResponse",
    "ProjectResponse",
    "SlideResponse",
    "BrandVoiceTemplateResponse",
    "UserSettingsResponse",
    "GrammarCheckResponse",
    "HealthCheckResponse",
]
