"""
SQLAlchemy ORM models for the WordWise database.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Boolean,
    Enum as SQLEnum,
    JSON,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
import uuid

from app.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# Enums
class PlanType(str, enum.Enum):
    """Subscription plans."""

    FREE = "free"
    PRO = "pro"
    PREMIUM = "premium"


class TemplateType(str, enum.Enum):
    """Carousel content structures."""

    NEWS = "NEWS"
    STORY = "STORY"
    PRODUCT = "PRODUCT"


class ProjectStatus(str, enum.Enum):
    """Lifecycle of a carousel project."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


# Public templates inserted by seed_default_templates()
DEFAULT_TEMPLATES = [
    {
        "name": "Professional",
        "description": "Polished, authoritative voice for business audiences.",
        "voice_profile": {
            "tone": "professional",
            "style": "clear and concise",
            "guidelines": ["Lead with the key insight", "Avoid slang", "Back claims with facts"],
            "max_chars": 180,
            "hashtag_count": 3,
        },
    },
    {
        "name": "Casual & Friendly",
        "description": "Conversational voice that talks to followers like friends.",
        "voice_profile": {
            "tone": "casual",
            "style": "conversational",
            "guidelines": ["Use second person", "Emojis welcome", "Keep sentences short"],
            "max_chars": 160,
            "hashtag_count": 5,
        },
    },
    {
        "name": "Bold & Punchy",
        "description": "High-energy voice built for scroll-stopping hooks.",
        "voice_profile": {
            "tone": "energetic",
            "style": "punchy",
            "guidelines": ["Start with a hook", "One idea per slide", "End with a call to action"],
            "max_chars": 120,
            "hashtag_count": 4,
        },
    },
    {
        "name": "Storyteller",
        "description": "Narrative voice that walks readers through a journey.",
        "voice_profile": {
            "tone": "personal",
            "style": "narrative",
            "guidelines": ["Set the scene", "Show the struggle", "Share the lesson"],
            "max_chars": 200,
            "hashtag_count": 3,
        },
    },
]


# Models
class User(Base):
    """User account (synced from the identity provider)."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)  # identity provider user id
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    plan_type = Column(
        SQLEnum(PlanType, values_callable=_enum_values, native_enum=False),
        default=PlanType.FREE,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    documents = relationship("Document", back_populates="user", cascade="all, delete-orphan")
    projects = relationship("CarouselProject", back_populates="user", cascade="all, delete-orphan")
    settings = relationship("UserSettings", back_populates="user", uselist=False, cascade="all, delete-orphan")


class Document(Base):
    """A piece of writing owned by a user."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    # Derived from content on every write
    word_count = Column(Integer, nullable=False, default=0)
    char_count = Column(Integer, nullable=False, default=0)
    language = Column(String(10), nullable=False, default="en")
    # Set when the document was imported from a file
    file_name = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    file_type = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="documents")
    # No delete cascade: removing a document unlinks its carousels
    projects = relationship("CarouselProject", back_populates="document")


class BrandVoiceTemplate(Base):
    """Reusable tone/style preset for generated content."""

    __tablename__ = "brand_voice_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    created_by = Column(String(255), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    voice_profile = Column(JSON, nullable=False, default=dict)  # tone, style, guidelines, ...
    is_public = Column(Boolean, default=False, nullable=False, index=True)
    usage_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    projects = relationship("CarouselProject", back_populates="template")


class CarouselProject(Base):
    """A set of ordered slides destined for an Instagram carousel."""

    __tablename__ = "carousel_projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    template_id = Column(
        String(36), ForeignKey("brand_voice_templates.id", ondelete="SET NULL"), nullable=True
    )
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)
    template_type = Column(
        SQLEnum(TemplateType, values_callable=_enum_values, native_enum=False),
        nullable=True,
    )
    status = Column(
        SQLEnum(ProjectStatus, values_callable=_enum_values, native_enum=False),
        default=ProjectStatus.DRAFT,
        nullable=False,
    )
    target_audience = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="projects")
    template = relationship("BrandVoiceTemplate", back_populates="projects")
    document = relationship("Document", back_populates="projects")
    slides = relationship(
        "Slide",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Slide.slide_number",
    )


class Slide(Base):
    """One unit of carousel content."""

    __tablename__ = "slides"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(
        String(36), ForeignKey("carousel_projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slide_number = Column(Integer, nullable=False, default=1)  # ordering key, not unique
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False, default="")
    char_count = Column(Integer, nullable=False, default=0)
    tone = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    project = relationship("CarouselProject", back_populates="slides")


class UserSettings(Base):
    """Per-user preference blobs, upserted in place."""

    __tablename__ = "user_settings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    preferences = Column(JSON, nullable=False, default=dict)
    notification_settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="settings")
