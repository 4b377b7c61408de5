"""
Carousel project persistence shared by the projects and documents routers.

Projects are always returned with ``slides`` and ``template`` loaded so
they can be serialised without lazy loading on the async session.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.database_models import (
    BrandVoiceTemplate,
    CarouselProject,
    Document,
    Slide,
    TemplateType,
)

logger = logging.getLogger(__name__)

AI_GENERATED_TONE = "ai_generated"


class ProjectReferenceError(ValueError):
    """A template or document referenced by a project does not exist."""


def _project_query():
    return select(CarouselProject).options(
        selectinload(CarouselProject.slides),
        selectinload(CarouselProject.template),
    )


async def load_project(db: AsyncSession, project_id: str) -> Optional[CarouselProject]:
    """Fetch a project fresh from the database with slides and template."""
    result = await db.execute(
        _project_query()
        .where(CarouselProject.id == project_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_user_projects(db: AsyncSession, user_id: str) -> Sequence[CarouselProject]:
    result = await db.execute(
        _project_query()
        .where(CarouselProject.user_id == user_id)
        .order_by(CarouselProject.updated_at.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def resolve_template(db: AsyncSession, template_id: Optional[str]) -> Optional[BrandVoiceTemplate]:
    if not template_id:
        return None
    template = await db.get(BrandVoiceTemplate, template_id)
    if template is None:
        raise ProjectReferenceError("Template not found")
    return template


async def resolve_document(
    db: AsyncSession, document_id: Optional[str], user_id: str
) -> Optional[Document]:
    if not document_id:
        return None
    result = await db.execute(
        select(Document).where(Document.id == document_id, Document.user_id == user_id)
    )
    document = result.scalar_one_or_none()
    if document is None:
        raise ProjectReferenceError("Document not found")
    return document


def build_slides(generated: Sequence[Dict[str, Any]], tone: Optional[str] = AI_GENERATED_TONE) -> List[Slide]:
    """Slide rows from generator output (``slide_number``, ``title``, ``content``)."""
    return [
        Slide(
            slide_number=item["slide_number"],
            title=item.get("title"),
            content=item.get("content") or "",
            char_count=len(item.get("content") or ""),
            tone=tone,
        )
        for item in generated
    ]


async def create_project(
    db: AsyncSession,
    user_id: str,
    *,
    title: str,
    description: Optional[str] = None,
    template_id: Optional[str] = None,
    document_id: Optional[str] = None,
    template_type: Optional[str] = None,
    target_audience: Optional[str] = None,
    slides: Optional[List[Slide]] = None,
) -> CarouselProject:
    """
    Insert a project. Without *slides* a single empty slide numbered 1 is added.

    Raises:
        ProjectReferenceError: unknown template or document.
    """
    template = await resolve_template(db, template_id)
    document = await resolve_document(db, document_id, user_id)

    project = CarouselProject(
        user_id=user_id,
        title=title,
        description=description or None,
        template_id=template.id if template else None,
        document_id=document.id if document else None,
        template_type=TemplateType(template_type) if template_type else None,
        target_audience=target_audience or None,
    )
    project.template = template
    project.slides = slides if slides else [Slide(slide_number=1, content="", char_count=0)]
    db.add(project)

    if template is not None:
        template.usage_count = (template.usage_count or 0) + 1

    await db.flush()
    logger.info(
        "Created project id=%s title=%r slides=%d for user=%s",
        project.id, project.title, len(project.slides), user_id,
    )
    return await load_project(db, project.id)


async def replace_slides(
    db: AsyncSession, project: CarouselProject, slides: List[Slide]
) -> CarouselProject:
    """Swap every slide of *project* for *slides* and return the reloaded project."""
    project.slides = slides
    await db.flush()
    logger.info("Replaced slides of project id=%s (%d slides)", project.id, len(slides))
    return await load_project(db, project.id)
