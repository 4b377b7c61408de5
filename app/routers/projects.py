"""
Carousel project endpoints.

Route summary
-------------
GET    /api/projects                     - list caller's projects (with slides + template)
POST   /api/projects                     - create project (one empty slide)
GET    /api/projects/{id}                - project detail
PUT    /api/projects/{id}                - partial update (title, template, status, ...)
DELETE /api/projects/{id}                - delete project and its slides
POST   /api/projects/{id}/slides         - add a slide
POST   /api/projects/{id}/regenerate     - regenerate all slides from the linked document
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies.auth import get_authorized_project, get_current_user_id, get_or_create_user
from app.dependencies.llm import get_content_generator, llm_http_error
from app.models.database_models import CarouselProject, ProjectStatus, Slide, TemplateType, User
from app.models.schemas import (
    ProjectCreateRequest,
    ProjectEnvelope,
    ProjectListEnvelope,
    ProjectResponse,
    ProjectUpdateRequest,
    SlideCreateRequest,
    SlideEnvelope,
    SlideResponse,
    SuccessResponse,
)
from app.services import project_service
from app.services.content_generator import ContentGenerator
from app.services.openai_client import LLMError

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_REGENERATE_SLIDES = 5
MIN_SLIDES = 3
MAX_SLIDES = 10
DEFAULT_REGENERATE_TEMPLATE = TemplateType.PRODUCT.value


def _require_title(title) -> str:
    if not title or not title.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    return title.strip()


def _envelope(project: CarouselProject, message: str = None) -> ProjectEnvelope:
    return ProjectEnvelope(project=ProjectResponse.model_validate(project), message=message)


# ═══════════════════════════════════════════════════════════════════════════════
# COLLECTION
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("", response_model=ProjectListEnvelope)
async def list_projects(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ProjectListEnvelope:
    """List the caller's carousel projects, most recently updated first."""
    projects = await project_service.list_user_projects(db, user_id)
    return ProjectListEnvelope(projects=[ProjectResponse.model_validate(p) for p in projects])


@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreateRequest,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectEnvelope:
    """
    Create a carousel project.

    - Starts with one empty slide numbered 1
    - Referenced template and document must exist (document must be the caller's)
    - The template's usage count is incremented
    """
    title = _require_title(body.title)
    try:
        project = await project_service.create_project(
            db,
            user.id,
            title=title,
            description=body.description,
            template_id=body.template_id,
            document_id=body.document_id,
            template_type=body.template_type.value if body.template_type else None,
            target_audience=body.target_audience,
        )
    except project_service.ProjectReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return _envelope(project)


# ═══════════════════════════════════════════════════════════════════════════════
# SINGLE PROJECT
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/{project_id}", response_model=ProjectEnvelope)
async def get_project(
    project: CarouselProject = Depends(get_authorized_project),
) -> ProjectEnvelope:
    return _envelope(project)


@router.put("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    body: ProjectUpdateRequest,
    project: CarouselProject = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
) -> ProjectEnvelope:
    """Update only the fields present in the body."""
    fields = body.model_fields_set

    try:
        if "title" in fields:
            project.title = _require_title(body.title)
        if "description" in fields:
            project.description = body.description or None
        if "target_audience" in fields:
            project.target_audience = body.target_audience or None
        if "template_type" in fields:
            project.template_type = TemplateType(body.template_type.value) if body.template_type else None
        if "status" in fields and body.status is not None:
            project.status = ProjectStatus(body.status.value)
        if "template_id" in fields:
            template = await project_service.resolve_template(db, body.template_id)
            project.template = template
            project.template_id = template.id if template else None
        if "document_id" in fields:
            document = await project_service.resolve_document(db, body.document_id, project.user_id)
            project.document_id = document.id if document else None
    except project_service.ProjectReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    await db.flush()
    logger.info("Updated project id=%s fields=%s", project.id, sorted(fields))
    return _envelope(await project_service.load_project(db, project.id))


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project: CarouselProject = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Delete a project; its slides go with it."""
    project_id = project.id
    await db.delete(project)
    await db.flush()

    logger.info("Deleted project id=%s", project_id)
    return SuccessResponse(success=True)


# ═══════════════════════════════════════════════════════════════════════════════
# SLIDES
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/{project_id}/slides", response_model=SlideEnvelope, status_code=status.HTTP_201_CREATED)
async def add_slide(
    body: SlideCreateRequest,
    project: CarouselProject = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
) -> SlideEnvelope:
    content = body.content or ""
    slide = Slide(
        project_id=project.id,
        slide_number=body.slide_number or 1,
        title=body.title,
        content=content,
        char_count=len(content),
        tone=body.tone,
    )
    db.add(slide)
    await db.flush()

    logger.info("Added slide %d to project id=%s", slide.slide_number, project.id)
    return SlideEnvelope(slide=SlideResponse.model_validate(slide))


@router.post("/{project_id}/regenerate", response_model=ProjectEnvelope)
async def regenerate_slides(
    project: CarouselProject = Depends(get_authorized_project),
    db: AsyncSession = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
) -> ProjectEnvelope:
    """
    Replace every slide with freshly generated ones.

    The linked document is the source. Slide count keeps the current number
    of slides (at least 3, at most 10; 5 when the project has none).
    """
    try:
        document = await project_service.resolve_document(db, project.document_id, project.user_id)
    except project_service.ProjectReferenceError:
        document = None

    if document is None or not (document.content or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No source document found for regeneration",
        )

    slide_count = len(project.slides) or DEFAULT_REGENERATE_SLIDES
    slide_count = min(max(slide_count, MIN_SLIDES), MAX_SLIDES)
    template_type = project.template_type.value if project.template_type else DEFAULT_REGENERATE_TEMPLATE

    logger.info(
        "Regenerating project id=%s: %d %s slides from document id=%s",
        project.id, slide_count, template_type, document.id,
    )
    try:
        generated = await generator.generate_slides(document.content, template_type, slide_count)
    except LLMError as exc:
        raise llm_http_error(exc, "Failed to regenerate slides")

    project = await project_service.replace_slides(db, project, project_service.build_slides(generated))
    return _envelope(project, message="All slides regenerated successfully")
