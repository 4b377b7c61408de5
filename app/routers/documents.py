"""
Document endpoints.

Route summary
-------------
GET    /api/documents                      - list caller's documents
POST   /api/documents                      - create document
GET    /api/documents/new                  - placeholder for the editor ({"document": null})
GET    /api/documents/untitled-name        - next free "Untitled N" title
POST   /api/documents/import               - create document from a .txt/.md upload
POST   /api/documents/check-grammar        - LLM grammar/spelling/style check
GET    /api/documents/{id}                 - document detail
PUT    /api/documents/{id}                 - update title/content
DELETE /api/documents/{id}                 - delete document
GET    /api/documents/{id}/export          - download as txt/md/html
GET    /api/documents/{id}/readability     - Flesch reading-ease score
POST   /api/documents/{id}/carousel        - turn document into a carousel project
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies.auth import get_current_user_id, get_or_create_user
from app.dependencies.llm import get_content_generator, get_grammar_checker, llm_http_error
from app.models.database_models import Document, User
from app.models.schemas import (
    DocumentCarouselRequest,
    DocumentEnvelope,
    DocumentListEnvelope,
    DocumentResponse,
    DocumentWriteRequest,
    GrammarCheckRequest,
    GrammarCheckResponse,
    ProjectEnvelope,
    ProjectResponse,
    ReadabilityResponse,
    SuccessResponse,
    UntitledNameResponse,
)
from app.services.carousel_builder import CarouselContentError, build_carousel_plan
from app.services.content_generator import ContentGenerator
from app.services.document_export import EXPORT_FORMATS, render_document
from app.services.grammar_checker import GrammarChecker
from app.services.openai_client import LLMError
from app.services.project_service import build_slides, create_project
from app.utils.helpers import (
    calculate_readability_score,
    compute_text_stats,
    generate_untitled_name,
    truncate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NEW_DOCUMENT_ID = "new"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _get_owned_document(db: AsyncSession, document_id: str, user_id: str) -> Document:
    result = await db.execute(
        select(Document).where(Document.id == document_id, Document.user_id == user_id)
    )
    document = result.scalar_one_or_none()
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


def _require_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    return title.strip()


def _apply_content(document: Document, content: Optional[str]) -> None:
    document.content = content or ""
    document.word_count, document.char_count = compute_text_stats(document.content)


# ═══════════════════════════════════════════════════════════════════════════════
# COLLECTION
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("", response_model=DocumentListEnvelope)
async def list_documents(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> DocumentListEnvelope:
    """List the caller's documents, most recently updated first."""
    result = await db.execute(
        select(Document)
        .where(Document.user_id == user_id)
        .order_by(Document.updated_at.desc())
    )
    documents = result.scalars().all()
    return DocumentListEnvelope(documents=[DocumentResponse.model_validate(d) for d in documents])


@router.post("", response_model=DocumentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentWriteRequest,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentEnvelope:
    """Create a document. Word and character counts are derived from the content."""
    document = Document(user_id=user.id, title=_require_title(body.title))
    _apply_content(document, body.content)
    db.add(document)
    await db.flush()

    logger.info("Created document id=%s title=%r for user=%s", document.id, document.title, user.id)
    return DocumentEnvelope(document=DocumentResponse.model_validate(document))


@router.get("/new", response_model=DocumentEnvelope)
async def get_new_document(
    user_id: str = Depends(get_current_user_id),
) -> DocumentEnvelope:
    """The editor's unsaved document has no server-side state."""
    return DocumentEnvelope(document=None)


@router.get("/untitled-name", response_model=UntitledNameResponse)
async def get_untitled_name(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UntitledNameResponse:
    result = await db.execute(
        select(Document.title).where(
            Document.user_id == user_id,
            Document.title.like("Untitled%"),
        )
    )
    return UntitledNameResponse(title=generate_untitled_name(result.scalars().all()))


@router.post("/import", response_model=DocumentEnvelope, status_code=status.HTTP_201_CREATED)
async def import_document(
    file: UploadFile = File(...),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentEnvelope:
    """
    Create a document from an uploaded text file.

    - Accepted: .txt and .md (UTF-8)
    - Max size: MAX_IMPORT_SIZE
    - Title comes from the file name; falls back to the next untitled name
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Upload must include a filename.")

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_IMPORT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_IMPORT_TYPES)}"
            ),
        )

    raw = await file.read(settings.MAX_IMPORT_SIZE + 1)
    if len(raw) > settings.MAX_IMPORT_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.MAX_IMPORT_SIZE // 1024} KB size limit.",
        )

    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded text.")

    title = truncate(Path(file.filename).stem.strip(), 255)
    if not title:
        result = await db.execute(select(Document.title).where(Document.user_id == user.id))
        title = generate_untitled_name(result.scalars().all())

    document = Document(
        user_id=user.id,
        title=title,
        file_name=truncate(file.filename, 255),
        file_size=len(raw),
        file_type=truncate(file.content_type or ("text/markdown" if file_ext == ".md" else "text/plain"), 50),
    )
    _apply_content(document, content)
    db.add(document)
    await db.flush()

    logger.info(
        "Imported %r (%d bytes) as document id=%s for user=%s",
        file.filename, len(raw), document.id, user.id,
    )
    return DocumentEnvelope(document=DocumentResponse.model_validate(document))


# ═══════════════════════════════════════════════════════════════════════════════
# GRAMMAR
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/check-grammar", response_model=GrammarCheckResponse)
async def check_grammar(
    body: GrammarCheckRequest,
    user_id: str = Depends(get_current_user_id),
    checker: GrammarChecker = Depends(get_grammar_checker),
):
    """Grammar, spelling and style issues with offsets into the submitted text."""
    if not body.text or not body.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required")

    try:
        return await checker.check(body.text, body.check_type)
    except LLMError as exc:
        raise llm_http_error(exc, "Grammar check failed")


# ═══════════════════════════════════════════════════════════════════════════════
# SINGLE DOCUMENT
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/{document_id}", response_model=DocumentEnvelope)
async def get_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> DocumentEnvelope:
    document = await _get_owned_document(db, document_id, user_id)
    return DocumentEnvelope(document=DocumentResponse.model_validate(document))


@router.put("/{document_id}", response_model=DocumentEnvelope)
async def update_document(
    document_id: str,
    body: DocumentWriteRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> DocumentEnvelope:
    """Replace title and content; counts are recomputed."""
    if document_id == NEW_DOCUMENT_ID:
        raise HTTPException(status_code=400, detail="Cannot update new document")

    title = _require_title(body.title)
    document = await _get_owned_document(db, document_id, user_id)
    document.title = title
    _apply_content(document, body.content)
    await db.flush()

    logger.info("Updated document id=%s (%d words)", document.id, document.word_count)
    return DocumentEnvelope(document=DocumentResponse.model_validate(document))


@router.delete("/{document_id}", response_model=SuccessResponse)
async def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Delete a document. Carousels created from it keep existing, unlinked."""
    if document_id == NEW_DOCUMENT_ID:
        raise HTTPException(status_code=400, detail="Cannot delete new document")

    document = await _get_owned_document(db, document_id, user_id)
    await db.delete(document)
    await db.flush()

    logger.info("Deleted document id=%s", document_id)
    return SuccessResponse(success=True)


@router.get("/{document_id}/export")
async def export_document(
    document_id: str,
    format: str = Query("txt", description="txt, md or html"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Response:
    fmt = format.lower()
    if fmt not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported export format '{format}'. Accepted: {', '.join(EXPORT_FORMATS)}",
        )

    document = await _get_owned_document(db, document_id, user_id)
    body, media_type, file_name = render_document(document, fmt)
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/{document_id}/readability", response_model=ReadabilityResponse)
async def get_readability(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ReadabilityResponse:
    document = await _get_owned_document(db, document_id, user_id)
    return ReadabilityResponse(**calculate_readability_score(document.content))


@router.post(
    "/{document_id}/carousel",
    response_model=ProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_carousel_from_document(
    document_id: str,
    body: Optional[DocumentCarouselRequest] = Body(None),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
) -> ProjectEnvelope:
    """
    Create a carousel project linked to this document.

    Template type and slide count are detected from the content unless given.
    With ``generate`` (default) the slides are written by the LLM; otherwise
    the project starts with one empty slide.
    """
    options = body or DocumentCarouselRequest()
    document = await _get_owned_document(db, document_id, user.id)

    try:
        plan = build_carousel_plan(document.title, document.content)
    except CarouselContentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    template_type = options.template_type.value if options.template_type else plan["template_type"]
    slide_count = options.slide_count or plan["slide_count"]

    slides = None
    if options.generate:
        try:
            generated = await generator.generate_slides(plan["source_text"], template_type, slide_count)
        except LLMError as exc:
            raise llm_http_error(exc, "Failed to generate slides")
        slides = build_slides(generated)

    project = await create_project(
        db,
        user.id,
        title=plan["title"],
        description=plan["description"],
        document_id=document.id,
        template_type=template_type,
        slides=slides,
    )

    message = (
        f"Generated {len(project.slides)} slides for {template_type} template"
        if options.generate
        else "Carousel created"
    )
    return ProjectEnvelope(project=ProjectResponse.model_validate(project), message=message)
