"""
Carousel export endpoints: PDF, slide images and ZIP archive.

Route summary
-------------
POST /api/projects/{id}/export-pdf       - PDF download (with images, or text-only)
POST /api/projects/{id}/export-images    - every (selected) slide as a base64 data URL
GET  /api/projects/{id}/export-images    - one slide PNG download (?slide_number=N)
POST /api/projects/{id}/export-zip       - ZIP of slide PNGs plus caption files

Rendering runs in a worker thread so Pillow/reportlab never block the event loop.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import Response

from app.dependencies.auth import get_authorized_project
from app.models.database_models import CarouselProject, Slide
from app.models.schemas import (
    ExportedImage,
    ImageExportRequest,
    ImageExportResponse,
    PdfExportRequest,
    ZipExportRequest,
)
from app.services.archive_export import build_carousel_zip
from app.services.image_generator import (
    ImageGenerationError,
    generate_carousel_images,
    generate_slide_image,
    validate_slide_for_image_generation,
)
from app.services.pdf_export import (
    PDFExportError,
    PdfSlide,
    generate_carousel_pdf,
    generate_text_only_pdf,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _template_type(project: CarouselProject) -> Optional[str]:
    return project.template_type.value if project.template_type else None


def _require_slides(project: CarouselProject) -> List[Slide]:
    slides = sorted(project.slides, key=lambda s: s.slide_number)
    if not slides:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No slides found")
    return slides


def _attachment(content: bytes, media_type: str, file_name: str, headers: Optional[dict] = None) -> Response:
    all_headers = {
        "Content-Disposition": f'attachment; filename="{file_name}"',
        "Content-Length": str(len(content)),
    }
    all_headers.update(headers or {})
    return Response(content=content, media_type=media_type, headers=all_headers)


# ═══════════════════════════════════════════════════════════════════════════════
# PDF
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/{project_id}/export-pdf")
async def export_pdf(
    body: Optional[PdfExportRequest] = Body(None),
    project: CarouselProject = Depends(get_authorized_project),
) -> Response:
    """
    Export the carousel as a PDF.

    Rendering failures downgrade to a text-only PDF; the response headers
    say which variant was produced:

    - X-Export-Type: with-images | text-only | text-only-fallback
    - X-Slides-Count, X-Images-Generated
    - X-Export-Warning (fallback only)
    """
    options = body or PdfExportRequest()
    slides = _require_slides(project)
    template_type = _template_type(project)
    logger.info("Exporting PDF for project id=%s (%d slides)", project.id, len(slides))

    headers = {"X-Slides-Count": str(len(slides))}
    try:
        if options.text_only:
            pdf = await asyncio.to_thread(
                generate_text_only_pdf,
                [PdfSlide(s.slide_number, s.content or "") for s in slides],
                project.title,
            )
            headers.update({"X-Export-Type": "text-only", "X-Images-Generated": "0"})
        elif not options.include_images:
            # Carousel layout (cover + page per slide) without pictures
            pdf = await asyncio.to_thread(
                generate_carousel_pdf,
                [PdfSlide(s.slide_number, s.content or "") for s in slides],
                project.title,
                template_type,
            )
            headers.update({"X-Export-Type": "text-only", "X-Images-Generated": "0"})
        else:
            try:
                images = await asyncio.to_thread(
                    generate_carousel_images, slides, project.title, template_type
                )
            except ImageGenerationError as exc:
                logger.warning("Image generation failed, falling back to text-only PDF: %s", exc)
                pdf = await asyncio.to_thread(
                    generate_text_only_pdf,
                    [PdfSlide(s.slide_number, s.content or "") for s in slides],
                    project.title,
                )
                headers.update(
                    {
                        "X-Export-Type": "text-only-fallback",
                        "X-Images-Generated": "0",
                        "X-Export-Warning": "Image generation failed, exported text-only version",
                    }
                )
            else:
                pdf = await asyncio.to_thread(
                    generate_carousel_pdf,
                    [PdfSlide(i.slide_number, i.content, i.image_bytes) for i in images],
                    project.title,
                    template_type,
                )
                headers.update({"X-Export-Type": "with-images", "X-Images-Generated": str(len(images))})
    except PDFExportError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export PDF: {exc}",
        )

    logger.info("PDF export complete: %s (%d bytes)", pdf.file_name, len(pdf.content))
    return _attachment(pdf.content, "application/pdf", pdf.file_name, headers)


# ═══════════════════════════════════════════════════════════════════════════════
# IMAGES
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/{project_id}/export-images", response_model=ImageExportResponse)
async def export_images(
    body: Optional[ImageExportRequest] = Body(None),
    project: CarouselProject = Depends(get_authorized_project),
) -> ImageExportResponse:
    """Render slides (all, or those in ``slide_ids``) to PNG data URLs."""
    slides = _require_slides(project)
    if body and body.slide_ids:
        selected = set(body.slide_ids)
        slides = [s for s in slides if s.id in selected]
        if not slides:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No slides found")

    try:
        images = await asyncio.to_thread(
            generate_carousel_images, slides, project.title, _template_type(project)
        )
    except ImageGenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export images: {exc}",
        )

    return ImageExportResponse(
        project_id=project.id,
        project_title=project.title,
        total_slides=len(images),
        images=[
            ExportedImage(
                slide_id=image.slide_id,
                slide_number=image.slide_number,
                file_name=image.file_name,
                content=image.content,
                image_url=image.data_url(),
                size=image.size,
                warnings=validate_slide_for_image_generation(image.content)["warnings"],
            )
            for image in images
        ],
        generated_at=datetime.now(timezone.utc),
    )


@router.get("/{project_id}/export-images")
async def export_single_image(
    slide_number: Optional[int] = Query(None),
    project: CarouselProject = Depends(get_authorized_project),
) -> Response:
    if slide_number is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="slide_number parameter is required",
        )

    slide = next((s for s in project.slides if s.slide_number == slide_number), None)
    if slide is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Slide not found")

    try:
        image = await asyncio.to_thread(
            generate_slide_image, slide, project.title, _template_type(project)
        )
    except ImageGenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export image: {exc}",
        )

    return _attachment(image.image_bytes, "image/png", image.file_name)


# ═══════════════════════════════════════════════════════════════════════════════
# ZIP
# ═══════════════════════════════════════════════════════════════════════════════

@router.post("/{project_id}/export-zip")
async def export_zip(
    body: Optional[ZipExportRequest] = Body(None),
    project: CarouselProject = Depends(get_authorized_project),
) -> Response:
    """Slide PNGs plus ``instagram-caption.txt`` and ``slide-content.txt``."""
    options = body or ZipExportRequest()
    slides = _require_slides(project)
    template_type = _template_type(project)

    try:
        images = await asyncio.to_thread(generate_carousel_images, slides, project.title, template_type)
    except ImageGenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export ZIP: {exc}",
        )

    archive, file_name = await asyncio.to_thread(
        build_carousel_zip, images, slides, project.title, template_type, options.include_caption
    )
    return _attachment(archive, "application/zip", file_name, {"X-Slides-Count": str(len(images))})
