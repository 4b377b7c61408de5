"""
Carousel PDF export with reportlab.

Two layouts on A4 portrait:

* carousel PDF: cover page, then one page per slide with a header, the
  rendered slide image centred (when available) and the slide text.
* text-only PDF: title followed by every slide's text, flowing onto new
  pages as needed.

Layout positions are expressed in millimetres from the top-left corner and
converted to reportlab's bottom-left point coordinates.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from app.utils.helpers import safe_filename

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
PAGE_WIDTH_MM = PAGE_WIDTH / mm
PAGE_HEIGHT_MM = PAGE_HEIGHT / mm
MARGIN_MM = 20
IMAGE_SIZE_MM = 120
LINE_HEIGHT_MM = 6

AUTHOR = "WordWise AI"


class PDFExportError(Exception):
    """The PDF could not be built."""


@dataclass
class PdfSlide:
    slide_number: int
    content: str
    image_bytes: Optional[bytes] = None


@dataclass
class PdfDocument:
    content: bytes
    file_name: str


def _y(top_mm: float) -> float:
    """Top-based millimetre offset to reportlab's bottom-based points."""
    return PAGE_HEIGHT - top_mm * mm


def _draw_lines(pdf: canvas.Canvas, lines: Sequence[str], top_mm: float) -> None:
    for index, line in enumerate(lines):
        pdf.drawString(MARGIN_MM * mm, _y(top_mm + index * LINE_HEIGHT_MM), line)


def _wrap(text: str, font_name: str, font_size: float) -> List[str]:
    lines: List[str] = []
    for paragraph in (text or "").split("\n"):
        lines.extend(simpleSplit(paragraph, font_name, font_size, PAGE_WIDTH - 2 * MARGIN_MM * mm) or [""])
    return lines


def _new_canvas(buffer: io.BytesIO, title: str, subject: str) -> canvas.Canvas:
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(title)
    pdf.setSubject(subject)
    pdf.setAuthor(AUTHOR)
    return pdf


def _draw_cover_page(pdf: canvas.Canvas, title: str, template_type: Optional[str]) -> None:
    pdf.setFont("Helvetica-Bold", 24)
    pdf.drawString(MARGIN_MM * mm, _y(40), title)

    if template_type:
        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawString(MARGIN_MM * mm, _y(60), f"Template: {template_type}")

    pdf.setFont("Helvetica-Bold", 10)
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    pdf.drawString(MARGIN_MM * mm, _y(280), f"Generated: {generated}")


def _draw_slide_page(pdf: canvas.Canvas, slide: PdfSlide) -> None:
    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawString(MARGIN_MM * mm, _y(30), f"Slide {slide.slide_number}")

    has_image = False
    if slide.image_bytes:
        try:
            image_x = (PAGE_WIDTH_MM - IMAGE_SIZE_MM) / 2
            pdf.drawImage(
                ImageReader(io.BytesIO(slide.image_bytes)),
                image_x * mm,
                _y(50 + IMAGE_SIZE_MM),
                width=IMAGE_SIZE_MM * mm,
                height=IMAGE_SIZE_MM * mm,
            )
            has_image = True
        except (OSError, ValueError) as exc:
            logger.warning("Failed to add image for slide %d to PDF: %s", slide.slide_number, exc)

    pdf.setFont("Helvetica", 12)
    _draw_lines(pdf, _wrap(slide.content, "Helvetica", 12), 190 if has_image else 60)


def generate_carousel_pdf(
    slides: Sequence[PdfSlide],
    project_title: str,
    template_type: Optional[str] = None,
) -> PdfDocument:
    """
    Cover page plus one page per slide.

    Raises:
        PDFExportError: reportlab failed to build the document.
    """
    buffer = io.BytesIO()
    try:
        pdf = _new_canvas(buffer, project_title, "Instagram Carousel")
        _draw_cover_page(pdf, project_title, template_type)
        for slide in slides:
            pdf.showPage()
            _draw_slide_page(pdf, slide)
        pdf.save()
    except Exception as exc:
        logger.error("Carousel PDF generation failed: %s", exc)
        raise PDFExportError(str(exc)) from exc

    file_name = f"{safe_filename(project_title)}_carousel.pdf"
    logger.info("Generated carousel PDF %s (%d slides)", file_name, len(slides))
    return PdfDocument(content=buffer.getvalue(), file_name=file_name)


def generate_text_only_pdf(slides: Sequence[PdfSlide], project_title: str) -> PdfDocument:
    """
    Title and slide text only, flowing across pages.

    Raises:
        PDFExportError: reportlab failed to build the document.
    """
    buffer = io.BytesIO()
    try:
        pdf = _new_canvas(buffer, project_title, "Instagram Carousel Content")

        pdf.setFont("Helvetica-Bold", 20)
        _draw_lines(pdf, _wrap(project_title, "Helvetica-Bold", 20), 30)

        current_y = 60.0
        for index, slide in enumerate(slides):
            if current_y > PAGE_HEIGHT_MM - 60:
                pdf.showPage()
                current_y = 30.0

            pdf.setFont("Helvetica-Bold", 16)
            pdf.drawString(MARGIN_MM * mm, _y(current_y), f"Slide {slide.slide_number or index + 1}")
            current_y += 15

            pdf.setFont("Helvetica", 12)
            lines = _wrap(slide.content, "Helvetica", 12)
            _draw_lines(pdf, lines, current_y)
            current_y += len(lines) * LINE_HEIGHT_MM + 20

        pdf.save()
    except Exception as exc:
        logger.error("Text PDF generation failed: %s", exc)
        raise PDFExportError(str(exc)) from exc

    file_name = f"{safe_filename(project_title)}_content.pdf"
    logger.info("Generated text-only PDF %s (%d slides)", file_name, len(slides))
    return PdfDocument(content=buffer.getvalue(), file_name=file_name)
