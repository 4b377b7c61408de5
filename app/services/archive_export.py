"""
ZIP packaging of rendered carousel slides with caption text files.
"""
from __future__ import annotations

import io
import logging
import zipfile
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from app.services.image_generator import SlideImage
from app.utils.helpers import safe_filename

logger = logging.getLogger(__name__)

CAPTION_FILE = "instagram-caption.txt"
SLIDE_CONTENT_FILE = "slide-content.txt"


def build_instagram_caption(
    project_title: str, slides: Sequence[Any], template_type: Optional[str] = None
) -> str:
    """Title, first slide text, a swipe prompt for multi-slide posts and hashtags."""
    lines: List[str] = [project_title, ""]

    if slides:
        lines.append(slides[0].content or "")
        if len(slides) > 1:
            lines.extend(["", "💫 Swipe to see more!"])

    hashtags = ["#carousel", "#instagram"]
    if template_type:
        hashtags.append(f"#{template_type.lower()}")

    lines.extend(["", " ".join(hashtags)])
    return "\n".join(lines)


def build_slide_content_summary(
    project_title: str, slides: Sequence[Any], template_type: Optional[str] = None
) -> str:
    lines: List[str] = [f"{project_title} - Slide Content", "=" * 50, ""]

    for index, slide in enumerate(slides):
        lines.append(f"Slide {slide.slide_number or index + 1}:")
        lines.append(slide.content or "")
        lines.append("")

    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    lines.extend(["", f"Generated: {generated}", f"Template: {template_type or 'Custom'}"])
    return "\n".join(lines)


def build_carousel_zip(
    images: Sequence[SlideImage],
    slides: Sequence[Any],
    project_title: str,
    template_type: Optional[str] = None,
    include_caption: bool = True,
) -> tuple:
    """
    Pack slide PNGs (and optionally the caption files) into a ZIP archive.

    Returns:
        (zip_bytes, file_name)
    """
    buffer = io.BytesIO()
    ordered = sorted(slides, key=lambda s: s.slide_number)

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
        for image in images:
            archive.writestr(image.file_name, image.image_bytes)

        if include_caption:
            archive.writestr(CAPTION_FILE, build_instagram_caption(project_title, ordered, template_type))
            archive.writestr(
                SLIDE_CONTENT_FILE, build_slide_content_summary(project_title, ordered, template_type)
            )

    file_name = f"{safe_filename(project_title)}_carousel.zip"
    logger.info("Built %s with %d images", file_name, len(images))
    return buffer.getvalue(), file_name
