"""
Instagram slide image rendering with Pillow.

Each slide becomes a 1080x1080 PNG: white background, slide number in the
top-right corner, the project's template type as a badge in the top-left
corner and the wrapped content centred on the canvas.
"""
from __future__ import annotations

import base64
import io
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from app.utils.helpers import safe_filename

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Instagram specifications
# ---------------------------------------------------------------------------

SQUARE_SIZE = 1080
MAX_CONTENT_LENGTH = 180
PADDING = 80
WRAP_CHARS = 35
MAX_LINES = 8

FONT_SIZES = {
    "content": 36,
    "slide_number": 24,
    "badge": 16,
}

COLORS = {
    "background": "#FFFFFF",
    "text": "#1A1A1A",
    "secondary": "#666666",
    "hashtag": "#1DA1F2",
    # hashtag colour at 10% opacity over white
    "badge_fill": (232, 246, 254),
}

_FONT_CANDIDATES = (
    "DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "Arial.ttf",
    "arial.ttf",
)
_BOLD_FONT_CANDIDATES = (
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
)


class ImageGenerationError(Exception):
    """A slide could not be rendered."""


@dataclass
class SlideImage:
    """One rendered slide."""

    slide_id: str
    slide_number: int
    content: str
    image_bytes: bytes
    file_name: str

    @property
    def size(self) -> int:
        return len(self.image_bytes)

    def data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.image_bytes).decode("ascii")


# ---------------------------------------------------------------------------
# Fonts and layout
# ---------------------------------------------------------------------------

@lru_cache(maxsize=16)
def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    """First available TrueType font at *size*, else Pillow's bundled default."""
    for path in _BOLD_FONT_CANDIDATES if bold else _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def wrap_text(text: str, max_chars: int = WRAP_CHARS, max_lines: int = MAX_LINES) -> List[str]:
    """
    Greedy word wrap by character count.

    Words longer than a line are split at the limit. At most *max_lines*
    lines are returned.
    """
    words = [w for w in re.split(r"\s+", text or "") if w]
    lines: List[str] = []
    current = ""

    for word in words:
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = word
        elif len(word) > max_chars:
            lines.append(word[:max_chars])
            current = word[max_chars:]
        else:
            lines.append(word)

    if current:
        lines.append(current)
    return lines[:max_lines]


def slide_file_name(project_title: Optional[str], slide_number: int) -> str:
    return f"{safe_filename(project_title or '', fallback='slide')}_slide_{slide_number:02d}.png"


def _text_size(draw: ImageDraw.ImageDraw, text: str, font: Any) -> tuple:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_slide_png(
    content: str,
    slide_number: int,
    template_type: Optional[str] = None,
) -> bytes:
    """
    Draw one slide and return PNG bytes.

    Raises:
        ImageGenerationError: Pillow failed to draw or encode the image.
    """
    try:
        image = Image.new("RGB", (SQUARE_SIZE, SQUARE_SIZE), COLORS["background"])
        draw = ImageDraw.Draw(image)

        # Slide number, right-aligned at the top
        number_font = load_font(FONT_SIZES["slide_number"])
        number_text = str(slide_number)
        width, height = _text_size(draw, number_text, number_font)
        draw.text(
            (SQUARE_SIZE - PADDING - width, PADDING + 30 - height / 2),
            number_text,
            font=number_font,
            fill=COLORS["secondary"],
        )

        if template_type:
            badge_font = load_font(FONT_SIZES["badge"], bold=True)
            badge_w, badge_h = _text_size(draw, template_type, badge_font)
            draw.rounded_rectangle(
                (PADDING - 10, PADDING + 10, PADDING + badge_w + 10, PADDING + 50),
                radius=20,
                fill=COLORS["badge_fill"],
            )
            draw.text(
                (PADDING, PADDING + 30 - badge_h / 2),
                template_type,
                font=badge_font,
                fill=COLORS["hashtag"],
            )

        content_font = load_font(FONT_SIZES["content"])
        lines = wrap_text(content)
        line_height = FONT_SIZES["content"] * 1.3
        block_top = SQUARE_SIZE / 2 - len(lines) * line_height / 2
        for index, line in enumerate(lines):
            line_w, line_h = _text_size(draw, line, content_font)
            y = block_top + index * line_height + (line_height - line_h) / 2
            draw.text(
                ((SQUARE_SIZE - line_w) / 2, y),
                line,
                font=content_font,
                fill=COLORS["text"],
            )

        buffer = io.BytesIO()
        image.save(buffer, format="PNG", optimize=True)
        return buffer.getvalue()
    except (OSError, ValueError, TypeError) as exc:
        logger.error("Error generating slide image for slide %d: %s", slide_number, exc)
        raise ImageGenerationError(
            f"Failed to generate image for slide {slide_number}: {exc}"
        ) from exc


def generate_slide_image(
    slide: Any,
    project_title: Optional[str] = None,
    template_type: Optional[str] = None,
) -> SlideImage:
    """Render one slide object (``id``, ``slide_number``, ``content``)."""
    png = render_slide_png(slide.content or "", slide.slide_number, template_type)
    logger.debug("Generated image for slide %d, size: %d bytes", slide.slide_number, len(png))
    return SlideImage(
        slide_id=slide.id,
        slide_number=slide.slide_number,
        content=slide.content or "",
        image_bytes=png,
        file_name=slide_file_name(project_title, slide.slide_number),
    )


def generate_carousel_images(
    slides: Sequence[Any],
    project_title: Optional[str] = None,
    template_type: Optional[str] = None,
) -> List[SlideImage]:
    """
    Render every slide in ``slide_number`` order.

    Raises:
        ImageGenerationError: any slide failed; no partial result is returned.
    """
    ordered = sorted(slides, key=lambda s: s.slide_number)
    images = [generate_slide_image(s, project_title, template_type) for s in ordered]
    logger.info("Generated %d carousel images for %r", len(images), project_title)
    return images


def validate_slide_for_image_generation(content: Optional[str], hashtags: Sequence[str] = ()) -> Dict[str, Any]:
    """Blocking issues and soft warnings for rendering one slide."""
    issues: List[str] = []
    warnings: List[str] = []

    if not content or not content.strip():
        issues.append("Slide content is empty")
    if content and len(content) > MAX_CONTENT_LENGTH:
        warnings.append(
            f"Content exceeds Instagram limit ({len(content)}/{MAX_CONTENT_LENGTH} characters)"
        )
    if content and len(content.split("\n")) > MAX_LINES:
        warnings.append("Too many line breaks may affect readability")
    if len(hashtags) > 5:
        warnings.append("Too many hashtags may clutter the image")

    return {"is_valid": not issues, "issues": issues, "warnings": warnings}
