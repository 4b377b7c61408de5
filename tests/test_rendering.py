"""Unit tests for slide image rendering, PDF building and ZIP packaging."""
import io
import re
import zipfile
from types import SimpleNamespace

from PIL import Image

from app.services.archive_export import build_carousel_zip, build_instagram_caption
from app.services.image_generator import (
    SQUARE_SIZE,
    generate_carousel_images,
    render_slide_png,
    slide_file_name,
    validate_slide_for_image_generation,
    wrap_text,
)
from app.services.pdf_export import PdfSlide, generate_carousel_pdf, generate_text_only_pdf


def _slide(number, content, slide_id=None):
    return SimpleNamespace(id=slide_id or f"s{number}", slide_number=number, content=content)


def test_wrap_text_limits_width_and_lines():
    lines = wrap_text("word " * 200)
    assert len(lines) == 8
    assert all(len(line) <= 35 for line in lines)


def test_wrap_text_splits_long_words():
    assert wrap_text("x" * 50) == ["x" * 35, "x" * 15]


def test_slide_file_name():
    assert slide_file_name("Big News!", 3) == "Big_News__slide_03.png"
    assert slide_file_name("", 1) == "slide_slide_01.png"


def test_render_slide_png_is_square():
    png = render_slide_png("Hello carousel", 1, "NEWS")
    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"
    assert image.size == (SQUARE_SIZE, SQUARE_SIZE)


def test_generate_carousel_images_sorted():
    images = generate_carousel_images([_slide(2, "two"), _slide(1, "one")], "Deck", "STORY")
    assert [i.slide_number for i in images] == [1, 2]
    assert images[0].file_name == "Deck_slide_01.png"
    assert images[0].data_url().startswith("data:image/png;base64,")


def test_validate_slide_for_image_generation():
    assert validate_slide_for_image_generation("")["is_valid"] is False
    result = validate_slide_for_image_generation("x" * 200, hashtags=["#a"] * 6)
    assert result["is_valid"] is True
    assert len(result["warnings"]) == 2


def test_carousel_pdf_with_images():
    png = render_slide_png("Slide text", 1)
    pdf = generate_carousel_pdf([PdfSlide(1, "Slide text", png)], "My Deck", "PRODUCT")
    assert pdf.content.startswith(b"%PDF")
    assert pdf.file_name == "My_Deck_carousel.pdf"


def test_text_only_pdf_spans_pages():
    slides = [PdfSlide(n, "Long content line. " * 20) for n in range(1, 15)]
    pdf = generate_text_only_pdf(slides, "Deck")
    assert pdf.content.startswith(b"%PDF")
    assert pdf.file_name == "Deck_content.pdf"
    page_count = int(re.search(rb"/Count (\d+)", pdf.content).group(1))
    assert page_count > 1


def test_instagram_caption():
    caption = build_instagram_caption("Title", [_slide(1, "Hook line")], "NEWS")
    assert caption == "Title\n\nHook line\n\n#carousel #instagram #news"


def test_build_carousel_zip():
    slides = [_slide(1, "one"), _slide(2, "two")]
    images = generate_carousel_images(slides, "Deck")
    data, name = build_carousel_zip(images, slides, "Deck", None)
    assert name == "Deck_carousel.zip"
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        summary = archive.read("slide-content.txt").decode()
    assert summary.startswith("Deck - Slide Content\n")
    assert "Slide 2:\ntwo" in summary
    assert "Template: Custom" in summary
