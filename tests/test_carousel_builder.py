"""Unit tests for document-to-carousel planning and template recommendation."""
import pytest

from app.services.carousel_builder import (
    CarouselContentError,
    build_carousel_plan,
    calculate_slide_count,
    detect_template_type,
    generate_carousel_title,
    get_content_optimization_suggestions,
    recommend_template_type,
    score_templates,
)


def test_detect_template_type():
    assert detect_template_type("Our product has a great feature and a fair price") == "PRODUCT"
    assert detect_template_type("Breaking news: officials announced the report today") == "NEWS"
    assert detect_template_type("I remember the summer we moved house") == "STORY"
    assert detect_template_type("") == "STORY"


@pytest.mark.parametrize(
    "length, expected",
    [(100, 3), (400, 3), (401, 5), (1000, 6), (1500, 7), (5000, 8)],
)
def test_calculate_slide_count(length, expected):
    assert calculate_slide_count("a" * length) == expected


def test_generate_carousel_title():
    assert generate_carousel_title("Trip Notes") == "Trip Notes - Carousel"
    assert generate_carousel_title("Summer Slides") == "Summer Slides"
    assert generate_carousel_title("") == "Untitled Carousel"
    long_title = generate_carousel_title("x" * 300)
    assert len(long_title) == 255
    assert long_title.endswith(" - Carousel")


def test_build_carousel_plan_validates_length():
    with pytest.raises(CarouselContentError, match="too short"):
        build_carousel_plan("t", "tiny")
    with pytest.raises(CarouselContentError, match="too long"):
        build_carousel_plan("t", "a" * 10001)


def test_build_carousel_plan():
    plan = build_carousel_plan("Diary", "  " + "I learned a lot on my journey this year. " * 3)
    assert plan["title"] == "Diary - Carousel"
    assert plan["description"] == "Carousel created from: Diary"
    assert plan["template_type"] == "STORY"
    assert plan["slide_count"] == 3
    assert not plan["source_text"].startswith(" ")


def test_score_templates_weights():
    scores = score_templates("product launch story")
    # PRODUCT: product + launch primary (+6), story negative (-2)
    assert scores["PRODUCT"] == 4


def test_recommendation_confidence_is_capped():
    result = recommend_template_type("Our product is a tool and a solution with a great feature to buy")
    assert result["recommended"] == "PRODUCT"
    assert result["confidence"] <= 0.95
    assert result["reasoning"]


def test_optimization_suggestions_capped_at_three():
    content = "maybe perhaps might possibly " * 10
    suggestions = get_content_optimization_suggestions(content, "NEWS")
    assert len(suggestions) == 3
    assert suggestions[0]["type"] == "length"


def test_story_engagement_suggestion():
    suggestions = get_content_optimization_suggestions("A calm day at the lake", "STORY")
    assert suggestions == [
        {
            "type": "engagement",
            "priority": "medium",
            "suggestion": "Add a question or exclamation to increase engagement",
            "reason": "Story content performs better with emotional punctuation",
        }
    ]
