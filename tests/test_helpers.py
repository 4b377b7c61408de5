"""Unit tests for text helpers."""
import pytest

from app.utils.helpers import (
    calculate_readability_score,
    clamp,
    compute_text_stats,
    count_syllables,
    count_words,
    generate_untitled_name,
    safe_filename,
    truncate,
)


@pytest.mark.parametrize(
    "text, expected",
    [("", 0), ("   ", 0), ("one", 1), ("one  two\tthree\nfour", 4)],
)
def test_count_words(text, expected):
    assert count_words(text) == expected


def test_compute_text_stats_handles_none():
    assert compute_text_stats(None) == (0, 0)
    assert compute_text_stats("ab cd") == (2, 5)


def test_count_syllables():
    assert count_syllables("cat") == 1
    assert count_syllables("banana") == 3


def test_readability_empty_text():
    assert calculate_readability_score("") == {"score": 0.0, "level": "N/A", "suggestions": []}


def test_readability_simple_text_is_easy():
    result = calculate_readability_score("The cat sat. The dog ran. We had fun.")
    assert result["level"] in ("Very Easy", "Easy")
    assert result["score"] <= 100


def test_readability_dense_text_gets_advice():
    text = (
        "Notwithstanding considerable organizational reconfiguration, "
        "interdepartmental communication methodologies remained fundamentally "
        "incomprehensible to administrative representatives"
    )
    result = calculate_readability_score(text)
    assert result["score"] == 0.0
    assert result["level"] == "Difficult"
    assert result["suggestions"]


def test_untitled_name_fills_gaps():
    assert generate_untitled_name([]) == "Untitled"
    assert generate_untitled_name(["Untitled", "Untitled 3"]) == "Untitled 2"
    assert generate_untitled_name(["Untitled 2"]) == "Untitled"
    assert generate_untitled_name(["Untitled draft", "Untitled"]) == "Untitled 2"


def test_safe_filename():
    assert safe_filename("My Post: v2!") == "My_Post__v2_"
    assert safe_filename("") == "untitled"


def test_clamp_and_truncate():
    assert clamp("0.5") == 0.5
    assert clamp("bad", 0.1, 1.0) == 0.1
    assert clamp(5, 0.1, 1.0) == 1.0
    assert truncate("abcdef", 3) == "abc"
    assert truncate(None, 3) == ""
