"""
Common utility functions and helpers.
"""
from typing import Any, Dict, Iterable, List, Tuple
import re


def count_words(content: str) -> int:
    """
    Count whitespace-separated, non-empty tokens.

    Args:
        content: Raw text

    Returns:
        Number of words
    """
    if not content:
        return 0
    return len(content.split())


def compute_text_stats(content: str) -> Tuple[int, int]:
    """
    Derive the stored counters for a piece of content.

    Args:
        content: Raw text (may be empty)

    Returns:
        (word_count, char_count)
    """
    content = content or ""
    return count_words(content), len(content)


def count_syllables(word: str) -> int:
    """Rough English syllable estimate used by the readability score."""
    word = word.lower()
    if len(word) <= 3:
        return 1
    word = re.sub(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$", "", word)
    word = re.sub(r"^y", "", word)
    matches = re.findall(r"[aeiouy]{1,2}", word)
    return len(matches) if matches else 1


def calculate_readability_score(text: str) -> Dict[str, Any]:
    """
    Flesch reading-ease score with a human label and simple advice.

    Args:
        text: Text to analyse

    Returns:
        Dict with ``score`` (0-100), ``level`` and ``suggestions``
    """
    sentences = [s for s in re.split(r"[.!?]+", text or "") if s.strip()]
    words = (text or "").split()

    if not sentences or not words:
        return {"score": 0.0, "level": "N/A", "suggestions": []}

    syllables = sum(count_syllables(word) for word in words)
    avg_sentence_length = len(words) / len(sentences)
    avg_syllables_per_word = syllables / len(words)
    score = 206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables_per_word

    suggestions: List[str] = []
    if score >= 90:
        level = "Very Easy"
    elif score >= 80:
        level = "Easy"
    elif score >= 70:
        level = "Fairly Easy"
    elif score >= 60:
        level = "Standard"
        suggestions.append("Consider shorter sentences for better engagement")
    elif score >= 50:
        level = "Fairly Difficult"
        suggestions.extend(["Simplify complex words", "Break up long sentences"])
    else:
        level = "Difficult"
        suggestions.extend(["Use simpler vocabulary", "Shorten sentences significantly"])

    return {
        "score": round(clamp(score, 0.0, 100.0), 2),
        "level": level,
        "suggestions": suggestions,
    }


def generate_untitled_name(existing_titles: Iterable[str]) -> str:
    """
    Pick the lowest free "Untitled" name.

    "Untitled" counts as number 1, "Untitled 2" as 2, and so on.

    Args:
        existing_titles: Titles already in use

    Returns:
        "Untitled" or "Untitled N"
    """
    pattern = re.compile(r"^Untitled( \d+)?$")
    taken = set()
    for title in existing_titles:
        match = pattern.match(title or "")
        if match:
            taken.add(int(match.group(1)) if match.group(1) else 1)

    next_number = 1
    while next_number in taken:
        next_number += 1
    return "Untitled" if next_number == 1 else f"Untitled {next_number}"


def safe_filename(title: str, fallback: str = "untitled") -> str:
    """Replace every non-alphanumeric character with an underscore."""
    cleaned = re.sub(r"[^a-zA-Z0-9]", "_", title or "")
    return cleaned or fallback


def clamp(value: Any, lo: float = 0.0, hi: float = 1.0) -> float:
    """Coerce *value* to float and clamp it to [lo, hi]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return lo
    return max(lo, min(hi, number))


def truncate(text: str, limit: int) -> str:
    """Cut *text* to at most *limit* characters."""
    return (text or "")[:limit]
