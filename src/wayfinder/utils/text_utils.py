"""Text helpers for page summaries and LLM prompts."""

import re
from typing import List


def collapse_whitespace(text: str) -> str:
    """Replace runs of whitespace with a single space and trim."""
    return re.sub(r"\s+", " ", text or "").strip()


def summarize_page_text(text: str, max_length: int = 500) -> str:
    """
    Reduce visible page text to a short summary.

    Whitespace is collapsed first. Text within `max_length` is returned as-is;
    otherwise the first five sentences between 10 and 100 characters are
    joined and truncated with an ellipsis.

    Args:
        text: Raw visible text of the page
        max_length: Maximum summary length before the ellipsis

    Returns:
        Summary string
    """
    cleaned = collapse_whitespace(text)
    if len(cleaned) <= max_length:
        return cleaned

    sentences: List[str] = []
    for sentence in re.split(r"[.!?]+", cleaned):
        sentence = sentence.strip()
        if 10 <= len(sentence) <= 100:
            sentences.append(sentence)
        if len(sentences) == 5:
            break

    summary = ". ".join(sentences)
    return summary[:max_length] + "..."


def normalize_url(url: str) -> str:
    """Drop the query string and a single trailing slash."""
    clean = (url or "").split("?", 1)[0]
    if clean.endswith("/"):
        clean = clean[:-1]
    return clean
