"""Text processing utilities for normalization and token estimation."""

import re
import unicodedata
from collections.abc import Callable

TokenEstimator = Callable[[str], int]

# Rough heuristic: ~4 characters per token for English text
CHARS_PER_TOKEN = 4


def normalize(text: str) -> str:
    """
    Normalize text by collapsing whitespace and normalizing unicode quotes.

    Args:
        text: Raw text to normalize

    Returns:
        Normalized text string
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKC", text)

    # Map typographic quotes and dashes to ASCII so prompts stay plain.
    quote_map = {
        "\u2018": "'",  # Left single quotation mark
        "\u2019": "'",  # Right single quotation mark
        "\u201c": '"',  # Left double quotation mark
        "\u201d": '"',  # Right double quotation mark
        "\u2013": "-",  # En dash
        "\u2014": "-",  # Em dash
    }

    for unicode_char, ascii_char in quote_map.items():
        text = text.replace(unicode_char, ascii_char)

    # Collapse multiple whitespace characters (spaces, tabs, newlines) into single spaces
    text = re.sub(r"\s+", " ", text)

    return text.strip()


def estimate_tokens(text: str) -> int:
    """
    Estimate the number of model tokens in a piece of text.

    Deterministic and monotonic in the text length, which is all the budget
    arithmetic needs. Swap in a real tokenizer by passing a different
    `TokenEstimator` to the builders and services.

    Args:
        text: Text to measure

    Returns:
        Estimated token count (0 for empty text)
    """
    if not text:
        return 0
    return len(text) // CHARS_PER_TOKEN
