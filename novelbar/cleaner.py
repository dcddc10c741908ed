"""Text cleanup helpers used when loading and rendering documents."""

import re

BOM = "\ufeff"

_WHITESPACE_RUN = re.compile(r"\s+")


def strip_bom(text: str) -> str:
    """Remove a single leading byte-order mark, if present."""
    if text.startswith(BOM):
        return text[1:]
    return text


def clean_text(text: str) -> str:
    """
    Collapse every whitespace run (line breaks included) to a single space.

    Args:
        text: Raw window text

    Returns:
        Single-line text without leading or trailing spaces
    """
    return _WHITESPACE_RUN.sub(" ", text).strip()


def skip_whitespace(text: str, position: int) -> int:
    """Return the first non-whitespace offset at or after ``position``."""
    length = len(text)
    while position < length and text[position].isspace():
        position += 1
    return min(position, length)
