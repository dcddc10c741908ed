"""
novelbar - Read plain-text novels one status line at a time.

Splits a text file into chapters with a configurable heading pattern and
pages through it a fixed number of characters at a time, rendering each
window as a single line. Usable from the CLI or as a library.
"""

__version__ = "0.1.0"

from .document import ReaderDocument, SourceReadError, load_document, read_source
from .models import Chapter, ChapterChoice, Excerpt
from .parser import DEFAULT_HEADING_PATTERN, ChapterParser, parse_chapters
from .reader import NovelReader, ReadingCursor

__all__ = [
    "Chapter",
    "ChapterChoice",
    "ChapterParser",
    "DEFAULT_HEADING_PATTERN",
    "Excerpt",
    "NovelReader",
    "ReaderDocument",
    "ReadingCursor",
    "SourceReadError",
    "load_document",
    "parse_chapters",
    "read_source",
]
