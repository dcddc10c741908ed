"""Loaded documents and source acquisition."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .cleaner import strip_bom
from .models import Chapter
from .parser import DEFAULT_HEADING_PATTERN, parse_chapters

logger = logging.getLogger(__name__)


class SourceReadError(OSError):
    """Raised when a text source cannot be read."""


@dataclass(frozen=True)
class ReaderDocument:
    """A loaded text and the chapters derived from it.

    Documents are never modified; reloading or changing the heading pattern
    builds a new one.
    """

    raw_text: str
    chapters: tuple[Chapter, ...]
    heading_pattern: str = DEFAULT_HEADING_PATTERN
    pattern_error: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.raw_text)

    def chapter_at(self, position: int) -> Chapter:
        """
        Return the chapter whose content span contains ``position``.

        Falls back to the last chapter when no span contains it (for example
        a position inside a heading line).
        """
        for chapter in self.chapters:
            if chapter.contains(position):
                return chapter
        return self.chapters[-1]

    def chapter_index_at(self, position: int) -> int:
        """Index counterpart of :meth:`chapter_at`."""
        for index, chapter in enumerate(self.chapters):
            if chapter.contains(position):
                return index
        return len(self.chapters) - 1

    def reparse(self, heading_pattern: str) -> "ReaderDocument":
        """Return a new document with chapters detected by ``heading_pattern``."""
        return load_document(self.raw_text, heading_pattern)


def load_document(
    raw_text: str, heading_pattern: str = DEFAULT_HEADING_PATTERN
) -> ReaderDocument:
    """
    Build a document from raw text.

    Args:
        raw_text: Text as read from the source; a leading BOM is removed
        heading_pattern: Chapter heading regular expression

    Returns:
        New ReaderDocument
    """
    text = strip_bom(raw_text)
    result = parse_chapters(text, heading_pattern)
    return ReaderDocument(
        raw_text=text,
        chapters=result.chapters,
        heading_pattern=heading_pattern,
        pattern_error=result.error,
    )


def read_source(path: Union[str, Path]) -> str:
    """
    Read a text file as UTF-8.

    Undecodable bytes are replaced rather than rejected.

    Args:
        path: Path to the text file

    Returns:
        File content

    Raises:
        SourceReadError: If the file is missing or unreadable
    """
    filepath = Path(path)
    try:
        content = filepath.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise SourceReadError(f"Could not read {filepath}: {e}") from e
    logger.info(f"Read {len(content):,} characters from {filepath.name}")
    return content
