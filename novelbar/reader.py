"""Reading cursor, navigation and excerpt rendering for novelbar."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .cleaner import clean_text, skip_whitespace
from .document import ReaderDocument, SourceReadError, load_document, read_source
from .models import ChapterChoice, Excerpt
from .parser import DEFAULT_HEADING_PATTERN

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 60
PLACEHOLDER_TEXT = "Select a text file to start reading"


@dataclass
class ReadingCursor:
    """Absolute character offset plus the current window length."""

    position: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def normalize(self, length: int) -> None:
        """Clamp the position so it addresses a non-empty window."""
        if self.position >= length:
            self.position = max(0, length - self.page_size)
        if self.position < 0:
            self.position = 0


class NovelReader:
    """
    State of the single active document.

    Holds the loaded document, its reading cursor and the visibility flag.
    Every operation runs to completion synchronously; failures degrade to the
    previous state and leave a description in :attr:`message`.
    """

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        heading_pattern: str = DEFAULT_HEADING_PATTERN,
        visible: bool = False,
    ) -> None:
        """
        Initialize an empty reader.

        Args:
            page_size: Characters per window
            heading_pattern: Chapter heading regular expression
            visible: Initial visibility

        Raises:
            ValueError: If page_size is not positive
        """
        _check_page_size(page_size)
        self.document: Optional[ReaderDocument] = None
        self.cursor = ReadingCursor(position=0, page_size=page_size)
        self.heading_pattern = heading_pattern
        self.visible = visible
        self.source_path: Optional[Path] = None
        self.message: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.document is not None

    @property
    def position(self) -> int:
        return self.cursor.position

    @property
    def page_size(self) -> int:
        return self.cursor.page_size

    # Loading

    def load_text(self, raw_text: str) -> ReaderDocument:
        """Replace the current document with ``raw_text`` and rewind."""
        document = load_document(raw_text, self.heading_pattern)
        self._replace_document(document)
        return document

    def load_file(self, path: Union[str, Path]) -> bool:
        """
        Load a text file, replacing the current document.

        Args:
            path: Path to the text file

        Returns:
            True if the file was loaded. On failure the previous document is
            kept and the reason is stored in :attr:`message`.
        """
        try:
            raw_text = read_source(path)
        except SourceReadError as e:
            logger.error(f"Failed to load novel: {e}")
            self.message = str(e)
            return False

        self.load_text(raw_text)
        self.source_path = Path(path)
        return True

    def _replace_document(self, document: ReaderDocument) -> None:
        self.document = document
        self.cursor.position = 0
        self.message = document.pattern_error
        logger.info(
            f"Loaded document: {document.length:,} characters, "
            f"{len(document.chapters)} chapters"
        )

    # Configuration

    def set_page_size(self, page_size: int) -> None:
        """Change the window length without moving the cursor."""
        _check_page_size(page_size)
        self.cursor.page_size = page_size

    def set_heading_pattern(self, heading_pattern: str) -> None:
        """Re-detect chapters with a new pattern and rewind to the start."""
        self.heading_pattern = heading_pattern
        if self.document is not None:
            self._replace_document(self.document.reparse(heading_pattern))

    # Navigation

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def advance(self) -> None:
        """Move forward one page; saturates at the final window."""
        self._move(self.cursor.page_size)

    def retreat(self) -> None:
        """Move back one page; saturates at the start."""
        self._move(-self.cursor.page_size)

    def _move(self, delta: int) -> None:
        if not self.visible or self.document is None:
            return
        self.cursor.position += delta
        self.cursor.normalize(self.document.length)

    def jump_to_chapter(self, index: int) -> None:
        """
        Move to the first non-blank character of chapter ``index``.

        Out-of-range indices are ignored. A jump always makes the reader
        visible.
        """
        if self.document is None:
            return
        if not 0 <= index < len(self.document.chapters):
            logger.debug(f"Ignoring chapter index {index}")
            return

        chapter = self.document.chapters[index]
        self.cursor.position = skip_whitespace(
            self.document.raw_text, chapter.start_pos
        )
        self.visible = True

    # Rendering

    def current_chapter_index(self) -> Optional[int]:
        if self.document is None:
            return None
        self.cursor.normalize(self.document.length)
        return self.document.chapter_index_at(self.cursor.position)

    def render(self) -> Excerpt:
        """
        Render the current window as a single line.

        Returns:
            Excerpt with text, chapter name and progress, or only the
            placeholder text if nothing is loaded
        """
        if self.document is None:
            return Excerpt(text=PLACEHOLDER_TEXT)

        document = self.document
        self.cursor.normalize(document.length)
        start = self.cursor.position
        end = min(start + self.cursor.page_size, document.length)
        progress = start / document.length * 100 if document.length else 0.0
        return Excerpt(
            text=clean_text(document.raw_text[start:end]),
            chapter_name=document.chapter_at(start).name,
            progress_percent=progress,
        )

    def chapter_choices(self) -> list[ChapterChoice]:
        """List chapters with their page number for a chapter picker."""
        if self.document is None:
            return []
        length = self.document.length
        return [
            ChapterChoice(
                index=index,
                name=chapter.name,
                page=chapter.start_pos // self.cursor.page_size + 1,
                progress_percent=chapter.start_pos / length * 100 if length else 0.0,
            )
            for index, chapter in enumerate(self.document.chapters)
        ]


def _check_page_size(page_size: int) -> None:
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
