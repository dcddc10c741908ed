"""
Chapter detection for plain-text novels.

Headings are found by scanning the whole text with a single-line regular
expression in multi-line mode. Each heading opens a chapter whose content
starts after the heading line and the blank lines that follow it.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .models import Chapter

logger = logging.getLogger(__name__)

DEFAULT_HEADING_PATTERN = r"^\s*第[0-9一二三四五六七八九十百千]+[章回节].*$"
WHOLE_DOCUMENT_TITLE = "(whole document)"
PREFACE_TITLE = "(preface)"

# Blank lines: optional horizontal whitespace terminated by a line break.
_BLANK_LINES = re.compile(r"(?:[^\S\r\n]*(?:\r\n|\r|\n))*")
_TRAILING_WHITESPACE = re.compile(r"\s*\Z")


@dataclass(frozen=True)
class ParseResult:
    """Chapters found in a text, plus the pattern error if one occurred."""

    chapters: tuple[Chapter, ...]
    error: Optional[str] = None


class ChapterParser:
    """
    Split raw text into chapters using a heading pattern.

    A pattern that fails to compile is not fatal: the parser falls back to a
    single chapter covering the whole text and reports the compile error in
    the result.
    """

    def __init__(self, heading_pattern: str = DEFAULT_HEADING_PATTERN):
        """
        Initialize parser with a heading pattern.

        Args:
            heading_pattern: Regular expression matching one heading line
        """
        self.heading_pattern = heading_pattern
        self.error: Optional[str] = None
        self._regex: Optional[re.Pattern[str]] = None
        try:
            self._regex = re.compile(heading_pattern, re.MULTILINE)
        except re.error as e:
            self.error = f"Invalid chapter pattern {heading_pattern!r}: {e}"
            logger.warning(self.error)

    def parse(self, raw_text: str) -> ParseResult:
        """
        Detect chapters in ``raw_text``.

        Args:
            raw_text: Full document text (BOM already removed)

        Returns:
            ParseResult with chapters in document order
        """
        length = len(raw_text)
        if self._regex is None:
            return ParseResult((self._whole_document(length),), self.error)

        chapters: list[Chapter] = []
        first_heading: Optional[int] = None
        for match in self._regex.finditer(raw_text):
            if match.end() == match.start():
                continue
            heading_start = match.start()
            if first_heading is None:
                first_heading = heading_start
            if chapters:
                previous = chapters[-1]
                # an empty chapter: the next match may start on its blank lines
                chapters[-1] = Chapter(
                    previous.name,
                    min(previous.start_pos, heading_start),
                    heading_start,
                )
            chapters.append(
                Chapter(
                    name=match.group(0).strip(),
                    start_pos=self._content_start(raw_text, match.end()),
                    end_pos=length,
                )
            )

        if not chapters:
            logger.debug("No chapter headings found, using whole document")
            return ParseResult((self._whole_document(length),))

        if first_heading and raw_text[:first_heading].strip():
            chapters.insert(0, Chapter(PREFACE_TITLE, 0, first_heading))

        logger.debug(f"Found {len(chapters)} chapters")
        return ParseResult(tuple(chapters))

    @staticmethod
    def _content_start(raw_text: str, heading_end: int) -> int:
        """Skip blank lines after a heading; end of text if nothing follows."""
        blank = _BLANK_LINES.match(raw_text, heading_end)
        content_start = blank.end() if blank else heading_end
        if _TRAILING_WHITESPACE.match(raw_text, content_start):
            return len(raw_text)
        return content_start

    @staticmethod
    def _whole_document(length: int) -> Chapter:
        return Chapter(WHOLE_DOCUMENT_TITLE, 0, length)


def parse_chapters(
    raw_text: str, heading_pattern: str = DEFAULT_HEADING_PATTERN
) -> ParseResult:
    """Parse ``raw_text`` with ``heading_pattern``; see ChapterParser."""
    return ChapterParser(heading_pattern).parse(raw_text)
