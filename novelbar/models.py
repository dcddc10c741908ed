"""Data models for novelbar."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Chapter:
    """A detected chapter and the character span of its content.

    ``start_pos`` points at the first content character after the heading
    line (blank lines skipped); ``end_pos`` is where the next heading begins,
    or the document length for the last chapter.
    """

    name: str
    start_pos: int
    end_pos: int

    def contains(self, position: int) -> bool:
        """Return True if ``position`` lies inside this chapter's content."""
        return self.start_pos <= position < self.end_pos


@dataclass(frozen=True)
class Excerpt:
    """Rendered single-line view of the current reading window."""

    text: str
    chapter_name: Optional[str] = None
    progress_percent: Optional[float] = None


@dataclass(frozen=True)
class ChapterChoice:
    """Entry offered to the user when picking a chapter."""

    index: int
    name: str
    page: int
    progress_percent: float
