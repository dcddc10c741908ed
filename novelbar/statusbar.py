"""Status-line formatting and display sinks."""

import math
from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from .reader import NovelReader

BOOK_ICON = "📖"


@dataclass(frozen=True)
class StatusText:
    """Text and tooltip published to a display sink."""

    text: str
    tooltip: str


class ConsoleStatusSink:
    """Display sink that prints the status line to a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.visible = False

    def show(self, status: StatusText) -> None:
        self.visible = True
        # novel text may contain brackets and colons; print it verbatim
        self.console.print(
            status.text,
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )

    def hide(self) -> None:
        self.visible = False


def format_status(reader: NovelReader) -> Optional[StatusText]:
    """
    Build the status line for the reader's current window.

    Args:
        reader: Reader to render

    Returns:
        StatusText, or None when no document is loaded
    """
    if reader.document is None:
        return None

    excerpt = reader.render()
    length = reader.document.length
    page = reader.position // reader.page_size + 1
    total_pages = max(1, math.ceil(length / reader.page_size))
    progress = excerpt.progress_percent or 0.0
    return StatusText(
        text=f"{BOOK_ICON} {excerpt.text}  [{page}/{total_pages}]",
        tooltip=f"{excerpt.chapter_name}\nProgress: {progress:.2f}%",
    )


class StatusBar:
    """
    Publishes the reader's state to a display sink.

    The sink receives ``show(StatusText)`` while the reader is visible and a
    document is loaded, and ``hide()`` otherwise. The bar keeps no reference
    to reader internals between refreshes.
    """

    def __init__(self, reader: NovelReader, sink: ConsoleStatusSink) -> None:
        self.reader = reader
        self.sink = sink

    def refresh(self) -> Optional[StatusText]:
        """Push the current state to the sink; returns what was shown."""
        if not self.reader.visible:
            self.sink.hide()
            return None
        status = format_status(self.reader)
        if status is None:
            self.sink.hide()
            return None
        self.sink.show(status)
        return status
