"""Tests for the reading cursor, navigation and excerpt rendering."""

from pathlib import Path

import pytest

from novelbar.parser import WHOLE_DOCUMENT_TITLE
from novelbar.reader import PLACEHOLDER_TEXT, NovelReader, ReadingCursor

THREE_CHAPTERS = "第一章 A\n一\n第二章 B\n二\n第三章 C\n三"


def make_reader(text: str, page_size: int = 4, visible: bool = True) -> NovelReader:
    reader = NovelReader(page_size=page_size, visible=visible)
    reader.load_text(text)
    return reader


def test_advance_saturates_at_final_window() -> None:
    """Advancing past the end keeps showing the last full window."""
    reader = make_reader("abcdefgh")

    reader.advance()
    assert reader.position == 4
    reader.advance()
    assert reader.position == 4
    assert reader.render().text == "efgh"


def test_repeated_advance_converges() -> None:
    """Clamping converges to length - page_size and stays there."""
    reader = make_reader("0123456789")
    positions = []
    for _ in range(6):
        reader.advance()
        positions.append(reader.position)

    assert positions == [4, 8, 6, 6, 6, 6]


def test_repeated_retreat_stays_at_start() -> None:
    """Retreating before the start clamps to zero."""
    reader = make_reader("0123456789")
    reader.advance()
    reader.advance()
    for _ in range(5):
        reader.retreat()

    assert reader.position == 0


def test_short_document_clamps_to_zero() -> None:
    """A document shorter than a page always renders from the start."""
    reader = make_reader("abc", page_size=10)
    reader.advance()

    assert reader.position == 0
    assert reader.render().text == "abc"


def test_navigation_is_ignored_while_hidden() -> None:
    """Hidden readers do not move."""
    reader = make_reader("abcdefgh", visible=False)
    reader.advance()
    assert reader.position == 0

    reader.show()
    reader.advance()
    reader.hide()
    reader.retreat()
    assert reader.position == 4


def test_navigation_without_document_is_ignored() -> None:
    """No document means nothing to navigate."""
    reader = NovelReader(visible=True)
    reader.advance()
    reader.retreat()
    reader.jump_to_chapter(0)

    assert reader.position == 0
    assert not reader.loaded


def test_render_without_document_shows_placeholder() -> None:
    """The placeholder carries no chapter or progress."""
    excerpt = NovelReader().render()

    assert excerpt.text == PLACEHOLDER_TEXT
    assert excerpt.chapter_name is None
    assert excerpt.progress_percent is None


def test_render_reports_chapter_and_progress() -> None:
    """Progress is the character offset relative to the length."""
    reader = make_reader("abcdefgh")
    reader.advance()
    excerpt = reader.render()

    assert excerpt.chapter_name == WHOLE_DOCUMENT_TITLE
    assert excerpt.progress_percent == pytest.approx(50.0)


def test_render_progress_empty_document() -> None:
    """An empty text renders at zero percent."""
    excerpt = make_reader("").render()

    assert excerpt.text == ""
    assert excerpt.progress_percent == 0.0


def test_render_inside_heading_uses_last_chapter() -> None:
    """A position covered by no chapter span reports the last chapter."""
    reader = make_reader(THREE_CHAPTERS)
    reader.cursor.position = 10

    assert reader.render().chapter_name == "第三章 C"


def test_render_normalizes_out_of_range_position() -> None:
    """Rendering clamps positions set outside the text."""
    reader = make_reader("abcdefgh")
    reader.cursor.position = 100
    assert reader.render().text == "efgh"
    assert reader.position == 4

    reader.cursor.position = -3
    assert reader.render().text == "abcd"
    assert reader.position == 0


@pytest.mark.parametrize("page_size", [1, 2, 3, 5, 50])
def test_rendered_text_is_single_trimmed_line(page_size: int) -> None:
    """No window starts or ends with a space or contains a line break."""
    text = "  甲\n\n乙 丙\r\n丁\t\t戊  \n\n 己 "
    reader = make_reader(text, page_size=page_size)

    for position in range(len(text)):
        reader.cursor.position = position
        rendered = reader.render().text
        assert rendered == rendered.strip()
        assert "\n" not in rendered
        assert "\r" not in rendered
        assert "  " not in rendered


def test_page_size_change_keeps_position() -> None:
    """Changing the page size only changes the window length."""
    reader = make_reader("abcdefgh")
    reader.advance()
    reader.set_page_size(2)

    assert reader.position == 4
    assert reader.render().text == "ef"
    reader.advance()
    assert reader.position == 6


def test_page_size_must_be_positive() -> None:
    """Non-positive page sizes are rejected."""
    reader = make_reader("abc")
    with pytest.raises(ValueError):
        reader.set_page_size(0)
    with pytest.raises(ValueError):
        NovelReader(page_size=-1)


def test_jump_to_chapter_lands_on_content() -> None:
    """Jumps skip blank lines and make the reader visible."""
    reader = make_reader("第一章 开端\n\n\n正文内容A", visible=False)
    reader.jump_to_chapter(0)

    assert reader.position == 9
    assert reader.visible is True
    assert reader.render().text == "正文内容"


def test_jump_skips_indentation() -> None:
    """Whitespace at the chapter start is skipped by the jump."""
    text = "第一章 X\n\u3000\u3000正文"
    reader = make_reader(text)
    reader.jump_to_chapter(0)

    assert reader.document is not None
    assert reader.document.chapters[0].start_pos == 6
    assert reader.position == 8


def test_jump_to_empty_final_chapter_caps_at_length() -> None:
    """A chapter starting at the end of the text jumps to its length."""
    text = "正文\n第三回 完\n\n"
    reader = make_reader(text)
    reader.jump_to_chapter(1)

    assert reader.position == len(text)
    reader.render()
    assert reader.position == len(text) - 4


@pytest.mark.parametrize("index", [-1, 3, 99])
def test_jump_with_invalid_index_is_ignored(index: int) -> None:
    """Out-of-range indices change nothing, not even visibility."""
    reader = make_reader(THREE_CHAPTERS, visible=False)
    reader.cursor.position = 2
    reader.jump_to_chapter(index)

    assert reader.position == 2
    assert reader.visible is False


def test_load_resets_cursor_and_keeps_visibility() -> None:
    """A reload rewinds the cursor; visibility survives."""
    reader = make_reader("abcdefgh")
    reader.advance()
    reader.load_text("ijklmnop")

    assert reader.position == 0
    assert reader.visible is True
    assert reader.render().text == "ijkl"


def test_load_file(tmp_path: Path) -> None:
    """Files are read, parsed and remembered."""
    path = tmp_path / "novel.txt"
    path.write_text("\ufeff第一章 开端\n正文", encoding="utf-8")
    reader = NovelReader()

    assert reader.load_file(path) is True
    assert reader.source_path == path
    assert reader.message is None
    assert reader.document is not None
    assert reader.document.chapters[0].name == "第一章 开端"


def test_load_file_failure_keeps_previous_document(tmp_path: Path) -> None:
    """An unreadable file leaves the current document untouched."""
    reader = make_reader("abcdefgh")
    reader.advance()
    document = reader.document

    assert reader.load_file(tmp_path / "missing.txt") is False
    assert reader.document is document
    assert reader.position == 4
    assert reader.message is not None
    assert "Could not read" in reader.message


def test_invalid_pattern_sets_message() -> None:
    """Pattern errors surface on the reader and fall back to one chapter."""
    reader = NovelReader(heading_pattern="第(")
    reader.load_text("第一章 A\n正文")

    assert reader.message is not None
    assert reader.document is not None
    assert [ch.name for ch in reader.document.chapters] == [WHOLE_DOCUMENT_TITLE]


def test_heading_pattern_change_reparses_and_rewinds() -> None:
    """A new pattern rebuilds the chapters and resets the cursor."""
    reader = make_reader("Part 1\nalpha\nPart 2\nbeta")
    reader.advance()
    reader.set_heading_pattern(r"^Part \d+$")

    assert reader.position == 0
    assert reader.document is not None
    assert [ch.name for ch in reader.document.chapters] == ["Part 1", "Part 2"]


def test_current_chapter_index() -> None:
    """The current chapter follows the cursor."""
    reader = make_reader(THREE_CHAPTERS)
    assert NovelReader().current_chapter_index() is None

    reader.jump_to_chapter(1)
    assert reader.current_chapter_index() == 1


def test_chapter_choices() -> None:
    """Choices carry page number and progress for the picker."""
    text = "第一章 开端\n\n\n正文内容A"
    reader = make_reader(text)
    choices = reader.chapter_choices()

    assert len(choices) == 1
    assert choices[0].index == 0
    assert choices[0].name == "第一章 开端"
    assert choices[0].page == 3
    assert choices[0].progress_percent == pytest.approx(9 / 14 * 100)
    assert NovelReader().chapter_choices() == []


def test_reading_cursor_normalize() -> None:
    """Normalization only moves out-of-range positions."""
    cursor = ReadingCursor(position=3, page_size=4)
    cursor.normalize(10)
    assert cursor.position == 3

    cursor.position = 10
    cursor.normalize(10)
    assert cursor.position == 6

    cursor.position = 5
    cursor.normalize(0)
    assert cursor.position == 0
