"""Tests for document loading and source reading."""

from pathlib import Path

import pytest

from novelbar.document import SourceReadError, load_document, read_source
from novelbar.models import Chapter


def test_load_document_strips_bom_before_offsets() -> None:
    """Offsets are computed on the text without the BOM."""
    document = load_document("\ufeff第一章 开端\n正文")

    assert document.raw_text == "第一章 开端\n正文"
    assert document.chapters == (Chapter("第一章 开端", 7, 9),)
    assert document.length == 9


def test_load_document_strips_only_one_bom() -> None:
    """A second BOM is content."""
    document = load_document("\ufeff\ufeffabc")
    assert document.raw_text == "\ufeffabc"


def test_load_document_records_pattern_error() -> None:
    """An invalid pattern is kept on the document for display."""
    document = load_document("text", heading_pattern="(")

    assert document.pattern_error is not None
    assert document.heading_pattern == "("
    assert len(document.chapters) == 1


def test_reparse_returns_new_document() -> None:
    """Re-parsing never mutates the original document."""
    document = load_document("Part 1\nalpha\nPart 2\nbeta")
    reparsed = document.reparse(r"^Part \d+$")

    assert len(document.chapters) == 1
    assert [ch.name for ch in reparsed.chapters] == ["Part 1", "Part 2"]
    assert reparsed.raw_text == document.raw_text


def test_chapter_at_falls_back_to_last_chapter() -> None:
    """Positions inside heading text belong to no span."""
    document = load_document("第一章 A\n一\n第二章 B\n二\n第三章 C\n三")

    assert document.chapter_at(6).name == "第一章 A"
    assert document.chapter_at(10).name == "第三章 C"
    assert document.chapter_index_at(14) == 1
    assert document.chapter_index_at(10) == 2


def test_read_source_utf8(tmp_path: Path) -> None:
    """Files are decoded as UTF-8."""
    path = tmp_path / "novel.txt"
    path.write_text("第一章 开端\n正文", encoding="utf-8")

    assert read_source(path) == "第一章 开端\n正文"


def test_read_source_replaces_undecodable_bytes(tmp_path: Path) -> None:
    """Invalid bytes do not abort the read."""
    path = tmp_path / "broken.txt"
    path.write_bytes(b"ok \xff\xfe end")

    content = read_source(str(path))
    assert content.startswith("ok ")
    assert content.endswith(" end")


def test_read_source_missing_file(tmp_path: Path) -> None:
    """A missing file raises SourceReadError, which is an OSError."""
    with pytest.raises(SourceReadError) as excinfo:
        read_source(tmp_path / "missing.txt")

    assert isinstance(excinfo.value, OSError)
    assert "missing.txt" in str(excinfo.value)
