"""Tests for paragraph chunking."""

import pytest

from research_retrieval.indexing import ParagraphChunker, chunk_text, strip_markup

FUSION_TEXT = (
    "Fusion research.\n\n"
    "This paragraph is exactly sixty-two characters long for a boundary test."
)


def test_chunk_text_empty_and_none() -> None:
    assert chunk_text("") == []
    assert chunk_text(None) == []
    assert chunk_text("\n\n   \n") == []


def test_chunk_text_boundary_example() -> None:
    chunks = chunk_text(FUSION_TEXT, max_chars=40)

    assert [chunk.text for chunk in chunks] == [
        "Fusion research.",
        "This paragraph is exactly sixty-two char",
        "acters long for a boundary test.",
    ]
    assert [chunk.position for chunk in chunks] == [0, 1, 2]
    assert all(len(chunk.text) <= 40 for chunk in chunks)


def test_chunk_text_default_size_keeps_short_paragraphs_whole() -> None:
    chunks = chunk_text("First paragraph.\nSecond paragraph.")

    assert [chunk.text for chunk in chunks] == ["First paragraph.", "Second paragraph."]


def test_chunk_text_trims_and_drops_blank_paragraphs() -> None:
    chunks = chunk_text("  alpha  \n\n\n \t \n  beta\n")

    assert [chunk.text for chunk in chunks] == ["alpha", "beta"]


def test_chunk_text_reconstructs_paragraphs_in_order() -> None:
    paragraphs = ["a" * 95, "short one", "b" * 30 + " " + "c" * 60]
    text = "\n\n".join(paragraphs)

    chunks = chunk_text(text, max_chars=30)

    assert all(len(chunk.text) <= 30 for chunk in chunks)
    assert "".join(chunk.text for chunk in chunks) == "".join(paragraphs)


def test_chunk_offsets_point_into_source() -> None:
    text = "  intro line\n\nsecond paragraph that is long"

    chunks = chunk_text(text, max_chars=10)

    for chunk in chunks:
        assert text[chunk.start_char : chunk.end_char] == chunk.text


def test_chunker_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        ParagraphChunker(0)


def test_strip_markup_removes_tags_and_collapses_whitespace() -> None:
    html = "<h1>Title</h1>\n<p>Some   <b>bold</b> text</p>"

    assert strip_markup(html) == "Title Some bold text"
    assert strip_markup(None) == ""
