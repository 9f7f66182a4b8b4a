"""Unit tests for core/render.py"""

import logging

import pytest

from blogpub.core.models import BLOCK_LIST
from blogpub.core.render import (
    CONTAINER_CLOSE, CONTAINER_OPEN, make_snippet, nl2br, render, strip_tags,
)


def _render_one(raw: dict) -> str:
    markup = render(BLOCK_LIST.validate_python([raw])).markup
    assert markup.startswith(CONTAINER_OPEN) and markup.endswith(CONTAINER_CLOSE)
    return markup[len(CONTAINER_OPEN):-len(CONTAINER_CLOSE)]


# --- helpers ---

@pytest.mark.parametrize("text,expected", [
    ("a\nb", "a<br />\nb"),
    ("a\r\nb", "a<br />\r\nb"),
    ("a\rb", "a<br />\rb"),
    ("no breaks", "no breaks"),
])
def test_nl2br(text, expected):
    assert nl2br(text) == expected


def test_strip_tags():
    assert strip_tags("Hi <b>there</b> <a href='x'>you</a>") == "Hi there you"
    assert strip_tags("") == ""


def test_make_snippet_truncates_with_ellipsis():
    """Text longer than the limit is cut and marked."""
    snippet = make_snippet("x" * 350)
    assert len(snippet) == 303
    assert snippet.endswith("...")


def test_make_snippet_at_limit_is_unchanged():
    """Text exactly at the limit is not marked as truncated."""
    assert make_snippet("x" * 300) == "x" * 300


def test_make_snippet_custom_limit():
    assert make_snippet("abcdef", 3) == "abc..."


# --- per-type markup ---

def test_header_escaped_with_level_tag():
    out = _render_one({"id": "h", "type": "header", "content": {"text": "A < B", "level": "h3"}})
    assert out.startswith("<h3 ")
    assert "A &lt; B</h3>" in out


def test_paragraph_keeps_markup_and_breaks_lines():
    """Paragraph text is rich: inline tags pass through, newlines become <br />."""
    out = _render_one({"id": "p", "type": "paragraph", "content": {"text": "Hi <b>there</b>\nfriend"}})
    assert out == '<p class="mb-4 leading-relaxed">Hi <b>there</b><br />\nfriend</p>'


def test_code_is_escaped():
    out = _render_one({"id": "c", "type": "code", "content": {"text": "<script>alert(1)</script>"}})
    assert "<script>" not in out
    assert "<code>&lt;script&gt;alert(1)&lt;/script&gt;</code>" in out


def test_image_with_caption():
    out = _render_one({"id": "i", "type": "image", "content": {"src": "a.png", "caption": "A & B"}})
    assert 'src="a.png"' in out
    assert 'alt="A &amp; B"' in out
    assert "<figcaption" in out and "A &amp; B</figcaption>" in out


def test_image_without_caption_omits_figcaption():
    out = _render_one({"id": "i", "type": "image", "content": {"src": "a.png"}})
    assert "<figcaption" not in out
    assert 'alt=""' in out


def test_image_src_attribute_is_escaped():
    out = _render_one({"id": "i", "type": "image", "content": {"src": 'a.png" onerror="x'}})
    assert 'onerror="x"' not in out
    assert "&quot;" in out


@pytest.mark.parametrize("kind,direction", [
    ("text-image-left", "md:flex-row "),
    ("text-image-right", "md:flex-row-reverse "),
])
def test_split_layout_direction(kind, direction):
    out = _render_one({"id": "s", "type": kind, "content": {"text": "T\nU", "src": "s.png"}})
    assert direction in out
    assert 'src="s.png"' in out
    assert "<p>T<br />\nU</p>" in out


def test_iframe_src_escaped():
    out = _render_one({"id": "f", "type": "iframe", "content": {"src": "https://e.com/x?a=1&b=2"}})
    assert '<iframe src="https://e.com/x?a=1&amp;b=2"' in out


def test_unknown_block_is_skipped(caplog):
    """Unknown types produce no markup and a warning."""
    with caplog.at_level(logging.WARNING, logger="blogpub.core.render"):
        out = _render_one({"id": "q", "type": "quote", "content": {"text": "hm"}})
    assert out == ""
    assert "quote" in caplog.text


# --- whole-document rendering ---

def test_render_empty_list():
    result = render([])
    assert result.markup == CONTAINER_OPEN + CONTAINER_CLOSE
    assert result.snippet_source == ""


def test_render_preserves_block_order(blocks):
    markup = render(blocks).markup
    positions = [markup.index(marker) for marker in (
        "Welcome</h2>", "Hi <b>there</b>", "<code>", "<figure", "md:flex-row ", "md:flex-row-reverse", "<iframe",
    )]
    assert positions == sorted(positions)


def test_snippet_source_from_first_paragraph(blocks):
    """Snippet comes from the first paragraph, with tags stripped."""
    assert render(blocks).snippet_source == "Hi there\nfriend"


def test_snippet_source_skips_empty_paragraphs():
    blocks = BLOCK_LIST.validate_python([
        {"id": "a", "type": "paragraph", "content": {"text": ""}},
        {"id": "b", "type": "text-image-right", "content": {"text": "From split", "src": "x.png"}},
        {"id": "c", "type": "paragraph", "content": {"text": "Later"}},
    ])
    assert render(blocks).snippet_source == "From split"


def test_snippet_source_ignores_headers_and_code():
    blocks = BLOCK_LIST.validate_python([
        {"id": "h", "type": "header", "content": {"text": "Title"}},
        {"id": "c", "type": "code", "content": {"text": "x = 1"}},
    ])
    assert render(blocks).snippet_source == ""


def test_render_is_deterministic(blocks):
    assert render(blocks) == render(blocks)
