"""Block-to-HTML rendering and snippet extraction.

Rich-text fields (paragraph text, split-layout text) are emitted without
escaping so that inline formatting from the editor survives. That makes
them an injection surface: content is trusted because only authenticated
authors reach the authoring tool. Every other field is entity-escaped.
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from bs4 import BeautifulSoup

from blogpub.core.models import (
    CodeBlock, HeaderBlock, IframeBlock, ImageBlock, ParagraphBlock,
    TextImageLeftBlock, TextImageRightBlock,
)


logger = logging.getLogger(__name__)

CONTAINER_OPEN = '<div class="prose max-w-none text-lg">'
CONTAINER_CLOSE = "</div>"
SNIPPET_LENGTH = 300
ELLIPSIS = "..."

_LINE_BREAK_RE = re.compile(r"(\r\n|\n\r|\n|\r)")


@dataclass(frozen=True)
class RenderResult:
    markup: str
    snippet_source: str


def escape(text: str) -> str:
    """Entity-escape & < > " ' for use in element text or a quoted attribute."""
    return html.escape(text, quote=True)


def nl2br(text: str) -> str:
    """Insert <br /> before every line break, keeping the break itself."""
    return _LINE_BREAK_RE.sub(r"<br />\1", text)


def strip_tags(markup: str) -> str:
    """Plain text of an HTML fragment."""
    if not markup:
        return ""
    return BeautifulSoup(markup, "html.parser").get_text()


def make_snippet(source: str, limit: int = SNIPPET_LENGTH) -> str:
    """Cut source to limit characters, adding ELLIPSIS only if something was cut."""
    if len(source) > limit:
        return source[:limit] + ELLIPSIS
    return source


# --- per-type renderers ---

def _header(block: HeaderBlock) -> str:
    c = block.content
    return (f'<{c.level} class="text-2xl font-bold mt-6 mb-4 text-[var(--primary-color)]">'
            f'{escape(c.text)}</{c.level}>')


def _paragraph(block: ParagraphBlock) -> str:
    return f'<p class="mb-4 leading-relaxed">{nl2br(block.content.text)}</p>'


def _code(block: CodeBlock) -> str:
    return ('<pre class="bg-gray-100 p-4 rounded-lg overflow-x-auto my-4 text-sm font-mono">'
            f'<code>{escape(block.content.text)}</code></pre>')


def _image(block: ImageBlock) -> str:
    c = block.content
    out = (f'<figure class="my-6"><img src="{escape(c.src)}" alt="{escape(c.caption)}" '
           'class="w-full rounded-lg shadow-md">')
    if c.caption:
        out += ('<figcaption class="text-sm text-[var(--accent-color)] mt-2 text-center">'
                f'{escape(c.caption)}</figcaption>')
    return out + "</figure>"


def _split(direction: str) -> Callable:
    def render_split(block) -> str:
        c = block.content
        return (f'<div class="flex flex-col {direction} gap-6 my-6 items-center">'
                f'<div class="md:w-1/2"><img src="{escape(c.src)}" class="w-full rounded-lg shadow-md"></div>'
                f'<div class="md:w-1/2"><p>{nl2br(c.text)}</p></div>'
                '</div>')
    return render_split


def _iframe(block: IframeBlock) -> str:
    return ('<div class="my-6 w-full h-64 md:h-96">'
            f'<iframe src="{escape(block.content.src)}" class="w-full h-full border-0 rounded-lg shadow-md"></iframe>'
            '</div>')


RENDERERS: dict[type, Callable] = {
    HeaderBlock:         _header,
    ParagraphBlock:      _paragraph,
    CodeBlock:           _code,
    ImageBlock:          _image,
    TextImageLeftBlock:  _split("md:flex-row"),
    TextImageRightBlock: _split("md:flex-row-reverse"),
    IframeBlock:         _iframe,
}

SNIPPET_SOURCES = (ParagraphBlock, TextImageLeftBlock, TextImageRightBlock)


def render(blocks: Sequence) -> RenderResult:
    """Render blocks in order inside the prose container.

    snippet_source is the tag-stripped text of the first paragraph or split
    block with non-empty text. Blocks without a renderer (UnknownBlock) are
    skipped.
    """
    parts = [CONTAINER_OPEN]
    snippet = ""

    for block in blocks:
        renderer = RENDERERS.get(type(block))
        if renderer is None:
            logger.warning("Skipping block %s of unsupported type %r", block.id, block.type)
            continue
        parts.append(renderer(block))
        if not snippet and isinstance(block, SNIPPET_SOURCES):
            snippet = strip_tags(block.content.text)

    parts.append(CONTAINER_CLOSE)
    return RenderResult(markup="".join(parts), snippet_source=snippet)
