"""Block addressing helpers for editor front ends: insert, move, remove, retype"""

from datetime import date
from typing import Optional

from blogpub.core.models import (
    BLOCK_TYPES, Document, TextImageLeftBlock, TextImageRightBlock,
)
from blogpub.errors import ValidationError


DEFAULT_CONTENT: dict[str, dict] = {
    "header":           {"text": "New Header", "level": "h2"},
    "paragraph":        {"text": "Start writing your story...", "align": "left"},
    "code":             {"text": "// Your code here"},
    "image":            {"src": "", "caption": ""},
    "text-image-left":  {"text": "Descriptive text...", "src": "", "caption": ""},
    "text-image-right": {"text": "Descriptive text...", "src": "", "caption": ""},
    "iframe":           {"src": "https://", "showPreview": True},
}

SPLIT_TYPES = {"text-image-left": TextImageLeftBlock, "text-image-right": TextImageRightBlock}


def display_date(day: Optional[date] = None) -> str:
    """Format a date the way new posts are stamped, e.g. 'October 19, 2026'."""
    day = day or date.today()
    return f"{day:%B} {day.day}, {day.year}"


def blank_document(day: Optional[date] = None) -> Document:
    """A new, unsaved document dated today."""
    return Document(date=display_date(day))


def new_block(kind: str, block_id: Optional[str] = None):
    """Instantiate a block of the given type with the editor's default content."""
    cls = BLOCK_TYPES.get(kind)
    if cls is None:
        raise ValidationError(f"Unknown block type {kind!r}; expected one of {sorted(BLOCK_TYPES)}")
    data = {"content": dict(DEFAULT_CONTENT[kind])}
    if block_id:
        data["id"] = block_id
    return cls.model_validate(data)


def _position(doc: Document, block_id: str) -> int:
    for i, block in enumerate(doc.blocks):
        if block.id == block_id:
            return i
    raise ValidationError(f"No block with id {block_id!r}")


def insert_block(doc: Document, kind: str, index: Optional[int] = None):
    """Insert a default block of kind at index (end when None). Returns the new block."""
    block = new_block(kind)
    while doc.find_block(block.id) is not None:
        block = new_block(kind)
    position = len(doc.blocks) if index is None else max(0, min(index, len(doc.blocks)))
    doc.blocks.insert(position, block)
    return block


def move_block(doc: Document, block_id: str, index: int) -> None:
    """Move a block to index, clamped to the sequence bounds."""
    block = doc.blocks.pop(_position(doc, block_id))
    doc.blocks.insert(max(0, min(index, len(doc.blocks))), block)


def remove_block(doc: Document, block_id: str) -> None:
    del doc.blocks[_position(doc, block_id)]


def set_block_type(doc: Document, block_id: str, kind: str) -> None:
    """Switch a split block between image-left and image-right, keeping id and content."""
    i = _position(doc, block_id)
    block = doc.blocks[i]
    if kind not in SPLIT_TYPES or block.type not in SPLIT_TYPES:
        raise ValidationError(f"Cannot change block {block_id!r} from {block.type!r} to {kind!r}")
    doc.blocks[i] = SPLIT_TYPES[kind](id=block.id, content=block.content.model_copy())
