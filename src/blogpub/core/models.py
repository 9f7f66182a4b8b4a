"""Block document schema: typed content blocks, documents, index entries, uploads"""

from pathlib import PurePosixPath
from typing import Annotated, Any, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter,
    field_validator, model_validator,
)


HEADER_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")
UPLOAD_FIELD_PREFIX = "image_"

HeaderLevel = Literal["h1", "h2", "h3", "h4", "h5", "h6"]


def new_block_id() -> str:
    """Random 9-character block id; only needs to be unique within one document."""
    return uuid4().hex[:9]


# --- content payloads ---

class BlockContent(BaseModel):
    """Typed payload of a block. Unknown keys (editor-only state) are kept for the round trip."""
    model_config = ConfigDict(extra="allow")

    @field_validator("*", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class HeaderContent(BlockContent):
    text:  str = ""
    level: HeaderLevel = "h2"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> Any:
        """Accept 2, '2', 'H2' and 'h2'; missing level falls back to h2."""
        if value is None or value == "":
            return "h2"
        if isinstance(value, int) and not isinstance(value, bool):
            return f"h{value}"
        if isinstance(value, str):
            value = value.strip().lower()
            return f"h{value}" if value.isdigit() else value
        return value


class TextContent(BlockContent):
    text: str = ""


class ImageContent(BlockContent):
    src:     str = ""
    caption: str = ""


class SplitContent(BlockContent):
    text:    str = ""
    src:     str = ""
    caption: str = ""


class EmbedContent(BlockContent):
    src: str = ""


# --- blocks ---

class _BlockBase(BaseModel):
    id: str = Field(default_factory=new_block_id, min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _null_content(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("content") is None:
            data = {**data, "content": {}}
        return data


class HeaderBlock(_BlockBase):
    type:    Literal["header"] = "header"
    content: HeaderContent = Field(default_factory=HeaderContent)


class ParagraphBlock(_BlockBase):
    """Rich text; content.text may carry inline markup and is rendered unescaped."""
    type:    Literal["paragraph"] = "paragraph"
    content: TextContent = Field(default_factory=TextContent)


class CodeBlock(_BlockBase):
    type:    Literal["code"] = "code"
    content: TextContent = Field(default_factory=TextContent)


class ImageBlock(_BlockBase):
    type:    Literal["image"] = "image"
    content: ImageContent = Field(default_factory=ImageContent)


class TextImageLeftBlock(_BlockBase):
    type:    Literal["text-image-left"] = "text-image-left"
    content: SplitContent = Field(default_factory=SplitContent)


class TextImageRightBlock(_BlockBase):
    type:    Literal["text-image-right"] = "text-image-right"
    content: SplitContent = Field(default_factory=SplitContent)


class IframeBlock(_BlockBase):
    type:    Literal["iframe"] = "iframe"
    content: EmbedContent = Field(default_factory=EmbedContent)


class UnknownBlock(_BlockBase):
    """Any block type this version does not know. Never rendered, always preserved."""
    type:    str
    content: dict[str, Any] = Field(default_factory=dict)


BLOCK_TYPES: dict[str, type[_BlockBase]] = {
    "header":           HeaderBlock,
    "paragraph":        ParagraphBlock,
    "code":             CodeBlock,
    "image":            ImageBlock,
    "text-image-left":  TextImageLeftBlock,
    "text-image-right": TextImageRightBlock,
    "iframe":           IframeBlock,
}


def _block_tag(value: Any) -> str:
    """Pick the union arm from the 'type' key; anything unrecognized goes to UnknownBlock."""
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if isinstance(kind, str) and kind in BLOCK_TYPES else "unknown"


Block = Annotated[
    Union[
        Annotated[HeaderBlock, Tag("header")],
        Annotated[ParagraphBlock, Tag("paragraph")],
        Annotated[CodeBlock, Tag("code")],
        Annotated[ImageBlock, Tag("image")],
        Annotated[TextImageLeftBlock, Tag("text-image-left")],
        Annotated[TextImageRightBlock, Tag("text-image-right")],
        Annotated[IframeBlock, Tag("iframe")],
        Annotated[UnknownBlock, Tag("unknown")],
    ],
    Discriminator(_block_tag),
]

BLOCK_LIST = TypeAdapter(list[Block])


def block_src(block: _BlockBase) -> Optional[str]:
    """Return the block's src field, or None when its type has no src."""
    if isinstance(block, UnknownBlock):
        src = block.content.get("src")
        return src if isinstance(src, str) else None
    return getattr(block.content, "src", None)


def has_src(block: _BlockBase) -> bool:
    """True when an uploaded file can be attached to this block."""
    if isinstance(block, UnknownBlock):
        return False
    return "src" in type(block.content).model_fields


# --- documents ---

def duplicate_block_id(blocks) -> Optional[str]:
    """First block id that appears twice in blocks, or None."""
    seen: set[str] = set()
    for block in blocks:
        if block.id in seen:
            return block.id
        seen.add(block.id)
    return None


class IndexEntry(BaseModel):
    """Publicly listed projection of a Document (no blocks). Serialized with the 'fileName' key."""
    model_config = ConfigDict(populate_by_name=True)

    title:     str
    authors:   list[str] = Field(default_factory=list)
    date:      str = ""
    id:        str = Field(alias="fileName", min_length=1)
    thumbnail: str = ""


class Document(BaseModel):
    """One authored post. Empty title/authors are allowed here and rejected at save time."""
    id:        Optional[str] = None
    title:     str = ""
    authors:   list[str] = Field(default_factory=list)
    date:      str = ""
    thumbnail: str = ""
    blocks:    list[Block] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("title", "date", "thumbnail", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("authors", mode="before")
    @classmethod
    def _split_authors(cls, value: Any) -> Any:
        """Parse 'A, B,, C' into ['A', 'B', 'C']; empty tokens are dropped."""
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return [a.strip() for a in value if isinstance(a, str) and a.strip()]
        return value

    @model_validator(mode="after")
    def _unique_block_ids(self) -> "Document":
        duplicate = duplicate_block_id(self.blocks)
        if duplicate is not None:
            raise ValueError(f"duplicate block id {duplicate!r}")
        return self

    def find_block(self, block_id: str) -> Optional[_BlockBase]:
        """Return the block with the given id, or None."""
        return next((b for b in self.blocks if b.id == block_id), None)

    def index_entry(self, thumbnail: str) -> IndexEntry:
        """Project onto the index record using an already-resolved thumbnail."""
        return IndexEntry(id=self.id, title=self.title, authors=list(self.authors),
                          date=self.date, thumbnail=thumbnail)


# --- uploads ---

class Upload(BaseModel):
    """A binary payload the client wants attached to the block with id block_id."""
    block_id: str
    filename: str
    data:     bytes

    @classmethod
    def from_field(cls, key: str, filename: str, data: bytes) -> "Upload":
        """Build from a form field key of the form 'image_<blockid>'."""
        block_id = key[len(UPLOAD_FIELD_PREFIX):] if key.startswith(UPLOAD_FIELD_PREFIX) else key
        return cls(block_id=block_id, filename=PurePosixPath(filename).name, data=data)
