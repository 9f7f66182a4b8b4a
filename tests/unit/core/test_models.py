"""Unit tests for core/models.py"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from blogpub.core.models import (
    BLOCK_LIST, Document, HeaderBlock, ImageBlock, IndexEntry, ParagraphBlock,
    TextImageLeftBlock, UnknownBlock, Upload, block_src, has_src,
)


# --- block union ---

def test_block_list_dispatches_on_type(blocks):
    """Each wire type is parsed into its own block class."""
    assert [b.type for b in blocks] == [
        "header", "paragraph", "code", "image", "text-image-left", "text-image-right", "iframe",
    ]
    assert isinstance(blocks[0], HeaderBlock)
    assert isinstance(blocks[4], TextImageLeftBlock)


def test_unknown_type_is_preserved():
    """Unrecognized block types become UnknownBlock with their content intact."""
    [block] = BLOCK_LIST.validate_python([{"id": "q", "type": "quote", "content": {"text": "hm", "by": "X"}}])
    assert isinstance(block, UnknownBlock)
    assert block.type == "quote"
    assert block.content == {"text": "hm", "by": "X"}


def test_block_without_type_is_rejected():
    """A block with no type at all cannot be parsed."""
    with pytest.raises(PydanticValidationError):
        BLOCK_LIST.validate_python([{"id": "x", "content": {}}])


def test_missing_optional_fields_default_to_empty():
    """Absent caption/src fields default to empty strings."""
    [block] = BLOCK_LIST.validate_python([{"id": "i", "type": "image", "content": {}}])
    assert block.content.src == ""
    assert block.content.caption == ""


def test_null_fields_become_empty():
    """Null content fields and a null content object are normalized to empty values."""
    blocks = BLOCK_LIST.validate_python([
        {"id": "i", "type": "image", "content": {"src": "a.png", "caption": None}},
        {"id": "p", "type": "paragraph", "content": None},
    ])
    assert blocks[0].content.caption == ""
    assert blocks[1].content.text == ""


def test_block_id_generated_when_missing():
    """Blocks built without an id get a short random one."""
    a, b = ParagraphBlock(), ParagraphBlock()
    assert len(a.id) == 9
    assert a.id != b.id


def test_editor_only_keys_survive_dump():
    """Extra content keys from the editor are kept in the dump."""
    [block] = BLOCK_LIST.validate_python([{"id": "p", "type": "paragraph", "content": {"text": "x", "align": "left"}}])
    assert block.model_dump()["content"] == {"text": "x", "align": "left"}


# --- header level ---

@pytest.mark.parametrize("level,expected", [
    ("h1", "h1"), ("H3", "h3"), (4, "h4"), ("5", "h5"), (None, "h2"), ("", "h2"),
])
def test_header_level_normalized(level, expected):
    """Header levels accept ints, digit strings and any case."""
    block = HeaderBlock.model_validate({"content": {"text": "T", "level": level}})
    assert block.content.level == expected


@pytest.mark.parametrize("level", ["h7", "h0", "div", 9])
def test_header_level_rejects_non_heading(level):
    """Only h1-h6 are accepted, so the level can be used as a tag name."""
    with pytest.raises(PydanticValidationError):
        HeaderBlock.model_validate({"content": {"text": "T", "level": level}})


# --- src helpers ---

def test_block_src_and_has_src(blocks):
    """Only image, split and iframe blocks carry a src."""
    header, paragraph, code, image = blocks[:4]
    assert block_src(header) is None
    assert block_src(image) == "https://x/img.png"
    assert not has_src(paragraph)
    assert not has_src(code)
    assert all(has_src(b) for b in blocks[3:])


def test_unknown_block_src_read_but_not_uploadable():
    """An unknown block's src is visible for thumbnails but uploads never target it."""
    block = UnknownBlock(id="u", type="gallery", content={"src": "https://x/g.png"})
    assert block_src(block) == "https://x/g.png"
    assert not has_src(block)


# --- document ---

def test_authors_parsed_from_comma_string():
    """Comma-separated authors are trimmed and empty tokens dropped."""
    doc = Document(title="T", authors=" Ann , Bob,, ,Cy ")
    assert doc.authors == ["Ann", "Bob", "Cy"]


def test_authors_list_is_trimmed():
    doc = Document(title="T", authors=["  Ann", "", "Bob  "])
    assert doc.authors == ["Ann", "Bob"]


def test_empty_id_means_new():
    """An empty id string is treated as a new document."""
    assert Document(id="", title="T").id is None


def test_duplicate_block_ids_rejected():
    """Block ids must be unique within a document."""
    with pytest.raises(PydanticValidationError, match="duplicate block id"):
        Document(title="T", blocks=[
            {"id": "a", "type": "paragraph", "content": {"text": "1"}},
            {"id": "a", "type": "code", "content": {"text": "2"}},
        ])


def test_find_block(blocks):
    doc = Document(title="T", blocks=blocks)
    assert doc.find_block("i1") is blocks[3]
    assert doc.find_block("nope") is None


def test_index_entry_projection(blocks):
    """index_entry carries every Document field except blocks."""
    doc = Document(id="t", title="T", authors=["Ann"], date="May 1, 2026", blocks=blocks)
    entry = doc.index_entry("https://x/img.png")
    assert entry == IndexEntry(id="t", title="T", authors=["Ann"], date="May 1, 2026", thumbnail="https://x/img.png")


def test_index_entry_serializes_file_name_alias():
    """On disk the id is stored under 'fileName'."""
    entry = IndexEntry(id="t", title="T")
    dumped = entry.model_dump(by_alias=True)
    assert dumped["fileName"] == "t"
    assert "id" not in dumped
    assert IndexEntry.model_validate(dumped) == entry


# --- uploads ---

def test_upload_from_form_field():
    """Form keys 'image_<blockid>' map to the block id; paths are reduced to basenames."""
    upload = Upload.from_field("image_abc123", "some/dir/pic.png", b"data")
    assert upload.block_id == "abc123"
    assert upload.filename == "pic.png"


def test_upload_from_plain_key():
    assert Upload.from_field("abc123", "pic.png", b"").block_id == "abc123"


def test_image_block_direct_construction():
    block = ImageBlock(id="i", content={"src": "a.png"})
    assert block.content.caption == ""
