"""Round-trip encoding: the rendered artifact carries its own editable block list.

The block list is appended after the markup inside an HTML comment, so the
same file is both the published page and the only copy of the source.
"""

import json
import logging
import re
from typing import Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from blogpub.core.models import BLOCK_LIST, duplicate_block_id


logger = logging.getLogger(__name__)

TRAILER_OPEN = "<!-- EDITOR_DATA"
TRAILER_CLOSE = "-->"

_TRAILER_RE = re.compile(r"<!-- EDITOR_DATA\s+(.*?)\s+-->", re.DOTALL)

# Keeps '-->' (and any tag) in authored text from closing the comment early.
_HTML_SAFE_JSON = str.maketrans({"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"})


def serialize_blocks(blocks: Sequence) -> str:
    """JSON for the trailer; decodes to exactly the given blocks."""
    payload = BLOCK_LIST.dump_python(list(blocks), mode="json")
    return json.dumps(payload, ensure_ascii=False).translate(_HTML_SAFE_JSON)


def encode(markup: str, blocks: Sequence) -> str:
    """Append the serialized blocks to markup as a non-rendering trailer."""
    return f"{markup}\n{TRAILER_OPEN}\n{serialize_blocks(blocks)}\n{TRAILER_CLOSE}"


def decode(artifact: str) -> Optional[list]:
    """Recover the block list from an artifact.

    The trailer is the last sentinel in the artifact; earlier ones can come
    from unescaped rich text in the markup. Returns None when there is no
    trailer or its payload is not a valid block list with unique ids;
    callers treat both as an empty document.
    """
    start = artifact.rfind(TRAILER_OPEN)
    m = _TRAILER_RE.match(artifact, start) if start >= 0 else None
    if m is None:
        return None
    try:
        blocks = BLOCK_LIST.validate_json(m.group(1))
    except PydanticValidationError as e:
        logger.warning("Ignoring undecodable editor trailer: %s", e.errors(include_url=False)[:1])
        return None
    duplicate = duplicate_block_id(blocks)
    if duplicate is not None:
        logger.warning("Ignoring editor trailer with duplicate block id %r", duplicate)
        return None
    return blocks
