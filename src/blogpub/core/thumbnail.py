"""Thumbnail selection for index entries"""

from typing import Sequence

from blogpub.core.models import block_src


PLACEHOLDER_THUMBNAIL = "https://via.placeholder.com/400x300?text=No+Image"
TRANSIENT_PREFIXES = ("blob:",)


def is_transient(url: str, prefixes: Sequence[str] = TRANSIENT_PREFIXES) -> bool:
    """True for client-local handles (e.g. blob: URLs) that die with the editing session."""
    return url.startswith(tuple(prefixes))


def resolve_thumbnail(
    candidate: str,
    blocks: Sequence,
    placeholder: str = PLACEHOLDER_THUMBNAIL,
    transient_prefixes: Sequence[str] = TRANSIENT_PREFIXES,
    ) -> str:
    """Explicit durable candidate, else first durable block src, else placeholder.

    A candidate equal to the placeholder counts as absent, so a post saved
    before it had images picks up its first image on a later save.
    """
    candidate = (candidate or "").strip()
    if candidate and candidate != placeholder and not is_transient(candidate, transient_prefixes):
        return candidate

    for block in blocks:
        src = block_src(block)
        if src and not is_transient(src, transient_prefixes):
            return src

    return placeholder
