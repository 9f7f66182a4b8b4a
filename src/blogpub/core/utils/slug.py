"""Slug generation for document identifiers"""

import re
from typing import Callable

from text_unidecode import unidecode


PLACEHOLDER_SLUG = "n-a"

_SEPARATORS_RE = re.compile(r"[\W_]+")
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9-]+")
_HYPHENS_RE = re.compile(r"-+")


def slugify(text: str) -> str:
    """Convert a title to a lowercase, hyphen-separated ASCII slug.

    Runs of anything that is not a Unicode letter or digit become one hyphen
    before transliteration, so 'Crème brûlée!' gives 'creme-brulee'. Input
    that transliterates to nothing gives PLACEHOLDER_SLUG.
    """
    text = _SEPARATORS_RE.sub("-", text)
    text = unidecode(text)
    text = _UNSAFE_RE.sub("", text)
    text = _HYPHENS_RE.sub("-", text.strip("-"))
    return text.lower() or PLACEHOLDER_SLUG


def unique_slug(title: str, exists: Callable[[str], bool]) -> str:
    """slugify(title), suffixed -1, -2, ... until exists() reports no collision."""
    base = slugify(title)
    candidate, counter = base, 1
    while exists(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
