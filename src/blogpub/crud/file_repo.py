"""Flat-file stores: JSON index list, JSON snippet mapping, one HTML file per document.

Every write is a whole-file overwrite; there is no locking, so concurrent
writers race with last-writer-wins semantics.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from blogpub.core.models import IndexEntry
from blogpub.crud.repo import SAFE_ID_RE, ArtifactStore, IndexStore, SnippetStore, Stores
from blogpub.errors import StorageError


logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".html"


def read_json(path: Path, default: Any) -> Any:
    """Parsed JSON content of path, or default when the file is missing or empty."""
    if not path.exists():
        return default
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e}") from e
    if not text.strip():
        return default
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StorageError(f"Corrupt JSON in {path}: {e}") from e
    if not isinstance(data, type(default)):
        raise StorageError(f"Corrupt JSON in {path}: expected {type(default).__name__}, got {type(data).__name__}")
    return data


def write_json(path: Path, data: Any) -> None:
    """Pretty-print data to path, replacing the whole file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=4), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot write {path}: {e}") from e
    logger.debug("Wrote %s", path)


class JsonIndexStore(IndexStore):
    def __init__(self, path: Path):
        self.path = Path(path)

    def list(self) -> list[IndexEntry]:
        try:
            return [IndexEntry.model_validate(e) for e in read_json(self.path, [])]
        except PydanticValidationError as e:
            raise StorageError(f"Invalid index entry in {self.path}: {e}") from e

    def _dump(self, entries: list[IndexEntry]) -> None:
        write_json(self.path, [e.model_dump(by_alias=True) for e in entries])

    def put(self, entry: IndexEntry) -> None:
        entries = self.list()
        for i, existing in enumerate(entries):
            if existing.id == entry.id:
                entries[i] = entry
                break
        else:
            entries.append(entry)
        self._dump(entries)

    def delete(self, doc_id: str) -> bool:
        entries = self.list()
        kept = [e for e in entries if e.id != doc_id]
        if len(kept) == len(entries):
            return False
        self._dump(kept)
        return True


class JsonSnippetStore(SnippetStore):
    def __init__(self, path: Path):
        self.path = Path(path)

    def all(self) -> dict[str, str]:
        return read_json(self.path, {})

    def put(self, doc_id: str, text: str) -> None:
        snippets = self.all()
        snippets[doc_id] = text
        write_json(self.path, snippets)

    def delete(self, doc_id: str) -> bool:
        snippets = self.all()
        if doc_id not in snippets:
            return False
        del snippets[doc_id]
        write_json(self.path, snippets)
        return True


class HtmlArtifactStore(ArtifactStore):
    def __init__(self, directory: Path, suffix: str = ARTIFACT_SUFFIX):
        self.directory = Path(directory)
        self.suffix = suffix

    def _path(self, doc_id: str) -> Path:
        if not SAFE_ID_RE.fullmatch(doc_id):
            raise StorageError(f"Refusing unsafe artifact id {doc_id!r}")
        return self.directory / f"{doc_id}{self.suffix}"

    def ids(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{self.suffix}") if p.is_file())

    def exists(self, doc_id: str) -> bool:
        return self._path(doc_id).is_file()

    def get(self, doc_id: str) -> str | None:
        path = self._path(doc_id)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def put(self, doc_id: str, text: str) -> None:
        path = self._path(doc_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %s", path)

    def delete(self, doc_id: str) -> bool:
        path = self._path(doc_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot delete {path}: {e}") from e
        return True


def file_stores(index_file: Path, snippets_file: Path, blogs_dir: Path) -> Stores:
    return Stores(
        index=JsonIndexStore(index_file),
        snippets=JsonSnippetStore(snippets_file),
        artifacts=HtmlArtifactStore(blogs_dir),
    )
