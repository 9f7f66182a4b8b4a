"""Store interfaces: index, snippet and artifact repositories.

Each store is a plain get/put/delete repository so the synchronizer can run
against flat files, a database, or memory without knowing how writes land.
"""

from __future__ import annotations
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from blogpub.core.models import IndexEntry


# Ids double as file names and URL segments.
SAFE_ID_RE = re.compile(r"[A-Za-z0-9_-]+")


class IndexStore(ABC):
    @abstractmethod
    def list(self) -> list[IndexEntry]:
        """All entries in store order (insertion/update history)."""
        raise NotImplementedError

    def get(self, doc_id: str) -> IndexEntry | None:
        return next((e for e in self.list() if e.id == doc_id), None)

    @abstractmethod
    def put(self, entry: IndexEntry) -> None:
        """Replace the entry with the same id in place, else append."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, doc_id: str) -> bool:
        """Remove the entry; False if it was not present."""
        raise NotImplementedError


class SnippetStore(ABC):
    @abstractmethod
    def all(self) -> dict[str, str]:
        raise NotImplementedError

    def get(self, doc_id: str) -> str | None:
        return self.all().get(doc_id)

    @abstractmethod
    def put(self, doc_id: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, doc_id: str) -> bool:
        raise NotImplementedError


class ArtifactStore(ABC):
    @abstractmethod
    def ids(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def get(self, doc_id: str) -> str | None:
        raise NotImplementedError

    def exists(self, doc_id: str) -> bool:
        return self.get(doc_id) is not None

    @abstractmethod
    def put(self, doc_id: str, text: str) -> None:
        """Full overwrite."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, doc_id: str) -> bool:
        raise NotImplementedError


@dataclass
class Stores:
    index: IndexStore
    snippets: SnippetStore
    artifacts: ArtifactStore
