from dataclasses import dataclass, field

from blogpub.core.models import IndexEntry
from blogpub.crud.repo import ArtifactStore, IndexStore, SnippetStore, Stores


@dataclass
class MemoryIndexStore(IndexStore):
    _entries: list[IndexEntry] = field(default_factory=list)

    def list(self) -> list[IndexEntry]:
        return [e.model_copy() for e in self._entries]

    def put(self, entry: IndexEntry) -> None:
        for i, existing in enumerate(self._entries):
            if existing.id == entry.id:
                self._entries[i] = entry.model_copy()
                return
        self._entries.append(entry.model_copy())

    def delete(self, doc_id: str) -> bool:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != doc_id]
        return len(self._entries) != before


@dataclass
class MemorySnippetStore(SnippetStore):
    _snippets: dict[str, str] = field(default_factory=dict)

    def all(self) -> dict[str, str]:
        return dict(self._snippets)

    def put(self, doc_id: str, text: str) -> None:
        self._snippets[doc_id] = text

    def delete(self, doc_id: str) -> bool:
        return self._snippets.pop(doc_id, None) is not None


@dataclass
class MemoryArtifactStore(ArtifactStore):
    _files: dict[str, str] = field(default_factory=dict)

    def ids(self) -> list[str]:
        return sorted(self._files)

    def get(self, doc_id: str) -> str | None:
        return self._files.get(doc_id)

    def put(self, doc_id: str, text: str) -> None:
        self._files[doc_id] = text

    def delete(self, doc_id: str) -> bool:
        return self._files.pop(doc_id, None) is not None


def memory_stores() -> Stores:
    return Stores(index=MemoryIndexStore(), snippets=MemorySnippetStore(), artifacts=MemoryArtifactStore())
