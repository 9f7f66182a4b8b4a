"""SQLModel-backed stores. Each call runs in its own session and commits on success."""

from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from blogpub.core.models import IndexEntry
from blogpub.crud.models import ArtifactRow, IndexRow, SnippetRow
from blogpub.crud.repo import ArtifactStore, IndexStore, SnippetStore, Stores
from blogpub.errors import StorageError


@contextmanager
def _session(engine) -> Iterator[Session]:
    """Session that commits on exit and reports database failures as StorageError."""
    try:
        with Session(engine) as session:
            yield session
            session.commit()
    except SQLAlchemyError as e:
        raise StorageError(f"Database error: {e}") from e


def _row_to_entry(r: IndexRow) -> IndexEntry:
    return IndexEntry(id=r.id, title=r.title, authors=list(r.authors or []), date=r.date, thumbnail=r.thumbnail)


class SqlIndexStore(IndexStore):
    def __init__(self, engine):
        self.engine = engine

    def list(self) -> list[IndexEntry]:
        with _session(self.engine) as session:
            rows = session.exec(select(IndexRow).order_by(IndexRow.position.asc())).all()
            return [_row_to_entry(r) for r in rows]

    def get(self, doc_id: str) -> IndexEntry | None:
        with _session(self.engine) as session:
            row = session.get(IndexRow, doc_id)
            return _row_to_entry(row) if row else None

    def put(self, entry: IndexEntry) -> None:
        with _session(self.engine) as session:
            row = session.get(IndexRow, entry.id)
            if row is None:
                last = session.exec(select(func.max(IndexRow.position))).one()
                row = IndexRow(id=entry.id, position=(last if last is not None else -1) + 1, title=entry.title)
            row.title = entry.title
            row.authors = list(entry.authors)
            row.date = entry.date
            row.thumbnail = entry.thumbnail
            session.add(row)

    def delete(self, doc_id: str) -> bool:
        with _session(self.engine) as session:
            row = session.get(IndexRow, doc_id)
            if row is None:
                return False
            session.delete(row)
            return True


class SqlSnippetStore(SnippetStore):
    def __init__(self, engine):
        self.engine = engine

    def all(self) -> dict[str, str]:
        with _session(self.engine) as session:
            return {r.id: r.text for r in session.exec(select(SnippetRow)).all()}

    def get(self, doc_id: str) -> str | None:
        with _session(self.engine) as session:
            row = session.get(SnippetRow, doc_id)
            return row.text if row else None

    def put(self, doc_id: str, text: str) -> None:
        with _session(self.engine) as session:
            row = session.get(SnippetRow, doc_id) or SnippetRow(id=doc_id)
            row.text = text
            session.add(row)

    def delete(self, doc_id: str) -> bool:
        with _session(self.engine) as session:
            row = session.get(SnippetRow, doc_id)
            if row is None:
                return False
            session.delete(row)
            return True


class SqlArtifactStore(ArtifactStore):
    def __init__(self, engine):
        self.engine = engine

    def ids(self) -> list[str]:
        with _session(self.engine) as session:
            return list(session.exec(select(ArtifactRow.id).order_by(ArtifactRow.id)).all())

    def get(self, doc_id: str) -> str | None:
        with _session(self.engine) as session:
            row = session.get(ArtifactRow, doc_id)
            return row.html if row else None

    def put(self, doc_id: str, text: str) -> None:
        with _session(self.engine) as session:
            row = session.get(ArtifactRow, doc_id)
            if row is None:
                row = ArtifactRow(id=doc_id, html=text)
            row.html = text
            row.updated_at = datetime.now()
            session.add(row)

    def delete(self, doc_id: str) -> bool:
        with _session(self.engine) as session:
            row = session.get(ArtifactRow, doc_id)
            if row is None:
                return False
            session.delete(row)
            return True


def sql_stores(engine) -> Stores:
    return Stores(index=SqlIndexStore(engine), snippets=SqlSnippetStore(engine), artifacts=SqlArtifactStore(engine))
