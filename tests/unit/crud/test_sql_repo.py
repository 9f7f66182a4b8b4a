"""Unit tests for crud/sql_repo.py"""

import pytest
from sqlmodel import Session, select

from blogpub.core.models import IndexEntry
from blogpub.crud.models import ArtifactRow, IndexRow
from blogpub.crud.sql_repo import SqlArtifactStore, SqlIndexStore, sql_stores
from blogpub.errors import StorageError


def test_index_positions_follow_first_insert(engine):
    store = SqlIndexStore(engine)
    for doc_id in ("a", "b", "c"):
        store.put(IndexEntry(id=doc_id, title=doc_id.upper()))
    store.delete("c")
    store.put(IndexEntry(id="d", title="D"))
    store.put(IndexEntry(id="a", title="A2"))
    with Session(engine) as session:
        rows = session.exec(select(IndexRow).order_by(IndexRow.position)).all()
        assert [(r.id, r.position) for r in rows] == [("a", 0), ("b", 1), ("d", 2)]
    assert [e.title for e in store.list()] == ["A2", "B", "D"]


def test_index_authors_stored_as_json(engine):
    store = SqlIndexStore(engine)
    store.put(IndexEntry(id="a", title="A", authors=["Ann", "Bob"]))
    with Session(engine) as session:
        assert session.get(IndexRow, "a").authors == ["Ann", "Bob"]


def test_artifact_updated_at_changes(engine):
    store = SqlArtifactStore(engine)
    store.put("a", "one")
    with Session(engine) as session:
        first = session.get(ArtifactRow, "a").updated_at
    store.put("a", "two")
    with Session(engine) as session:
        row = session.get(ArtifactRow, "a")
        assert row.html == "two"
        assert row.updated_at >= first


def test_database_errors_become_storage_errors(engine):
    """Missing tables surface as StorageError, not a raw SQLAlchemy exception."""
    from sqlmodel import SQLModel
    SQLModel.metadata.drop_all(engine)
    stores = sql_stores(engine)
    with pytest.raises(StorageError, match="Database error"):
        stores.snippets.all()
    with pytest.raises(StorageError):
        stores.index.put(IndexEntry(id="a", title="A"))
