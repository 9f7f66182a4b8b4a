"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from blogpub.crud.database import init_db
from blogpub.crud.file_repo import file_stores
from blogpub.crud.memory_repo import memory_stores
from blogpub.crud.sql_repo import sql_stores


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="stores", params=["memory", "files", "sql"])
def stores_fixture(request, tmp_path):
    """The same Stores contract, once per backend."""
    if request.param == "memory":
        return memory_stores()
    if request.param == "files":
        return file_stores(tmp_path / "BlogData.json", tmp_path / "Snippets.json", tmp_path / "blogs")
    return sql_stores(request.getfixturevalue("engine"))
