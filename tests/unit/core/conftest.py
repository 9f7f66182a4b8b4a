"""Shared fixtures for core unit tests"""

import pytest

from blogpub.config import Settings
from blogpub.core.models import BLOCK_LIST
from blogpub.core.sync import StoreSynchronizer
from blogpub.crud.memory_repo import memory_stores
from blogpub.crud.uploads import LocalUploadSink

from samples import FIXED_CLOCK, SAMPLE_BLOCKS


@pytest.fixture(name="blocks")
def blocks_fixture():
    return BLOCK_LIST.validate_python(SAMPLE_BLOCKS)


@pytest.fixture(name="stores")
def stores_fixture():
    return memory_stores()


@pytest.fixture(name="sink")
def sink_fixture(tmp_path):
    return LocalUploadSink(tmp_path / "images", url_prefix="/assets/blog_images", clock=lambda: FIXED_CLOCK)


@pytest.fixture(name="sync")
def sync_fixture(stores, sink):
    return StoreSynchronizer(stores, uploads=sink, settings=Settings())
