"""Root test configuration: session-level cleanup of runtime artifacts"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["blogpub.db", "test.db", "BlogData.json", "Snippets.json"]
_CLEANUP_DIRS = ["blogs", "assets"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove store files and directories accidentally created in the project root."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)
