"""Upload sink: stores uploaded image payloads and returns a durable URL"""

import logging
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Callable

from blogpub.core.models import Upload
from blogpub.errors import StorageError


logger = logging.getLogger(__name__)

_UNSAFE_NAME_RE = re.compile(r"[^a-zA-Z0-9À-ÿĀ-ſƀ-ɏḀ-ỿ._-]")


def safe_filename(name: str) -> str:
    """Basename restricted to letters (ASCII and Latin ranges), digits and ._-"""
    cleaned = _UNSAFE_NAME_RE.sub("", PurePosixPath(name.replace("\\", "/")).name).lstrip(".")
    return cleaned or "upload"


class UploadSink(ABC):
    @abstractmethod
    def store(self, upload: Upload) -> str:
        """Persist the payload and return the URL blocks should reference."""
        raise NotImplementedError


class LocalUploadSink(UploadSink):
    """Writes '<unix-seconds>_<name>' under directory; collisions get -1, -2, ... before the suffix."""

    def __init__(self, directory: Path, url_prefix: str = "", clock: Callable[[], float] = time.time):
        self.directory = Path(directory)
        self.url_prefix = url_prefix
        self.clock = clock

    def _target(self, filename: str) -> Path:
        name = PurePosixPath(f"{int(self.clock())}_{safe_filename(filename)}")
        target, counter = self.directory / name.name, 1
        while target.exists():
            target = self.directory / f"{name.stem}-{counter}{name.suffix}"
            counter += 1
        return target

    def url_for(self, target: Path) -> str:
        if self.url_prefix:
            return f"{self.url_prefix.rstrip('/')}/{target.name}"
        return target.as_posix()

    def store(self, upload: Upload) -> str:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target = self._target(upload.filename)
            target.write_bytes(upload.data)
        except OSError as e:
            raise StorageError(f"Cannot store upload {upload.filename!r}: {e}") from e
        logger.info("Stored upload for block %s at %s", upload.block_id, target)
        return self.url_for(target)
