"""Error taxonomy shared by the core pipeline, the store backends, and the CLI"""


class BlogpubError(Exception):
    """Base class for every error raised on purpose by blogpub."""


class ValidationError(BlogpubError, ValueError):
    """Caller input was rejected before any store was written."""


class NotFoundError(BlogpubError, LookupError):
    """No index entry and no artifact exist for the requested id."""


class StorageError(BlogpubError, OSError):
    """A store read or write failed; stores may now disagree with each other."""
