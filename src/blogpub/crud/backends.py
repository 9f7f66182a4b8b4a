"""Backend selection: build the Stores bundle and upload sink named by Settings"""

from blogpub.config import Settings
from blogpub.crud.database import init_db, make_engine
from blogpub.crud.file_repo import file_stores
from blogpub.crud.memory_repo import memory_stores
from blogpub.crud.repo import Stores
from blogpub.crud.sql_repo import sql_stores
from blogpub.crud.uploads import LocalUploadSink


def open_stores(settings: Settings) -> Stores:
    """Stores for settings.backend; SQL tables are created on first use."""
    if settings.backend == "sql":
        engine = make_engine(settings.db_url)
        init_db(engine)
        return sql_stores(engine)
    if settings.backend == "memory":
        return memory_stores()
    return file_stores(
        settings.path("index_file"),
        settings.path("snippets_file"),
        settings.path("blogs_dir"),
    )


def open_upload_sink(settings: Settings) -> LocalUploadSink:
    return LocalUploadSink(settings.path("images_dir"), url_prefix=settings.upload_url_prefix)
