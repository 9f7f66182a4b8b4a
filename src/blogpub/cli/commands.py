"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml

from blogpub.config import Settings, load_config
from blogpub.core.models import Upload
from blogpub.core.render import make_snippet, render
from blogpub.core.sync import StoreSynchronizer, coerce_document
from blogpub.core.trailer import encode
from blogpub.crud.backends import open_stores, open_upload_sink
from blogpub.errors import BlogpubError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling; applies log_level unless --verbose set one."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    pkg_logger = logging.getLogger("blogpub")
    if pkg_logger.level == logging.NOTSET:
        pkg_logger.setLevel(settings.log_level)
    return settings


def _synchronizer(settings: Settings) -> StoreSynchronizer:
    try:
        stores = open_stores(settings)
    except BlogpubError as e:
        _fail("Cannot open stores", e)
    return StoreSynchronizer(stores, uploads=open_upload_sink(settings), settings=settings)


def _read_document_file(path: Path) -> dict:
    """Parse a YAML or JSON document file into a mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        _fail(f"Cannot read document file {path}", e)
    if not isinstance(data, dict):
        _fail(f"Document file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _parse_upload(spec: str) -> Upload:
    """'BLOCK_ID=PATH' -> Upload with the file's bytes."""
    block_id, sep, file_path = spec.partition("=")
    if not sep or not block_id or not file_path:
        _fail(f"Invalid --upload {spec!r}; expected BLOCK_ID=PATH")
    path = Path(file_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        _fail(f"Cannot read upload {path}", e)
    return Upload(block_id=block_id, filename=path.name, data=data)


Backend = Annotated[Optional[str], typer.Option("--backend", help="files, sql or memory")]


def init_cmd(backend: Backend = None):
    """Create the store directories (files backend) or tables (sql backend)."""
    settings = _settings(overrides={"backend": backend})
    _synchronizer(settings)
    if settings.backend == "files":
        settings.path("blogs_dir").mkdir(parents=True, exist_ok=True)
        settings.path("images_dir").mkdir(parents=True, exist_ok=True)
        typer.echo(f"Stores initialized under: {Path(settings.data_dir).resolve()}")
    else:
        typer.echo(f"Stores initialized for backend: {settings.backend}")


def list_cmd(
    recent: Annotated[bool, typer.Option("--recent", help="Most recently added first")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print index entries as JSON")] = False,
    backend: Backend = None,
    ):
    """List documents in the index."""
    sync = _synchronizer(_settings(overrides={"backend": backend}))
    try:
        entries = sync.list_documents(recent_first=recent)
    except BlogpubError as e:
        _fail("Cannot read index", e)
    if as_json:
        typer.echo(json.dumps([e.model_dump() for e in entries], indent=2, ensure_ascii=False))
        return
    if not entries:
        typer.echo("No documents found.")
        raise typer.Exit(1)
    for e in entries:
        typer.echo(f"{e.id}\t{e.date}\t{e.title} ({', '.join(e.authors)})")


def show_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id (slug)")],
    backend: Backend = None,
    ):
    """Print a document, including its recovered blocks, as YAML."""
    sync = _synchronizer(_settings(overrides={"backend": backend}))
    try:
        doc = sync.load_document(doc_id, strict=True)
    except BlogpubError as e:
        _fail(str(e))
    typer.echo(yaml.safe_dump(doc.model_dump(mode="json"), sort_keys=False, allow_unicode=True))


def save_cmd(
    path: Annotated[Path, typer.Argument(help="YAML or JSON document file")],
    doc_id: Annotated[Optional[str], typer.Option("--id", help="Save over this existing document id")] = None,
    upload: Annotated[Optional[list[str]], typer.Option("--upload", help="BLOCK_ID=PATH image upload")] = None,
    rename: Annotated[bool, typer.Option("--rename", help="Give an existing document a new id from its title")] = False,
    backend: Backend = None,
    ):
    """Render and store a document; prints the assigned id."""
    data = _read_document_file(path)
    if doc_id:
        data["id"] = doc_id
    uploads = [_parse_upload(u) for u in upload or []]
    sync = _synchronizer(_settings(overrides={"backend": backend}))
    try:
        saved = sync.save_document(data, uploads=uploads, rename=rename)
    except BlogpubError as e:
        _fail("Save failed", e)
    typer.echo(saved.id)


def delete_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id (slug)")],
    backend: Backend = None,
    ):
    """Remove a document's index entry, snippet and artifact."""
    sync = _synchronizer(_settings(overrides={"backend": backend}))
    try:
        removed = sync.delete_document(doc_id)
    except BlogpubError as e:
        _fail("Delete failed", e)
    typer.echo(f"Deleted: {doc_id}" if removed else f"Nothing to delete for: {doc_id}")


def render_cmd(
    path: Annotated[Path, typer.Argument(help="YAML or JSON document file")],
    trailer: Annotated[bool, typer.Option("--trailer", help="Append the editor trailer")] = False,
    ):
    """Preview the markup for a document file without writing any store."""
    settings = _settings()
    try:
        doc = coerce_document(_read_document_file(path))
    except BlogpubError as e:
        _fail(str(e))
    result = render(doc.blocks)
    typer.echo(encode(result.markup, doc.blocks) if trailer else result.markup)
    typer.echo(f"snippet: {make_snippet(result.snippet_source, settings.snippet_length)}", err=True)


def reconcile_cmd(
    prune: Annotated[bool, typer.Option("--prune", help="Drop orphan snippets and index entries without artifacts")] = False,
    backend: Backend = None,
    ):
    """Rebuild snippets from artifacts and report drift between the stores."""
    sync = _synchronizer(_settings(overrides={"backend": backend}))
    try:
        report = sync.reconcile(prune=prune)
    except BlogpubError as e:
        _fail("Reconcile failed", e)
    for label, ids in (
        ("snippet rebuilt", report.snippets_rebuilt),
        ("missing artifact", report.missing_artifacts),
        ("unindexed artifact", report.unindexed_artifacts),
        ("undecodable artifact", report.undecodable_artifacts),
        ("orphan snippet", report.orphan_snippets),
        ("pruned", report.pruned),
    ):
        for doc_id in ids:
            typer.echo(f"  {label}: {doc_id}")
    typer.echo("Stores are consistent." if report.clean else "Reconcile complete.")
