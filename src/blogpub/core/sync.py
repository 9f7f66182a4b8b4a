"""Store synchronizer: save, load, delete, list and reconcile documents across the three stores.

Save writes artifact, then snippet, then index entry. The writes are not
atomic as a group: a failure between them leaves the stores disagreeing
until the next save of that id or a reconcile() pass. Two concurrent saves
of one id race on all three stores and the last writer wins.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from blogpub.config import Settings
from blogpub.core.editing import blank_document
from blogpub.core.models import Document, IndexEntry, Upload, has_src
from blogpub.core.render import make_snippet, render
from blogpub.core.thumbnail import resolve_thumbnail
from blogpub.core.trailer import decode, encode
from blogpub.core.utils.slug import unique_slug
from blogpub.crud.repo import SAFE_ID_RE, Stores
from blogpub.crud.uploads import UploadSink
from blogpub.errors import NotFoundError, StorageError, ValidationError


logger = logging.getLogger(__name__)


def is_safe_id(doc_id: Optional[str]) -> bool:
    return bool(doc_id) and SAFE_ID_RE.fullmatch(doc_id) is not None


def coerce_document(data: Union[Document, Mapping[str, Any]]) -> Document:
    """Validate caller input into a Document, reporting problems as ValidationError."""
    if isinstance(data, Document):
        return data
    try:
        return Document.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid document: {e}") from e


@dataclass
class ReconcileReport:
    snippets_rebuilt: list[str] = field(default_factory=list)
    missing_artifacts: list[str] = field(default_factory=list)
    unindexed_artifacts: list[str] = field(default_factory=list)
    undecodable_artifacts: list[str] = field(default_factory=list)
    orphan_snippets: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.snippets_rebuilt or self.missing_artifacts or self.unindexed_artifacts
                    or self.undecodable_artifacts or self.orphan_snippets)


class StoreSynchronizer:
    """The four editor-facing operations plus reconcile, over one Stores bundle."""

    def __init__(self, stores: Stores, uploads: Optional[UploadSink] = None, settings: Optional[Settings] = None):
        self.stores = stores
        self.uploads = uploads
        self.settings = settings or Settings()

    # --- read side ---

    def list_documents(self, recent_first: bool = False) -> list[IndexEntry]:
        entries = self.stores.index.list()
        return entries[::-1] if recent_first else entries

    def load_document(self, doc_id: str, strict: bool = False) -> Document:
        """Document for the editor. Unknown ids give a blank document.

        Blocks come from the artifact trailer; a missing or undecodable
        trailer gives an empty block list. With strict=True, an id with
        neither index entry nor artifact raises NotFoundError.
        """
        if not is_safe_id(doc_id):
            if strict:
                raise NotFoundError(f"No document {doc_id!r}")
            logger.warning("Ignoring unsafe document id %r", doc_id)
            return blank_document()

        entry = self.stores.index.get(doc_id)
        artifact = self.stores.artifacts.get(doc_id)
        if strict and entry is None and artifact is None:
            raise NotFoundError(f"No document {doc_id!r}")

        blocks = (decode(artifact) if artifact is not None else None) or []
        if entry is None:
            doc = blank_document()
            doc.blocks = blocks
            return doc
        return Document(id=entry.id, title=entry.title, authors=entry.authors,
                        date=entry.date, thumbnail=entry.thumbnail, blocks=blocks)

    # --- write side ---

    def _resolve_id(self, doc: Document, rename: bool) -> str:
        if doc.id is None:
            return unique_slug(doc.title, self.stores.artifacts.exists)
        if not is_safe_id(doc.id):
            raise ValidationError(f"Invalid document id {doc.id!r}; use letters, digits, '-' or '_'")
        if not rename:
            return doc.id
        return unique_slug(doc.title, lambda s: s != doc.id and self.stores.artifacts.exists(s))

    def _matched_uploads(self, doc: Document, uploads: Iterable[Upload]) -> list[tuple[Upload, Any]]:
        """Pair each upload with its block; uploads without a src-bearing block are dropped.

        Only the last upload per block id is kept.
        """
        latest: dict[str, Upload] = {}
        for upload in uploads:
            if upload.block_id in latest:
                logger.warning("Dropping upload %r: superseded for block %r", latest[upload.block_id].filename, upload.block_id)
            latest[upload.block_id] = upload

        matched = []
        for upload in latest.values():
            block = doc.find_block(upload.block_id)
            if block is None or not has_src(block):
                logger.warning("Dropping upload %r: no image block with id %r", upload.filename, upload.block_id)
                continue
            matched.append((upload, block))
        if matched and self.uploads is None:
            raise StorageError("Uploads were supplied but no upload sink is configured")
        return matched

    def save_document(
        self,
        document: Union[Document, Mapping[str, Any]],
        uploads: Iterable[Upload] = (),
        rename: bool = False,
        ) -> Document:
        """Render, then write artifact, snippet and index entry for the document.

        Returns the saved document with its id assigned, uploaded srcs
        rewritten and the thumbnail resolved. Raises ValidationError before
        any write when title or authors are empty.
        """
        doc = coerce_document(document).model_copy(deep=True)
        if not doc.title.strip():
            raise ValidationError("Title is required")
        if not doc.authors:
            raise ValidationError("At least one author is required")

        old_id = doc.id
        doc_id = self._resolve_id(doc, rename)
        for upload, block in self._matched_uploads(doc, uploads):
            block.content.src = self.uploads.store(upload)

        result = render(doc.blocks)
        self.stores.artifacts.put(doc_id, encode(result.markup, doc.blocks))
        self.stores.snippets.put(doc_id, make_snippet(result.snippet_source, self.settings.snippet_length))

        doc.id = doc_id
        doc.thumbnail = resolve_thumbnail(
            doc.thumbnail, doc.blocks,
            placeholder=self.settings.placeholder_thumbnail,
            transient_prefixes=self.settings.transient,
        )
        self.stores.index.put(doc.index_entry(doc.thumbnail))

        if old_id is not None and old_id != doc_id:
            self._remove(old_id)
            logger.info("Renamed %s -> %s", old_id, doc_id)
        logger.info("Saved %s (%d blocks)", doc_id, len(doc.blocks))
        return doc

    def _remove(self, doc_id: str) -> bool:
        removed = [
            self.stores.index.delete(doc_id),
            self.stores.snippets.delete(doc_id),
            self.stores.artifacts.delete(doc_id),
        ]
        return any(removed)

    def delete_document(self, doc_id: str) -> bool:
        """Remove index entry, snippet and artifact; each is skipped if absent. False if nothing existed."""
        if not is_safe_id(doc_id):
            logger.warning("Ignoring delete of unsafe document id %r", doc_id)
            return False
        removed = self._remove(doc_id)
        if removed:
            logger.info("Deleted %s", doc_id)
        return removed

    # --- consistency ---

    def reconcile(self, prune: bool = False) -> ReconcileReport:
        """Re-derive snippets from artifacts and report cross-store drift.

        The artifact is the only store holding the full structure, so it is
        treated as the truth for snippets. Index entries cannot be rebuilt
        from an artifact (title and authors live only in the index), so
        unindexed artifacts are reported, never deleted.
        """
        report = ReconcileReport()
        entries = self.stores.index.list()
        indexed = {e.id for e in entries}
        snippets = self.stores.snippets.all()

        for entry in entries:
            artifact = self.stores.artifacts.get(entry.id)
            if artifact is None:
                report.missing_artifacts.append(entry.id)
                if prune:
                    self.stores.index.delete(entry.id)
                    self.stores.snippets.delete(entry.id)
                    report.pruned.append(entry.id)
                continue
            blocks = decode(artifact)
            if blocks is None:
                report.undecodable_artifacts.append(entry.id)
                continue
            snippet = make_snippet(render(blocks).snippet_source, self.settings.snippet_length)
            if snippets.get(entry.id) != snippet:
                self.stores.snippets.put(entry.id, snippet)
                report.snippets_rebuilt.append(entry.id)

        report.unindexed_artifacts = [i for i in self.stores.artifacts.ids() if i not in indexed]
        report.orphan_snippets = [i for i in snippets if i not in indexed]
        if prune:
            for doc_id in report.orphan_snippets:
                self.stores.snippets.delete(doc_id)
                report.pruned.append(doc_id)

        logger.info("Reconciled %d index entries (clean=%s)", len(entries), report.clean)
        return report
