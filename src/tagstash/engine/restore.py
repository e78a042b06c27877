# src/tagstash/engine/restore.py
"""Restore engine: put stashed template tags back after composition.

Restoration is best effort: the composer may drop keys or whole
documents. Anything that cannot be put back becomes an
UnresolvedRestoration and the node, if it still exists, keeps the
placeholder. Nothing here aborts on a missing node.

A RestoreEngine can restore several streams (e.g. every stashed source
file); finish() then reports the documents no stream contained.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from tagstash.contracts import (
    NodeKind,
    NodePath,
    ParsedDocument,
    UnresolvedReason,
    UnresolvedRestoration,
)
from tagstash.core.classifier import is_structured_object
from tagstash.core.config import NamingSettings
from tagstash.core.identifiers import build_identifier
from tagstash.core.logging import get_logger
from tagstash.core.parser import parse_document, render_document
from tagstash.core.paths import locate
from tagstash.core.splitter import join_documents, split_documents
from tagstash.core.stash_store import StashStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RestoreResult:
    """Restored stream bytes, how many entries were written back, and what was not."""

    data: bytes
    restored: int
    unresolved: tuple[UnresolvedRestoration, ...]


class RestoreEngine:
    """Runs the restore phase against a frozen StashStore."""

    def __init__(self, store: StashStore, *, naming: NamingSettings | None = None) -> None:
        """Initialize the engine.

        Args:
            store: Store filled by the stash phase; frozen here
            naming: Renaming to apply to identifiers. Only needed when
                restoring the stashed sources themselves, which have not
                been through the composer.
        """
        store.freeze()
        self._store = store
        self._naming = naming
        self._seen: set[str] = set()
        self._unresolved: list[UnresolvedRestoration] = []

    def _unresolved_entry(self, identifier: str, path: NodePath, reason: UnresolvedReason) -> UnresolvedRestoration:
        entry = UnresolvedRestoration(identifier, path, reason)
        self._unresolved.append(entry)
        logger.warning("restoration_unresolved", identifier=identifier, path=str(path), reason=str(reason))
        return entry

    def restore_document(self, document: ParsedDocument, identifier: str) -> tuple[int, list[UnresolvedRestoration]]:
        """Write back every entry stored for `identifier` into `document`.

        Returns:
            (entries restored, entries that could not be restored)
        """
        self._seen.add(identifier)
        restored = 0
        unresolved: list[UnresolvedRestoration] = []
        # Locate everything before writing: a write changes its element's digest
        located = [(path, stashed, locate(document.tree, path)) for path, stashed in self._store.entries_for(identifier).items()]
        for path, stashed, node in located:
            if node is None:
                unresolved.append(self._unresolved_entry(identifier, path, UnresolvedReason.NODE_MISSING))
            elif node.kind is NodeKind.ALIAS:
                # Restored through the anchored node's own entry
                restored += 1
            elif node.kind is not NodeKind.SCALAR:
                unresolved.append(self._unresolved_entry(identifier, path, UnresolvedReason.NOT_A_SCALAR))
            else:
                node.replace_value(stashed.value, source=stashed.source, column=stashed.column)
                restored += 1
        return restored, unresolved

    def restore_stream(self, data: bytes, *, source: str | None = None) -> RestoreResult:
        """Restore one composed (or stashed) multi-document stream.

        The result lists the node-level failures of this stream only;
        documents missing from every stream are reported by finish().

        Raises:
            ParseError: If a document is not well-formed YAML
            MissingFieldError: If a structured document lacks an identifier field
        """
        rendered: list[bytes] = []
        restored = 0
        unresolved: list[UnresolvedRestoration] = []
        for index, chunk in enumerate(split_documents(data)):
            document = parse_document(chunk, index, source)
            if not is_structured_object(document.tree):
                rendered.append(chunk)
                continue
            identifier = build_identifier(document.tree, self._naming, document_index=index, source=source)
            if identifier not in self._store:
                rendered.append(chunk)
                continue
            count, failures = self.restore_document(document, identifier)
            restored += count
            unresolved.extend(failures)
            rendered.append(render_document(document))
        return RestoreResult(join_documents(rendered), restored, tuple(unresolved))

    def finish(self) -> tuple[UnresolvedRestoration, ...]:
        """All unresolved restorations, including documents never seen."""
        for identifier in self._store.identifiers():
            if identifier in self._seen:
                continue
            self._seen.add(identifier)
            for path in self._store.entries_for(identifier):
                self._unresolved_entry(identifier, path, UnresolvedReason.DOCUMENT_MISSING)
        return tuple(self._unresolved)


def restore_stream(store: StashStore, data: bytes, *, source: str | None = None) -> RestoreResult:
    """Restore a single composed stream; unresolved covers missing documents too."""
    engine = RestoreEngine(store)
    result = engine.restore_stream(data, source=source)
    return replace(result, unresolved=engine.finish())
