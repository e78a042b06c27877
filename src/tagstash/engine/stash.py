# src/tagstash/engine/stash.py
"""Stash engine: swap template tags for a placeholder and remember them.

Per structured document:
1. Find every scalar in value or element position whose text is a template tag
2. Overwrite those scalars with the placeholder
3. Resolve each one's path on the stashed tree - the tree the composer sees,
   so sequence digests match what comes back
4. Commit all entries to the store at once

Template tags used as mapping keys are left alone: keys are how paths are
addressed, and a shared placeholder would make them collide.
"""

from __future__ import annotations

from dataclasses import dataclass

from tagstash.contracts import (
    Node,
    NodeKind,
    NodePath,
    NodeRole,
    ParsedDocument,
    StashConflictError,
)
from tagstash.core.classifier import is_structured_object
from tagstash.core.config import DEFAULT_PLACEHOLDER, NamingSettings
from tagstash.core.identifiers import build_identifier
from tagstash.core.logging import get_logger
from tagstash.core.parser import parse_document, render_document, scalar_column, scalar_source
from tagstash.core.paths import PathStep, walk, walk_subtree
from tagstash.core.splitter import join_documents, split_documents
from tagstash.core.stash_store import StashedValue, StashStore
from tagstash.core.templates import TemplateTagPredicate

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StashedDocument:
    """Outcome for one document of a stashed stream.

    identifier is None for documents that are not structured objects.
    """

    index: int
    identifier: str | None
    stashed: int


@dataclass(frozen=True, slots=True)
class StashResult:
    """Stashed stream bytes plus per-document outcomes."""

    data: bytes
    documents: tuple[StashedDocument, ...]

    @property
    def stashed(self) -> int:
        return sum(document.stashed for document in self.documents)


class StashEngine:
    """Runs the stash phase into a shared StashStore."""

    def __init__(
        self,
        store: StashStore,
        is_template_tag: TemplateTagPredicate,
        *,
        placeholder: str = DEFAULT_PLACEHOLDER,
        naming: NamingSettings | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Store receiving the stashed values
            is_template_tag: Predicate over scalar text
            placeholder: Text written in place of each template tag
            naming: Renaming the composer will apply to identifiers
        """
        if is_template_tag(placeholder):
            raise ValueError(f"placeholder {placeholder!r} is itself a template tag")
        self._store = store
        self._is_template_tag = is_template_tag
        self._placeholder = placeholder
        self._naming = naming

    def stash_document(self, document: ParsedDocument, identifier: str) -> int:
        """Stash the template tags of one structured document.

        Mutates the document's tree; render_document() serializes it.

        Returns:
            Number of entries recorded (aliases of a stashed anchor included)

        Raises:
            StashConflictError: If two entries resolve to the same path. The
                tree is left as it was and nothing is recorded.
        """
        targets: list[Node] = []
        for step in walk(document.tree):
            node = step.node
            if node.kind is not NodeKind.SCALAR or not self._is_template_tag(node.value or ""):
                continue
            if step.role is NodeRole.KEY:
                logger.info(
                    "template_tag_in_key_skipped",
                    identifier=identifier,
                    path=str(step.path),
                    line=node.position.line if node.position else None,
                )
                continue
            targets.append(node)

        if not targets:
            return 0

        originals = {
            id(node): StashedValue(node.value or "", scalar_source(document, node), scalar_column(document, node))
            for node in targets
        }
        for node in targets:
            node.replace_value(self._placeholder, source=self._placeholder)

        entries: list[tuple[NodePath, StashedValue]] = []
        for step in walk(document.tree):
            if step.role is not NodeRole.KEY:
                _collect_entries(step, originals, entries, frozenset())

        try:
            self._store.record_all(identifier, entries)
        except StashConflictError:
            for node in targets:
                node.value = originals[id(node)].value
                node.replacement = None
                node.edited = False
            raise

        logger.debug("document_stashed", identifier=identifier, stashed=len(entries))
        return len(entries)

    def stash_stream(self, data: bytes, *, source: str | None = None) -> StashResult:
        """Stash every structured document of a multi-document stream.

        Documents that are not structured objects, or hold no template tag,
        are emitted byte-identical.

        Raises:
            ParseError: If a document is not well-formed YAML
            MissingFieldError: If a structured document lacks an identifier field
            StashConflictError: If an entry would be recorded twice
        """
        rendered: list[bytes] = []
        outcomes: list[StashedDocument] = []
        for index, chunk in enumerate(split_documents(data)):
            document = parse_document(chunk, index, source)
            if not is_structured_object(document.tree):
                rendered.append(chunk)
                outcomes.append(StashedDocument(index, None, 0))
                continue

            identifier = build_identifier(document.tree, self._naming, document_index=index, source=source)
            stashed = self.stash_document(document, identifier)
            rendered.append(render_document(document) if stashed else chunk)
            outcomes.append(StashedDocument(index, identifier, stashed))

        return StashResult(join_documents(rendered), tuple(outcomes))


def _collect_entries(
    step: PathStep,
    originals: dict[int, StashedValue],
    entries: list[tuple[NodePath, StashedValue]],
    expanding: frozenset[int],
) -> None:
    """Record the entry for `step`, following aliases of collections.

    The composer expands an alias into a copy of its anchored collection,
    so every stashed scalar inside that collection also needs an entry
    under the alias's path. `expanding` holds the collections already
    being expanded, which stops recursive anchors.
    """
    target = step.node.resolved()
    original = originals.get(id(target))
    if original is not None:
        entries.append((step.path, original))
        return
    if step.node.kind is not NodeKind.ALIAS or target.kind not in (NodeKind.MAPPING, NodeKind.SEQUENCE):
        return
    if id(target) in expanding:
        return
    for inner in walk_subtree(target, step.path, step.role):
        if inner.role is NodeRole.KEY or inner.node is target:
            continue
        # Nested collections are walked already
        if inner.node.kind is NodeKind.ALIAS or inner.node.kind is NodeKind.SCALAR:
            _collect_entries(inner, originals, entries, expanding | {id(target)})
