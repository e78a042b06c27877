"""Error contracts.

Every fatal condition raises a subclass of TagStashError. Unresolved
restorations are not exceptions: the restore phase collects them as
UnresolvedRestoration records and keeps going.
"""

from __future__ import annotations

from dataclasses import dataclass

from tagstash.contracts.enums import UnresolvedReason
from tagstash.contracts.paths import NodePath


def _where(source: str | None, document_index: int | None) -> str:
    if source is not None and document_index is not None:
        return f"{source}: document {document_index}"
    if document_index is not None:
        return f"document {document_index}"
    return source or "<stream>"


class TagStashError(Exception):
    """Base class for all tagstash failures."""


class ReadError(TagStashError):
    """Source bytes could not be read. Aborts the run."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: cannot read: {reason}")


class WriteError(TagStashError):
    """Output bytes could not be written. Aborts the run."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"{target}: cannot write: {reason}")


class ParseError(TagStashError):
    """A document is not well-formed YAML.

    The document has no identifier yet, so it is named by its position in
    the stream.
    """

    def __init__(self, document_index: int, detail: str, *, source: str | None = None) -> None:
        self.document_index = document_index
        self.detail = detail
        self.source = source
        super().__init__(f"{_where(source, document_index)}: {detail}")


class MissingFieldError(TagStashError):
    """A structured object lacks a field its identifier needs."""

    def __init__(self, field: str, *, document_index: int | None = None, source: str | None = None) -> None:
        self.field = field
        self.document_index = document_index
        self.source = source
        super().__init__(f"{_where(source, document_index)}: missing required field '{field}'")


class StashConflictError(TagStashError):
    """Two stashed values claim the same (identifier, path) entry.

    Store entries are write-once. Typical cause: duplicate mapping keys, or
    two input documents sharing an identifier.
    """

    def __init__(self, identifier: str, path: NodePath) -> None:
        self.identifier = identifier
        self.path = path
        super().__init__(f"{identifier}: a value is already stashed at '{path}'")


class StoreFrozenError(TagStashError):
    """Raised when a store is written after the restore phase began."""


class StoreFormatError(TagStashError):
    """A persisted stash store could not be decoded."""


@dataclass(frozen=True, slots=True)
class UnresolvedRestoration:
    """A stashed value that could not be put back.

    The affected node, when it still exists, keeps the placeholder.
    """

    identifier: str
    path: NodePath
    reason: UnresolvedReason

    def describe(self) -> str:
        return f"{self.identifier}: {self.path} ({self.reason})"
