# src/tagstash/core/stash_store.py
"""
Stash store: (document identifier, node path) -> original scalar value.

Entries are write-once. The store is filled during the stash phase and
frozen before the restore phase reads it. It lives for one
stash -> compose -> restore cycle; save()/load() only carry it between
the two CLI invocations of that cycle.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from tagstash.contracts import (
    NodePath,
    StashConflictError,
    StoreFormatError,
    StoreFrozenError,
    WriteError,
)
from tagstash.core.canonical import CANONICAL_VERSION

__all__ = ["StashStore", "StashedValue"]

STORE_FORMAT_VERSION = 1


@dataclass(frozen=True, slots=True)
class StashedValue:
    """A stashed scalar.

    source is the scalar exactly as written in the input (quotes included),
    reused on restore so the output matches the input byte for byte. column
    is where source started on its line; multi-line sources are re-indented
    relative to it.
    """

    value: str
    source: str | None = None
    column: int | None = None


class StashStore:
    """Write-once mapping grouped by document identifier."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[NodePath, StashedValue]] = {}
        self._frozen = False

    def record(self, identifier: str, path: NodePath, value: StashedValue) -> None:
        """Record a single entry.

        Raises:
            StashConflictError: If the entry already exists
            StoreFrozenError: If the store was frozen
        """
        self.record_all(identifier, [(path, value)])

    def record_all(self, identifier: str, entries: Iterable[tuple[NodePath, StashedValue]]) -> None:
        """Record all entries of one document, or none of them.

        Raises:
            StashConflictError: If any path repeats or is already recorded
            StoreFrozenError: If the store was frozen
        """
        if self._frozen:
            raise StoreFrozenError("stash store is read-only once restoration started")
        existing = self._entries.get(identifier, {})
        pending: dict[NodePath, StashedValue] = {}
        for path, value in entries:
            if path in existing or path in pending:
                raise StashConflictError(identifier, path)
            pending[path] = value
        if pending:
            self._entries.setdefault(identifier, {}).update(pending)

    def freeze(self) -> None:
        self._frozen = True

    def entries_for(self, identifier: str) -> Mapping[NodePath, StashedValue]:
        """Read-only view of one document's entries (empty if unknown)."""
        return MappingProxyType(self._entries.get(identifier, {}))

    def identifiers(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return sum(len(group) for group in self._entries.values())

    def __iter__(self) -> Iterator[tuple[str, NodePath, StashedValue]]:
        for identifier, group in self._entries.items():
            for path, value in group.items():
                yield identifier, path, value

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": STORE_FORMAT_VERSION,
            "digest": CANONICAL_VERSION,
            "entries": {
                identifier: [
                    {"path": path.to_list(), "value": value.value, "source": value.source, "column": value.column}
                    for path, value in group.items()
                ]
                for identifier, group in self._entries.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> StashStore:
        """Rebuild a store from to_dict() output.

        Raises:
            StoreFormatError: If the data does not describe a store
        """
        if not isinstance(data, dict):
            raise StoreFormatError(f"stash store must be an object, got {type(data).__name__}")
        if data.get("version") != STORE_FORMAT_VERSION:
            raise StoreFormatError(f"unsupported stash store version {data.get('version')!r}")
        if data.get("digest") != CANONICAL_VERSION:
            raise StoreFormatError(f"stash store digests use {data.get('digest')!r}, expected {CANONICAL_VERSION!r}")
        entries = data.get("entries")
        if not isinstance(entries, dict):
            raise StoreFormatError("stash store 'entries' must be an object")

        store = cls()
        for identifier, group in entries.items():
            if not isinstance(group, list):
                raise StoreFormatError(f"entries for {identifier!r} must be a list")
            try:
                store.record_all(
                    identifier,
                    [
                        (NodePath.from_list(entry["path"]), StashedValue(str(entry["value"]), entry.get("source"), entry.get("column")))
                        for entry in group
                    ],
                )
            except (KeyError, TypeError, ValueError) as e:
                raise StoreFormatError(f"malformed entry for {identifier!r}: {e}") from e
        return store

    def save(self, path: Path) -> None:
        """Write the store as JSON.

        Raises:
            WriteError: If the file cannot be written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as e:
            raise WriteError(str(path), e.strerror or str(e)) from e

    @classmethod
    def load(cls, path: Path) -> StashStore:
        """Load a store written by save().

        Raises:
            FileNotFoundError: If the file doesn't exist
            StoreFormatError: If the file is not a valid store
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreFormatError(f"{path}: not valid JSON: {e}") from e
        return cls.from_dict(data)
