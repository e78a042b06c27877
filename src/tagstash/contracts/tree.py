"""YAML document tree contracts.

A parsed document is a tree of Node objects. Nodes are compared by
identity: two scalars with the same text are still different positions
in the document. Content comparison lives in tagstash.core.canonical.

Mapping children alternate key, value, key, value. Sequence children are
the elements in order. A Document node has at most one child, the root.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from tagstash.contracts.enums import NodeKind


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """Where a node came from in its document's text.

    line and column are 1-based and only used for diagnostics. start and
    end are character offsets into ParsedDocument.text, used to splice
    edited scalars back into the original text.
    """

    line: int
    column: int
    start: int
    end: int


@dataclass(frozen=True)
class Comments:
    """Comment text attached to a node, preserved verbatim.

    raw holds the parser's own comment tokens and never takes part in
    comparisons.
    """

    head: tuple[str, ...] = ()
    line: tuple[str, ...] = ()
    foot: tuple[str, ...] = ()
    raw: Any = field(default=None, compare=False, repr=False)

    def __bool__(self) -> bool:
        return bool(self.head or self.line or self.foot)


@dataclass(eq=False)
class Node:
    """One position in a YAML document tree.

    value is the scalar text for SCALAR nodes and the anchor name for
    ALIAS nodes; collections and documents carry None.
    """

    kind: NodeKind
    tag: str | None = None
    value: str | None = None
    children: list[Node] = field(default_factory=list)
    position: SourcePosition | None = None
    comments: Comments = field(default_factory=Comments)
    style: str | None = None
    anchor: str | None = None
    target: Node | None = field(default=None, repr=False)
    flow_context: bool = False
    edited: bool = False
    replacement: str | None = field(default=None, repr=False)
    replacement_column: int | None = field(default=None, repr=False)

    def pairs(self) -> Iterator[tuple[Node, Node]]:
        """Iterate (key, value) pairs of a mapping node.

        Raises:
            ValueError: If the node is not a mapping or has an odd number of children
        """
        if self.kind is not NodeKind.MAPPING:
            raise ValueError(f"pairs() needs a mapping node, got {self.kind}")
        if len(self.children) % 2:
            raise ValueError(f"Mapping node has {len(self.children)} children; expected key/value pairs")
        return zip(self.children[0::2], self.children[1::2], strict=True)

    def resolved(self) -> Node:
        """Follow an alias to its anchored node (identity for everything else)."""
        if self.kind is NodeKind.ALIAS and self.target is not None:
            return self.target
        return self

    def replace_value(self, value: str, *, source: str | None = None, column: int | None = None) -> None:
        """Overwrite a scalar's text.

        Args:
            value: New scalar text
            source: Exact YAML source to emit for the new value. When omitted
                the value is emitted as a double-quoted scalar.
            column: Column `source` was written at. Multi-line sources are
                re-indented relative to it, or double-quoted without it.
        """
        if self.kind is not NodeKind.SCALAR:
            raise ValueError(f"Only scalar nodes can be rewritten, got {self.kind}")
        self.value = value
        self.replacement = source
        self.replacement_column = column
        self.edited = True


@dataclass
class ParsedDocument:
    """One document of a YAML stream together with the text it was parsed from."""

    index: int
    text: str
    tree: Node
    source: str | None = None

    @property
    def root(self) -> Node | None:
        return self.tree.children[0] if self.tree.children else None

    @property
    def label(self) -> str:
        """Human-readable location: 'file.yaml#2' or 'document 2'."""
        if self.source:
            return f"{self.source}#{self.index}"
        return f"document {self.index}"
