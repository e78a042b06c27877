"""Node path contracts.

A NodePath addresses a node inside one document, starting below the
Document node. Mapping levels are addressed by key content so that the
path survives key reordering. Sequence levels carry the element position
and, when it is unique among its siblings, a digest of the element's
content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tagstash.contracts.enums import NodeKind


@dataclass(frozen=True, slots=True)
class MappingKeySegment:
    """Descend into a mapping through the key with this content.

    value is the key text for scalar keys, the anchor name for alias keys
    and a content digest for collection keys.
    """

    kind: NodeKind
    value: str

    @property
    def label(self) -> str:
        if self.kind is NodeKind.SCALAR:
            return self.value
        if self.kind is NodeKind.ALIAS:
            return f"*{self.value}"
        return f"<{self.kind}:{self.value[:12]}>"


@dataclass(frozen=True, slots=True)
class SequenceItemSegment:
    """Descend into a sequence element.

    digest is None when the element's content is shared with a sibling;
    the index is then the only address.
    """

    index: int
    digest: str | None = None

    @property
    def label(self) -> str:
        return f"[{self.index}]"


PathSegment = MappingKeySegment | SequenceItemSegment


@dataclass(frozen=True, slots=True)
class NodePath:
    """Immutable sequence of segments from a document root to a node."""

    segments: tuple[PathSegment, ...] = ()

    def child(self, segment: PathSegment) -> NodePath:
        return NodePath((*self.segments, segment))

    @property
    def labels(self) -> tuple[str, ...]:
        """Segment labels, e.g. ('spec', 'containers', '[0]', 'image')."""
        return tuple(segment.label for segment in self.segments)

    def __str__(self) -> str:
        text = ""
        for segment in self.segments:
            if isinstance(segment, SequenceItemSegment):
                text += segment.label
            elif text:
                text += f".{segment.label}"
            else:
                text = segment.label
        return text or "<root>"

    def to_list(self) -> list[dict[str, Any]]:
        """JSON-safe representation, inverse of from_list()."""
        encoded: list[dict[str, Any]] = []
        for segment in self.segments:
            if isinstance(segment, MappingKeySegment):
                encoded.append({"key": segment.value, "kind": segment.kind.value})
            else:
                encoded.append({"index": segment.index, "digest": segment.digest})
        return encoded

    @classmethod
    def from_list(cls, encoded: list[dict[str, Any]]) -> NodePath:
        """Rebuild a path from to_list() output.

        Raises:
            ValueError: If an entry is not a recognised segment
        """
        segments: list[PathSegment] = []
        for i, entry in enumerate(encoded):
            if not isinstance(entry, dict):
                raise ValueError(f"path[{i}] must be an object, got {type(entry).__name__}")
            if "key" in entry:
                segments.append(MappingKeySegment(NodeKind(entry["kind"]), str(entry["key"])))
            elif "index" in entry:
                index = entry["index"]
                if not isinstance(index, int) or index < 0:
                    raise ValueError(f"path[{i}].index must be a non-negative integer, got {index!r}")
                segments.append(SequenceItemSegment(index, entry.get("digest")))
            else:
                raise ValueError(f"path[{i}] has neither 'key' nor 'index': {entry!r}")
        return cls(tuple(segments))
