# src/tagstash/core/paths.py
"""Reorder-tolerant node addressing.

resolve() computes the NodePath of a node; locate() finds the node a path
points at, possibly in a different copy of the same document.

Addressing rules:
- Mapping levels use the key's content, never its position: composers
  routinely re-serialize keys in a different order.
- Sequence levels record the element index plus, when it is unique among
  the siblings, a digest of the element's content. Composers keep element
  order, so the index is a safe fallback when content changed or repeats.

walk() is the traversal both rest on. It carries the path as an immutable
NodePath, extended per child, so sibling branches never share state.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass

from tagstash.contracts import (
    MappingKeySegment,
    Node,
    NodeKind,
    NodePath,
    NodeRole,
    SequenceItemSegment,
)
from tagstash.core.canonical import content_digest

__all__ = [
    "PathStep",
    "item_segments",
    "key_segment",
    "locate",
    "resolve",
    "walk",
    "walk_subtree",
]


@dataclass(frozen=True, slots=True)
class PathStep:
    """One node visited by walk().

    Key nodes share the path of the value they introduce.
    """

    path: NodePath
    node: Node
    role: NodeRole


def key_segment(key: Node) -> MappingKeySegment:
    """Segment addressing the value stored under `key`."""
    if key.kind in (NodeKind.SCALAR, NodeKind.ALIAS):
        return MappingKeySegment(key.kind, key.value or "")
    return MappingKeySegment(key.kind, content_digest(key))


def item_segments(sequence: Node) -> list[SequenceItemSegment]:
    """Segments for every element of a sequence, in order."""
    digests = [content_digest(child) for child in sequence.children]
    counts = Counter(digests)
    return [SequenceItemSegment(index, digest if counts[digest] == 1 else None) for index, digest in enumerate(digests)]


def walk(document: Node) -> Iterator[PathStep]:
    """Depth-first, document-order traversal yielding each node with its path.

    Aliases are yielded but not entered. Keys are yielded but not entered:
    nothing inside a collection key is addressable.

    Raises:
        ValueError: If `document` is not a DOCUMENT node
    """
    if document.kind is not NodeKind.DOCUMENT:
        raise ValueError(f"walk() needs a document node, got {document.kind}")
    for root in document.children:
        yield from _walk(root, NodePath(), NodeRole.ROOT)


def walk_subtree(node: Node, path: NodePath, role: NodeRole = NodeRole.ROOT) -> Iterator[PathStep]:
    """walk() below an arbitrary node, with paths continuing from `path`.

    Used to address the content of an anchored collection under the path
    of an alias that points at it.
    """
    yield from _walk(node, path, role)


def _walk(node: Node, path: NodePath, role: NodeRole) -> Iterator[PathStep]:
    yield PathStep(path, node, role)
    if node.kind is NodeKind.MAPPING:
        for key, value in node.pairs():
            child_path = path.child(key_segment(key))
            yield PathStep(child_path, key, NodeRole.KEY)
            yield from _walk(value, child_path, NodeRole.VALUE)
    elif node.kind is NodeKind.SEQUENCE:
        for child, segment in zip(node.children, item_segments(node), strict=True):
            yield from _walk(child, path.child(segment), NodeRole.ITEM)


def resolve(document: Node, node: Node) -> NodePath:
    """Path from the document root to `node`.

    Deterministic for a given tree. A mapping key resolves to the path of
    its value.

    Raises:
        ValueError: If `node` is not reachable from `document`
    """
    for step in walk(document):
        if step.node is node:
            return step.path
    raise ValueError("node is not part of this document")


def locate(document: Node, path: NodePath) -> Node | None:
    """Node `path` points at, or None (not found) if any segment fails to match."""
    if document.kind is not NodeKind.DOCUMENT or len(document.children) != 1:
        return None
    current = document.children[0]
    for segment in path.segments:
        parent = current.resolved()
        if isinstance(segment, MappingKeySegment):
            found = _find_value(parent, segment)
        else:
            found = _find_item(parent, segment)
        if found is None:
            return None
        current = found
    return current


def _find_value(mapping: Node, segment: MappingKeySegment) -> Node | None:
    if mapping.kind is not NodeKind.MAPPING:
        return None
    for key, value in mapping.pairs():
        if key.kind is segment.kind and key_segment(key) == segment:
            return value
    return None


def _find_item(sequence: Node, segment: SequenceItemSegment) -> Node | None:
    if sequence.kind is not NodeKind.SEQUENCE:
        return None
    if segment.digest is not None:
        matches = [child for child in sequence.children if content_digest(child) == segment.digest]
        if len(matches) == 1:
            return matches[0]
    if segment.index < len(sequence.children):
        return sequence.children[segment.index]
    return None
