# src/tagstash/core/canonical.py
"""
Canonical content digests for YAML subtrees.

Two-phase approach:
1. Normalize: turn a Node subtree into JSON-safe lists (our code)
2. Serialize: produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

The normal form is what "same content" means for path addressing:
- Mapping pairs are sorted, so key order never changes a digest
- Aliases are expanded to their anchored content, so a composer that
  inlines anchors produces the same digest
- Tags and scalar styles are ignored; a composer may requote a scalar
"""

from __future__ import annotations

import hashlib
from typing import Any

import rfc8785

from tagstash.contracts import Node, NodeKind

# Stored alongside digests in persisted stores
CANONICAL_VERSION = "sha256-rfc8785-v1"


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON for hashing.

    Args:
        obj: JSON-safe data structure

    Returns:
        Canonical JSON string (no whitespace, sorted keys)
    """
    result: bytes = rfc8785.dumps(obj)
    return result.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of canonical JSON."""
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def node_content(node: Node) -> Any:
    """Normal form of a subtree, suitable for canonical_json().

    Args:
        node: Any node; aliases are followed

    Returns:
        Nested lists: ["scalar", text], ["mapping", [[k, v], ...]],
        ["sequence", [...]], ["document", [...]]
    """
    return _normalize(node, frozenset())


def _normalize(node: Node, active: frozenset[int]) -> Any:
    if node.kind is NodeKind.ALIAS:
        target = node.target
        # Recursive anchors (&a [*a]) collapse to the anchor name
        if target is None or id(target) in active:
            return ["alias", node.value]
        return _normalize(target, active)
    if node.kind is NodeKind.SCALAR:
        return ["scalar", node.value]

    inner = active | {id(node)}
    if node.kind is NodeKind.MAPPING:
        pairs = [[_normalize(key, inner), _normalize(value, inner)] for key, value in node.pairs()]
        pairs.sort(key=canonical_json)
        return ["mapping", pairs]
    return [node.kind.value, [_normalize(child, inner) for child in node.children]]


def content_digest(node: Node) -> str:
    """Order-insensitive digest of a subtree's content."""
    return stable_hash(node_content(node))
