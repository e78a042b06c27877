# src/tagstash/core/classifier.py
"""Decide which documents are structured objects worth processing.

A structured object is a single top-level mapping carrying the keys every
Kubernetes resource has. Anything else (lists, empty documents, kustomize
List wrappers without metadata) passes through the pipeline untouched.
"""

from __future__ import annotations

from tagstash.contracts import Node, NodeKind

REQUIRED_KEYS = frozenset({"apiVersion", "kind", "metadata"})


def is_structured_object(node: Node) -> bool:
    """Return True iff a DOCUMENT node holds one mapping with all REQUIRED_KEYS.

    Key order is irrelevant; the scan stops as soon as all keys were seen.
    """
    if node.kind is not NodeKind.DOCUMENT or len(node.children) != 1:
        return False

    root = node.children[0]
    if root.kind is not NodeKind.MAPPING:
        return False

    missing = set(REQUIRED_KEYS)
    for key, _value in root.pairs():
        if key.kind is NodeKind.SCALAR:
            missing.discard(key.value or "")
        if not missing:
            return True
    return False
