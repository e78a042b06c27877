"""Kinds and reasons shared across subsystem boundaries."""

from enum import StrEnum


class NodeKind(StrEnum):
    """Kind of a node in a YAML document tree.

    Closed set: every node is exactly one of these.
    """

    DOCUMENT = "document"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"
    ALIAS = "alias"


class NodeRole(StrEnum):
    """Position a node occupies relative to its parent during a walk."""

    ROOT = "root"
    KEY = "key"
    VALUE = "value"
    ITEM = "item"


class UnresolvedReason(StrEnum):
    """Why a stashed value could not be written back."""

    NODE_MISSING = "node-missing"
    NOT_A_SCALAR = "not-a-scalar"
    DOCUMENT_MISSING = "document-missing"
