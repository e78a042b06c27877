"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes live in tagstash.core.config and are not re-exported here.

Import patterns:
    from tagstash.contracts import Node, NodeKind, NodePath
    from tagstash.core.config import TagStashSettings
"""

from tagstash.contracts.enums import NodeKind, NodeRole, UnresolvedReason
from tagstash.contracts.errors import (
    MissingFieldError,
    ParseError,
    ReadError,
    StashConflictError,
    StoreFormatError,
    StoreFrozenError,
    TagStashError,
    UnresolvedRestoration,
    WriteError,
)
from tagstash.contracts.paths import (
    MappingKeySegment,
    NodePath,
    PathSegment,
    SequenceItemSegment,
)
from tagstash.contracts.tree import Comments, Node, ParsedDocument, SourcePosition

__all__ = [
    "Comments",
    "MappingKeySegment",
    "MissingFieldError",
    "Node",
    "NodeKind",
    "NodePath",
    "NodeRole",
    "ParseError",
    "ParsedDocument",
    "PathSegment",
    "ReadError",
    "SequenceItemSegment",
    "SourcePosition",
    "StashConflictError",
    "StoreFormatError",
    "StoreFrozenError",
    "TagStashError",
    "UnresolvedReason",
    "UnresolvedRestoration",
    "WriteError",
]
