# src/tagstash/core/parser.py
"""Tree parser and renderer for single YAML documents.

parse_document() composes one document with ruamel.yaml's round-trip
composer (which keeps comment tokens) and materializes it as a tree of
tagstash Node objects. Repeated references to an anchored node become
ALIAS nodes pointing at it.

render_document() goes the other way without re-emitting YAML: edited
scalars are spliced into the document's original text at their source
span. Everything that was not edited (comments, anchors, key order,
indentation, quoting) is reproduced byte for byte.
"""

from __future__ import annotations

import json
import re
import warnings
from collections.abc import Iterator
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import ReusedAnchorWarning, YAMLError
from ruamel.yaml.nodes import MappingNode, ScalarNode, SequenceNode

from tagstash.contracts import (
    Comments,
    Node,
    NodeKind,
    ParsedDocument,
    ParseError,
    SourcePosition,
)

__all__ = [
    "parse_document",
    "render_document",
    "scalar_column",
    "scalar_source",
]

# Node properties (&anchor, !tag) that precede a scalar inside its span
_PROPERTIES = re.compile(r"(?:[&!]\S*\s+)*")


def parse_document(data: bytes, index: int = 0, source: str | None = None) -> ParsedDocument:
    """Parse one document's bytes into a fully materialized tree.

    Args:
        data: UTF-8 bytes of exactly one YAML document
        index: Position of the document in its stream (used in errors)
        source: Name of the stream (file path), if any

    Returns:
        ParsedDocument whose tree is a DOCUMENT node with zero children
        (empty document) or one child (the root)

    Raises:
        ParseError: If the bytes are not UTF-8 or not well-formed YAML
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(index, f"not valid UTF-8: {e}", source=source) from e

    yaml = YAML()
    try:
        with warnings.catch_warnings():
            # ruamel only warns about reused anchors; they make aliases ambiguous
            warnings.simplefilter("error", ReusedAnchorWarning)
            composed = yaml.compose(text)
    except ReusedAnchorWarning as e:
        raise ParseError(index, f"duplicate anchor: {str(e).strip()}", source=source) from e
    except YAMLError as e:
        raise ParseError(index, str(e).strip(), source=source) from e

    tree = Node(NodeKind.DOCUMENT)
    if composed is not None:
        tree.children.append(_TreeBuilder().build(composed, flow_context=False))
    return ParsedDocument(index=index, text=text, tree=tree, source=source)


class _TreeBuilder:
    """Converts ruamel nodes to tagstash nodes, turning shared nodes into aliases."""

    def __init__(self) -> None:
        self._built: dict[int, Node] = {}

    def build(self, raw: Any, *, flow_context: bool) -> Node:
        seen = self._built.get(id(raw))
        if seen is not None:
            return Node(
                NodeKind.ALIAS,
                tag=seen.tag,
                value=seen.anchor or "",
                target=seen,
                flow_context=flow_context,
            )

        common: dict[str, Any] = {
            "tag": _tag(raw),
            "position": _position(raw),
            "comments": _comments(getattr(raw, "comment", None)),
            "anchor": _anchor(raw),
            "flow_context": flow_context,
        }
        if isinstance(raw, ScalarNode):
            node = Node(NodeKind.SCALAR, value=raw.value, style=raw.style, **common)
            self._built[id(raw)] = node
            return node

        if isinstance(raw, MappingNode):
            node = Node(NodeKind.MAPPING, style=_flow_style(raw), **common)
        elif isinstance(raw, SequenceNode):
            node = Node(NodeKind.SEQUENCE, style=_flow_style(raw), **common)
        else:
            raise TypeError(f"Unexpected composed node type: {type(raw).__name__}")

        # Registered before the children so recursive anchors resolve to it
        self._built[id(raw)] = node
        inner_flow = flow_context or node.style == "flow"
        if node.kind is NodeKind.MAPPING:
            for key, value in raw.value:
                node.children.append(self.build(key, flow_context=inner_flow))
                node.children.append(self.build(value, flow_context=inner_flow))
        else:
            for item in raw.value:
                node.children.append(self.build(item, flow_context=inner_flow))
        return node


def _tag(raw: Any) -> str | None:
    tag = raw.tag
    return None if tag is None else str(tag)


def _anchor(raw: Any) -> str | None:
    anchor = getattr(raw, "anchor", None)
    if anchor is None:
        return None
    # Representer-built nodes carry an Anchor object instead of a name
    value = getattr(anchor, "value", anchor)
    return None if value is None else str(value)


def _flow_style(raw: Any) -> str | None:
    return "flow" if getattr(raw, "flow_style", None) else None


def _position(raw: Any) -> SourcePosition | None:
    start = raw.start_mark
    if start is None:
        return None
    end = raw.end_mark if raw.end_mark is not None else start
    return SourcePosition(line=start.line + 1, column=start.column + 1, start=start.index, end=end.index)


def _comment_lines(item: Any) -> tuple[str, ...]:
    if item is None:
        return ()
    if isinstance(item, list):
        return tuple(line for sub in item for line in _comment_lines(sub))
    value = getattr(item, "value", None)
    if not isinstance(value, str):
        return ()
    return tuple(line.strip() for line in value.splitlines() if line.strip())


def _comments(raw: Any) -> Comments:
    """Flatten ruamel comment slots: [0] end-of-line, [1] before, [2:] after."""
    if not raw:
        return Comments()
    return Comments(
        head=_comment_lines(raw[1]) if len(raw) > 1 else (),
        line=_comment_lines(raw[0]),
        foot=_comment_lines(list(raw[2:])),
        raw=raw,
    )


def _span(text: str, node: Node) -> tuple[int, int, str, str] | None:
    """Locate a scalar's body inside its span.

    Returns:
        (start, end, prefix, trailing) where prefix holds node properties
        and trailing the layout whitespace a block scalar's span swallows
    """
    if node.position is None:
        return None
    start, end = node.position.start, node.position.end
    span = text[start:end]
    match = _PROPERTIES.match(span)
    prefix = match.group(0) if match else ""
    body = span[len(prefix) :]
    trailing = body[len(body.rstrip()) :]
    return start, end, prefix, trailing


def _column(text: str, index: int) -> int:
    return index - (text.rfind("\n", 0, index) + 1)


def scalar_source(document: ParsedDocument, node: Node) -> str | None:
    """Exact source text of a scalar, without properties or trailing layout.

    Returns:
        e.g. '"{{ .Value }}"' for a double-quoted scalar, or None when the
        node has no source position
    """
    located = _span(document.text, node)
    if located is None:
        return None
    start, end, prefix, trailing = located
    return document.text[start + len(prefix) : end - len(trailing)]


def scalar_column(document: ParsedDocument, node: Node) -> int | None:
    """0-based column where scalar_source() starts, or None without a position."""
    located = _span(document.text, node)
    if located is None:
        return None
    start, _end, prefix, _trailing = located
    return _column(document.text, start + len(prefix))


def _edited_scalars(tree: Node) -> Iterator[Node]:
    seen: set[int] = set()
    stack = [tree]
    while stack:
        node = stack.pop()
        if node.kind is NodeKind.ALIAS or id(node) in seen:
            continue
        seen.add(id(node))
        if node.kind is NodeKind.SCALAR and node.edited:
            yield node
        stack.extend(node.children)


def _reusable(source: str, node: Node) -> bool:
    if source[0] in "\"'":
        return True
    if source[0] in "|>":
        # No block scalars in flow collections; kept trailing breaks are not part of the source
        return not node.flow_context and "+" not in source.split("\n", 1)[0]
    # Plain text can clash with flow indicators when moved into a flow collection
    return not node.flow_context or not any(c in source for c in ",[]{}")


def _reindent(source: str, shift: int) -> str | None:
    """Move every line after the first by `shift` columns.

    Returns:
        The shifted source, or None if a content line would end up unindented
    """
    if shift == 0:
        return source
    lines = source.split("\n")
    shifted = [lines[0]]
    for line in lines[1:]:
        indent = len(line) - len(line.lstrip(" "))
        if indent == len(line):
            shifted.append(" " * max(indent + shift, 0) if line else line)
        elif indent + shift < 1:
            return None
        else:
            shifted.append(" " * (indent + shift) + line[indent:])
    return "\n".join(shifted)


def _render_scalar(node: Node, column: int) -> str:
    source = node.replacement
    if source and _reusable(source, node):
        if "\n" not in source:
            return source
        # Multi-line sources are only valid at their own indentation, shifted with the node
        if node.replacement_column is not None:
            reindented = _reindent(source, column - node.replacement_column)
            if reindented is not None:
                return reindented
    return json.dumps(node.value, ensure_ascii=False)


def render_document(document: ParsedDocument) -> bytes:
    """Serialize a document, splicing edited scalars into the original text.

    Returns:
        The original bytes when nothing was edited
    """
    text = document.text
    edits = sorted(
        (node for node in _edited_scalars(document.tree) if node.position is not None),
        key=lambda node: node.position.start if node.position else 0,
        reverse=True,
    )
    for node in edits:
        located = _span(text, node)
        if located is None:
            continue
        start, end, prefix, trailing = located
        rendered = _render_scalar(node, _column(text, start + len(prefix)))
        text = text[:start] + prefix + rendered + trailing + text[end:]
    return text.encode("utf-8")
