# src/tagstash/cli_formatters.py
"""Text renderings of document trees and restore outcomes for the CLI."""

from __future__ import annotations

from collections.abc import Iterator

from tagstash.contracts import Node, NodeKind, NodeRole, UnresolvedRestoration
from tagstash.core.paths import walk
from tagstash.core.templates import TemplateTagPredicate

_KIND_LABELS = {
    NodeKind.DOCUMENT: "DocumentNode",
    NodeKind.MAPPING: "MappingNode",
    NodeKind.SEQUENCE: "SequenceNode",
    NodeKind.SCALAR: "ScalarNode",
    NodeKind.ALIAS: "AliasNode",
}


def _comment_markers(node: Node) -> str:
    markers = ""
    if node.comments.head:
        markers += " #h"
    if node.comments.line:
        markers += " #l"
    if node.comments.foot:
        markers += " #f"
    return markers


def describe_node(node: Node, depth: int) -> str:
    """One line per node: kind, tag, value, source position and comment markers.

    Example:
        '    [ScalarNode] tag:yaml.org,2002:str: foo (@4:9) #l'
    """
    position = f" (@{node.position.line}:{node.position.column})" if node.position else ""
    value = node.value if node.value is not None else ""
    return f"{'  ' * depth}[{_KIND_LABELS[node.kind]}] {node.tag or ''}: {value}{position}{_comment_markers(node)}"


def describe_tree(node: Node, depth: int = 0) -> Iterator[str]:
    """describe_node() for a whole subtree, indented by depth.

    Aliases are printed but not followed.
    """
    yield describe_node(node, depth)
    if node.kind is NodeKind.ALIAS:
        return
    for child in node.children:
        yield from describe_tree(child, depth + 1)


def template_tag_paths(tree: Node, is_template_tag: TemplateTagPredicate) -> Iterator[str]:
    """Paths of the scalars the stash engine would replace."""
    for step in walk(tree):
        if step.role is NodeRole.KEY or step.node.kind is not NodeKind.SCALAR:
            continue
        if is_template_tag(step.node.value or ""):
            yield f"{step.path} = {step.node.value}"


def format_unresolved(entries: tuple[UnresolvedRestoration, ...]) -> list[str]:
    return [f"⚠ unresolved: {entry.describe()}" for entry in entries]
