"""Tests for structured object classification."""

from collections.abc import Callable

import pytest

from tagstash.contracts import Node, NodeKind, ParsedDocument
from tagstash.core.classifier import is_structured_object

Parse = Callable[[str], ParsedDocument]


class TestIsStructuredObject:
    def test_resource_is_structured(self, parse: Parse) -> None:
        doc = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n")
        assert is_structured_object(doc.tree)

    def test_key_order_does_not_matter(self, parse: Parse) -> None:
        doc = parse("metadata: {name: foo}\nkind: Secret\napiVersion: v1\n")
        assert is_structured_object(doc.tree)

    @pytest.mark.parametrize(
        "text",
        [
            "kind: ConfigMap\nmetadata: {name: foo}\n",
            "apiVersion: v1\nmetadata: {name: foo}\n",
            "apiVersion: v1\nkind: ConfigMap\n",
        ],
    )
    def test_missing_required_key(self, parse: Parse, text: str) -> None:
        assert not is_structured_object(parse(text).tree)

    def test_sequence_root_is_not_structured(self, parse: Parse) -> None:
        assert not is_structured_object(parse("- apiVersion: v1\n").tree)

    def test_scalar_root_is_not_structured(self, parse: Parse) -> None:
        assert not is_structured_object(parse("just text\n").tree)

    def test_empty_document_is_not_structured(self, parse: Parse) -> None:
        assert not is_structured_object(parse("# empty\n").tree)

    def test_non_document_node_is_not_structured(self) -> None:
        assert not is_structured_object(Node(NodeKind.MAPPING))

    def test_metadata_without_name_still_classifies(self, parse: Parse) -> None:
        """Identifier building, not classification, reports the missing name."""
        doc = parse("apiVersion: v1\nkind: ConfigMap\nmetadata: {}\n")
        assert is_structured_object(doc.tree)
