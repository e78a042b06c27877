"""Tests for document identifiers."""

from collections.abc import Callable

import pytest

from tagstash.contracts import MissingFieldError, ParsedDocument
from tagstash.core.config import NamingSettings
from tagstash.core.identifiers import build_identifier, find_in_mapping, format_identifier

Parse = Callable[[str], ParsedDocument]


class TestFormatIdentifier:
    def test_without_namespace(self) -> None:
        assert format_identifier("v1", "ConfigMap", "foo") == "v1.ConfigMap.foo"

    def test_with_namespace(self) -> None:
        assert format_identifier("apps/v1", "Deployment", "web", "prod") == "apps/v1.Deployment.prod/web"


class TestBuildIdentifier:
    def test_cluster_object(self, parse: Parse) -> None:
        doc = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n")
        assert build_identifier(doc.tree) == "v1.ConfigMap.foo"

    def test_namespaced_object(self, parse: Parse) -> None:
        doc = parse("apiVersion: apps/v1\nkind: Deployment\nmetadata:\n  name: web\n  namespace: prod\n")
        assert build_identifier(doc.tree) == "apps/v1.Deployment.prod/web"

    def test_empty_namespace_is_absent(self, parse: Parse) -> None:
        doc = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n  namespace: ''\n")
        assert build_identifier(doc.tree) == "v1.ConfigMap.foo"

    def test_field_order_does_not_matter(self, parse: Parse) -> None:
        a = parse("apiVersion: v1\nkind: Service\nmetadata: {name: s, namespace: n}\n")
        b = parse("metadata: {namespace: n, name: s}\nkind: Service\napiVersion: v1\n")
        assert build_identifier(a.tree) == build_identifier(b.tree)

    def test_other_metadata_is_ignored(self, parse: Parse) -> None:
        a = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n")
        b = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n  labels: {app: x}\n")
        assert build_identifier(a.tree) == build_identifier(b.tree)

    @pytest.mark.parametrize(
        ("text", "field"),
        [
            ("apiVersion: v1\nkind: ConfigMap\nmetadata: {}\n", "metadata.name"),
            ("apiVersion: v1\nkind: [a]\nmetadata: {name: foo}\n", "kind"),
            ("kind: ConfigMap\nmetadata: {name: foo}\n", "apiVersion"),
            ("apiVersion: v1\nkind: ConfigMap\n", "metadata"),
        ],
    )
    def test_missing_field(self, parse: Parse, text: str, field: str) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            build_identifier(parse(text).tree, document_index=2, source="cm.yaml")

        assert exc_info.value.field == field
        assert f"missing required field '{field}'" in str(exc_info.value)
        assert "cm.yaml: document 2" in str(exc_info.value)

    def test_naming_applies_prefix_suffix_and_namespace(self, parse: Parse) -> None:
        doc = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n  namespace: old\n")
        naming = NamingSettings(name_prefix="dev-", name_suffix="-v2", namespace="team")
        assert build_identifier(doc.tree, naming) == "v1.ConfigMap.team/dev-foo-v2"

    def test_empty_naming_leaves_identifier_alone(self, parse: Parse) -> None:
        doc = parse("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n  namespace: old\n")
        assert build_identifier(doc.tree, NamingSettings()) == "v1.ConfigMap.old/foo"

    def test_naming_skips_namespace_for_cluster_scoped_kinds(self, parse: Parse) -> None:
        doc = parse("apiVersion: rbac.authorization.k8s.io/v1\nkind: ClusterRole\nmetadata:\n  name: reader\n")
        naming = NamingSettings(name_prefix="dev-", namespace="team")
        assert build_identifier(doc.tree, naming) == "rbac.authorization.k8s.io/v1.ClusterRole.dev-reader"


class TestFindInMapping:
    def test_returns_first_match(self, parse: Parse) -> None:
        root = parse("a: 1\nb: 2\n").root
        assert root is not None
        found = find_in_mapping(root, "b")
        assert found is not None and found.value == "2"

    def test_non_mapping_has_no_keys(self, parse: Parse) -> None:
        root = parse("- a\n").root
        assert root is not None
        assert find_in_mapping(root, "a") is None
