# src/tagstash/core/identifiers.py
"""Document identifiers.

An identifier names one structured object of a stream:

    {apiVersion}.{kind}.{name}                 (no namespace)
    {apiVersion}.{kind}.{namespace}/{name}

It groups stash store entries and must come out the same before and after
composition, so it only reads fields the composer keeps and never depends
on field order. When the composer renames objects (kustomize namePrefix,
nameSuffix, namespace), the same renaming is applied to pre-composition
identifiers through NamingSettings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagstash.contracts import MissingFieldError, Node, NodeKind

if TYPE_CHECKING:
    from tagstash.core.config import NamingSettings

# kustomize does not set a namespace on these
CLUSTER_SCOPED_KINDS = frozenset(
    {
        "APIService",
        "ClusterRole",
        "ClusterRoleBinding",
        "CustomResourceDefinition",
        "MutatingWebhookConfiguration",
        "Namespace",
        "PersistentVolume",
        "PriorityClass",
        "StorageClass",
        "ValidatingWebhookConfiguration",
    }
)


def find_in_mapping(mapping: Node, key: str) -> Node | None:
    """Value node of the first scalar key equal to `key`, or None.

    Non-mapping nodes have no keys and always give None.
    """
    mapping = mapping.resolved()
    if mapping.kind is not NodeKind.MAPPING:
        return None
    for key_node, value_node in mapping.pairs():
        if key_node.kind is NodeKind.SCALAR and key_node.value == key:
            return value_node
    return None


def _scalar_field(mapping: Node, key: str) -> str | None:
    node = find_in_mapping(mapping, key)
    if node is None:
        return None
    node = node.resolved()
    if node.kind is not NodeKind.SCALAR:
        return None
    return node.value


def format_identifier(api_version: str, kind: str, name: str, namespace: str | None = None) -> str:
    """Join identifier fields.

    Examples:
        >>> format_identifier("v1", "ConfigMap", "foo")
        'v1.ConfigMap.foo'
        >>> format_identifier("apps/v1", "Deployment", "web", "prod")
        'apps/v1.Deployment.prod/web'
    """
    if namespace:
        return f"{api_version}.{kind}.{namespace}/{name}"
    return f"{api_version}.{kind}.{name}"


def build_identifier(
    document: Node,
    naming: NamingSettings | None = None,
    *,
    document_index: int | None = None,
    source: str | None = None,
) -> str:
    """Build the identifier of a classified DOCUMENT node.

    Args:
        document: DOCUMENT node accepted by is_structured_object()
        naming: Renaming the composer will apply, if any
        document_index: Stream position, for error messages
        source: Stream name, for error messages

    Returns:
        Identifier string

    Raises:
        MissingFieldError: Naming the first absent field of apiVersion,
            kind, metadata, metadata.name
    """

    def missing(field: str) -> MissingFieldError:
        return MissingFieldError(field, document_index=document_index, source=source)

    root = document.children[0] if document.children else Node(NodeKind.MAPPING)

    api_version = _scalar_field(root, "apiVersion")
    if api_version is None:
        raise missing("apiVersion")
    kind = _scalar_field(root, "kind")
    if kind is None:
        raise missing("kind")
    metadata = find_in_mapping(root, "metadata")
    if metadata is None:
        raise missing("metadata")
    name = _scalar_field(metadata, "name")
    if name is None:
        raise missing("metadata.name")
    namespace = _scalar_field(metadata, "namespace") or None

    if naming is not None and not naming.is_identity:
        name = f"{naming.name_prefix}{name}{naming.name_suffix}"
        if naming.namespace and kind not in CLUSTER_SCOPED_KINDS:
            namespace = naming.namespace

    return format_identifier(api_version, kind, name, namespace)
