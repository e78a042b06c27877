"""Hypothesis strategies producing Kubernetes-like manifests."""

from __future__ import annotations

import string
from typing import Any

import yaml
from hypothesis import strategies as st

keys = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=8)

plain_values = st.text(alphabet=string.ascii_letters + string.digits + " -_.", max_size=12)

template_tags = st.builds(lambda name: "{{ .Values." + name + " }}", keys)

scalars = st.one_of(plain_values, template_tags)

values = st.recursive(
    scalars,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(keys, children, max_size=4),
    max_leaves=12,
)

data_sections = st.dictionaries(keys, values, min_size=1, max_size=6)


def manifest(data: dict[str, Any], name: str = "cm") -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": name}, "data": data}


def dump(obj: Any, *, flow: bool = False) -> bytes:
    return yaml.safe_dump(obj, sort_keys=False, default_flow_style=flow).encode("utf-8")


def reverse_keys(obj: Any) -> Any:
    """What a composer might do: same content, mapping keys in another order."""
    if isinstance(obj, dict):
        return {key: reverse_keys(obj[key]) for key in reversed(list(obj))}
    if isinstance(obj, list):
        return [reverse_keys(item) for item in obj]
    return obj


def compose(stashed: bytes, *, flow: bool = False) -> bytes:
    """Reserialize a stashed stream document by document, keys reversed."""
    documents = [reverse_keys(document) for document in yaml.safe_load_all(stashed)]
    return b"---\n".join(dump(document, flow=flow) for document in documents)
