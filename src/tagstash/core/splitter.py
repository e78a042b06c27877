# src/tagstash/core/splitter.py
"""Split a raw YAML stream into per-document byte slices.

A separator is a line consisting exactly of `---`. The splitter is not
YAML-aware: anything else, including `--- # comment` or `--- !tag`, stays
part of the surrounding document and is left for the parser to judge.
"""

from __future__ import annotations

import re

# `---` on its own line; the preceding newline stays with the previous document
_SEPARATOR = re.compile(rb"(?:(?<=\n)|\A)---(?:\n|\Z)")


def split_documents(data: bytes) -> list[bytes]:
    """Split a stream on separator lines, dropping empty slices.

    Examples:
        >>> split_documents(b"a: 1\\n---\\nb: 2\\n")
        [b'a: 1\\n', b'b: 2\\n']
        >>> split_documents(b"---\\na: 1\\n---\\n")
        [b'a: 1\\n']
    """
    return [chunk for chunk in _SEPARATOR.split(data) if chunk]


def join_documents(documents: list[bytes]) -> bytes:
    """Inverse of split_documents() for slices it produced."""
    joined = b""
    for i, document in enumerate(documents):
        if i:
            if not joined.endswith(b"\n"):
                joined += b"\n"
            joined += b"---\n"
        joined += document
    return joined
