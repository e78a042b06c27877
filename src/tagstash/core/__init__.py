# src/tagstash/core/__init__.py
"""Core infrastructure: document model, addressing, canonical digests, configuration, logging."""

from tagstash.core.canonical import (
    CANONICAL_VERSION,
    canonical_json,
    content_digest,
    stable_hash,
)
from tagstash.core.classifier import is_structured_object
from tagstash.core.config import (
    NamingSettings,
    TagStashSettings,
    TemplateSettings,
    load_kustomize_naming,
    load_settings,
)
from tagstash.core.identifiers import build_identifier, find_in_mapping
from tagstash.core.logging import configure_logging, get_logger
from tagstash.core.parser import parse_document, render_document
from tagstash.core.paths import locate, resolve, walk
from tagstash.core.splitter import join_documents, split_documents
from tagstash.core.stash_store import StashedValue, StashStore
from tagstash.core.templates import TemplateTagMatcher

__all__ = [
    "CANONICAL_VERSION",
    "NamingSettings",
    "StashStore",
    "StashedValue",
    "TagStashSettings",
    "TemplateSettings",
    "TemplateTagMatcher",
    "build_identifier",
    "canonical_json",
    "configure_logging",
    "content_digest",
    "find_in_mapping",
    "get_logger",
    "is_structured_object",
    "join_documents",
    "load_kustomize_naming",
    "load_settings",
    "locate",
    "parse_document",
    "render_document",
    "resolve",
    "split_documents",
    "stable_hash",
    "walk",
]
