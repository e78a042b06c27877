"""Tests for canonical JSON serialization and content digests."""

from collections.abc import Callable

from tagstash.contracts import ParsedDocument
from tagstash.core.canonical import canonical_json, content_digest, node_content, stable_hash

Parse = Callable[[str], ParsedDocument]


def _root_digest(doc: ParsedDocument) -> str:
    assert doc.root is not None
    return content_digest(doc.root)


class TestCanonicalJson:
    def test_keys_are_sorted_without_whitespace(self) -> None:
        assert canonical_json({"b": 1, "a": [2, "x"]}) == '{"a":[2,"x"],"b":1}'

    def test_stable_hash_is_sha256_hex(self) -> None:
        digest = stable_hash(["scalar", "x"])
        assert len(digest) == 64
        assert digest == stable_hash(["scalar", "x"])


class TestContentDigest:
    def test_mapping_key_order_is_ignored(self, parse: Parse) -> None:
        assert _root_digest(parse("a: 1\nb: 2\n")) == _root_digest(parse("b: 2\na: 1\n"))

    def test_sequence_order_matters(self, parse: Parse) -> None:
        assert _root_digest(parse("[1, 2]\n")) != _root_digest(parse("[2, 1]\n"))

    def test_scalar_style_is_ignored(self, parse: Parse) -> None:
        assert _root_digest(parse('a: "1"\n')) == _root_digest(parse("a: 1\n"))

    def test_tags_are_ignored(self, parse: Parse) -> None:
        assert _root_digest(parse("a: !!str 1\n")) == _root_digest(parse("a: 1\n"))

    def test_layout_and_comments_are_ignored(self, parse: Parse) -> None:
        block = parse("a:\n  b: 1  # note\n  c: [x, y]\n")
        flow = parse("{a: {c: [x, y], b: 1}}\n")
        assert _root_digest(block) == _root_digest(flow)

    def test_values_change_the_digest(self, parse: Parse) -> None:
        assert _root_digest(parse("a: 1\n")) != _root_digest(parse("a: 2\n"))

    def test_aliases_are_expanded(self, parse: Parse) -> None:
        doc = parse("x: &a {k: v}\ny: *a\n")
        assert doc.root is not None
        anchored, alias = doc.root.children[1], doc.root.children[3]
        assert content_digest(alias) == content_digest(anchored)

    def test_aliased_document_matches_inlined_document(self, parse: Parse) -> None:
        aliased = parse("x: &a {k: v}\ny: *a\n")
        inlined = parse("x: {k: v}\ny: {k: v}\n")
        assert _root_digest(aliased) == _root_digest(inlined)

    def test_recursive_anchor_terminates(self, parse: Parse) -> None:
        doc = parse("&a [1, *a]\n")
        assert doc.root is not None
        assert node_content(doc.root) == ["sequence", [["scalar", "1"], ["alias", "a"]]]
