"""Tests for the default template tag predicate."""

import pytest

from tagstash.core.config import TemplateSettings
from tagstash.core.templates import TemplateTagMatcher


class TestTemplateTagMatcher:
    @pytest.mark.parametrize(
        "text",
        [
            "{{ .Values.image.tag }}",
            "{{- include \"chart.labels\" . | nindent 4 }}",
            "prefix-{{ name }}-suffix",
            "{% if enabled %}on{% endif %}",
            "{# a comment #}",
            "{% raw %}{{ x }}{% endraw %}",
            "{{ $unlexable }}",
            "{{ unterminated",
        ],
    )
    def test_recognises_tags(self, is_template_tag: TemplateTagMatcher, text: str) -> None:
        assert is_template_tag(text)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "nginx:1.25",
            "{ not: a tag }",
            '{"json": true}',
            "closing only }}",
            "TAGSTASH_PLACEHOLDER",
        ],
    )
    def test_rejects_plain_text(self, is_template_tag: TemplateTagMatcher, text: str) -> None:
        assert not is_template_tag(text)

    def test_custom_delimiters(self) -> None:
        matcher = TemplateTagMatcher(variable_start="[[", variable_end="]]")
        assert matcher("[[ name ]]")
        assert not matcher("{{ name }}")

    def test_from_settings(self) -> None:
        matcher = TemplateTagMatcher.from_settings(TemplateSettings(variable_start="<<", variable_end=">>"))
        assert matcher("<< x >>")
        assert matcher("{% if x %}")
        assert not matcher("{{ x }}")
