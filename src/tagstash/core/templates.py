# src/tagstash/core/templates.py
"""Template tag detection.

The stash engine treats "is this scalar a template tag?" as an opaque
predicate: any Callable[[str], bool] works. TemplateTagMatcher is the
default predicate and recognises tags by running the Jinja2 lexer over the
scalar text.

Usage:
    from tagstash.core.templates import TemplateTagMatcher

    is_template_tag = TemplateTagMatcher()
    is_template_tag("{{ .Values.image.tag }}")   # True (Go/Helm syntax lexes too)
    is_template_tag("nginx:1.25")                # False

The lexer is used instead of a regex because it honours the configured
delimiters, whitespace control ({{- ... -}}) and raw blocks the same way the
template engine itself would. The text is never rendered.

Limitations:
- Text that starts a tag and then fails to lex (Go's {{ $x }}) counts as a
  template tag; lexing only fails after a begin delimiter was seen
- Line statements are not enabled
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from jinja2 import Environment, TemplateSyntaxError

if TYPE_CHECKING:
    from tagstash.core.config import TemplateSettings

__all__ = [
    "TemplateTagPredicate",
    "TemplateTagMatcher",
]

TemplateTagPredicate = Callable[[str], bool]

# Lexer token types that open a tag; "data" is plain text
_TAG_BEGIN_TOKENS = frozenset(
    {
        "variable_begin",
        "block_begin",
        "comment_begin",
        "raw_begin",
    }
)


class TemplateTagMatcher:
    """Predicate telling whether scalar text contains a template tag.

    Examples:
        >>> matcher = TemplateTagMatcher()
        >>> matcher("{{ .Value }}")
        True
        >>> matcher("prefix-{% if x %}a{% endif %}")
        True
        >>> matcher("plain text")
        False
        >>> TemplateTagMatcher(variable_start="[[", variable_end="]]")("[[ name ]]")
        True
    """

    def __init__(
        self,
        *,
        variable_start: str = "{{",
        variable_end: str = "}}",
        block_start: str = "{%",
        block_end: str = "%}",
        comment_start: str = "{#",
        comment_end: str = "#}",
    ) -> None:
        self._delimiters = (variable_start, block_start, comment_start)
        self._env = Environment(
            variable_start_string=variable_start,
            variable_end_string=variable_end,
            block_start_string=block_start,
            block_end_string=block_end,
            comment_start_string=comment_start,
            comment_end_string=comment_end,
            autoescape=False,
        )

    @classmethod
    def from_settings(cls, settings: TemplateSettings) -> TemplateTagMatcher:
        return cls(
            variable_start=settings.variable_start,
            variable_end=settings.variable_end,
            block_start=settings.block_start,
            block_end=settings.block_end,
            comment_start=settings.comment_start,
            comment_end=settings.comment_end,
        )

    def __call__(self, text: str) -> bool:
        if not any(delimiter in text for delimiter in self._delimiters):
            return False
        try:
            for _lineno, token_type, _value in self._env.lex(text):
                if token_type in _TAG_BEGIN_TOKENS:
                    return True
        except TemplateSyntaxError:
            return True
        return False
