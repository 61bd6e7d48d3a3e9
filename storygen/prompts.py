"""Handlebars prompt rendering."""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# User-supplied values use triple-stash so they are inserted verbatim,
# never HTML-escaped.
STORY_PROMPT = """Create a creative {{{style}}} story with the following requirements:
  Topic: {{{topic}}}
  Length: {{{word_count}}} words

Please provide a captivating story with a clear beginning, middle, and end.
Include rich descriptions and engaging characters."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        # pybars returns a strlist; callers get a plain str
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e
