"""Fenced snippet block extraction."""

import re

DEFAULT_TAG = "snipmate"

_PATTERNS: dict[str, re.Pattern[str]] = {}


def fence_pattern(tag: str) -> re.Pattern[str]:
    pattern = _PATTERNS.get(tag)
    if pattern is None:
        # The first closing fence ends the block, even one inside the body.
        pattern = re.compile(
            r"```" + re.escape(tag) + r"[ \t]*\r?\n(.*?)\s*```", re.DOTALL
        )
        _PATTERNS[tag] = pattern
    return pattern


def extract_blocks(text: str, tag: str = DEFAULT_TAG) -> list[str]:
    """
    Return the bodies of all ``tag`` fenced blocks in document order.

    Empty bodies are skipped and unterminated fences yield nothing.

    Examples:
        >>> extract_blocks("```snipmate\\nx = 1\\n```")
        ['x = 1']
        >>> extract_blocks("no fences here")
        []
    """
    return [body for body in fence_pattern(tag).findall(text) if body]
