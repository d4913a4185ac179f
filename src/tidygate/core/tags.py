"""
Commit message tags.

A tag is an issue identifier followed by a bracketed category, for example
``PROJ-12 [Format]``. It may appear anywhere in the message.
"""

from __future__ import annotations

import re

from tidygate.core.errors import PatternEngineError

WHITESPACE = "Whitespace"
FORMAT = "Format"


def display_text(category: str) -> str:
    """The tag as it should be typed, e.g. ``[Format]``."""
    return f"[{category}]"


def tag_pattern(category: str) -> str:
    """Pattern source for an issue id followed by ``[category]``."""
    return r"[A-Z0-9-]+\s+\[" + re.escape(category) + r"\]"


def matches(message: str, pattern: str) -> bool:
    """Return True if ``pattern`` occurs anywhere in ``message``, ignoring case.

    Raises PatternEngineError if the pattern itself is broken, so a bad
    pattern is never mistaken for an untagged message.
    """
    try:
        compiled = re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise PatternEngineError(f"Failed to check commit message:\n{e}") from e
    return compiled.search(message) is not None


def has_tag(message: str, category: str) -> bool:
    return matches(message, tag_pattern(category))
