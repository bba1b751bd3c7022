"""
String Helpers.

Escaping for user-supplied values interpolated into registry filters.
"""

from __future__ import annotations

import re

__all__ = [
    "escape_like_pattern",
]

# LIKE wildcards plus the escape character itself.
_LIKE_SPECIAL_RE: re.Pattern[str] = re.compile(r"([\\%_])")


def escape_like_pattern(value: str) -> str:
    """Backslash-escape ``\\``, ``%`` and ``_`` so *value* matches literally.

    The registry name filters are substring matches built as
    ``%{value}%``; without escaping, a teller typing ``_`` or ``%`` would
    widen the search instead of narrowing it.

    Parameters
    ----------
    value:
        The raw user-supplied search string.

    Returns
    -------
    str
        The escaped string, safe to wrap in ``%...%``.
    """
    return _LIKE_SPECIAL_RE.sub(r"\\\1", value)
