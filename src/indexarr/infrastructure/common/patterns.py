"""Regex helpers for definition-supplied patterns."""

from __future__ import annotations

import re

_GO_GROUP_RE = re.compile(r"\$(?:\{(\w+)\}|(\d+))")


def expand_replacement(replacement: str) -> str:
    r"""Translate ``$1`` / ``${name}`` group references to Python's ``\g<...>``.

    Definitions are written against RE2-style replacement strings; literal
    backslashes are escaped so ``re.sub`` does not interpret them.
    """
    escaped = replacement.replace("\\", "\\\\")
    return _GO_GROUP_RE.sub(
        lambda m: f"\\g<{m.group(1) or m.group(2)}>",
        escaped,
    )


def regex_replace(value: str, pattern: str, replacement: str) -> str:
    """``re.sub`` with RE2-style replacement syntax.

    Raises:
        re.error: if *pattern* does not compile.
    """
    return re.sub(pattern, expand_replacement(replacement), value)
