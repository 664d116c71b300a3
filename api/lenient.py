"""Lenient extraction helpers for cluster JSON payloads.

Cluster responses vary by version and omit fields freely. Normalizers read
them through these helpers so a missing or oddly-typed field falls back to a
typed default instead of failing the whole response.
"""

from __future__ import annotations

from typing import Any

_MISSING = object()


def dig(payload: Any, *path: str, default: Any = None) -> Any:
    """Walk nested dicts by key, returning ``default`` at the first miss."""
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return default
        node = node.get(key, _MISSING)
        if node is _MISSING:
            return default
    return node


def lenient_int(value: Any, default: int = 0) -> int:
    """Parse a non-negative count from an int or a numeric string.

    ``_cat`` APIs send numbers as strings; anything unparsable, negative,
    fractional or boolean yields ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 0 else default
    if isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return default
        return parsed if parsed >= 0 else default
    return default


def lenient_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def lenient_bool(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default
