from __future__ import annotations

from typing import Any, Callable


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def coalesce(*candidates: Any, default: Any = None) -> Any:
    """Return the first candidate that is neither None nor a blank string."""
    for value in candidates:
        if not is_missing(value):
            return value
    return default


def coalesce_as(convert: Callable[[Any], Any], *candidates: Any, default: Any = None) -> Any:
    """
    Like coalesce, but each candidate must also survive ``convert``.
    A candidate that raises TypeError/ValueError falls through to the next tier.
    """
    for value in candidates:
        if is_missing(value):
            continue
        try:
            return convert(value)
        except (TypeError, ValueError):
            continue
    return default
