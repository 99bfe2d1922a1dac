"""Dotted-path lookups over decoded JSON payloads."""
from collections.abc import Mapping
from typing import Any


def get_path(data: Any, path: str | None, default: Any = None) -> Any:
    """
    Read a nested value using dot notation.

    ``get_path({"user": {"id": "U1"}}, "user.id")`` returns ``"U1"``. Any missing
    key, or an intermediate value that is not a mapping, yields ``default``.
    A key that literally equals the whole dotted path is preferred over
    walking the segments.

    Args:
        data: Decoded JSON object (or anything else, which yields ``default``)
        path: Dotted key path; ``None`` returns ``data`` itself

    Returns:
        The value found at ``path`` or ``default``
    """
    if path is None:
        return data
    if not isinstance(data, Mapping):
        return default
    if path in data:
        return data[path]

    current: Any = data
    for segment in path.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        else:
            return default
    return current
