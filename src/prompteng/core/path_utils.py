"""
Variable path resolution utilities.

Template expressions reference values with dotted and bracketed paths such as
``user.name``, ``items[0]`` or ``config["max-tokens"]``. This module walks
such a path against arbitrary JSON-like data. Resolution is lenient: any
segment that cannot be followed yields ``None`` rather than an error.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

# Properties every sequence, string, and mapping answers to
VIRTUAL_PROPERTIES = frozenset({"size", "first", "last"})


def is_sequence(value: Any) -> bool:
    """Check whether a value is a list-like sequence (strings excluded)."""
    return isinstance(value, Sequence) and not isinstance(value, str | bytes)


def _resolve_virtual(value: Any, key: str) -> Any:
    if key == "size":
        if isinstance(value, str | Mapping) or is_sequence(value):
            return len(value)
        return None
    if is_sequence(value) or isinstance(value, str):
        if not value:
            return None
        return value[0] if key == "first" else value[-1]
    return None


def resolve_key(value: Any, key: Any) -> Any:
    """
    Resolve a single path segment against a value.

    Lookup order: mapping key, sequence index, public attribute, then the
    virtual properties ``size``, ``first`` and ``last``.

    Params:
        value: The container being indexed
        key: String key, integer index, or other hashable segment

    Returns:
        The resolved value, or None when the segment cannot be followed
    """
    if value is None:
        return None

    if isinstance(value, Mapping):
        try:
            if key in value:
                return value[key]
        except TypeError:
            return None
        if isinstance(key, str) and key in VIRTUAL_PROPERTIES:
            return _resolve_virtual(value, key)
        return None

    if is_sequence(value) or isinstance(value, str):
        if isinstance(key, bool):
            return None
        if isinstance(key, int):
            if -len(value) <= key < len(value):
                return value[key]
            return None
        if isinstance(key, str) and key in VIRTUAL_PROPERTIES:
            return _resolve_virtual(value, key)
        return None

    if isinstance(key, str) and not key.startswith("_"):
        if hasattr(value, key):
            attribute = getattr(value, key)
            if not callable(attribute):
                return attribute
    return None


def resolve_path(root: Any, keys: Iterable[Any]) -> Any:
    """
    Walk a sequence of segments starting from a root value.

    Params:
        root: Starting value (usually a variable binding)
        keys: Path segments after the root name

    Returns:
        The value at the end of the path, or None if any segment is missing

    Examples:
        resolve_path({"a": [{"b": 1}]}, ["a", 0, "b"]) -> 1
        resolve_path({"a": 1}, ["missing", "x"]) -> None
    """
    current = root
    for key in keys:
        current = resolve_key(current, key)
        if current is None:
            return None
    return current
