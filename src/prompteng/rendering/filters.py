"""
Built-in template filters.

Every filter is a total function: it accepts any input, and when the input
has the wrong shape it coerces or passes the value through instead of
raising. Filters receive the previous stage's value first, followed by the
literal arguments written after the colon in the template.
"""

from collections.abc import Mapping
from typing import Any

from prompteng.core.path_utils import is_sequence, resolve_key
from prompteng.core.types import FilterFunction
from prompteng.rendering.values import is_truthy, to_text, values_equal


def default(value: Any, fallback: Any = "") -> Any:
    """Return ``fallback`` when the value is None or the empty string."""
    if value is None or value == "":
        return fallback
    return value


def join(value: Any, separator: Any = ", ") -> str:
    """Join sequence elements with a separator; stringify anything else."""
    if is_sequence(value):
        return to_text(separator).join(to_text(item) for item in value)
    return to_text(value)


def uniq(value: Any) -> Any:
    """Remove duplicates from a sequence, keeping first occurrences in order."""
    if not is_sequence(value):
        return value
    unique: list[Any] = []
    for item in value:
        if not any(values_equal(item, seen) for seen in unique):
            unique.append(item)
    return unique


def length(value: Any) -> int:
    """Count sequence elements, string characters, or mapping keys."""
    if isinstance(value, str | Mapping) or is_sequence(value):
        return len(value)
    return 0


def lower(value: Any) -> str:
    return to_text(value).lower()


def upper(value: Any) -> str:
    return to_text(value).upper()


def compact(value: Any) -> Any:
    """Drop falsy elements from a sequence."""
    if not is_sequence(value):
        return value
    return [item for item in value if is_truthy(item)]


def sort(value: Any) -> Any:
    """
    Return an ascending-sorted copy of a sequence.

    Mixed element types that cannot be compared directly are ordered by their
    rendered text instead.
    """
    if not is_sequence(value):
        return value
    try:
        return sorted(value)
    except TypeError:
        return sorted(value, key=to_text)


def first(value: Any) -> Any:
    if (is_sequence(value) or isinstance(value, str)) and value:
        return value[0]
    return None


def last(value: Any) -> Any:
    if (is_sequence(value) or isinstance(value, str)) and value:
        return value[-1]
    return None


def strip(value: Any) -> str:
    return to_text(value).strip()


def capitalize(value: Any) -> str:
    return to_text(value).capitalize()


def append(value: Any, suffix: Any = "") -> str:
    return to_text(value) + to_text(suffix)


def prepend(value: Any, prefix: Any = "") -> str:
    return to_text(prefix) + to_text(value)


def replace(value: Any, old: Any = "", new: Any = "") -> str:
    text = to_text(value)
    old_text = to_text(old)
    if not old_text:
        return text
    return text.replace(old_text, to_text(new))


def split(value: Any, separator: Any = " ") -> list[str]:
    """Split text on a separator; an empty separator splits into characters."""
    text = to_text(value)
    separator_text = to_text(separator)
    if not text:
        return []
    if not separator_text:
        return list(text)
    return text.split(separator_text)


def truncate(value: Any, size: Any = 50, ellipsis: Any = "...") -> str:
    """Shorten text to ``size`` characters including the ellipsis."""
    text = to_text(value)
    try:
        limit = int(size)
    except (TypeError, ValueError):
        return text
    if len(text) <= limit:
        return text
    ellipsis_text = to_text(ellipsis)
    keep = max(limit - len(ellipsis_text), 0)
    return text[:keep] + ellipsis_text


def reverse(value: Any) -> Any:
    if is_sequence(value):
        return list(reversed(value))
    return value


def map_property(value: Any, key: Any = None) -> Any:
    """Collect one property from every element of a sequence."""
    if not is_sequence(value):
        return value
    return [resolve_key(item, key) for item in value]


BUILTIN_FILTERS: dict[str, FilterFunction] = {
    "default": default,
    "join": join,
    "uniq": uniq,
    "length": length,
    "size": length,
    "lower": lower,
    "upper": upper,
    "compact": compact,
    "sort": sort,
    "first": first,
    "last": last,
    "strip": strip,
    "capitalize": capitalize,
    "append": append,
    "prepend": prepend,
    "replace": replace,
    "split": split,
    "truncate": truncate,
    "reverse": reverse,
    "map": map_property,
}
