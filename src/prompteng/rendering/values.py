"""
Value semantics for template evaluation.

Template values are untyped JSON-like data. This module defines how they are
tested for truth, compared, and turned into output text.

Falsy values: None, False, numeric zero, the empty string, and empty
sequences or mappings. Everything else is truthy.
"""

import math
from collections.abc import Mapping
from typing import Any

from prompteng.core.path_utils import is_sequence


class _Keyword:
    """Literal keyword that compares by emptiness rather than identity."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


EMPTY = _Keyword("empty")
BLANK = _Keyword("blank")


def is_truthy(value: Any) -> bool:
    """Apply template truthiness to a value."""
    if value is None or value is False:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, int | float):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str | Mapping) or is_sequence(value):
        return len(value) > 0
    if isinstance(value, _Keyword):
        return False
    return True


def is_empty(value: Any) -> bool:
    """Check whether a value equals the ``empty`` keyword."""
    if isinstance(value, str | Mapping) or is_sequence(value):
        return len(value) == 0
    return False


def is_blank(value: Any) -> bool:
    """Check whether a value equals the ``blank`` keyword."""
    if isinstance(value, str):
        return value.strip() == ""
    return not is_truthy(value)


def to_text(value: Any) -> str:
    """
    Convert a value to its output text.

    None renders as the empty string, booleans as ``true``/``false``,
    sequences as the concatenation of their rendered items, and integral
    floats without a trailing ``.0``.

    Params:
        value: Any template value

    Returns:
        Text suitable for writing to an output sink
    """
    if value is None or isinstance(value, _Keyword):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if is_sequence(value):
        return "".join(to_text(item) for item in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def values_equal(left: Any, right: Any) -> bool:
    """Compare two template values by value."""
    if left is EMPTY or right is EMPTY:
        other = right if left is EMPTY else left
        return other is EMPTY or is_empty(other)
    if left is BLANK or right is BLANK:
        other = right if left is BLANK else left
        return other is BLANK or is_blank(other)
    # true == 1 is not a match in templates
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    try:
        return bool(left == right)
    except (TypeError, ValueError):
        return False


def contains(container: Any, item: Any) -> bool:
    """Implement the ``contains`` operator for strings, sequences and mappings."""
    if isinstance(container, str):
        return to_text(item) in container if item is not None else False
    if isinstance(container, Mapping):
        try:
            return item in container
        except TypeError:
            return False
    if is_sequence(container):
        return any(values_equal(element, item) for element in container)
    return False
