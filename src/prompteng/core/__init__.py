"""
Core types and path utilities shared by the parser and renderer.
"""

from prompteng.core.path_utils import is_sequence, resolve_key, resolve_path
from prompteng.core.types import FilterFunction, Sections, TemplateValue, Variables

__all__ = [
    "FilterFunction",
    "Sections",
    "TemplateValue",
    "Variables",
    "is_sequence",
    "resolve_key",
    "resolve_path",
]
