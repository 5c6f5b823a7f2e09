"""
Core type definitions for prompteng.

This module contains fundamental type aliases used throughout the template
parser and renderer for type safety and consistency.
"""

from collections.abc import Callable
from typing import Any

TemplateValue = str | int | float | bool | list | dict | None

Variables = dict[str, Any]

FilterFunction = Callable[..., Any]

Sections = dict[str, str]
