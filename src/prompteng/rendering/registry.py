"""
Extension registry for filters and directives.

Each renderer owns one registry. It starts from the built-in vocabulary and
accepts additions before (or between) renders; a name that collides with a
built-in replaces it for that registry only.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

from prompteng.core.types import FilterFunction
from prompteng.rendering.directives import (
    BUILTIN_DIRECTIVES,
    Directive,
    make_inline_directive,
)
from prompteng.rendering.filters import BUILTIN_FILTERS

NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

DirectiveImplementation = type[Directive] | Callable[..., Any]


class ExtensionRegistry:
    """Mapping of names to filter functions and directive classes."""

    def __init__(
        self,
        filters: Mapping[str, FilterFunction] | None = None,
        directives: Mapping[str, type[Directive]] | None = None,
    ):
        """
        Initialize the registry.

        Params:
            filters: Initial filter table (defaults to the built-ins)
            directives: Initial directive table (defaults to the built-ins)
        """
        self._filters: dict[str, FilterFunction] = dict(
            BUILTIN_FILTERS if filters is None else filters
        )
        self._directives: dict[str, type[Directive]] = dict(
            BUILTIN_DIRECTIVES if directives is None else directives
        )

    @property
    def filters(self) -> Mapping[str, FilterFunction]:
        return self._filters

    @property
    def directives(self) -> Mapping[str, type[Directive]]:
        return self._directives

    @staticmethod
    def _validate_name(name: str, kind: str) -> None:
        if not NAME_PATTERN.match(name):
            raise ValueError(f"Invalid {kind} name: {name!r}")

    def register_filter(self, name: str, function: FilterFunction) -> None:
        """
        Add or replace a filter.

        Params:
            name: Filter name as written after ``|`` in templates
            function: Called as ``function(value, *args, **kwargs)``

        Raises:
            ValueError: If the name is not a valid identifier
            TypeError: If ``function`` is not callable
        """
        self._validate_name(name, "filter")
        if not callable(function):
            raise TypeError(f"Filter '{name}' must be callable")
        self._filters[name] = function

    def register_directive(self, name: str, implementation: DirectiveImplementation) -> None:
        """
        Add or replace a directive.

        Params:
            name: Directive name as written after ``{%``
            implementation: A ``Directive`` subclass, or a plain function
                ``(value, context) -> text`` wrapped as an inline directive

        Raises:
            ValueError: If the name is not a valid identifier
            TypeError: If the implementation is neither a Directive subclass nor callable
        """
        self._validate_name(name, "directive")
        if isinstance(implementation, type) and issubclass(implementation, Directive):
            self._directives[name] = implementation
        elif callable(implementation):
            self._directives[name] = make_inline_directive(name, implementation)
        else:
            raise TypeError(
                f"Directive '{name}' must be a Directive subclass or a callable"
            )

    def get_filter(self, name: str) -> FilterFunction | None:
        return self._filters.get(name)

    def get_directive(self, name: str) -> type[Directive] | None:
        return self._directives.get(name)

    def block_delimiters(self) -> frozenset[str]:
        """All intermediate/end tag names owned by registered block directives."""
        names: set[str] = set()
        for directive in self._directives.values():
            names.update(directive.delimiters)
        return frozenset(names)
