"""
Render driver for prompt templates.

``TemplateRenderer`` parses template text once per distinct source, keeping
a bounded LRU cache of parsed trees, and evaluates the resulting tree against
a fresh RenderContext on every call. The parse cache and the extension
registry are the only state shared between calls; both are read-only while
rendering.
"""

from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from prompteng.core.types import FilterFunction, Sections
from prompteng.parsing.parser import ParsedTemplate, TemplateTreeParser
from prompteng.rendering.context import Constraint, RenderContext, RenderMetadata
from prompteng.rendering.registry import DirectiveImplementation, ExtensionRegistry

DEFAULT_CACHE_SIZE = 1024


@dataclass
class RenderResult:
    """
    Primary text plus side-channel metadata of one render.

    Params:
        text: Everything emitted outside section blocks
        meta: Constraints and sections recorded during the render
    """

    text: str
    meta: RenderMetadata = field(default_factory=RenderMetadata)

    @property
    def sections(self) -> Sections:
        return self.meta.sections

    @property
    def constraints(self) -> list[Constraint]:
        return self.meta.constraints


class TemplateRenderer:
    """
    Parses and renders template text.

    Usage:
        renderer = TemplateRenderer()
        renderer.render("Hi {{ who | default: 'world' }}", {})
        result = renderer.render_with_meta(source, {"name": "Ada"})
        result.sections["prompt"]
    """

    def __init__(
        self,
        registry: ExtensionRegistry | None = None,
        cache: bool = True,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        """
        Initialize the renderer.

        Params:
            registry: Filters and directives (defaults to a fresh built-in registry)
            cache: Reuse parsed trees for identical template text
            cache_size: Maximum number of parsed trees kept; least recently
                used trees are evicted first
        """
        if cache_size < 1:
            raise ValueError(f"cache_size must be positive, got {cache_size}")
        self.registry = registry or ExtensionRegistry()
        self._cache_enabled = cache
        self._cache_size = cache_size
        self._cache: OrderedDict[tuple[str, str | None], ParsedTemplate] = OrderedDict()

    @property
    def cache_size(self) -> int:
        return self._cache_size

    def clear_cache(self) -> None:
        """Drop all cached parse trees."""
        self._cache.clear()

    def register_filter(self, name: str, function: FilterFunction) -> None:
        """
        Register a filter for all subsequent parses and renders.

        Cached trees are discarded because filters are bound at parse time.
        """
        self.registry.register_filter(name, function)
        self.clear_cache()

    def register_directive(self, name: str, implementation: DirectiveImplementation) -> None:
        """
        Register a directive for all subsequent parses and renders.

        Cached trees are discarded because directives are bound at parse time.
        """
        self.registry.register_directive(name, implementation)
        self.clear_cache()

    def parse(self, template_text: str, template_name: str | None = None) -> ParsedTemplate:
        """
        Parse template text, consulting the cache first.

        Params:
            template_text: Template source
            template_name: Identifier used in error messages

        Returns:
            Immutable directive tree

        Raises:
            TemplateSyntaxError: If the source cannot be parsed
        """
        key = (template_text, template_name)
        if self._cache_enabled and key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        parsed = TemplateTreeParser(self.registry, template_name).parse(template_text)
        if self._cache_enabled:
            self._cache[key] = parsed
            if len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        return parsed

    def cached_count(self) -> int:
        """Number of parsed trees currently held in the cache."""
        return len(self._cache)

    def _evaluate(
        self,
        template_text: str,
        variables: Mapping[str, Any] | None,
        template_name: str | None,
    ) -> RenderContext:
        parsed = self.parse(template_text, template_name)
        context = RenderContext(variables)
        parsed.render(context)
        return context

    def render(
        self,
        template_text: str,
        variables: Mapping[str, Any] | None = None,
        template_name: str | None = None,
    ) -> str:
        """
        Render template text and return only the primary output.

        Params:
            template_text: Template source
            variables: Variable bindings (not mutated)
            template_name: Identifier used in error messages

        Returns:
            Rendered text, excluding any section content
        """
        return self._evaluate(template_text, variables, template_name).output()

    def render_with_meta(
        self,
        template_text: str,
        variables: Mapping[str, Any] | None = None,
        template_name: str | None = None,
    ) -> RenderResult:
        """
        Render template text and return the primary output with metadata.

        Params:
            template_text: Template source
            variables: Variable bindings (not mutated)
            template_name: Identifier used in error messages

        Returns:
            RenderResult whose sections default to {} and constraints to []
            when no section or constraint directive ran
        """
        context = self._evaluate(template_text, variables, template_name)
        return RenderResult(
            text=context.output(), meta=context.metadata or RenderMetadata()
        )
