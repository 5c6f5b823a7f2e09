"""Named-template engine combining template loading with rendering.

``PromptEngine`` keeps a registry of ``PromptTemplate`` objects (loaded from
a directory of ``.ptemplate`` files and/or added from in-memory sources) and
renders them by name through one ``TemplateRenderer``. Variable declarations
from frontmatter are checked before each render and declared defaults fill
in missing bindings.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from attrs import frozen

from prompteng.core.types import FilterFunction
from prompteng.exceptions import TemplateNotFoundError, VariableValidationError
from prompteng.rendering.registry import DirectiveImplementation
from prompteng.templates.loader import (
    DEFAULT_TEMPLATE_EXTENSION,
    load_template_dir,
    load_template_source,
)
from prompteng.templates.models import PromptTemplate, ValidationResult
from prompteng.templates.renderer import RenderResult, TemplateRenderer
from prompteng.templates.typegen import generate_type_definitions

logger = logging.getLogger(__name__)


@frozen
class EngineOptions:
    template_extension: str = DEFAULT_TEMPLATE_EXTENSION
    strict_variables: bool = False
    apply_defaults: bool = True


class PromptEngine:
    """Loads named templates and renders them.

    Usage:
        engine = PromptEngine("prompts/templates")
        engine.render("greet", {"name": "Ada"})
        engine.render_multi("with-system", {"name": "Ada"})  # {"system": ..., "prompt": ...}

    Notes:
      - Missing required variables are logged as a warning unless
        ``EngineOptions.strict_variables`` is set, in which case rendering raises.
      - Filters and directives registered here apply to every template of this engine.
    """

    def __init__(
        self,
        template_dir: Path | str | None = None,
        options: EngineOptions | None = None,
        sources: Mapping[str, str] | None = None,
    ):
        """Initialize the engine.

        Params:
            template_dir: Directory of template files to load, if any
            options: Engine configuration
            sources: In-memory template sources keyed by fallback name
                (used when a source's frontmatter has no ``name``)
        """
        self.options = options or EngineOptions()
        self.renderer = TemplateRenderer()
        self._templates: dict[str, PromptTemplate] = {}

        if template_dir is not None:
            self._templates.update(
                load_template_dir(template_dir, self.options.template_extension)
            )
        for name, text in (sources or {}).items():
            self.add_source(text, name=name)

    def register_filter(self, name: str, function: FilterFunction) -> None:
        self.renderer.register_filter(name, function)

    def register_directive(self, name: str, implementation: DirectiveImplementation) -> None:
        self.renderer.register_directive(name, implementation)

    def add_template(self, template: PromptTemplate) -> None:
        """Register a template, replacing any template with the same name."""
        self._templates[template.name] = template

    def add_source(self, text: str, name: str | None = None) -> PromptTemplate:
        """Load a template from frontmatter source text and register it.

        Params:
            text: Template source including frontmatter
            name: Name used when the frontmatter has none

        Returns:
            The registered template

        Raises:
            TemplateLoadError: If the source cannot be loaded
        """
        template = load_template_source(text, fallback_name=name)
        self.add_template(template)
        return template

    def get_template(self, name: str) -> PromptTemplate | None:
        return self._templates.get(name)

    def list_templates(self) -> list[str]:
        return list(self._templates.keys())

    def _require_template(self, name: str) -> PromptTemplate:
        template = self._templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name)
        return template

    def validate_variables(self, name: str, variables: Mapping[str, Any]) -> ValidationResult:
        """Check bindings against a template's required variables.

        Raises:
            TemplateNotFoundError: If the template is not registered
        """
        return self._require_template(name).validate_variables(variables)

    def _prepare(self, name: str, variables: Mapping[str, Any] | None) -> tuple[PromptTemplate, dict[str, Any]]:
        template = self._require_template(name)
        bindings = dict(variables or {})

        validation = template.validate_variables(bindings)
        if not validation.valid:
            if self.options.strict_variables:
                raise VariableValidationError(name, validation.errors)
            logger.warning(f"Rendering '{name}' with missing variables: {'; '.join(validation.errors)}")

        if self.options.apply_defaults:
            bindings = {**template.default_variables(), **bindings}
        return template, bindings

    def render(self, name: str, variables: Mapping[str, Any] | None = None) -> str:
        """Render a template into its primary text.

        Use this when the template has no ``section`` blocks or only the
        combined text is needed.

        Raises:
            TemplateNotFoundError: If the template is not registered
            VariableValidationError: In strict mode, if required variables are missing
            TemplateSyntaxError: If the template body cannot be parsed
        """
        template, bindings = self._prepare(name, variables)
        return self.renderer.render(template.content, bindings, template_name=template.name)

    def render_with_meta(self, name: str, variables: Mapping[str, Any] | None = None) -> RenderResult:
        """Render a template and return text, sections and constraints."""
        template, bindings = self._prepare(name, variables)
        return self.renderer.render_with_meta(template.content, bindings, template_name=template.name)

    def render_multi(self, name: str, variables: Mapping[str, Any] | None = None) -> dict[str, str]:
        """Render a template into a name -> text map of its sections.

        Falls back to ``{"prompt": text}`` when the template captured no sections.
        """
        result = self.render_with_meta(name, variables)
        if not result.sections:
            return {"prompt": result.text}
        return dict(result.sections)

    def generate_type_definitions(self) -> str:
        """TypedDict stubs describing every template's variables."""
        return generate_type_definitions(self._templates.values())
