"""
Prompteng template components.

This package provides the render driver, the template data model, template
loading from frontmatter sources, and TypedDict stub generation.
"""

from prompteng.templates.loader import (
    DEFAULT_TEMPLATE_EXTENSION,
    load_template_dir,
    load_template_file,
    load_template_source,
    parse_frontmatter,
)
from prompteng.templates.models import (
    PromptTemplate,
    TemplateMetadata,
    ValidationResult,
    VariableDefinition,
)
from prompteng.templates.renderer import RenderResult, TemplateRenderer
from prompteng.templates.typegen import generate_type_definitions

__all__ = [
    "DEFAULT_TEMPLATE_EXTENSION",
    "PromptTemplate",
    "RenderResult",
    "TemplateMetadata",
    "TemplateRenderer",
    "ValidationResult",
    "VariableDefinition",
    "generate_type_definitions",
    "load_template_dir",
    "load_template_file",
    "load_template_source",
    "parse_frontmatter",
]
