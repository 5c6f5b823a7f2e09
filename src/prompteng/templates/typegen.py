"""
TypedDict stub generation from template variable declarations.

Produces Python source that callers can paste into their code base (or
write to a ``.py`` file) to type-check the bindings they pass to each
template.
"""

import re
from collections.abc import Iterable

from prompteng.templates.models import PromptTemplate

PYTHON_TYPES = {
    "string": "str",
    "number": "float",
    "boolean": "bool",
    "array": "list[Any]",
    "object": "dict[str, Any]",
}

STUB_HEADER = "from typing import Any, NotRequired, Required, TypedDict"


def to_pascal_case(name: str) -> str:
    """Convert a template name like ``with-system`` to ``WithSystem``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in re.split(r"[-_\s]+", name) if word)


def map_to_python_type(variable_type: str) -> str:
    return PYTHON_TYPES.get(variable_type, "Any")


def generate_template_stub(template: PromptTemplate) -> str | None:
    """
    Generate one TypedDict class for a template.

    Params:
        template: Template whose variable declarations to describe

    Returns:
        Class source, or None when the template declares no variables
    """
    if not template.variables:
        return None

    lines = [f"class {to_pascal_case(template.name)}Variables(TypedDict, total=False):"]
    for variable in template.variables:
        wrapper = "Required" if variable.required else "NotRequired"
        annotation = f"{wrapper}[{map_to_python_type(variable.type)}]"
        comment = f"  # {variable.description}" if variable.description else ""
        lines.append(f"    {variable.name}: {annotation}{comment}")
    return "\n".join(lines)


def generate_type_definitions(templates: Iterable[PromptTemplate]) -> str:
    """
    Generate TypedDict stubs for every template with declared variables.

    Params:
        templates: Templates to describe

    Returns:
        Python source with an import header, or an empty string when no
        template declares variables
    """
    stubs = [stub for stub in map(generate_template_stub, templates) if stub]
    if not stubs:
        return ""
    return "\n\n\n".join([STUB_HEADER, *stubs]) + "\n"
