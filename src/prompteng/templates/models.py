"""
Data model for prompt templates.

Templates are loaded from files with YAML frontmatter. The frontmatter
declares the variables a template expects; the body is the template text
handed to the renderer.
"""

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

VariableType = Literal["string", "number", "boolean", "array", "object"]


class VariableDefinition(BaseModel):
    """A variable declared in template frontmatter."""

    name: str
    type: VariableType = "string"
    required: bool = False
    description: str | None = None
    default: Any = None


class TemplateMetadata(BaseModel):
    """Descriptive frontmatter fields."""

    description: str = ""
    author: str = ""
    version: str = "1.0.0"
    tags: list[str] = Field(default_factory=list)
    created: datetime = Field(default_factory=datetime.now)
    updated: datetime = Field(default_factory=datetime.now)


class ValidationResult(BaseModel):
    """Outcome of checking variable bindings against declarations."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


class PromptTemplate(BaseModel):
    """
    A named template with its declared variables.

    Params:
        name: Template identifier used for lookup
        content: Template body passed to the renderer
        variables: Declared variables
        metadata: Descriptive frontmatter fields
        source_path: File the template was loaded from, if any
    """

    name: str
    content: str
    variables: list[VariableDefinition] = Field(default_factory=list)
    metadata: TemplateMetadata = Field(default_factory=TemplateMetadata)
    source_path: Path | None = None

    def default_variables(self) -> dict[str, Any]:
        """Bindings for every declared variable that has a default."""
        return {
            variable.name: variable.default
            for variable in self.variables
            if variable.default is not None
        }

    def validate_variables(self, variables: Mapping[str, Any]) -> ValidationResult:
        """
        Check that every required variable is bound.

        Params:
            variables: Caller-supplied bindings

        Returns:
            ValidationResult listing each missing required variable
        """
        errors = [
            f"Missing required variable: '{variable.name}'"
            for variable in self.variables
            if variable.required and variable.name not in variables
        ]
        return ValidationResult(valid=not errors, errors=errors)
