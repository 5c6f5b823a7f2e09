"""
Exception classes for prompt template processing.

This module defines specific exception types for the different error
conditions that can occur while loading, parsing, and rendering prompt
templates, and while running declarative prompt tests.
"""

from dataclasses import dataclass


@dataclass
class ErrorContext:
    """
    Context information for error messages.

    Captures where an error occurred in template terms so parse errors can
    point the author at the offending line and directive.

    Params:
        template_name: Identifier of the template (file stem or caller-supplied name)
        line: 1-based line number within the template source
        source: The original markup fragment that caused the error
    """

    template_name: str | None = None
    line: int | None = None
    source: str | None = None

    def format_location(self) -> str:
        """
        Format location information as indented lines.

        Returns:
            Formatted location string, empty when nothing is known
        """
        lines = []

        if self.template_name:
            lines.append(f"  in template '{self.template_name}'")
        if self.line is not None:
            lines.append(f"  at line {self.line}")
        if self.source:
            lines.append(f"  source: {self.source}")

        return "\n".join(lines)


class PromptEngError(Exception):
    """Base exception for all prompteng errors."""

    pass


class TemplateSyntaxError(PromptEngError):
    """Raised when template source cannot be parsed into a directive tree."""

    def __init__(self, reason: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            reason: What is wrong with the markup
            context: Optional location of the failure
        """
        self.reason = reason
        self.context = context

        location_info = context.format_location() if context else ""
        if location_info:
            super().__init__(f"{reason}\n{location_info}")
        else:
            super().__init__(reason)


class UnclosedTagError(TemplateSyntaxError):
    """Raised when a block directive has no matching end tag."""

    def __init__(self, tag_text: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            tag_text: Full markup of the opening tag (e.g. "{% section prompt %}")
            context: Optional location of the opening tag
        """
        self.tag_text = tag_text
        super().__init__(f"tag {tag_text} not closed", context)


class UnknownDirectiveError(TemplateSyntaxError):
    """Raised when a directive name is not registered."""

    def __init__(self, name: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            name: The unregistered directive name
            context: Optional location of the directive
        """
        self.name = name
        super().__init__(f"Unknown directive '{name}'", context)


class UnknownFilterError(TemplateSyntaxError):
    """Raised when a filter name is not registered."""

    def __init__(self, name: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            name: The unregistered filter name
            context: Optional location of the filter use
        """
        self.name = name
        super().__init__(f"Unknown filter '{name}'", context)


class TemplateNotFoundError(PromptEngError):
    """Raised when a named template is not registered with the engine."""

    def __init__(self, template_name: str):
        self.template_name = template_name
        super().__init__(f"Template '{template_name}' not found.")


class TemplateLoadError(PromptEngError):
    """Raised when template source cannot be turned into a PromptTemplate."""

    def __init__(self, source: str, reason: str):
        """
        Initialize the exception.

        Params:
            source: File path or name of the offending template source
            reason: Why loading failed
        """
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load template {source}: {reason}")


class VariableValidationError(PromptEngError):
    """Raised in strict mode when required template variables are missing."""

    def __init__(self, template_name: str, errors: list[str]):
        """
        Initialize the exception.

        Params:
            template_name: Template whose variables failed validation
            errors: Individual validation messages
        """
        self.template_name = template_name
        self.errors = errors
        super().__init__(
            f"Template '{template_name}' variable validation failed: {'; '.join(errors)}"
        )


class TestConfigError(PromptEngError):
    """Raised when a prompt test file or the runner configuration is unusable."""

    __test__ = False


class ProviderError(PromptEngError):
    """Raised when a completion provider call fails."""

    def __init__(self, provider_name: str, reason: str):
        """
        Initialize the exception.

        Params:
            provider_name: Name of the provider that failed
            reason: Underlying failure description
        """
        self.provider_name = provider_name
        self.reason = reason
        super().__init__(f"{provider_name} API error: {reason}")
