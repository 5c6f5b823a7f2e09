"""
Prompteng exception classes.

This package provides all exception types used throughout prompteng for
consistent error handling and reporting.
"""

from prompteng.exceptions.core import (
    ErrorContext,
    PromptEngError,
    ProviderError,
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateSyntaxError,
    TestConfigError,
    UnclosedTagError,
    UnknownDirectiveError,
    UnknownFilterError,
    VariableValidationError,
)

__all__ = [
    "ErrorContext",
    "PromptEngError",
    "TemplateSyntaxError",
    "UnclosedTagError",
    "UnknownDirectiveError",
    "UnknownFilterError",
    "TemplateNotFoundError",
    "TemplateLoadError",
    "VariableValidationError",
    "TestConfigError",
    "ProviderError",
]
