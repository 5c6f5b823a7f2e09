"""
Completion provider abstraction.

A provider turns a rendered prompt into a completion. The test runner only
depends on this interface, so tests can swap in a canned provider.
"""

import math
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class CompletionOptions(BaseModel):
    """Per-call model selection and sampling parameters."""

    model: str
    temperature: float | None = None
    max_tokens: int | None = None


class TokenUsage(BaseModel):
    prompt: int = 0
    completion: int = 0
    total: int = 0


class CompletionResult(BaseModel):
    text: str
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


class CompletionProvider(ABC):
    """
    Base class for completion providers.

    Subclasses set ``name`` (matched against provider names in test files)
    and ``models`` (the first entry is the default model).
    """

    name: str
    models: list[str]

    @abstractmethod
    def complete(self, prompt: str, options: CompletionOptions) -> CompletionResult:
        """
        Send a prompt to the model named in ``options``.

        Raises:
            ProviderError: If the underlying API call fails
        """

    @abstractmethod
    def get_max_tokens(self, model: str) -> int:
        """Context window size for a model."""

    def estimate_tokens(self, text: str) -> int:
        # Rough approximation: ~4 characters per token
        return math.ceil(len(text) / 4)
