"""
Prompteng completion providers.
"""

from prompteng.providers.base import (
    CompletionOptions,
    CompletionProvider,
    CompletionResult,
    TokenUsage,
)
from prompteng.providers.chat_model import ChatModelProvider

__all__ = [
    "ChatModelProvider",
    "CompletionOptions",
    "CompletionProvider",
    "CompletionResult",
    "TokenUsage",
]
