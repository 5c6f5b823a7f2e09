"""
Completion provider backed by LangChain chat models.

Models are resolved by logical name through ``LLMProvider``, so the same
provider class serves OpenAI, Anthropic and Google models.
"""

import logging

from langchain_core.messages import BaseMessage, HumanMessage
from langchain_core.rate_limiters import BaseRateLimiter

from prompteng.exceptions import ProviderError
from prompteng.models import LLMProvider
from prompteng.providers.base import (
    CompletionOptions,
    CompletionProvider,
    CompletionResult,
    TokenUsage,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096

MODEL_MAX_TOKENS = {
    "gpt-3.5-turbo": 16385,
    "gpt-4": 8192,
    "gpt-4-turbo": 128000,
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    "claude-3-5-sonnet-latest": 200000,
    "claude-3-5-haiku-latest": 200000,
    "gemini-1.5-pro": 2097152,
    "gemini-1.5-flash": 1048576,
}


def message_text(message: BaseMessage) -> str:
    """Plain text of a chat message whose content may be a list of content blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatModelProvider(CompletionProvider):
    """
    Provider that sends the prompt as a single human message.

    Params:
        name: Provider name matched against test file entries (e.g. ``openai``)
        llm_provider: Registry resolving logical model names to chat models
        rate_limiter: Optional limiter passed to every instantiated model
    """

    def __init__(
        self,
        name: str,
        llm_provider: LLMProvider,
        rate_limiter: BaseRateLimiter | None = None,
    ):
        self.name = name
        self.llm_provider = llm_provider
        self.rate_limiter = rate_limiter

    @property
    def models(self) -> list[str]:
        return self.llm_provider.list_models()

    def complete(self, prompt: str, options: CompletionOptions) -> CompletionResult:
        try:
            llm = self.llm_provider.get_llm(
                options.model,
                rate_limiter=self.rate_limiter,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
            )
            response = llm.invoke([HumanMessage(content=prompt)])
        except Exception as e:
            raise ProviderError(self.name, str(e)) from e

        usage = getattr(response, "usage_metadata", None) or {}
        token_usage = TokenUsage(
            prompt=usage.get("input_tokens", 0),
            completion=usage.get("output_tokens", 0),
            total=usage.get("total_tokens", 0),
        )
        logger.debug(f"{self.name} ({options.model}) completion used {token_usage.total} tokens")
        return CompletionResult(text=message_text(response), token_usage=token_usage)

    def get_max_tokens(self, model: str) -> int:
        """
        Context window size for a logical or concrete model name.

        Unregistered names are looked up directly in the known-model table.
        """
        if model in self.llm_provider.list_models():
            model = self.llm_provider.get_model_param(model).model
        return MODEL_MAX_TOKENS.get(model, DEFAULT_MAX_TOKENS)
