from enum import Enum

from attrs import frozen
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.rate_limiters import BaseRateLimiter
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI


class Provider(Enum):
    anthropic = "anthropic"
    google = "google"
    openai = "openai"


@frozen
class ModelParam:
    provider: Provider
    model: str
    temperature: float | None = None
    max_tokens: int | None = None


chat_models_classes = {
    Provider.openai: ChatOpenAI,
    Provider.google: ChatGoogleGenerativeAI,
    Provider.anthropic: ChatAnthropic,
}


class LLMProvider:
    """Registry/factory for chat model instances keyed by logical model name.

    Responsibilities:
      - Maintain a mutable mapping of model name -> `ModelParam` config.
      - Instantiate provider specific LangChain chat classes on demand.

    Notes:
      - Per-call `temperature` / `max_tokens` override the registered values,
        so a test case can tune sampling without registering a new model.
      - Does not cache instantiated models; callers decide lifecycle management.
    """

    def __init__(self, default_model_params: dict[str, ModelParam] | None = None):
        self._model_params = (default_model_params or {}).copy()

    def _require(self, name: str) -> ModelParam:
        if name not in self._model_params:
            raise KeyError(
                f"Model {name} is not defined in the provider. Available models: {self.list_models()}"
            )
        return self._model_params[name]

    def get_model_param(self, name: str) -> ModelParam:
        """Get the registered configuration for a model.

        Raises:
            KeyError: If the model name is not registered.
        """
        return self._require(name)

    def get_llm(
        self,
        name: str,
        rate_limiter: BaseRateLimiter | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> BaseChatModel:
        """Get a chat (LLM) model by its registered name.

        Params:
            name: Logical model key registered in provider configuration.
            rate_limiter: Optional rate limiter to throttle API calls.
            temperature: Overrides the registered temperature when given.
            max_tokens: Overrides the registered completion limit when given.

        Returns:
            Instantiated chat model (`BaseChatModel`).

        Raises:
            KeyError: If the model name is not registered.
        """
        model_params = self._require(name)
        model_class = chat_models_classes[model_params.provider]

        kwargs = {
            "model": model_params.model,
            "temperature": temperature if temperature is not None else model_params.temperature,
            "rate_limiter": rate_limiter,
        }
        limit = max_tokens if max_tokens is not None else model_params.max_tokens
        if limit is not None:
            kwargs["max_tokens"] = limit
        return model_class(**kwargs)

    def list_models(self) -> list[str]:
        """List all registered model keys."""
        return list(self._model_params.keys())

    def update_model(self, name: str, model_params: ModelParam) -> None:
        """Update configuration for an existing model.

        Params:
            name: Existing model key to update.
            model_params: New parameter set.

        Raises:
            KeyError: If the model name is not registered.
        """
        self._require(name)
        self.set_model(name, model_params)

    def set_model(self, name: str, model_params: ModelParam) -> None:
        """Insert a new model configuration or overwrite an existing one."""
        self._model_params[name] = model_params
