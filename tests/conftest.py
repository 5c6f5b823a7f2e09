"""
Shared test fixtures and utilities for the prompteng test suite.
"""

from unittest.mock import Mock

import pytest

from prompteng.engine import PromptEngine
from prompteng.providers.base import CompletionProvider, CompletionResult, TokenUsage
from prompteng.templates.renderer import TemplateRenderer


@pytest.fixture
def renderer():
    """Fresh renderer with only the built-in filters and directives."""
    return TemplateRenderer()


@pytest.fixture
def render(renderer):
    """Shortcut rendering template text to its primary output.

    Usage:
        def test_something(render):
            assert render("{{ x }}", {"x": 1}) == "1"
    """

    def _render(text, variables=None):
        return renderer.render(text, variables or {})

    return _render


class CannedProvider(CompletionProvider):
    """Completion provider returning a fixed response and recording prompts."""

    def __init__(self, name="mock", response="", models=None, error=None):
        self.name = name
        self.models = models or ["mock-model"]
        self.response = response
        self.error = error
        self.prompts = []
        self.options = []

    def complete(self, prompt, options):
        self.prompts.append(prompt)
        self.options.append(options)
        if self.error is not None:
            raise self.error
        return CompletionResult(text=self.response, token_usage=TokenUsage(prompt=3, completion=5, total=8))

    def get_max_tokens(self, model):
        return 4096


@pytest.fixture
def make_provider():
    """Factory for canned completion providers."""
    return CannedProvider


@pytest.fixture
def canned_provider():
    return CannedProvider(response="Hello Ada, welcome aboard.")


@pytest.fixture
def template_dir(tmp_path):
    """Directory with two valid templates, one broken file, and one unrelated file."""
    (tmp_path / "greet.ptemplate").write_text(
        "---\n"
        "name: greet\n"
        "description: Greets a user\n"
        "variables:\n"
        "  - name: name\n"
        "    type: string\n"
        "    required: true\n"
        "    description: Who to greet\n"
        "  - name: punctuation\n"
        "    default: '!'\n"
        "---\n"
        "Hello {{ name }}{{ punctuation }}\n",
        encoding="utf-8",
    )
    (tmp_path / "with-system.ptemplate").write_text(
        "---\n"
        "name: with-system\n"
        "---\n"
        "{% section system %}You are a helpful assistant.{% endsection %}\n"
        "{% section prompt %}Summarize: {{ topic }}{% endsection %}\n",
        encoding="utf-8",
    )
    (tmp_path / "broken.ptemplate").write_text("no frontmatter here", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("---\nname: notes\n---\nignored", encoding="utf-8")
    return tmp_path


@pytest.fixture
def engine(template_dir):
    return PromptEngine(template_dir)


@pytest.fixture
def mock_llm_provider():
    """Mock LLMProvider whose get_llm returns a Mock chat model.

    Usage:
        def test_something(mock_llm_provider):
            mock_llm_provider.get_llm.return_value.invoke.return_value = AIMessage(content="hi")
    """
    provider = Mock()
    provider.list_models.return_value = ["fast", "smart"]
    return provider
