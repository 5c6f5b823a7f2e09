"""
Tests for PromptEngine: named templates, validation, and multi-output rendering.
"""

import logging

import pytest

from prompteng.engine import EngineOptions, PromptEngine
from prompteng.exceptions import (
    TemplateLoadError,
    TemplateNotFoundError,
    UnclosedTagError,
    VariableValidationError,
)
from prompteng.templates.models import PromptTemplate, VariableDefinition


class TestLoading:
    """Tests for registering templates."""

    def test_loads_directory(self, engine):
        assert sorted(engine.list_templates()) == ["greet", "with-system"]
        assert engine.get_template("greet").metadata.description == "Greets a user"
        assert engine.get_template("missing") is None

    def test_in_memory_sources(self):
        engine = PromptEngine(sources={"inline": "---\ndescription: x\n---\nHi {{ who }}"})
        assert engine.list_templates() == ["inline"]
        assert engine.render("inline", {"who": "there"}) == "Hi there"

    def test_add_source_returns_template(self):
        engine = PromptEngine()
        template = engine.add_source("---\nname: late\n---\nLate")
        assert template.name == "late"
        assert engine.render("late") == "Late"

    def test_add_source_invalid(self):
        with pytest.raises(TemplateLoadError):
            PromptEngine().add_source("no frontmatter", name="bad")

    def test_add_template_replaces(self, engine):
        engine.add_template(PromptTemplate(name="greet", content="Replaced"))
        assert engine.render("greet") == "Replaced"

    def test_custom_extension(self, template_dir):
        engine = PromptEngine(template_dir, options=EngineOptions(template_extension=".txt"))
        assert engine.list_templates() == ["notes"]


class TestRendering:
    """Tests for rendering templates by name."""

    def test_render_applies_defaults(self, engine):
        assert engine.render("greet", {"name": "Ada"}) == "Hello Ada!"

    def test_caller_value_overrides_default(self, engine):
        assert engine.render("greet", {"name": "Ada", "punctuation": "?"}) == "Hello Ada?"

    def test_defaults_disabled(self, template_dir):
        engine = PromptEngine(template_dir, options=EngineOptions(apply_defaults=False))
        assert engine.render("greet", {"name": "Ada"}) == "Hello Ada"

    def test_unknown_template(self, engine):
        with pytest.raises(TemplateNotFoundError, match="Template 'nope' not found."):
            engine.render("nope")

    def test_render_with_meta(self, engine):
        result = engine.render_with_meta("with-system", {"topic": "tides"})
        assert result.sections == {
            "system": "You are a helpful assistant.",
            "prompt": "Summarize: tides",
        }
        assert result.text.strip() == ""

    def test_render_multi_with_sections(self, engine):
        assert engine.render_multi("with-system", {"topic": "tides"}) == {
            "system": "You are a helpful assistant.",
            "prompt": "Summarize: tides",
        }

    def test_render_multi_without_sections(self, engine):
        assert engine.render_multi("greet", {"name": "Ada"}) == {"prompt": "Hello Ada!"}

    def test_custom_filter_and_directive(self, engine):
        engine.register_filter("reverse_text", lambda value: str(value)[::-1])
        engine.register_directive("quote", lambda value, context: f'"{value}"')
        engine.add_source("---\nname: custom\n---\n{{ word | reverse_text }} {% quote word %}")
        assert engine.render("custom", {"word": "abc"}) == 'cba "abc"'

    def test_parse_error_names_template(self):
        engine = PromptEngine(sources={"oops": "---\nname: oops\n---\n{% section s %}"})
        with pytest.raises(UnclosedTagError) as exc_info:
            engine.render("oops")
        assert "in template 'oops'" in str(exc_info.value)


class TestVariableValidation:
    """Tests for required-variable checks."""

    def test_validate_variables(self, engine):
        assert engine.validate_variables("greet", {"name": "Ada"}).valid is True
        result = engine.validate_variables("greet", {})
        assert result.valid is False
        assert result.errors == ["Missing required variable: 'name'"]

    def test_validate_unknown_template(self, engine):
        with pytest.raises(TemplateNotFoundError):
            engine.validate_variables("nope", {})

    def test_lenient_mode_warns_and_renders(self, engine, caplog):
        with caplog.at_level(logging.WARNING):
            assert engine.render("greet") == "Hello !"
        assert "Missing required variable: 'name'" in caplog.text

    def test_strict_mode_raises(self, template_dir):
        engine = PromptEngine(template_dir, options=EngineOptions(strict_variables=True))
        with pytest.raises(VariableValidationError) as exc_info:
            engine.render("greet")
        assert exc_info.value.errors == ["Missing required variable: 'name'"]


class TestTypeDefinitions:
    def test_generate_for_loaded_templates(self, engine):
        source = engine.generate_type_definitions()
        assert "class GreetVariables(TypedDict, total=False):" in source
        assert "    name: Required[str]  # Who to greet" in source
        assert "    punctuation: NotRequired[str]" in source
        assert "WithSystemVariables" not in source

    def test_generate_with_inline_template(self):
        engine = PromptEngine()
        engine.add_template(
            PromptTemplate(
                name="code-review",
                content="",
                variables=[VariableDefinition(name="files", type="array", required=True)],
            )
        )
        assert "class CodeReviewVariables" in engine.generate_type_definitions()
