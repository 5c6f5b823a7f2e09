"""
Tests for the render driver: caching, purity, isolation, and determinism.
"""

import pytest

from prompteng.exceptions import TemplateSyntaxError, UnclosedTagError
from prompteng.rendering.context import RenderMetadata
from prompteng.templates.renderer import DEFAULT_CACHE_SIZE, RenderResult, TemplateRenderer

MULTI_OUTPUT = (
    "{% section system %}You are {{ persona | default: 'helpful' }}.{% endsection %}\n"
    "{% section prompt %}Describe {{ topic }}. {% must_include_each keywords %}{% endsection %}\n"
    "Footer"
)


class TestRender:
    """Tests for render and render_with_meta."""

    def test_plain_substitution(self, renderer):
        assert renderer.render("Hello {{ name }}", {"name": "Ada"}) == "Hello Ada"

    def test_variables_optional(self, renderer):
        assert renderer.render("Hello {{ name }}") == "Hello "

    def test_no_sections_matches_render(self, renderer):
        source = "{% for x in xs %}{{ x | upper }} {% endfor %}{% if flag %}on{% endif %}"
        variables = {"xs": ["a", "b"], "flag": True}
        result = renderer.render_with_meta(source, variables)
        assert result.sections == {}
        assert result.constraints == []
        assert result.text == renderer.render(source, variables)

    def test_result_defaults(self, renderer):
        result = renderer.render_with_meta("text")
        assert isinstance(result, RenderResult)
        assert isinstance(result.meta, RenderMetadata)
        assert result.sections == {}
        assert result.constraints == []

    def test_multi_output(self, renderer):
        result = renderer.render_with_meta(MULTI_OUTPUT, {"topic": "tides", "keywords": ["moon", "gravity"]})
        assert result.sections["system"] == "You are helpful."
        assert result.sections["prompt"].startswith("Describe tides. IMPORTANT:")
        assert "moon, gravity" in result.sections["prompt"]
        assert result.text.strip() == "Footer"
        assert [c.words for c in result.constraints] == [("moon", "gravity")]

    def test_inputs_not_mutated(self, renderer):
        variables = {"items": [3, 1, 2], "name": "x"}
        renderer.render("{% assign name = 'y' %}{{ items | sort | join }}{% capture c %}z{% endcapture %}", variables)
        assert variables == {"items": [3, 1, 2], "name": "x"}

    def test_parse_error_aborts_render(self, renderer):
        with pytest.raises(UnclosedTagError, match="section prompt"):
            renderer.render_with_meta("Intro {% section prompt %}never closed", {})

    def test_template_name_in_errors(self, renderer):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            renderer.render("{% bogus %}", template_name="greet")
        assert "in template 'greet'" in str(exc_info.value)


class TestParseCache:
    """Tests for parse-once caching."""

    def test_same_text_parsed_once(self, renderer):
        first = renderer.parse("{{ a }}")
        assert renderer.parse("{{ a }}") is first
        assert renderer.parse("{{ b }}") is not first

    def test_clear_cache(self, renderer):
        first = renderer.parse("{{ a }}")
        renderer.clear_cache()
        assert renderer.parse("{{ a }}") is not first

    def test_cache_disabled(self):
        renderer = TemplateRenderer(cache=False)
        assert renderer.parse("{{ a }}") is not renderer.parse("{{ a }}")
        assert renderer.cached_count() == 0

    def test_default_size_is_bounded(self, renderer):
        assert renderer.cache_size == DEFAULT_CACHE_SIZE
        for index in range(DEFAULT_CACHE_SIZE + 500):
            assert renderer.render(f"item {index}: {{{{ x }}}}", {"x": "v"}) == f"item {index}: v"
        assert renderer.cached_count() == DEFAULT_CACHE_SIZE

    def test_least_recently_used_evicted(self):
        renderer = TemplateRenderer(cache_size=2)
        first = renderer.parse("{{ a }}")
        second = renderer.parse("{{ b }}")
        assert renderer.parse("{{ a }}") is first
        renderer.parse("{{ c }}")

        assert renderer.cached_count() == 2
        assert renderer.parse("{{ a }}") is first
        assert renderer.parse("{{ b }}") is not second

    def test_invalid_cache_size(self):
        with pytest.raises(ValueError, match="cache_size must be positive"):
            TemplateRenderer(cache_size=0)


class TestIsolation:
    """Tests that separate renders never share mutable state."""

    def test_metadata_not_leaked_between_calls(self, renderer):
        source = "{% if on %}{% section s %}{{ v }}{% endsection %}{% must_include_each v %}{% endif %}"
        first = renderer.render_with_meta(source, {"on": True, "v": "one"})
        second = renderer.render_with_meta(source, {"on": False, "v": "two"})
        third = renderer.render_with_meta(source, {"on": True, "v": "three"})

        assert first.sections == {"s": "one"}
        assert [c.words for c in first.constraints] == [("one",)]
        assert second.sections == {}
        assert second.constraints == []
        assert third.sections == {"s": "three"}
        assert first.meta is not third.meta
        assert first.sections is not third.sections

    def test_assignments_not_leaked_between_calls(self, renderer):
        source = "[{{ x }}]{% assign x = 'set' %}"
        assert renderer.render(source) == "[]"
        assert renderer.render(source) == "[]"

    def test_deterministic(self, renderer):
        variables = {"topic": "tides", "keywords": "moon, sun"}
        first = renderer.render_with_meta(MULTI_OUTPUT, variables)
        second = renderer.render_with_meta(MULTI_OUTPUT, variables)
        assert first.text == second.text
        assert first.sections == second.sections
        assert first.constraints == second.constraints
