# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Tests for Template parsing and rendering"""

import pytest

from filterbox.core.config import FilterBoxConfig, set_config
from filterbox.core.context import RenderContext
from filterbox.core.exceptions import (
    ArgumentCountError,
    ConfigError,
    FilterExecutionError,
    FilterNotFoundError,
    TemplateSyntaxError,
)
from filterbox.core.registry import GlobalFilterRegistry
from filterbox.core.template import RenderParameters, Template, Variable, to_output

from sample_filters import CanadianMoneyFilter, FailingFilters, MoneyFilter


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (12, "12"),
        (1.5, "1.5"),
        (["a", 1, None, ["b"]], "a1b"),
        ("text", "text"),
    ],
)
def test_to_output(value, expected):
    assert to_output(value) == expected


class TestParse:
    def test_text_only(self):
        template = Template.parse("no markup here")
        assert template.nodes == ["no markup here"]
        assert template.render() == "no markup here"

    def test_nodes_split(self):
        template = Template.parse("Hi {{ name }}, you owe {{ 5 | plus: 1 }}.")
        assert [type(node) for node in template.nodes] == [str, Variable, str, Variable, str]
        assert template.nodes[1].markup == "name"
        assert template.nodes[3].filter_names == ["plus"]

    def test_unclosed_tag(self):
        with pytest.raises(TemplateSyntaxError, match="never closed"):
            Template.parse("Hi {{ name")

    def test_invalid_markup(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Template.parse("{{ name | }}")
        assert exc_info.value.markup == "name |"

    def test_unknown_filter_is_not_a_parse_error(self):
        template = Template.parse("{{ name | nope }}")
        assert template.nodes[0].filter_names == ["nope"]

    def test_closing_braces_inside_quotes(self):
        template = Template.parse("{{ 'a' | append: '}}' }}|{{ 'b' | prepend: \"{{\" }}")
        assert len(template.nodes) == 3
        assert template.render() == "a}}|{{b"

    def test_unterminated_quote_leaves_tag_unclosed(self):
        with pytest.raises(TemplateSyntaxError, match="never closed") as exc_info:
            Template.parse("{{ 'a }} and {{ b }}")
        assert exc_info.value.markup.startswith("{{ 'a")


class TestRender:
    def test_variables(self):
        template = Template.parse("Hello {{ user.name | upcase }}!")
        assert template.render({"user": {"name": "tobi"}}) == "Hello TOBI!"

    def test_missing_variable_renders_empty(self):
        assert Template.parse("[{{ missing }}]").render() == "[]"

    def test_global_filter(self):
        Template.register_filter(MoneyFilter)
        assert Template.parse("{{ 1000 | money }}").render() == " 1000$ "

    def test_render_override_is_not_persisted(self):
        Template.register_filter(MoneyFilter)
        template = Template.parse("{{ 1000 | money }}")

        overridden = template.render(parameters=RenderParameters(filters=[CanadianMoneyFilter]))
        assert overridden == " 1000$ CAD "
        assert template.render() == " 1000$ "

    def test_render_context_with_local_filters(self):
        context = RenderContext({"var": 1000})
        context.add_filters(CanadianMoneyFilter)
        assert Template.parse("{{ var | money }}").render_context(context) == " 1000$ CAD "

    def test_private_registry(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        registry.register(MoneyFilter)
        template = Template.parse("{{ 1 | money }}")

        assert template.render(parameters=RenderParameters(registry=registry)) == " 1$ "
        with pytest.raises(FilterNotFoundError):
            Template.parse("{{ 'a' | upcase }}").render(parameters=RenderParameters(registry=registry))

    def test_strict_is_default(self):
        with pytest.raises(FilterNotFoundError):
            Template.parse("{{ 1 | nope }}").render()

    def test_error_mode_from_config(self):
        set_config(FilterBoxConfig(rendering={"error_mode": "lax"}))
        template = Template.parse("a{{ 1 | nope }}b")
        assert template.render() == "ab"
        assert len(template.errors) == 1

    @pytest.mark.parametrize("error_mode", ["STRICT", "Strict"])
    def test_error_mode_is_case_insensitive(self, error_mode):
        with pytest.raises(FilterNotFoundError):
            Template.parse("{{ 1 | nope }}").render(parameters=RenderParameters(error_mode=error_mode))

    @pytest.mark.parametrize("error_mode", ["stirct", "", "ignore"])
    def test_unknown_error_mode_rejected(self, error_mode):
        with pytest.raises(ConfigError, match="Invalid error mode"):
            Template.parse("{{ 1 | nope }}").render(parameters=RenderParameters(error_mode=error_mode))


class TestLaxMode:
    @pytest.fixture
    def lax(self):
        return RenderParameters(error_mode="lax")

    def test_errors_collected(self, lax):
        template = Template.parse("{{ 1 | nope }}|{{ 'x' | upcase }}|{{ 1 | append }}")
        assert template.render(parameters=lax) == "|X|"

        assert [type(error) for error in template.errors] == [FilterNotFoundError, ArgumentCountError]
        assert template.errors[0].filter_name == "nope"

    def test_errors_reset_between_renders(self, lax):
        template = Template.parse("{{ 1 | nope }}")
        template.render(parameters=lax)
        template.render(parameters=lax)
        assert len(template.errors) == 1

    def test_shared_context_reports_only_current_render(self):
        context = RenderContext(error_mode="lax")
        Template.parse("{{ 1 | nope }}").render_context(context)

        second = Template.parse("{{ 1 | missing_too }}|{{ 'x' | upcase }}")
        assert second.render_context(context) == "|X"
        assert [error.filter_name for error in second.errors] == ["missing_too"]
        assert len(context.errors) == 2

    def test_execution_error_is_fatal(self, lax):
        template = Template.parse("{{ 1 | explode }}")
        lax.filters.append(FailingFilters)

        with pytest.raises(FilterExecutionError) as exc_info:
            template.render(parameters=lax)
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert template.errors == []

    def test_strict_mode_records_nothing(self):
        template = Template.parse("{{ 1 | nope }}")
        with pytest.raises(FilterNotFoundError):
            template.render(parameters=RenderParameters(error_mode="strict"))
        assert template.errors == []
