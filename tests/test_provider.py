# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Tests for FilterProvider introspection"""

import types

import pytest

from filterbox.core.context import RenderContext
from filterbox.core.definitions import FilterDefinition, context_filter, filter_function
from filterbox.core.exceptions import FilterRegistrationError
from filterbox.core.provider import FilterProvider
from filterbox.core.template import Variable

from sample_filters import FiltersWithMultipleMethodSignatures, MoneyFilter


class TestFromSource:
    """Every supported provider source shape"""

    def test_class_static_methods(self):
        provider = FilterProvider.from_source(MoneyFilter)
        assert provider.name == "MoneyFilter"
        assert provider.names() == ["money", "money_with_underscore"]

    def test_class_skips_private_and_plain_attributes(self):
        class Filters:
            CURRENCY = "$"

            @staticmethod
            def _helper(input):
                return input

            @staticmethod
            def price(input):
                return f"{input}{Filters.CURRENCY}"

            @classmethod
            def tagged(cls, input):
                return f"{cls.__name__}:{input}"

        provider = FilterProvider.from_source(Filters)
        assert provider.names() == ["price", "tagged"]
        tagged = provider.get("tagged")[0]
        assert tagged.total_params == 0
        assert tagged.func("x") == "Filters:x"

    def test_mapping(self):
        provider = FilterProvider.from_source({"Shout": lambda input: input.upper()}, name="inline")
        assert provider.name == "inline"
        assert provider.names() == ["shout"]

    def test_list_of_callables(self):
        def first(input):
            return input[0]

        def last(input):
            return input[-1]

        assert FilterProvider.from_source([first, last]).names() == ["first", "last"]

    def test_single_function(self):
        def money(input):
            return input

        provider = FilterProvider.from_source(money)
        assert provider.name == "money"
        assert "money" in provider

    def test_module_functions(self):
        module = types.ModuleType("custom_filters")

        def shout(input):
            return input.upper()

        shout.__module__ = "custom_filters"
        module.shout = shout
        module._private = shout
        module.imported = len

        assert FilterProvider.from_source(module).names() == ["shout"]

    def test_module_all_restricts_exports(self):
        module = types.ModuleType("exported_filters")

        def one(input):
            return 1

        def two(input):
            return 2

        one.__module__ = two.__module__ = "exported_filters"
        module.one, module.two = one, two
        module.__all__ = ["two"]

        assert FilterProvider.from_source(module).names() == ["two"]

    def test_instance_bound_methods(self):
        class Greeter:
            def __init__(self, greeting):
                self.greeting = greeting

            def greet(self, input):
                return f"{self.greeting}, {input}"

        provider = FilterProvider.from_source(Greeter("Hello"))
        definition = provider.get("greet")[0]
        assert definition.total_params == 0
        assert definition.func("Kong") == "Hello, Kong"

    def test_provider_passes_through(self):
        provider = FilterProvider.from_source(MoneyFilter)
        assert FilterProvider.from_source(provider) is provider

    def test_empty_source_is_rejected(self):
        class Empty:
            pass

        with pytest.raises(FilterRegistrationError, match="defines no filters"):
            FilterProvider.from_source(Empty)

    def test_non_callable_mapping_value_is_rejected(self):
        with pytest.raises(FilterRegistrationError, match="non-callable"):
            FilterProvider.from_source({"money": "not callable"})


class TestOverloads:
    """Overload sets inside one provider"""

    def test_overloads_grouped_and_ordered_by_arity(self):
        provider = FilterProvider.from_source(FiltersWithMultipleMethodSignatures)
        assert provider.names() == ["concat"]
        assert [d.total_params for d in provider.get("concat")] == [1, 2]
        assert len(provider) == 2

    def test_duplicate_arity_is_rejected(self):
        @filter_function(name="concat")
        def concat_a(one, two):
            return one + two

        @filter_function(name="concat")
        def concat_b(one, two):
            return two + one

        with pytest.raises(FilterRegistrationError, match="twice"):
            FilterProvider("dupes", [FilterDefinition.from_callable(concat_a), FilterDefinition.from_callable(concat_b)])

    def test_with_order_keeps_definitions(self):
        provider = FilterProvider.from_source(MoneyFilter)
        stamped = provider.with_order(3)
        assert stamped.order == 3
        assert provider.order is None
        assert stamped.definitions == provider.definitions
        assert stamped.get("money") == provider.get("money")


class TestDecoratorOrder:
    """Filter metadata survives either stacking order with @staticmethod/@classmethod"""

    def test_context_filter_above_staticmethod(self):
        class Filters:
            @context_filter
            @staticmethod
            def bank_statement(context, input):
                return f"{context['name']} has {input}"

        definition = FilterProvider.from_source(Filters).get("bank_statement")[0]
        assert definition.takes_context is True
        assert definition.total_params == 0

        context = RenderContext({"name": "King Kong", "var": 1000}, error_mode="strict")
        context.add_filters(Filters)
        assert Variable("var | bank_statement").render(context) == "King Kong has 1000"

    def test_context_filter_below_staticmethod(self):
        class Filters:
            @staticmethod
            @context_filter
            def bank_statement(context, input):
                return f"{context['name']} has {input}"

        definition = FilterProvider.from_source(Filters).get("bank_statement")[0]
        assert definition.takes_context is True

    def test_overload_name_above_staticmethod(self):
        class Filters:
            @filter_function(name="concat")
            @staticmethod
            def concat_two(one, two):
                return one + two

            @filter_function(name="concat")
            @staticmethod
            def concat_three(one, two, three):
                return one + two + three

        provider = FilterProvider.from_source(Filters)
        assert provider.names() == ["concat"]
        assert [d.total_params for d in provider.get("concat")] == [1, 2]

    def test_context_filter_above_classmethod(self):
        class Filters:
            @context_filter(name="labelled")
            @classmethod
            def label(cls, context, input):
                return f"{cls.__name__}:{input}"

        definition = FilterProvider.from_source(Filters).get("labelled")[0]
        assert definition.takes_context is True
        assert definition.total_params == 0
