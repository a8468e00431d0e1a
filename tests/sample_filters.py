# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Filter providers shared by the test-suite (also imported by CLI tests)"""

from filterbox.core.definitions import context_filter, filter_function


class MoneyFilter:
    @staticmethod
    def money(input):
        return f" {input}$ "

    @staticmethod
    def money_with_underscore(input):
        return f" {input}$ "


class CanadianMoneyFilter:
    @staticmethod
    def money(input):
        return f" {input}$ CAD "


class FiltersWithArguments:
    @staticmethod
    def adjust(input: int, offset: int = 10):
        return f"[{input + offset}]"

    @staticmethod
    def add_sub(input: int, plus: int, minus: int = 20):
        return f"[{input + plus - minus}]"


class FiltersWithMultipleMethodSignatures:
    @staticmethod
    @filter_function(name="concat")
    def concat_two(one: str, two: str):
        return one + two

    @staticmethod
    @filter_function(name="concat")
    def concat_three(one: str, two: str, three: str):
        return one + two + three


class FiltersWithMultipleMethodSignaturesAndContextParam:
    @staticmethod
    @context_filter(name="concat_with_context")
    def concat_with_context_two(context, one: str, two: str):
        return one + two

    @staticmethod
    @context_filter(name="concat_with_context")
    def concat_with_context_three(context, one: str, two: str, three: str):
        return one + two + three


class ContextFilters:
    @staticmethod
    @context_filter
    def bank_statement(context, input):
        return f" {context['name']} has {input}$ "


class FailingFilters:
    @staticmethod
    def explode(input):
        raise RuntimeError("boom")
