# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Tests for scoped filter lookup and copy-on-write snapshots"""

import threading

import pytest

from filterbox.core.context import RenderContext, attach_context_filters
from filterbox.core.exceptions import FilterNotFoundError
from filterbox.core.registry import FilterScope, GlobalFilterRegistry, get_registry, register_global_filters
from filterbox.core.template import Variable

from sample_filters import CanadianMoneyFilter, FiltersWithArguments, MoneyFilter


def _money_result(scope_or_registry, name="money"):
    overloads = scope_or_registry.lookup(name)
    return overloads[0].func(1000)


class TestGlobalRegistry:
    """Process-wide registration"""

    def test_standard_filters_registered_at_start(self):
        registry = GlobalFilterRegistry()
        assert "size" in registry.names()
        assert registry.snapshot().version == 1

    def test_without_standard_filters(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        assert registry.names() == []
        assert registry.lookup("size") is None

    def test_last_registration_wins(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        registry.register(MoneyFilter)
        registry.register(CanadianMoneyFilter)
        assert _money_result(registry) == " 1000$ CAD "

    def test_later_provider_only_replaces_names_it_defines(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        registry.register(MoneyFilter)
        registry.register(CanadianMoneyFilter)
        assert _money_result(registry, "money_with_underscore") == " 1000$ "

    def test_registration_publishes_new_snapshot(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        before = registry.snapshot()
        registry.register(MoneyFilter)
        after = registry.snapshot()

        assert before is not after
        assert after.version == before.version + 1
        assert before.lookup("money") is None
        assert after.lookup("money") is not None

    def test_registration_order_is_stamped(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        registry.register(MoneyFilter)
        registry.register(CanadianMoneyFilter)
        assert [p.order for p in registry.snapshot().providers] == [0, 1]

    def test_reset_drops_registrations(self):
        registry = GlobalFilterRegistry()
        registry.register(MoneyFilter)
        registry.reset()
        assert registry.lookup("money") is None
        assert registry.lookup("size") is not None

    def test_concurrent_registration(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        start = registry.snapshot().version

        def make(i):
            def value(input):
                return i
            return value

        threads = [
            threading.Thread(target=registry.register, args=({f"value_{i}": make(i)},))
            for i in range(16)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = registry.snapshot()
        assert snapshot.version == start + 16
        assert len(snapshot.providers) == 16
        assert all(snapshot.lookup(f"value_{i}")[0].func(None) == i for i in range(16))

    def test_module_level_helpers_use_singleton(self):
        register_global_filters(MoneyFilter)
        assert get_registry().lookup("money") is not None


class TestFilterScope:
    """Per-render precedence: local, then overrides, then global"""

    @pytest.fixture
    def registry(self):
        registry = GlobalFilterRegistry(register_standard_filters=False)
        registry.register(MoneyFilter)
        return registry

    def test_global_only(self, registry):
        scope = FilterScope(registry.snapshot())
        assert _money_result(scope) == " 1000$ "

    def test_override_beats_global(self, registry):
        scope = FilterScope(registry.snapshot(), overrides=[CanadianMoneyFilter])
        assert _money_result(scope) == " 1000$ CAD "

    def test_override_is_not_written_back(self, registry):
        FilterScope(registry.snapshot(), overrides=[CanadianMoneyFilter])
        assert _money_result(registry) == " 1000$ "

    def test_local_beats_override_and_global(self, registry):
        scope = FilterScope(registry.snapshot(), overrides=[CanadianMoneyFilter])
        scope.attach_local({"money": lambda input: "local"})
        assert _money_result(scope) == "local"

    def test_latest_local_wins(self, registry):
        scope = FilterScope(registry.snapshot())
        scope.attach_local(CanadianMoneyFilter)
        scope.attach_local(MoneyFilter)
        assert _money_result(scope) == " 1000$ "
        assert [p.order for p in scope.local_providers] == [0, 1]

    def test_no_overload_merging_across_scopes(self, registry):
        registry.register(FiltersWithArguments)
        scope = FilterScope(registry.snapshot())
        scope.attach_local({"adjust": lambda input: "local"})
        # global adjust takes one optional argument; only the local overload is visible
        assert [d.total_params for d in scope.lookup("adjust")] == [0]

    def test_names_union(self, registry):
        scope = FilterScope(registry.snapshot(), overrides=[FiltersWithArguments])
        scope.attach_local({"shout": lambda input: input})
        assert scope.names() == ["add_sub", "adjust", "money", "money_with_underscore", "shout"]


class TestSnapshotIsolation:
    """A render keeps the snapshot it started with"""

    def test_context_does_not_see_later_global_registration(self):
        context = RenderContext(error_mode="strict")
        register_global_filters(MoneyFilter)

        with pytest.raises(FilterNotFoundError):
            Variable("1000 | money").render(context)
        assert Variable("1000 | money").render(RenderContext(error_mode="strict")) == " 1000$ "

    def test_local_filters_do_not_leak_between_contexts(self):
        first = RenderContext(error_mode="strict")
        attach_context_filters(first, MoneyFilter)
        second = RenderContext(error_mode="strict")

        assert Variable("1000 | money").render(first) == " 1000$ "
        with pytest.raises(FilterNotFoundError):
            Variable("1000 | money").render(second)
