"""Tests for provider specs and the providers registry."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from fixturewire import Fixture, FixtureInvalidRegistrationError, ResolutionContext
from fixturewire._internal.providers import ProviderSpec, ProvidersRegistrations


def _context(fixture: Fixture) -> ResolutionContext:
    return ResolutionContext(fixture, target_type=int)


class TestProviderSpec:
    def test_context_provider_is_kept_as_is(self) -> None:
        def provide(values: ResolutionContext) -> int:
            return values.depth

        spec = ProviderSpec.from_user_provider(provides=int, provider=provide)

        assert spec.provider is provide
        assert spec.name.endswith("provide")

    def test_value_factory_ignores_context(self, empty_fixture: Fixture) -> None:
        spec = ProviderSpec.from_user_provider(provides=int, provider=lambda: 7)

        assert spec.provider(_context(empty_fixture)) == 7

    def test_var_positional_provider_receives_context(self, empty_fixture: Fixture) -> None:
        def provide(*args: Any) -> int:
            return len(args)

        spec = ProviderSpec.from_user_provider(provides=int, provider=provide)

        assert spec.provider(_context(empty_fixture)) == 1

    def test_from_value(self, empty_fixture: Fixture) -> None:
        value = object()

        spec = ProviderSpec.from_value(provides=object, value=value)

        assert spec.provider(_context(empty_fixture)) is value
        assert spec.name.startswith("constant <object object")

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(FixtureInvalidRegistrationError):
            ProviderSpec.from_user_provider(provides=int, provider="not callable")  # type: ignore[arg-type]


class TestProvidersRegistrations:
    def test_add_and_find(self) -> None:
        registrations = ProvidersRegistrations()
        spec = ProviderSpec.from_value(provides=int, value=1)

        assert registrations.add(spec) is None
        assert registrations.find_by_type(int) is spec
        assert int in registrations
        assert len(registrations) == 1

    def test_add_returns_replaced_spec(self) -> None:
        registrations = ProvidersRegistrations()
        first = ProviderSpec.from_value(provides=int, value=1)
        second = ProviderSpec.from_value(provides=int, value=2)

        registrations.add(first)

        assert registrations.add(second) is first
        assert registrations.find_by_type(int) is second
        assert registrations.values() == [second]

    def test_keys_are_nominal(self) -> None:
        class First:
            value: int

        class Second:
            value: int

        registrations = ProvidersRegistrations()
        registrations.add(ProviderSpec.from_value(provides=First, value=1))

        assert registrations.find_by_type(Second) is None

    def test_unhashable_lookup_returns_none(self) -> None:
        assert ProvidersRegistrations().find_by_type({"not": "hashable"}) is None

    def test_concurrent_registration_keeps_every_key(self) -> None:
        registrations = ProvidersRegistrations()
        keys = [type(f"Key{index}", (), {}) for index in range(50)]

        def register(key: type[Any]) -> None:
            registrations.add(ProviderSpec.from_value(provides=key, value=key))

        threads = [threading.Thread(target=register, args=(key,)) for key in keys]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registrations) == len(keys)
        assert all(registrations.find_by_type(key) is not None for key in keys)
