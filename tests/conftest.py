"""Shared pytest fixtures for fixturewire tests."""

import pytest

from fixturewire import Fixture, PreferredFormat


@pytest.fixture()
def fixture() -> Fixture:
    """Fixture seeded with random default providers and a fixed seed."""
    return Fixture(seed=1234)


@pytest.fixture()
def constant_fixture() -> Fixture:
    """Fixture seeded with constant default providers."""
    return Fixture(PreferredFormat.CONSTANT)


@pytest.fixture()
def empty_fixture() -> Fixture:
    """Fixture without default providers."""
    return Fixture(register_defaults=False)
