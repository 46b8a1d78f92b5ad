from fixturewire._internal.context import ResolutionContext
from fixturewire._internal.defaults import PreferredFormat
from fixturewire._internal.fixture import DEFAULT_MAX_DEPTH, Fixture, make_fixture
from fixturewire._internal.initializers import init_fixture
from fixturewire._internal.markers import Fixtured
from fixturewire._internal.providing import FixtureProviding, provide_fixture
from fixturewire.exceptions import (
    FixtureError,
    FixtureInvalidRegistrationError,
    FixtureNoProviderRegisteredError,
    FixtureOverrideTypeMismatchError,
    FixtureProviderInferenceError,
    FixtureRecursionLimitError,
    FixtureResolutionError,
    FixtureUnusedOverrideError,
)

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "Fixture",
    "FixtureError",
    "FixtureInvalidRegistrationError",
    "FixtureNoProviderRegisteredError",
    "FixtureOverrideTypeMismatchError",
    "FixtureProviderInferenceError",
    "FixtureProviding",
    "FixtureRecursionLimitError",
    "FixtureResolutionError",
    "FixtureUnusedOverrideError",
    "Fixtured",
    "PreferredFormat",
    "ResolutionContext",
    "init_fixture",
    "make_fixture",
    "provide_fixture",
]
