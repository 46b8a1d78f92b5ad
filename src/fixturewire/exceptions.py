from __future__ import annotations

from typing import Any

from fixturewire._internal.type_checks import describe_type


class FixtureError(Exception):
    """Represent a base class for all fixturewire-specific failures.

    Catch this type when you want to handle any fixturewire error path without
    matching each concrete exception class individually.
    """


class FixtureResolutionError(FixtureError):
    """Represent a failure raised while resolving a fixture value.

    Resolution errors always propagate to the top-level ``Fixture.resolve`` call.
    The only exception to that rule is ``FixtureNoProviderRegisteredError``,
    which optional and collection fallbacks replace with ``None`` or an empty
    container.
    """


class FixtureNoProviderRegisteredError(FixtureResolutionError):
    """Signal that no provider, self-description or fallback produced a value.

    Typical fixes include registering a provider with ``Fixture.register``,
    implementing ``provide_fixture`` on the type, or decorating it with
    ``@provide_fixture``.
    """

    def __init__(self, dependency: Any) -> None:
        self.dependency = dependency
        super().__init__(
            f"A value could not be resolved for the type '{describe_type(dependency)}'. "
            "You can register it using the 'Fixture.register' method "
            "or implement 'provide_fixture' on the type.",
        )


class FixtureOverrideTypeMismatchError(FixtureResolutionError):
    """Signal that an override value does not match the type requested for its label.

    Raised by ``ResolutionContext.get`` when the label matches an override but
    the override value cannot be used as the requested type.
    """

    def __init__(self, label: str, value: Any, expected_type: Any) -> None:
        self.label = label
        self.value = value
        self.expected_type = expected_type
        super().__init__(
            f"An override was provided as {type(value).__name__} for the argument "
            f"'{label}' but {describe_type(expected_type)} was expected.",
        )


class FixtureUnusedOverrideError(FixtureResolutionError):
    """Signal that an override label was never consumed during resolution.

    This usually points at a typo in the override name or at a field that was
    renamed without updating the tests.
    """

    def __init__(self, label: str, dependency: Any) -> None:
        self.label = label
        self.dependency = dependency
        super().__init__(
            f"The argument '{label}' was specified but is not used by the fixture "
            f"for {describe_type(dependency)}.",
        )


class FixtureRecursionLimitError(FixtureResolutionError):
    """Signal that resolution nested deeper than the fixture's ``max_depth``.

    Self-referential types without a registered provider recurse until this
    limit is hit. Register a provider that terminates the recursion, or raise
    ``max_depth`` for legitimately deep graphs.
    """

    def __init__(self, dependency: Any, max_depth: int) -> None:
        self.dependency = dependency
        self.max_depth = max_depth
        super().__init__(
            f"Resolving '{describe_type(dependency)}' exceeded the maximum depth of "
            f"{max_depth} nested values. The type graph is probably self-referential.",
        )


class FixtureInvalidRegistrationError(FixtureError):
    """Signal invalid registration or decoration input.

    Raised by ``Fixture.register`` for non-callable providers and by
    ``@provide_fixture`` when it cannot be attached to the decorated object.
    """


class FixtureProviderInferenceError(FixtureInvalidRegistrationError):
    """Signal that a provider cannot be derived from a callable's annotations.

    Common triggers are required parameters without type annotations, or an
    initializer without a return annotation passed to ``make_fixture``.
    """


__all__ = [
    "FixtureError",
    "FixtureInvalidRegistrationError",
    "FixtureNoProviderRegisteredError",
    "FixtureOverrideTypeMismatchError",
    "FixtureProviderInferenceError",
    "FixtureRecursionLimitError",
    "FixtureResolutionError",
    "FixtureUnusedOverrideError",
]
