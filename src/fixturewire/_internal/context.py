from __future__ import annotations

import random
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar, overload

from fixturewire._internal.type_checks import matches_type
from fixturewire.exceptions import FixtureOverrideTypeMismatchError, FixtureUnusedOverrideError

if TYPE_CHECKING:
    from fixturewire._internal.fixture import Fixture

T = TypeVar("T")

_EMPTY_OVERRIDES: Mapping[str, Any] = MappingProxyType({})


class ResolutionContext:
    """Provide child fixture values to providers and ``provide_fixture`` implementations.

    A context is created for every top-level ``Fixture.resolve`` call and holds
    the overrides supplied to that call. Child values requested through ``get``
    are resolved in a fresh child context without overrides, so overrides only
    ever apply to the direct fields of the top-level requested type.

    Examples:
        .. code-block:: python

            fixture.register(
                User,
                lambda values: User(
                    id=values.get(int, "id"),
                    name=values.get(str, "name"),
                ),
            )

            user = fixture(User, name="John Appleseed")

    """

    def __init__(
        self,
        fixture: Fixture,
        *,
        target_type: Any,
        overrides: Mapping[str, Any] | None = None,
        depth: int = 0,
    ) -> None:
        self._fixture = fixture
        self._target_type = target_type
        self._overrides: Mapping[str, Any] = (
            MappingProxyType(dict(overrides)) if overrides else _EMPTY_OVERRIDES
        )
        self._depth = depth
        self._consumed_overrides: set[str] = set()

    @property
    def fixture(self) -> Fixture:
        """The fixture this context resolves values from."""
        return self._fixture

    @property
    def target_type(self) -> Any:
        """The type requested by the call that created this context."""
        return self._target_type

    @property
    def depth(self) -> int:
        """Nesting depth, ``0`` for the context of a top-level call."""
        return self._depth

    @property
    def random(self) -> random.Random:
        """The fixture's random generator, for providers that vend random values."""
        return self._fixture.random

    @property
    def overrides(self) -> Mapping[str, Any]:
        """Read-only view of the overrides supplied to this context."""
        return self._overrides

    @overload
    def get(self, dependency: type[T], label: str | None = None) -> T: ...

    @overload
    def get(self, dependency: Any, label: str | None = None) -> Any: ...

    def get(self, dependency: Any, label: str | None = None) -> Any:
        """Get a child value from the overrides or by resolving it from the fixture.

        Pass a ``label`` that matches the keyword used when calling the fixture,
        typically the field or parameter name of the value being built, so the
        caller can override it:

        .. code-block:: python

            user = fixture(User, is_active=True)

            # inside the User provider
            values.get(bool, "is_active")

        Args:
            dependency: Type of the child value.
            label: Override label for this child value.

        Returns:
            The override value when one was supplied for ``label``, otherwise a
            freshly resolved value of ``dependency``.

        Raises:
            FixtureOverrideTypeMismatchError: If the override supplied for
                ``label`` is not a valid ``dependency`` value.
            FixtureNoProviderRegisteredError: If no override applies and the
                value cannot be resolved.

        """
        if label is not None and label in self._overrides:
            override = self._overrides[label]
            if not matches_type(override, dependency):
                raise FixtureOverrideTypeMismatchError(label, override, dependency)
            self._consumed_overrides.add(label)
            return override

        return self._fixture._resolve_child(dependency, parent=self)  # noqa: SLF001

    def child(self, dependency: Any) -> ResolutionContext:
        """Create the override-free context used to resolve a nested value."""
        return ResolutionContext(
            self._fixture,
            target_type=dependency,
            depth=self._depth + 1,
        )

    def ensure_overrides_consumed(self) -> None:
        """Raise for the first supplied override label that was never consumed.

        Raises:
            FixtureUnusedOverrideError: With the lexicographically first unused label.

        """
        unused_overrides = sorted(set(self._overrides) - self._consumed_overrides)
        if unused_overrides:
            raise FixtureUnusedOverrideError(unused_overrides[0], self._target_type)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(target_type={self._target_type!r}, "
            f"overrides={sorted(self._overrides)!r}, depth={self._depth})"
        )
