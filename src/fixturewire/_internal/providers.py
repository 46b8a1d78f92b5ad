from __future__ import annotations

import inspect
import threading
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import TYPE_CHECKING, Any, TypeAlias, TypeVar

from fixturewire.exceptions import FixtureInvalidRegistrationError

if TYPE_CHECKING:
    from fixturewire._internal.context import ResolutionContext

T = TypeVar("T")

UserDependency: TypeAlias = Any
"""A dependency key that has been registered or is being resolved from the user's code."""

ContextProvider: TypeAlias = Callable[["ResolutionContext"], T]
"""A provider that receives the resolution context to request child values."""

ValueFactory: TypeAlias = Callable[[], T]
"""A provider that builds a value without requesting child values."""

UserProvider: TypeAlias = ContextProvider[T] | ValueFactory[T]
"""Either provider form accepted by ``Fixture.register``."""

_POSITIONAL_KINDS = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    """Describe how values of a single dependency key are produced.

    Both user-facing provider forms are normalized to a callable receiving the
    resolution context, so the resolver only ever invokes one shape.
    """

    provides: UserDependency
    """The dependency key that this provider supplies."""

    provider: ContextProvider[Any]
    """The normalized provider invoked with the resolution context."""

    name: str
    """Readable provider name used in logs and reprs."""

    @classmethod
    def from_user_provider(
        cls,
        *,
        provides: UserDependency,
        provider: UserProvider[Any],
    ) -> ProviderSpec:
        """Normalize a user provider into a spec.

        Args:
            provides: Dependency key the provider is registered for.
            provider: Context-taking provider or zero-argument value factory.

        Raises:
            FixtureInvalidRegistrationError: If ``provider`` is not callable or
                requires more than one positional argument.

        """
        if not callable(provider):
            msg = f"Provider for '{provides!r}' must be callable, got {type(provider).__name__}."
            raise FixtureInvalidRegistrationError(msg)

        name = getattr(provider, "__qualname__", repr(provider))
        if _accepts_context(provider, name=name):
            return cls(provides=provides, provider=provider, name=name)

        factory: ValueFactory[Any] = provider  # type: ignore[assignment]

        def _ignore_context(_values: ResolutionContext) -> Any:
            return factory()

        return cls(provides=provides, provider=_ignore_context, name=name)

    @classmethod
    def from_value(cls, *, provides: UserDependency, value: Any) -> ProviderSpec:
        """Build a spec that always returns the same value."""

        def _constant(_values: ResolutionContext) -> Any:
            return value

        return cls(provides=provides, provider=_constant, name=f"constant {value!r}")


def _accepts_context(provider: Callable[..., Any], *, name: str) -> bool:
    try:
        parameters = tuple(inspect.signature(provider).parameters.values())
    except (TypeError, ValueError):
        # Builtins without signature metadata are treated as value factories.
        return False

    required_positional = [
        parameter
        for parameter in parameters
        if parameter.kind in _POSITIONAL_KINDS and parameter.default is Parameter.empty
    ]
    if len(required_positional) > 1:
        msg = (
            f"Provider '{name}' must accept either no arguments or a single "
            f"resolution context argument, got {len(required_positional)} required arguments."
        )
        raise FixtureInvalidRegistrationError(msg)
    if required_positional:
        return True
    return any(parameter.kind is Parameter.VAR_POSITIONAL for parameter in parameters)


class ProvidersRegistrations:
    """Store provider specs indexed by dependency key.

    Registration keys are unique: adding a spec for an existing dependency key
    replaces the previous spec. Mutations are serialized and published
    copy-on-write, so lookups from other threads never take the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._registrations_by_type: dict[UserDependency, ProviderSpec] = {}

    def add(self, spec: ProviderSpec) -> ProviderSpec | None:
        """Add a new provider specification to the registrations.

        Args:
            spec: Provider specification to register.

        Returns:
            The replaced specification, if the key was already registered.

        """
        with self._lock:
            registrations = dict(self._registrations_by_type)
            previous_spec = registrations.get(spec.provides)
            registrations[spec.provides] = spec
            self._registrations_by_type = registrations
        return previous_spec

    def find_by_type(self, dep_type: UserDependency) -> ProviderSpec | None:
        """Get a provider specification by dependency type, if it exists.

        Args:
            dep_type: Dependency type key to look up.

        """
        try:
            return self._registrations_by_type.get(dep_type)
        except TypeError:
            # Unhashable annotations can never be registered.
            return None

    def values(self) -> list[ProviderSpec]:
        """Get all provider specifications."""
        return list(self._registrations_by_type.values())

    def __contains__(self, dep_type: object) -> bool:
        return self.find_by_type(dep_type) is not None

    def __len__(self) -> int:
        return len(self._registrations_by_type)
