from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping
from typing import Any, Literal, TypeVar, cast, overload

from fixturewire._internal.context import ResolutionContext
from fixturewire._internal.defaults import PreferredFormat, register_default_providers
from fixturewire._internal.initializers import init_fixture, provided_type_of
from fixturewire._internal.markers import strip_annotated
from fixturewire._internal.providers import (
    ProviderSpec,
    ProvidersRegistrations,
    UserProvider,
)
from fixturewire._internal.type_checks import (
    NOT_OPTIONAL,
    CollectionKind,
    CollectionShape,
    closed_choices,
    collection_shape,
    describe_type,
    enum_raw_value_type,
    is_new_type,
    is_runtime_class,
    optional_inner_type,
    union_members,
)
from fixturewire.exceptions import (
    FixtureNoProviderRegisteredError,
    FixtureRecursionLimitError,
)

T = TypeVar("T")
ProviderF = TypeVar("ProviderF", bound=Callable[..., Any])

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64
"""Default number of nested child resolutions allowed below a top-level call."""

_MISSING: Any = object()


class Fixture:
    """Vend fixture values for use in unit tests.

    A fixture is pre-seeded with providers for common standard-library types and
    resolves anything else from explicit registrations, from types that describe
    themselves through ``provide_fixture``, or from built-in fallbacks for enums,
    ``Literal``, optional and collection annotations.

    Resolution precedence for a requested type ``T``:

    1. An override supplied for the requested label (see ``ResolutionContext.get``).
    2. The provider registered for ``T``. ``Annotated`` and ``NewType`` keys fall
       back to their underlying type, enums fall back to a provider of their raw
       value type.
    3. ``T.provide_fixture(values)`` when ``T`` implements it.
    4. A random member of an ``Enum`` or ``Literal``.
    5. ``None`` for ``Optional`` types whose wrapped type cannot be provided.
       Other unions use the first member, in declaration order, that can be
       provided.
    6. A single-element container, or an empty one when the item type cannot be
       provided.

    Anything else raises ``FixtureNoProviderRegisteredError``. Providers are
    scoped to the instance; there is no global registry.

    Examples:
        .. code-block:: python

            fixture = Fixture()
            fixture.register(
                User,
                lambda values: User(
                    id=values.get(UUID, "id"),
                    name=values.get(str, "name"),
                ),
            )

            user = fixture(User, name="John Appleseed")

    """

    def __init__(
        self,
        preferred_format: PreferredFormat = PreferredFormat.RANDOM,
        *,
        register_defaults: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
        seed: int | None = None,
    ) -> None:
        """Initialize a fixture and seed its default providers.

        Args:
            preferred_format: Whether default providers vend random or constant
                values. Only default providers honor it.
            register_defaults: Seed providers for common standard-library types.
                Disable to start from an empty registry.
            max_depth: Maximum number of nested child resolutions below a
                top-level call before ``FixtureRecursionLimitError`` is raised.
            seed: Seed for the fixture's random generator, used by default
                providers and the closed-choice fallback.

        Raises:
            ValueError: If ``max_depth`` is negative.

        """
        if max_depth < 0:
            msg = f"max_depth must not be negative, got {max_depth}."
            raise ValueError(msg)

        self._preferred_format = preferred_format
        self._max_depth = max_depth
        self._random = random.Random(seed)  # noqa: S311
        self._providers_registrations = ProvidersRegistrations()

        if register_defaults:
            register_default_providers(self, preferred_format=preferred_format)

    @property
    def preferred_format(self) -> PreferredFormat:
        """Format used by the default providers."""
        return self._preferred_format

    @property
    def max_depth(self) -> int:
        """Maximum nesting depth of child resolutions."""
        return self._max_depth

    @property
    def random(self) -> random.Random:
        """Random generator shared by default providers and random fallbacks."""
        return self._random

    # region Registration

    @overload
    def register(
        self,
        provides: type[T],
        provider: UserProvider[T],
    ) -> UserProvider[T]: ...

    @overload
    def register(
        self,
        provides: Any,
        provider: Literal["from_decorator"] = "from_decorator",
    ) -> Callable[[ProviderF], ProviderF]: ...

    @overload
    def register(
        self,
        provides: Any,
        provider: UserProvider[Any],
    ) -> UserProvider[Any]: ...

    def register(
        self,
        provides: Any,
        provider: UserProvider[Any] | Literal["from_decorator"] = "from_decorator",
    ) -> Any:
        """Register a provider used to build values of the given type.

        The fixture retains the provider and invokes it when resolving values of
        ``provides``. Registering the same type again replaces the previous
        provider.

        A provider either accepts the ``ResolutionContext`` to request child
        values, or takes no arguments at all.

        Args:
            provides: Exact dependency key being registered.
            provider: Provider callable, or ``"from_decorator"`` to use decorator form.

        Returns:
            The provider in direct form, or a decorator in decorator form.

        Raises:
            FixtureInvalidRegistrationError: If the provider is not callable or
                requires more than one argument.

        Examples:
            .. code-block:: python

                fixture.register(int, lambda: 42)


                @fixture.register(User)
                def make_user(values: ResolutionContext) -> User:
                    return User(name=values.get(str, "name"))

        """
        if isinstance(provider, str) and provider == "from_decorator":

            def decorator(decorated_provider: ProviderF) -> ProviderF:
                self._add_spec(
                    ProviderSpec.from_user_provider(provides=provides, provider=decorated_provider),
                )
                return decorated_provider

            return decorator

        user_provider = cast("UserProvider[Any]", provider)
        self._add_spec(ProviderSpec.from_user_provider(provides=provides, provider=user_provider))
        return user_provider

    def register_value(
        self,
        value: T,
        *,
        provides: Any | Literal["infer"] = "infer",
    ) -> None:
        """Register a constant value for a type.

        Args:
            value: Value returned for every resolution of ``provides``.
            provides: Dependency key to bind. Use ``"infer"`` to bind by ``type(value)``.

        """
        resolved_provides = type(value) if provides == "infer" else provides
        self._add_spec(ProviderSpec.from_value(provides=resolved_provides, value=value))

    def register_init(
        self,
        provides: Any,
        *,
        using: Callable[..., Any] | None = None,
    ) -> None:
        """Register a provider that calls an initializer with resolved arguments.

        Every parameter of ``using`` is requested from the resolution context
        with its annotation as the type and its name as the override label, so
        the fields of ``provides`` can be overridden by keyword.

        Args:
            provides: Dependency key being registered.
            using: Initializer to call. Defaults to ``provides`` itself.

        Examples:
            .. code-block:: python

                fixture.register_init(User)
                fixture.register_init(Office, using=Office.create)

        """
        initializer = provides if using is None else using

        def _provide(values: ResolutionContext) -> Any:
            return init_fixture(values, initializer)

        name = getattr(initializer, "__qualname__", repr(initializer))
        self._add_spec(ProviderSpec(provides=provides, provider=_provide, name=name))

    def is_registered(self, dependency: Any) -> bool:
        """Return whether a provider is registered for exactly this dependency key."""
        return dependency in self._providers_registrations

    def _add_spec(self, spec: ProviderSpec) -> None:
        previous_spec = self._providers_registrations.add(spec)
        if previous_spec is None:
            logger.debug("Registered provider %s for %s", spec.name, describe_type(spec.provides))
        else:
            logger.debug(
                "Replaced provider %s with %s for %s",
                previous_spec.name,
                spec.name,
                describe_type(spec.provides),
            )

    # endregion Registration

    # region Resolution

    @overload
    def resolve(self, dependency: type[T], overrides: Mapping[str, Any] | None = None) -> T: ...

    @overload
    def resolve(self, dependency: Any, overrides: Mapping[str, Any] | None = None) -> Any: ...

    def resolve(self, dependency: Any, overrides: Mapping[str, Any] | None = None) -> Any:
        """Resolve a fixture value of the given type.

        Overrides replace the values of the direct fields of ``dependency``. Their
        keys must match the labels passed to ``ResolutionContext.get`` by the
        provider that builds the value, usually the field names.

        Args:
            dependency: Type of the value to resolve.
            overrides: Values to use instead of resolved ones, keyed by label.

        Returns:
            A value suitable for use as a test fixture.

        Raises:
            FixtureNoProviderRegisteredError: If no provider or fallback can
                produce the value.
            FixtureOverrideTypeMismatchError: If an override does not match the
                type requested for its label.
            FixtureUnusedOverrideError: If an override was never consumed.
            FixtureRecursionLimitError: If nested resolution exceeds ``max_depth``,
                or exhausts the interpreter stack before reaching it.

        """
        context = ResolutionContext(self, target_type=dependency, overrides=overrides)
        try:
            value = self._value(dependency, context)
        except RecursionError as error:
            raise FixtureRecursionLimitError(dependency, self._max_depth) from error
        context.ensure_overrides_consumed()
        return value

    @overload
    def resolve_many(
        self,
        dependency: type[T],
        count: int,
        overrides: Mapping[str, Any] | None = None,
    ) -> list[T]: ...

    @overload
    def resolve_many(
        self,
        dependency: Any,
        count: int,
        overrides: Mapping[str, Any] | None = None,
    ) -> list[Any]: ...

    def resolve_many(
        self,
        dependency: Any,
        count: int,
        overrides: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Resolve ``count`` independent fixture values of the given type.

        Every value is resolved with its own context, so the same overrides are
        applied to, and must be consumed by, each of them. Values are not
        guaranteed to be distinct.

        Args:
            dependency: Type of the values to resolve.
            count: Number of values to resolve.
            overrides: Values to use instead of resolved ones, keyed by label.

        Raises:
            ValueError: If ``count`` is negative.

        """
        if count < 0:
            msg = f"count must not be negative, got {count}."
            raise ValueError(msg)
        return [self.resolve(dependency, overrides) for _ in range(count)]

    @overload
    def __call__(self, dependency: type[T], /, **overrides: Any) -> T: ...

    @overload
    def __call__(self, dependency: Any, /, **overrides: Any) -> Any: ...

    def __call__(self, dependency: Any, /, **overrides: Any) -> Any:
        """Resolve a fixture value, passing overrides as keyword arguments.

        Examples:
            .. code-block:: python

                user = fixture(User, name="John Appleseed", is_active=True)

        """
        return self.resolve(dependency, overrides)

    def _resolve_child(self, dependency: Any, *, parent: ResolutionContext) -> Any:
        if parent.depth >= self._max_depth:
            raise FixtureRecursionLimitError(dependency, self._max_depth)
        return self._value(dependency, parent.child(dependency))

    def _value(self, dependency: Any, context: ResolutionContext) -> Any:  # noqa: PLR0911
        spec = self._providers_registrations.find_by_type(dependency)
        if spec is not None:
            return spec.provider(context)

        base_type = strip_annotated(dependency)
        if base_type is not dependency:
            return self._value(base_type, context)
        if is_new_type(dependency):
            return self._value(dependency.__supertype__, context)

        value = self._raw_value(dependency, context)
        if value is not _MISSING:
            return value

        if is_runtime_class(dependency) and callable(getattr(dependency, "provide_fixture", None)):
            return dependency.provide_fixture(context)

        choices = closed_choices(dependency)
        if choices:
            return self._random.choice(choices)

        inner_type = optional_inner_type(dependency)
        if inner_type is not NOT_OPTIONAL:
            try:
                return self._value(inner_type, context)
            except FixtureNoProviderRegisteredError:
                return None

        members = union_members(dependency)
        if members:
            return self._union_value(dependency, members, context)

        shape = collection_shape(dependency)
        if shape is not None:
            return self._collection_value(shape, context)

        raise FixtureNoProviderRegisteredError(dependency)

    def _union_value(self, dependency: Any, members: tuple[Any, ...], context: ResolutionContext) -> Any:
        for member in members:
            try:
                return self._value(member, context)
            except FixtureNoProviderRegisteredError:
                continue
        raise FixtureNoProviderRegisteredError(dependency)

    def _raw_value(self, dependency: Any, context: ResolutionContext) -> Any:
        raw_value_type = enum_raw_value_type(dependency)
        if raw_value_type is None:
            return _MISSING
        raw_spec = self._providers_registrations.find_by_type(raw_value_type)
        if raw_spec is None:
            return _MISSING
        raw_value = raw_spec.provider(context)
        try:
            return dependency(raw_value)
        except (ValueError, TypeError):
            return _MISSING

    def _collection_value(self, shape: CollectionShape, context: ResolutionContext) -> Any:
        if shape.kind is CollectionKind.FIXED:
            return shape.build(
                self._resolve_child(item_type, parent=context) for item_type in shape.item_types
            )

        try:
            items = [self._resolve_child(item_type, parent=context) for item_type in shape.item_types]
        except FixtureNoProviderRegisteredError:
            return shape.build(())

        if shape.kind is CollectionKind.MAPPING:
            key, value = items
            return shape.build([(key, value)])
        return shape.build(items)

    # endregion Resolution

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(preferred_format={self._preferred_format}, "
            f"providers={len(self._providers_registrations)}, max_depth={self._max_depth})"
        )


def make_fixture(
    *initializers: Callable[..., Any],
    preferred_format: PreferredFormat = PreferredFormat.RANDOM,
    register_defaults: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
    seed: int | None = None,
) -> Fixture:
    """Create a fixture with an initializer-based provider for each given callable.

    Classes provide themselves. Other callables provide the type named by their
    return annotation, and bound classmethods returning ``Self`` provide their
    owning class.

    Args:
        initializers: Classes, alternate constructors, or factory functions.
        preferred_format: Forwarded to ``Fixture``.
        register_defaults: Forwarded to ``Fixture``.
        max_depth: Forwarded to ``Fixture``.
        seed: Forwarded to ``Fixture``.

    Raises:
        FixtureProviderInferenceError: If the provided type of an initializer
            cannot be inferred.

    Examples:
        .. code-block:: python

            fixture = make_fixture(User, Group.create)

    """
    fixture = Fixture(
        preferred_format,
        register_defaults=register_defaults,
        max_depth=max_depth,
        seed=seed,
    )
    for initializer in initializers:
        fixture.register_init(provided_type_of(initializer), using=initializer)
    return fixture

