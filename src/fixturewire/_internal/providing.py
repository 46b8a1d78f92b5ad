from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, overload, runtime_checkable

from typing_extensions import Self

from fixturewire._internal.initializers import init_fixture
from fixturewire.exceptions import FixtureInvalidRegistrationError

if TYPE_CHECKING:
    from fixturewire._internal.context import ResolutionContext

C = TypeVar("C", bound=type[Any])

_PROVIDE_FIXTURE_ATTR = "provide_fixture"


@runtime_checkable
class FixtureProviding(Protocol):
    """Describe a type that can provide fixture instances of itself.

    A ``Fixture`` falls back to ``provide_fixture`` when no provider is
    registered for the type. Request one child value per field, labelled with
    the field name, so callers can override fields by keyword:

    Examples:
        .. code-block:: python

            @dataclass
            class User(FixtureProviding):
                id: UUID
                name: str

                @classmethod
                def provide_fixture(cls, values: ResolutionContext) -> Self:
                    return cls(
                        id=values.get(UUID, "id"),
                        name=values.get(str, "name"),
                    )


            user = fixture(User, name="John Appleseed")

    """

    @classmethod
    def provide_fixture(cls, values: ResolutionContext) -> Self:
        """Provide a fixture value for use in testing.

        Args:
            values: Resolution context used to request the values of fields.

        """
        ...


@overload
def provide_fixture(cls: C, /) -> C: ...


@overload
def provide_fixture(*, using: str | None = None) -> Callable[[C], C]: ...


def provide_fixture(cls: C | None = None, /, *, using: str | None = None) -> C | Callable[[C], C]:
    """Add a ``provide_fixture`` implementation derived from a class's initializer.

    Every initializer parameter is requested with its annotation as the type and
    its name as the override label, which works for plain classes, dataclasses,
    named tuples, attrs classes and pydantic models.

    Args:
        cls: Decorated class, when used without arguments.
        using: Name of an alternate constructor classmethod to call instead of
            the class itself.

    Raises:
        FixtureInvalidRegistrationError: If attached to something other than a
            class, to a class that already defines ``provide_fixture``, or if
            ``using`` does not name a callable attribute.

    Examples:
        .. code-block:: python

            @provide_fixture
            @dataclass
            class Group:
                id: UUID
                title: str


            @provide_fixture(using="create")
            class Office:
                @classmethod
                def create(cls, name: str, staff: list[User]) -> Office: ...

    """

    def decorator(decorated: C) -> C:
        _attach_provide_fixture(decorated, using=using)
        return decorated

    if cls is None:
        return decorator
    return decorator(cls)


def _attach_provide_fixture(decorated: Any, *, using: str | None) -> None:
    if not isinstance(decorated, type):
        msg = f"@provide_fixture cannot be attached to {decorated!r}; decorate a class instead."
        raise FixtureInvalidRegistrationError(msg)
    if _PROVIDE_FIXTURE_ATTR in vars(decorated):
        msg = f"@provide_fixture cannot be attached to '{decorated.__qualname__}' which already defines provide_fixture."
        raise FixtureInvalidRegistrationError(msg)
    if using is not None and not callable(getattr(decorated, using, None)):
        msg = f"@provide_fixture(using='{using}') requires '{decorated.__qualname__}.{using}' to be callable."
        raise FixtureInvalidRegistrationError(msg)

    def _provide_fixture(cls: Any, values: ResolutionContext) -> Any:
        initializer = cls if using is None else getattr(cls, using)
        return init_fixture(values, initializer)

    _provide_fixture.__qualname__ = f"{decorated.__qualname__}.{_PROVIDE_FIXTURE_ATTR}"
    setattr(decorated, _PROVIDE_FIXTURE_ATTR, classmethod(_provide_fixture))
