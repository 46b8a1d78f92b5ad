from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, cast, get_type_hints

import pytest

from fixturewire._internal.fixture import Fixture
from fixturewire._internal.markers import is_fixtured_annotation, strip_fixtured_annotation

_FIXTUREWIRE_FIXTURE_ATTR = "_fixturewire_fixture"
_FIXTUREWIRE_FIXTURED_PARAMETERS_ATTR = "__fixturewire_pytest_fixtured_parameters__"


@dataclass(frozen=True, slots=True)
class FixturedParameter:
    """Represent a test parameter resolved from the plugin-managed fixture."""

    name: str
    dependency: Any


@dataclass(frozen=True, slots=True)
class FixturedInspection:
    """Signatures and fixtured parameters of an inspected test callable."""

    signature: inspect.Signature
    public_signature: inspect.Signature
    fixtured_parameters: tuple[FixturedParameter, ...]


def inspect_fixtured_callable(callable_obj: Callable[..., Any]) -> FixturedInspection:
    """Find ``Fixtured[...]`` parameters and build the signature pytest should see.

    Args:
        callable_obj: Test function to inspect.

    """
    signature = inspect.signature(callable_obj)
    try:
        hints = get_type_hints(callable_obj, include_extras=True)
    except (AttributeError, NameError, TypeError):
        hints = {}

    fixtured_parameters: list[FixturedParameter] = []
    public_parameters: list[inspect.Parameter] = []
    for parameter in signature.parameters.values():
        annotation = hints.get(parameter.name, parameter.annotation)
        if is_fixtured_annotation(annotation):
            fixtured_parameters.append(
                FixturedParameter(
                    name=parameter.name,
                    dependency=strip_fixtured_annotation(annotation),
                ),
            )
        else:
            public_parameters.append(parameter)

    return FixturedInspection(
        signature=signature,
        public_signature=signature.replace(parameters=public_parameters),
        fixtured_parameters=tuple(fixtured_parameters),
    )


@pytest.fixture()
def fixturewire_fixture() -> Fixture:
    """Create a per-test ``Fixture`` used by the plugin.

    Tests that use ``Fixtured[...]`` parameters resolve them from this fixture.
    Override it in your test suite to register providers:

    .. code-block:: python

        @pytest.fixture()
        def fixturewire_fixture() -> Fixture:
            fixture = Fixture(PreferredFormat.CONSTANT)
            fixture.register_init(User)
            return fixture

    Returns:
        A new ``Fixture`` instance.

    """
    return Fixture()


@pytest.fixture(autouse=True)
def _fixturewire_state(
    request: pytest.FixtureRequest,
    fixturewire_fixture: Fixture,
) -> None:
    """Store plugin state on the test node for hook access."""
    node = cast("Any", request.node)
    setattr(node, _FIXTUREWIRE_FIXTURE_ATTR, fixturewire_fixture)


def pytest_pycollect_makeitem(
    collector: Any,
    name: str,
    obj: object,
) -> Any | None:
    """Hide ``Fixtured[...]`` parameters from pytest fixture name matching.

    Pytest treats test function parameters as fixture names. This hook rewrites
    the signature of test functions that use ``Fixtured[...]`` so those
    parameters are not reported as missing fixtures.

    Args:
        collector: Pytest collector instance.
        name: Collected object name.
        obj: Candidate object.

    Returns:
        ``None`` to continue default collection flow.

    """
    if not callable(obj):
        return None
    if not collector.istestfunction(obj, name):
        return None

    inspection = inspect_fixtured_callable(cast("Callable[..., Any]", obj))
    if not inspection.fixtured_parameters:
        return None

    obj_as_any = cast("Any", obj)
    obj_as_any.__dict__[_FIXTUREWIRE_FIXTURED_PARAMETERS_ATTR] = inspection.fixtured_parameters
    obj_as_any.__signature__ = inspection.public_signature
    return None


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Iterator[None]:
    """Wrap test function execution to resolve ``Fixtured[...]`` parameters.

    Each fixtured parameter is resolved from the test's ``fixturewire_fixture``
    right before the call. If no fixture is attached to the node, this hook is
    a no-op.

    Args:
        pyfuncitem: Collected pytest function item.

    Yields:
        Control back to pytest around test execution.

    """
    original_callable = cast("Callable[..., Any]", pyfuncitem.obj)
    fixtured_parameters = cast(
        "tuple[FixturedParameter, ...] | None",
        getattr(original_callable, _FIXTUREWIRE_FIXTURED_PARAMETERS_ATTR, None),
    )
    if not fixtured_parameters:
        yield
        return

    item = cast("Any", pyfuncitem)
    fixture = cast("Fixture | None", getattr(item, _FIXTUREWIRE_FIXTURE_ATTR, None))
    if fixture is None:
        yield
        return

    resolved = {
        parameter.name: fixture.resolve(parameter.dependency) for parameter in fixtured_parameters
    }

    if inspect.iscoroutinefunction(original_callable):

        @functools.wraps(original_callable)
        async def _invoke_with_values(*args: Any, **kwargs: Any) -> Any:
            return await original_callable(*args, **kwargs, **resolved)

    else:

        @functools.wraps(original_callable)
        def _invoke_with_values(*args: Any, **kwargs: Any) -> Any:
            return original_callable(*args, **kwargs, **resolved)

    pyfuncitem.obj = _invoke_with_values
    try:
        yield
    finally:
        pyfuncitem.obj = original_callable
