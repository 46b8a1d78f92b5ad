"""Common error classes for troubleshooting.

This module triggers representative error paths and prints exception type names
so you can recognize each error category quickly.
"""

from __future__ import annotations

from fixturewire import (
    Fixture,
    FixtureError,
    FixtureInvalidRegistrationError,
    FixtureNoProviderRegisteredError,
    FixtureProviderInferenceError,
    FixtureRecursionLimitError,
    ResolutionContext,
    make_fixture,
    provide_fixture,
)


class MissingDependency:
    pass


class Node:
    def __init__(self, parent: Node) -> None:
        self.parent = parent

    @classmethod
    def provide_fixture(cls, values: ResolutionContext) -> Node:
        return cls(parent=values.get(Node, "parent"))


def build_without_annotation(name: str):  # noqa: ANN201
    return name


def main() -> None:
    fixture = Fixture(register_defaults=False)
    try:
        fixture.resolve(MissingDependency)
    except FixtureNoProviderRegisteredError as error:
        missing = type(error).__name__
    print(f"missing={missing}")  # => missing=FixtureNoProviderRegisteredError

    shallow_fixture = Fixture(max_depth=8)
    try:
        shallow_fixture.resolve(Node)
    except FixtureRecursionLimitError as error:
        recursion = f"{type(error).__name__}({error.max_depth})"
    print(f"recursion={recursion}")  # => recursion=FixtureRecursionLimitError(8)

    try:
        fixture.register(int, 42)  # type: ignore[call-overload]
    except FixtureInvalidRegistrationError as error:
        invalid = type(error).__name__
    print(f"invalid={invalid}")  # => invalid=FixtureInvalidRegistrationError

    try:
        provide_fixture(Node)
    except FixtureInvalidRegistrationError as error:
        decorated = type(error).__name__
    print(f"decorated={decorated}")  # => decorated=FixtureInvalidRegistrationError

    try:
        make_fixture(build_without_annotation)
    except FixtureProviderInferenceError as error:
        inference = type(error).__name__
    print(f"inference={inference}")  # => inference=FixtureProviderInferenceError

    print(f"common_base={issubclass(FixtureProviderInferenceError, FixtureError)}")  # => common_base=True


if __name__ == "__main__":
    main()
