"""Tests for initializer-derived providers and make_fixture."""

from __future__ import annotations

import gc
import weakref
from dataclasses import dataclass
from typing import Annotated, Any

import pytest
from typing_extensions import Self

from fixturewire import (
    Fixture,
    FixtureProviderInferenceError,
    FixtureUnusedOverrideError,
    PreferredFormat,
    ResolutionContext,
    init_fixture,
    make_fixture,
)
from fixturewire._internal.initializers import (
    InitializerArgument,
    InitializerArgumentsExtractor,
    provided_type_of,
)


@dataclass
class User:
    id: int
    name: str


class Account:
    def __init__(self, owner: User, balance: float = 10.0, *args: Any, **kwargs: Any) -> None:
        self.owner = owner
        self.balance = balance
        self.args = args
        self.kwargs = kwargs

    @classmethod
    def open(cls, owner: User) -> Self:
        return cls(owner=owner, balance=0.0)


class Slot:
    def __init__(self, index: int, /, label: str, *, active: bool) -> None:
        self.index = index
        self.label = label
        self.active = active


class Legacy:
    def __init__(self, name: str, retries=3) -> None:  # noqa: ANN001
        self.name = name
        self.retries = retries


def build_user(name: Annotated[str, "display"]) -> User:
    return User(id=-1, name=name)


def no_return_annotation(name: str):  # noqa: ANN201
    return User(id=-1, name=name)


def returns_none(name: str) -> None:
    return None


class TestInitFixture:
    def test_calls_initializer_with_resolved_arguments(self, constant_fixture: Fixture) -> None:
        constant_fixture.register(
            User,
            lambda values: init_fixture(values, User),
        )

        assert constant_fixture(User, name="John") == User(id=0, name="John")

    def test_variadic_parameters_are_skipped(self, constant_fixture: Fixture) -> None:
        constant_fixture.register_init(User)
        constant_fixture.register_init(Account)

        account = constant_fixture(Account)

        assert account.owner == User(id=0, name="")
        assert account.balance == 0.0
        assert account.args == ()
        assert account.kwargs == {}

    def test_positional_only_parameters_are_passed_positionally(
        self,
        constant_fixture: Fixture,
    ) -> None:
        constant_fixture.register_init(Slot)

        slot = constant_fixture(Slot, index=3, active=True)

        assert (slot.index, slot.label, slot.active) == (3, "", True)

    def test_unannotated_parameter_with_default_keeps_default(
        self,
        constant_fixture: Fixture,
    ) -> None:
        constant_fixture.register_init(Legacy)

        legacy = constant_fixture(Legacy)

        assert legacy.retries == 3

    def test_unannotated_parameter_cannot_be_overridden(self, constant_fixture: Fixture) -> None:
        constant_fixture.register_init(Legacy)

        with pytest.raises(FixtureUnusedOverrideError, match="'retries' was specified but is not used"):
            constant_fixture(Legacy, retries=5)

    def test_annotated_parameter_resolves_base_type(self, constant_fixture: Fixture) -> None:
        constant_fixture.register_init(User, using=build_user)

        assert constant_fixture(User) == User(id=-1, name="")


class TestInitializerArgumentsExtractor:
    def test_extracts_labels_and_annotations(self) -> None:
        extractor = InitializerArgumentsExtractor()

        assert extractor.extract(Slot) == (
            InitializerArgument(label="index", annotation=int, positional=True),
            InitializerArgument(label="label", annotation=str, positional=False),
            InitializerArgument(label="active", annotation=bool, positional=False),
        )

    def test_results_are_cached(self) -> None:
        extractor = InitializerArgumentsExtractor()

        assert extractor.extract(User) is extractor.extract(User)

    def test_cache_does_not_keep_initializers_alive(self) -> None:
        extractor = InitializerArgumentsExtractor()

        class Temporary:
            def __init__(self, value: int) -> None:
                self.value = value

        labels = [argument.label for argument in extractor.extract(Temporary)]
        temporary_ref = weakref.ref(Temporary)
        del Temporary
        gc.collect()

        assert labels == ["value"]
        assert temporary_ref() is None

    def test_builtin_initializer_is_inspected_without_caching(self) -> None:
        with pytest.raises(FixtureProviderInferenceError):
            InitializerArgumentsExtractor().extract(len)

    def test_bound_classmethod_skips_cls(self) -> None:
        extractor = InitializerArgumentsExtractor()

        assert [argument.label for argument in extractor.extract(Account.open)] == ["owner"]

    def test_unannotated_required_parameter_raises(self) -> None:
        class Untyped:
            def __init__(self, value) -> None:  # noqa: ANN001
                self.value = value

        with pytest.raises(FixtureProviderInferenceError, match="Add a type annotation"):
            InitializerArgumentsExtractor().extract(Untyped)


class TestProvidedTypeOf:
    def test_class_provides_itself(self) -> None:
        assert provided_type_of(User) is User

    def test_function_provides_return_annotation(self) -> None:
        assert provided_type_of(build_user) is User

    def test_self_returning_classmethod_provides_owner(self) -> None:
        assert provided_type_of(Account.open) is Account

    @pytest.mark.parametrize("initializer", [no_return_annotation, returns_none])
    def test_missing_return_annotation_raises(self, initializer: Any) -> None:
        with pytest.raises(FixtureProviderInferenceError, match="Add a return annotation"):
            provided_type_of(initializer)


class TestMakeFixture:
    def test_registers_each_initializer(self) -> None:
        fixture = make_fixture(User, Account.open, preferred_format=PreferredFormat.CONSTANT)

        account = fixture(Account)

        assert fixture.is_registered(User)
        assert fixture.is_registered(Account)
        assert account.owner == User(id=0, name="")
        assert account.balance == 0.0

    def test_factory_function_registers_its_return_type(self) -> None:
        fixture = make_fixture(build_user, preferred_format=PreferredFormat.CONSTANT)

        assert fixture(User, name="John") == User(id=-1, name="John")

    def test_forwards_fixture_options(self) -> None:
        fixture = make_fixture(register_defaults=False, max_depth=3, seed=1)

        assert fixture.max_depth == 3
        assert not fixture.is_registered(int)

    def test_uninferable_initializer_raises(self) -> None:
        with pytest.raises(FixtureProviderInferenceError):
            make_fixture(no_return_annotation)

    def test_registered_provider_can_still_use_context(self) -> None:
        fixture = make_fixture(User, preferred_format=PreferredFormat.CONSTANT)

        @fixture.register(str)
        def provide_name(values: ResolutionContext) -> str:
            return f"user-{values.depth}"

        assert fixture(User).name == "user-1"
