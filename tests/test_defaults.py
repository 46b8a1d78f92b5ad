"""Tests for default providers and the preferred format."""

from __future__ import annotations

import datetime
import decimal
import random
import uuid
from typing import Any

import pytest

from fixturewire import Fixture, PreferredFormat
from fixturewire._internal.defaults import LATEST_RANDOM_DATETIME, REFERENCE_DATETIME

DEFAULT_TYPES: list[type[Any]] = [
    int,
    float,
    bool,
    str,
    bytes,
    uuid.UUID,
    datetime.datetime,
    datetime.date,
    datetime.timedelta,
    decimal.Decimal,
]


class TestConstantFormat:
    @pytest.mark.parametrize(
        ("dependency", "expected"),
        [
            (int, 0),
            (float, 0.0),
            (bool, False),
            (str, ""),
            (bytes, b""),
            (uuid.UUID, uuid.UUID(int=0)),
            (datetime.datetime, datetime.datetime(2001, 1, 1, tzinfo=datetime.timezone.utc)),
            (datetime.date, datetime.date(2001, 1, 1)),
            (datetime.timedelta, datetime.timedelta(0)),
            (decimal.Decimal, decimal.Decimal(0)),
        ],
    )
    def test_constant_values(
        self,
        constant_fixture: Fixture,
        dependency: type[Any],
        expected: Any,
    ) -> None:
        value = constant_fixture.resolve(dependency)

        assert value == expected
        assert type(value) is dependency

    def test_constant_values_repeat(self, constant_fixture: Fixture) -> None:
        assert constant_fixture.resolve_many(str, 3) == ["", "", ""]


class TestRandomFormat:
    @pytest.mark.parametrize("dependency", DEFAULT_TYPES)
    def test_random_values_have_requested_type(
        self,
        fixture: Fixture,
        dependency: type[Any],
    ) -> None:
        assert type(fixture.resolve(dependency)) is dependency

    def test_int_is_non_negative_64_bit(self, fixture: Fixture) -> None:
        assert all(0 <= value < 2**63 for value in fixture.resolve_many(int, 50))

    def test_str_is_lowercase_uuid(self, fixture: Fixture) -> None:
        value = fixture.resolve(str)

        assert str(uuid.UUID(value)) == value

    def test_uuid_is_version_4(self, fixture: Fixture) -> None:
        assert fixture.resolve(uuid.UUID).version == 4

    def test_bytes_length(self, fixture: Fixture) -> None:
        assert len(fixture.resolve(bytes)) == 16

    def test_datetime_is_within_random_window(self, fixture: Fixture) -> None:
        value = fixture.resolve(datetime.datetime)

        assert REFERENCE_DATETIME <= value <= LATEST_RANDOM_DATETIME
        assert value.tzinfo is datetime.timezone.utc

    def test_datetime_depends_only_on_seed(self) -> None:
        window = (LATEST_RANDOM_DATETIME - REFERENCE_DATETIME).total_seconds()
        offset = random.Random(7).uniform(0, window)  # noqa: S311
        expected = REFERENCE_DATETIME + datetime.timedelta(seconds=offset)

        assert Fixture(seed=7).resolve(datetime.datetime) == expected
        assert Fixture(seed=7).resolve(datetime.date) == expected.date()

    def test_timedelta_is_at_most_one_day(self, fixture: Fixture) -> None:
        assert all(
            datetime.timedelta(0) <= value <= datetime.timedelta(days=1)
            for value in fixture.resolve_many(datetime.timedelta, 20)
        )

    def test_decimal_has_two_places(self, fixture: Fixture) -> None:
        assert fixture.resolve(decimal.Decimal).as_tuple().exponent == -2

    def test_values_differ_between_resolutions(self, fixture: Fixture) -> None:
        assert len(set(fixture.resolve_many(uuid.UUID, 10))) == 10

    def test_bool_produces_both_values(self, fixture: Fixture) -> None:
        assert set(fixture.resolve_many(bool, 100)) == {True, False}


class TestDefaultRegistration:
    @pytest.mark.parametrize("preferred_format", list(PreferredFormat))
    def test_every_default_type_is_registered(self, preferred_format: PreferredFormat) -> None:
        fixture = Fixture(preferred_format)

        assert all(fixture.is_registered(dependency) for dependency in DEFAULT_TYPES)

    def test_defaults_are_replaceable(self, constant_fixture: Fixture) -> None:
        constant_fixture.register(datetime.date, lambda: datetime.date(2020, 2, 2))

        assert constant_fixture.resolve(datetime.date) == datetime.date(2020, 2, 2)

    def test_preferred_format_is_exposed(self, constant_fixture: Fixture) -> None:
        assert constant_fixture.preferred_format is PreferredFormat.CONSTANT

    def test_random_generator_is_shared_with_context(self, fixture: Fixture) -> None:
        fixture.register(str, lambda values: f"{values.random is fixture.random}")

        assert fixture.resolve(str) == "True"
