from __future__ import annotations

import datetime
import decimal
import logging
import sys
import uuid
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fixturewire._internal.fixture import Fixture

logger = logging.getLogger(__name__)

REFERENCE_DATETIME = datetime.datetime(2001, 1, 1, tzinfo=datetime.timezone.utc)
"""Constant datetime, and lower bound for random datetimes."""

LATEST_RANDOM_DATETIME = datetime.datetime(2021, 1, 1, tzinfo=datetime.timezone.utc)
"""Upper bound for random datetimes. Fixed so that seeded fixtures are reproducible."""

_MAX_INT = 2**63 - 1
_RANDOM_BYTES_LENGTH = 16
_UUID_BITS = 128


class PreferredFormat(Enum):
    """Select the kind of values vended by default providers.

    Only default providers are guaranteed to honor the format. User providers
    and fallbacks, such as the random member picked for enums, ignore it.
    """

    RANDOM = "random"
    """Prefer random values, distinct between resolutions."""

    CONSTANT = "constant"
    """Prefer the same "zero" value for a given type on every resolution."""


def register_default_providers(fixture: Fixture, *, preferred_format: PreferredFormat) -> None:
    """Seed a fixture with providers for common standard-library types.

    Defaults go through ``Fixture.register`` like any user registration, so
    registering the same type again replaces them.

    Args:
        fixture: Fixture to seed.
        preferred_format: Whether to register random or constant providers.

    """
    if preferred_format is PreferredFormat.CONSTANT:
        providers = _constant_providers()
    else:
        providers = _random_providers(fixture)

    for provides, provider in providers.items():
        fixture.register(provides, provider)
    logger.debug("Seeded %d default providers (%s)", len(providers), preferred_format.value)


def _constant_providers() -> dict[type[Any], Callable[[], Any]]:
    return {
        int: lambda: 0,
        float: lambda: 0.0,
        bool: lambda: False,
        str: lambda: "",
        bytes: lambda: b"",
        uuid.UUID: lambda: uuid.UUID(int=0),
        datetime.datetime: lambda: REFERENCE_DATETIME,
        datetime.date: lambda: REFERENCE_DATETIME.date(),
        datetime.timedelta: lambda: datetime.timedelta(0),
        decimal.Decimal: lambda: decimal.Decimal(0),
    }


def _random_providers(fixture: Fixture) -> dict[type[Any], Callable[[], Any]]:
    rng = fixture.random

    def random_uuid() -> uuid.UUID:
        return uuid.UUID(int=rng.getrandbits(_UUID_BITS), version=4)

    def random_datetime() -> datetime.datetime:
        elapsed = (LATEST_RANDOM_DATETIME - REFERENCE_DATETIME).total_seconds()
        return REFERENCE_DATETIME + datetime.timedelta(seconds=rng.uniform(0, elapsed))

    return {
        int: lambda: rng.randint(0, _MAX_INT),
        float: lambda: rng.uniform(0, sys.float_info.max),
        bool: lambda: rng.random() < 0.5,  # noqa: PLR2004
        str: lambda: str(random_uuid()),
        bytes: lambda: rng.randbytes(_RANDOM_BYTES_LENGTH),
        uuid.UUID: random_uuid,
        datetime.datetime: random_datetime,
        datetime.date: lambda: random_datetime().date(),
        datetime.timedelta: lambda: datetime.timedelta(seconds=rng.uniform(0, 86_400)),
        decimal.Decimal: lambda: decimal.Decimal(rng.randint(0, 10**8)).scaleb(-2),
    }
