"""Tests for Pydantic integration."""

from uuid import UUID

import pydantic.dataclasses as pdc
import pytest
from pydantic import BaseModel, Field

from fixturewire import Fixture, FixtureOverrideTypeMismatchError, make_fixture


class Profile(BaseModel):
    bio: str
    age: int = Field(ge=0)


class Account(BaseModel):
    id: UUID
    email: str
    profile: Profile
    roles: list[str] = []


@pdc.dataclass
class Settings:
    debug: bool
    retries: int


class TestPydanticResolution:
    def test_register_init_for_models(self, constant_fixture: Fixture) -> None:
        constant_fixture.register_init(Profile)
        constant_fixture.register_init(Account)

        account = constant_fixture(Account, email="ada@example.com")

        assert account == Account(
            id=UUID(int=0),
            email="ada@example.com",
            profile=Profile(bio="", age=0),
            roles=[""],
        )

    def test_make_fixture_with_models(self) -> None:
        fixture = make_fixture(Profile, Account, seed=11)

        account = fixture(Account, roles=["admin"])

        assert account.roles == ["admin"]
        assert account.profile.age >= 0

    def test_override_type_is_checked_before_validation(self) -> None:
        fixture = make_fixture(Profile)

        with pytest.raises(FixtureOverrideTypeMismatchError):
            fixture(Profile, age="3")

    def test_pydantic_dataclass(self, constant_fixture: Fixture) -> None:
        constant_fixture.register_init(Settings)

        assert constant_fixture(Settings, retries=3) == Settings(debug=False, retries=3)
