"""Overrides: replace the direct fields of the requested value by keyword.

Every override must be consumed by the provider of the requested type and must
match the type requested for its label.
"""

from __future__ import annotations

from dataclasses import dataclass

from fixturewire import (
    Fixture,
    FixtureOverrideTypeMismatchError,
    FixtureUnusedOverrideError,
    PreferredFormat,
    ResolutionContext,
)


@dataclass
class Pair:
    id: int
    name: str

    @classmethod
    def provide_fixture(cls, values: ResolutionContext) -> Pair:
        return cls(id=values.get(int, "id"), name=values.get(str, "name"))


@dataclass
class Team:
    name: str
    lead: Pair

    @classmethod
    def provide_fixture(cls, values: ResolutionContext) -> Team:
        return cls(name=values.get(str, "name"), lead=values.get(Pair, "lead"))


def main() -> None:
    fixture = Fixture(PreferredFormat.CONSTANT)
    fixture.register(int, lambda: 42)
    fixture.register(str, lambda: "foo")

    print(fixture(Pair))  # => Pair(id=42, name='foo')
    print(fixture(Pair, name="bar"))  # => Pair(id=42, name='bar')
    print(fixture.resolve(Pair, {"id": 7}))  # => Pair(id=7, name='foo')

    try:
        fixture(Pair, unused=True)
    except FixtureUnusedOverrideError as error:
        print(error)  # => The argument 'unused' was specified but is not used by the fixture for Pair.

    try:
        fixture(Pair, name=1)
    except FixtureOverrideTypeMismatchError as error:
        print(error)  # => An override was provided as int for the argument 'name' but str was expected.

    team = fixture(Team, name="core")
    print(f"team={team.name} lead={team.lead.name}")  # => team=core lead=foo

    try:
        fixture(Team, id=1)
    except FixtureUnusedOverrideError as error:
        print(f"grandchild_label={error.label}")  # => grandchild_label=id


if __name__ == "__main__":
    main()
