"""Initializer-derived providers.

``@provide_fixture`` and ``make_fixture`` read an initializer's signature and
request one value per parameter, labelled with the parameter name.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from fixturewire import PreferredFormat, ResolutionContext, init_fixture, make_fixture, provide_fixture


@provide_fixture
@dataclass
class Group:
    id: UUID
    title: str


@dataclass
class User:
    name: str
    group: Group


@provide_fixture(using="create")
class Office:
    def __init__(self, name: str, staff: list[User]) -> None:
        self.name = name
        self.staff = staff

    @classmethod
    def create(cls, name: str, staff: list[User]) -> Office:
        return cls(name=name.title(), staff=staff)


class Desk:
    def __init__(self, number: int, office: Office) -> None:
        self.number = number
        self.office = office

    @classmethod
    def provide_fixture(cls, values: ResolutionContext) -> Desk:
        return init_fixture(values, cls)


def main() -> None:
    fixture = make_fixture(User, preferred_format=PreferredFormat.CONSTANT)

    group = fixture(Group, title="Group Fixture")
    print(f"group={group.title} id={group.id}")  # => group=Group Fixture id=00000000-0000-0000-0000-000000000000

    office = fixture(Office, name="bristol")
    print(f"office={office.name} staff={len(office.staff)}")  # => office=Bristol staff=1

    user = fixture(User, name="Ada")
    print(f"user={user.name} group_is_group={isinstance(user.group, Group)}")  # => user=Ada group_is_group=True

    desk = fixture(Desk, number=12)
    print(f"desk={desk.number} office={desk.office.name!r}")  # => desk=12 office=''


if __name__ == "__main__":
    main()
