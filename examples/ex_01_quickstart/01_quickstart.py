"""Quickstart: register providers and resolve fixture values by type.

Providers request the values of their fields from the resolution context, so a
single call builds the whole object graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fixturewire import Fixture, PreferredFormat, ResolutionContext


@dataclass
class User:
    id: int
    name: str
    created_at: datetime


@dataclass
class Item:
    title: str
    owner: User


def main() -> None:
    fixture = Fixture(PreferredFormat.CONSTANT)
    fixture.register(
        User,
        lambda values: User(
            id=values.get(int, "id"),
            name=values.get(str, "name"),
            created_at=values.get(datetime, "created_at"),
        ),
    )

    @fixture.register(Item)
    def provide_item(values: ResolutionContext) -> Item:
        return Item(title=values.get(str, "title"), owner=values.get(User, "owner"))

    item = fixture(Item, title="Custom Title")
    print(f"title={item.title}")  # => title=Custom Title
    print(f"owner_id={item.owner.id}")  # => owner_id=0
    print(f"created_at={item.owner.created_at.isoformat()}")  # => created_at=2001-01-01T00:00:00+00:00

    fixture.register(int, lambda: 42)
    ids = [user.id for user in fixture.resolve_many(User, 3)]
    print(f"ids={ids}")  # => ids=[42, 42, 42]


if __name__ == "__main__":
    main()
