"""Fallbacks for types without a registered provider.

Enums use a provider of their raw value type, or a random member. Optional
types fall back to ``None`` and collections hold a single element, or none
when the element type cannot be provided.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from fixturewire import Fixture, PreferredFormat


class Color(Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


class Priority(Enum):
    LOW = 0
    HIGH = 1


class Unregistered:
    pass


def main() -> None:
    fixture = Fixture(PreferredFormat.CONSTANT, seed=0)

    print(f"color_is_member={fixture(Color) in set(Color)}")  # => color_is_member=True
    print(f"priority={fixture(Priority).name}")  # => priority=LOW
    letter = fixture(Literal["a", "b"])
    print(f"literal_in_choices={letter in ('a', 'b')}")  # => literal_in_choices=True

    print(f"optional_int={fixture(int | None)}")  # => optional_int=0
    print(f"optional_missing={fixture(Unregistered | None)}")  # => optional_missing=None

    print(f"list={fixture(list[int])}")  # => list=[0]
    print(f"empty_list={fixture(list[Unregistered])}")  # => empty_list=[]
    print(f"mapping={fixture(dict[str, bool])}")  # => mapping={'': False}
    print(f"fixed_tuple={fixture(tuple[int, str])}")  # => fixed_tuple=(0, '')


if __name__ == "__main__":
    main()
