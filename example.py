"""Example usage of the typed_records library."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from typed_records import UInt8, UInt64, decode, encode, tag


@dataclass
class Address:
    city: str = tag("city")
    zip_code: str = tag("zip")


@dataclass
class Person:
    id: UInt64 = tag("id")
    name: str = tag("name")
    age: UInt8 = tag("age")
    nickname: Optional[str] = tag("nick")
    tags: list[str] = tag("tags", default_factory=list)
    scores: dict[str, int] = tag("scores", default_factory=dict)
    address: Optional[Address] = tag("addr")
    joined: datetime = tag("joined")
    session: timedelta = tag("session")
    notes: str = ""  # untagged, never stored


people = [
    Person(
        id=1,
        name="Alice",
        age=30,
        tags=["admin"],
        scores={"chess": 1800},
        address=Address(city="Lisbon", zip_code="1100"),
        joined=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        session=timedelta(minutes=45),
    ),
    Person(id=2, name="Bob", age=25, nickname="bobby"),
]

for person in people:
    # Zero-valued fields are left out of the flat record
    record = encode(person)
    print(f"{person.name}: {record}")

    restored = Person()
    decode(record, restored)
    print(f"  restored equal: {restored == person}")
