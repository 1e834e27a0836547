"""
Example 01: Basic Mapping

This example demonstrates registering a type pair and mapping objects with TypeSync's Mapper.
"""

from type_sync import MapperConfiguration, MapOptions
from dataclasses import dataclass, field
from pydantic import BaseModel


class User(BaseModel):
    """Source model using Pydantic"""
    id: int
    name: str
    email: str
    active: bool = True
    roles: list[str] = []


@dataclass
class UserDto:
    """Destination model using dataclass"""
    id: int = 0
    name: str = ""
    email: str = ""
    roles: tuple[str, ...] = ()
    display: str = ""


@dataclass
class UserPatch:
    name: str = ""
    email: str = ""
    tags: list[str] = field(default_factory=list)


def main():
    config = MapperConfiguration()
    config.register_mapping(User, UserDto).for_member(
        "display", lambda m: m.map_from(lambda u: u.name.upper())
    )
    config.register_mapping(User, UserPatch).for_member("tags", lambda m: m.map_from("roles"))
    config.assert_valid()

    mapper = config.create_mapper()
    users = [
        User(id=1, name="Alice", email="alice@example.com", roles=["admin"]),
        User(id=2, name="Bob", email="bob@example.com", active=False),
    ]

    print("=== Basic Mapping ===\n")

    # map: create a new destination object
    dto = mapper.map(users[0], UserDto)
    print(f"map result: {dto}\n")

    # map_many: map a sequence element by element
    dtos = mapper.map_many(users, UserDto)
    print(f"map_many result ({len(dtos)} objects):")
    for item in dtos:
        print(f"  - {item.display} <{item.email}>")
    print()

    # map_into: update an existing object in place
    patch = UserPatch(name="old", email="old@example.com", tags=["stale"])
    mapper.map_into(users[1], patch)
    print(f"map_into result: {patch}\n")

    # Runtime options: skip members for a single call
    patch = UserPatch(name="kept")
    mapper.map_into(users[0], patch, options=MapOptions.ignoring("name"))
    print(f"map_into ignoring 'name': {patch}")


if __name__ == "__main__":
    main()
