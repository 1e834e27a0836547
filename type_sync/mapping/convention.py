"""Convention resolver.

Builds the default FieldRule set for a type pair: a case-insensitive exact
name match first, then flattening discovery (``customer_name`` ->
``customer.name``, ``CustomerAddressCity`` -> ``Customer.Address.City``).

Flattening takes the first matching source member in declaration order.
When both ``customer`` and ``customer_address`` exist, ``customer`` is tried
first and wins if the rest of the name resolves beneath it.
"""

from __future__ import annotations

from typing import Any

from type_sync.core.exceptions import UnknownMemberError
from type_sync.mapping.descriptor import (
    MemberInfo,
    describe,
    member_info,
    runtime_class,
    type_name,
)
from type_sync.mapping.plan import FieldRule, TypePlan


def _strip_separator(rest: str) -> str:
    return rest[1:] if rest.startswith("_") else rest


def find_flattened_path(tp: Any, name: str) -> list[MemberInfo] | None:
    """Split ``name`` into a chain of readable members starting at ``tp``."""
    folded = name.lower()
    for member in describe(tp).readable:
        member_name = member.name.lower()
        if folded == member_name:
            return [member]
        if folded.startswith(member_name):
            rest = _strip_separator(name[len(member.name) :])
            if not rest:
                return [member]
            nested = find_flattened_path(member.type, rest)
            if nested is not None:
                return [member, *nested]
    return None


def resolve_dotted_path(tp: Any, path: str) -> tuple[MemberInfo, ...]:
    """Resolve an explicit ``"customer.address.city"`` path against declared types.

    Segments below an undeclared (``Any``) member are accepted as-is and
    looked up at runtime.

    Raises:
        UnknownMemberError: If a declared type has no such readable member.
    """
    members: list[MemberInfo] = []
    current: Any = tp
    for segment in path.split("."):
        if current is Any or runtime_class(current) is None:
            member = member_info(segment, Any, writable=False)
        else:
            found = describe(current).find(segment)
            if found is None:
                raise UnknownMemberError(type_name(runtime_class(current)), segment)
            member = found
        members.append(member)
        current = member.type
    return tuple(members)


def build_plan(source_type: Any, destination_type: Any) -> TypePlan:
    """Produce the convention-based plan for a type pair."""
    source = describe(source_type)
    destination = describe(destination_type)

    rules: list[FieldRule] = []
    for dest in destination.writable:
        rule = FieldRule(destination=dest)
        direct = source.find(dest.name)
        if direct is not None:
            rule.source_member = direct
        else:
            path = find_flattened_path(source_type, dest.name)
            if path is not None and len(path) == 1:
                rule.source_member = path[0]
            elif path is not None:
                rule.source_path = tuple(path)
        rules.append(rule)

    return TypePlan(
        source_type=source_type,
        destination_type=destination_type,
        field_rules=tuple(rules),
    )
