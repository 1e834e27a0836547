"""Mapping plan data classes.

One TypePlan per (source type, destination type) pair, holding one
FieldRule per writable destination member. The rule set is fixed when the
plan is built; configuration only edits existing rules. Plans are treated
as immutable once mapping starts.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from type_sync.core.enums import ResolutionMode
from type_sync.mapping.descriptor import MemberInfo, type_name

if TYPE_CHECKING:
    from type_sync.expressions.nodes import Lambda


@dataclass
class FieldRule:
    """How a single destination member receives its value."""

    destination: MemberInfo
    source_member: MemberInfo | None = None
    source_path: tuple[MemberInfo, ...] = ()
    custom_function: Callable[[Any], Any] | None = None
    source_expression: Lambda | None = None
    resolver_type: type | None = None
    ignored: bool = False
    condition: Callable[[Any], bool] | None = None
    destination_condition: Callable[[Any, Any], bool] | None = None
    value_condition: Callable[[Any, Any, Any], bool] | None = None
    null_substitute: Any = None
    has_null_substitute: bool = False
    use_destination_value: bool = False

    @property
    def name(self) -> str:
        return self.destination.name

    @property
    def path_names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.source_path)

    @property
    def mode(self) -> ResolutionMode:
        if self.ignored:
            return ResolutionMode.IGNORED
        if self.resolver_type is not None:
            return ResolutionMode.RESOLVER_TYPE
        if self.custom_function is not None:
            return ResolutionMode.CUSTOM_FUNCTION
        if self.source_member is not None:
            return ResolutionMode.DIRECT
        if self.source_path:
            return ResolutionMode.FLATTENED
        return ResolutionMode.UNRESOLVED

    @property
    def can_resolve(self) -> bool:
        return (
            self.source_member is not None
            or bool(self.source_path)
            or self.custom_function is not None
            or self.resolver_type is not None
        )

    def clear_resolution(self) -> None:
        """Drop every resolution mode before a new one is configured."""
        self.source_member = None
        self.source_path = ()
        self.custom_function = None
        self.source_expression = None
        self.resolver_type = None

    def should_map(self, source: Any, destination: Any) -> bool:
        if self.ignored:
            return False
        if self.condition is not None and not self.condition(source):
            return False
        if self.destination_condition is not None and not self.destination_condition(
            source, destination
        ):
            return False
        return True


@dataclass
class TypePlan:
    """Mapping plan for one ordered type pair."""

    source_type: Any
    destination_type: Any
    field_rules: tuple[FieldRule, ...]
    construct_override: Callable[[Any], Any] | None = None
    guard_condition: Callable[[Any], bool] | None = None
    before_hooks: list[Callable[[Any, Any], None]] = field(default_factory=list)
    after_hooks: list[Callable[[Any, Any], None]] = field(default_factory=list)
    has_reverse: bool = False

    @property
    def key(self) -> tuple[Any, Any]:
        return (self.source_type, self.destination_type)

    @property
    def destination_name(self) -> str:
        return type_name(self.destination_type)

    def rule_for(self, member_name: str) -> FieldRule | None:
        """Case-insensitive lookup of a destination member's rule."""
        folded = member_name.lower()
        for rule in self.field_rules:
            if rule.name.lower() == folded:
                return rule
        return None

    def unresolved(self) -> list[FieldRule]:
        return [r for r in self.field_rules if not r.ignored and not r.can_resolve]

    def __repr__(self) -> str:
        return (
            f"TypePlan({type_name(self.source_type)} -> {self.destination_name}, "
            f"{len(self.field_rules)} fields)"
        )
