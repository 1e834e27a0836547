"""Mapping configuration DSL.

Provides the fluent builders returned by ``register_mapping``:

    config.register_mapping(Order, OrderDto) \\
        .for_member("total", lambda m: m.map_from(lambda o: o.lines.sum(lambda l: l.amount))) \\
        .for_member("internal_code", lambda m: m.ignore()) \\
        .reverse_map()
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from type_sync.core.enums import MemberKind
from type_sync.core.exceptions import ConfigurationError, ExpressionCaptureError, UnknownMemberError
from type_sync.expressions.capture import capture
from type_sync.expressions.nodes import Lambda
from type_sync.expressions.nullsafe import call_or_evaluate
from type_sync.mapping.convention import resolve_dotted_path
from type_sync.mapping.descriptor import MemberInfo
from type_sync.mapping.plan import FieldRule, TypePlan

if TYPE_CHECKING:
    from type_sync.core.configuration import MapperConfiguration

logger = logging.getLogger(__name__)


def _positional_arity(fn: Callable[..., Any]) -> int:
    """Number of positional parameters ``fn`` accepts; 1 if it cannot be inspected."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (ValueError, TypeError):
        return 1
    return sum(
        1 for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    )


def _null_safe(expression: Lambda, destination: MemberInfo) -> Callable[[Any], Any]:
    expected = destination.type if destination.kind is MemberKind.VALUE else Any

    def resolve(source: Any) -> Any:
        return call_or_evaluate(expression, source, expected)

    return resolve


class MemberOptions:
    """Configures how one destination member is resolved."""

    def __init__(self, rule: FieldRule, plan: TypePlan) -> None:
        self._rule = rule
        self._plan = plan

    @property
    def name(self) -> str:
        """Destination member name."""
        return self._rule.name

    @property
    def destination_member(self) -> MemberInfo:
        return self._rule.destination

    def map_from(self, source: Callable[[Any], Any] | Lambda | str) -> MemberOptions:
        """Take the value from a dotted source path or a function of the source.

        Functions are traced into an expression when possible, so they can
        also be used in projections. ``map`` always calls the function itself
        and walks the traced chain null-safely only when the call raises.
        Functions that cannot be traced are called as-is and only apply to
        ``map``.

        Tracing calls the function once, here, with a symbolic argument, so
        side effects in the function also run once at configuration time.
        Checks that Python evaluates eagerly (``is None``, ``isinstance``,
        ``getattr`` with a default) are not part of the traced expression,
        and projections see only the member chain they guard.
        """
        rule = self._rule
        rule.clear_resolution()

        if isinstance(source, str):
            path = resolve_dotted_path(self._plan.source_type, source)
            if len(path) == 1:
                rule.source_member = path[0]
            else:
                rule.source_path = path
            return self

        if isinstance(source, Lambda):
            expression = source
        else:
            try:
                expression = capture(source, self._plan.source_type)
            except ExpressionCaptureError as e:
                logger.debug("Using %r for '%s' as an opaque function: %s", source, rule.name, e)
                rule.custom_function = source
                return self

        rule.source_expression = expression
        rule.custom_function = _null_safe(expression, rule.destination)
        return self

    def map_from_resolver(self, resolver_type: type) -> MemberOptions:
        """Resolve the value with a ValueResolver class."""
        if not callable(getattr(resolver_type, "resolve", None)):
            raise ConfigurationError(
                f"{getattr(resolver_type, '__name__', resolver_type)!s} has no resolve() method"
            )
        self._rule.clear_resolution()
        self._rule.resolver_type = resolver_type
        return self

    def ignore(self) -> MemberOptions:
        """Never assign this member."""
        self._rule.ignored = True
        return self

    def condition(self, predicate: Callable[..., bool]) -> MemberOptions:
        """Only assign the member when ``predicate`` holds.

        The predicate form is chosen by its number of parameters:
        ``(source)``, ``(source, destination)`` or
        ``(source, destination, resolved_value)``.
        """
        arity = _positional_arity(predicate)
        if arity == 1:
            self._rule.condition = predicate
        elif arity == 2:
            self._rule.destination_condition = predicate
        elif arity == 3:
            self._rule.value_condition = predicate
        else:
            raise ConfigurationError(
                f"Condition for '{self._rule.name}' must take 1, 2 or 3 arguments, got {arity}"
            )
        return self

    def null_substitute(self, value: Any) -> MemberOptions:
        """Use ``value`` when the resolved value is None."""
        self._rule.null_substitute = value
        self._rule.has_null_substitute = True
        return self

    def use_destination_value(self) -> MemberOptions:
        """Keep the destination's current value when the resolved value is None."""
        self._rule.use_destination_value = True
        return self


class PlanBuilder:
    """Fluent configuration for one registered type pair."""

    def __init__(self, plan: TypePlan, configuration: MapperConfiguration) -> None:
        self._plan = plan
        self._configuration = configuration

    @property
    def plan(self) -> TypePlan:
        return self._plan

    def for_member(self, name: str, configure: Callable[[MemberOptions], Any]) -> PlanBuilder:
        """Configure a destination member by name (case-insensitive).

        Raises:
            UnknownMemberError: If the destination has no such writable member.
        """
        rule = self._plan.rule_for(name)
        if rule is None:
            raise UnknownMemberError(self._plan.destination_name, name)
        configure(MemberOptions(rule, self._plan))
        return self

    def for_all_members(self, configure: Callable[[MemberOptions], Any]) -> PlanBuilder:
        """Apply ``configure`` to every destination member."""
        for rule in self._plan.field_rules:
            configure(MemberOptions(rule, self._plan))
        return self

    def construct_using(self, factory: Callable[[Any], Any]) -> PlanBuilder:
        """Create destinations with ``factory(source)``. Member rules still run afterwards."""
        self._plan.construct_override = factory
        return self

    def condition(self, predicate: Callable[[Any], bool]) -> PlanBuilder:
        """Map only sources for which ``predicate`` holds."""
        self._plan.guard_condition = predicate
        return self

    def before_map(self, action: Callable[[Any, Any], None]) -> PlanBuilder:
        self._plan.before_hooks.append(action)
        return self

    def after_map(self, action: Callable[[Any, Any], None]) -> PlanBuilder:
        self._plan.after_hooks.append(action)
        return self

    def reverse_map(self) -> PlanBuilder:
        """Register the inverse pair by convention and return its builder."""
        self._plan.has_reverse = True
        return self._configuration.register_mapping(
            self._plan.destination_type, self._plan.source_type
        )
