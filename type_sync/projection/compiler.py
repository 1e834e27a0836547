"""Projection compiler.

Turns a mapping plan into an expression tree instead of executing it:

    compile(Order, OrderDto)
    # lambda src: OrderDto(id=src.id,
    #                      customer_name=(None if (src.customer is None) else src.customer.name),
    #                      lines=(None if (src.lines is None) else
    #                             src.lines.select(lambda src: LineDto(...)).to_list()))

Only expression-representable rules take part. Resolver classes and
functions that could not be traced are omitted, as are member conditions
and plan-level hooks and guards, which have no expression form.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from type_sync.core.enums import CollectionShape, MemberKind, ResolutionMode
from type_sync.core.exceptions import MissingElementPlanError, ProjectionCycleError
from type_sync.core.registry import PlanKey, PlanRegistry, plan_key
from type_sync.core.settings import MapperSettings
from type_sync.expressions.nodes import (
    Binding,
    Call,
    Conditional,
    Constant,
    Construct,
    Convert,
    Lambda,
    Member,
    Node,
    Parameter,
    is_none,
)
from type_sync.expressions.nullsafe import guard_chain
from type_sync.expressions.visitor import ParameterReplacer
from type_sync.mapping.conversion import coerce
from type_sync.mapping.descriptor import (
    MemberInfo,
    classify,
    collection_info,
    is_assignable,
    is_numeric,
    type_name,
    unwrap_optional,
)
from type_sync.mapping.options import MapOptions
from type_sync.mapping.plan import FieldRule, TypePlan

logger = logging.getLogger(__name__)

_MATERIALIZE = {
    CollectionShape.LIST: "to_list",
    CollectionShape.TUPLE: "to_tuple",
    CollectionShape.SET: "to_set",
    CollectionShape.FROZENSET: "to_frozenset",
}


class ProjectionCompiler:
    """Compiles plans from a PlanRegistry into projection lambdas.

    Results are cached per (source type, destination type, ignored
    members) and discarded whenever a plan is registered.

    Args:
        registry: The plans to compile.
        settings: Whether nested pairs without a registered plan may use
            implicit convention plans.
    """

    def __init__(self, registry: PlanRegistry, settings: MapperSettings | None = None) -> None:
        self._registry = registry
        self._settings = settings or MapperSettings()
        self._cache: dict[tuple[Any, Any, frozenset[str]], Lambda] = {}
        self._cache_version = registry.version
        self._in_progress: list[PlanKey] = []
        self._lock = threading.RLock()

    def compile(
        self,
        source_type: Any,
        destination_type: Any,
        options: MapOptions | None = None,
    ) -> Lambda:
        """Compile the projection for a type pair.

        Raises:
            MissingElementPlanError: If a collection member needs an element
                plan that is not registered.
            ProjectionCycleError: If the projection would include itself.
            PlanNotFoundError: If the pair has no plan and implicit plans
                are disabled.
        """
        ignored = options.cache_key if options is not None else frozenset()
        with self._lock:
            if self._cache_version != self._registry.version:
                self._cache.clear()
                self._cache_version = self._registry.version
            return self._compile(plan_key(source_type, destination_type), ignored)

    def _compile(self, key: PlanKey, ignored: frozenset[str]) -> Lambda:
        cache_key = (key[0], key[1], ignored)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        if key in self._in_progress:
            chain = [*self._in_progress[self._in_progress.index(key) :], key]
            raise ProjectionCycleError(
                [f"{type_name(s)}->{type_name(d)}" for s, d in chain]
            )

        self._in_progress.append(key)
        try:
            projection = self._build(self._registry.get_or_create(*key), ignored)
        finally:
            self._in_progress.pop()

        self._cache[cache_key] = projection
        logger.debug("Compiled projection %s", projection)
        return projection

    def _build(self, plan: TypePlan, ignored: frozenset[str]) -> Lambda:
        parameter = Parameter("src", plan.source_type)
        bindings: list[Binding] = []
        for rule in plan.field_rules:
            if rule.name.lower() in ignored:
                continue
            value = self._bind(rule, parameter, ignored)
            if value is not None:
                bindings.append(Binding(rule.name, value))
        return Lambda(parameter, Construct(plan.destination_type, tuple(bindings)))

    # --- members ---

    def _bind(
        self, rule: FieldRule, parameter: Parameter, ignored: frozenset[str]
    ) -> Node | None:
        mode = rule.mode
        destination = rule.destination
        if mode in (ResolutionMode.IGNORED, ResolutionMode.UNRESOLVED):
            return None
        if mode is ResolutionMode.RESOLVER_TYPE:
            logger.debug("Omitting '%s' from projection: resolvers are runtime-only", rule.name)
            return None

        if rule.has_null_substitute:
            default = rule.null_substitute
        else:
            default = coerce(None, destination.type)

        if mode is ResolutionMode.CUSTOM_FUNCTION:
            expression = rule.source_expression
            if expression is None:
                logger.debug("Omitting '%s' from projection: not an expression", rule.name)
                return None
            body = ParameterReplacer(expression.parameter, parameter).visit(expression.body)
            value = guard_chain(body, default)

        elif mode is ResolutionMode.DIRECT:
            source: MemberInfo = rule.source_member  # type: ignore[assignment]
            value = Member(parameter, source.name, source.type)
            if source.kind is MemberKind.COLLECTION and destination.kind is MemberKind.COLLECTION:
                projected = self._project_collection(value, source, destination, ignored)
                return self._substitute(rule, projected) if projected is not None else None

        else:
            chain: Node = parameter
            for member in rule.source_path:
                chain = Member(chain, member.name, member.type)
            value = guard_chain(chain, default)

        fitted = self._fit(value, destination, ignored)
        if fitted is None:
            return None
        return self._substitute(rule, fitted)

    def _substitute(self, rule: FieldRule, value: Node) -> Node:
        if not rule.has_null_substitute:
            return value
        substitute = Constant(rule.null_substitute, type(rule.null_substitute))
        return Conditional(is_none(value), substitute, value, value.type)

    def _project_collection(
        self,
        access: Member,
        source: MemberInfo,
        destination: MemberInfo,
        ignored: frozenset[str],
    ) -> Node | None:
        source_element = source.element_type
        destination_element = destination.element_type
        materialize = _MATERIALIZE[destination.shape]  # type: ignore[index]

        if is_assignable(source.type, destination.type):
            return access

        if classify(destination_element) is MemberKind.COMPLEX and not is_assignable(
            source_element, destination_element
        ):
            if not self._registry.has(source_element, destination_element):
                raise MissingElementPlanError(
                    type_name(source_element), type_name(destination_element), destination.name
                )
            element = self._compile(plan_key(source_element, destination_element), ignored)
            element_list = list[destination_element]  # type: ignore[valid-type]
            selected: Node = Call(access, "select", (element,), element_list)
        elif is_assignable(source_element, destination_element):
            selected = access
        else:
            logger.debug(
                "Omitting '%s' from projection: %s elements are not assignable to %s",
                destination.name,
                type_name(source_element),
                type_name(destination_element),
            )
            return None

        projected = Call(selected, materialize, (), destination.type)
        empty = Constant(None, destination.type)
        return Conditional(is_none(access), empty, projected, destination.type)

    def _fit(
        self, value: Node, destination: MemberInfo, ignored: frozenset[str]
    ) -> Node | None:
        """Adapt an expression's static type to the destination member type."""
        source_type = value.type
        destination_type = destination.type

        if is_assignable(source_type, destination_type):
            return value
        if (is_numeric(source_type) and is_numeric(destination_type)) or (
            unwrap_optional(source_type)[0] == unwrap_optional(destination_type)[0]
        ):
            return Convert(value, destination_type)
        if collection_info(source_type) is not None or collection_info(destination_type):
            logger.debug("Omitting '%s' from projection: collection mismatch", destination.name)
            return None

        nested = self._nested(value, source_type, destination_type, ignored)
        if nested is not None:
            return nested
        complex_pair = classify(source_type) is MemberKind.COMPLEX and (
            classify(destination_type) is MemberKind.COMPLEX
        )
        if complex_pair:
            logger.debug("Omitting '%s' from projection: no plan to project it", destination.name)
            return None
        return Convert(value, destination_type)

    def _nested(
        self, value: Node, source_type: Any, destination_type: Any, ignored: frozenset[str]
    ) -> Node | None:
        """Inline the projection of a nested complex member, guarded against None."""
        if classify(source_type) is not MemberKind.COMPLEX:
            return None
        if classify(destination_type) is not MemberKind.COMPLEX:
            return None
        key = plan_key(source_type, destination_type)
        if not self._registry.has(*key) and not self._settings.allow_implicit_plans:
            return None

        inner = self._compile(key, ignored)
        inlined = ParameterReplacer(inner.parameter, value).visit(inner.body)
        empty = Constant(None, destination_type)
        return Conditional(is_none(value), empty, inlined, destination_type)
