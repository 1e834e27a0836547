"""Mapping execution engine.

The MappingEngine looks up (or lazily creates) the plan for a type pair in
the PlanRegistry and interprets it against live objects: construct the
destination, run before-hooks, resolve and assign every member, run
after-hooks.

A failure while resolving or assigning a single member never aborts the
call: the member keeps its current value and the failure is logged at
DEBUG on this module's logger.
"""

from __future__ import annotations

import logging
from typing import Any

from type_sync.core.enums import CollectionShape, MemberKind, ResolutionMode
from type_sync.core.exceptions import ConfigurationError, FlatteningDepthError
from type_sync.core.registry import PlanRegistry
from type_sync.core.settings import MapperSettings
from type_sync.mapping.activator import create_instance, read_member, write_member
from type_sync.mapping.conversion import coerce
from type_sync.mapping.descriptor import classify, collection_info, runtime_class
from type_sync.mapping.options import MapOptions
from type_sync.mapping.plan import FieldRule, TypePlan

logger = logging.getLogger(__name__)

_SHAPES: dict[CollectionShape, type] = {
    CollectionShape.LIST: list,
    CollectionShape.TUPLE: tuple,
    CollectionShape.SET: set,
    CollectionShape.FROZENSET: frozenset,
}

_NO_OPTIONS = MapOptions()


def _current_value(destination: Any, name: str) -> Any:
    try:
        return read_member(destination, name)
    except AttributeError:
        return None


class MappingEngine:
    """Runtime interpreter for mapping plans.

    Args:
        registry: Plan storage; unregistered pairs are created on demand.
        settings: Engine limits such as the maximum flattening depth.
    """

    def __init__(self, registry: PlanRegistry, settings: MapperSettings | None = None) -> None:
        self._registry = registry
        self._settings = settings or MapperSettings()

    # --- entry points ---

    def map(
        self,
        source: Any,
        source_type: Any,
        destination_type: Any,
        options: MapOptions | None = None,
    ) -> Any:
        """Map ``source`` to a new instance of ``destination_type``.

        Returns None when ``source`` is None. Collections map element-wise
        into the destination's collection shape.

        Raises:
            ConfigurationError: For an unusable configuration, e.g. a missing
                plan while implicit plans are disabled.
            ConstructionError: If the destination cannot be created.
        """
        if source is None:
            return None
        options = options or _NO_OPTIONS

        both_collections = collection_info(source_type) is not None and (
            collection_info(destination_type) is not None
        )
        if both_collections:
            return self._map_collection(source, destination_type, options)

        kind = classify(destination_type)
        if kind is MemberKind.VALUE:
            return coerce(source, destination_type)

        plan = self._registry.get_or_create(source_type, destination_type)
        if plan.guard_condition is not None and not plan.guard_condition(source):
            return create_instance(plan.destination_type)

        if plan.construct_override is not None:
            destination = plan.construct_override(source)
        else:
            destination = create_instance(plan.destination_type)
        self._apply(plan, source, destination, options)
        return destination

    def map_into(
        self,
        source: Any,
        destination: Any,
        source_type: Any,
        destination_type: Any,
        options: MapOptions | None = None,
    ) -> Any:
        """Map ``source`` onto an existing ``destination`` and return it.

        A None source or destination, or a plan guard that does not hold,
        leaves the destination unchanged.
        """
        if source is None or destination is None:
            return destination

        plan = self._registry.get_or_create(source_type, destination_type)
        if plan.guard_condition is not None and not plan.guard_condition(source):
            return destination
        self._apply(plan, source, destination, options or _NO_OPTIONS)
        return destination

    # --- plan interpretation ---

    def _apply(self, plan: TypePlan, source: Any, destination: Any, options: MapOptions) -> None:
        for hook in plan.before_hooks:
            hook(source, destination)

        for rule in plan.field_rules:
            if options.is_ignored(rule.name):
                continue
            try:
                self._map_field(rule, source, destination, options)
            except ConfigurationError:
                raise
            except FlatteningDepthError as e:
                logger.warning("Skipping %s.%s: %s", plan.destination_name, rule.name, e)
            except Exception:
                logger.debug(
                    "Failed to map %s.%s", plan.destination_name, rule.name, exc_info=True
                )

        for hook in plan.after_hooks:
            hook(source, destination)

    def _map_field(
        self, rule: FieldRule, source: Any, destination: Any, options: MapOptions
    ) -> None:
        if not rule.should_map(source, destination) or not rule.can_resolve:
            return

        value = self._resolve(rule, source, destination)
        if rule.value_condition is not None and not rule.value_condition(
            source, destination, value
        ):
            return
        if value is None and rule.has_null_substitute:
            value = rule.null_substitute
        if value is None and rule.use_destination_value:
            return

        write_member(destination, rule.name, self.convert(value, rule.destination.type, options))

    def _resolve(self, rule: FieldRule, source: Any, destination: Any) -> Any:
        mode = rule.mode
        if mode is ResolutionMode.RESOLVER_TYPE:
            resolver = rule.resolver_type()  # type: ignore[misc]
            return resolver.resolve(source, destination, _current_value(destination, rule.name))
        if mode is ResolutionMode.CUSTOM_FUNCTION:
            return rule.custom_function(source)  # type: ignore[misc]
        if mode is ResolutionMode.DIRECT:
            return read_member(source, rule.source_member.name)  # type: ignore[union-attr]
        return self._resolve_path(rule.path_names, source)

    def _resolve_path(self, names: tuple[str, ...], source: Any) -> Any:
        """Walk a flattened path, stopping at the first None."""
        if len(names) > self._settings.max_path_depth:
            raise FlatteningDepthError(names, self._settings.max_path_depth)
        value = source
        for name in names:
            if value is None:
                return None
            value = read_member(value, name)
        return value

    # --- values ---

    def convert(
        self, value: Any, destination_type: Any, options: MapOptions | None = None
    ) -> Any:
        """Fit a resolved value to a destination member type.

        Value types are coerced, collections are mapped element-wise, and
        complex values that are not already instances of the destination
        type are mapped recursively with the same ``options``.
        """
        if value is None:
            return coerce(None, destination_type)
        if destination_type is Any:
            return value

        kind = classify(destination_type)
        if kind is MemberKind.VALUE:
            return coerce(value, destination_type)
        if kind is MemberKind.COLLECTION:
            if collection_info(type(value)) is None:
                return value
            return self._map_collection(value, destination_type, options)

        cls = runtime_class(destination_type)
        if cls is not None and isinstance(value, cls):
            return value
        return self.map(value, type(value), destination_type, options)

    def _map_collection(
        self, source: Any, destination_type: Any, options: MapOptions | None
    ) -> Any:
        shape, destination_element = collection_info(destination_type)  # type: ignore[misc]
        items = list(source)
        mapped = [self._map_element(item, destination_element, options) for item in items]
        return _SHAPES[shape](mapped)

    def _map_element(
        self, item: Any, destination_element: Any, options: MapOptions | None
    ) -> Any:
        if item is None:
            return None
        if destination_element is Any:
            return item
        return self.convert(item, destination_element, options)
