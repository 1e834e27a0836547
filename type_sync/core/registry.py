"""Plan Registry - holds one mapping plan per ordered type pair.

Plans are registered explicitly through ``MapperConfiguration`` or created
on first use from the naming conventions. Keys ignore ``Optional``:
``(Order | None, OrderDto)`` and ``(Order, OrderDto)`` share a plan.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from type_sync.core.exceptions import PlanNotFoundError
from type_sync.core.settings import MapperSettings
from type_sync.mapping.convention import build_plan
from type_sync.mapping.descriptor import type_name, unwrap_optional
from type_sync.mapping.plan import TypePlan

logger = logging.getLogger(__name__)

PlanKey = tuple[Any, Any]


def plan_key(source_type: Any, destination_type: Any) -> PlanKey:
    return (unwrap_optional(source_type)[0], unwrap_optional(destination_type)[0])


class PlanRegistry:
    """Stores TypePlans keyed by (source type, destination type).

    Lookups of existing plans take no lock. Creation of implicit plans is
    serialized so concurrent first use of a pair yields a single plan.

    Args:
        settings: Controls whether unregistered pairs get implicit plans.
    """

    def __init__(self, settings: MapperSettings | None = None) -> None:
        self._settings = settings or MapperSettings()
        self._plans: dict[PlanKey, TypePlan] = {}
        self._lock = threading.Lock()
        self._version = 0

    @property
    def version(self) -> int:
        """Incremented on every registration; used to invalidate derived caches."""
        return self._version

    def register(self, source_type: Any, destination_type: Any) -> TypePlan:
        """Build a convention plan for the pair, replacing any existing one."""
        key = plan_key(source_type, destination_type)
        plan = build_plan(*key)
        with self._lock:
            self._plans[key] = plan
            self._version += 1
        return plan

    def find(self, source_type: Any, destination_type: Any) -> TypePlan | None:
        return self._plans.get(plan_key(source_type, destination_type))

    def get(self, source_type: Any, destination_type: Any) -> TypePlan:
        """Look up a registered plan.

        Raises:
            PlanNotFoundError: If the pair has no plan.
        """
        plan = self.find(source_type, destination_type)
        if plan is None:
            raise PlanNotFoundError(type_name(source_type), type_name(destination_type))
        return plan

    def get_or_create(self, source_type: Any, destination_type: Any) -> TypePlan:
        """Return the pair's plan, creating a convention plan on first use.

        Raises:
            PlanNotFoundError: If the pair has no plan and implicit plans are disabled.
        """
        key = plan_key(source_type, destination_type)
        plan = self._plans.get(key)
        if plan is not None:
            return plan

        if not self._settings.allow_implicit_plans:
            raise PlanNotFoundError(type_name(key[0]), type_name(key[1]))

        with self._lock:
            plan = self._plans.get(key)
            if plan is None:
                plan = build_plan(*key)
                self._plans[key] = plan
                logger.debug("Created implicit plan %r", plan)
        return plan

    def has(self, source_type: Any, destination_type: Any) -> bool:
        """Check if a type pair has a plan."""
        return plan_key(source_type, destination_type) in self._plans

    @property
    def plans(self) -> list[TypePlan]:
        """All plans in registration order."""
        return list(self._plans.values())

    def __iter__(self) -> Iterator[TypePlan]:
        return iter(self.plans)

    def __len__(self) -> int:
        """Number of plans."""
        return len(self._plans)
