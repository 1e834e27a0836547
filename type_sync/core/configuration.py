"""Mapper configuration.

Collects type-pair registrations, directly or through profiles, validates
them, and creates mappers:

    config = MapperConfiguration(lambda c: c.register_mapping(Order, OrderDto))
    config.add_profile(CustomerProfile)
    config.assert_valid()
    mapper = config.create_mapper()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from type_sync.core.engine import MappingEngine
from type_sync.core.exceptions import ConfigError, ConfigurationError, InvalidConfigurationError
from type_sync.core.mapper import Mapper
from type_sync.core.profile import MappingProfile
from type_sync.core.registry import PlanRegistry
from type_sync.core.settings import MapperSettings
from type_sync.mapping.builder import PlanBuilder
from type_sync.mapping.descriptor import type_name
from type_sync.mapping.plan import TypePlan
from type_sync.projection.compiler import ProjectionCompiler


class MapperConfiguration:
    """Registers mapping plans and creates Mapper instances.

    Args:
        configure: Optional callable that receives this configuration,
            typically used to register every mapping in one place.
        settings: Engine settings. Defaults to ``MapperSettings()``.
    """

    def __init__(
        self,
        configure: Callable[[MapperConfiguration], Any] | None = None,
        settings: MapperSettings | None = None,
    ) -> None:
        self._settings = settings or MapperSettings()
        self._registry = PlanRegistry(self._settings)
        self._profiles: list[MappingProfile] = []
        if configure is not None:
            configure(self)

    @property
    def settings(self) -> MapperSettings:
        return self._settings

    @property
    def registry(self) -> PlanRegistry:
        return self._registry

    @property
    def profiles(self) -> tuple[MappingProfile, ...]:
        """Profiles added so far, in the order they were added."""
        return tuple(self._profiles)

    def add_profile(self, profile: MappingProfile | type[MappingProfile]) -> MappingProfile:
        """Apply a profile's registrations to this configuration.

        Args:
            profile: A MappingProfile instance, or a subclass to instantiate
                with no arguments.

        Returns:
            The applied profile instance.

        Raises:
            ConfigurationError: If ``profile`` is not a MappingProfile.
        """
        if isinstance(profile, type) and issubclass(profile, MappingProfile):
            profile = profile()
        if not isinstance(profile, MappingProfile):
            raise ConfigurationError(f"{profile!r} is not a MappingProfile")
        self._profiles.append(profile)
        profile.configure(self)
        return profile

    def register_mapping(self, source_type: Any, destination_type: Any) -> PlanBuilder:
        """Create (or replace) the plan for a type pair and return its builder."""
        plan = self._registry.register(source_type, destination_type)
        return PlanBuilder(plan, self)

    def find_plan(self, source_type: Any, destination_type: Any) -> TypePlan | None:
        return self._registry.find(source_type, destination_type)

    def validate(self) -> list[ConfigError]:
        """List every destination member that no rule can resolve."""
        return [
            ConfigError(type_name(plan.destination_type), rule.name)
            for plan in self._registry
            for rule in plan.unresolved()
        ]

    def assert_valid(self) -> None:
        """Raise if validate() reports anything.

        Raises:
            InvalidConfigurationError: Carrying every unresolved member.
        """
        errors = self.validate()
        if errors:
            raise InvalidConfigurationError(errors)

    def create_mapper(self) -> Mapper:
        """Create a Mapper sharing this configuration's plans."""
        engine = MappingEngine(self._registry, self._settings)
        compiler = ProjectionCompiler(self._registry, self._settings)
        return Mapper(engine, compiler)
