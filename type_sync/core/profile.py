"""Mapping profiles.

A profile groups related registrations so they can be added to a
configuration in one call:

    class OrderProfile(MappingProfile):
        def configure(self, config: MapperConfiguration) -> None:
            config.register_mapping(Order, OrderDto)
            config.register_mapping(Customer, CustomerDto)

    config = MapperConfiguration(lambda c: c.add_profile(OrderProfile))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from type_sync.core.configuration import MapperConfiguration


class MappingProfile:
    """Base class for a group of mapping registrations.

    Subclasses override ``configure``. The base implementation registers
    nothing.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def configure(self, config: MapperConfiguration) -> None:
        """Register this profile's mappings on ``config``."""

    def __repr__(self) -> str:
        return f"<MappingProfile {self.name}>"
