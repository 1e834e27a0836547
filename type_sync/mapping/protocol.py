"""Value resolver protocol.

Resolver classes are registered with ``map_from_resolver`` and instantiated
without arguments each time the member is mapped.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ValueResolver(Protocol):
    """Computes a destination member value from the whole source object."""

    def resolve(self, source: Any, destination: Any, current: Any) -> Any:
        """Return the value for the member.

        Args:
            source: The object being mapped.
            destination: The destination under construction.
            current: The member's value on the destination before assignment.
        """
        ...
