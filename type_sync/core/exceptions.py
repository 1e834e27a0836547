"""TypeSync exception hierarchy.

Only configuration errors (and a destination that cannot be constructed at
all) cross the mapping boundary. Per-field faults raised while mapping are
absorbed by the engine and reported through logging.
"""

from __future__ import annotations

from dataclasses import dataclass


class TypeSyncError(Exception):
    """Base exception for all TypeSync errors."""


# --- Configuration ---


class ConfigurationError(TypeSyncError):
    """Base for mapping configuration errors."""


@dataclass(frozen=True)
class ConfigError:
    """A single unresolved destination field found by validation."""

    destination_type: str
    field_name: str

    def __str__(self) -> str:
        return f"Unmapped field: {self.destination_type}.{self.field_name}"


class InvalidConfigurationError(ConfigurationError):
    """Raised by assert_valid() when one or more fields cannot be resolved."""

    def __init__(self, errors: list[ConfigError]) -> None:
        self.errors = errors
        details = "\n".join(str(e) for e in errors)
        super().__init__(f"Mapping configuration is invalid:\n{details}")


class UnknownMemberError(ConfigurationError):
    """Raised when configuring a member the destination type does not have."""

    def __init__(self, type_name: str, member_name: str) -> None:
        self.type_name = type_name
        self.member_name = member_name
        super().__init__(f"'{type_name}' has no member '{member_name}'")


class PlanNotFoundError(ConfigurationError):
    """Raised when a type pair has no plan and implicit plans are disabled."""

    def __init__(self, source_type: str, destination_type: str) -> None:
        self.source_type = source_type
        self.destination_type = destination_type
        super().__init__(f"No mapping registered from '{source_type}' to '{destination_type}'")


class MissingElementPlanError(ConfigurationError):
    """Raised by the projection compiler for an unmapped collection element pair."""

    def __init__(self, source_element: str, destination_element: str, member_name: str) -> None:
        self.source_element = source_element
        self.destination_element = destination_element
        self.member_name = member_name
        super().__init__(
            f"Missing map configuration from '{source_element}' to "
            f"'{destination_element}'. This is required to map the collection "
            f"member '{member_name}'."
        )


class ProjectionCycleError(ConfigurationError):
    """Raised when compiling a projection would recurse into itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(f"Recursive projection detected: {' -> '.join(chain)}")


# --- Mapping ---


class MappingError(TypeSyncError):
    """Base for runtime mapping errors."""


class ConstructionError(MappingError):
    """Raised when a destination instance cannot be created."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        super().__init__(f"Cannot construct {type_name}: {detail}")


class FlatteningDepthError(MappingError):
    """Raised when a flattened source path exceeds the configured depth."""

    def __init__(self, path: tuple[str, ...], max_depth: int) -> None:
        self.path = path
        self.max_depth = max_depth
        super().__init__(
            f"Path depth {len(path)} ({'.'.join(path)}) exceeds maximum allowed depth "
            f"of {max_depth}"
        )


class ConversionError(MappingError):
    """Raised when a scalar value cannot be converted to the requested type."""

    def __init__(self, value: object, target: str, detail: str = "") -> None:
        self.value = value
        self.target = target
        suffix = f": {detail}" if detail else ""
        super().__init__(f"Cannot convert {value!r} to {target}{suffix}")


# --- Expressions ---


class ExpressionCaptureError(TypeSyncError):
    """Raised when a callable cannot be traced into an expression tree."""
