"""TypeSync - convention-based object mapping and projection engine."""

from __future__ import annotations

from type_sync.core.configuration import MapperConfiguration
from type_sync.core.engine import MappingEngine
from type_sync.core.enums import CollectionShape, MemberKind, ResolutionMode
from type_sync.core.exceptions import (
    ConfigError,
    ConfigurationError,
    ConstructionError,
    ConversionError,
    ExpressionCaptureError,
    FlatteningDepthError,
    InvalidConfigurationError,
    MappingError,
    MissingElementPlanError,
    PlanNotFoundError,
    ProjectionCycleError,
    TypeSyncError,
    UnknownMemberError,
)
from type_sync.core.mapper import Mapper
from type_sync.core.profile import MappingProfile
from type_sync.core.registry import PlanRegistry
from type_sync.core.settings import MapperSettings
from type_sync.expressions.capture import capture
from type_sync.expressions.nodes import Lambda
from type_sync.mapping.builder import MemberOptions, PlanBuilder
from type_sync.mapping.options import MapOptions
from type_sync.mapping.protocol import ValueResolver
from type_sync.projection.compiler import ProjectionCompiler
from type_sync.projection.queryable import Query

__all__ = [
    # Configuration
    "MapperConfiguration",
    "MapperSettings",
    "MappingProfile",
    "PlanBuilder",
    "MemberOptions",
    "ValueResolver",
    # Mapping
    "Mapper",
    "MappingEngine",
    "MapOptions",
    "PlanRegistry",
    # Projection
    "ProjectionCompiler",
    "Query",
    "Lambda",
    "capture",
    # Enums
    "MemberKind",
    "CollectionShape",
    "ResolutionMode",
    # Exceptions
    "TypeSyncError",
    "ConfigurationError",
    "ConfigError",
    "InvalidConfigurationError",
    "UnknownMemberError",
    "PlanNotFoundError",
    "MissingElementPlanError",
    "ProjectionCycleError",
    "MappingError",
    "ConstructionError",
    "FlatteningDepthError",
    "ConversionError",
    "ExpressionCaptureError",
]
