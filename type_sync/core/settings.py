"""Mapper settings.

MapperSettings is a Pydantic model for type-safe engine configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MapperSettings(BaseModel):
    """Configuration for the mapping engine and projection compiler."""

    model_config = ConfigDict(frozen=True)

    # Flattened source paths longer than this are never traversed
    max_path_depth: int = Field(default=10, ge=1)
    # When False, every type pair must be registered before use
    allow_implicit_plans: bool = True
