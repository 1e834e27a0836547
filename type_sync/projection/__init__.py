"""Projection layer - compile mapping plans into deferred expressions."""

from __future__ import annotations

from type_sync.projection.compiler import ProjectionCompiler
from type_sync.projection.queryable import Query

__all__ = [
    "ProjectionCompiler",
    "Query",
]
