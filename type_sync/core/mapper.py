"""Mapper - the runtime entry point created by MapperConfiguration."""

from __future__ import annotations

import collections.abc
from collections.abc import Iterable
from typing import Any, TypeVar

from type_sync.core.engine import MappingEngine
from type_sync.expressions.nodes import Lambda
from type_sync.mapping.options import MapOptions
from type_sync.projection.compiler import ProjectionCompiler
from type_sync.projection.queryable import Query

T = TypeVar("T")


class Mapper:
    """Maps objects eagerly and compiles projections for deferred use.

    Args:
        engine: Runtime interpreter for ``map``/``map_into``.
        compiler: Projection compiler for ``compile``/``project_to``.
    """

    def __init__(self, engine: MappingEngine, compiler: ProjectionCompiler) -> None:
        self._engine = engine
        self._compiler = compiler

    def map(
        self,
        source: Any,
        destination_type: type[T] | Any,
        *,
        source_type: Any = None,
        options: MapOptions | None = None,
    ) -> T | None:
        """Map ``source`` to a new ``destination_type``.

        Args:
            source: Object (or collection) to map. None maps to None.
            destination_type: Destination class, or a collection type such
                as ``list[OrderDto]``.
            source_type: Declared source type. Defaults to ``type(source)``.
            options: Per-call options such as ignored members.
        """
        if source is None:
            return None
        return self._engine.map(  # type: ignore[no-any-return]
            source,
            source_type if source_type is not None else type(source),
            destination_type,
            options,
        )

    def map_into(
        self,
        source: Any,
        destination: T,
        *,
        source_type: Any = None,
        destination_type: Any = None,
        options: MapOptions | None = None,
    ) -> T:
        """Map ``source`` onto an existing ``destination`` and return it."""
        if source is None or destination is None:
            return destination
        return self._engine.map_into(  # type: ignore[no-any-return]
            source,
            destination,
            source_type if source_type is not None else type(source),
            destination_type if destination_type is not None else type(destination),
            options,
        )

    def map_many(
        self,
        sources: Iterable[Any],
        destination_type: type[T],
        *,
        options: MapOptions | None = None,
    ) -> list[T | None]:
        """Map each source via map()."""
        return [self.map(source, destination_type, options=options) for source in sources]

    def compile(
        self,
        source_type: Any,
        destination_type: Any,
        options: MapOptions | None = None,
    ) -> Lambda:
        """Compile the projection expression for a type pair."""
        return self._compiler.compile(source_type, destination_type, options)

    def project_to(
        self,
        source: Iterable[Any],
        destination_type: type[T],
        *,
        source_type: Any = None,
        options: MapOptions | None = None,
    ) -> Query[T]:
        """Wrap ``source`` in a deferred query projecting to ``destination_type``.

        The element type is taken from ``source_type``, a Query's element
        type, or the first element of the source.
        """
        if source_type is None:
            if isinstance(source, Query):
                source_type = source.element_type
            else:
                if not isinstance(source, collections.abc.Sequence):
                    source = list(source)
                if not source:
                    return Query(source, destination_type)
                source_type = type(source[0])  # type: ignore[index]

        projection = self.compile(source_type, destination_type, options)
        if isinstance(source, Query):
            return source.select(projection)
        return Query(source, source_type).select(projection)
