"""Deferred query over an in-memory source.

A Query records ``select``/``where`` stages as expression trees and runs
nothing until it is iterated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from type_sync.core.exceptions import ExpressionCaptureError
from type_sync.expressions.capture import capture
from type_sync.expressions.nodes import Call, Constant, Lambda, Node, Parameter

T = TypeVar("T")

Stage = tuple[str, Lambda]


def _as_lambda(fn: Callable[[Any], Any] | Lambda, parameter_type: Any) -> Lambda:
    """Trace ``fn``; untraceable callables become an opaque call node."""
    if isinstance(fn, Lambda):
        return fn
    try:
        return capture(fn, parameter_type)
    except ExpressionCaptureError:
        parameter = Parameter("item", parameter_type)
        body = Call(Constant(fn, type(fn)), "__call__", (parameter,))
        return Lambda(parameter, body, function=fn)


class Query(Generic[T]):
    """Lazily evaluated sequence of projection stages.

    Args:
        source: The underlying iterable, read on each iteration.
        element_type: Static type of the elements the query yields.
        stages: Recorded ``(operator, lambda)`` pairs.
    """

    def __init__(
        self,
        source: Iterable[Any],
        element_type: Any = Any,
        stages: tuple[Stage, ...] = (),
    ) -> None:
        self._source = source
        self._element_type = element_type
        self._stages = stages

    @property
    def element_type(self) -> Any:
        return self._element_type

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._stages

    @property
    def expression(self) -> Node:
        """The whole query as one expression tree rooted at the source."""
        node: Node = Constant(self._source, type(self._source))
        for method, function in self._stages:
            node = Call(node, method, (function,), list[Any])
        return node

    def select(self, projection: Callable[[Any], Any] | Lambda) -> Query[Any]:
        """Add a projection stage."""
        function = _as_lambda(projection, self._element_type)
        return Query(self._source, function.body.type, (*self._stages, ("select", function)))

    def where(self, predicate: Callable[[Any], Any] | Lambda) -> Query[T]:
        """Add a filter stage."""
        function = _as_lambda(predicate, self._element_type)
        return Query(self._source, self._element_type, (*self._stages, ("where", function)))

    def __iter__(self) -> Iterator[T]:
        items: Iterator[Any] = iter(self._source)
        for method, function in self._stages:
            compiled = function.compile()
            items = map(compiled, items) if method == "select" else filter(compiled, items)
        return items

    def to_list(self) -> list[T]:
        return list(self)

    def first(self) -> T | None:
        """First element, or None if the query is empty."""
        return next(iter(self), None)

    def __repr__(self) -> str:
        stages = "".join(f".{method}({function})" for method, function in self._stages)
        return f"Query[{getattr(self._element_type, '__name__', self._element_type)}]{stages}"
