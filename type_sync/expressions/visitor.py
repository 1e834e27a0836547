"""Expression tree visitors."""

from __future__ import annotations

import dataclasses
from typing import Any

from type_sync.expressions.nodes import Binding, Node, Parameter


class NodeVisitor:
    """Dispatches ``visit_<NodeClass>`` methods, like ``ast.NodeVisitor``."""

    def visit(self, node: Node) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: Node) -> Any:
        raise TypeError(f"{type(self).__name__} cannot visit {type(node).__name__}")


class NodeTransformer(NodeVisitor):
    """Rebuilds a tree, replacing the nodes its ``visit_*`` methods return."""

    def generic_visit(self, node: Node) -> Node:
        changes: dict[str, Any] = {}
        for f in dataclasses.fields(node):  # type: ignore[arg-type]
            value = getattr(node, f.name)
            new_value = self._transform(value)
            if new_value is not value:
                changes[f.name] = new_value
        return dataclasses.replace(node, **changes) if changes else node  # type: ignore[type-var]

    def _transform(self, value: Any) -> Any:
        if isinstance(value, Node):
            return self.visit(value)
        if isinstance(value, Binding):
            new = self.visit(value.value)
            return value if new is value.value else Binding(value.name, new)
        if isinstance(value, tuple) and any(isinstance(v, (Node, Binding)) for v in value):
            items = tuple(self._transform(v) for v in value)
            return value if all(a is b for a, b in zip(items, value, strict=True)) else items
        return value


class ParameterReplacer(NodeTransformer):
    """Substitutes every use of one parameter with another expression.

    Used to splice stored member expressions onto a shared source parameter
    and to inline nested projections under a parent member access.
    """

    def __init__(self, parameter: Parameter, replacement: Node) -> None:
        self._parameter = parameter
        self._replacement = replacement

    def visit_Parameter(self, node: Parameter) -> Node:  # noqa: N802
        return self._replacement if node is self._parameter else node
