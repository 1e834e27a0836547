"""Tree-walking evaluator that turns expression trees into callables."""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any

from type_sync.expressions.nodes import (
    Binary,
    Call,
    Conditional,
    Constant,
    Construct,
    Convert,
    Lambda,
    Member,
    Parameter,
    Unary,
)
from type_sync.expressions.operators import invoke
from type_sync.expressions.visitor import NodeVisitor
from type_sync.mapping.activator import create_instance, read_member, write_member
from type_sync.mapping.conversion import coerce

_BINARY: dict[str, Callable[[Any, Any], Any]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "//": operator.floordiv,
    "%": operator.mod,
    "**": operator.pow,
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "is": operator.is_,
    "is not": operator.is_not,
}

_UNARY: dict[str, Callable[[Any], Any]] = {
    "-": operator.neg,
    "+": operator.pos,
    "not": operator.not_,
}


class Evaluator(NodeVisitor):
    """Evaluates a node against bound parameter values."""

    def __init__(self, env: dict[Parameter, Any] | None = None) -> None:
        self._env = env or {}

    def visit_Parameter(self, node: Parameter) -> Any:  # noqa: N802
        try:
            return self._env[node]
        except KeyError:
            raise NameError(f"Unbound parameter '{node.name}'") from None

    def visit_Constant(self, node: Constant) -> Any:  # noqa: N802
        return node.value

    def visit_Member(self, node: Member) -> Any:  # noqa: N802
        return read_member(self.visit(node.target), node.name)

    def visit_Call(self, node: Call) -> Any:  # noqa: N802
        target = self.visit(node.target)
        return invoke(target, node.method, [self.visit(a) for a in node.args])

    def visit_Conditional(self, node: Conditional) -> Any:  # noqa: N802
        return self.visit(node.if_true) if self.visit(node.test) else self.visit(node.if_false)

    def visit_Binary(self, node: Binary) -> Any:  # noqa: N802
        left = self.visit(node.left)
        if node.op == "and":
            return left and self.visit(node.right)
        if node.op == "or":
            return left or self.visit(node.right)
        return _BINARY[node.op](left, self.visit(node.right))

    def visit_Unary(self, node: Unary) -> Any:  # noqa: N802
        return _UNARY[node.op](self.visit(node.operand))

    def visit_Convert(self, node: Convert) -> Any:  # noqa: N802
        return coerce(self.visit(node.operand), node.type)

    def visit_Construct(self, node: Construct) -> Any:  # noqa: N802
        instance = create_instance(node.type)
        for binding in node.bindings:
            write_member(instance, binding.name, self.visit(binding.value))
        return instance

    def visit_Lambda(self, node: Lambda) -> Callable[[Any], Any]:  # noqa: N802
        env = self._env

        def function(value: Any) -> Any:
            return Evaluator({**env, node.parameter: value}).visit(node.body)

        function.__qualname__ = f"<{node}>"
        return function


def compile_lambda(expression: Lambda) -> Callable[[Any], Any]:
    """Build a plain callable from a Lambda node."""
    return Evaluator().visit(expression)
