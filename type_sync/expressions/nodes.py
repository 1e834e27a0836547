"""Expression tree nodes.

A small, language-neutral AST used for expression-based member rules and
for compiled projections. Every node carries its static ``type`` (``Any``
when unknown). Nodes compare by identity, so a Parameter is a unique symbol.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from type_sync.mapping.descriptor import type_name


class Node:
    """Base class for expression nodes."""

    type: Any

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True, eq=False)
class Parameter(Node):
    name: str
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Constant(Node):
    value: Any
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Member(Node):
    target: Node
    name: str
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Call(Node):
    """Method or sequence-operator invocation on ``target``."""

    target: Node
    method: str
    args: tuple[Node, ...] = ()
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Conditional(Node):
    test: Node
    if_true: Node
    if_false: Node
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Binary(Node):
    op: str
    left: Node
    right: Node
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Unary(Node):
    op: str
    operand: Node
    type: Any = Any


@dataclass(frozen=True, eq=False)
class Convert(Node):
    operand: Node
    type: Any = Any


@dataclass(frozen=True)
class Binding:
    """Assignment of an expression to a destination member."""

    name: str
    value: Node


@dataclass(frozen=True, eq=False)
class Construct(Node):
    """Create ``type`` with its defaults, then assign each binding."""

    type: Any
    bindings: tuple[Binding, ...] = ()


@dataclass(frozen=True, eq=False)
class Lambda(Node):
    """Single-parameter function. ``function`` keeps the traced callable, if any."""

    parameter: Parameter
    body: Node
    function: Callable[[Any], Any] | None = None

    @property
    def type(self) -> Any:  # type: ignore[override]
        return Callable[[self.parameter.type], self.body.type]

    def compile(self) -> Callable[[Any], Any]:
        """Turn the tree into a plain callable."""
        from type_sync.expressions.evaluator import compile_lambda

        return compile_lambda(self)


def is_none(operand: Node) -> Binary:
    return Binary("is", operand, Constant(None, type(None)), bool)


def render(node: Node) -> str:
    """Python-like text for diagnostics."""
    if isinstance(node, Parameter):
        return node.name
    if isinstance(node, Constant):
        if callable(node.value):
            return getattr(node.value, "__name__", repr(node.value))
        return repr(node.value)
    if isinstance(node, Member):
        return f"{render(node.target)}.{node.name}"
    if isinstance(node, Call):
        args = ", ".join(render(a) for a in node.args)
        return f"{render(node.target)}.{node.method}({args})"
    if isinstance(node, Conditional):
        return f"({render(node.if_true)} if {render(node.test)} else {render(node.if_false)})"
    if isinstance(node, Binary):
        return f"({render(node.left)} {node.op} {render(node.right)})"
    if isinstance(node, Unary):
        sep = " " if node.op.isalpha() else ""
        return f"{node.op}{sep}{render(node.operand)}"
    if isinstance(node, Convert):
        return f"{type_name(node.type)}({render(node.operand)})"
    if isinstance(node, Construct):
        bindings = ", ".join(f"{b.name}={render(b.value)}" for b in node.bindings)
        return f"{type_name(node.type)}({bindings})"
    if isinstance(node, Lambda):
        return f"lambda {node.parameter.name}: {render(node.body)}"
    return repr(node)
