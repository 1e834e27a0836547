"""Null-safe evaluation of member/call chains.

``evaluate`` runs an expression such as ``o.customer.address.city`` or
``o.items.max(lambda i: i.price)`` against a concrete source, stopping at
the first ``None`` instead of raising AttributeError. ``guard_chain`` is
the expression-level counterpart used by the projection compiler: it wraps
each intermediate link of a chain in a ``None`` test.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from type_sync.core.enums import MemberKind
from type_sync.core.exceptions import ConversionError
from type_sync.expressions.evaluator import Evaluator
from type_sync.expressions.nodes import (
    Call,
    Conditional,
    Constant,
    Convert,
    Lambda,
    Member,
    Node,
    is_none,
    render,
)
from type_sync.expressions.operators import invoke
from type_sync.expressions.visitor import NodeTransformer
from type_sync.mapping.activator import read_member
from type_sync.mapping.conversion import convert
from type_sync.mapping.descriptor import classify, runtime_class

logger = logging.getLogger(__name__)


def decompose(expression: Lambda) -> list[Member | Call] | None:
    """Split a lambda body into access steps in execution order.

    Returns None when the body is not a plain chain rooted at the lambda's
    parameter (for example an arithmetic expression).
    """
    steps: list[Member | Call] = []
    node: Node = expression.body
    while node is not expression.parameter:
        if isinstance(node, Convert):
            node = node.operand
        elif isinstance(node, (Member, Call)):
            steps.append(node)
            node = node.target
        else:
            return None
    steps.reverse()
    return steps


def _step(step: Member | Call, value: Any, evaluator: Evaluator) -> Any:
    try:
        if isinstance(step, Member):
            return read_member(value, step.name)
        args = [evaluator.visit(a) for a in step.args]
        return invoke(value, step.method, args)
    except Exception:
        logger.debug("Expression step %s failed; yielding None", render(step), exc_info=True)
        return None


def _evaluate_whole(expression: Lambda, source: Any) -> Any:
    function = expression.function or expression.compile()
    try:
        return function(source)
    except Exception:
        logger.debug("Expression %s failed; yielding None", expression, exc_info=True)
        return None


def evaluate(expression: Lambda, source: Any, expected_type: Any = Any) -> Any:
    """Evaluate ``expression`` against ``source`` without raising.

    Args:
        expression: A single-parameter Lambda.
        source: The value bound to the parameter.
        expected_type: When a value type, the result is converted to it.

    Returns:
        The result, or None if any link was None, a step failed, or the
        result could not be converted.
    """
    if source is None:
        return None

    steps = decompose(expression)
    if steps is None:
        value = _evaluate_whole(expression, source)
    else:
        evaluator = Evaluator({expression.parameter: source})
        value = source
        for step in steps:
            if value is None:
                return None
            value = _step(step, value, evaluator)
    return _fit_result(value, expected_type)


def call_or_evaluate(expression: Lambda, source: Any, expected_type: Any = Any) -> Any:
    """Call the function behind ``expression``, evaluating null-safely if it raises.

    The traced tree only records member access and calls on the parameter,
    so the function itself decides the value whenever it can run. A None
    link or an aggregate the source does not support makes it raise, and
    the chain is then walked by ``evaluate``.
    """
    if source is None:
        return None
    if expression.function is None:
        return evaluate(expression, source, expected_type)
    try:
        value = expression.function(source)
    except Exception:
        logger.debug(
            "Expression %s raised; evaluating null-safely", expression, exc_info=True
        )
        return evaluate(expression, source, expected_type)
    return _fit_result(value, expected_type)


def _fit_result(value: Any, expected_type: Any) -> Any:
    if value is None or expected_type is Any:
        return value
    cls = runtime_class(expected_type)
    if cls is not None and isinstance(value, cls):
        return value
    if classify(expected_type) is not MemberKind.VALUE:
        return value
    try:
        return convert(value, expected_type)
    except ConversionError:
        logger.debug("Cannot convert %r to %s; yielding None", value, expected_type)
        return None


def _is_link(node: Node) -> bool:
    return isinstance(node, (Member, Call))


class _NullGuard(NodeTransformer):
    def visit_Member(self, node: Member) -> Node:  # noqa: N802
        return self.guard(node, None)

    def visit_Call(self, node: Call) -> Node:  # noqa: N802
        return self.guard(node, None)

    def guard(self, node: Member | Call, default: Any) -> Node:
        steps: list[Member | Call] = []
        root: Node = node
        while _is_link(root):
            steps.append(root)  # type: ignore[arg-type]
            root = root.target  # type: ignore[attr-defined]
        steps.reverse()

        current = self.visit(root)
        links: list[Node] = []
        for step in steps:
            if isinstance(step, Call):
                args = tuple(self.visit(a) for a in step.args)
                current = dataclasses.replace(step, target=current, args=args)
            else:
                current = dataclasses.replace(step, target=current)
            links.append(current)

        result = links[-1]
        for link in reversed(links[:-1]):
            result = Conditional(is_none(link), Constant(default, result.type), result, result.type)
        return result


def guard_chain(body: Node, default: Any = None) -> Node:
    """Wrap each intermediate link of every member chain in ``body`` in a None test.

    ``o.customer.address.city`` becomes::

        (default if (o.customer is None) else
            (default if (o.customer.address is None) else o.customer.address.city))

    ``default`` is used for the outermost chain only; nested chains fall
    back to None.
    """
    guard = _NullGuard()
    if _is_link(body):
        return guard.guard(body, default)  # type: ignore[arg-type]
    return guard.visit(body)
