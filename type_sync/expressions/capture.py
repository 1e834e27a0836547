"""Expression capture.

Python lambdas are opaque, so expression rules are recovered by calling the
function with a symbolic stand-in for its parameter. Attribute access,
method calls, indexing, arithmetic and comparisons on the stand-in record
AST nodes instead of computing values:

    capture(lambda o: o.customer.name)
    # Lambda(o -> Member(Member(o, "customer"), "name"))

Anything that needs a concrete value from the stand-in (``if`` on it,
``len()``, iteration, formatting) raises ExpressionCaptureError, and callers
fall back to treating the function as an opaque callable. Operations Python
evaluates without consulting the stand-in are not recorded: ``s.x is None``
is always False during tracing, so ``s.x if s.x is not None else d`` traces
as ``s.x``. Use ``&``, ``|`` and ``~`` for boolean logic inside captured
expressions.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, NoReturn, Optional

from type_sync.core.exceptions import ExpressionCaptureError
from type_sync.expressions.nodes import (
    Binary,
    Call,
    Constant,
    Lambda,
    Member,
    Node,
    Parameter,
    Unary,
    render,
)
from type_sync.mapping.descriptor import (
    collection_info,
    describe,
    is_numeric,
    resolved_hints,
    runtime_class,
    unwrap_optional,
)

_COMPARISONS = {"==", "!=", "<", "<=", ">", ">="}


def element_type(tp: Any) -> Any:
    info = collection_info(tp)
    return info[1] if info else Any


def member_type(owner: Any, name: str) -> Any:
    """Declared type of ``owner.name``, or Any when unknown."""
    base, _ = unwrap_optional(owner)
    member = describe(base).find(name)
    return member.type if member is not None else Any


def call_type(target: Any, method: str, args: tuple[Node, ...]) -> Any:
    """Static result type of ``target.method(*args)``."""
    element = element_type(target)
    selector = args[0].body.type if args and isinstance(args[0], Lambda) else None

    if collection_info(target) is not None:
        if method == "select":
            return list[selector if selector is not None else Any]  # type: ignore[misc]
        if method in ("where", "distinct", "order_by", "to_list"):
            return list[element]  # type: ignore[valid-type]
        if method == "to_tuple":
            return tuple[element, ...]  # type: ignore[valid-type]
        if method == "to_set":
            return set[element]  # type: ignore[valid-type]
        if method == "to_frozenset":
            return frozenset[element]  # type: ignore[valid-type]
        if method in ("first", "last"):
            return element
        if method == "first_or_default":
            return Optional[element]  # noqa: UP007
        if method == "count":
            return int
        if method in ("any", "all"):
            return bool
        if method == "average":
            return float
        if method in ("sum", "min", "max"):
            return selector if selector is not None else element
        if method == "__getitem__":
            return element

    cls = runtime_class(target)
    if cls is None:
        return Any
    attr = getattr(cls, method, None)
    if attr is None or not callable(attr):
        return Any
    return resolved_hints(attr).get("return", Any)


def _arithmetic_type(left: Any, right: Any) -> Any:
    if left == right:
        return left
    if is_numeric(left) and is_numeric(right):
        return float if float in (runtime_class(left), runtime_class(right)) else left
    return Any


def _parameter_name(fn: Callable[..., Any]) -> str:
    try:
        params = list(inspect.signature(fn).parameters)
    except (TypeError, ValueError):
        return "src"
    return params[0] if params else "src"


def _as_node(value: Any, parameter_type: Any = Any) -> Node:
    """Turn a traced argument into a node; callables become nested lambdas."""
    if isinstance(value, _Symbol):
        return object.__getattribute__(value, "_node")
    if isinstance(value, Node):
        return value
    if callable(value) and not isinstance(value, type):
        try:
            return capture(value, parameter_type)
        except ExpressionCaptureError:
            return Constant(value, type(value))
    return Constant(value, type(value))


class _Symbol:
    """Stand-in for a value during tracing."""

    __slots__ = ("_node",)

    def __init__(self, node: Node) -> None:
        object.__setattr__(self, "_node", node)

    # --- recording ---

    def __getattr__(self, name: str) -> _Symbol:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        node: Node = object.__getattribute__(self, "_node")
        return _Symbol(Member(node, name, member_type(node.type, name)))

    def __call__(self, *args: Any, **kwargs: Any) -> _Symbol:
        node: Node = object.__getattribute__(self, "_node")
        if kwargs:
            raise ExpressionCaptureError(
                f"Keyword arguments are not supported in expressions: {render(node)}"
            )
        if not isinstance(node, Member):
            raise ExpressionCaptureError(f"Only methods can be called: {render(node)}")
        target = node.target
        arg_nodes = tuple(_as_node(a, element_type(target.type)) for a in args)
        result_type = call_type(target.type, node.name, arg_nodes)
        return _Symbol(Call(target, node.name, arg_nodes, result_type))

    def __getitem__(self, key: Any) -> _Symbol:
        node: Node = object.__getattribute__(self, "_node")
        args = (_as_node(key),)
        return _Symbol(Call(node, "__getitem__", args, call_type(node.type, "__getitem__", args)))

    def _binary(self, op: str, other: Any, *, reflected: bool = False) -> _Symbol:
        left: Node = object.__getattribute__(self, "_node")
        right = _as_node(other)
        if reflected:
            left, right = right, left
        if op in _COMPARISONS:
            result_type: Any = bool
        elif op in ("and", "or"):
            result_type = bool if left.type is bool and right.type is bool else Any
        else:
            result_type = _arithmetic_type(left.type, right.type)
        return _Symbol(Binary(op, left, right, result_type))

    def __add__(self, other: Any) -> _Symbol:
        return self._binary("+", other)

    def __radd__(self, other: Any) -> _Symbol:
        return self._binary("+", other, reflected=True)

    def __sub__(self, other: Any) -> _Symbol:
        return self._binary("-", other)

    def __rsub__(self, other: Any) -> _Symbol:
        return self._binary("-", other, reflected=True)

    def __mul__(self, other: Any) -> _Symbol:
        return self._binary("*", other)

    def __rmul__(self, other: Any) -> _Symbol:
        return self._binary("*", other, reflected=True)

    def __truediv__(self, other: Any) -> _Symbol:
        return self._binary("/", other)

    def __rtruediv__(self, other: Any) -> _Symbol:
        return self._binary("/", other, reflected=True)

    def __floordiv__(self, other: Any) -> _Symbol:
        return self._binary("//", other)

    def __mod__(self, other: Any) -> _Symbol:
        return self._binary("%", other)

    def __pow__(self, other: Any) -> _Symbol:
        return self._binary("**", other)

    def __and__(self, other: Any) -> _Symbol:
        return self._binary("and", other)

    def __rand__(self, other: Any) -> _Symbol:
        return self._binary("and", other, reflected=True)

    def __or__(self, other: Any) -> _Symbol:
        return self._binary("or", other)

    def __ror__(self, other: Any) -> _Symbol:
        return self._binary("or", other, reflected=True)

    def __eq__(self, other: Any) -> _Symbol:  # type: ignore[override]
        return self._binary("==", other)

    def __ne__(self, other: Any) -> _Symbol:  # type: ignore[override]
        return self._binary("!=", other)

    def __lt__(self, other: Any) -> _Symbol:
        return self._binary("<", other)

    def __le__(self, other: Any) -> _Symbol:
        return self._binary("<=", other)

    def __gt__(self, other: Any) -> _Symbol:
        return self._binary(">", other)

    def __ge__(self, other: Any) -> _Symbol:
        return self._binary(">=", other)

    def __neg__(self) -> _Symbol:
        node: Node = object.__getattribute__(self, "_node")
        return _Symbol(Unary("-", node, node.type))

    def __invert__(self) -> _Symbol:
        node: Node = object.__getattribute__(self, "_node")
        return _Symbol(Unary("not", node, bool))

    __hash__ = None  # type: ignore[assignment]

    # --- operations that need a concrete value ---

    def _concrete(self, what: str) -> NoReturn:
        node: Node = object.__getattribute__(self, "_node")
        raise ExpressionCaptureError(f"Cannot use {what} on symbolic value {render(node)}")

    def __bool__(self) -> bool:
        self._concrete("a boolean test (use &, | and ~)")

    def __iter__(self) -> NoReturn:
        self._concrete("iteration")

    def __len__(self) -> int:
        self._concrete("len()")

    def __contains__(self, item: Any) -> bool:
        self._concrete("'in'")

    def __str__(self) -> str:
        self._concrete("str()")

    def __format__(self, spec: str) -> str:
        self._concrete("formatting")

    def __int__(self) -> int:
        self._concrete("int()")

    def __float__(self) -> float:
        self._concrete("float()")

    def __index__(self) -> int:
        self._concrete("indexing")

    def __setattr__(self, name: str, value: Any) -> None:
        self._concrete("assignment")

    def __repr__(self) -> str:
        return f"<symbol {render(object.__getattribute__(self, '_node'))}>"


def capture(fn: Callable[[Any], Any], parameter_type: Any = Any) -> Lambda:
    """Trace a one-argument callable into a Lambda node.

    Args:
        fn: The callable to trace. A Lambda node is returned unchanged.
        parameter_type: Declared type of the argument, used to type members.

    Returns:
        The traced Lambda, keeping ``fn`` as its ``function``.

    Raises:
        ExpressionCaptureError: If ``fn`` needs a concrete value to run.
    """
    if isinstance(fn, Lambda):
        return fn

    parameter = Parameter(_parameter_name(fn), parameter_type)
    try:
        result = fn(_Symbol(parameter))
    except ExpressionCaptureError:
        raise
    except Exception as e:
        raise ExpressionCaptureError(f"Cannot trace {fn!r}: {e}") from e

    if isinstance(result, _Symbol):
        body = object.__getattribute__(result, "_node")
    else:
        body = Constant(result, type(result))
    return Lambda(parameter, body, function=fn)
