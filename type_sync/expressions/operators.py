"""Sequence operators available to expressions.

``items.sum(lambda i: i.price)`` in a traced expression becomes a Call node
with method ``"sum"``; at evaluation time it dispatches here whenever the
target is a collection. Operators over empty sequences that have no
meaningful result (``first``, ``min``, ``max``, ``average``) raise
ValueError, which the null-safe evaluator turns into ``None``.
"""

from __future__ import annotations

import collections.abc
from collections.abc import Callable, Iterable
from typing import Any

Selector = Callable[[Any], Any]


def _apply(items: Iterable[Any], selector: Selector | None) -> list[Any]:
    return [selector(x) for x in items] if selector is not None else list(items)


def _filtered(items: Iterable[Any], predicate: Selector | None) -> list[Any]:
    return [x for x in items if predicate(x)] if predicate is not None else list(items)


def select(items: Iterable[Any], selector: Selector) -> list[Any]:
    return [selector(x) for x in items]


def where(items: Iterable[Any], predicate: Selector) -> list[Any]:
    return [x for x in items if predicate(x)]


def first(items: Iterable[Any], predicate: Selector | None = None) -> Any:
    for x in _filtered(items, predicate):
        return x
    raise ValueError("Sequence contains no matching element")


def first_or_default(items: Iterable[Any], predicate: Selector | None = None) -> Any:
    return next(iter(_filtered(items, predicate)), None)


def last(items: Iterable[Any], predicate: Selector | None = None) -> Any:
    matched = _filtered(items, predicate)
    if not matched:
        raise ValueError("Sequence contains no matching element")
    return matched[-1]


def count(items: Iterable[Any], predicate: Selector | None = None) -> int:
    return len(_filtered(items, predicate))


def any_(items: Iterable[Any], predicate: Selector | None = None) -> bool:
    return bool(_filtered(items, predicate))


def all_(items: Iterable[Any], predicate: Selector) -> bool:
    return all(predicate(x) for x in items)


def sum_(items: Iterable[Any], selector: Selector | None = None) -> Any:
    return sum(_apply(items, selector))


def min_(items: Iterable[Any], selector: Selector | None = None) -> Any:
    return min(_apply(items, selector))


def max_(items: Iterable[Any], selector: Selector | None = None) -> Any:
    return max(_apply(items, selector))


def average(items: Iterable[Any], selector: Selector | None = None) -> Any:
    values = _apply(items, selector)
    if not values:
        raise ValueError("Sequence contains no elements")
    return sum(values) / len(values)


def distinct(items: Iterable[Any]) -> list[Any]:
    return list(dict.fromkeys(items))


def order_by(items: Iterable[Any], key: Selector) -> list[Any]:
    return sorted(items, key=key)


SEQUENCE_OPERATORS: dict[str, Callable[..., Any]] = {
    "select": select,
    "where": where,
    "first": first,
    "first_or_default": first_or_default,
    "last": last,
    "count": count,
    "any": any_,
    "all": all_,
    "sum": sum_,
    "min": min_,
    "max": max_,
    "average": average,
    "distinct": distinct,
    "order_by": order_by,
    "to_list": list,
    "to_tuple": tuple,
    "to_set": set,
    "to_frozenset": frozenset,
}


def is_sequence(value: Any) -> bool:
    return isinstance(value, collections.abc.Iterable) and not isinstance(
        value, (str, bytes, bytearray, collections.abc.Mapping)
    )


def invoke(target: Any, method: str, args: list[Any]) -> Any:
    """Call ``method`` on ``target``, preferring sequence operators for collections."""
    operator = SEQUENCE_OPERATORS.get(method)
    if operator is not None and is_sequence(target):
        return operator(target, *args)
    return getattr(target, method)(*args)
