"""Scalar conversion.

``convert`` is strict and raises ConversionError. ``coerce`` implements the
lenient mapping semantics: string-to-enum falls back to the first member,
every other failure returns the original value unchanged.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import uuid
from typing import Any

from type_sync.core.enums import CollectionShape
from type_sync.core.exceptions import ConversionError
from type_sync.mapping.descriptor import (
    collection_info,
    is_numeric,
    runtime_class,
    type_name,
    unwrap_optional,
)

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}

_EMPTY_SHAPES = {
    CollectionShape.LIST: list,
    CollectionShape.TUPLE: tuple,
    CollectionShape.SET: set,
    CollectionShape.FROZENSET: frozenset,
}


def zero_value(tp: Any) -> Any:
    """The default value of a declared type when nothing was assigned."""
    base, optional = unwrap_optional(tp)
    if optional:
        return None
    cls = runtime_class(base)
    if cls is None:
        return None
    if issubclass(cls, enum.Enum):
        return next(iter(cls), None)
    if cls is bool:
        return False
    if is_numeric(cls):
        return cls()
    if issubclass(cls, str):
        return ""
    if issubclass(cls, bytes):
        return b""
    if issubclass(cls, dict):
        return {}
    info = collection_info(base)
    if info is not None:
        return _EMPTY_SHAPES[info[0]]()
    return None


def _parse_enum(value: str, cls: type[enum.Enum]) -> enum.Enum:
    text = value.strip()
    for member in cls:
        if member.name.lower() == text.lower():
            return member
    for member in cls:
        if isinstance(member.value, str) and member.value.lower() == text.lower():
            return member
    raise ConversionError(value, cls.__name__, "no matching member")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConversionError(value, "bool")
    return bool(value)


def _is_instance(value: Any, cls: type) -> bool:
    # bool subclasses int but is not a number here
    if isinstance(value, bool) and cls in (int, float):
        return False
    return isinstance(value, cls)


def convert(value: Any, tp: Any) -> Any:
    """Convert a scalar to ``tp``, raising ConversionError when that is impossible."""
    base, optional = unwrap_optional(tp)
    if value is None:
        if optional:
            return None
        raise ConversionError(value, type_name(base))
    cls = runtime_class(base)
    if cls is None or _is_instance(value, cls):
        return value

    try:
        if issubclass(cls, enum.Enum):
            if isinstance(value, str):
                return _parse_enum(value, cls)
            return cls(value)
        if cls is bool:
            return _parse_bool(value)
        if cls is str:
            return value.name if isinstance(value, enum.Enum) else str(value)
        if cls is int:
            if isinstance(value, str):
                return int(value.strip())
            return int(value)
        if cls is float:
            return float(value)
        if cls is decimal.Decimal:
            return decimal.Decimal(str(value))
        if cls is datetime.datetime and isinstance(value, str):
            return datetime.datetime.fromisoformat(value)
        if cls is datetime.date:
            if isinstance(value, datetime.datetime):
                return value.date()
            if isinstance(value, str):
                return datetime.date.fromisoformat(value)
        if cls is datetime.time and isinstance(value, str):
            return datetime.time.fromisoformat(value)
        if cls is uuid.UUID:
            return uuid.UUID(str(value))
        return cls(value)
    except ConversionError:
        raise
    except (TypeError, ValueError, ArithmeticError) as e:
        raise ConversionError(value, type_name(cls), str(e)) from e


def coerce(value: Any, tp: Any) -> Any:
    """Lenient conversion used when writing a destination field."""
    base, optional = unwrap_optional(tp)
    cls = runtime_class(base)
    if value is None:
        if optional or cls is None:
            return None
        if cls is bool or is_numeric(cls) or issubclass(cls, enum.Enum):
            return zero_value(base)
        return None
    if cls is None or _is_instance(value, cls):
        return value

    if issubclass(cls, enum.Enum) and isinstance(value, str):
        try:
            return _parse_enum(value, cls)
        except ConversionError:
            return zero_value(cls)

    try:
        return convert(value, base)
    except ConversionError:
        return value
