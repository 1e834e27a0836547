"""Type descriptors.

Enumerates the readable and writable members of Pydantic models,
dataclasses and plain annotated classes, and classifies each declared
type as a value, a collection of T, or a complex object.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import decimal
import enum
import inspect
import types
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, ClassVar, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from type_sync.core.enums import CollectionShape, MemberKind

NoneType = type(None)

_VALUE_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    decimal.Decimal,
    str,
    bytes,
    bytearray,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
)

_TEXT_TYPES: tuple[type, ...] = (str, bytes, bytearray)


# ---------------------------------------------------------------------------
# Declared-type helpers
# ---------------------------------------------------------------------------


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Split ``Optional[X]`` into ``(X, True)``; other types return ``(tp, False)``."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        rest = tuple(a for a in args if a is not NoneType)
        if len(rest) == len(args):
            return tp, False
        if len(rest) == 1:
            return rest[0], True
        return Union[rest], True  # noqa: UP007
    return tp, False


def runtime_class(tp: Any) -> type | None:
    """The concrete class behind a declared type, if there is one."""
    base, _ = unwrap_optional(tp)
    origin = get_origin(base) or base
    if origin is Any or origin is Union or origin is types.UnionType:
        return None
    return origin if isinstance(origin, type) else None


def is_value_type(tp: Any) -> bool:
    base, _ = unwrap_optional(tp)
    if base is Any or get_origin(base) is Literal:
        return True
    cls = runtime_class(base)
    if cls is None:
        return False
    if issubclass(cls, enum.Enum) or issubclass(cls, _VALUE_TYPES):
        return True
    return issubclass(cls, collections.abc.Mapping)


def is_numeric(tp: Any) -> bool:
    """True for int, float and Decimal (optionally wrapped in Optional); bool excluded."""
    cls = runtime_class(tp)
    if cls is None or cls is bool or issubclass(cls, enum.Enum):
        return False
    return issubclass(cls, (int, float, decimal.Decimal))


def collection_info(tp: Any) -> tuple[CollectionShape, Any] | None:
    """Return ``(shape, element_type)`` for enumerable types other than text and mappings."""
    base, _ = unwrap_optional(tp)
    cls = runtime_class(base)
    if cls is None or issubclass(cls, _TEXT_TYPES) or issubclass(cls, enum.Enum):
        return None
    if issubclass(cls, collections.abc.Mapping) or not issubclass(cls, collections.abc.Iterable):
        return None
    # BaseModel iterates over (name, value) pairs
    if is_pydantic_model(cls):
        return None

    args = get_args(base)
    if issubclass(cls, tuple):
        shape = CollectionShape.TUPLE
        if len(args) == 2 and args[1] is Ellipsis:
            element = args[0]
        elif args and all(a == args[0] for a in args):
            element = args[0]
        else:
            element = Any
        return shape, element

    if issubclass(cls, frozenset):
        shape = CollectionShape.FROZENSET
    elif issubclass(cls, collections.abc.Set):
        shape = CollectionShape.SET
    else:
        shape = CollectionShape.LIST
    return shape, (args[0] if args else Any)


def classify(tp: Any) -> MemberKind:
    if is_value_type(tp):
        return MemberKind.VALUE
    if collection_info(tp) is not None:
        return MemberKind.COLLECTION
    if runtime_class(tp) is not None:
        return MemberKind.COMPLEX
    return MemberKind.VALUE


def is_assignable(source: Any, destination: Any) -> bool:
    """Whether a value declared as ``source`` can be stored as ``destination`` unchanged."""
    if destination is Any or source is Any or source == destination:
        return True
    if source is NoneType:
        return unwrap_optional(destination)[1]

    src_base, src_optional = unwrap_optional(source)
    dst_base, dst_optional = unwrap_optional(destination)
    if src_optional and not dst_optional:
        return False
    if dst_base is Any or src_base == dst_base:
        return True
    if get_origin(dst_base) in (Union, types.UnionType):
        return any(is_assignable(src_base, arm) for arm in get_args(dst_base))

    src_cls = runtime_class(src_base)
    dst_cls = runtime_class(dst_base)
    if src_cls is None or dst_cls is None:
        return False
    try:
        if not issubclass(src_cls, dst_cls):
            return False
    except TypeError:
        return False

    dst_args = get_args(dst_base)
    if not dst_args:
        return True
    src_args = get_args(src_base)
    if len(src_args) != len(dst_args):
        return False
    return all(
        (a is Ellipsis and b is Ellipsis) or is_assignable(a, b)
        for a, b in zip(src_args, dst_args, strict=True)
    )


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemberInfo:
    """A named member of a type with its declared type and access capability."""

    name: str
    type: Any
    readable: bool
    writable: bool
    kind: MemberKind
    nullable: bool
    element_type: Any = None
    shape: CollectionShape | None = None


def member_info(name: str, tp: Any, *, readable: bool = True, writable: bool = True) -> MemberInfo:
    """Build a classified MemberInfo for a declared type."""
    _, nullable = unwrap_optional(tp)
    info = collection_info(tp)
    return MemberInfo(
        name=name,
        type=tp,
        readable=readable,
        writable=writable,
        kind=classify(tp),
        nullable=nullable,
        element_type=info[1] if info else None,
        shape=info[0] if info else None,
    )


@dataclass(frozen=True)
class TypeDescriptor:
    """The structural members of a type, in declaration order."""

    type: Any
    members: tuple[MemberInfo, ...]

    @property
    def name(self) -> str:
        return type_name(self.type)

    @property
    def readable(self) -> tuple[MemberInfo, ...]:
        return tuple(m for m in self.members if m.readable)

    @property
    def writable(self) -> tuple[MemberInfo, ...]:
        return tuple(m for m in self.members if m.writable)

    def find(self, name: str, *, writable: bool = False) -> MemberInfo | None:
        """Case-insensitive member lookup; an exact match wins over a folded one."""
        candidates = self.writable if writable else self.readable
        folded = None
        for member in candidates:
            if member.name == name:
                return member
            if folded is None and member.name.lower() == name.lower():
                folded = member
        return folded


def resolved_hints(obj: Any) -> dict[str, Any]:
    """Resolved annotations, degrading to Any for names that cannot be resolved."""
    try:
        return get_type_hints(obj)
    except Exception:
        raw = getattr(obj, "__annotations__", {}) or {}
        return {name: (Any if isinstance(tp, str) else tp) for name, tp in raw.items()}


def is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _is_framework_class(klass: type) -> bool:
    return klass is object or klass.__module__.split(".")[0] == "pydantic"


def _enumerate(cls: type) -> dict[str, MemberInfo]:
    members: dict[str, MemberInfo] = {}

    # Pydantic model - annotations are already resolved on the field
    if is_pydantic_model(cls):
        for name, info in cls.model_fields.items():
            members[name] = member_info(name, info.annotation or Any)

    # Dataclass
    elif dataclasses.is_dataclass(cls):
        hints = resolved_hints(cls)
        for f in dataclasses.fields(cls):
            members[f.name] = member_info(f.name, hints.get(f.name, Any))

    # Plain class - annotations, then __init__ parameters
    else:
        for name, tp in resolved_hints(cls).items():
            if name.startswith("_") or get_origin(tp) is ClassVar or tp is ClassVar:
                continue
            members[name] = member_info(name, tp)
        init = cls.__init__  # type: ignore[misc]
        if init is not object.__init__:
            try:
                params = inspect.signature(init).parameters
            except (ValueError, TypeError):
                params = {}
            init_hints = resolved_hints(init)
            for name, param in params.items():
                if name == "self" or name.startswith("_") or name in members:
                    continue
                if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                    continue
                members[name] = member_info(name, init_hints.get(name, Any))

    # Properties: readable through fget, writable only with a setter
    for klass in reversed(cls.__mro__):
        if _is_framework_class(klass):
            continue
        for name, attr in vars(klass).items():
            if not isinstance(attr, property) or name.startswith("_"):
                continue
            tp = resolved_hints(attr.fget).get("return", Any) if attr.fget else Any
            members[name] = member_info(
                name, tp, readable=attr.fget is not None, writable=attr.fset is not None
            )

    return members


@lru_cache(maxsize=512)
def describe(tp: Any) -> TypeDescriptor:
    """Describe a type's members. Value and collection types have none."""
    cls = runtime_class(tp)
    if cls is None or classify(tp) is not MemberKind.COMPLEX:
        return TypeDescriptor(type=tp, members=())
    return TypeDescriptor(type=cls, members=tuple(_enumerate(cls).values()))
