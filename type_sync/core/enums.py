"""Classification enumerations shared by the resolver, engine and compiler."""

from __future__ import annotations

from enum import Enum


class MemberKind(Enum):
    """Structural classification of a member's declared type."""

    VALUE = "value"
    COLLECTION = "collection"
    COMPLEX = "complex"


class CollectionShape(Enum):
    """Concrete container materialised for a collection destination."""

    LIST = "list"
    TUPLE = "tuple"
    SET = "set"
    FROZENSET = "frozenset"


class ResolutionMode(Enum):
    """How a field rule produces its value, in priority order."""

    IGNORED = "ignored"
    RESOLVER_TYPE = "resolver_type"
    CUSTOM_FUNCTION = "custom_function"
    DIRECT = "direct"
    FLATTENED = "flattened"
    UNRESOLVED = "unresolved"
