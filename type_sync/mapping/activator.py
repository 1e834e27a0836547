"""Instance creation and member access.

Creates default destination instances for Pydantic models, dataclasses and
plain classes, and reads/writes members by name.
"""

from __future__ import annotations

import dataclasses
import inspect
from typing import Any

from type_sync.core.exceptions import ConstructionError
from type_sync.mapping.conversion import zero_value
from type_sync.mapping.descriptor import (
    describe,
    is_pydantic_model,
    resolved_hints,
    runtime_class,
    type_name,
)


def _required_arguments(cls: type) -> dict[str, Any]:
    """Zero values for every constructor argument without a default."""
    if dataclasses.is_dataclass(cls):
        hints = resolved_hints(cls)
        return {
            f.name: zero_value(hints.get(f.name, Any))
            for f in dataclasses.fields(cls)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }

    try:
        params = inspect.signature(cls).parameters
    except (ValueError, TypeError):
        return {}
    hints = resolved_hints(cls.__init__)  # type: ignore[misc]
    return {
        name: zero_value(hints.get(name, Any))
        for name, param in params.items()
        if param.default is inspect.Parameter.empty
        and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    }


def create_instance(tp: Any) -> Any:
    """Create a default instance of ``tp``.

    Detection order:
    1. Pydantic BaseModel with required fields -> model_construct() with zero values
    2. dataclass / plain class -> constructor with zero values for required arguments

    Raises:
        ConstructionError: If the constructor rejects the default arguments.
    """
    cls = runtime_class(tp)
    if cls is None:
        raise ConstructionError(type_name(tp), "not a class")

    if is_pydantic_model(cls):
        required = {
            name: zero_value(info.annotation)
            for name, info in cls.model_fields.items()
            if info.is_required()
        }
        if required:
            return cls.model_construct(**required)

    try:
        return cls(**_required_arguments(cls))
    except Exception as e:
        raise ConstructionError(type_name(cls), str(e)) from e


def read_member(obj: Any, name: str) -> Any:
    """Read a member by name, falling back to a case-insensitive lookup."""
    try:
        return getattr(obj, name)
    except AttributeError:
        member = describe(type(obj)).find(name)
        if member is None or member.name == name:
            raise
        return getattr(obj, member.name)


def write_member(obj: Any, name: str, value: Any) -> None:
    """Assign a member, bypassing the frozen guard of frozen dataclasses and models."""
    cls = type(obj)
    if is_pydantic_model(cls) and cls.model_config.get("frozen") and name in cls.model_fields:
        obj.__dict__[name] = value
        obj.__pydantic_fields_set__.add(name)
        return

    params = getattr(obj, "__dataclass_params__", None)
    if params is not None and params.frozen:
        object.__setattr__(obj, name, value)
    else:
        setattr(obj, name, value)
