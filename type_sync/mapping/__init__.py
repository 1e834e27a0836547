"""Mapping layer - type descriptors, plans and convention resolution."""

from __future__ import annotations

from type_sync.mapping.builder import MemberOptions, PlanBuilder
from type_sync.mapping.convention import build_plan, find_flattened_path, resolve_dotted_path
from type_sync.mapping.descriptor import MemberInfo, TypeDescriptor, describe
from type_sync.mapping.options import MapOptions
from type_sync.mapping.plan import FieldRule, TypePlan
from type_sync.mapping.protocol import ValueResolver

__all__ = [
    "PlanBuilder",
    "MemberOptions",
    "MapOptions",
    "ValueResolver",
    "TypePlan",
    "FieldRule",
    "TypeDescriptor",
    "MemberInfo",
    "describe",
    "build_plan",
    "find_flattened_path",
    "resolve_dotted_path",
]
