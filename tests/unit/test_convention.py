"""Unit tests for convention resolution and flattening."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from type_sync.core.enums import ResolutionMode
from type_sync.core.exceptions import UnknownMemberError
from type_sync.mapping.convention import build_plan, find_flattened_path, resolve_dotted_path


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class Customer:
    name: str = ""
    address: Address | None = None


@dataclass
class Order:
    id: int = 0
    customer: Customer | None = None


@dataclass
class OrderSummary:
    ID: int = 0
    customer_name: str | None = None
    CustomerAddressCity: str | None = None
    customer_address_street: str | None = None
    shipping_code: str | None = None


@dataclass
class CustomerFirst:
    customer: Customer | None = None
    customer_address: Address | None = None


@dataclass
class AddressFirst:
    customer_address: Address | None = None
    customer: Customer | None = None


@dataclass
class CityOnly:
    customer_address_city: str | None = None


class TestBuildPlan:
    def test_exact_match_is_case_insensitive(self) -> None:
        plan = build_plan(Order, OrderSummary)
        rule = plan.rule_for("ID")
        assert rule is not None
        assert rule.mode is ResolutionMode.DIRECT
        assert rule.source_member is not None and rule.source_member.name == "id"

    def test_snake_case_flattening(self) -> None:
        plan = build_plan(Order, OrderSummary)
        rule = plan.rule_for("customer_name")
        assert rule is not None
        assert rule.mode is ResolutionMode.FLATTENED
        assert rule.path_names == ("customer", "name")

    def test_pascal_case_flattening(self) -> None:
        plan = build_plan(Order, OrderSummary)
        rule = plan.rule_for("CustomerAddressCity")
        assert rule is not None
        assert rule.path_names == ("customer", "address", "city")

    def test_three_level_snake_case(self) -> None:
        plan = build_plan(Order, OrderSummary)
        rule = plan.rule_for("customer_address_street")
        assert rule is not None
        assert rule.path_names == ("customer", "address", "street")

    def test_unmatched_member_is_unresolved(self) -> None:
        plan = build_plan(Order, OrderSummary)
        rule = plan.rule_for("shipping_code")
        assert rule is not None
        assert rule.mode is ResolutionMode.UNRESOLVED
        assert [r.name for r in plan.unresolved()] == ["shipping_code"]

    def test_one_rule_per_writable_member(self) -> None:
        plan = build_plan(Order, OrderSummary)
        assert [r.name for r in plan.field_rules] == [
            "ID",
            "customer_name",
            "CustomerAddressCity",
            "customer_address_street",
            "shipping_code",
        ]


class TestFlatteningTies:
    def test_first_declared_member_wins(self) -> None:
        path = find_flattened_path(CustomerFirst, "customer_address_city")
        assert path is not None
        assert [m.name for m in path] == ["customer", "address", "city"]

    def test_declaration_order_changes_the_match(self) -> None:
        path = find_flattened_path(AddressFirst, "customer_address_city")
        assert path is not None
        assert [m.name for m in path] == ["customer_address", "city"]

    def test_direct_match_beats_flattening(self) -> None:
        plan = build_plan(CityOnly, CityOnly)
        rule = plan.rule_for("customer_address_city")
        assert rule is not None
        assert rule.mode is ResolutionMode.DIRECT

    def test_no_path(self) -> None:
        assert find_flattened_path(Order, "customer_phone") is None


class TestDottedPath:
    def test_resolves_declared_members(self) -> None:
        path = resolve_dotted_path(Order, "customer.address.city")
        assert [m.name for m in path] == ["customer", "address", "city"]
        assert path[-1].type is str

    def test_unknown_segment_raises(self) -> None:
        with pytest.raises(UnknownMemberError, match="phone"):
            resolve_dotted_path(Order, "customer.phone")
