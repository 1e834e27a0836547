"""Unit tests for the runtime mapping engine."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, ConfigDict

from type_sync.core.configuration import MapperConfiguration
from type_sync.core.exceptions import PlanNotFoundError
from type_sync.core.mapper import Mapper
from type_sync.core.settings import MapperSettings
from type_sync.mapping.options import MapOptions

# --- Test models ---


class Status(enum.Enum):
    NEW = "new"
    SHIPPED = "shipped"


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class AddressDto:
    street: str = ""
    city: str = ""


@dataclass
class Customer:
    name: str | None = ""
    email: str = ""
    address: Address | None = None


@dataclass
class CustomerDto:
    name: str | None = ""
    email: str = ""
    address: AddressDto | None = None
    address_city: str | None = None
    nickname: str = "none"


@dataclass
class OrderLine:
    product: str = ""
    quantity: int = 0


@dataclass
class OrderLineDto:
    product: str = ""
    quantity: int = 0


@dataclass
class Order:
    id: int = 0
    status: str = "new"
    customer: Customer | None = None
    lines: list[OrderLine] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    codes: list[str] = field(default_factory=list)


@dataclass
class OrderDto:
    id: int = 0
    status: Status = Status.NEW
    customer_name: str | None = None
    lines: list[OrderLineDto] = field(default_factory=list)
    tags: tuple[str, ...] = ()
    codes: set[str] = field(default_factory=set)


class OrderModel(BaseModel):
    id: int
    customer_name: str | None = None


class FrozenOrderModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = 0
    customer_name: str | None = None


class Exploding:
    @property
    def name(self) -> str:
        raise RuntimeError("boom")

    @property
    def email(self) -> str:
        return "e@example.com"


@dataclass
class Deep:
    child: Deep | None = None
    value: int = 0


@dataclass
class DeepDto:
    child_child_value: int = 0
    value: int = 0


def make_order() -> Order:
    return Order(
        id=7,
        status="Shipped",
        customer=Customer(name="Ada", email="ada@example.com", address=Address("1 Main", "Oslo")),
        lines=[OrderLine("pen", 2), OrderLine("ink", 1)],
        tags=["a", "b"],
        codes=["x", "x", "y"],
    )


class TestMap:
    def test_none_source_returns_none(self, mapper: Mapper) -> None:
        assert mapper.map(None, OrderDto) is None

    def test_direct_members(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto)
        assert isinstance(dto, OrderDto)
        assert dto.id == 7

    def test_flattening(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto)
        assert dto.customer_name == "Ada"

    def test_flattening_through_none(self, mapper: Mapper) -> None:
        dto = mapper.map(Order(id=1, customer=None), OrderDto)
        assert dto.customer_name is None

    def test_string_to_enum(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto)
        assert dto.status is Status.SHIPPED

    def test_unknown_enum_text_yields_first_member(self, mapper: Mapper) -> None:
        dto = mapper.map(Order(status="lost"), OrderDto)
        assert dto.status is Status.NEW

    def test_nested_object(self, mapper: Mapper) -> None:
        customer = Customer(name="Ada", address=Address("1 Main", "Oslo"))
        dto = mapper.map(customer, CustomerDto)
        assert dto.address == AddressDto("1 Main", "Oslo")
        assert dto.address_city == "Oslo"

    def test_unresolved_member_keeps_default(self, mapper: Mapper) -> None:
        dto = mapper.map(Customer(name="Ada"), CustomerDto)
        assert dto.nickname == "none"

    def test_pydantic_destination(self, mapper: Mapper) -> None:
        model = mapper.map(make_order(), OrderModel)
        assert isinstance(model, OrderModel)
        assert model.id == 7
        assert model.customer_name == "Ada"

    def test_frozen_pydantic_destination(self, mapper: Mapper) -> None:
        model = mapper.map(make_order(), FrozenOrderModel)
        assert model == FrozenOrderModel(id=7, customer_name="Ada")

    def test_map_many(self, mapper: Mapper) -> None:
        result = mapper.map_many([Order(id=1), Order(id=2)], OrderDto)
        assert [dto.id for dto in result] == [1, 2]


class TestCollections:
    def test_complex_elements(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto)
        assert dto.lines == [OrderLineDto("pen", 2), OrderLineDto("ink", 1)]

    def test_empty_collection(self, mapper: Mapper) -> None:
        dto = mapper.map(Order(lines=[]), OrderDto)
        assert dto.lines == []

    def test_none_element_propagates(self, mapper: Mapper) -> None:
        lines = [OrderLine("pen", 1), None, OrderLine("ink", 3)]
        order = Order(lines=lines)  # type: ignore[arg-type]
        dto = mapper.map(order, OrderDto)
        assert dto.lines == [OrderLineDto("pen", 1), None, OrderLineDto("ink", 3)]

    def test_tuple_shape(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto)
        assert dto.tags == ("a", "b")

    def test_set_shape(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto)
        assert dto.codes == {"x", "y"}

    def test_top_level_collection(self, mapper: Mapper) -> None:
        result = mapper.map([OrderLine("pen", 1), OrderLine("ink", 2)], list[OrderLineDto])
        assert result == [OrderLineDto("pen", 1), OrderLineDto("ink", 2)]

    def test_top_level_collection_to_tuple(self, mapper: Mapper) -> None:
        result = mapper.map([OrderLine("pen", 1)], tuple[OrderLineDto, ...])
        assert result == (OrderLineDto("pen", 1),)


class TestRuntimeIgnore:
    def test_ignored_member_keeps_construction_default(self, mapper: Mapper) -> None:
        customer = Customer(name="Ada", email="ada@example.com")
        dto = mapper.map(customer, CustomerDto, options=MapOptions.ignoring("Email"))
        assert dto.email == ""
        assert dto.name == "Ada"

    def test_ignored_member_untouched_on_existing_destination(self, mapper: Mapper) -> None:
        existing = CustomerDto(email="keep@example.com")
        customer = Customer(name="Ada", email="ada@example.com")
        mapper.map_into(customer, existing, options=MapOptions().ignore("EMAIL"))
        assert existing.email == "keep@example.com"
        assert existing.name == "Ada"

    def test_ignore_does_not_change_plan(self, mapper: Mapper) -> None:
        customer = Customer(name="Ada", email="ada@example.com")
        mapper.map(customer, CustomerDto, options=MapOptions.ignoring("email"))
        assert mapper.map(customer, CustomerDto).email == "ada@example.com"

    def test_ignore_applies_to_nested_objects(self, mapper: Mapper) -> None:
        customer = Customer(name="Ada", address=Address("1 Main", "Oslo"))
        dto = mapper.map(customer, CustomerDto, options=MapOptions.ignoring("city"))
        assert dto.address == AddressDto(street="1 Main", city="")
        assert dto.address_city == "Oslo"

    def test_ignore_applies_to_collection_elements(self, mapper: Mapper) -> None:
        dto = mapper.map(make_order(), OrderDto, options=MapOptions.ignoring("quantity"))
        assert dto.lines == [OrderLineDto("pen", 0), OrderLineDto("ink", 0)]


class TestMapInto:
    def test_updates_existing_destination(self, mapper: Mapper) -> None:
        existing = CustomerDto(nickname="kept")
        result = mapper.map_into(Customer(name="Ada"), existing)
        assert result is existing
        assert existing.name == "Ada"
        assert existing.nickname == "kept"

    def test_none_source_is_noop(self, mapper: Mapper) -> None:
        existing = CustomerDto(name="Bob")
        assert mapper.map_into(None, existing) is existing
        assert existing.name == "Bob"


class TestFieldTolerance:
    def test_failing_member_is_skipped(
        self, mapper: Mapper, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="type_sync.core.engine"):
            dto = mapper.map(Exploding(), CustomerDto)
        assert dto.name == ""
        assert dto.email == "e@example.com"
        assert any("CustomerDto.name" in r.getMessage() for r in caplog.records)

    def test_path_deeper_than_limit_is_not_traversed(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        config = MapperConfiguration(settings=MapperSettings(max_path_depth=2))
        mapper = config.create_mapper()
        source = Deep(value=1, child=Deep(value=2, child=Deep(value=3)))
        with caplog.at_level(logging.WARNING, logger="type_sync.core.engine"):
            dto = mapper.map(source, DeepDto)
        assert dto.value == 1
        assert dto.child_child_value == 0
        assert any("exceeds maximum allowed depth" in r.getMessage() for r in caplog.records)

    def test_path_within_limit(self, mapper: Mapper) -> None:
        source = Deep(value=1, child=Deep(value=2, child=Deep(value=3)))
        assert mapper.map(source, DeepDto).child_child_value == 3


class TestImplicitPlans:
    def test_disabled_implicit_plans_raise(self) -> None:
        config = MapperConfiguration(settings=MapperSettings(allow_implicit_plans=False))
        with pytest.raises(PlanNotFoundError, match="OrderDto"):
            config.create_mapper().map(Order(), OrderDto)

    def test_registered_plan_with_implicit_plans_disabled(self) -> None:
        config = MapperConfiguration(settings=MapperSettings(allow_implicit_plans=False))
        config.register_mapping(Address, AddressDto)
        dto = config.create_mapper().map(Address("1 Main", "Oslo"), AddressDto)
        assert dto == AddressDto("1 Main", "Oslo")

    def test_implicit_plan_is_registered_on_first_use(
        self, config: MapperConfiguration, mapper: Mapper
    ) -> None:
        assert config.find_plan(Address, AddressDto) is None
        mapper.map(Address(), AddressDto)
        assert config.find_plan(Address, AddressDto) is not None
