"""
Example 02: Flattening and Custom Rules

This example demonstrates convention flattening, null-safe expressions, resolvers,
conditions and configuration validation.
"""

from type_sync import InvalidConfigurationError, MapperConfiguration
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class Customer:
    first_name: str = ""
    last_name: str = ""
    address: Optional[Address] = None


@dataclass
class Order:
    id: int = 0
    customer: Optional[Customer] = None
    amounts: list[float] = field(default_factory=list)


@dataclass
class OrderSummary:
    id: int = 0
    customer_first_name: Optional[str] = None
    customer_address_city: Optional[str] = None
    largest_amount: Optional[float] = None
    customer: str = ""
    priority: str = "normal"


class CustomerNameResolver:
    """Value resolver: receives the source, the destination and the current value."""

    def resolve(self, source, destination, current):
        if source.customer is None:
            return "(guest)"
        return f"{source.customer.first_name} {source.customer.last_name}"


def main():
    config = MapperConfiguration()

    # Without rules for 'customer' and 'priority' validation fails
    config.register_mapping(Order, OrderSummary)
    try:
        config.assert_valid()
    except InvalidConfigurationError as e:
        print(f"Validation failed as expected:\n{e}\n")

    config.register_mapping(Order, OrderSummary).for_member(
        "largest_amount", lambda m: m.map_from(lambda o: o.amounts.max())
    ).for_member(
        "customer", lambda m: m.map_from_resolver(CustomerNameResolver)
    ).for_member(
        "priority", lambda m: m.map_from("id").condition(lambda o: o.id > 100)
    ).for_member(
        "customer_first_name", lambda m: m.null_substitute("n/a")
    )
    config.assert_valid()
    mapper = config.create_mapper()

    print("=== Flattening ===\n")

    full = Order(
        id=7,
        customer=Customer("Ada", "Lovelace", Address("1 Main St", "London")),
        amounts=[10.0, 42.5, 3.0],
    )
    print(f"Complete graph:  {mapper.map(full, OrderSummary)}")

    # Missing links in the chain produce None instead of raising
    partial = Order(id=8, customer=Customer("Bob", "Smith"))
    print(f"Missing address: {mapper.map(partial, OrderSummary)}")

    guest = Order(id=150)
    print(f"No customer:     {mapper.map(guest, OrderSummary)}")


if __name__ == "__main__":
    main()
