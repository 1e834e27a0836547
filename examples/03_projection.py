"""
Example 03: Projections

This example demonstrates compiling mapping plans into expression trees and
projecting in-memory sequences with deferred queries.
"""

from type_sync import MapperConfiguration, MissingElementPlanError, Query
from dataclasses import dataclass, field


@dataclass
class Line:
    sku: str = ""
    price: float = 0.0
    qty: int = 0


@dataclass
class LineDto:
    sku: str = ""
    qty: int = 0


@dataclass
class Invoice:
    number: str = ""
    lines: list[Line] = field(default_factory=list)


@dataclass
class InvoiceDto:
    number: str = ""
    lines: list[LineDto] = field(default_factory=list)
    total: float = 0.0


def main():
    config = MapperConfiguration()
    config.register_mapping(Invoice, InvoiceDto).for_member(
        "total", lambda m: m.map_from(lambda i: i.lines.sum(lambda ln: ln.price * ln.qty))
    )
    mapper = config.create_mapper()

    print("=== Projections ===\n")

    # Collections of complex elements need an element plan
    try:
        mapper.compile(Invoice, InvoiceDto)
    except MissingElementPlanError as e:
        print(f"compile failed as expected: {e}\n")

    config.register_mapping(Line, LineDto)
    projection = mapper.compile(Invoice, InvoiceDto)
    print(f"Compiled projection:\n  {projection}\n")

    invoices = [
        Invoice("A-1", [Line("pen", 1.5, 4), Line("pad", 3.0, 1)]),
        Invoice("A-2", []),
        Invoice("B-1", [Line("ink", 12.0, 2)]),
    ]

    # Deferred query: nothing runs until iteration
    query = Query(invoices, Invoice).where(lambda i: i.number.startswith("A"))
    projected = mapper.project_to(query, InvoiceDto)
    print(f"Query: {projected!r}\n")
    for dto in projected:
        print(f"  - {dto.number}: {len(dto.lines)} lines, total {dto.total}")


if __name__ == "__main__":
    main()
