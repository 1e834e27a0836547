"""Contract tests for value resolver protocol compliance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from type_sync.core.configuration import MapperConfiguration
from type_sync.core.exceptions import ConfigurationError
from type_sync.core.mapper import Mapper
from type_sync.mapping.protocol import ValueResolver


@dataclass
class Invoice:
    net: float = 0.0
    tax_rate: float = 0.0


@dataclass
class InvoiceDto:
    net: float = 0.0
    gross: float = 0.0
    audit: str = ""


class GrossResolver:
    def resolve(self, source: Invoice, destination: InvoiceDto, current: Any) -> float:
        return round(source.net * (1 + source.tax_rate), 2)


class AuditResolver:
    """Sees the destination after earlier members were assigned."""

    def resolve(self, source: Invoice, destination: InvoiceDto, current: Any) -> str:
        return f"{current}|net={destination.net}"


class FailingResolver:
    def resolve(self, source: Any, destination: Any, current: Any) -> Any:
        raise RuntimeError("upstream unavailable")


class NoResolve:
    def compute(self, source: Any) -> Any:
        return None


class TestValueResolverProtocol:
    def test_resolver_classes_implement_protocol(self) -> None:
        assert isinstance(GrossResolver(), ValueResolver)
        assert isinstance(AuditResolver(), ValueResolver)

    def test_non_resolver_does_not(self) -> None:
        assert not isinstance(NoResolve(), ValueResolver)

    def test_registration_rejects_non_resolver(self, config: MapperConfiguration) -> None:
        with pytest.raises(ConfigurationError):
            config.register_mapping(Invoice, InvoiceDto).for_member(
                "gross", lambda m: m.map_from_resolver(NoResolve)
            )


class TestResolverLifecycle:
    def test_resolve_computes_value(self, config: MapperConfiguration, mapper: Mapper) -> None:
        config.register_mapping(Invoice, InvoiceDto).for_member(
            "gross", lambda m: m.map_from_resolver(GrossResolver)
        )
        assert mapper.map(Invoice(100.0, 0.25), InvoiceDto).gross == 125.0

    def test_resolve_receives_destination_and_current(
        self, config: MapperConfiguration, mapper: Mapper
    ) -> None:
        config.register_mapping(Invoice, InvoiceDto).for_member(
            "audit", lambda m: m.map_from_resolver(AuditResolver)
        )
        existing = InvoiceDto(audit="v1")
        mapper.map_into(Invoice(net=10.0), existing)
        assert existing.audit == "v1|net=10.0"

    def test_failing_resolver_leaves_member_untouched(
        self, config: MapperConfiguration, mapper: Mapper
    ) -> None:
        config.register_mapping(Invoice, InvoiceDto).for_member(
            "gross", lambda m: m.map_from_resolver(FailingResolver)
        )
        dto = mapper.map(Invoice(net=5.0), InvoiceDto)
        assert dto.gross == 0.0
        assert dto.net == 5.0
