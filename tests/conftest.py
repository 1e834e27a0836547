"""Shared test fixtures."""

from __future__ import annotations

import pytest

from type_sync.core.configuration import MapperConfiguration
from type_sync.core.mapper import Mapper
from type_sync.core.settings import MapperSettings


@pytest.fixture
def settings() -> MapperSettings:
    """Default engine settings."""
    return MapperSettings()


@pytest.fixture
def config(settings: MapperSettings) -> MapperConfiguration:
    """Empty mapper configuration."""
    return MapperConfiguration(settings=settings)


@pytest.fixture
def mapper(config: MapperConfiguration) -> Mapper:
    """Mapper sharing the ``config`` fixture's plans.

    Registrations made on ``config`` after the mapper is created are
    visible to it.
    """
    return config.create_mapper()
