from __future__ import annotations

from datetime import date

import pytest

import guardias_segovia
from guardias_segovia.config import get_settings, resolve_current_year
from guardias_segovia.locations import (
    REGIONS,
    SEGOVIA_RURAL,
    ZBS_LIST,
    DutyLocation,
    location_by_id,
    locations_for_region,
)
from guardias_segovia.strategies import (
    STRATEGIES,
    CuellarParser,
    SegoviaRuralParser,
    get_strategy,
)


def test_every_region_has_a_strategy() -> None:
    assert set(STRATEGIES) == set(REGIONS)
    assert isinstance(get_strategy("cuellar"), CuellarParser)
    assert isinstance(get_strategy("segovia-rural", current_year=2025), SegoviaRuralParser)


def test_get_strategy_returns_fresh_instances() -> None:
    assert get_strategy("cuellar") is not get_strategy("cuellar")


def test_unknown_region() -> None:
    with pytest.raises(ValueError):
        get_strategy("madrid")


@pytest.mark.parametrize("region_id", sorted(STRATEGIES))
def test_empty_pdf_gives_empty_result(region_id) -> None:
    assert guardias_segovia.parse_schedules(region_id, b"") == {}


@pytest.mark.parametrize("region_id", sorted(STRATEGIES))
def test_corrupt_pdf_gives_empty_result(region_id) -> None:
    assert guardias_segovia.parse_schedules(region_id, b"%PDF-1.4 esto no es un PDF") == {}


def test_blank_pdf_gives_empty_result(make_pdf) -> None:
    assert guardias_segovia.parse_schedules("segovia-capital", make_pdf([[]]), current_year=2025) == {}


def test_rural_region_expands_to_zones() -> None:
    locations = locations_for_region(SEGOVIA_RURAL.id)
    assert [loc.id for loc in locations] == [z.id for z in ZBS_LIST]
    assert all(loc.region_id == SEGOVIA_RURAL.id for loc in locations)
    assert locations_for_region("cuellar") == [location_by_id("cuellar")]


def test_location_by_id() -> None:
    assert location_by_id("la-granja") == DutyLocation.from_zbs(ZBS_LIST[1])
    with pytest.raises(KeyError):
        location_by_id("atlantida")


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("GUARDIAS_LOG_LEVEL", "debug")
    monkeypatch.setenv("GUARDIAS_DEBUG_DUMP", "sí")
    monkeypatch.setenv("GUARDIAS_CURRENT_YEAR", "2027")
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.log_level == "DEBUG"
    assert settings.debug_dump
    assert settings.current_year == 2027
    assert resolve_current_year() == 2027
    assert resolve_current_year(2024) == 2024
    assert SegoviaRuralParser().debug_dump


def test_settings_defaults() -> None:
    settings = get_settings()
    assert settings.log_level == "INFO"
    assert not settings.debug_dump
    assert settings.reference_year() == date.today().year
