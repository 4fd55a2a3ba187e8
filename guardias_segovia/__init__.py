"""Extracción de los calendarios de farmacias de guardia de Segovia a partir de sus PDFs."""

from __future__ import annotations

from guardias_segovia.assembler import ScheduleMap, assemble
from guardias_segovia.locations import DutyLocation, location_by_id, locations_for_region
from guardias_segovia.models import (
    DutyDate,
    DutyTimeSpan,
    Pharmacy,
    PharmacySchedule,
    parse_duty_date,
)
from guardias_segovia.strategies import get_strategy
from guardias_segovia.year_detection import YearDetectionResult, detect_year

__version__ = "0.1.0"


def parse_schedules(
    region_id: str,
    pdf_bytes: bytes,
    pdf_url: str | None = None,
    current_year: int | None = None,
) -> ScheduleMap:
    """Parsea el PDF de una región. Nunca lanza por un PDF ilegible: devuelve {}."""
    return get_strategy(region_id, current_year=current_year).parse_schedules(pdf_bytes, pdf_url)


__all__ = [
    "DutyDate",
    "DutyLocation",
    "DutyTimeSpan",
    "Pharmacy",
    "PharmacySchedule",
    "ScheduleMap",
    "YearDetectionResult",
    "assemble",
    "detect_year",
    "get_strategy",
    "location_by_id",
    "locations_for_region",
    "parse_duty_date",
    "parse_schedules",
]
