"""
Máquina de estados compartida por los calendarios semanales (Cuéllar, El Espinar).

Cada línea se clasifica como fechas, farmacia, ambas cosas o nada. Las fechas
pendientes esperan a una farmacia y viceversa; en cuanto hay ambas se emite una
asignación de 24 horas por fecha y el estado vuelve a empezar.

El estado es un valor inmutable que se pasa de línea en línea (y de página en
página), junto con el año en curso.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Any, Iterator

from guardias_segovia.locale_es import (
    MONTHS_ES,
    RE_SHORT_DATE,
    RE_SHORT_DATE_RANGE,
    RE_WEEKDAY_DAY_MONTH,
    month_from_abbreviation,
    month_from_name,
    normalize_whitespace,
)
from guardias_segovia.locations import DutyLocation
from guardias_segovia.models import FULL_DAY, DutyAssignment, DutyDate, Pharmacy
from guardias_segovia.strategies.base import ParsingStrategy
from guardias_segovia.year_detection import roll_year

log = logging.getLogger(__name__)

# Por encima de esto un "rango" es casi seguro un error de lectura
MAX_RANGE_DAYS = 31

AWAITING_PHARMACY = "awaiting-pharmacy"
AWAITING_DATES = "awaiting-dates"
READY_TO_FLUSH = "ready-to-flush"


@dataclass(frozen=True)
class DateSpec:
    """Una fecha "dd-mmm" o un rango "dd-mmm al dd-mmm", todavía sin año."""
    day: int
    month: int
    end_day: int | None = None
    end_month: int | None = None

    @property
    def is_range(self) -> bool:
        return self.end_day is not None and self.end_month is not None


@dataclass(frozen=True)
class LineState:
    year: int
    pharmacy_key: str | None = None
    dates: tuple[DateSpec, ...] = ()
    last_month: int | None = None

    @property
    def phase(self) -> str:
        if self.pharmacy_key and self.dates:
            return READY_TO_FLUSH
        if self.pharmacy_key:
            return AWAITING_DATES
        return AWAITING_PHARMACY


# ─────────────────────────────────────────────────────────────
# EXTRACCIÓN DE FECHAS
# ─────────────────────────────────────────────────────────────

def rewrite_long_dates(line: str) -> str:
    """
    "DOMINGO 31 DE AGOSTO Y LUNES 1 DE SEPTIEMBRE" -> "31-ago 01-sep".

    Formato antiguo usado en el cambio de agosto a septiembre; se reescribe al
    formato corto para seguir el camino común.
    """
    tokens = []
    for m in RE_WEEKDAY_DAY_MONTH.finditer(line):
        month = month_from_name(m.group(2))
        if month is not None:
            tokens.append(f"{int(m.group(1)):02d}-{MONTHS_ES[month][:3]}")
    return " ".join(tokens) if tokens else line


def extract_date_specs(line: str) -> list[DateSpec]:
    """Fechas y rangos de una línea, en el orden en que aparecen."""
    text = rewrite_long_dates(normalize_whitespace(line))
    found: list[tuple[int, DateSpec]] = []
    covered: list[tuple[int, int]] = []

    for m in RE_SHORT_DATE_RANGE.finditer(text):
        start_month = month_from_abbreviation(m.group(2))
        end_month = month_from_abbreviation(m.group(4))
        if start_month is None or end_month is None:
            continue
        found.append((m.start(), DateSpec(int(m.group(1)), start_month, int(m.group(3)), end_month)))
        covered.append(m.span())

    for m in RE_SHORT_DATE.finditer(text):
        if any(start <= m.start() < end for start, end in covered):
            continue
        month = month_from_abbreviation(m.group(2))
        if month is not None:
            found.append((m.start(), DateSpec(int(m.group(1)), month)))

    return [spec for _, spec in sorted(found, key=lambda item: item[0])]


def expand_dates(
    specs: tuple[DateSpec, ...] | list[DateSpec],
    year: int,
    last_month: int | None,
) -> tuple[list[date], int, int | None]:
    """
    Convierte las fechas pendientes en fechas de calendario con el año en curso.

    Devuelve (fechas sin repetir, año en curso, último mes visto). Un rango que
    cruza el fin de año avanza el año por aritmética de calendario.
    """
    result: list[date] = []
    for spec in specs:
        year = roll_year(year, last_month, spec.day, spec.month)
        try:
            start = date(year, spec.month, spec.day)
        except ValueError:
            log.debug("Fecha inexistente descartada: %02d/%02d/%d", spec.day, spec.month, year)
            continue

        days = [start]
        if spec.is_range:
            try:
                end = date(year, spec.end_month, spec.end_day)
            except ValueError:
                end = None
            if end is not None and end < start:
                try:
                    end = date(year + 1, spec.end_month, spec.end_day)
                except ValueError:
                    end = None
            if end is not None and (end - start).days <= MAX_RANGE_DAYS:
                days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
            else:
                log.debug("Rango no válido, solo se usa la fecha inicial: %s", spec)

        for day in days:
            if day not in result:
                result.append(day)
        year, last_month = days[-1].year, days[-1].month
    return result, year, last_month


# ─────────────────────────────────────────────────────────────
# ESTRATEGIA BASE
# ─────────────────────────────────────────────────────────────

class LineFoldStrategy(ParsingStrategy):
    """Estrategia de calendario semanal: una farmacia de 24 horas por fecha."""

    location: DutyLocation
    pharmacies: dict[str, Pharmacy]

    @abstractmethod
    def identify_pharmacy(self, line: str) -> str | None:
        """Clave de la farmacia mencionada en la línea, o None."""

    def lookup_pharmacy(self, key: str) -> Pharmacy:
        pharmacy = self.pharmacies.get(key)
        if pharmacy is None:
            log.warning("[%s] Farmacia desconocida: %r", self.name, key)
            return Pharmacy.unknown(key)
        return pharmacy

    def extract_dates(self, line: str) -> list[DateSpec]:
        return extract_date_specs(line)

    def step(self, state: LineState, line: str) -> tuple[LineState, list[DutyAssignment]]:
        dates = self.extract_dates(line)
        key = self.identify_pharmacy(line)
        if not dates and key is None:
            log.debug("[%s] Línea ignorada: %s", self.name, line)
            return state, []

        state = replace(
            state,
            dates=state.dates + tuple(dates),
            pharmacy_key=key or state.pharmacy_key,
        )
        if state.phase != READY_TO_FLUSH:
            return state, []
        return self.flush(state)

    def flush(self, state: LineState) -> tuple[LineState, list[DutyAssignment]]:
        days, year, last_month = expand_dates(state.dates, state.year, state.last_month)
        pharmacy = self.lookup_pharmacy(state.pharmacy_key)
        assignments = [
            DutyAssignment(self.location, DutyDate.from_date(day), FULL_DAY, (pharmacy,))
            for day in days
        ]
        log.debug("[%s] %s: %d fechas", self.name, pharmacy.name, len(assignments))
        return LineState(year=year, last_month=last_month), assignments

    def parse_lines(
        self,
        lines: list[str],
        state: LineState,
    ) -> tuple[list[DutyAssignment], LineState]:
        """Pliegue sobre las líneas de una página; devuelve también el estado final."""
        assignments: list[DutyAssignment] = []
        for line in lines:
            state, emitted = self.step(state, line)
            assignments.extend(emitted)
        return assignments, state

    def parse_document(
        self,
        pdf: Any,
        pdf_url: str | None,
        current_year: int,
    ) -> Iterator[DutyAssignment]:
        year_result = self.detect_document_year(pdf, pdf_url, current_year)
        state = LineState(year=year_result.year)
        for index, _, lines in self.iter_pages(pdf):
            try:
                assignments, state = self.parse_lines(lines, state)
            except Exception as e:
                self.skip_page(index, e)
                continue
            yield from assignments
        if state.dates or state.pharmacy_key:
            log.debug("[%s] Estado pendiente sin cerrar al final: %s", self.name, state)
