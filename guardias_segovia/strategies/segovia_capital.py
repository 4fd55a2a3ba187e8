"""
Calendario de guardias de Segovia Capital.

Tabla de tres columnas: fecha | farmacia de día | farmacia de noche. Cada
celda de farmacia ocupa tres líneas físicas:

    FARMACIA GARCÍA              FARMACIA LÓPEZ
    lunes, 6 de enero  C/ Real 12    Av. Fernández Ladreda 5
    Tfno: 921 123456             (Plaza Mayor) Tfno: 921 654321

Modo texto (por defecto): pliegue sobre las líneas de la página con un
acumulador (fecha, farmacia de día, farmacia de noche) que solo se vacía
cuando los dos turnos tienen nombre, dirección y teléfono.

Modo columnas (si el texto de la página no produce nada): se calculan las
tres columnas a partir de los márgenes, se busca la primera fila coherente
para saltar la cabecera y se leen las columnas enteras. Cada fecha se empareja
con los bloques de farmacia de su misma altura; una fila sin exactamente un
bloque de día y uno de noche no se emite.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from guardias_segovia.column_scanner import (
    CellScanArea,
    TextColumn,
    column_lines,
    find_first_coherent_row,
    smallest_font_size,
)
from guardias_segovia.locale_es import RE_LONG_DATE, clean_space, month_from_name
from guardias_segovia.locations import SEGOVIA_CAPITAL, DutyLocation
from guardias_segovia.models import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    DutyAssignment,
    DutyDate,
    Pharmacy,
)
from guardias_segovia.strategies.base import ParsingStrategy
from guardias_segovia.year_detection import roll_year

log = logging.getLogger(__name__)

LOCATION = DutyLocation.from_region(SEGOVIA_CAPITAL)

PHARMACY_MARKER = "FARMACIA"

RE_PHARMACY_SPLIT = re.compile(rf"(?={PHARMACY_MARKER})")
RE_ADDRESSES = re.compile(
    RE_LONG_DATE.pattern + r"\s+(.+?)(?:,\s*)?(\d+|S/N)\s+(.+?)(?:,\s*)?(\d+|S/N)$",
    re.IGNORECASE,
)
RE_PHONE = re.compile(r"Tfno:\s*\d{3}\s*\d{6}", re.IGNORECASE)
RE_PHONE_AND_INFO = re.compile(
    r"(?:(?P<extra>\([^)]+\))\s*)?Tfno:\s*(?P<phone>\d{3}\s*\d{6})",
    re.IGNORECASE,
)
RE_SEPARATOR = re.compile(r"^[\s\-_=]+$")
RE_NUMERIC_ONLY = re.compile(r"^\d+$")

# Geometría del modo columnas (puntos PDF)
PAGE_MARGIN = 40.0
DATE_COLUMN_RATIO = 0.22
COLUMN_GAP = 5.0
LINES_PER_BLOCK = 3


# ─────────────────────────────────────────────────────────────
# ACUMULADOR
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PharmacyBuilder:
    name: str | None = None
    address: str | None = None
    phone: str | None = None
    extra: str | None = None

    @property
    def complete(self) -> bool:
        return bool(self.name and self.address and self.phone)

    def build(self) -> Pharmacy:
        return Pharmacy(
            name=clean_space(self.name or ""),
            address=clean_space(self.address or ""),
            phone=clean_space(self.phone or ""),
            additional_info=self.extra or None,
        )


@dataclass(frozen=True)
class CapitalState:
    year: int
    last_month: int | None = None
    date: DutyDate | None = None
    day: PharmacyBuilder = field(default_factory=PharmacyBuilder)
    night: PharmacyBuilder = field(default_factory=PharmacyBuilder)

    @property
    def ready(self) -> bool:
        return self.date is not None and self.day.complete and self.night.complete


# ─────────────────────────────────────────────────────────────
# RECONOCIMIENTO DE LÍNEAS
# ─────────────────────────────────────────────────────────────

def split_pharmacy_names(line: str) -> tuple[str, str] | None:
    """Una línea con dos "FARMACIA..." seguidas: (día, noche)."""
    parts = [p.strip() for p in RE_PHARMACY_SPLIT.split(line) if p.strip()]
    if len(parts) != 2 or not all(p.startswith(PHARMACY_MARKER) for p in parts):
        return None
    return parts[0], parts[1]


def _format_address(street: str, number: str) -> str:
    street = street.strip().rstrip(",")
    if number.upper() == "S/N":
        return f"{street} S/N"
    return f"{street}, {int(number)}"


def extract_addresses(line: str) -> tuple[str, str] | None:
    m = RE_ADDRESSES.search(line)
    if not m:
        return None
    day_street, day_number, night_street, night_number = m.groups()[-4:]
    return _format_address(day_street, day_number), _format_address(night_street, night_number)


def extract_phones(line: str) -> tuple[tuple[str, str | None], tuple[str, str | None]] | None:
    """Teléfono e información adicional de cada turno: ((tfno, info), (tfno, info))."""
    found = [
        (clean_space(m.group("phone")), m.group("extra"))
        for m in RE_PHONE_AND_INFO.finditer(line)
    ]
    if len(found) < 2:
        return None
    return found[0], found[1]


def parse_long_date(
    line: str,
    year: int,
    last_month: int | None,
) -> tuple[DutyDate, int, int] | None:
    """"lunes, 6 de enero" -> (fecha, año en curso, mes). El 1 de enero avanza el año."""
    m = RE_LONG_DATE.search(line)
    if not m:
        return None
    day = int(m.group(2))
    month = month_from_name(m.group(3))
    if month is None:
        return None
    year = roll_year(year, last_month, day, month)
    duty_date = DutyDate.build(day, month, year)
    if duty_date is None:
        return None
    return duty_date, year, month


def _assignments(date: DutyDate, day: Pharmacy, night: Pharmacy) -> list[DutyAssignment]:
    return [
        DutyAssignment(LOCATION, date, CAPITAL_DAY, (day,)),
        DutyAssignment(LOCATION, date, CAPITAL_NIGHT, (night,)),
    ]


# ─────────────────────────────────────────────────────────────
# MODO COLUMNAS
# ─────────────────────────────────────────────────────────────

def capital_columns(page_width: float) -> tuple[TextColumn, TextColumn, TextColumn]:
    content = page_width - 2 * PAGE_MARGIN
    date_width = content * DATE_COLUMN_RATIO
    pharmacy_width = (content - date_width - 2 * COLUMN_GAP) / 2
    date_col = TextColumn(PAGE_MARGIN, date_width)
    day_col = TextColumn(date_col.x1 + COLUMN_GAP, pharmacy_width)
    night_col = TextColumn(day_col.x1 + COLUMN_GAP, pharmacy_width)
    return date_col, day_col, night_col


def is_coherent_row(cells: list[list[str]]) -> bool:
    """Fecha en una sola línea y dos bloques de farmacia de tres líneas."""
    if len(cells) != 3:
        return False
    date_cell, day_cell, night_cell = cells
    if len(date_cell) != 1 or not RE_LONG_DATE.search(date_cell[0]):
        return False
    return all(
        len(cell) == LINES_PER_BLOCK and PHARMACY_MARKER in cell[0].upper()
        for cell in (day_cell, night_cell)
    )


def group_positioned_blocks(lines: list[tuple[float, str]]) -> list[tuple[float, Pharmacy]]:
    """
    Agrupa las líneas ``(top, texto)`` de una columna de farmacias en bloques
    nombre/dirección/teléfono. Cada bloque sale con el ``top`` medio de sus líneas.
    """
    lines = [
        (top, line) for top, line in lines
        if not RE_SEPARATOR.match(line) and not RE_NUMERIC_ONLY.match(line)
    ]
    blocks: list[tuple[float, Pharmacy]] = []
    i = 0
    while i < len(lines):
        if PHARMACY_MARKER not in lines[i][1].upper():
            log.debug("Línea fuera de bloque descartada: %s", lines[i][1])
            i += 1
            continue
        block = lines[i:i + LINES_PER_BLOCK]
        texts = [text for _, text in block]
        if len(block) < LINES_PER_BLOCK or any(PHARMACY_MARKER in t.upper() for t in texts[1:]):
            log.debug("Bloque de farmacia incompleto descartado: %s", texts)
            i += 1
            continue
        center = sum(top for top, _ in block) / len(block)
        blocks.append((center, Pharmacy.parse(*texts)))
        i += LINES_PER_BLOCK
    return blocks


def blocks_by_row(
    row_tops: list[float],
    blocks: list[tuple[float, Pharmacy]],
    tolerance: float,
) -> dict[int, list[Pharmacy]]:
    """Asigna cada bloque a la fila (índice de fecha) más cercana en vertical."""
    rows: dict[int, list[Pharmacy]] = {}
    if not row_tops:
        return rows
    for center, pharmacy in blocks:
        index = min(range(len(row_tops)), key=lambda i: abs(row_tops[i] - center))
        if abs(row_tops[index] - center) > tolerance:
            log.debug("Bloque sin fecha en su fila (y=%.1f): %s", center, pharmacy.name)
            continue
        rows.setdefault(index, []).append(pharmacy)
    return rows


# ─────────────────────────────────────────────────────────────
# ESTRATEGIA
# ─────────────────────────────────────────────────────────────

class SegoviaCapitalParser(ParsingStrategy):
    name = "segovia-capital"

    TEXT = "text"
    COLUMNS = "columns"
    AUTO = "auto"

    def __init__(self, current_year: int | None = None, mode: str = AUTO) -> None:
        super().__init__(current_year)
        if mode not in (self.TEXT, self.COLUMNS, self.AUTO):
            raise ValueError(f"Modo desconocido: {mode}")
        self.mode = mode

    # ── modo texto ──────────────────────────────────────────

    def step(self, state: CapitalState, line: str) -> tuple[CapitalState, list[DutyAssignment]]:
        if PHARMACY_MARKER in line:
            names = split_pharmacy_names(line)
            if names is None:
                log.debug("[%s] Línea de farmacia sin dos nombres: %s", self.name, line)
                return state, []
            state = replace(
                state,
                day=replace(state.day, name=names[0]),
                night=replace(state.night, name=names[1]),
            )
        elif RE_LONG_DATE.search(line):
            parsed = parse_long_date(line, state.year, state.last_month)
            if parsed is not None:
                duty_date, year, month = parsed
                state = replace(state, date=duty_date, year=year, last_month=month)
            addresses = extract_addresses(line)
            if addresses is not None:
                state = replace(
                    state,
                    day=replace(state.day, address=addresses[0]),
                    night=replace(state.night, address=addresses[1]),
                )
        elif RE_PHONE.search(line):
            phones = extract_phones(line)
            if phones is None:
                log.debug("[%s] Línea con un solo teléfono: %s", self.name, line)
                return state, []
            (day_phone, day_extra), (night_phone, night_extra) = phones
            state = replace(
                state,
                day=replace(state.day, phone=day_phone, extra=day_extra),
                night=replace(state.night, phone=night_phone, extra=night_extra),
            )
        else:
            log.debug("[%s] Línea ignorada: %s", self.name, line)
            return state, []

        if not state.ready:
            return state, []
        emitted = _assignments(state.date, state.day.build(), state.night.build())
        return CapitalState(year=state.year, last_month=state.last_month), emitted

    def parse_page_lines(
        self,
        lines: list[str],
        state: CapitalState,
    ) -> tuple[list[DutyAssignment], CapitalState]:
        assignments: list[DutyAssignment] = []
        for line in lines:
            state, emitted = self.step(state, line)
            assignments.extend(emitted)
        return assignments, state

    # ── modo columnas ───────────────────────────────────────

    def parse_page_columns(
        self,
        page: Any,
        state: CapitalState,
    ) -> tuple[list[DutyAssignment], CapitalState]:
        date_col, day_col, night_col = capital_columns(page.width)
        font_size = smallest_font_size(page)
        cell_height = font_size * 4.2
        cells = [CellScanArea(col, cell_height) for col in (date_col, day_col, night_col)]

        top = find_first_coherent_row(
            page, cells, start=0.0, end=page.height / 2, increment=font_size / 2,
            validator=is_coherent_row,
        )
        if top is None:
            log.debug("[%s] Sin fila coherente: la página no tiene datos", self.name)
            return [], state

        dates = [
            (line_top, line) for line_top, line in column_lines(page, date_col, start=top)
            if RE_LONG_DATE.search(line)
        ]
        row_tops = [line_top for line_top, _ in dates]
        tolerance = cell_height / 2
        day_rows = blocks_by_row(
            row_tops, group_positioned_blocks(column_lines(page, day_col, start=top)), tolerance
        )
        night_rows = blocks_by_row(
            row_tops, group_positioned_blocks(column_lines(page, night_col, start=top)), tolerance
        )

        assignments: list[DutyAssignment] = []
        year, last_month = state.year, state.last_month
        for index, (_, line) in enumerate(dates):
            parsed = parse_long_date(line, year, last_month)
            if parsed is None:
                continue
            duty_date, year, last_month = parsed
            day, night = day_rows.get(index, []), night_rows.get(index, [])
            if len(day) != 1 or len(night) != 1:
                log.warning(
                    "[%s] Fila %s descuadrada: %d bloques de día, %d de noche",
                    self.name, duty_date, len(day), len(night),
                )
                continue
            assignments.extend(_assignments(duty_date, day[0], night[0]))
        return assignments, CapitalState(year=year, last_month=last_month)

    # ── documento ───────────────────────────────────────────

    def parse_page(
        self,
        index: int,
        page: Any,
        lines: list[str],
        state: CapitalState,
    ) -> tuple[list[DutyAssignment], CapitalState]:
        assignments: list[DutyAssignment] = []
        if self.mode in (self.TEXT, self.AUTO):
            assignments, state = self.parse_page_lines(lines, state)
        if not assignments and self.mode in (self.COLUMNS, self.AUTO):
            log.debug("[%s] Página %d: lectura por columnas", self.name, index)
            assignments, state = self.parse_page_columns(page, state)
        return assignments, state

    def parse_document(
        self,
        pdf: Any,
        pdf_url: str | None,
        current_year: int,
    ) -> Iterator[DutyAssignment]:
        year_result = self.detect_document_year(pdf, pdf_url, current_year)
        state = CapitalState(year=year_result.year)
        for index, page, lines in self.iter_pages(pdf):
            try:
                assignments, state = self.parse_page(index, page, lines, state)
            except Exception as e:
                self.skip_page(index, e)
                continue
            log.debug("[%s] Página %d: %d asignaciones", self.name, index, len(assignments))
            yield from assignments
