"""
Servicios de urgencia rurales de Segovia.

Una sola columna de fechas ("02-sep-25") compartida por varias Zonas Básicas
de Salud (ZBS), una columna por zona. Cada fila nombra, por pueblo, las
farmacias de guardia de ese día en cada zona.

  - La farmacia de cada zona se reconoce por el nombre del pueblo en la fila;
    la franja horaria depende de la farmacia (24 h, 10-20 h o 10-22 h).
  - La Granja alterna por semanas entre sus dos farmacias; la que aparece
    primero en el documento hace las semanas impares.
  - Cantalejo: el PDF no indica la rotación real, así que se publican las dos
    farmacias todos los días.

La lectura principal es por líneas de texto. Si una página no da ninguna fila
con fecha, se reconstruyen las filas con el escáner de columnas usando las
posiciones x conocidas de cada zona.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

import pandas as pd

from guardias_segovia.column_scanner import (
    TextColumn,
    extract_region_text,
    remove_duplicate_adjacent,
    scan_column,
)
from guardias_segovia.config import get_settings
from guardias_segovia.locale_es import (
    RE_SHORT_DATE_WITH_YEAR,
    contains_key,
    match_form,
    month_from_abbreviation,
)
from guardias_segovia.locations import (
    CANTALEJO,
    CARBONERO,
    FUENTIDUENA,
    LA_GRANJA,
    LA_SIERRA,
    NAVAS_DE_LA_ASUNCION,
    RIAZA_SEPULVEDA,
    VILLACASTIN,
    ZBS,
    DutyLocation,
)
from guardias_segovia.models import (
    FULL_DAY,
    RURAL_DAYTIME,
    RURAL_EXTENDED_DAYTIME,
    DutyAssignment,
    DutyDate,
    DutyTimeSpan,
    Pharmacy,
)
from guardias_segovia.strategies.base import ParsingStrategy

log = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class RuralPharmacy:
    pharmacy: Pharmacy
    span: DutyTimeSpan


def _rural(name: str, address: str, phone: str, span: DutyTimeSpan = RURAL_DAYTIME) -> RuralPharmacy:
    return RuralPharmacy(Pharmacy(name=name, address=address, phone=phone), span)


# ─────────────────────────────────────────────────────────────
# TABLAS DE FARMACIAS POR ZBS
# ─────────────────────────────────────────────────────────────

# Clave = nombre del pueblo tal como aparece en la fila del PDF
PHARMACIES_BY_ZBS: dict[ZBS, dict[str, RuralPharmacy]] = {
    RIAZA_SEPULVEDA: {
        "RIAZA": _rural(
            "Farmacia César Fernando Gutiérrez Miguel",
            "C. Ricardo Provencio, 16, 40500 Riaza, Segovia", "921550131", FULL_DAY),
        "SEPÚLVEDA": _rural(
            "Farmacia Francisco Ruiz Carrasco",
            "Pl. España, 16, 40300 Sepúlveda, Segovia", "921540018", FULL_DAY),
        "S.E. GORMAZ (SORIA)": _rural(
            "Farmacia Irigoyen",
            "C. Escuelas, 5, 42330 San Esteban de Gormaz, Soria", "975350208", FULL_DAY),
        "CEREZO ABAJO": _rural(
            "Farmacia Mario Caballero Serrano",
            "C. Real, 2, 40591 Cerezo de Abajo, Segovia", "921557110", RURAL_EXTENDED_DAYTIME),
        "BOCEGUILLAS": _rural(
            "Farmacia Lcda Mª del Pilar Villas Miguel",
            "C. Bayona, 21, 40560 Boceguillas, Segovia", "921543849", RURAL_EXTENDED_DAYTIME),
        "AYLLÓN": _rural(
            "Farmacia Luis de la Peña Buquerin",
            "Plaza Mayor, 12, 40520 Ayllón, Segovia", "921553003", RURAL_EXTENDED_DAYTIME),
    },
    LA_SIERRA: {
        "PRÁDENA": _rural(
            "Farmacia Ana Belén Tomero Díez",
            "Calle Pl., 18, 40165 Prádena, Segovia", "921507050"),
        "ARCONES": _rural(
            "Farmacia Teresa Laporta Sánchez",
            "Pl. Mayor, 3, 40164 Arcones, Segovia", "921504134"),
        "NAVAFRÍA": _rural(
            "Farmacia Martín Cuesta",
            "C. la Reina, 0, 40161 Navafría, Segovia", "921506113"),
        "TORREVAL": _rural(
            "Farmacia Lda. Mónica Carrasco Herrero",
            "Travesia la Fragua, 16, 40171 Torre Val de San Pedro, Segovia", "921506028"),
    },
    FUENTIDUENA: {
        "HONTALBILLA": _rural(
            "Farmacia Lcdo Burgos Burgos Isabel",
            "Plaza Mayor, 1, 40353 Hontalbilla, Segovia", "921148190"),
        "TORRECILLA": _rural(
            "Farmacia Lcdo Gallego Esteban Fernando",
            "C. Povedas, 6, 40359 Torrecilla del Pinar, Segovia", "No disponible"),
        # Errata frecuente en el PDF
        "TORRECELLA": _rural(
            "Farmacia Lcdo Gallego Esteban Fernando",
            "C. Povedas, 6, 40359 Torrecilla del Pinar, Segovia", "No disponible"),
        "OLOMBRADA": _rural(
            "Dr. Jesús Santos del Cura",
            "C. Real, 3, 40220 Olombrada, Segovia", "921164327"),
        "FUENTIDUEÑA": _rural(
            "Farmacia Fuentidueña",
            "C. Real, 40, 40357 Fuentidueña, Segovia", "921533630"),
        "SACRAMENIA": _rural(
            "Farmacia Gloria Hernando Bayón",
            "C. Manuel Sanz Burgoa, 14, 40237 Sacramenia, Segovia", "921527501"),
        "FUENTESAUCO": _rural(
            "Farmacia Paloma María Prieto Pérez",
            "Plaza Mercado, S/N, 40355 Fuentesaúco de Fuentidueña, Segovia", "No disponible"),
    },
    CARBONERO: {
        "NAVALMANZANO": _rural(
            "Farmacia Carmen I. Tomero Díez",
            "Pl. Mayor, 2, 40280 Navalmanzano, Segovia", "921575109"),
        "CARBONERO M": _rural(
            "Farmacia Carbonero",
            "Pl. Pósito Real, 1, 40270 Carbonero el Mayor, Segovia", "921560427"),
        "ZARZUELA PINAR": _rural(
            "Farmacia Maria Sol Benito Sanz",
            "C/ Caño, 7, 40293 Zarzuela del Pinar, Segovia", "921574621"),
        "ESCARABAJOSA": _rural(
            "Farmacia Gilsanz",
            "Pl. Mayor, 40291 Escarabajosa de Cabezas, Segovia", "921562159"),
        "LASTRAS DE CUÉLLAR": _rural(
            "Farmacia Mª Antonia Sacristán Rodríguez",
            "C. Rincón, 3, 40352 Lastras de Cuéllar, Segovia", "921169250"),
        "FUENTEPELAYO": _rural(
            "Farmacia Lda. Patricia Avellón Senovilla",
            "C. Santillana, 3, 40260 Fuentepelayo, Segovia", "921574392"),
        "CANTIMPALOS": _rural(
            "Farmacia Enrique Covisa Nager",
            "Pl. Mayor, 17, 40360 Cantimpalos, Segovia", "921496025"),
        "AGUILAFUENTE": _rural(
            "Farmacia Miriam Chamorro García",
            "Av. del Escultor D. Florentino Trapero, 5, 40340 Aguilafuente, Segovia", "921572445"),
        "MOZONCILLO": _rural(
            "Farmacia Isabel Frías López",
            "C. Real, 16-18, 40250 Mozoncillo, Segovia", "921577273"),
        "ESCALONA": _rural(
            "Farmacia Matilde García García",
            "C. de la Cruz, 6, 40350 Escalona del Prado, Segovia", "921570026"),
    },
    NAVAS_DE_LA_ASUNCION: {
        "COCA": _rural(
            "Farmacia Ana Isabel Maroto Arenas",
            "Pl. Arco, 2, 40480 Coca, Segovia", "921586677"),
        "STA. Mª REAL": _rural(
            "Farmacia Pilar Tribiño Mendiola",
            "Pl. Mayor, 11, 40440 Santa María la Real de Nieva, Segovia", "921594013"),
        "NIEVA": _rural(
            "Farmacia María Dolores Gómez Roán",
            "Calle Ayuntamiento, 12, 40447 Nieva, Segovia", "921594727"),
        "SANTIUSTE": _rural(
            "Farmacia Lda Amparo Maroto Gomez",
            "Pl. Iglesia, 5, 40460 Santiuste de San Juan Bautista, Segovia", "921596259"),
        "NAVAS DE ORO": _rural(
            "Farmacia Cubero. Gdo. Sergio Cubero de Blas",
            "C. Libertad, 1, 40470 Navas de Oro, Segovia", "921591585"),
        "NAVA DE LA A": _rural(
            "Farmacia Ldo. Vicente Rebollo Antolín Javier",
            "C. de Elías Vírseda, 3, 40450 Nava de la Asunción, Segovia", "921580533"),
        "BERNARDOS": _rural(
            "Farmacia Lcdo Casado Rata Coral",
            "Pl. Mayor, 8, 40430 Bernardos, Segovia", "921566012"),
    },
    VILLACASTIN: {
        "VILLACASTÍN": _rural(
            "Farmacia Cristina Herradón Gil-Gallardo",
            "Calle Iglesia, 18, 40150 Villacastín, Segovia", "921198173"),
        "ZARZUELA M.": _rural(
            "Farmacia María A. Reviriego Morcuende",
            "Av. San Antonio, 2, 40152 Zarzuela del Monte, Segovia", "921198297"),
        "NAVAS DE SA": _rural(
            "Farmacia María José Martín Barguilla",
            "C. Diana, 21, 40408 Navas de San Antonio, Segovia", "921193128"),
        "MAELLO (ÁVILA)": _rural(
            "Farmacia Noelia Guerra García",
            "Calle Vilorio, 8, 05291 Maello, Ávila", "921192126"),
    },
}

# La Granja: rótulo en el PDF -> farmacia
LA_GRANJA_VALENCIANA = "C/ Valenciana"
LA_GRANJA_DOLORES = "Plaza los Dolores"
LA_GRANJA_PHARMACIES: dict[str, RuralPharmacy] = {
    LA_GRANJA_VALENCIANA: _rural(
        "Farmacia Cristina Mínguez Del Pozo",
        "C. Valenciana, 3, BAJO, 40100 Real Sitio de San Ildefonso, Segovia", "921470038",
        RURAL_EXTENDED_DAYTIME),
    LA_GRANJA_DOLORES: _rural(
        "Farmacia Almudena Martínez Pardo del Valle",
        "Plaza los Dolores, 7, 40100 Real Sitio de San Ildefonso, Segovia", "921472391",
        RURAL_EXTENDED_DAYTIME),
}

CANTALEJO_PHARMACIES: tuple[Pharmacy, ...] = (
    Pharmacy("Farmacia en Cantalejo", "C. Frontón, 15, 40320 Cantalejo, Segovia", "921520053"),
    Pharmacy("Farmacia Carmen Bautista", "C. Inge Martín Gil, 10, 40320 Cantalejo, Segovia", "921520005"),
)

# Posiciones x de cada columna en el PDF apaisado (puntos)
DATE_COLUMN = TextColumn(42, 42)
ZONE_COLUMNS: dict[ZBS, TextColumn] = {
    RIAZA_SEPULVEDA: TextColumn(175, 200),
    LA_GRANJA: TextColumn(390, 100),
    LA_SIERRA: TextColumn(500, 70),
    FUENTIDUENA: TextColumn(570, 50),
    CARBONERO: TextColumn(620, 80),
    NAVAS_DE_LA_ASUNCION: TextColumn(700, 65),
    VILLACASTIN: TextColumn(770, 60),
}
ROW_HEIGHT = 8.0
SCAN_INCREMENT = 8.0


# ─────────────────────────────────────────────────────────────
# FILAS
# ─────────────────────────────────────────────────────────────

def reconcile_two_digit_year(two_digit: int, base_year: int) -> int:
    """"25" con año base 2024 -> 2025; "24" con 2025 -> 2024."""
    return base_year + (two_digit - base_year % 100)


def extract_rural_date(line: str, base_year: int) -> DutyDate | None:
    m = RE_SHORT_DATE_WITH_YEAR.search(line)
    if not m:
        return None
    month = month_from_abbreviation(m.group(2))
    if month is None:
        return None
    year = reconcile_two_digit_year(int(m.group(3)), base_year)
    return DutyDate.build(int(m.group(1)), month, year)


def pharmacies_by_zone(line: str) -> dict[ZBS, dict[DutyTimeSpan, list[Pharmacy]]]:
    """Farmacias nombradas en la fila, agrupadas por zona y franja horaria."""
    result: dict[ZBS, dict[DutyTimeSpan, list[Pharmacy]]] = {}
    for zbs, table in PHARMACIES_BY_ZBS.items():
        for key, info in table.items():
            if not contains_key(line, key):
                continue
            shifts = result.setdefault(zbs, {})
            pharmacies = shifts.setdefault(info.span, [])
            if info.pharmacy not in pharmacies:
                pharmacies.append(info.pharmacy)
    return result


def first_la_granja_label(line: str) -> str | None:
    """Cuál de las dos farmacias de La Granja aparece antes en la línea."""
    form = f" {match_form(line)}"
    positions = {
        label: form.find(f" {match_form(label)}")
        for label in (LA_GRANJA_VALENCIANA, LA_GRANJA_DOLORES)
    }
    present = {label: pos for label, pos in positions.items() if pos >= 0}
    if not present:
        return None
    return min(present, key=present.get)


@dataclass(frozen=True)
class RuralParseResult:
    assignments: list[DutyAssignment]
    dates: list[DutyDate]
    la_granja_first: str | None


def parse_rural_lines(
    lines: list[str],
    base_year: int,
    la_granja_first: str | None = None,
) -> RuralParseResult:
    """Recorre las filas: asignaciones por zona, fechas vistas y primera farmacia de La Granja."""
    assignments: list[DutyAssignment] = []
    dates: list[DutyDate] = []
    for line in lines:
        if la_granja_first is None:
            la_granja_first = first_la_granja_label(line)

        duty_date = extract_rural_date(line, base_year)
        if duty_date is None:
            log.debug("Línea rural sin fecha: %s", line)
            continue
        dates.append(duty_date)
        for zbs, shifts in pharmacies_by_zone(line).items():
            location = DutyLocation.from_zbs(zbs)
            for span, pharmacies in shifts.items():
                assignments.append(DutyAssignment(location, duty_date, span, tuple(pharmacies)))
    return RuralParseResult(assignments, dates, la_granja_first)


def la_granja_assignments(dates: list[DutyDate], first_label: str | None) -> list[DutyAssignment]:
    """Alternancia semanal: semanas impares para la farmacia que aparece primero."""
    if first_label is None or not dates:
        return []
    other = LA_GRANJA_DOLORES if first_label == LA_GRANJA_VALENCIANA else LA_GRANJA_VALENCIANA
    odd, even = LA_GRANJA_PHARMACIES[first_label], LA_GRANJA_PHARMACIES[other]
    location = DutyLocation.from_zbs(LA_GRANJA)
    result = []
    for index, duty_date in enumerate(dates):
        week = index // DAYS_PER_WEEK + 1
        info = odd if week % 2 == 1 else even
        result.append(DutyAssignment(location, duty_date, info.span, (info.pharmacy,)))
    return result


def cantalejo_assignments(dates: list[DutyDate]) -> list[DutyAssignment]:
    location = DutyLocation.from_zbs(CANTALEJO)
    return [DutyAssignment(location, d, RURAL_DAYTIME, CANTALEJO_PHARMACIES) for d in dates]


# ─────────────────────────────────────────────────────────────
# TABULACIÓN POR COLUMNAS
# ─────────────────────────────────────────────────────────────

def tabulate_page(page: Any) -> pd.DataFrame:
    """Una fila por fecha de la columna de fechas y una columna de texto por zona."""
    rows = []
    date_cells = remove_duplicate_adjacent(
        scan_column(page, DATE_COLUMN, ROW_HEIGHT, SCAN_INCREMENT)
    )
    for top, text in date_cells:
        m = RE_SHORT_DATE_WITH_YEAR.search(text)
        if not m:
            continue
        row = {"top": round(top, 1), "date": m.group(0)}
        for zbs, column in ZONE_COLUMNS.items():
            cell = extract_region_text(page, column.x, top, column.width, ROW_HEIGHT)
            row[zbs.id] = " ".join(cell.split())
        rows.append(row)
    return pd.DataFrame(rows, columns=["top", "date"] + [z.id for z in ZONE_COLUMNS])


def table_to_lines(table: pd.DataFrame) -> list[str]:
    """Reconstruye líneas de texto equivalentes a las de la lectura lineal."""
    zone_ids = [z.id for z in ZONE_COLUMNS]
    return [
        " ".join(str(v) for v in [row["date"], *(row[z] for z in zone_ids)] if v)
        for _, row in table.iterrows()
    ]


# ─────────────────────────────────────────────────────────────
# ESTRATEGIA
# ─────────────────────────────────────────────────────────────

class SegoviaRuralParser(ParsingStrategy):
    name = "segovia-rural"

    def __init__(self, current_year: int | None = None, debug_dump: bool | None = None) -> None:
        super().__init__(current_year)
        self.debug_dump = get_settings().debug_dump if debug_dump is None else debug_dump

    def parse_page(
        self,
        index: int,
        page: Any,
        lines: list[str],
        base_year: int,
        la_granja_first: str | None,
    ) -> RuralParseResult:
        """Lectura lineal; si la página no da fechas, se reconstruyen las filas por columnas."""
        result = parse_rural_lines(lines, base_year, la_granja_first)
        table = None
        if self.debug_dump or not result.dates:
            table = tabulate_page(page)
            if self.debug_dump:
                log.debug("[%s] Página %d por columnas:\n%s", self.name, index, table.to_string())
        if not result.dates and table is not None and not table.empty:
            log.debug("[%s] Página %d: filas reconstruidas por columnas", self.name, index)
            result = parse_rural_lines(table_to_lines(table), base_year, result.la_granja_first)
        return result

    def parse_document(
        self,
        pdf: Any,
        pdf_url: str | None,
        current_year: int,
    ) -> Iterator[DutyAssignment]:
        base_year = self.detect_document_year(pdf, pdf_url, current_year).year
        dates: list[DutyDate] = []
        la_granja_first: str | None = None

        for index, page, lines in self.iter_pages(pdf):
            try:
                result = self.parse_page(index, page, lines, base_year, la_granja_first)
            except Exception as e:
                self.skip_page(index, e)
                continue
            la_granja_first = result.la_granja_first
            for duty_date in result.dates:
                if duty_date not in dates:
                    dates.append(duty_date)
            yield from result.assignments

        yield from la_granja_assignments(dates, la_granja_first)
        yield from cantalejo_assignments(dates)
