"""
Detección del año de un calendario de guardias.

Señales consultadas por orden de prioridad:

  1. Año en la URL del PDF (el más a la derecha: el del nombre del fichero
     gana al de la ruta, ``/2026/01/RURALES-2025.pdf`` -> 2025).
  2. Año en el texto de la página ("2025", "2024-2025" -> 2024).
  3. Año en el texto con separadores corruptos ("2.025", "2 0 2 5").
  4. Año actual.

Cada candidato debe estar a ±2 años del año actual. Tras elegir el año, si en
los primeros 500 caracteres aparece una fecha de diciembre ("01-dic") se resta
un año: el calendario empieza en el diciembre anterior al año impreso.

La detección nunca falla; siempre devuelve un año, con un aviso si procede.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from guardias_segovia.config import resolve_current_year
from guardias_segovia.locale_es import DATE_HYPHEN

log = logging.getLogger(__name__)

MIN_YEAR = 2020
MAX_YEAR = 2039
MAX_YEAR_DISTANCE = 2
DECEMBER_WINDOW = 500

RE_URL_YEAR = re.compile(r"\d{4}")
RE_TEXT_YEAR = re.compile(r"\b(20[2-3]\d)(?:\s*-\s*20[2-3]\d)?\b")
RE_FLEXIBLE_YEAR = re.compile(r"2\D?0\D?([2-3])\D?(\d)")
RE_DECEMBER_DATE = re.compile(rf"(?<!\d)\d{{1,2}}\s?{DATE_HYPHEN}\s?dic\b", re.IGNORECASE)


class YearSource(str, Enum):
    URL = "url"
    PDF_TEXT = "pdf_text"
    FLEXIBLE = "flexible"
    FALLBACK_DECEMBER = "fallback_december"
    FALLBACK_CURRENT = "fallback_current"


@dataclass(frozen=True)
class YearDetectionResult:
    year: int
    source: YearSource
    is_valid: bool = True
    warning: str | None = None


def is_valid_year(year: int, current_year: int) -> bool:
    return abs(year - current_year) <= MAX_YEAR_DISTANCE


def _in_range(year: int) -> bool:
    return MIN_YEAR <= year <= MAX_YEAR


def year_from_url(url: str | None, current_year: int) -> int | None:
    if not url:
        return None
    for token in reversed(RE_URL_YEAR.findall(url)):
        year = int(token)
        if _in_range(year) and is_valid_year(year, current_year):
            return year
    return None


def year_from_text(text: str, current_year: int) -> int | None:
    for m in RE_TEXT_YEAR.finditer(text):
        year = int(m.group(1))
        if is_valid_year(year, current_year):
            return year
    return None


def year_from_flexible_text(text: str, current_year: int) -> int | None:
    for m in RE_FLEXIBLE_YEAR.finditer(text):
        year = int(f"20{m.group(1)}{m.group(2)}")
        if _in_range(year) and is_valid_year(year, current_year):
            return year
    return None


def starts_in_december(text: str) -> bool:
    return bool(RE_DECEMBER_DATE.search(text[:DECEMBER_WINDOW]))


def detect_year(
    text: str,
    pdf_url: str | None = None,
    current_year: int | None = None,
) -> YearDetectionResult:
    """Resuelve el año operativo de un documento. Función pura dado ``current_year``."""
    current = resolve_current_year(current_year)
    text = text or ""

    candidates = (
        (YearSource.URL, year_from_url(pdf_url, current)),
        (YearSource.PDF_TEXT, year_from_text(text, current)),
        (YearSource.FLEXIBLE, year_from_flexible_text(text, current)),
    )
    source, year = next(
        ((src, y) for src, y in candidates if y is not None),
        (YearSource.FALLBACK_CURRENT, current),
    )

    warning = None
    if source is YearSource.FALLBACK_CURRENT:
        warning = f"No se encontró ningún año válido; se usa el año actual {current}."
    elif abs(year - current) == MAX_YEAR_DISTANCE:
        warning = f"El año {year} está en el límite del rango aceptado ({current} ±{MAX_YEAR_DISTANCE})."

    if starts_in_december(text):
        adjusted = year - 1
        warning = (
            f"Se encontró el año {year}, pero se ajusta a {adjusted} por las fechas "
            "de diciembre al inicio del calendario."
        )
        year = adjusted
        if source is YearSource.FALLBACK_CURRENT:
            source = YearSource.FALLBACK_DECEMBER

    result = YearDetectionResult(
        year=year,
        source=source,
        is_valid=is_valid_year(year, current),
        warning=warning,
    )
    log.debug("Año detectado: %s (fuente: %s)", result.year, result.source.value)
    return result


def roll_year(year: int, previous_month: int | None, day: int, month: int) -> int:
    """
    Contador de año en curso al recorrer las filas de un calendario.

    Un "01-ene" (o cualquier fecha de enero tras una de diciembre) que llega
    después de una fecha de otro mes abre un año nuevo. Si el calendario
    empieza directamente en enero no se avanza.
    """
    if month != 1 or previous_month in (None, 1):
        return year
    if day == 1 or previous_month == 12:
        return year + 1
    return year
