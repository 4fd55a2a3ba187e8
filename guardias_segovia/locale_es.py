"""
Tablas y expresiones regulares en español compartidas por todos los parsers.

Una sola tabla bidireccional mes <-> número, los días de la semana en el
orden de ``date.weekday()`` y las utilidades de normalización de texto que
necesitan los PDFs del COF de Segovia (espacios no separables, acentos
perdidos, guiones tipográficos).
"""

from __future__ import annotations

import re
import unicodedata

# ─────────────────────────────────────────────────────────────
# CONSTANTES
# ─────────────────────────────────────────────────────────────

MONTHS_ES: dict[int, str] = {
    1:  "enero",
    2:  "febrero",
    3:  "marzo",
    4:  "abril",
    5:  "mayo",
    6:  "junio",
    7:  "julio",
    8:  "agosto",
    9:  "septiembre",
    10: "octubre",
    11: "noviembre",
    12: "diciembre",
}

MONTH_NUMBERS: dict[str, int] = {name: num for num, name in MONTHS_ES.items()}

# Abreviaturas de tres letras usadas en los calendarios ("07-ene")
MONTH_ABBREVIATIONS: dict[str, int] = {name[:3]: num for num, name in MONTHS_ES.items()}

# Índice = date.weekday()
WEEKDAYS_ES = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]

_MONTH_ABBR_ALT = "|".join(MONTH_ABBREVIATIONS)
_MONTH_NAME_ALT = "|".join(MONTHS_ES.values())

# Tolera acentos perdidos o mal codificados ("miÃ©rcoles", "sabado")
WEEKDAY_PATTERN = r"lunes|martes|mi\S{0,2}rcoles|jueves|viernes|s\S{1,2}bado|domingo"

RE_WHITESPACE = re.compile(r"[\s\u00A0\u2000-\u200A\u2028\u2029\u202F\u205F\u3000]+")

DATE_HYPHEN = r"[\u2010\u2011\u2013-]"

# "07-ene", "7‐ene" (guion U+2010), "07 - ene"
RE_SHORT_DATE = re.compile(
    rf"(?<!\d)(\d{{1,2}})\s?{DATE_HYPHEN}\s?({_MONTH_ABBR_ALT})",
    re.IGNORECASE,
)

# "01-ene al 07-ene", "28-dic a 03-ene"
RE_SHORT_DATE_RANGE = re.compile(
    rf"(?<!\d)(\d{{1,2}})\s?{DATE_HYPHEN}\s?({_MONTH_ABBR_ALT})[a-z]*\.?"
    r"\s+(?:al?|hasta)\s+"
    rf"(?<!\d)(\d{{1,2}})\s?{DATE_HYPHEN}\s?({_MONTH_ABBR_ALT})",
    re.IGNORECASE,
)

# "02-sep-25" (calendario rural, año con dos cifras)
RE_SHORT_DATE_WITH_YEAR = re.compile(
    rf"(\d{{1,2}})-({_MONTH_ABBR_ALT})-(\d{{2}})\b",
    re.IGNORECASE,
)

# "lunes, 1 de enero"
RE_LONG_DATE = re.compile(
    rf"({WEEKDAY_PATTERN}),?\s*(\d{{1,2}})\s*de\s*({_MONTH_NAME_ALT})",
    re.IGNORECASE,
)

# "DOMINGO 31 DE AGOSTO" (formato antiguo de Cuéllar, sin coma)
RE_WEEKDAY_DAY_MONTH = re.compile(
    rf"(?:{WEEKDAY_PATTERN})\s+(\d{{1,2}})\s+DE\s+({_MONTH_NAME_ALT})",
    re.IGNORECASE,
)

RE_WEEKDAY = re.compile(WEEKDAY_PATTERN, re.IGNORECASE)


# ─────────────────────────────────────────────────────────────
# UTILIDADES DE TEXTO
# ─────────────────────────────────────────────────────────────

def normalize_whitespace(text: str) -> str:
    """Sustituye cualquier variante Unicode de espacio por un espacio simple."""
    return RE_WHITESPACE.sub(" ", text).strip()


def clean_space(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def ascii_upper(text: str) -> str:
    """Mayúsculas ASCII sin acentos: "Marqués" -> "MARQUES"."""
    nfkd = unicodedata.normalize("NFKD", normalize_whitespace(text))
    ascii_str = "".join(c for c in nfkd if not unicodedata.combining(c))
    return ascii_str.upper()


def match_form(text: str) -> str:
    """Forma de comparación: ASCII en mayúsculas, sin puntuación, palabras separadas por un espacio."""
    return re.sub(r"[^A-Z0-9]+", " ", ascii_upper(text)).strip()


def contains_key(line: str, key: str) -> bool:
    """
    ¿Aparece la clave en la línea empezando en un límite de palabra?

    Insensible a mayúsculas, acentos y puntuación: "Ctra. BAHABON" casa con
    "CTRA BAHABÓN"; "NAVA DE LA A" casa con "Nava de la Asunción".
    """
    key_form = match_form(key)
    if not key_form:
        return False
    return f" {key_form}" in f" {match_form(line)}"


def month_from_abbreviation(abbr: str) -> int | None:
    return MONTH_ABBREVIATIONS.get(abbr.strip().lower()[:3])


def month_from_name(name: str) -> int | None:
    return MONTH_NUMBERS.get(name.strip().lower())


def split_lines(text: str | None) -> list[str]:
    """Divide el texto de una página en líneas recortadas y no vacías."""
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]
