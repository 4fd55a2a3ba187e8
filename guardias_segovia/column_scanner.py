"""
Extracción geométrica de texto por columnas.

Los calendarios del COF no tienen estructura de tabla: el texto está colocado
en posiciones absolutas. Este módulo recorta regiones rectangulares de una
página pdfplumber y devuelve su texto.

Coordenadas: las de pdfplumber, con el origen arriba a la izquierda
(``top`` crece hacia abajo). Los resultados salen siempre de arriba abajo.

Una geometría inválida (ancho o alto nulo, región fuera de la página) devuelve
texto vacío y nunca lanza excepción.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

log = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 5.0
X_TOLERANCE = 3
Y_TOLERANCE = 3


@dataclass(frozen=True)
class TextColumn:
    """Franja vertical de la página: x inicial y ancho."""
    x: float
    width: float

    @property
    def x1(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class CellScanArea:
    """Celda de una fila: una columna y la altura que se lee a partir del top de la fila."""
    column: TextColumn
    height: float


# ─────────────────────────────────────────────────────────────
# EXTRACCIÓN DE REGIONES
# ─────────────────────────────────────────────────────────────

def _clamp_bbox(page: Any, x0: float, top: float, x1: float, bottom: float):
    px0, ptop, px1, pbottom = page.bbox
    box = (max(x0, px0), max(top, ptop), min(x1, px1), min(bottom, pbottom))
    if box[2] <= box[0] or box[3] <= box[1]:
        return None
    return box


def extract_region_text(page: Any, x: float, top: float, width: float, height: float) -> str:
    """Texto que intersecta el rectángulo (x, top, width, height)."""
    if width <= 0 or height <= 0:
        return ""
    try:
        box = _clamp_bbox(page, x, top, x + width, top + height)
        if box is None:
            return ""
        text = page.crop(box).extract_text(x_tolerance=X_TOLERANCE, y_tolerance=Y_TOLERANCE)
    except Exception as e:
        log.debug("Región (%s, %s, %s, %s) ilegible: %s", x, top, width, height, e)
        return ""
    return (text or "").strip()


def region_lines(page: Any, x: float, top: float, width: float, height: float) -> list[str]:
    text = extract_region_text(page, x, top, width, height)
    return [line.strip() for line in text.splitlines() if line.strip()]


def smallest_font_size(page: Any, default: float = DEFAULT_FONT_SIZE) -> float:
    """Tamaño de letra más pequeño de la página; sirve de unidad de altura de fila."""
    try:
        sizes = [c["size"] for c in page.chars if c.get("size")]
    except Exception:
        log.debug("No se pudieron leer los caracteres de la página")
        return default
    return min(sizes) if sizes else default


# ─────────────────────────────────────────────────────────────
# BARRIDO DE COLUMNAS
# ─────────────────────────────────────────────────────────────

def scan_column(
    page: Any,
    column: TextColumn,
    row_height: float,
    scan_increment: float,
    start: float = 0.0,
    end: float | None = None,
) -> list[tuple[float, str]]:
    """
    Desliza una ventana de ``row_height`` de arriba abajo en pasos de
    ``scan_increment`` y devuelve ``(top, texto)`` por cada ventana con texto.

    Las ventanas se solapan, así que el mismo texto puede salir repetido; ver
    ``remove_duplicate_adjacent``.
    """
    if row_height <= 0 or scan_increment <= 0 or column.width <= 0:
        return []
    bottom = page.height if end is None else min(end, page.height)
    rows: list[tuple[float, str]] = []
    top = max(start, 0.0)
    while top < bottom:
        text = extract_region_text(page, column.x, top, column.width, row_height)
        if text:
            rows.append((top, text))
        top += scan_increment
    return rows


def remove_duplicate_adjacent(rows: Sequence[tuple[float, str]]) -> list[tuple[float, str]]:
    """Quita repeticiones consecutivas del mismo texto, conservando la primera."""
    result: list[tuple[float, str]] = []
    for top, text in rows:
        if result and result[-1][1] == text:
            continue
        result.append((top, text))
    return result


def extract_full_column(
    page: Any,
    column: TextColumn,
    start: float = 0.0,
    end: float | None = None,
) -> str:
    """Extracción de la columna entera de una sola vez; las filas se separan por saltos de línea."""
    bottom = page.height if end is None else end
    return extract_region_text(page, column.x, start, column.width, bottom - start)


def column_lines(
    page: Any,
    column: TextColumn,
    start: float = 0.0,
    end: float | None = None,
) -> list[tuple[float, str]]:
    """
    Líneas físicas de la columna con su ``top``, de arriba abajo.

    Las palabras cuyo ``top`` difiere menos de ``Y_TOLERANCE`` forman una línea.
    """
    bottom = page.height if end is None else end
    if column.width <= 0 or bottom <= start:
        return []
    try:
        box = _clamp_bbox(page, column.x, start, column.x1, bottom)
        if box is None:
            return []
        words = page.crop(box).extract_words(x_tolerance=X_TOLERANCE, y_tolerance=Y_TOLERANCE)
    except Exception as e:
        log.debug("Columna x=%s ilegible: %s", column.x, e)
        return []

    grouped: list[tuple[float, list[dict]]] = []
    for word in sorted(words, key=lambda w: (w["top"], w["x0"])):
        if grouped and abs(word["top"] - grouped[-1][0]) <= Y_TOLERANCE:
            grouped[-1][1].append(word)
        else:
            grouped.append((word["top"], [word]))
    return [
        (top, " ".join(w["text"] for w in sorted(line, key=lambda w: w["x0"])))
        for top, line in grouped
    ]


def scan_row(page: Any, cells: Sequence[CellScanArea], top: float) -> list[list[str]]:
    """Lee simultáneamente todas las celdas de una fila; una lista de líneas por celda."""
    return [
        region_lines(page, cell.column.x, top, cell.column.width, cell.height)
        for cell in cells
    ]


def find_first_coherent_row(
    page: Any,
    cells: Sequence[CellScanArea],
    start: float,
    end: float,
    increment: float,
    validator: Callable[[list[list[str]]], bool],
) -> float | None:
    """
    Baja desde ``start`` hasta encontrar una fila cuyas celdas pasen el
    ``validator``. Sirve para saltar títulos y cabeceras de altura variable.

    Devuelve el ``top`` de la fila o None si no hay ninguna antes de ``end``.
    """
    if increment <= 0:
        return None
    top = start
    while top < end:
        if validator(scan_row(page, cells, top)):
            log.debug("Primera fila coherente en y=%.1f", top)
            return top
        top += increment
    log.debug("Sin fila coherente entre y=%.1f y y=%.1f", start, end)
    return None
