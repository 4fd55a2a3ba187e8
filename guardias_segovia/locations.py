"""
Regiones y Zonas Básicas de Salud (ZBS) con calendario de guardias propio.

Cada PDF pertenece a una región; Segovia Rural se reparte además entre varias
ZBS, cada una con su propia ``DutyLocation``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    icon: str
    pdf_url: str
    notes: str | None = None
    has_24h_pharmacies: bool = False


@dataclass(frozen=True)
class ZBS:
    id: str
    name: str
    icon: str
    notes: str | None = None


@dataclass(frozen=True)
class DutyLocation:
    id: str
    name: str
    icon: str
    region_id: str
    notes: str | None = None

    @classmethod
    def from_region(cls, region: Region) -> "DutyLocation":
        return cls(id=region.id, name=region.name, icon=region.icon, region_id=region.id)

    @classmethod
    def from_zbs(cls, zbs: ZBS) -> "DutyLocation":
        return cls(
            id=zbs.id,
            name=zbs.name,
            icon=zbs.icon,
            region_id=SEGOVIA_RURAL.id,
            notes=zbs.notes,
        )


# ─────────────────────────────────────────────────────────────
# REGIONES
# ─────────────────────────────────────────────────────────────

_PDF_BASE = "https://cofsegovia.com/wp-content/uploads"

SEGOVIA_CAPITAL = Region(
    id="segovia-capital",
    name="Segovia Capital",
    icon="🏙",
    pdf_url=f"{_PDF_BASE}/2025/05/CALENDARIO-GUARDIAS-SEGOVIA-CAPITAL-DIA-2025.pdf",
    notes="Turnos de día y de noche",
)
CUELLAR = Region(
    id="cuellar",
    name="Cuéllar",
    icon="🌳",
    pdf_url=f"{_PDF_BASE}/2025/01/GUARDIAS-CUELLAR_2025.pdf",
    notes="Servicios semanales excepto primera semana de septiembre",
    has_24h_pharmacies=True,
)
EL_ESPINAR = Region(
    id="el-espinar",
    name="El Espinar / San Rafael",
    icon="🏔️",
    pdf_url=f"{_PDF_BASE}/2025/01/Guardias-EL-ESPINAR_2025.pdf",
    notes="Servicios semanales",
    has_24h_pharmacies=True,
)
SEGOVIA_RURAL = Region(
    id="segovia-rural",
    name="Segovia Rural",
    icon="🚜",
    pdf_url=f"{_PDF_BASE}/2025/06/SERVICIOS-DE-URGENCIA-RURALES-2025.pdf",
    notes="Servicios de urgencia rurales",
)

REGIONS: dict[str, Region] = {
    r.id: r for r in (SEGOVIA_CAPITAL, CUELLAR, EL_ESPINAR, SEGOVIA_RURAL)
}


# ─────────────────────────────────────────────────────────────
# ZONAS BÁSICAS DE SALUD
# ─────────────────────────────────────────────────────────────

RIAZA_SEPULVEDA = ZBS("riaza-sepulveda", "Riaza / Sepúlveda", "🏔️", "Zona de montaña")
LA_GRANJA = ZBS("la-granja", "La Granja", "🏰", "Real Sitio de San Ildefonso")
LA_SIERRA = ZBS("la-sierra", "La Sierra", "⛰️", "Zona de sierra")
FUENTIDUENA = ZBS("fuentiduena", "Fuentidueña", "🏞️", "Zona de valle")
CARBONERO = ZBS("carbonero", "Carbonero", "🌲", "Zona de pinares")
NAVAS_DE_LA_ASUNCION = ZBS("navas-asuncion", "Navas de la Asunción", "🏘️", "Zona de la campiña")
VILLACASTIN = ZBS("villacastin", "Villacastín", "🚂", "Nudo ferroviario")
CANTALEJO = ZBS(
    "cantalejo",
    "Cantalejo",
    "🏘️",
    "Se muestran las dos farmacias de Cantalejo porque el PDF no indica la rotación real",
)

ZBS_LIST: tuple[ZBS, ...] = (
    RIAZA_SEPULVEDA,
    LA_GRANJA,
    LA_SIERRA,
    FUENTIDUENA,
    CARBONERO,
    NAVAS_DE_LA_ASUNCION,
    VILLACASTIN,
    CANTALEJO,
)


def locations_for_region(region_id: str) -> list[DutyLocation]:
    """Segovia Rural se expande a sus ZBS; el resto de regiones es una sola ubicación."""
    region = REGIONS[region_id]
    if region.id == SEGOVIA_RURAL.id:
        return [DutyLocation.from_zbs(z) for z in ZBS_LIST]
    return [DutyLocation.from_region(region)]


def location_by_id(location_id: str) -> DutyLocation:
    if location_id in REGIONS:
        return DutyLocation.from_region(REGIONS[location_id])
    for zbs in ZBS_LIST:
        if zbs.id == location_id:
            return DutyLocation.from_zbs(zbs)
    raise KeyError(f"Ubicación desconocida: {location_id}")
