#!/usr/bin/env python3
"""
parse_guardias.py
=================
Extrae el calendario de farmacias de guardia de un PDF del COF de Segovia.

Ficheros de salida
------------------
  - guardias_<region>_<año>.json   (caché versionada)
  - guardias_<region>_<año>.csv    (una fila por farmacia y turno)

Uso
---
  python scripts/parse_guardias.py --pdf GUARDIAS-CUELLAR_2025.pdf --region cuellar

  # La URL de origen ayuda a detectar el año:
  python scripts/parse_guardias.py \
      --pdf SERVICIOS-DE-URGENCIA-RURALES-2025.pdf \
      --region segovia-rural \
      --url https://cofsegovia.com/wp-content/uploads/2025/06/SERVICIOS-DE-URGENCIA-RURALES-2025.pdf \
      --output-dir ./output
"""

from __future__ import annotations

import argparse
import logging
import sys

from guardias_segovia import parse_schedules
from guardias_segovia.config import get_settings, resolve_current_year
from guardias_segovia.locations import REGIONS
from guardias_segovia.serialization import write_outputs

log = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="Extrae los calendarios de farmacias de guardia de los PDFs del COF de Segovia."
    )
    parser.add_argument("--pdf", required=True, help="Ruta al PDF del calendario.")
    parser.add_argument(
        "--region", required=True, choices=sorted(REGIONS),
        help="Región a la que pertenece el PDF.",
    )
    parser.add_argument("--url", default=None, help="URL de origen del PDF (opcional).")
    parser.add_argument(
        "--output-dir", default=".",
        help="Directorio de salida para el JSON y el CSV (por defecto: el actual).",
    )
    parser.add_argument(
        "--current-year", type=int, default=None,
        help="Año de referencia para validar el año detectado (por defecto: el actual).",
    )
    args = parser.parse_args()

    region = REGIONS[args.region]
    print(f"\n{'=' * 60}")
    print(f"  Farmacias de guardia: {region.name}")
    print(f"{'=' * 60}")
    print(f"  PDF    : {args.pdf}")
    print(f"  Salida : {args.output_dir}")
    print()

    with open(args.pdf, "rb") as fh:
        pdf_bytes = fh.read()

    schedules = parse_schedules(args.region, pdf_bytes, args.url, current_year=args.current_year)
    if not schedules:
        print("❌ No se ha podido extraer ningún día de guardia del PDF.")
        sys.exit(1)

    years = sorted({s.date.year for items in schedules.values() for s in items if s.date.year})
    year = years[0] if years else resolve_current_year(args.current_year)
    json_path, csv_path = write_outputs(schedules, args.output_dir, f"guardias_{region.id}_{year}")

    print("✅ Proceso terminado.")
    print(f"\n  🗂  JSON : {json_path}")
    print(f"  📅 CSV  : {csv_path}")
    print("\n  📊 Días de guardia por ubicación:")
    for location, items in schedules.items():
        first, last = items[0].date, items[-1].date
        print(f"     {location.icon} {location.name:<24} {len(items):>4}   {first} → {last}")
    print()


if __name__ == "__main__":
    main()
