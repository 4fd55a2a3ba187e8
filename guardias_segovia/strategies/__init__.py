"""Registro de estrategias: identificador de región -> parser."""

from __future__ import annotations

from guardias_segovia.strategies.base import ParsingStrategy
from guardias_segovia.strategies.cuellar import CuellarParser
from guardias_segovia.strategies.el_espinar import ElEspinarParser
from guardias_segovia.strategies.segovia_capital import SegoviaCapitalParser
from guardias_segovia.strategies.segovia_rural import SegoviaRuralParser

STRATEGIES: dict[str, type[ParsingStrategy]] = {
    "segovia-capital": SegoviaCapitalParser,
    "cuellar": CuellarParser,
    "el-espinar": ElEspinarParser,
    "segovia-rural": SegoviaRuralParser,
}


def get_strategy(region_id: str, current_year: int | None = None) -> ParsingStrategy:
    """Instancia nueva en cada llamada: las estrategias no comparten estado."""
    try:
        strategy_cls = STRATEGIES[region_id]
    except KeyError:
        known = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"Región sin parser: {region_id!r} (conocidas: {known})") from None
    return strategy_cls(current_year=current_year)


__all__ = [
    "STRATEGIES",
    "ParsingStrategy",
    "CuellarParser",
    "ElEspinarParser",
    "SegoviaCapitalParser",
    "SegoviaRuralParser",
    "get_strategy",
]
