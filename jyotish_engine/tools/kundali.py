"""
kundali.py
==========
Main Kundali (birth chart) generator.

Orchestrates the ephemeris, house, divisional chart and dasha modules to
produce a complete, structured chart:

    positions → houses → D9 + D10 → Vimshottari tree (from the Moon)

Yogas are not part of assembly; run classify_yogas on the result.

Usage:
    from jyotish_engine import BirthInput, compute_chart

    chart = compute_chart(BirthInput.from_strings(
        "1990-06-15", "10:30", "+05:30",
        latitude=28.6139, longitude=77.2090,   # Delhi
    ))
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..config import get_settings
from ..core.ephemeris import (
    AscendantPosition, BirthInput, PlanetPosition, ayanamsa, compute_positions,
)
from ..core.houses import HouseSlot, organize_houses
from ..core.divisional_charts import DivisionalChart, compute_divisional_chart
from ..core.dasha import DashaPeriod, compute_dasha_tree_from_longitude
from ..core.external import positions_from_external

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chart:
    birth:           BirthInput
    ascendant:       AscendantPosition
    planets:         Tuple[PlanetPosition, ...]
    houses:          Mapping[int, HouseSlot]   # read-only view
    navamsa:         DivisionalChart
    dasamsa:         DivisionalChart
    dasha:           Tuple[DashaPeriod, ...]
    ayanamsa:        float
    ayanamsa_system: str
    source:          str = "internal"     # or "external"

    def planet(self, name: str) -> PlanetPosition:
        for p in self.planets:
            if p.name == name:
                return p
        raise KeyError(name)

    def divisional(self, division: str):
        """"D1" returns the chart itself."""
        return {"D1": self, "D9": self.navamsa, "D10": self.dasamsa}[division]


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------

def compute_chart(birth: BirthInput,
                  external_positions: Optional[Sequence[Any]] = None,
                  *,
                  dasha_depth: Optional[int] = None,
                  ayanamsa_system: Optional[str] = None) -> Chart:
    """
    Generate a complete birth chart.

    Args:
        birth: local birth date/time, UTC offset and location
        external_positions: provider records (Ascendant + 9 planets); when
            given they replace the internal position calculation
        dasha_depth: Vimshottari levels, 1–5 (default from settings)
        ayanamsa_system: 'lahiri', 'raman', 'kp', 'fagan' (default from settings)

    Raises:
        ExternalPositionsError: malformed or incomplete external positions
        ValueError: dasha_depth outside 1–5
    """
    settings = get_settings()
    depth = settings.DASHA_DEPTH if dasha_depth is None else dasha_depth
    system = ayanamsa_system or settings.AYANAMSA

    instant = birth.utc_instant
    ayan = ayanamsa(instant, system)

    if external_positions is None:
        asc, planets = compute_positions(birth, system)
        source = "internal"
    else:
        asc, planets = positions_from_external(external_positions)
        source = "external"

    placed, houses = organize_houses(planets, asc)
    navamsa = compute_divisional_chart(placed, asc, "D9")
    dasamsa = compute_divisional_chart(placed, asc, "D10")

    moon = next(p for p in placed if p.name == "Moon")
    dasha = compute_dasha_tree_from_longitude(moon.longitude, instant, depth)

    logger.debug("Chart for %s: %s lagna, Moon in %s, source=%s",
                 instant.isoformat(), asc.sign, moon.nakshatra, source)
    return Chart(
        birth=birth,
        ascendant=asc,
        planets=tuple(placed),
        houses=MappingProxyType(houses),
        navamsa=navamsa,
        dasamsa=dasamsa,
        dasha=tuple(dasha),
        ayanamsa=ayan,
        ayanamsa_system=system,
        source=source,
    )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _position_dict(p) -> dict:
    d = {
        "sidereal_longitude": round(p.longitude, 6),
        "sign":               p.sign,
        "sign_index":         p.sign_index,
        "degree_in_sign":     round(p.degree_in_sign, 6),
        "degree_formatted":   p.degree_formatted(),
        "nakshatra":          p.nakshatra,
        "nakshatra_pada":     p.pada,
        "nakshatra_lord":     p.nakshatra_lord,
        "house":              p.house,
    }
    if isinstance(p, PlanetPosition):
        d["is_retrograde"] = p.is_retrograde
    return d


def _houses_dict(houses: Mapping[int, HouseSlot]) -> dict:
    return {
        h: {
            "sign": slot.sign,
            "start_longitude": slot.start_longitude,
            "planets": [p.name for p in slot.planets],
        }
        for h, slot in houses.items()
    }


def _divisional_dict(chart: DivisionalChart) -> dict:
    return {
        "lagna":   _position_dict(chart.ascendant),
        "planets": {p.name: _position_dict(p) for p in chart.planets},
        "houses":  _houses_dict(chart.houses),
    }


def dasha_to_dict(period: DashaPeriod) -> dict:
    d = {
        "planet": period.planet,
        "level":  period.level_name,
        "start":  period.start.isoformat(),
        "end":    period.end.isoformat(),
        "duration_years": round(period.duration_years, 4),
        "allocated_years": period.allocated_years,
    }
    if period.balance_at_birth is not None:
        d["balance_at_birth"] = round(period.balance_at_birth, 6)
    if period.children:
        d["children"] = [dasha_to_dict(c) for c in period.children]
    return d


def chart_to_dict(chart: Chart) -> dict:
    """JSON-ready representation (ISO-8601 datetimes)."""
    b = chart.birth
    return {
        "meta": {
            "birth_date":   b.date.isoformat(),
            "birth_time":   b.time.isoformat(),
            "utc_offset":   b.utc_offset,
            "utc_instant":  b.utc_instant.isoformat(),
            "latitude":     b.latitude,
            "longitude":    b.longitude,
            "ayanamsa":     chart.ayanamsa_system,
            "ayanamsa_value": round(chart.ayanamsa, 6),
            "source":       chart.source,
        },
        "lagna":   _position_dict(chart.ascendant),
        "planets": {p.name: _position_dict(p) for p in chart.planets},
        "houses":  _houses_dict(chart.houses),
        "divisional_charts": {
            "D9":  _divisional_dict(chart.navamsa),
            "D10": _divisional_dict(chart.dasamsa),
        },
        "dasha": [dasha_to_dict(p) for p in chart.dasha],
    }
