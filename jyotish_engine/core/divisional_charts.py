"""
divisional_charts.py
====================
Divisional (Varga) chart calculations for Vedic astrology.

A divisional chart is computed by dividing each zodiac sign into N equal parts,
then mapping each planet (and the Ascendant) to the corresponding divisional
sign.  The degree within the part is stretched back to a full 30° sign, so a
divisional position is again an ordinary sidereal longitude and the houses can
be rebuilt from the divisional Ascendant.

Charts implemented:
  D9  — Navamsa (spouse, dharma — most important divisional)
  D10 — Dasamsa (career)

Both select their starting sign by sign_index % 3, i.e. by the sign's
modality group (movable / fixed / dual).

Source: Parashara BPHS; Sanjay Rath (2002) "Crux of Vedic Astrology"
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from .ephemeris import AscendantPosition, PlanetPosition, normalize
from .houses import HouseSlot, organize_houses

NAVAMSA_PART = 30.0 / 9     # 3°20'
DASAMSA_PART = 3.0

# sign_index % 3 → offset added to the part number
NAVAMSA_OFFSET = {0: 0, 1: 4, 2: 8}     # absolute: counted from Aries
DASAMSA_OFFSET = {0: 0, 1: 9, 2: 6}     # relative: counted from the sign itself


@dataclass(frozen=True)
class DivisionalChart:
    division:  str           # e.g. "D9"
    ascendant: AscendantPosition
    planets:   Tuple[PlanetPosition, ...]
    houses:    Mapping[int, HouseSlot]    # read-only view


def _base_sign_and_degree(sidereal_longitude: float):
    """Return (sign_index 0–11, degree_in_sign 0–30) from sidereal longitude."""
    lon = normalize(sidereal_longitude)
    sign_idx = int(lon / 30) % 12
    return sign_idx, lon - sign_idx * 30.0


def d9(sidereal_longitude: float) -> float:
    """D9 Navamsa — each sign split into 9 × 3°20' parts."""
    sign_idx, deg = _base_sign_and_degree(sidereal_longitude)
    part = min(int(deg / NAVAMSA_PART), 8)   # 0–8
    nav_sign = (part + NAVAMSA_OFFSET[sign_idx % 3]) % 12
    return normalize(nav_sign * 30.0 + (deg - part * NAVAMSA_PART) * 9)


def d10(sidereal_longitude: float) -> float:
    """D10 Dasamsa — each sign split into 10 × 3° parts."""
    sign_idx, deg = _base_sign_and_degree(sidereal_longitude)
    part = min(int(deg / DASAMSA_PART), 9)   # 0–9
    dasamsa_sign = (sign_idx + part + DASAMSA_OFFSET[sign_idx % 3]) % 12
    return normalize(dasamsa_sign * 30.0 + (deg - part * DASAMSA_PART) * 10)


DIVISIONAL_FUNCTIONS = {
    "D9":  d9,
    "D10": d10,
}


def compute_divisional_chart(planets: Iterable[PlanetPosition],
                             ascendant: AscendantPosition,
                             division: str) -> DivisionalChart:
    """
    Compute a specific divisional chart for all planets and the Ascendant.

    Args:
        planets: natal PlanetPositions
        ascendant: natal AscendantPosition
        division: one of "D9", "D10"

    Returns:
        DivisionalChart with houses re-derived from the divisional Ascendant.
    """
    if division not in DIVISIONAL_FUNCTIONS:
        raise ValueError(f"Unknown divisional chart: {division}. "
                         f"Supported: {list(DIVISIONAL_FUNCTIONS.keys())}")

    fn = DIVISIONAL_FUNCTIONS[division]
    div_asc = AscendantPosition.from_longitude(fn(ascendant.longitude))
    div_planets = [
        PlanetPosition.from_longitude(p.name, fn(p.longitude), is_retrograde=p.is_retrograde)
        for p in planets
    ]
    placed, houses = organize_houses(div_planets, div_asc)
    return DivisionalChart(division, div_asc, tuple(placed), MappingProxyType(houses))
