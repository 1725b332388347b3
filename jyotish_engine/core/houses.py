"""
houses.py
=========
Whole Sign house placement (Vedic default).

House 1 is the whole sign containing the Ascendant; every following house is
the next sign.  All 12 houses exist even when empty.

Source: Holden, J.H. (1994). "A History of Horoscopic Astrology"
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Tuple

from .ephemeris import SIGNS, AscendantPosition, PlanetPosition


@dataclass(frozen=True)
class HouseSlot:
    number:          int        # 1–12
    sign_index:      int
    sign:            str
    start_longitude: float
    planets:         Tuple[PlanetPosition, ...] = ()


# ---------------------------------------------------------------------------
# House geometry
# ---------------------------------------------------------------------------

def whole_sign_cusps(ascendant: float) -> List[float]:
    """
    Whole Sign house cusps. House 1 = sign containing Ascendant.
    Each house = entire zodiac sign (30°).
    """
    lagna_sign = int(ascendant / 30) * 30
    return [(lagna_sign + 30 * i) % 360.0 for i in range(12)]


def house_number(planet_sign_index: int, lagna_sign_index: int) -> int:
    """(planet_sign - lagna_sign) % 12 + 1"""
    return (planet_sign_index - lagna_sign_index + 12) % 12 + 1


# ---------------------------------------------------------------------------
# Chart organisation
# ---------------------------------------------------------------------------

def organize_houses(planets: Iterable[PlanetPosition], ascendant: AscendantPosition
                    ) -> Tuple[List[PlanetPosition], Dict[int, HouseSlot]]:
    """
    Assign every planet its house relative to the ascendant and group them.

    Returns (planets with `house` set, {1..12: HouseSlot}).  Input order is
    kept both in the returned list and inside each slot.
    """
    cusps = whole_sign_cusps(ascendant.longitude)
    placed = [replace(p, house=house_number(p.sign_index, ascendant.sign_index))
              for p in planets]

    occupants: Dict[int, List[PlanetPosition]] = {h: [] for h in range(1, 13)}
    for p in placed:
        occupants[p.house].append(p)

    houses = {}
    for h in range(1, 13):
        sign_idx = (ascendant.sign_index + h - 1) % 12
        houses[h] = HouseSlot(
            number=h,
            sign_index=sign_idx,
            sign=SIGNS[sign_idx],
            start_longitude=cusps[h - 1],
            planets=tuple(occupants[h]),
        )
    return placed, houses
