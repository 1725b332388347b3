"""
external.py
===========
Adapter for planetary positions supplied by an outside provider.

Providers send one record per body ("Ascendant" plus the nine planets):

    {"name": "Moon", "fullDegree": 302.38, "sign": "Aquarius",
     "nakshatra": "Dhanishtha", "nakshatra_pad": 4, "house": 10,
     "isRetro": "false", ...}

The records are validated with pydantic and converted to the engine's own
position types.  Only `fullDegree` is trusted: sign, nakshatra and house are
re-derived from it, and disagreements are logged, never raised.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .ephemeris import PLANETS, AscendantPosition, PlanetPosition
from .houses import house_number

logger = logging.getLogger(__name__)

ASCENDANT = "Ascendant"

# Provider spellings → canonical names
PLANET_NAME_MAP = {
    "SUN": "Sun", "MOON": "Moon", "MARS": "Mars", "MERCURY": "Mercury",
    "JUPITER": "Jupiter", "VENUS": "Venus", "SATURN": "Saturn",
    "RAHU": "Rahu", "KETU": "Ketu",
    "SU": "Sun", "MO": "Moon", "MA": "Mars", "ME": "Mercury", "JU": "Jupiter",
    "VE": "Venus", "SA": "Saturn", "RA": "Rahu", "KE": "Ketu",
    "ASCENDANT": ASCENDANT, "ASC": ASCENDANT, "LAGNA": ASCENDANT, "AS": ASCENDANT,
}

_TRUTHY = {"true", "yes", "1", "r", "retro", "retrograde"}


class ExternalPositionsError(ValueError):
    """Provider positions are incomplete or malformed."""


class ExternalPosition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name:          str
    full_degree:   float = Field(..., alias="fullDegree", allow_inf_nan=False)
    sign:          Optional[str] = None
    nakshatra:     Optional[str] = None
    nakshatra_pad: Optional[int] = None
    house:         Optional[int] = None
    is_retro:      bool = Field(False, alias="isRetro")

    @field_validator("is_retro", mode="before")
    @classmethod
    def _parse_retro(cls, value: Any) -> bool:
        # providers send "true"/"false" strings as often as booleans
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)


def canonical_name(name: Any) -> Optional[str]:
    """Canonical body name, or None for bodies the engine does not track."""
    if not isinstance(name, str):
        return None
    key = name.strip()
    mapped = PLANET_NAME_MAP.get(key.upper())
    if mapped:
        return mapped
    titled = key.title()
    return titled if titled in PLANETS else None


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "entry"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return ", ".join(parts)


def _parse_entries(entries: Sequence[Any]) -> Dict[str, ExternalPosition]:
    parsed: Dict[str, ExternalPosition] = {}
    problems: List[str] = []
    for i, raw in enumerate(entries):
        if isinstance(raw, ExternalPosition):
            entry = raw
        else:
            raw_name = raw.get("name") if isinstance(raw, Mapping) else None
            if isinstance(raw, Mapping) and raw_name is not None and canonical_name(raw_name) is None:
                logger.debug("Ignoring external body %r", raw_name)
                continue
            try:
                entry = ExternalPosition.model_validate(raw)
            except ValidationError as exc:
                problems.append(f"entry {i} ({raw_name or '?'}): {_describe(exc)}")
                continue

        name = canonical_name(entry.name)
        if name is None:
            logger.debug("Ignoring external body %r", entry.name)
            continue
        if name in parsed:
            logger.warning("Duplicate external entry for %s, keeping the last one", name)
        parsed[name] = entry

    if problems:
        raise ExternalPositionsError("Invalid external positions: " + "; ".join(problems))
    return parsed


def _check_sign(label: str, supplied: Optional[str], derived: str) -> None:
    if supplied and supplied.strip().lower() != derived.lower():
        logger.warning("%s: supplied sign %r disagrees with degree (%s); using degree",
                       label, supplied, derived)


def positions_from_external(entries: Sequence[Any]
                            ) -> Tuple[AscendantPosition, List[PlanetPosition]]:
    """
    Validate provider records and convert them to engine positions.

    Raises ExternalPositionsError when the ascendant or any planet is missing
    or a record is malformed.  Returned planets carry no house yet.
    """
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        raise ExternalPositionsError("External positions must be a list of records")

    parsed = _parse_entries(entries)

    usable = [p for p in PLANETS if p in parsed]
    if len(usable) < len(PLANETS):
        missing = [p for p in PLANETS if p not in parsed]
        raise ExternalPositionsError(
            f"External positions have {len(usable)} of {len(PLANETS)} planets; "
            f"missing: {', '.join(missing)}")
    if ASCENDANT not in parsed:
        raise ExternalPositionsError("External positions are missing the Ascendant")

    asc_entry = parsed[ASCENDANT]
    ascendant = AscendantPosition.from_longitude(asc_entry.full_degree)
    _check_sign(ASCENDANT, asc_entry.sign, ascendant.sign)

    planets = []
    for name in PLANETS:
        entry = parsed[name]
        pos = PlanetPosition.from_longitude(name, entry.full_degree, is_retrograde=entry.is_retro)
        _check_sign(name, entry.sign, pos.sign)
        derived_house = house_number(pos.sign_index, ascendant.sign_index)
        if entry.house is not None and entry.house != derived_house:
            logger.warning("%s: supplied house %s disagrees with degree (house %s); using degree",
                           name, entry.house, derived_house)
        planets.append(pos)

    logger.debug("Accepted external positions, lagna %s", ascendant.sign)
    return ascendant, planets
