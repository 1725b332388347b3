from datetime import date, datetime, time, timezone
from types import SimpleNamespace

import pytest

from jyotish_engine.core.ephemeris import AscendantPosition, BirthInput, PlanetPosition
from jyotish_engine.core.houses import organize_houses


# Kolkata, 1997-02-08 07:47 IST
KOLKATA_BIRTH = BirthInput(
    date=date(1997, 2, 8), time=time(7, 47), utc_offset=5.5,
    latitude=22.5726, longitude=88.3639,
)
KOLKATA_UTC = datetime(1997, 2, 8, 2, 17, tzinfo=timezone.utc)

# Provider payload for the same birth (Moon in Dhanishtha, Mars nakshatra lord)
EXTERNAL_PAYLOAD = [
    {"id": 0, "name": "Ascendant", "fullDegree": 290.5, "normDegree": 20.5,
     "speed": 0, "isRetro": "false", "sign": "Capricorn", "house": 1},
    {"id": 1, "name": "Sun", "fullDegree": 295.0, "isRetro": "false",
     "sign": "Capricorn", "house": 1},
    {"id": 2, "name": "Moon", "fullDegree": 302.383333, "isRetro": "false",
     "sign": "Aquarius", "nakshatra": "Dhanishtha", "nakshatra_pad": 3, "house": 2},
    {"id": 3, "name": "Mercury", "fullDegree": 280.2, "isRetro": "false",
     "sign": "Capricorn", "house": 1},
    {"id": 4, "name": "Venus", "fullDegree": 270.1, "isRetro": False,
     "sign": "Capricorn", "house": 1},
    {"id": 5, "name": "Mars", "fullDegree": 170.4, "isRetro": "true",
     "sign": "Virgo", "house": 9},
    {"id": 6, "name": "Jupiter", "fullDegree": 275.6, "isRetro": "false",
     "sign": "Capricorn", "house": 1},
    {"id": 7, "name": "Saturn", "fullDegree": 335.9, "isRetro": "false",
     "sign": "Pisces", "house": 3},
    {"id": 8, "name": "Rahu", "fullDegree": 160.7, "isRetro": "true",
     "sign": "Virgo", "house": 9},
    {"id": 9, "name": "Ketu", "fullDegree": 340.7, "isRetro": "true",
     "sign": "Pisces", "house": 3},
]


def build_chart(asc_lon: float, longitudes: dict):
    """Minimal chart object (ascendant / planets / houses) from raw longitudes."""
    asc = AscendantPosition.from_longitude(asc_lon)
    planets = [PlanetPosition.from_longitude(name, lon) for name, lon in longitudes.items()]
    placed, houses = organize_houses(planets, asc)
    return SimpleNamespace(ascendant=asc, planets=tuple(placed), houses=houses)


@pytest.fixture
def chart_factory():
    return build_chart


@pytest.fixture
def kolkata_birth():
    return KOLKATA_BIRTH


@pytest.fixture
def external_payload():
    return [dict(entry) for entry in EXTERNAL_PAYLOAD]
