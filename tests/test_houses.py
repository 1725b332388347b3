import pytest

from jyotish_engine.core.ephemeris import SIGNS, AscendantPosition, PlanetPosition
from jyotish_engine.core.houses import house_number, organize_houses, whole_sign_cusps


@pytest.mark.parametrize("planet_sign,lagna_sign,expected", [
    (0, 0, 1), (11, 0, 12), (0, 11, 2), (4, 4, 1), (3, 4, 12), (10, 4, 7),
])
def test_house_number(planet_sign, lagna_sign, expected):
    assert house_number(planet_sign, lagna_sign) == expected


def test_whole_sign_cusps():
    cusps = whole_sign_cusps(135.7)          # Leo rising
    assert cusps[0] == 120.0
    assert cusps[1] == 150.0
    assert cusps[11] == 90.0
    assert len(cusps) == 12


LONGITUDES = {
    "Sun": 295.0, "Moon": 302.4, "Mercury": 280.2, "Venus": 270.1, "Mars": 170.4,
    "Jupiter": 275.6, "Saturn": 335.9, "Rahu": 160.7, "Ketu": 340.7,
}


def _organized(asc_lon):
    asc = AscendantPosition.from_longitude(asc_lon)
    planets = [PlanetPosition.from_longitude(n, lon) for n, lon in LONGITUDES.items()]
    return asc, planets, organize_houses(planets, asc)


def test_all_twelve_houses_seeded_with_rotated_signs():
    asc, _, (_, houses) = _organized(135.7)
    assert sorted(houses) == list(range(1, 13))
    for h, slot in houses.items():
        assert slot.number == h
        assert slot.sign == SIGNS[(asc.sign_index + h - 1) % 12]
        assert slot.start_longitude == (120.0 + 30 * (h - 1)) % 360
    assert houses[1].sign == "Leo"
    assert houses[12].sign == "Cancer"


def test_houses_partition_planets():
    _, planets, (placed, houses) = _organized(135.7)
    assert len(placed) == len(planets)
    assert sum(len(slot.planets) for slot in houses.values()) == len(planets)
    for p in placed:
        assert p in houses[p.house].planets


def test_house_assignment_and_order():
    _, _, (placed, houses) = _organized(290.5)     # Capricorn rising
    by_name = {p.name: p.house for p in placed}
    assert by_name == {
        "Sun": 1, "Moon": 2, "Mercury": 1, "Venus": 1, "Mars": 9,
        "Jupiter": 1, "Saturn": 3, "Rahu": 9, "Ketu": 3,
    }
    # input order kept inside a slot
    assert [p.name for p in houses[1].planets] == ["Sun", "Mercury", "Venus", "Jupiter"]
    assert houses[4].planets == ()


def test_organize_does_not_touch_inputs():
    _, planets, _ = _organized(10.0)
    assert all(p.house is None for p in planets)
