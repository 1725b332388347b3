"""
test_yogas.py
=============
Yoga predicates over hand-built whole-sign charts.  Nearly every chart
below uses an Aries or Taurus lagna so house numbers can be read straight
off the signs.
"""

import pytest

from jyotish_engine.core.divisional_charts import compute_divisional_chart
from jyotish_engine.core.yogas import (
    CHANDRA, MODERATE, NABHASA, STRONG, WEAK, YOGA_RULES, ChartView,
    classify_yogas, house_offset, shakata_yoga, summarize_yogas,
)

# Aries lagna; Mars, Jupiter, Saturn exalted in quadrants
CHART_A = (10.0, {
    "Sun": 100.0, "Moon": 190.0, "Mercury": 110.0, "Venus": 355.0, "Mars": 280.0,
    "Jupiter": 95.0, "Saturn": 200.0, "Rahu": 20.0, "Ketu": 200.0,
})

# Everything in fixed signs
CHART_FIXED = (15.0, {
    "Sun": 40.0, "Moon": 50.0, "Mercury": 130.0, "Venus": 220.0, "Mars": 310.0,
    "Jupiter": 140.0, "Saturn": 320.0, "Rahu": 45.0, "Ketu": 225.0,
})

# Isolated Moon in the 2nd, Jupiter 8th from it
CHART_B = (5.0, {
    "Sun": 70.0, "Moon": 40.0, "Mercury": 130.0, "Venus": 135.0, "Mars": 220.0,
    "Jupiter": 250.0, "Saturn": 310.0, "Rahu": 160.0, "Ketu": 340.0,
})

# 6th and 8th lords in dusthanas, 4th and 9th lords together in the lagna
CHART_D = (5.0, {
    "Sun": 70.0, "Moon": 10.0, "Mercury": 220.0, "Venus": 100.0, "Mars": 350.0,
    "Jupiter": 15.0, "Saturn": 190.0, "Rahu": 130.0, "Ketu": 310.0,
})

# Every planet between Rahu and Ketu
CHART_E = (5.0, {
    "Sun": 120.0, "Moon": 150.0, "Mercury": 130.0, "Venus": 160.0, "Mars": 200.0,
    "Jupiter": 240.0, "Saturn": 260.0, "Rahu": 100.0, "Ketu": 280.0,
})

ALL_CHARTS = [CHART_A, CHART_FIXED, CHART_B, CHART_D, CHART_E]


def _names(chart):
    return {f.name for f in classify_yogas(chart)}


def _find(chart, name):
    return next(f for f in classify_yogas(chart) if f.name == name)


@pytest.mark.parametrize("house,offset,expected", [
    (1, 1, 1), (1, 2, 2), (12, 2, 1), (1, 12, 12), (5, 7, 11), (10, 4, 1),
])
def test_house_offset_is_inclusive(house, offset, expected):
    assert house_offset(house, offset) == expected


def test_registry_shape():
    assert len(YOGA_RULES) == 40
    assert len({rule.__name__ for rule in YOGA_RULES}) == 40


def test_chart_a(chart_factory):
    names = _names(chart_factory(*CHART_A))
    for expected in ("Budha-Aditya Yoga", "Ruchaka Yoga", "Hamsa Yoga", "Sasa Yoga",
                     "Gaja-Kesari Yoga", "Chatussagara Yoga", "Guru-Mangala Yoga"):
        assert expected in names
    # Venus exalted but in the 12th, Mercury not in its own sign
    for absent in ("Malavya Yoga", "Bhadra Yoga", "Kemadruma Yoga", "Kamala Yoga",
                   "Vesi Yoga", "Sunapha Yoga", "Musala Yoga"):
        assert absent not in names


def test_mahapurusha_records_house(chart_factory):
    ruchaka = _find(chart_factory(*CHART_A), "Ruchaka Yoga")
    assert ruchaka.planets == ("Mars",)
    assert ruchaka.houses == (10,)
    assert ruchaka.strength == STRONG


def test_sign_distribution(chart_factory):
    names = _names(chart_factory(*CHART_FIXED))
    assert "Musala Yoga" in names
    assert not names & {"Rajju Yoga", "Nala Yoga", "Kamala Yoga"}
    musala = _find(chart_factory(*CHART_FIXED), "Musala Yoga")
    assert musala.category == NABHASA
    assert len(musala.planets) == 9


def test_kemadruma_and_shakata(chart_factory):
    findings = {f.name: f for f in classify_yogas(chart_factory(*CHART_B))}
    assert "Kemadruma Yoga" in findings
    shakata = findings["Shakata Yoga"]
    assert shakata.strength == WEAK
    assert shakata.category == CHANDRA
    assert shakata.houses == (9,)


def test_shakata_cancelled_by_moon_in_quadrant(chart_factory):
    chart = chart_factory(5.0, {"Moon": 10.0, "Jupiter": 160.0})
    finding = shakata_yoga(ChartView(chart))
    assert finding is not None
    assert finding.is_applicable is False
    assert "Cancelled" in finding.notes
    assert "Shakata Yoga" not in _names(chart)


def test_viparita_and_raja(chart_factory):
    names = _names(chart_factory(*CHART_D))
    assert {"Harsha Yoga", "Sarala Yoga", "Raja Yoga"} <= names
    assert "Vimala Yoga" not in names            # Jupiter rules the 12th, sits in the 1st

    raja = _find(chart_factory(*CHART_D), "Raja Yoga")
    assert {"Moon", "Jupiter"} <= set(raja.planets)
    assert "H1" in raja.notes
    harsha = _find(chart_factory(*CHART_D), "Harsha Yoga")
    assert harsha.planets == ("Mercury",)
    assert harsha.houses == (6, 8)


def test_kala_sarpa(chart_factory):
    finding = _find(chart_factory(*CHART_E), "Kala Sarpa Yoga")
    assert finding.notes == "Planets hemmed from Rahu towards Ketu."
    assert finding.planets == ("Rahu", "Ketu")


def test_kala_sarpa_other_arc(chart_factory):
    asc, lons = CHART_E
    flipped = dict(lons, Rahu=280.0, Ketu=100.0)
    finding = _find(chart_factory(asc, flipped), "Kala Sarpa Yoga")
    assert finding.notes == "Planets hemmed from Ketu towards Rahu."


def test_kala_sarpa_broken_by_one_planet(chart_factory):
    asc, lons = CHART_E
    broken = dict(lons, Saturn=300.0)
    assert "Kala Sarpa Yoga" not in _names(chart_factory(asc, broken))


def test_lagna_specific_dhana(chart_factory):
    chart = chart_factory(45.0, {"Mercury": 160.0, "Sun": 10.0})
    finding = _find(chart, "Dhana Yoga (Taurus Lagna)")
    assert finding.planets == ("Mercury",)
    assert finding.houses == (5,)


def test_empty_chart_yields_nothing(chart_factory):
    assert classify_yogas(chart_factory(0.0, {})) == []


def test_strength_tiers_and_applicability(chart_factory):
    for layout in ALL_CHARTS:
        for f in classify_yogas(chart_factory(*layout)):
            assert f.strength in (STRONG, MODERATE, WEAK)
            assert f.is_applicable is True
            assert f.name and f.definition and f.results
            assert 0 not in f.houses


def test_classification_is_repeatable(chart_factory):
    chart = chart_factory(*CHART_A)
    assert classify_yogas(chart) == classify_yogas(chart)


def test_works_on_divisional_chart(chart_factory):
    natal = chart_factory(*CHART_A)
    navamsa = compute_divisional_chart(natal.planets, natal.ascendant, "D9")
    findings = classify_yogas(navamsa)
    assert all(f.strength in (STRONG, MODERATE, WEAK) for f in findings)


def test_summary_counts(chart_factory):
    findings = classify_yogas(chart_factory(*CHART_B))
    summary = summarize_yogas(findings)
    assert summary["total"] == len(findings)
    assert sum(summary["by_category"].values()) == len(findings)
    assert "Shakata Yoga" not in summary["strong"]
    assert "Kemadruma Yoga" in summary["strong"]
    assert summarize_yogas([]) == {"total": 0, "by_category": {}, "strong": []}


# ---------------------------------------------------------------------------
# One chart per rule: (yoga, chart where it fires, closest chart where it must not)
# Aries lagna unless stated; a planet at sign·30 + 10 sits in house sign + 1.
# ---------------------------------------------------------------------------

RULE_VECTORS = [
    ("Vesi Yoga",
     (5.0, {"Sun": 130.0, "Mars": 160.0}),
     (5.0, {"Sun": 130.0, "Moon": 160.0})),                      # Moon does not count
    ("Vosi Yoga",
     (5.0, {"Sun": 130.0, "Mars": 100.0}),
     (5.0, {"Sun": 130.0, "Moon": 100.0})),
    ("Ubhayachari Yoga",
     (5.0, {"Sun": 130.0, "Mars": 160.0, "Saturn": 100.0}),
     (5.0, {"Sun": 130.0, "Mars": 160.0})),                      # 12th from the Sun empty
    ("Sunapha Yoga",
     (5.0, {"Moon": 100.0, "Mars": 130.0}),
     (5.0, {"Moon": 100.0, "Sun": 130.0})),                      # Sun does not count
    ("Anapha Yoga",
     (5.0, {"Moon": 100.0, "Mars": 70.0}),
     (5.0, {"Moon": 100.0, "Sun": 70.0})),
    ("Durudhara Yoga",
     (5.0, {"Moon": 100.0, "Mars": 130.0, "Saturn": 70.0}),
     (5.0, {"Moon": 100.0, "Mars": 130.0, "Sun": 70.0})),
    ("Chandra-Mangala Yoga",
     (5.0, {"Moon": 100.0, "Mars": 105.0}),
     (5.0, {"Moon": 100.0, "Mars": 130.0})),
    ("Adhi Yoga",
     (5.0, {"Moon": 10.0, "Mercury": 160.0, "Venus": 190.0, "Jupiter": 220.0}),
     (5.0, {"Moon": 10.0, "Mercury": 160.0, "Venus": 190.0, "Jupiter": 250.0})),
    ("Bhadra Yoga",                                               # Gemini lagna
     (65.0, {"Mercury": 70.0}),
     (5.0, {"Mercury": 70.0})),                                  # own sign, 3rd house
    ("Malavya Yoga",
     (5.0, {"Venus": 190.0}),
     (5.0, {"Venus": 355.0})),                                   # exalted, 12th house
    ("Dharma-Karmadhipati Yoga",
     (5.0, {"Jupiter": 100.0, "Saturn": 105.0}),
     (5.0, {"Jupiter": 100.0, "Saturn": 130.0})),
    ("Amala Yoga",
     (5.0, {"Jupiter": 280.0}),
     (5.0, {"Jupiter": 280.0, "Saturn": 285.0})),
    ("Saraswati Yoga",
     (5.0, {"Jupiter": 10.0, "Venus": 40.0, "Mercury": 100.0}),
     (5.0, {"Jupiter": 10.0, "Venus": 40.0, "Mercury": 70.0})),
    ("Parvata Yoga",
     (5.0, {"Jupiter": 10.0}),
     (5.0, {"Jupiter": 10.0, "Saturn": 160.0})),                 # malefic in the 6th
    ("Kahala Yoga",
     (5.0, {"Moon": 10.0, "Jupiter": 100.0, "Mars": 15.0}),
     (5.0, {"Moon": 10.0, "Jupiter": 100.0, "Mars": 160.0})),    # lagna lord weak
    ("Neecha Bhanga Raja Yoga",
     (5.0, {"Jupiter": 280.0, "Saturn": 190.0}),
     (5.0, {"Jupiter": 280.0, "Saturn": 310.0})),                # dispositor in the 11th
    ("Shubha Kartari Yoga",
     (5.0, {"Venus": 40.0, "Jupiter": 340.0}),
     (5.0, {"Venus": 40.0, "Jupiter": 340.0, "Saturn": 45.0})),
    ("Papa Kartari Yoga",
     (5.0, {"Saturn": 40.0, "Mars": 340.0}),
     (5.0, {"Saturn": 40.0, "Mars": 340.0, "Jupiter": 45.0})),
    ("Rajju Yoga",
     (5.0, {"Sun": 10.0, "Moon": 100.0, "Mars": 280.0, "Mercury": 15.0, "Jupiter": 100.0,
            "Venus": 190.0, "Saturn": 190.0, "Rahu": 10.0, "Ketu": 190.0}),
     (5.0, {"Sun": 10.0, "Moon": 100.0, "Mars": 280.0, "Mercury": 15.0, "Jupiter": 100.0,
            "Venus": 190.0, "Saturn": 130.0, "Rahu": 10.0, "Ketu": 190.0})),
    ("Nala Yoga",
     (5.0, {"Sun": 70.0, "Moon": 160.0, "Mars": 250.0, "Mercury": 160.0, "Jupiter": 250.0,
            "Venus": 340.0, "Saturn": 70.0, "Rahu": 65.0, "Ketu": 245.0}),
     (5.0, {"Sun": 70.0, "Moon": 100.0, "Mars": 250.0, "Mercury": 160.0, "Jupiter": 250.0,
            "Venus": 340.0, "Saturn": 70.0, "Rahu": 65.0, "Ketu": 245.0})),
    ("Kamala Yoga",                                               # Taurus lagna
     (45.0, CHART_FIXED[1]),
     CHART_FIXED),
    ("Dhana Yoga (2L+11L)",
     (5.0, {"Venus": 190.0, "Saturn": 195.0}),
     (5.0, {"Venus": 190.0, "Saturn": 220.0})),
    ("Lakshmi Yoga",
     (5.0, {"Sun": 100.0, "Jupiter": 105.0}),
     (5.0, {"Sun": 100.0, "Jupiter": 130.0})),
    ("Vasumati Yoga",
     (5.0, {"Mercury": 70.0}),
     (5.0, {"Mercury": 70.0, "Mars": 75.0})),
    ("Vimala Yoga",
     (5.0, {"Jupiter": 160.0}),
     (5.0, {"Jupiter": 10.0})),
]


@pytest.mark.parametrize("name,fires,misses", RULE_VECTORS, ids=[v[0] for v in RULE_VECTORS])
def test_rule_fires_only_when_its_condition_holds(chart_factory, name, fires, misses):
    assert name in _names(chart_factory(*fires))
    assert name not in _names(chart_factory(*misses))


def test_every_rule_has_a_firing_chart(chart_factory):
    layouts = ALL_CHARTS + [fires for _, fires, _ in RULE_VECTORS]
    layouts.append((45.0, {"Mercury": 160.0, "Sun": 10.0}))
    fired = set()
    for layout in layouts:
        view = ChartView(chart_factory(*layout))
        for rule in YOGA_RULES:
            finding = rule(view)
            if finding is not None and finding.is_applicable:
                fired.add(rule.__name__)
    assert fired == {rule.__name__ for rule in YOGA_RULES}


def test_dharma_karmadhipati_exchange(chart_factory):
    # 9th lord Jupiter in the 10th, 10th lord Saturn in the 9th
    finding = _find(chart_factory(5.0, {"Jupiter": 280.0, "Saturn": 250.0}),
                    "Dharma-Karmadhipati Yoga")
    assert finding.notes == "exchange"
    assert finding.planets == ("Jupiter", "Saturn")
    assert finding.houses == (10, 9)


def test_neecha_bhanga_names_the_dispositor(chart_factory):
    finding = _find(chart_factory(5.0, {"Jupiter": 280.0, "Saturn": 190.0}),
                    "Neecha Bhanga Raja Yoga")
    assert finding.planets == ("Jupiter", "Saturn")
    assert finding.notes == "Jupiter debilitated in Capricorn, cancelled by Saturn"
