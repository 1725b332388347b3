"""
yogas.py  --  Rule-based yoga (planetary combination) classifier
================================================================
Every yoga is one small predicate over a read-only chart view that returns a
YogaFinding or None.  The predicates are listed in YOGA_RULES and run
independently of one another; classify_yogas concatenates whatever fires.

Families:
  Ravi (solar), Chandra (lunar), Pancha-Mahapurusha, Raja (quadrant / trine
  associations), Naabhasa (sign distribution), Dhana (wealth),
  Viparita Raja (reversal).

House offsets are counted inclusively: the 1st house from a planet is the
house it occupies, the 2nd is the next one.

Any object exposing `ascendant` and `planets` (with `house` set) can be
classified, so divisional charts work as well as the natal chart.

Sources: BPHS, B.V. Raman "300 Important Combinations", P.V.R. Narasimha Rao
"Vedic Astrology: An Integrated Approach"
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .ephemeris import SIGNS

logger = logging.getLogger(__name__)

SIGN_LORDS = {
    "Aries":"Mars","Taurus":"Venus","Gemini":"Mercury","Cancer":"Moon",
    "Leo":"Sun","Virgo":"Mercury","Libra":"Venus","Scorpio":"Mars",
    "Sagittarius":"Jupiter","Capricorn":"Saturn","Aquarius":"Saturn","Pisces":"Jupiter",
}
OWN_SIGNS = {
    "Sun":["Leo"],"Moon":["Cancer"],"Mars":["Aries","Scorpio"],
    "Mercury":["Gemini","Virgo"],"Jupiter":["Sagittarius","Pisces"],
    "Venus":["Taurus","Libra"],"Saturn":["Capricorn","Aquarius"],
}
EXALTATION_SIGN = {
    "Sun":"Aries","Moon":"Taurus","Mars":"Capricorn","Mercury":"Virgo",
    "Jupiter":"Cancer","Venus":"Pisces","Saturn":"Libra","Rahu":"Taurus","Ketu":"Scorpio",
}
DEBILITATION_SIGN = {
    "Sun":"Libra","Moon":"Scorpio","Mars":"Cancer","Mercury":"Pisces",
    "Jupiter":"Capricorn","Venus":"Virgo","Saturn":"Aries","Rahu":"Scorpio","Ketu":"Taurus",
}
BENEFIC_PLANETS = {"Jupiter","Venus","Moon","Mercury"}
MALEFIC_PLANETS = {"Saturn","Mars","Sun","Rahu","Ketu"}
SEVEN_PLANETS = ["Sun","Moon","Mars","Mercury","Jupiter","Venus","Saturn"]

QUADRANTS  = (1, 4, 7, 10)
TRINES     = (1, 5, 9)
UPACHAYAS  = (3, 6, 10, 11)
DUSTHANAS  = (6, 8, 12)

MOVABLE_SIGNS = {"Aries","Cancer","Libra","Capricorn"}
FIXED_SIGNS   = {"Taurus","Leo","Scorpio","Aquarius"}
DUAL_SIGNS    = {"Gemini","Virgo","Sagittarius","Pisces"}

STRONG, MODERATE, WEAK = "Strong", "Moderate", "Weak"

RAVI        = "Ravi Yogas"
CHANDRA     = "Chandra Yogas"
MAHAPURUSHA = "Pancha Mahapurusha Yogas"
RAJA        = "Raja Yogas"
NABHASA     = "Naabhasa Yogas"
DHANA       = "Dhana Yogas"
VIPARITA    = "Viparita Raja Yogas"


@dataclass(frozen=True)
class YogaFinding:
    name:          str
    category:      str
    definition:    str
    results:       str
    strength:      str                  # Strong / Moderate / Weak
    planets:       Tuple[str, ...] = ()
    houses:        Tuple[int, ...] = ()
    notes:         str = ""
    is_applicable: bool = True


# ── Shared primitives ───────────────────────────────────────────────────────

def house_offset(house: int, offset: int) -> int:
    """The `offset`-th house counted from `house` (offset 1 = same house)."""
    return (house + offset - 2) % 12 + 1


def is_quadrant(house: int) -> bool: return house in QUADRANTS
def is_trine(house: int) -> bool: return house in TRINES
def is_upachaya(house: int) -> bool: return house in UPACHAYAS
def is_dusthana(house: int) -> bool: return house in DUSTHANAS

def is_own_sign(planet: str, sign: str) -> bool: return sign in OWN_SIGNS.get(planet, [])
def is_exalted(planet: str, sign: str) -> bool: return sign == EXALTATION_SIGN.get(planet)
def is_debilitated(planet: str, sign: str) -> bool: return sign == DEBILITATION_SIGN.get(planet)


class ChartView:
    """Read-only lookups over a chart's ascendant and placed planets."""

    def __init__(self, chart):
        self.ascendant = chart.ascendant
        self._planets = {p.name: p for p in chart.planets}

    @property
    def planets(self) -> list:
        return list(self._planets.values())

    def planet(self, name: str):
        return self._planets.get(name)

    def house_of(self, name: str) -> int:
        p = self._planets.get(name)
        return p.house if p is not None and p.house else 0

    def sign_of(self, name: str) -> str:
        p = self._planets.get(name)
        return p.sign if p is not None else ""

    def in_house(self, house: int, exclude: Iterable[str] = ()) -> List[str]:
        skip = set(exclude)
        return [p.name for p in self._planets.values()
                if p.house == house and p.name not in skip]

    def house_from(self, name: str, offset: int) -> int:
        h = self.house_of(name)
        return house_offset(h, offset) if h else 0

    def offset_between(self, origin: str, target: str) -> int:
        """Which house `target` occupies counted from `origin` (1–12, 0 if missing)."""
        o, t = self.house_of(origin), self.house_of(target)
        if not o or not t:
            return 0
        return (t - o) % 12 + 1

    def lord_of(self, house: int) -> str:
        return SIGN_LORDS[_sign_at(self.ascendant.sign_index, house)]

    def is_strong(self, name: str) -> bool:
        s = self.sign_of(name)
        return is_own_sign(name, s) or is_exalted(name, s)


def _sign_at(lagna_sign_index: int, house: int) -> str:
    return SIGNS[(lagna_sign_index + house - 1) % 12]


def _yoga(name: str, category: str, definition: str, results: str, strength: str,
          planets: Iterable[str] = (), houses: Iterable[int] = (),
          notes: str = "", is_applicable: bool = True) -> YogaFinding:
    return YogaFinding(
        name=name, category=category, definition=definition, results=results,
        strength=strength,
        planets=tuple(dict.fromkeys(planets)),
        houses=tuple(dict.fromkeys(h for h in houses if h)),
        notes=notes, is_applicable=is_applicable,
    )


# ── Ravi Yogas ──────────────────────────────────────────────────────────────

def vesi_yoga(v: ChartView) -> Optional[YogaFinding]:
    h2 = v.house_from("Sun", 2)
    occupants = v.in_house(h2, exclude=("Moon",))
    if not occupants:
        return None
    return _yoga("Vesi Yoga", RAVI,
                 "A planet other than the Moon in the 2nd house from the Sun.",
                 "Balanced outlook, truthful, tall, happy with modest wealth.",
                 MODERATE, ["Sun"] + occupants, [h2])


def vosi_yoga(v: ChartView) -> Optional[YogaFinding]:
    h12 = v.house_from("Sun", 12)
    occupants = v.in_house(h12, exclude=("Moon",))
    if not occupants:
        return None
    return _yoga("Vosi Yoga", RAVI,
                 "A planet other than the Moon in the 12th house from the Sun.",
                 "Skilful, charitable, famous, learned, strong.",
                 MODERATE, ["Sun"] + occupants, [h12])


def ubhayachari_yoga(v: ChartView) -> Optional[YogaFinding]:
    h2, h12 = v.house_from("Sun", 2), v.house_from("Sun", 12)
    second = v.in_house(h2, exclude=("Moon",))
    twelfth = v.in_house(h12, exclude=("Moon",))
    if not (second and twelfth):
        return None
    return _yoga("Ubhayachari Yoga", RAVI,
                 "Planets other than the Moon in both the 2nd and 12th houses from the Sun.",
                 "All comforts, royal or equal status.",
                 STRONG, ["Sun"] + second + twelfth, [h2, h12])


def budha_aditya_yoga(v: ChartView) -> Optional[YogaFinding]:
    h = v.house_of("Sun")
    if not h or v.house_of("Mercury") != h:
        return None
    return _yoga("Budha-Aditya Yoga", RAVI,
                 "Sun and Mercury together in one sign.",
                 "Sharp analytical mind, skilful, well known, respected.",
                 STRONG, ["Sun", "Mercury"], [h])


# ── Chandra Yogas ───────────────────────────────────────────────────────────

def sunapha_yoga(v: ChartView) -> Optional[YogaFinding]:
    h2 = v.house_from("Moon", 2)
    occupants = v.in_house(h2, exclude=("Sun",))
    if not occupants:
        return None
    return _yoga("Sunapha Yoga", CHANDRA,
                 "Planets other than the Sun in the 2nd house from the Moon.",
                 "Self-earned wealth, intelligence, fame, royal standing.",
                 STRONG, ["Moon"] + occupants, [h2])


def anapha_yoga(v: ChartView) -> Optional[YogaFinding]:
    h12 = v.house_from("Moon", 12)
    occupants = v.in_house(h12, exclude=("Sun",))
    if not occupants:
        return None
    return _yoga("Anapha Yoga", CHANDRA,
                 "Planets other than the Sun in the 12th house from the Moon.",
                 "Good looks, healthy body, fine character, surrounded by comforts.",
                 STRONG, ["Moon"] + occupants, [h12])


def durudhara_yoga(v: ChartView) -> Optional[YogaFinding]:
    h2, h12 = v.house_from("Moon", 2), v.house_from("Moon", 12)
    second = v.in_house(h2, exclude=("Sun",))
    twelfth = v.in_house(h12, exclude=("Sun",))
    if not (second and twelfth):
        return None
    return _yoga("Durudhara Yoga", CHANDRA,
                 "Planets other than the Sun in both the 2nd and 12th houses from the Moon.",
                 "Enjoys pleasures, charitable, owns wealth and vehicles.",
                 STRONG, ["Moon"] + second + twelfth, [h2, h12])


def kemadruma_yoga(v: ChartView) -> Optional[YogaFinding]:
    mh = v.house_of("Moon")
    if not mh:
        return None
    h2, h12 = house_offset(mh, 2), house_offset(mh, 12)
    if v.in_house(mh, exclude=("Moon", "Sun")):
        return None
    if v.in_house(h2, exclude=("Sun",)) or v.in_house(h12, exclude=("Sun",)):
        return None
    if any(v.in_house(h, exclude=("Moon",)) for h in QUADRANTS):
        return None
    return _yoga("Kemadruma Yoga", CHANDRA,
                 "No planet other than the Sun with the Moon or in the 2nd and 12th from it, "
                 "and no planet other than the Moon in a quadrant from the lagna.",
                 "Hardship, poverty and trouble; overrides the other lunar yogas.",
                 STRONG, ["Moon"], [mh, h2, h12])


def chandra_mangala_yoga(v: ChartView) -> Optional[YogaFinding]:
    h = v.house_of("Moon")
    if not h or v.house_of("Mars") != h:
        return None
    return _yoga("Chandra-Mangala Yoga", CHANDRA,
                 "Moon and Mars together in one sign.",
                 "Worldly wise and materially successful, sometimes by unscrupulous means.",
                 STRONG, ["Moon", "Mars"], [h])


def adhi_yoga(v: ChartView) -> Optional[YogaFinding]:
    if not v.house_of("Moon"):
        return None
    houses, benefics = [], []
    for offset in (6, 7, 8):
        h = v.house_from("Moon", offset)
        found = [p for p in v.in_house(h) if p in BENEFIC_PLANETS and p != "Moon"]
        if not found:
            return None
        houses.append(h)
        benefics.extend(found)
    return _yoga("Adhi Yoga", CHANDRA,
                 "Natural benefics in the 6th, 7th and 8th houses from the Moon.",
                 "Leader, minister or commander, according to the strength of the benefics.",
                 STRONG, ["Moon"] + benefics, houses)


def shakata_yoga(v: ChartView) -> Optional[YogaFinding]:
    offset = v.offset_between("Moon", "Jupiter")
    if offset not in (6, 8, 12):
        return None
    cancelled = is_quadrant(v.house_of("Moon"))
    return _yoga("Shakata Yoga", CHANDRA,
                 "Jupiter in the 6th, 8th or 12th house from the Moon.",
                 "Fortunes rise and fall like a cart wheel; loss and regain of wealth.",
                 WEAK, ["Moon", "Jupiter"], [v.house_of("Jupiter")],
                 notes="Cancelled: Moon in a quadrant from the lagna." if cancelled else "",
                 is_applicable=not cancelled)


def gaja_kesari_yoga(v: ChartView) -> Optional[YogaFinding]:
    offset = v.offset_between("Moon", "Jupiter")
    if offset not in QUADRANTS:
        return None
    if is_debilitated("Jupiter", v.sign_of("Jupiter")):
        return None
    return _yoga("Gaja-Kesari Yoga", CHANDRA,
                 "Jupiter in a quadrant from the Moon and not debilitated.",
                 "Famous, wealthy, intelligent, of fine character; commanding presence.",
                 STRONG, ["Jupiter", "Moon"], [v.house_of("Jupiter"), v.house_of("Moon")])


# ── Pancha Mahapurusha Yogas ────────────────────────────────────────────────

def _mahapurusha(v: ChartView, planet: str, name: str, results: str) -> Optional[YogaFinding]:
    h, s = v.house_of(planet), v.sign_of(planet)
    if not is_quadrant(h):
        return None
    if not (is_own_sign(planet, s) or is_exalted(planet, s)):
        return None
    signs = "/".join(OWN_SIGNS[planet] + [EXALTATION_SIGN[planet]])
    return _yoga(name, MAHAPURUSHA,
                 f"{planet} in a quadrant from the lagna in its own or exaltation sign ({signs}).",
                 results, STRONG, [planet], [h])


def ruchaka_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _mahapurusha(v, "Mars", "Ruchaka Yoga",
                        "Courageous, victorious natural leader; executive drive.")


def bhadra_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _mahapurusha(v, "Mercury", "Bhadra Yoga",
                        "Learned, eloquent, systematic; strong intellect and good build.")


def hamsa_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _mahapurusha(v, "Jupiter", "Hamsa Yoga",
                        "Wisdom, respect, spiritual strength; righteous and kingly.")


def malavya_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _mahapurusha(v, "Venus", "Malavya Yoga",
                        "Refined tastes, luxuries, good health; accomplished in the arts.")


def sasa_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _mahapurusha(v, "Saturn", "Sasa Yoga",
                        "Discipline, administrative mastery, authority over many people.")


# ── Raja Yogas ──────────────────────────────────────────────────────────────

def basic_raja_yoga(v: ChartView) -> Optional[YogaFinding]:
    planets, houses, pairs = [], [], []
    for q in QUADRANTS:
        for t in TRINES:
            if q == t:
                continue
            kl, tl = v.lord_of(q), v.lord_of(t)
            if kl == tl:
                continue
            h = v.house_of(kl)
            if h and h == v.house_of(tl):
                pairs.append(f"{kl} (L{q}) + {tl} (L{t}) in H{h}")
                planets += [kl, tl]
                houses.append(h)
    if not pairs:
        return None
    return _yoga("Raja Yoga", RAJA,
                 "Lord of a quadrant conjunct the lord of a trine.",
                 "Power, prosperity, authority and public recognition.",
                 STRONG, planets, houses, notes="; ".join(dict.fromkeys(pairs)))


def dharma_karmadhipati_yoga(v: ChartView) -> Optional[YogaFinding]:
    l9, l10 = v.lord_of(9), v.lord_of(10)
    if l9 == l10:
        return None
    h9, h10 = v.house_of(l9), v.house_of(l10)
    conjunct = h9 and h9 == h10
    exchange = h9 == 10 and h10 == 9
    if not (conjunct or exchange):
        return None
    return _yoga("Dharma-Karmadhipati Yoga", RAJA,
                 "Lords of the 9th and 10th houses conjunct or in exchange.",
                 "Righteous career, high office, work aligned with purpose.",
                 STRONG, [l9, l10], [h9, h10],
                 notes="exchange" if exchange else "conjunction")


def guru_mangala_yoga(v: ChartView) -> Optional[YogaFinding]:
    jh, mh = v.house_of("Jupiter"), v.house_of("Mars")
    if not jh or not mh or (jh - mh) % 12 not in (0, 6):
        return None
    return _yoga("Guru-Mangala Yoga", RAJA,
                 "Jupiter and Mars together or in the 7th from each other.",
                 "Righteous and energetic; drive channelled into dharmic paths.",
                 STRONG, ["Jupiter", "Mars"], [jh, mh])


def amala_yoga(v: ChartView) -> Optional[YogaFinding]:
    occupants = v.in_house(10)
    benefics = [p for p in occupants if p in BENEFIC_PLANETS]
    if not benefics or any(p in MALEFIC_PLANETS for p in occupants):
        return None
    return _yoga("Amala Yoga", RAJA,
                 "Only natural benefics in the 10th house from the lagna.",
                 "Lasting fame, virtuous conduct, respected by those in power.",
                 STRONG, benefics, [10])


SARASWATI_HOUSES = (1, 2, 4, 5, 7, 9, 10)


def saraswati_yoga(v: ChartView) -> Optional[YogaFinding]:
    trio = ("Jupiter", "Venus", "Mercury")
    houses = [v.house_of(p) for p in trio]
    if not all(h in SARASWATI_HOUSES for h in houses):
        return None
    if is_debilitated("Jupiter", v.sign_of("Jupiter")):
        return None
    return _yoga("Saraswati Yoga", RAJA,
                 "Jupiter, Venus and Mercury in quadrants, trines or the 2nd house, "
                 "Jupiter not debilitated.",
                 "Learning, eloquence, poetic and artistic skill; widely praised.",
                 STRONG, trio, houses)


def parvata_yoga(v: ChartView) -> Optional[YogaFinding]:
    in_quadrants = [p for h in QUADRANTS for p in v.in_house(h) if p in BENEFIC_PLANETS]
    if not in_quadrants:
        return None
    if any(p in MALEFIC_PLANETS for h in (6, 8) for p in v.in_house(h)):
        return None
    return _yoga("Parvata Yoga", RAJA,
                 "Benefics in quadrants with the 6th and 8th houses free of malefics.",
                 "Prosperous, charitable, eloquent; leader of a town or group.",
                 MODERATE, in_quadrants, [v.house_of(p) for p in in_quadrants])


def kahala_yoga(v: ChartView) -> Optional[YogaFinding]:
    l4, l9, l1 = v.lord_of(4), v.lord_of(9), v.lord_of(1)
    h4, h9 = v.house_of(l4), v.house_of(l9)
    if not h4 or not h9 or (h4 - h9) % 12 not in (0, 3, 6, 9):
        return None
    if not v.is_strong(l1):
        return None
    return _yoga("Kahala Yoga", RAJA,
                 "Lords of the 4th and 9th in mutual quadrants with a strong lagna lord.",
                 "Bold, stubborn, heads an army or organisation.",
                 MODERATE, [l4, l9, l1], [h4, h9])


def chatussagara_yoga(v: ChartView) -> Optional[YogaFinding]:
    if not all(v.in_house(h) for h in QUADRANTS):
        return None
    planets = [p for h in QUADRANTS for p in v.in_house(h)]
    return _yoga("Chatussagara Yoga", RAJA,
                 "All four quadrants occupied.",
                 "Renown reaching the four oceans; wealth and good reputation.",
                 MODERATE, planets, QUADRANTS)


def neecha_bhanga_yoga(v: ChartView) -> Optional[YogaFinding]:
    planets, houses, notes = [], [], []
    for p in SEVEN_PLANETS:
        s = v.sign_of(p)
        if not is_debilitated(p, s):
            continue
        dispositor = SIGN_LORDS[s]
        if is_quadrant(v.house_of(dispositor)) and v.is_strong(dispositor):
            planets += [p, dispositor]
            houses += [v.house_of(p), v.house_of(dispositor)]
            notes.append(f"{p} debilitated in {s}, cancelled by {dispositor}")
    if not notes:
        return None
    return _yoga("Neecha Bhanga Raja Yoga", RAJA,
                 "Debilitated planet whose sign lord is strong in a quadrant.",
                 "Debilitation cancelled; the planet delivers after initial struggle.",
                 MODERATE, planets, houses, notes="; ".join(notes))


def _hemmed(v: ChartView, group: set, opposite: set) -> Tuple[List[str], List[str]]:
    second, twelfth = v.in_house(2), v.in_house(12)
    if any(p in opposite for p in second + twelfth):
        return [], []
    return [p for p in second if p in group], [p for p in twelfth if p in group]


def shubha_kartari_yoga(v: ChartView) -> Optional[YogaFinding]:
    second, twelfth = _hemmed(v, BENEFIC_PLANETS, MALEFIC_PLANETS)
    if not (second and twelfth):
        return None
    return _yoga("Shubha Kartari Yoga", RAJA,
                 "Benefics in both the 2nd and 12th houses, hemming the lagna.",
                 "Protected, healthy and prosperous; obstacles dissolve.",
                 STRONG, second + twelfth, [2, 12])


def papa_kartari_yoga(v: ChartView) -> Optional[YogaFinding]:
    second, twelfth = _hemmed(v, MALEFIC_PLANETS, BENEFIC_PLANETS)
    if not (second and twelfth):
        return None
    return _yoga("Papa Kartari Yoga", RAJA,
                 "Malefics in both the 2nd and 12th houses, hemming the lagna.",
                 "Pressure and restriction on health and self-expression.",
                 WEAK, second + twelfth, [2, 12])


# ── Naabhasa Yogas ──────────────────────────────────────────────────────────

def _sign_distribution(v: ChartView, signs: set) -> bool:
    planets = v.planets
    return len(planets) >= 7 and all(p.sign in signs for p in planets)


def rajju_yoga(v: ChartView) -> Optional[YogaFinding]:
    if not _sign_distribution(v, MOVABLE_SIGNS):
        return None
    return _yoga("Rajju Yoga", NABHASA, "All planets in movable signs.",
                 "Fond of travel, good looks, flourishes abroad.",
                 STRONG, [p.name for p in v.planets])


def musala_yoga(v: ChartView) -> Optional[YogaFinding]:
    if not _sign_distribution(v, FIXED_SIGNS):
        return None
    return _yoga("Musala Yoga", NABHASA, "All planets in fixed signs.",
                 "Honour, wisdom, wealth, firm spirit; famous.",
                 STRONG, [p.name for p in v.planets])


def nala_yoga(v: ChartView) -> Optional[YogaFinding]:
    if not _sign_distribution(v, DUAL_SIGNS):
        return None
    return _yoga("Nala Yoga", NABHASA, "All planets in dual signs.",
                 "Accumulates money, skilful, helps relatives.",
                 STRONG, [p.name for p in v.planets])


def kamala_yoga(v: ChartView) -> Optional[YogaFinding]:
    planets = v.planets
    if len(planets) < 7 or not all(is_quadrant(p.house) for p in planets):
        return None
    return _yoga("Kamala Yoga", NABHASA, "All planets in quadrants from the lagna.",
                 "Strong character, famous, long-lived, performs good deeds.",
                 STRONG, [p.name for p in planets], sorted({p.house for p in planets}))


def kala_sarpa_yoga(v: ChartView) -> Optional[YogaFinding]:
    rahu = v.planet("Rahu")
    if rahu is None or v.planet("Ketu") is None:
        return None
    others = [v.planet(p) for p in SEVEN_PLANETS if v.planet(p) is not None]
    if not others:
        return None
    arcs = [(p.longitude - rahu.longitude) % 360.0 for p in others]
    if all(a < 180.0 for a in arcs):
        side = "from Rahu towards Ketu"
    elif all(a > 180.0 for a in arcs):
        side = "from Ketu towards Rahu"
    else:
        return None
    return _yoga("Kala Sarpa Yoga", NABHASA,
                 "All seven planets on one side of the Rahu-Ketu axis.",
                 "Intense karma and an unusual destiny; life alternates between peaks and valleys.",
                 STRONG, ["Rahu", "Ketu"], [v.house_of("Rahu"), v.house_of("Ketu")],
                 notes=f"Planets hemmed {side}.")


# ── Dhana Yogas ─────────────────────────────────────────────────────────────

def dhana_yoga(v: ChartView) -> Optional[YogaFinding]:
    l2, l11 = v.lord_of(2), v.lord_of(11)
    h = v.house_of(l2)
    if not h or h != v.house_of(l11):
        return None
    return _yoga("Dhana Yoga (2L+11L)", DHANA,
                 "Lords of the 2nd and 11th houses conjunct.",
                 "Accumulation of wealth and steady growth of income.",
                 STRONG, [l2, l11], [h])


def lakshmi_yoga(v: ChartView) -> Optional[YogaFinding]:
    l5, l9 = v.lord_of(5), v.lord_of(9)
    h = v.house_of(l5)
    if l5 == l9 or not h or h != v.house_of(l9):
        return None
    return _yoga("Lakshmi Yoga", DHANA,
                 "Lords of the 5th and 9th houses conjunct.",
                 "Fortune, wisdom and divine blessings; exceptional prosperity.",
                 STRONG, [l5, l9], [h])


# lagna sign: (every placement required, at least one of these if any)
LAGNA_DHANA = {
    "Aries":  ((("Sun", 5),), (("Saturn", 11), ("Moon", 11), ("Jupiter", 11))),
    "Taurus": ((("Mercury", 5),), ()),
    "Gemini": ((("Venus", 5), ("Mars", 11)), ()),
    "Cancer": ((("Mars", 5), ("Venus", 11)), ()),
    "Leo":    ((("Jupiter", 5), ("Mercury", 11)), ()),
}


def lagna_dhana_yoga(v: ChartView) -> Optional[YogaFinding]:
    lagna = v.ascendant.sign
    if lagna not in LAGNA_DHANA:
        return None
    required, any_of = LAGNA_DHANA[lagna]
    if not all(v.house_of(p) == h for p, h in required):
        return None
    hits = [(p, h) for p, h in any_of if v.house_of(p) == h]
    if any_of and not hits:
        return None
    placements = list(required) + hits
    return _yoga(f"Dhana Yoga ({lagna} Lagna)", DHANA,
                 f"Wealth-giving placements specific to {lagna} lagna.",
                 "Very affluent.",
                 STRONG, [p for p, _ in placements], [h for _, h in placements])


def vasumati_yoga(v: ChartView) -> Optional[YogaFinding]:
    occupants = [p for h in UPACHAYAS for p in v.in_house(h)]
    benefics = [p for p in occupants if p in BENEFIC_PLANETS]
    if not benefics or any(p in MALEFIC_PLANETS for p in occupants):
        return None
    return _yoga("Vasumati Yoga", DHANA,
                 "Benefics in the upachaya houses (3, 6, 10, 11) and no malefics there.",
                 "Abundant wealth.",
                 STRONG, benefics, [v.house_of(p) for p in benefics])


# ── Viparita Raja Yogas ─────────────────────────────────────────────────────

def _viparita(v: ChartView, house: int, name: str, results: str) -> Optional[YogaFinding]:
    lord = v.lord_of(house)
    h = v.house_of(lord)
    if not is_dusthana(h):
        return None
    return _yoga(name, VIPARITA,
                 f"Lord of the {house}th house placed in a dusthana (6, 8 or 12).",
                 results, STRONG, [lord], [house, h])


def harsha_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _viparita(v, 6, "Harsha Yoga",
                     "Victory over enemies, good health, happiness after struggle.")


def sarala_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _viparita(v, 8, "Sarala Yoga",
                     "Long life, fearlessness, prosperity through adversity.")


def vimala_yoga(v: ChartView) -> Optional[YogaFinding]:
    return _viparita(v, 12, "Vimala Yoga",
                     "Frugal, independent, good conduct; gains from reduced expenses.")


# ── Registry ────────────────────────────────────────────────────────────────

YogaRule = Callable[[ChartView], Optional[YogaFinding]]

YOGA_RULES: Tuple[YogaRule, ...] = (
    # Ravi
    vesi_yoga, vosi_yoga, ubhayachari_yoga, budha_aditya_yoga,
    # Chandra
    sunapha_yoga, anapha_yoga, durudhara_yoga, kemadruma_yoga,
    chandra_mangala_yoga, adhi_yoga, shakata_yoga, gaja_kesari_yoga,
    # Pancha Mahapurusha
    ruchaka_yoga, bhadra_yoga, hamsa_yoga, malavya_yoga, sasa_yoga,
    # Raja
    basic_raja_yoga, dharma_karmadhipati_yoga, guru_mangala_yoga, amala_yoga,
    saraswati_yoga, parvata_yoga, kahala_yoga, chatussagara_yoga,
    neecha_bhanga_yoga, shubha_kartari_yoga, papa_kartari_yoga,
    # Naabhasa
    rajju_yoga, musala_yoga, nala_yoga, kamala_yoga, kala_sarpa_yoga,
    # Dhana
    dhana_yoga, lakshmi_yoga, lagna_dhana_yoga, vasumati_yoga,
    # Viparita
    harsha_yoga, sarala_yoga, vimala_yoga,
)


def classify_yogas(chart, rules: Sequence[YogaRule] = YOGA_RULES) -> List[YogaFinding]:
    """
    Run every rule against the chart and return the applicable findings,
    in registry order.
    """
    view = ChartView(chart)
    findings = []
    for rule in rules:
        finding = rule(view)
        if finding is not None and finding.is_applicable:
            findings.append(finding)
    logger.debug("%d of %d yoga rules matched", len(findings), len(rules))
    return findings


def summarize_yogas(findings: Sequence[YogaFinding]) -> Dict:
    """Counts per category and the names of Strong findings."""
    return {
        "total": len(findings),
        "by_category": dict(Counter(f.category for f in findings)),
        "strong": [f.name for f in findings if f.strength == STRONG],
    }
