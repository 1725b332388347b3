"""
ephemeris.py  —  Sidereal primitives and mean-motion planetary positions
========================================================================
Temporal and coordinate primitives used by every other module:

  - Julian Day from a UTC instant (Meeus Ch. 7)
  - Ayanamsa, a linear precession model anchored at J2000
  - Longitude → sign / nakshatra / pada / nakshatra lord
  - GMST, local sidereal time, mean obliquity and the tropical Ascendant

and the position calculator itself: one mean longitude per body plus a
single periodic correction term, shifted into the sidereal zodiac.

Accuracy:  a few degrees for the fast bodies.  Good enough to place a
           planet in its sign for chart structure; not an ephemeris.
"""

import datetime as dt
import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# ── Constants ──────────────────────────────────────────────────
J2000          = 2451545.0
DAYS_PER_CENTURY = 36525.0
DEG            = math.pi / 180.0
RAD            = 180.0 / math.pi

PLANETS = ["Sun","Moon","Mercury","Venus","Mars","Jupiter","Saturn","Rahu","Ketu"]

SIGNS = ["Aries","Taurus","Gemini","Cancer","Leo","Virgo",
         "Libra","Scorpio","Sagittarius","Capricorn","Aquarius","Pisces"]

NAKSHATRAS = [
    "Ashwini","Bharani","Krittika","Rohini","Mrigashira","Ardra",
    "Punarvasu","Pushya","Ashlesha","Magha","Purva Phalguni","Uttara Phalguni",
    "Hasta","Chitra","Swati","Vishakha","Anuradha","Jyeshtha",
    "Mula","Purva Ashadha","Uttara Ashadha","Shravana","Dhanishtha",
    "Shatabhisha","Purva Bhadrapada","Uttara Bhadrapada","Revati"
]

NAKSHATRA_SPAN = 360.0 / 27.0        # 13°20'
PADA_SPAN      = NAKSHATRA_SPAN / 4  # 3°20'

# Vimshottari order; nakshatra lords repeat it three times around the zodiac
DASHA_LORDS = ["Ketu", "Venus", "Sun", "Moon", "Mars",
               "Rahu", "Jupiter", "Saturn", "Mercury"]
NAKSHATRA_LORDS = DASHA_LORDS * 3
DEFAULT_NAKSHATRA_LORD = "Ketu"

# Spelling variants seen in provider payloads, keyed by squashed lowercase form
_NAKSHATRA_ALIASES = {
    "aswini": "ashwini", "ashvini": "ashwini",
    "kritika": "krittika", "krithika": "krittika",
    "mrigasira": "mrigashira", "mrigashirsha": "mrigashira", "mrigasirsha": "mrigashira",
    "arudra": "ardra", "aridra": "ardra",
    "pushyami": "pushya", "pushyam": "pushya",
    "aslesha": "ashlesha", "ashlesa": "ashlesha",
    "makha": "magha",
    "poorvaphalguni": "purvaphalguni", "purvaphalgun": "purvaphalguni",
    "utharaphalguni": "uttaraphalguni", "uttaraphalgun": "uttaraphalguni",
    "chitta": "chitra", "chithra": "chitra",
    "swathi": "swati", "svati": "swati",
    "visakha": "vishakha", "vishaka": "vishakha",
    "jyeshta": "jyeshtha", "jyestha": "jyeshtha",
    "moola": "mula",
    "purvashada": "purvaashadha", "poorvashada": "purvaashadha",
    "purvashadha": "purvaashadha",
    "uttarashada": "uttaraashadha", "uttarashadha": "uttaraashadha",
    "sravana": "shravana", "shravan": "shravana",
    "dhanishta": "dhanishtha", "dhanista": "dhanishtha",
    "satabhisha": "shatabhisha", "shatabhishak": "shatabhisha",
    "satabhishak": "shatabhisha", "shatabhishaj": "shatabhisha",
    "purvabhadra": "purvabhadrapada", "poorvabhadrapada": "purvabhadrapada",
    "purvabhadrapad": "purvabhadrapada",
    "uttarabhadra": "uttarabhadrapada", "uttarabhadrapad": "uttarabhadrapada",
    "revathi": "revati",
}


def normalize(x: float) -> float:
    """Normalize angle to [0, 360)."""
    x = x % 360.0
    # float modulo of a tiny negative can round up to 360.0
    return 0.0 if x >= 360.0 else x


def _squash(name: str) -> str:
    return re.sub(r"[^a-z]", "", name.lower())


# ── Julian Day ─────────────────────────────────────────────────

def gregorian_to_jd(year: int, month: int, day: int, hour: float = 0.0) -> float:
    """Meeus Ch. 7."""
    if month <= 2:
        year -= 1; month += 12
    A = int(year / 100)
    B = 2 - A + int(A / 4)
    return int(365.25*(year+4716)) + int(30.6001*(month+1)) + day + B - 1524.5 + hour/24.0


def _as_utc(instant: dt.datetime) -> dt.datetime:
    """Naive datetimes are taken to already be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=dt.timezone.utc)
    return instant.astimezone(dt.timezone.utc)


def julian_day(instant: dt.datetime) -> float:
    """Julian Day of a UTC (or timezone-aware) instant."""
    u = _as_utc(instant)
    hour = u.hour + u.minute/60.0 + (u.second + u.microsecond/1e6)/3600.0
    return gregorian_to_jd(u.year, u.month, u.day, hour)


def julian_centuries(jd: float) -> float:
    return (jd - J2000) / DAYS_PER_CENTURY


# ── Ayanamsa ────────────────────────────────────────────────────

AYANAMSA = {
    # Chandra Hari / modern Lahiri: 23.85° at J2000, rate 50.288"/yr
    "lahiri": {"j2000": 23.85045, "rate": 50.2882 / 3600.0},
    "raman":  {"j2000": 22.46000, "rate": 50.2388 / 3600.0},
    "kp":     {"j2000": 23.86000, "rate": 50.2388 / 3600.0},
    "fagan":  {"j2000": 24.74000, "rate": 50.2388 / 3600.0},
}


def get_ayanamsa(T: float, system: str = "lahiri") -> float:
    key = system.lower()
    if key not in AYANAMSA:
        logger.warning("Unknown ayanamsa system %r, using lahiri", system)
        key = "lahiri"
    p = AYANAMSA[key]
    return p["j2000"] + p["rate"] * T * 100  # T is centuries


def ayanamsa(instant: dt.datetime, system: str = "lahiri") -> float:
    """Ayanamsa in degrees for a UTC instant."""
    return get_ayanamsa(julian_centuries(julian_day(instant)), system)


def tropical_to_sidereal(lon: float, ayanamsa_deg: float) -> float:
    return normalize(lon - ayanamsa_deg)


# ── Sign / Nakshatra mapping ────────────────────────────────────

def sign_of(longitude: float) -> int:
    """Zodiac sign index 0–11 (Aries = 0)."""
    return int(math.floor(normalize(longitude) / 30.0)) % 12


def longitude_from_sign(sign_index: int, degree_in_sign: float) -> float:
    return normalize(sign_index * 30.0 + degree_in_sign)


@dataclass(frozen=True)
class Nakshatra:
    index: int      # 0–26
    name:  str
    pada:  int      # 1–4
    lord:  str


PADA_COUNT = 108                     # 27 nakshatras × 4 padas
_BOUNDARY_EPS = 1e-9                 # in padas


def _pada_units(longitude: float) -> float:
    """
    Position in padas from Aries 0° (0–108).  Index, pada and elapsed
    fraction are all read from this one value; within _BOUNDARY_EPS of a
    pada boundary it snaps onto the boundary.
    """
    q = normalize(longitude) * PADA_COUNT / 360.0
    nearest = round(q)
    if abs(q - nearest) < _BOUNDARY_EPS:
        q = float(nearest)
    return q % PADA_COUNT


def nakshatra_position(longitude: float) -> Tuple[int, float]:
    """(nakshatra index 0–26, fraction of it already traversed 0–1)."""
    q = _pada_units(longitude)
    idx = int(q // 4)
    return idx, (q - idx * 4) / 4.0


def nakshatra_of(longitude: float) -> Nakshatra:
    q    = _pada_units(longitude)
    idx  = int(q // 4)
    pada = int(q) % 4 + 1
    return Nakshatra(idx, NAKSHATRAS[idx], pada, NAKSHATRA_LORDS[idx])


_NAKSHATRA_INDEX = {_squash(n): i for i, n in enumerate(NAKSHATRAS)}


def nakshatra_index(name: str) -> Optional[int]:
    """Index of a nakshatra name, tolerant of case, spacing and common spellings."""
    key = _squash(name or "")
    key = _NAKSHATRA_ALIASES.get(key, key)
    return _NAKSHATRA_INDEX.get(key)


def nakshatra_lord(name: str) -> str:
    idx = nakshatra_index(name)
    if idx is None:
        logger.warning("Unknown nakshatra %r, defaulting lord to %s",
                       name, DEFAULT_NAKSHATRA_LORD)
        return DEFAULT_NAKSHATRA_LORD
    return NAKSHATRA_LORDS[idx]


# ── Positions ───────────────────────────────────────────────────

def _placement(longitude: float) -> dict:
    lon = normalize(longitude)
    sign_idx = sign_of(lon)
    nak = nakshatra_of(lon)
    return {
        "longitude":       lon,
        "sign_index":      sign_idx,
        "sign":            SIGNS[sign_idx],
        "degree_in_sign":  lon - sign_idx * 30.0,
        "nakshatra_index": nak.index,
        "nakshatra":       nak.name,
        "pada":            nak.pada,
        "nakshatra_lord":  nak.lord,
    }


def _format_degree(degree_in_sign: float) -> str:
    d = int(degree_in_sign)
    mf = (degree_in_sign - d) * 60
    m = int(mf)
    s = (mf - m) * 60
    return f"{d}°{m}'{s:.1f}\""


@dataclass(frozen=True)
class PlanetPosition:
    name:            str
    longitude:       float      # sidereal, [0, 360)
    sign_index:      int
    sign:            str
    degree_in_sign:  float
    nakshatra_index: int
    nakshatra:       str
    pada:            int
    nakshatra_lord:  str
    is_retrograde:   bool = False
    house:           Optional[int] = None

    @classmethod
    def from_longitude(cls, name: str, longitude: float,
                       is_retrograde: bool = False,
                       house: Optional[int] = None) -> "PlanetPosition":
        return cls(name=name, is_retrograde=is_retrograde, house=house,
                   **_placement(longitude))

    def degree_formatted(self) -> str:
        return _format_degree(self.degree_in_sign)


@dataclass(frozen=True)
class AscendantPosition:
    longitude:       float
    sign_index:      int
    sign:            str
    degree_in_sign:  float
    nakshatra_index: int
    nakshatra:       str
    pada:            int
    nakshatra_lord:  str

    name = "Ascendant"

    @property
    def house(self) -> int:
        return 1

    @classmethod
    def from_longitude(cls, longitude: float) -> "AscendantPosition":
        return cls(**_placement(longitude))

    def degree_formatted(self) -> str:
        return _format_degree(self.degree_in_sign)


@dataclass(frozen=True)
class BirthInput:
    """Local civil birth date/time with its UTC offset (hours) and location."""
    date:       dt.date
    time:       dt.time
    utc_offset: float
    latitude:   float
    longitude:  float     # positive East

    @property
    def utc_instant(self) -> dt.datetime:
        tz = dt.timezone(dt.timedelta(hours=self.utc_offset))
        local = dt.datetime.combine(self.date, self.time.replace(tzinfo=None), tzinfo=tz)
        return local.astimezone(dt.timezone.utc)

    @classmethod
    def from_strings(cls, date: str, time: str, timezone: str = "+05:30",
                     latitude: float = 0.0, longitude: float = 0.0) -> "BirthInput":
        """
        Build from "YYYY-MM-DD", "HH:MM[:SS]" and a "±HH:MM" offset.
        An offset that does not parse is treated as UTC.
        """
        return cls(
            date=dt.date.fromisoformat(date),
            time=dt.time.fromisoformat(time),
            utc_offset=parse_utc_offset(timezone),
            latitude=float(latitude),
            longitude=float(longitude),
        )


_OFFSET_RE = re.compile(r"([+-])(\d{1,2}):?(\d{2})")


def parse_utc_offset(text: str) -> float:
    """
    "+05:30" → 5.5, "-04:00" → -4.0, "UTC+05:30" → 5.5 (the first signed
    offset anywhere in the text); no offset at all → 0.0.
    """
    m = _OFFSET_RE.search(text or "")
    if not m:
        logger.warning("Unparseable UTC offset %r, using +00:00", text)
        return 0.0
    sign = -1.0 if m.group(1) == "-" else 1.0
    return sign * (int(m.group(2)) + int(m.group(3)) / 60.0)


# ── Mean elements ───────────────────────────────────────────────
#
# body: (L0, n per century, T² coefficient, amplitude, phase)
# tropical = L + A·sin(L + phase), L = L0 + n·T + c·T²

MEAN_ELEMENTS: Dict[str, Tuple[float, float, float, float, float]] = {
    "Sun":     (280.46646,  36000.76983, 0.0003032, 2.0, 278.83354),
    "Moon":    (218.3165,  481267.8813,  0.0,       6.0, 275.05),
    "Mercury": (252.25084, 149472.67411, 0.0,       7.0, 220.0),
    "Venus":   (181.97973,  58517.81539, 0.0,       3.0,  40.0),
    "Mars":    (355.45332,  19140.30282, 0.0,       9.0, 320.0),
    "Jupiter": ( 34.35669,   3034.74612, 0.0,       5.0, 180.0),
    "Saturn":  ( 50.07757,   1222.11414, 0.0,       6.0, 200.0),
    "Rahu":    (125.04452,  -1934.13618, 0.0,       0.0,   0.0),  # mean node
}

NEVER_RETROGRADE = {"Sun", "Moon", "Rahu", "Ketu"}


def mean_longitude(planet: str, T: float) -> float:
    if planet == "Ketu":
        return normalize(mean_longitude("Rahu", T) + 180.0)
    L0, n, c, _, _ = MEAN_ELEMENTS[planet]
    return normalize(L0 + n*T + c*T*T)


def tropical_longitude(planet: str, T: float) -> float:
    if planet == "Ketu":
        return normalize(tropical_longitude("Rahu", T) + 180.0)
    _, _, _, amp, phase = MEAN_ELEMENTS[planet]
    L = mean_longitude(planet, T)
    return normalize(L + amp * math.sin((L + phase) * DEG))


def is_retrograde(planet: str, T: float) -> bool:
    """
    Placeholder flag, not a velocity check: the five star-planets are marked
    retrograde when sin(mean longitude) < -0.7.  Luminaries and nodes never are.
    """
    if planet in NEVER_RETROGRADE:
        return False
    return math.sin(mean_longitude(planet, T) * DEG) < -0.7


# ── GMST, LST & Ascendant ───────────────────────────────────────

def gmst(jd: float) -> float:
    """Greenwich Mean Sidereal Time in degrees. Meeus Ch. 12."""
    T  = julian_centuries(jd)
    th = 280.46061837 + 360.98564736629*(jd - J2000) + 0.000387933*T*T - T*T*T/38710000.0
    return normalize(th)


def local_sidereal_time(jd: float, longitude_deg: float) -> float:
    """Local Mean Sidereal Time in degrees; longitude positive East."""
    return normalize(gmst(jd) + longitude_deg)


def mean_obliquity(T: float) -> float:
    return 23.439291 - 0.0130042*T - 0.00000016*T*T + 0.000000504*T*T*T


def compute_ascendant(lst: float, latitude_deg: float, obliquity: float) -> float:
    """
    Tropical Ascendant (degrees) from local sidereal time.
    Source: Meeus Ch. 14
    """
    ramc = lst * DEG
    e    = obliquity * DEG
    phi  = latitude_deg * DEG

    y = -math.cos(ramc)
    x =  math.sin(e) * math.tan(phi) + math.cos(e) * math.sin(ramc)

    # atan2 + 180° always lands on the eastern horizon point
    return normalize(math.atan2(y, x) * RAD + 180.0)


# ── Main API ────────────────────────────────────────────────────

def compute_positions(birth: BirthInput, ayanamsa_system: str = "lahiri"
                      ) -> Tuple[AscendantPosition, List[PlanetPosition]]:
    """
    Sidereal Ascendant and the nine planets for a birth.
    Returned planets carry no house yet; see houses.organize_houses.
    """
    jd   = julian_day(birth.utc_instant)
    T    = julian_centuries(jd)
    ayan = get_ayanamsa(T, ayanamsa_system)

    lst = local_sidereal_time(jd, birth.longitude)
    asc_trop = compute_ascendant(lst, birth.latitude, mean_obliquity(T))
    ascendant = AscendantPosition.from_longitude(tropical_to_sidereal(asc_trop, ayan))

    planets = []
    for planet in PLANETS:
        sid = tropical_to_sidereal(tropical_longitude(planet, T), ayan)
        planets.append(PlanetPosition.from_longitude(
            planet, sid, is_retrograde=is_retrograde(planet, T)))

    logger.debug("Positions at JD %.5f: ayanamsa %.4f, lagna %s", jd, ayan, ascendant.sign)
    return ascendant, planets
