"""
dasha.py
========
Vimshottari Dasha calculation system.

Vimshottari ("120 years") is the most widely used dasha system in Vedic astrology.
The dasha ruler and starting point are determined by the Moon's nakshatra at birth.

Dasha sequence: Ketu (7) → Venus (20) → Sun (6) → Moon (10) → Mars (7)
                → Rahu (18) → Jupiter (16) → Saturn (19) → Mercury (17)
Total = 120 years

Every period divides into nine sub-periods in the same order, starting from its
own lord, each proportional to the sub-lord's years.  Levels:

    1 mahadasha → 2 antardasha → 3 pratyantardasha → 4 sookshma → 5 prana

The first mahadasha is already partly spent at birth.  It is subdivided over its
full natural length starting from the notional pre-birth start; sub-periods that
ended before birth are dropped and the first survivor starts at the birth instant.

Source: Parashara, B.V. "Brihat Parashara Hora Shastra" (classical text)
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Sequence, Tuple

from .ephemeris import (
    DASHA_LORDS, NAKSHATRA_LORDS, nakshatra_lord, nakshatra_position,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Dasha periods in years (Vimshottari = 120 year cycle)
DASHA_YEARS = {
    "Ketu":    7,
    "Venus":   20,
    "Sun":     6,
    "Moon":    10,
    "Mars":    7,
    "Rahu":    18,
    "Jupiter": 16,
    "Saturn":  19,
    "Mercury": 17,
}

TOTAL_YEARS = 120.0  # sum of all dasha periods
DAYS_PER_YEAR = 365.25

DASHA_LEVELS = ("mahadasha", "antardasha", "pratyantardasha", "sookshma", "prana")
MAX_DEPTH = len(DASHA_LEVELS)
DEFAULT_DEPTH = 3

SANDHI_FRACTION = 0.10   # final tenth of a period


@dataclass(frozen=True)
class DashaPeriod:
    planet:           str
    start:            datetime
    end:              datetime
    level:            int                 # 1 = mahadasha … 5 = prana
    allocated_years:  float               # natural length, before any clipping
    balance_at_birth: Optional[float] = None   # years; first mahadasha only
    children:         Tuple["DashaPeriod", ...] = ()

    @property
    def level_name(self) -> str:
        return DASHA_LEVELS[self.level - 1]

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_years(self) -> float:
        return self.duration.total_seconds() / 86400.0 / DAYS_PER_YEAR

    def contains(self, at: datetime) -> bool:
        """Half-open: a period owns its start instant but not its end."""
        return self.start <= at < self.end


@dataclass(frozen=True)
class SandhiStatus:
    in_sandhi:        bool
    level:            Optional[str] = None
    planet:           Optional[str] = None
    percent_complete: Optional[float] = None


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def years_to_days(years: float) -> float:
    return years * DAYS_PER_YEAR


def dasha_sequence_from(lord: str) -> List[str]:
    """Return dasha sequence starting from given lord."""
    idx = DASHA_LORDS.index(lord)
    return DASHA_LORDS[idx:] + DASHA_LORDS[:idx]


def _as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _check_depth(depth: int) -> None:
    if not isinstance(depth, int) or isinstance(depth, bool) or not 1 <= depth <= MAX_DEPTH:
        raise ValueError(f"Dasha depth must be an integer 1–{MAX_DEPTH}, got {depth!r}")


# ---------------------------------------------------------------------------
# Tree construction
# ---------------------------------------------------------------------------

def _subdivide(parent_lord: str, level: int, natural_start: datetime,
               natural_end: datetime, parent_years: float,
               depth: int, birth: datetime) -> Tuple[DashaPeriod, ...]:
    """
    Nine sub-periods of a period whose natural span is [natural_start, natural_end).
    Offsets are accumulated in years from natural_start so rounding never drifts;
    the last child ends exactly on natural_end.
    """
    sequence = dasha_sequence_from(parent_lord)
    children = []
    elapsed_years = 0.0
    for i, sub_lord in enumerate(sequence):
        sub_years = parent_years * DASHA_YEARS[sub_lord] / TOTAL_YEARS
        sub_start = natural_start + timedelta(days=years_to_days(elapsed_years))
        elapsed_years += sub_years
        if i == len(sequence) - 1:
            sub_end = natural_end
        else:
            sub_end = natural_start + timedelta(days=years_to_days(elapsed_years))

        if sub_end <= birth:
            continue
        children.append(_build_period(sub_lord, level, sub_start, sub_end,
                                      sub_years, depth, birth))
    return tuple(children)


def _build_period(lord: str, level: int, natural_start: datetime,
                  natural_end: datetime, years: float,
                  depth: int, birth: datetime) -> DashaPeriod:
    children: Tuple[DashaPeriod, ...] = ()
    if level < depth:
        children = _subdivide(lord, level + 1, natural_start, natural_end,
                              years, depth, birth)
    return DashaPeriod(
        planet=lord,
        start=max(natural_start, birth),
        end=natural_end,
        level=level,
        allocated_years=float(years),
        children=children,
    )


def _build_tree(starting_lord: str, elapsed_fraction: float,
                birth: datetime, depth: int) -> List[DashaPeriod]:
    _check_depth(depth)
    birth = _as_utc(birth)
    elapsed_fraction = min(max(elapsed_fraction, 0.0), 1.0)

    first_years = DASHA_YEARS[starting_lord]
    balance_years = first_years * (1.0 - elapsed_fraction)

    # notional start of the first mahadasha, before birth
    origin = birth - timedelta(days=years_to_days(first_years * elapsed_fraction))

    periods = []
    elapsed_years = 0.0
    for lord in dasha_sequence_from(starting_lord):
        years = DASHA_YEARS[lord]
        natural_start = origin + timedelta(days=years_to_days(elapsed_years))
        elapsed_years += years
        natural_end = origin + timedelta(days=years_to_days(elapsed_years))
        periods.append(_build_period(lord, 1, natural_start, natural_end,
                                     years, depth, birth))

    periods[0] = replace(periods[0], balance_at_birth=balance_years)
    logger.debug("Vimshottari from %s: balance %.4f years, depth %d",
                 starting_lord, balance_years, depth)
    return periods


# ---------------------------------------------------------------------------
# Core Vimshottari calculation
# ---------------------------------------------------------------------------

def compute_dasha_tree_from_longitude(moon_sidereal_lon: float, birth_dt: datetime,
                                      depth: int = DEFAULT_DEPTH) -> List[DashaPeriod]:
    """
    Compute the Vimshottari tree from the Moon's exact sidereal longitude.

    Args:
        moon_sidereal_lon: Moon's sidereal longitude in degrees (0–360)
        birth_dt: Birth instant (timezone-aware or naive UTC assumed)
        depth: number of levels, 1–5

    Returns:
        The nine mahadashas, each carrying its sub-periods down to `depth`.
    """
    idx, elapsed_in_nakshatra = nakshatra_position(moon_sidereal_lon)
    return _build_tree(NAKSHATRA_LORDS[idx], elapsed_in_nakshatra, birth_dt, depth)


def compute_dasha_tree(moon_nakshatra: str, moon_pada: int, birth_dt: datetime,
                       depth: int = DEFAULT_DEPTH) -> List[DashaPeriod]:
    """
    Compute the Vimshottari tree from the Moon's nakshatra name and pada.

    Only the pada is known, so the Moon is taken to sit at the start of it:
    elapsed fraction = (pada - 1) / 4.  Unknown names fall back to Ketu.
    """
    lord = nakshatra_lord(moon_nakshatra)
    pada = min(max(int(moon_pada), 1), 4)
    return _build_tree(lord, (pada - 1) / 4.0, birth_dt, depth)


# ---------------------------------------------------------------------------
# Tree queries
# ---------------------------------------------------------------------------

def iter_periods(tree: Sequence[DashaPeriod]) -> Iterator[DashaPeriod]:
    """Depth-first walk over every period in the tree."""
    for period in tree:
        yield period
        yield from iter_periods(period.children)


def find_active_periods(tree: Sequence[DashaPeriod], at: datetime,
                        max_level: int = MAX_DEPTH) -> List[DashaPeriod]:
    """
    The chain of periods running at `at`, mahadasha first.
    Empty when `at` lies outside the tree.
    """
    at = _as_utc(at)
    active = []
    level_periods = tree
    while level_periods and len(active) < max_level:
        current = next((p for p in level_periods if p.contains(at)), None)
        if current is None:
            break
        active.append(current)
        level_periods = current.children
    return active


def next_transition(active: Sequence[DashaPeriod]) -> Optional[Tuple[datetime, str]]:
    """Earliest end among the active periods, with the level that changes there."""
    if not active:
        return None
    soonest = min(active, key=lambda p: p.end)
    return soonest.end, soonest.level_name


def dasha_sandhi(active: Sequence[DashaPeriod], at: datetime) -> SandhiStatus:
    """
    Sandhi = the junction zone, the final 10% of a period.
    Checks from the mahadasha downwards and reports the first hit, with the
    percentage of the sandhi window (not of the whole period) already passed.
    """
    at = _as_utc(at)
    for period in active:
        if period.duration.total_seconds() <= 0:
            continue
        sandhi_start = period.end - period.duration * SANDHI_FRACTION
        if sandhi_start <= at <= period.end:
            window = (period.end - sandhi_start).total_seconds()
            percent = (at - sandhi_start).total_seconds() / window * 100
            return SandhiStatus(True, period.level_name, period.planet, round(percent, 2))
    return SandhiStatus(False)


def get_current_dasha(tree: Sequence[DashaPeriod], on_date: datetime) -> dict:
    """
    Return the active period at every level for a given date, keyed by level name.
    """
    current = {}
    for period in find_active_periods(tree, on_date):
        current[period.level_name] = {
            "planet": period.planet,
            "start":  period.start.isoformat(),
            "end":    period.end.isoformat(),
        }
    return current
