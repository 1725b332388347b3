"""
Jyotish Engine
==============
Sidereal (Vedic) birth chart computation: planetary positions, whole-sign
houses, Navamsa/Dasamsa charts, the Vimshottari dasha hierarchy and a
rule-based yoga classifier.

Quick start:
    from jyotish_engine import BirthInput, compute_chart, classify_yogas

    chart = compute_chart(BirthInput.from_strings(
        "1990-06-15", "10:30", "+05:30",
        latitude=28.6139, longitude=77.2090,
    ))
    yogas = classify_yogas(chart)
"""

from .core.ephemeris import BirthInput, PlanetPosition, AscendantPosition
from .core.houses import HouseSlot
from .core.divisional_charts import DivisionalChart
from .core.dasha import (
    DashaPeriod, compute_dasha_tree, compute_dasha_tree_from_longitude,
    find_active_periods, next_transition, dasha_sandhi,
)
from .core.yogas import YogaFinding, classify_yogas, summarize_yogas
from .core.external import ExternalPositionsError
from .tools.kundali import Chart, compute_chart, chart_to_dict

__version__ = "1.0.0"
__all__ = [
    "BirthInput", "PlanetPosition", "AscendantPosition", "HouseSlot",
    "DivisionalChart", "DashaPeriod", "YogaFinding", "Chart",
    "ExternalPositionsError",
    "compute_chart", "chart_to_dict",
    "compute_dasha_tree", "compute_dasha_tree_from_longitude",
    "find_active_periods", "next_transition", "dasha_sandhi",
    "classify_yogas", "summarize_yogas",
]
