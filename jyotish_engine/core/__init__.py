# Jyotish Engine - Core modules
from .ephemeris import julian_day, ayanamsa, sign_of, nakshatra_of, compute_positions
from .houses import organize_houses
from .divisional_charts import compute_divisional_chart
from .dasha import compute_dasha_tree, compute_dasha_tree_from_longitude, find_active_periods
from .yogas import classify_yogas
from .external import positions_from_external

__all__ = [
    "julian_day", "ayanamsa", "sign_of", "nakshatra_of", "compute_positions",
    "organize_houses",
    "compute_divisional_chart",
    "compute_dasha_tree", "compute_dasha_tree_from_longitude", "find_active_periods",
    "classify_yogas",
    "positions_from_external",
]
