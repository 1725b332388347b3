"""
Jyotish Engine — FastAPI Backend
================================
Endpoints:
  POST /api/chart   — Birth chart: positions, houses, D9/D10, dasha tree
  POST /api/dasha   — Vimshottari tree from Moon nakshatra + pada
  POST /api/yogas   — Yoga findings for the natal or a divisional chart
  GET  /api/health  — Health check
"""

import logging
from dataclasses import asdict
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from jyotish_engine import (
    BirthInput, __version__, chart_to_dict, classify_yogas, compute_chart,
    compute_dasha_tree, dasha_sandhi, find_active_periods, next_transition,
    summarize_yogas,
)
from jyotish_engine.config import get_settings
from jyotish_engine.core.dasha import get_current_dasha
from jyotish_engine.tools.kundali import dasha_to_dict

logging.basicConfig(level=get_settings().LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Jyotish Engine API",
    version=__version__,
    description="Sidereal birth charts, Vimshottari dasha hierarchy and yoga classification",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Models ─────────────────────────────────────────────

class BirthData(BaseModel):
    year:            int   = Field(..., ge=1800, le=2100)
    month:           int   = Field(..., ge=1,    le=12)
    day:             int   = Field(..., ge=1,    le=31)
    hour:            int   = Field(12,  ge=0,    le=23)
    minute:          int   = Field(0,   ge=0,    le=59)
    second:          int   = Field(0,   ge=0,    le=59)
    timezone_offset: float = Field(0.0, ge=-12,  le=14)
    latitude:        float = Field(..., ge=-90,  le=90)
    longitude:       float = Field(..., ge=-180, le=180)

    def to_birth_input(self) -> BirthInput:
        return BirthInput(
            date=date(self.year, self.month, self.day),
            time=time(self.hour, self.minute, self.second),
            utc_offset=self.timezone_offset,
            latitude=self.latitude,
            longitude=self.longitude,
        )


class ChartRequest(BirthData):
    ayanamsa:           Optional[str] = Field(None, pattern="^(lahiri|raman|kp|fagan)$")
    dasha_depth:        Optional[int] = Field(None, ge=1, le=5)
    external_positions: Optional[List[Dict[str, Any]]] = None


class YogaRequest(ChartRequest):
    division: str = Field("D1", pattern="^(D1|D9|D10)$")


class DashaRequest(BaseModel):
    moon_nakshatra: str
    moon_pada:      int      = Field(1, ge=1, le=4)
    birth_utc:      datetime
    depth:          int      = Field(3, ge=1, le=5)
    on_date:        Optional[datetime] = Field(None,
                        description="Report active periods at this instant")


# ── Utilities ──────────────────────────────────────────────────

def _chart(data: ChartRequest):
    return compute_chart(
        data.to_birth_input(),
        data.external_positions,
        dasha_depth=data.dasha_depth,
        ayanamsa_system=data.ayanamsa,
    )


# ── Endpoints ──────────────────────────────────────────────────

@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "service": "Jyotish Engine API",
        "version": __version__,
        "endpoints": [
            "POST /api/chart",
            "POST /api/dasha",
            "POST /api/yogas",
        ],
    }


@app.post("/api/chart")
def chart_endpoint(data: ChartRequest):
    try:
        chart = _chart(data)
        return {"success": True, "chart": chart_to_dict(chart)}
    except ValueError as e:
        logger.warning("Chart request rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/dasha")
def dasha_endpoint(data: DashaRequest):
    try:
        tree = compute_dasha_tree(data.moon_nakshatra, data.moon_pada,
                                  data.birth_utc, data.depth)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = {"success": True, "dasha": [dasha_to_dict(p) for p in tree]}
    if data.on_date is not None:
        active = find_active_periods(tree, data.on_date)
        transition = next_transition(active)
        result["current"] = get_current_dasha(tree, data.on_date)
        result["next_transition"] = (
            {"at": transition[0].isoformat(), "level": transition[1]} if transition else None
        )
        result["sandhi"] = asdict(dasha_sandhi(active, data.on_date))
    return result


@app.post("/api/yogas")
def yogas_endpoint(data: YogaRequest):
    try:
        chart = _chart(data)
    except ValueError as e:
        logger.warning("Yoga request rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    findings = classify_yogas(chart.divisional(data.division))
    return {
        "success": True,
        "division": data.division,
        "yogas": [asdict(f) for f in findings],
        "summary": summarize_yogas(findings),
    }
