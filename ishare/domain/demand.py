"""
High-demand areas: banding, filtering and surge lookup.

Demand levels arrive on a 0-1 scale.  The heat map colours them in three
bands; the list view filters on the same value expressed as a percentage.

Surge
-----
  surge = clamp(2 x demand_level, 1.0, 2.0)

so anything below 50 % demand is charged at the normal rate and a fully
saturated area doubles the fare.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .distance import haversine_km
from .entities import Coordinates, HighDemandArea
from .enums import DemandBand

LOW_BAND_CEILING = 0.3
MEDIUM_BAND_CEILING = 0.6
ALERT_THRESHOLD = 0.7  # notify the user above this level

HIGH_FILTER_PERCENT = 70
MEDIUM_FILTER_PERCENT = 50

BAND_COLORS = {
    DemandBand.LOW: "#05944F",
    DemandBand.MEDIUM: "#FFC043",
    DemandBand.HIGH: "#E11900",
}
FILL_ALPHA = "80"  # 50 % opacity suffix


def band_for(demand_level: float) -> DemandBand:
    if demand_level < LOW_BAND_CEILING:
        return DemandBand.LOW
    if demand_level < MEDIUM_BAND_CEILING:
        return DemandBand.MEDIUM
    return DemandBand.HIGH


def stroke_color(demand_level: float) -> str:
    return BAND_COLORS[band_for(demand_level)]


def fill_color(demand_level: float) -> str:
    return stroke_color(demand_level) + FILL_ALPHA


def demand_percent(area: HighDemandArea) -> int:
    return round(area.demand_level * 100)


def filter_areas(
    areas: Iterable[HighDemandArea], band: Optional[DemandBand] = None
) -> list[HighDemandArea]:
    """Filter by the list-view bands (percent thresholds 70 / 50)."""
    areas = list(areas)
    if band is None:
        return areas
    if band == DemandBand.HIGH:
        return [a for a in areas if demand_percent(a) >= HIGH_FILTER_PERCENT]
    if band == DemandBand.MEDIUM:
        return [
            a
            for a in areas
            if MEDIUM_FILTER_PERCENT <= demand_percent(a) < HIGH_FILTER_PERCENT
        ]
    return [a for a in areas if demand_percent(a) < MEDIUM_FILTER_PERCENT]


def should_alert(demand_level: float) -> bool:
    return demand_level > ALERT_THRESHOLD


def area_at(
    point: Coordinates, areas: Iterable[HighDemandArea]
) -> Optional[HighDemandArea]:
    """Return the highest-demand area whose circle contains *point*."""
    containing = [
        a
        for a in areas
        if haversine_km(
            point.latitude,
            point.longitude,
            a.coordinates.latitude,
            a.coordinates.longitude,
        )
        <= a.radius
    ]
    if not containing:
        return None
    return max(containing, key=lambda a: a.demand_level)


def surge_multiplier(demand_level: float) -> float:
    return min(2.0, max(1.0, round(2 * demand_level, 2)))
