"""
Distance, ETA and display formatting.

Assumption
----------
The client never calls a routing engine: every distance is the great-circle
(Haversine) distance between two points, and every duration assumes a flat
average city speed.  The backend is free to return real road distances,
which then take precedence over these estimates.
"""

import math

EARTH_RADIUS_KM = 6_371.0
MINUTES_PER_KM = 2  # 30 km/h


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def eta_minutes(distance_km: float) -> int:
    """Driver ETA for *distance_km*; never below one minute."""
    return max(1, round(distance_km * MINUTES_PER_KM))


def travel_minutes(distance_km: float, average_speed_kmh: float = 30.0) -> int:
    return round(distance_km / average_speed_kmh * 60)


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60} hr {minutes % 60} min"
