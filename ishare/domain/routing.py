"""
Mock routing and place lookup.

Directions are a straight line between the two points, bent by a small sine
offset so the polyline reads like a road on the map.  Place search builds
three deterministic suggestions from the query text.  Both stand in for a
server-side proxy to a maps provider.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Optional

from .distance import format_distance, format_duration, haversine_km, travel_minutes
from .entities import Coordinates

ROUTE_SEGMENTS = 8
MAX_ROUTE_OFFSET_DEG = 0.002  # ~200 m
DEFAULT_PLACE_ORIGIN = Coordinates(23.8103, 90.4125)


@dataclass
class Route:
    coordinates: list[Coordinates]
    distance_km: float
    duration_minutes: int
    start_address: str = "Starting Point"
    end_address: str = "Destination"

    @property
    def distance_text(self) -> str:
        return format_distance(self.distance_km)

    @property
    def duration_text(self) -> str:
        return format_duration(self.duration_minutes)


@dataclass
class Place:
    id: str
    name: str
    address: str
    coordinates: Coordinates
    types: list[str] = field(default_factory=list)


def mock_route(
    origin: Coordinates, destination: Coordinates, average_speed_kmh: float = 30.0
) -> Route:
    distance = haversine_km(
        origin.latitude, origin.longitude, destination.latitude, destination.longitude
    )
    points = []
    for i in range(ROUTE_SEGMENTS + 1):
        fraction = i / ROUTE_SEGMENTS
        offset = MAX_ROUTE_OFFSET_DEG * math.sin(fraction * math.pi)
        points.append(
            Coordinates(
                origin.latitude
                + fraction * (destination.latitude - origin.latitude)
                + offset,
                origin.longitude
                + fraction * (destination.longitude - origin.longitude)
                + offset,
            )
        )
    return Route(
        coordinates=points,
        distance_km=distance,
        duration_minutes=travel_minutes(distance, average_speed_kmh),
    )


def decode_polyline(encoded: str) -> list[Coordinates]:
    """Decode a Google Maps encoded polyline (precision 1e5)."""
    points: list[Coordinates] = []
    index = lat = lng = 0

    while index < len(encoded):
        deltas = []
        for _ in range(2):
            shift = result = 0
            while True:
                b = ord(encoded[index]) - 63
                index += 1
                result |= (b & 0x1F) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if result & 1 else result >> 1)
        lat += deltas[0]
        lng += deltas[1]
        points.append(Coordinates(lat / 1e5, lng / 1e5))

    return points


def _new_place_id() -> str:
    return "place_" + uuid.uuid4().hex[:6]


def search_places(query: str, near: Optional[Coordinates] = None) -> list[Place]:
    if not query:
        return []
    title = query[0].upper() + query[1:]
    n = len(query)
    if near is None:
        spots = [
            Coordinates(23.8103, 90.4125),
            Coordinates(23.8203, 90.4225),
            Coordinates(23.8050, 90.4050),
        ]
    else:
        spots = [
            Coordinates(near.latitude + 0.01, near.longitude + 0.01),
            Coordinates(near.latitude - 0.01, near.longitude - 0.01),
            Coordinates(near.latitude + 0.02, near.longitude + 0.02),
        ]
    return [
        Place(
            _new_place_id(),
            f"{title} Plaza",
            f"{123 + n} {title} Street, Anytown",
            spots[0],
            ["point_of_interest"],
        ),
        Place(
            _new_place_id(),
            f"{title} Mall",
            f"{456 + n} Shopping Avenue, Anytown",
            spots[1],
            ["shopping_mall"],
        ),
        Place(
            _new_place_id(),
            f"{title} Park",
            f"{789 + n} Nature Drive, Anytown",
            spots[2],
            ["park"],
        ),
    ]


def place_details(place_id: str) -> Place:
    """Deterministic details derived from the numeric part of *place_id*."""
    _, _, suffix = place_id.partition("_")
    suffix = suffix or "123"
    digits = "".join(ch for ch in suffix[:2] if ch.isdigit())
    bump = int(digits) / 1000 if digits else 0.0
    return Place(
        id=place_id,
        name=f"Place {suffix}",
        address=f"{suffix} Main Street, Anytown",
        coordinates=Coordinates(
            DEFAULT_PLACE_ORIGIN.latitude + bump,
            DEFAULT_PLACE_ORIGIN.longitude + bump,
        ),
        types=["point_of_interest"],
    )
