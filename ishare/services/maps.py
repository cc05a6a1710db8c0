"""Maps: routes, place lookup, nearby drivers and the user's position."""

from __future__ import annotations

import logging
from typing import Optional

from ishare import endpoints
from ishare.client.errors import ApiError
from ishare.client.http import ApiClient
from ishare.config import settings
from ishare.domain import routing
from ishare.domain.entities import Coordinates, Driver
from ishare.realtime.socket_client import SocketService
from ishare.store import Store
from ishare.store import map as map_slice

logger = logging.getLogger(__name__)


class MapsService:
    def __init__(self, api: ApiClient, socket: SocketService, store: Store):
        self.api = api
        self.socket = socket
        self.store = store

    def get_directions(
        self, origin: Coordinates, destination: Coordinates
    ) -> routing.Route:
        self.store.dispatch(map_slice.route_loading())
        route = routing.mock_route(origin, destination, settings.average_speed_kmh)
        self.store.dispatch(
            map_slice.route_success(
                {
                    "coordinates": route.coordinates,
                    "duration": route.duration_text,
                    "distance": route.distance_text,
                }
            )
        )
        return route

    def search_places(
        self, query: str, near: Optional[Coordinates] = None
    ) -> list[routing.Place]:
        near = near or self.store.select("map").current_location
        return routing.search_places(query, near)

    def get_place_details(self, place_id: str) -> routing.Place:
        return routing.place_details(place_id)

    async def get_nearby_drivers(
        self, location: Optional[Coordinates] = None, radius_km: float = 5.0
    ) -> list[Driver]:
        state = self.store.select("map")
        location = location or state.current_location
        if location is None or self.api.use_mock:
            return list(state.nearby_drivers)

        try:
            response = await self.api.get(
                endpoints.NEARBY_DRIVERS,
                {
                    "latitude": location.latitude,
                    "longitude": location.longitude,
                    "radius": radius_km,
                },
            )
        except ApiError as exc:
            logger.warning("Nearby drivers unavailable, using cached list: %s", exc)
            return list(state.nearby_drivers)

        if isinstance(response, dict):
            response = response.get("drivers")
        if not isinstance(response, list):
            logger.warning("Nearby drivers response has no driver list, using cache")
            return list(state.nearby_drivers)

        drivers = [Driver.from_api(d) for d in response]
        self.store.dispatch(map_slice.set_nearby_drivers(drivers))
        return drivers

    async def update_current_location(self, location: Coordinates) -> bool:
        """Store the new position and share it; False when offline."""
        self.store.dispatch(map_slice.set_current_location(location))
        return await self.socket.update_user_location(location)
