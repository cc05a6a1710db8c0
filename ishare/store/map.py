"""Map slice: where we are, the planned route, demand areas and drivers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ishare import fixtures
from ishare.domain.entities import Coordinates, Driver, HighDemandArea, Region
from ishare.store.core import Slice

DEFAULT_REGION = Region(latitude=37.78825, longitude=-122.4324)


@dataclass
class MapState:
    current_location: Optional[Coordinates] = None
    region: Region = DEFAULT_REGION
    is_location_loading: bool = False
    location_error: Optional[str] = None
    route_coordinates: list[Coordinates] = field(default_factory=list)
    is_route_loading: bool = False
    route_error: Optional[str] = None
    estimated_time: Optional[str] = None
    estimated_distance: Optional[str] = None
    high_demand_areas: list[HighDemandArea] = field(
        default_factory=fixtures.high_demand_area_entities
    )
    nearby_drivers: list[Driver] = field(default_factory=fixtures.driver_entities)
    show_demand_heatmap: bool = False
    selected_driver: Optional[Driver] = None


map_ = Slice("map", MapState)


def _recentre(state: MapState, location: Coordinates) -> None:
    state.region = Region(
        latitude=location.latitude,
        longitude=location.longitude,
        latitude_delta=state.region.latitude_delta,
        longitude_delta=state.region.longitude_delta,
    )


@map_.reducer("setCurrentLocation")
def set_current_location(state: MapState, location: Coordinates) -> None:
    state.current_location = location
    _recentre(state, location)


@map_.reducer("setRegion")
def set_region(state: MapState, region: Region) -> None:
    state.region = region


@map_.reducer("locationLoading")
def location_loading(state: MapState, _payload) -> None:
    state.is_location_loading = True
    state.location_error = None


@map_.reducer("locationSuccess")
def location_success(state: MapState, location: Coordinates) -> None:
    state.is_location_loading = False
    state.current_location = location
    _recentre(state, location)


@map_.reducer("locationFailure")
def location_failure(state: MapState, message: str) -> None:
    state.is_location_loading = False
    state.location_error = message


@map_.reducer("setRouteCoordinates")
def set_route_coordinates(state: MapState, points: list[Coordinates]) -> None:
    state.route_coordinates = list(points)


@map_.reducer("routeLoading")
def route_loading(state: MapState, _payload) -> None:
    state.is_route_loading = True
    state.route_error = None


@map_.reducer("routeSuccess")
def route_success(state: MapState, payload: dict) -> None:
    state.is_route_loading = False
    state.route_coordinates = list(payload["coordinates"])
    state.estimated_time = payload.get("duration")
    state.estimated_distance = payload.get("distance")


@map_.reducer("routeFailure")
def route_failure(state: MapState, message: str) -> None:
    state.is_route_loading = False
    state.route_error = message


@map_.reducer("clearRoute")
def clear_route(state: MapState, _payload) -> None:
    state.route_coordinates = []
    state.estimated_time = None
    state.estimated_distance = None


@map_.reducer("setHighDemandAreas")
def set_high_demand_areas(state: MapState, areas: list[HighDemandArea]) -> None:
    state.high_demand_areas = list(areas)


@map_.reducer("updateHighDemandAreas")
def update_high_demand_areas(state: MapState, areas: list[HighDemandArea]) -> None:
    """Upsert by area id."""
    by_id = {a.id: i for i, a in enumerate(state.high_demand_areas)}
    for area in areas:
        if area.id in by_id:
            state.high_demand_areas[by_id[area.id]] = area
        else:
            by_id[area.id] = len(state.high_demand_areas)
            state.high_demand_areas.append(area)


@map_.reducer("setNearbyDrivers")
def set_nearby_drivers(state: MapState, drivers: list[Driver]) -> None:
    state.nearby_drivers = list(drivers)


@map_.reducer("updateDriverLocation")
def update_driver_location(state: MapState, payload: dict) -> None:
    for driver in state.nearby_drivers:
        if driver.id == payload["driver_id"]:
            driver.location = payload["location"]
            return


@map_.reducer("toggleDemandHeatmap")
def toggle_demand_heatmap(state: MapState, _payload) -> None:
    state.show_demand_heatmap = not state.show_demand_heatmap


@map_.reducer("selectDriver")
def select_driver(state: MapState, driver: Optional[Driver]) -> None:
    state.selected_driver = driver
