"""Client-side state store and its slices."""

from ishare.store import app_mode, auth, driver, map, notification, ride
from ishare.store.core import Action, ActionCreator, Slice, Store

ALL_SLICES = (
    auth.auth,
    ride.ride,
    map.map_,
    notification.notification,
    app_mode.app_mode,
    driver.driver,
)


def create_store() -> Store:
    """Build a store with every slice; logging out resets all of them."""
    return Store(ALL_SLICES, reset_on=(auth.logout.type,))


__all__ = ["Action", "ActionCreator", "Slice", "Store", "create_store"]
