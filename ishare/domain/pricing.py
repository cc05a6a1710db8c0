"""
Fare Estimator  (Strategy Pattern)
==================================

Formula
-------
Fare = (Base_Fare + Distance x Rate_Per_KM) x Option_Multiplier x Surge - Promo_Discount

* **Distance**: straight-line Haversine km between pickup and drop-off.
* **Option_Multiplier**: per ride option (IShare Ride 1.0 ... IShare XL 1.75).
* **Surge**: from the high-demand area containing the pickup, 1.0 outside.
* **Promo_Discount**: percentage of the fare, capped at a fixed amount.

Complexity: O(A) per estimate, A = number of high-demand areas.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from . import demand
from .distance import haversine_km, travel_minutes
from .entities import Coordinates, HighDemandArea

OPTION_MULTIPLIERS: dict[str, float] = {
    # client ride options
    "rideshare": 1.0,
    "comfort": 1.4,
    "xl": 1.75,
    "green": 1.25,
    # server ride types
    "standard": 1.0,
    "premium": 1.4,
    "shared": 0.8,
}


@dataclass(frozen=True)
class PromoCode:
    code: str
    description: str
    percent_off: float
    max_discount: float
    expiry_date: date

    def discount_for(self, fare: float) -> float:
        return round(min(fare * self.percent_off, self.max_discount), 2)

    def is_expired(self, as_of: date) -> bool:
        return as_of > self.expiry_date


PROMO_CODES: dict[str, PromoCode] = {
    "WELCOME50": PromoCode(
        "WELCOME50", "50% off your first ride (up to $10)", 0.50, 10.0, date(2023, 12, 31)
    ),
    "WEEKEND25": PromoCode(
        "WEEKEND25", "25% off weekend rides (up to $5)", 0.25, 5.0, date(2023, 7, 31)
    ),
}


def lookup_promo(code: Optional[str], as_of: Optional[date] = None) -> Optional[PromoCode]:
    """Find a promo by code (case-insensitive); expired codes when *as_of* is given."""
    if not code:
        return None
    promo = PROMO_CODES.get(code.strip().upper())
    if promo is None or (as_of is not None and promo.is_expired(as_of)):
        return None
    return promo


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float: ...


class StandardPricing(PricingStrategy):
    """Plain metered fare: no option, surge or promo adjustment."""

    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        return base_fare + distance_km * rate_per_km


class SurgePricing(StandardPricing):
    def __init__(self, surge_multiplier: float = 1.0, option_multiplier: float = 1.0):
        self.surge_multiplier = surge_multiplier
        self.option_multiplier = option_multiplier

    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        metered = super().calculate(distance_km, base_fare, rate_per_km)
        return metered * self.option_multiplier * self.surge_multiplier


class PromoPricing(PricingStrategy):
    """Applies option and surge multipliers, then a capped promo discount."""

    def __init__(
        self,
        promo: Optional[PromoCode],
        surge_multiplier: float = 1.0,
        option_multiplier: float = 1.0,
    ):
        self.promo = promo
        self.surge = SurgePricing(surge_multiplier, option_multiplier)

    def calculate(
        self, distance_km: float, base_fare: float, rate_per_km: float
    ) -> float:
        raw = self.surge.calculate(distance_km, base_fare, rate_per_km)
        discount = self.promo.discount_for(raw) if self.promo else 0.0
        return round(max(0.0, raw - discount), 2)


# ── Engine facade ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class FareEstimate:
    price: float
    distance_km: float
    duration_minutes: int
    surge_multiplier: float = 1.0
    promo_code: Optional[str] = None


class PricingEngine:
    """High-level API used by the ride service and the mock backend."""

    def __init__(
        self,
        base_fare: float = 2.50,
        rate_per_km: float = 1.75,
        average_speed_kmh: float = 30.0,
    ):
        self.base_fare = base_fare
        self.rate_per_km = rate_per_km
        self.average_speed_kmh = average_speed_kmh

    @staticmethod
    def option_multiplier(option_id: Optional[str]) -> float:
        if not option_id:
            return 1.0
        return OPTION_MULTIPLIERS.get(option_id.lower(), 1.0)

    @staticmethod
    def surge_at(
        pickup: Coordinates, areas: Iterable[HighDemandArea]
    ) -> float:
        area = demand.area_at(pickup, areas)
        return demand.surge_multiplier(area.demand_level) if area else 1.0

    @staticmethod
    def strategy_for(
        surge: float, option_multiplier: float, promo: Optional[PromoCode]
    ) -> PricingStrategy:
        if promo is not None:
            return PromoPricing(promo, surge, option_multiplier)
        if surge != 1.0 or option_multiplier != 1.0:
            return SurgePricing(surge, option_multiplier)
        return StandardPricing()

    def estimate(
        self,
        pickup: Coordinates,
        dropoff: Coordinates,
        option_id: Optional[str] = None,
        areas: Iterable[HighDemandArea] = (),
        promo_code: Optional[str] = None,
    ) -> FareEstimate:
        distance = haversine_km(
            pickup.latitude, pickup.longitude, dropoff.latitude, dropoff.longitude
        )
        surge = self.surge_at(pickup, areas)
        promo = lookup_promo(promo_code)
        strategy = self.strategy_for(surge, self.option_multiplier(option_id), promo)
        price = strategy.calculate(distance, self.base_fare, self.rate_per_km)
        return FareEstimate(
            price=round(price, 2),
            distance_km=round(distance, 2),
            duration_minutes=travel_minutes(distance, self.average_speed_kmh),
            surge_multiplier=surge,
            promo_code=promo.code if promo else None,
        )
