"""Unit tests for fare estimation and distance arithmetic."""

from datetime import date

import pytest

from ishare import fixtures
from ishare.domain import demand
from ishare.domain.distance import (
    eta_minutes,
    format_distance,
    format_duration,
    haversine_km,
    travel_minutes,
)
from ishare.domain.entities import Coordinates
from ishare.domain.pricing import (
    PROMO_CODES,
    PricingEngine,
    PromoPricing,
    StandardPricing,
    SurgePricing,
    lookup_promo,
)


class TestPricingStrategies:
    def test_standard_pricing(self):
        strategy = StandardPricing()
        assert strategy.calculate(10.0, 2.5, 1.75) == 20.0  # 2.5 + 10*1.75

    def test_surge_pricing_multiplier(self):
        strategy = SurgePricing(surge_multiplier=2.0)
        assert strategy.calculate(10.0, 2.5, 1.75) == 40.0

    def test_surge_and_option_multiply(self):
        strategy = SurgePricing(surge_multiplier=1.5, option_multiplier=1.4)
        assert strategy.calculate(10.0, 2.5, 1.75) == pytest.approx(42.0)

    def test_promo_discount_is_capped(self):
        strategy = PromoPricing(PROMO_CODES["WEEKEND25"], surge_multiplier=2.0)
        assert strategy.calculate(10.0, 2.5, 1.75) == 35.0  # 40 - min(10, 5)

    def test_promo_percentage_below_cap(self):
        strategy = PromoPricing(PROMO_CODES["WELCOME50"])
        assert strategy.calculate(10.0, 2.5, 1.75) == 10.0  # 20 - 50%

    def test_no_promo_only_rounds(self):
        strategy = PromoPricing(None)
        assert strategy.calculate(1.0, 2.5, 1.75) == 4.25


class TestPromoCodes:
    def test_lookup_is_case_insensitive(self):
        assert lookup_promo(" welcome50 ").code == "WELCOME50"

    def test_unknown_code(self):
        assert lookup_promo("FREE100") is None

    def test_empty_code(self):
        assert lookup_promo(None) is None
        assert lookup_promo("") is None

    def test_expired_code_rejected_with_date(self):
        assert lookup_promo("WEEKEND25", as_of=date(2023, 8, 1)) is None

    def test_valid_code_on_expiry_day(self):
        assert lookup_promo("WEEKEND25", as_of=date(2023, 7, 31)) is not None


class TestSurge:
    @pytest.mark.parametrize(
        "level, expected",
        [(0.0, 1.0), (0.3, 1.0), (0.5, 1.0), (0.75, 1.5), (0.9, 1.8), (1.0, 2.0)],
    )
    def test_surge_multiplier(self, level, expected):
        assert demand.surge_multiplier(level) == expected


class TestPricingEngine:
    def setup_method(self):
        self.engine = PricingEngine(base_fare=2.5, rate_per_km=1.75)
        self.areas = fixtures.high_demand_area_entities()

    def test_same_point_costs_base_fare(self):
        point = Coordinates(10.0, 10.0)
        estimate = self.engine.estimate(point, point)
        assert estimate.price == 2.5
        assert estimate.distance_km == 0
        assert estimate.surge_multiplier == 1.0

    def test_option_multiplier_applied(self):
        point = Coordinates(10.0, 10.0)
        assert self.engine.estimate(point, point, option_id="comfort").price == 3.5

    def test_unknown_option_is_neutral(self):
        assert PricingEngine.option_multiplier("hovercraft") == 1.0
        assert PricingEngine.option_multiplier(None) == 1.0

    def test_pickup_inside_demand_area_surges(self):
        downtown = self.areas[0].coordinates
        estimate = self.engine.estimate(downtown, downtown, areas=self.areas)
        assert estimate.surge_multiplier == 1.8
        assert estimate.price == 4.5

    def test_promo_code_reported(self):
        a, b = Coordinates(37.70, -122.40), Coordinates(37.80, -122.40)
        plain = self.engine.estimate(a, b)
        promo = self.engine.estimate(a, b, promo_code="welcome50")
        assert promo.promo_code == "WELCOME50"
        assert promo.price < plain.price

    def test_duration_uses_average_speed(self):
        a, b = Coordinates(0.0, 0.0), Coordinates(0.0, 0.135)  # ~15 km
        assert self.engine.estimate(a, b).duration_minutes == 30

    def test_plain_trip_uses_standard_pricing(self):
        assert type(PricingEngine.strategy_for(1.0, 1.0, None)) is StandardPricing
        a, b = Coordinates(0.0, 0.0), Coordinates(0.0, 0.09)
        estimate = self.engine.estimate(a, b)
        expected = StandardPricing().calculate(estimate.distance_km, 2.5, 1.75)
        assert estimate.price == pytest.approx(expected, abs=0.01)

    def test_strategy_follows_surge_option_and_promo(self):
        assert type(PricingEngine.strategy_for(1.8, 1.0, None)) is SurgePricing
        assert type(PricingEngine.strategy_for(1.0, 1.4, None)) is SurgePricing
        promo = PROMO_CODES["WELCOME50"]
        assert type(PricingEngine.strategy_for(1.0, 1.0, promo)) is PromoPricing


class TestDistance:
    def test_one_degree_of_latitude(self):
        assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)

    def test_zero_distance(self):
        assert haversine_km(37.77, -122.41, 37.77, -122.41) == 0

    def test_eta_never_below_one_minute(self):
        assert eta_minutes(0) == 1
        assert eta_minutes(2.4) == 5

    def test_travel_minutes(self):
        assert travel_minutes(15, 30) == 30

    def test_format_distance(self):
        assert format_distance(0.5) == "500 m"
        assert format_distance(3.21) == "3.2 km"

    def test_format_duration(self):
        assert format_duration(45) == "45 min"
        assert format_duration(135) == "2 hr 15 min"
