"""Unit tests for ride lifecycle transitions (passenger and driver side)."""

import pytest

from ishare import fixtures
from ishare.domain.entities import ActiveDriverRide, CurrentRide, InvalidStateTransition
from ishare.domain.enums import DriverRideStatus, RideStatus


class TestRideStateMachine:
    def test_new_ride_has_no_status(self):
        assert CurrentRide().status is None

    # ── Valid transitions ─────────────────────────────────────────

    def test_idle_to_searching(self):
        ride = CurrentRide()
        ride.transition_to(RideStatus.SEARCHING)
        assert ride.status == RideStatus.SEARCHING

    def test_full_forward_lifecycle(self):
        ride = CurrentRide(status=RideStatus.SEARCHING)
        for status in (
            RideStatus.DRIVER_ASSIGNED,
            RideStatus.DRIVER_ARRIVED,
            RideStatus.IN_PROGRESS,
            RideStatus.COMPLETED,
        ):
            ride.transition_to(status)
        assert ride.status == RideStatus.COMPLETED

    @pytest.mark.parametrize(
        "status",
        [
            RideStatus.SEARCHING,
            RideStatus.DRIVER_ASSIGNED,
            RideStatus.DRIVER_ARRIVED,
            RideStatus.IN_PROGRESS,
        ],
    )
    def test_cancel_before_finish(self, status):
        ride = CurrentRide(status=status)
        ride.transition_to(RideStatus.CANCELLED)
        assert ride.status == RideStatus.CANCELLED

    # ── Invalid transitions ───────────────────────────────────────

    def test_idle_cannot_skip_searching(self):
        with pytest.raises(InvalidStateTransition):
            CurrentRide().transition_to(RideStatus.DRIVER_ASSIGNED)

    def test_searching_to_completed_fails(self):
        ride = CurrentRide(status=RideStatus.SEARCHING)
        with pytest.raises(InvalidStateTransition):
            ride.transition_to(RideStatus.COMPLETED)

    def test_no_going_back(self):
        ride = CurrentRide(status=RideStatus.DRIVER_ARRIVED)
        with pytest.raises(InvalidStateTransition):
            ride.transition_to(RideStatus.DRIVER_ASSIGNED)

    def test_completed_is_terminal(self):
        ride = CurrentRide(status=RideStatus.COMPLETED)
        with pytest.raises(InvalidStateTransition):
            ride.transition_to(RideStatus.CANCELLED)

    def test_cancelled_is_terminal(self):
        ride = CurrentRide(status=RideStatus.CANCELLED)
        with pytest.raises(InvalidStateTransition):
            ride.transition_to(RideStatus.SEARCHING)


class TestServerStatuses:
    def test_driver_accepted_alias(self):
        assert RideStatus.from_server("driverAccepted") == RideStatus.DRIVER_ASSIGNED

    def test_no_driver_found_alias(self):
        assert RideStatus.from_server("noDriverFound") == RideStatus.CANCELLED

    def test_plain_value(self):
        assert RideStatus.from_server("inProgress") == RideStatus.IN_PROGRESS

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            RideStatus.from_server("teleporting")


class TestDriverRideStateMachine:
    def _ride(self, status=DriverRideStatus.ACCEPTED):
        return ActiveDriverRide(
            request=fixtures.driver_ride_request_entities()[0], status=status
        )

    def test_accepted_may_skip_arriving(self):
        ride = self._ride()
        ride.transition_to(DriverRideStatus.ARRIVED)
        assert ride.status == DriverRideStatus.ARRIVED

    def test_arrived_to_in_progress(self):
        ride = self._ride(DriverRideStatus.ARRIVED)
        ride.transition_to(DriverRideStatus.IN_PROGRESS)
        assert ride.status == DriverRideStatus.IN_PROGRESS

    def test_accepted_to_completed_fails(self):
        with pytest.raises(InvalidStateTransition):
            self._ride().transition_to(DriverRideStatus.COMPLETED)

    def test_duration_zero_before_start(self):
        assert self._ride().duration_seconds == 0
