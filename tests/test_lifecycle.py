from __future__ import annotations

import unittest
from unittest import mock

from ridebook.lifecycle import RideLifecycleClient
from ridebook.rides import (
    Availability,
    InvalidTransition,
    Ride,
    RideAction,
    RideStatus,
    RideType,
)
from ridebook.server_api import (
    BookingFailed,
    MockServerAPI,
    ServerAPIError,
    ServerRejected,
    Unauthenticated,
)
from ridebook.session import SessionManager, TokenCookieStore


class LifecycleTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.api = MockServerAPI()
        self.client = RideLifecycleClient(self.api)
        sessions = SessionManager(self.api, TokenCookieStore())
        self.passenger = sessions.login("passenger@ridebook.dev", MockServerAPI.DEMO_PASSWORD)
        self.rider = sessions.login("rider@ridebook.dev", MockServerAPI.DEMO_PASSWORD)

    def _book(self, **overrides) -> Ride:
        kwargs = {"pickup": "Harbor", "dropoff": "Museum", "ride_type": "car"}
        kwargs.update(overrides)
        return self.client.book_ride(self.passenger, **kwargs)


class BookingTest(LifecycleTestCase):
    def test_booking_returns_requested_ride(self) -> None:
        ride = self._book()
        self.assertIs(ride.status, RideStatus.REQUESTED)
        self.assertIs(ride.ride_type, RideType.CAR)
        self.assertEqual(self.client.fetch_current_ride(self.passenger), ride)
        self.assertEqual(self.client.fetch_history(self.passenger)[0].id, ride.id)

    def test_booking_with_chosen_rider(self) -> None:
        ride = self._book(rider_id=self.rider.user.id)
        self.assertEqual(ride.rider_id, self.rider.user.id)

    def test_missing_locations_fail_locally(self) -> None:
        with mock.patch.object(self.api, "book_ride") as book:
            with self.assertRaises(BookingFailed):
                self._book(pickup="  ")
            book.assert_not_called()

    def test_missing_ride_type_fails_locally(self) -> None:
        with self.assertRaises(BookingFailed) as ctx:
            self._book(ride_type=None)
        self.assertIn("ride type", str(ctx.exception))

    def test_outstanding_ride_blocks_booking(self) -> None:
        current = self._book()
        with mock.patch.object(self.api, "book_ride") as book:
            with self.assertRaises(BookingFailed):
                self._book(current_ride=current)
            book.assert_not_called()

    def test_terminal_current_ride_does_not_block(self) -> None:
        finished = Ride(
            id="x",
            pickup="A",
            dropoff="B",
            ride_type=RideType.BIKE,
            status=RideStatus.COMPLETED,
        )
        self.assertIs(self._book(current_ride=finished).status, RideStatus.REQUESTED)

    def test_server_refusal_becomes_booking_failed(self) -> None:
        self._book()
        with self.assertRaises(BookingFailed) as ctx:
            self._book()
        self.assertEqual(str(ctx.exception), "You already have an active ride")
        self.assertIsInstance(ctx.exception.__cause__, ServerRejected)

    def test_unauthenticated_is_not_wrapped(self) -> None:
        self.api.db.tokens.clear()
        with self.assertRaises(Unauthenticated):
            self._book()

    def test_available_riders_by_type(self) -> None:
        cars = self.client.fetch_available_riders(self.passenger, RideType.CAR)
        self.assertEqual([r.name for r in cars], ["Ravi Rider"])
        rickshaws = self.client.fetch_available_riders(self.passenger, RideType.RICKSHAW)
        self.assertEqual(rickshaws, [])


class RideActionTest(LifecycleTestCase):
    def test_full_lifecycle(self) -> None:
        ride = self._book()
        ride = self.client.apply_action(self.rider, ride, RideAction.ACCEPT)
        self.assertIs(ride.status, RideStatus.ACCEPTED)
        self.assertEqual(ride.rider_id, self.rider.user.id)
        self.assertIsNotNone(ride.accepted_at)
        ride = self.client.apply_action(self.rider, ride, RideAction.START)
        ride = self.client.apply_action(self.rider, ride, RideAction.COMPLETE)
        self.assertIs(ride.status, RideStatus.COMPLETED)
        self.assertIsNone(self.client.fetch_current_ride(self.passenger))

    def test_illegal_action_never_reaches_server(self) -> None:
        ride = self._book()
        with mock.patch.object(self.api, "update_ride_status") as update:
            with self.assertRaises(InvalidTransition):
                self.client.apply_action(self.rider, ride, RideAction.COMPLETE)
            update.assert_not_called()

    def test_stale_local_status_is_rejected_by_server(self) -> None:
        ride = self._book()
        self.client.apply_action(self.rider, ride, RideAction.REJECT)
        with self.assertRaises(ServerRejected):
            self.client.apply_action(self.rider, ride, RideAction.ACCEPT)

    def test_rider_lists(self) -> None:
        available = self.client.fetch_available_rides(self.rider)
        self.assertEqual(len(available), 2)
        self.client.apply_action(self.rider, available[0], RideAction.ACCEPT)
        self.assertEqual(len(self.client.fetch_available_rides(self.rider)), 1)
        mine = self.client.fetch_my_rides(self.rider)
        self.assertEqual([r.id for r in mine], [available[0].id])

    def test_passenger_cannot_use_rider_endpoints(self) -> None:
        with self.assertRaises(ServerRejected) as ctx:
            self.client.fetch_available_rides(self.passenger)
        self.assertEqual(ctx.exception.status_code, 403)

    def test_set_availability(self) -> None:
        result = self.client.set_availability(self.rider, Availability.BUSY)
        self.assertIs(result, Availability.BUSY)
        self.assertEqual(
            self.client.fetch_available_riders(self.passenger, RideType.CAR), []
        )

    def test_malformed_ride_payload_surfaces_as_api_error(self) -> None:
        with mock.patch.object(
            self.api, "fetch_ride_history", return_value=[{"id": "1", "status": "??"}]
        ):
            with self.assertRaises(ServerAPIError):
                self.client.fetch_history(self.passenger)


if __name__ == "__main__":
    unittest.main()
