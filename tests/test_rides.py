from __future__ import annotations

import unittest

from ridebook.rides import (
    Availability,
    AvailableRider,
    InvalidTransition,
    PayloadError,
    Ride,
    RideAction,
    RideStatus,
    RideType,
    User,
    UserType,
    action_label,
    availability_color,
    is_terminal,
    legal_actions,
    ride_type_glyph,
    ride_type_label,
    status_colors,
    status_label,
    transition,
)


def _ride_payload(**overrides):
    payload = {
        "_id": "abc123",
        "pickup": "Central Station",
        "dropoff": "Airport",
        "rideType": "car",
        "status": "requested",
        "customerName": "Sam Lee",
        "customerPhone": "555-0199",
        "createdAt": "2024-05-01T10:00:00Z",
    }
    payload.update(overrides)
    return payload


class RideStateMachineTest(unittest.TestCase):
    def test_happy_path_reaches_completed(self) -> None:
        status = RideStatus.REQUESTED
        for action in (RideAction.ACCEPT, RideAction.START, RideAction.COMPLETE):
            status = transition(status, action)
        self.assertIs(status, RideStatus.COMPLETED)

    def test_requested_can_be_rejected(self) -> None:
        self.assertIs(
            transition(RideStatus.REQUESTED, RideAction.REJECT), RideStatus.REJECTED
        )

    def test_legal_actions_per_status(self) -> None:
        self.assertEqual(
            legal_actions(RideStatus.REQUESTED), [RideAction.ACCEPT, RideAction.REJECT]
        )
        self.assertEqual(legal_actions(RideStatus.ACCEPTED), [RideAction.START])
        self.assertEqual(legal_actions(RideStatus.IN_PROGRESS), [RideAction.COMPLETE])
        self.assertEqual(legal_actions(RideStatus.COMPLETED), [])
        self.assertEqual(legal_actions(RideStatus.REJECTED), [])

    def test_terminal_statuses_accept_no_actions(self) -> None:
        for status in (RideStatus.COMPLETED, RideStatus.REJECTED):
            self.assertTrue(is_terminal(status))
            for action in RideAction:
                with self.assertRaises(InvalidTransition):
                    transition(status, action)

    def test_non_terminal_statuses(self) -> None:
        for status in (RideStatus.REQUESTED, RideStatus.ACCEPTED, RideStatus.IN_PROGRESS):
            self.assertFalse(is_terminal(status))

    def test_invalid_transition_carries_context(self) -> None:
        with self.assertRaises(InvalidTransition) as ctx:
            transition(RideStatus.ACCEPTED, RideAction.COMPLETE)
        self.assertIs(ctx.exception.status, RideStatus.ACCEPTED)
        self.assertIs(ctx.exception.action, RideAction.COMPLETE)
        self.assertIn("complete", str(ctx.exception))

    def test_cannot_skip_start(self) -> None:
        with self.assertRaises(InvalidTransition):
            transition(RideStatus.REQUESTED, RideAction.START)


class PresentationTest(unittest.TestCase):
    def test_every_variant_has_presentation(self) -> None:
        for ride_type in RideType:
            self.assertTrue(ride_type_label(ride_type))
            self.assertTrue(ride_type_glyph(ride_type))
        for status in RideStatus:
            background, foreground = status_colors(status)
            self.assertTrue(background.startswith("#"))
            self.assertTrue(foreground.startswith("#"))
        for action in RideAction:
            self.assertTrue(action_label(action))
        for availability in Availability:
            self.assertTrue(availability_color(availability).startswith("#"))

    def test_status_label(self) -> None:
        self.assertEqual(status_label(RideStatus.IN_PROGRESS), "IN PROGRESS")
        self.assertEqual(status_label(RideStatus.REQUESTED), "REQUESTED")


class PayloadParsingTest(unittest.TestCase):
    def test_ride_from_payload(self) -> None:
        ride = Ride.from_payload(_ride_payload(riderId={"_id": "r9", "name": "Ravi"}))
        self.assertEqual(ride.id, "abc123")
        self.assertIs(ride.ride_type, RideType.CAR)
        self.assertIs(ride.status, RideStatus.REQUESTED)
        self.assertEqual(ride.customer_name, "Sam Lee")
        self.assertEqual(ride.rider_id, "r9")
        self.assertFalse(ride.is_terminal)
        self.assertEqual(ride.legal_actions(), [RideAction.ACCEPT, RideAction.REJECT])

    def test_ride_with_unknown_status_is_rejected(self) -> None:
        with self.assertRaises(PayloadError):
            Ride.from_payload(_ride_payload(status="teleported"))

    def test_ride_without_id_is_rejected(self) -> None:
        payload = _ride_payload()
        del payload["_id"]
        with self.assertRaises(PayloadError):
            Ride.from_payload(payload)

    def test_user_from_payload(self) -> None:
        user = User.from_payload(
            {
                "id": 7,
                "name": "Ravi",
                "email": "rider@ridebook.dev",
                "userType": "rider",
                "vehicleType": "bike",
                "availabilityStatus": "busy",
            }
        )
        self.assertEqual(user.id, "7")
        self.assertTrue(user.is_rider)
        self.assertIs(user.user_type, UserType.RIDER)
        self.assertIs(user.vehicle_type, RideType.BIKE)
        self.assertIs(user.availability, Availability.BUSY)

    def test_passenger_defaults(self) -> None:
        user = User.from_payload({"id": "1", "name": "Priya"})
        self.assertFalse(user.is_rider)
        self.assertIsNone(user.vehicle_type)

    def test_available_rider_from_payload(self) -> None:
        rider = AvailableRider.from_payload(
            {"_id": "r1", "name": "Bina", "vehicleType": "rickshaw"}
        )
        self.assertEqual(rider.id, "r1")
        self.assertIs(rider.vehicle_type, RideType.RICKSHAW)


if __name__ == "__main__":
    unittest.main()
