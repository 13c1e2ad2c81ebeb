from __future__ import annotations

import unittest

from PyQt6.QtCore import QCoreApplication

from ridebook.polling import (
    NewRideTracker,
    RefreshMode,
    RefreshPoller,
    diff_new_ids,
    new_rides_message,
)
from ridebook.rides import Ride, RideStatus, RideType


def _rides(*ids: str):
    return [
        Ride(
            id=ride_id,
            pickup="A",
            dropoff="B",
            ride_type=RideType.CAR,
            status=RideStatus.REQUESTED,
        )
        for ride_id in ids
    ]


class NewRideDiffTest(unittest.TestCase):
    def test_diff_reports_only_additions(self) -> None:
        self.assertEqual(diff_new_ids(["1", "2", "3"], ["1", "2", "3", "4", "5"]), ["4", "5"])
        self.assertEqual(diff_new_ids(["1", "2"], ["2"]), [])

    def test_message_pluralisation(self) -> None:
        self.assertEqual(new_rides_message(1), "1 new ride request")
        self.assertEqual(new_rides_message(2), "2 new ride requests")

    def test_tracker_emits_one_aggregated_message(self) -> None:
        tracker = NewRideTracker()
        self.assertIsNone(tracker.notification_for(_rides("1", "2", "3")))
        self.assertEqual(
            tracker.notification_for(_rides("1", "2", "3", "4", "5")),
            "2 new ride requests",
        )

    def test_first_snapshot_only_seeds(self) -> None:
        tracker = NewRideTracker()
        self.assertEqual(tracker.update(_rides("1", "2")), [])
        self.assertEqual(tracker.update(_rides("2", "3")), ["3"])

    def test_removed_then_readded_ride_counts_again(self) -> None:
        tracker = NewRideTracker()
        tracker.update(_rides("1", "2"))
        tracker.update(_rides("2"))
        self.assertEqual(tracker.update(_rides("1", "2")), ["1"])

    def test_reset_starts_over(self) -> None:
        tracker = NewRideTracker()
        tracker.update(_rides("1"))
        tracker.reset()
        self.assertEqual(tracker.update(_rides("1", "2")), [])


class RefreshPollerTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self) -> None:
        self.calls = []
        self.poller = RefreshPoller(60_000, self.calls.append)

    def tearDown(self) -> None:
        self.poller.stop()

    def test_start_and_stop(self) -> None:
        self.assertFalse(self.poller.is_active())
        self.poller.start()
        self.assertTrue(self.poller.is_active())
        self.assertEqual(self.calls, [])
        self.poller.stop()
        self.assertFalse(self.poller.is_active())

    def test_immediate_start_runs_automatic_refresh(self) -> None:
        self.poller.start(immediate=True)
        self.assertEqual(self.calls, [RefreshMode.AUTOMATIC])

    def test_trigger_defaults_to_manual(self) -> None:
        self.poller.trigger()
        self.poller.trigger(RefreshMode.AUTOMATIC)
        self.assertEqual(self.calls, [RefreshMode.MANUAL, RefreshMode.AUTOMATIC])
        self.assertFalse(self.poller.is_active())

    def test_timer_ticks_are_automatic(self) -> None:
        self.poller._on_timeout()
        self.assertEqual(self.calls, [RefreshMode.AUTOMATIC])

    def test_interval(self) -> None:
        self.assertEqual(self.poller.interval_ms, 60_000)
        self.assertTrue(RefreshMode.MANUAL.is_manual)
        self.assertFalse(RefreshMode.AUTOMATIC.is_manual)


if __name__ == "__main__":
    unittest.main()
