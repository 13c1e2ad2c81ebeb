"""
Timer-driven refresh for the dashboards.

`RefreshPoller` is the explicit handle a page owns: the page starts it when it
becomes visible and stops it when hidden or torn down.  Stopping only halts
future ticks; a request that is already running finishes normally.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, List, Optional, Set

from PyQt6.QtCore import QObject, QTimer

from .rides import Ride


class RefreshMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"

    @property
    def is_manual(self) -> bool:
        return self is RefreshMode.MANUAL


class RefreshPoller(QObject):
    def __init__(
        self,
        interval_ms: int,
        callback: Callable[[RefreshMode], None],
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._callback = callback
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.setSingleShot(False)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def start(self, *, immediate: bool = False) -> None:
        if not self._timer.isActive():
            self._timer.start()
        if immediate:
            self._callback(RefreshMode.AUTOMATIC)

    def stop(self) -> None:
        self._timer.stop()

    def is_active(self) -> bool:
        return self._timer.isActive()

    def trigger(self, mode: RefreshMode = RefreshMode.MANUAL) -> None:
        """Run a refresh now, outside the timer schedule."""
        self._callback(mode)

    def _on_timeout(self) -> None:
        self._callback(RefreshMode.AUTOMATIC)


def diff_new_ids(previous: Iterable[str], current: Iterable[str]) -> List[str]:
    known = set(previous)
    return [ride_id for ride_id in current if ride_id not in known]


def new_rides_message(count: int) -> str:
    noun = "ride request" if count == 1 else "ride requests"
    return f"{count} new {noun}"


class NewRideTracker:
    """
    Remembers the last available-rides snapshot and reports additions.

    The first snapshot only seeds the tracker, so opening the dashboard does
    not announce every ride that was already waiting.
    """

    def __init__(self) -> None:
        self._known: Optional[Set[str]] = None

    def reset(self) -> None:
        self._known = None

    def update(self, rides: Iterable[Ride]) -> List[str]:
        ids = [ride.id for ride in rides]
        if self._known is None:
            self._known = set(ids)
            return []
        new_ids = diff_new_ids(self._known, ids)
        self._known = set(ids)
        return new_ids

    def notification_for(self, rides: Iterable[Ride]) -> Optional[str]:
        """Update the snapshot and return one aggregated message, if any."""
        new_ids = self.update(rides)
        if not new_ids:
            return None
        return new_rides_message(len(new_ids))
