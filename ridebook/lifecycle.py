"""Ride lifecycle client: booking, ride lists and status transitions."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .core.logger import logger
from .rides import (
    Availability,
    AvailableRider,
    PayloadError,
    Ride,
    RideAction,
    RideType,
    transition,
)
from .server_api import BookingFailed, ServerAPI, ServerAPIError, Unauthenticated
from .session import Session


def _ride(payload: Dict[str, Any]) -> Ride:
    try:
        return Ride.from_payload(payload)
    except PayloadError as exc:
        raise ServerAPIError(str(exc)) from exc


def _rides(payloads: Iterable[Dict[str, Any]]) -> List[Ride]:
    return [_ride(payload) for payload in payloads]


class RideLifecycleClient:
    """
    Issues every ride-related request on behalf of a `Session`.

    Mutations never update local state optimistically: callers receive the
    server's copy of the ride and are expected to re-fetch their lists.
    """

    def __init__(self, api: ServerAPI) -> None:
        self.api = api

    # Passenger ------------------------------------------------------------------
    def book_ride(
        self,
        session: Session,
        *,
        pickup: str,
        dropoff: str,
        ride_type: Optional[str],
        rider_id: Optional[str] = None,
        current_ride: Optional[Ride] = None,
    ) -> Ride:
        pickup = (pickup or "").strip()
        dropoff = (dropoff or "").strip()
        if not pickup or not dropoff:
            raise BookingFailed("Pickup and drop-off locations are required.")
        try:
            chosen_type = RideType(str(ride_type or "").strip().lower())
        except ValueError:
            raise BookingFailed("Please choose a ride type.") from None
        if current_ride is not None and not current_ride.is_terminal:
            raise BookingFailed("You already have a ride in progress.")
        try:
            payload = self.api.book_ride(
                session_token=session.token,
                pickup=pickup,
                dropoff=dropoff,
                ride_type=chosen_type.value,
                rider_id=rider_id,
            )
        except Unauthenticated:
            raise
        except ServerAPIError as exc:
            logger.error("Booking failed for user_id=%s: %s", session.user.id, exc)
            raise BookingFailed(str(exc)) from exc
        ride = _ride(payload)
        logger.info("Booked ride id=%s type=%s", ride.id, ride.ride_type.value)
        return ride

    def fetch_history(self, session: Session) -> List[Ride]:
        return _rides(self.api.fetch_ride_history(session_token=session.token))

    def fetch_current_ride(self, session: Session) -> Optional[Ride]:
        payload = self.api.fetch_current_ride(session_token=session.token)
        return _ride(payload) if payload else None

    def fetch_available_riders(
        self, session: Session, ride_type: RideType
    ) -> List[AvailableRider]:
        payloads = self.api.fetch_available_riders(
            session_token=session.token, ride_type=ride_type.value
        )
        try:
            return [AvailableRider.from_payload(item) for item in payloads]
        except PayloadError as exc:
            raise ServerAPIError(str(exc)) from exc

    # Rider ----------------------------------------------------------------------
    def fetch_available_rides(self, session: Session) -> List[Ride]:
        return _rides(self.api.fetch_available_rides(session_token=session.token))

    def fetch_my_rides(self, session: Session) -> List[Ride]:
        return _rides(self.api.fetch_my_rides(session_token=session.token))

    def apply_action(self, session: Session, ride: Ride, action: RideAction) -> Ride:
        """
        Ask the server to move `ride` along its lifecycle.

        Raises `InvalidTransition` without contacting the server when the
        action is not legal for the ride's last known status.
        """
        target = transition(ride.status, action)
        logger.info(
            "Ride id=%s action=%s (%s -> %s)",
            ride.id,
            action.value,
            ride.status.value,
            target.value,
        )
        payload = self.api.update_ride_status(
            session_token=session.token, ride_id=ride.id, status=target.value
        )
        return _ride(payload)

    def set_availability(self, session: Session, availability: Availability) -> Availability:
        self.api.update_availability(
            session_token=session.token, status=availability.value
        )
        logger.info(
            "Rider user_id=%s availability=%s", session.user.id, availability.value
        )
        return availability
