"""
Ride domain types for the RideBook client.

Rides move along one of two paths:

    requested -> accepted -> in-progress -> completed
    requested -> rejected

`transition` is the single place that decides whether an action is legal for
a status.  The server remains authoritative; the client uses these rules to
decide which actions to offer and re-fetches after every mutation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class RideType(str, Enum):
    BIKE = "bike"
    CAR = "car"
    RICKSHAW = "rickshaw"


class RideStatus(str, Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class RideAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    START = "start"
    COMPLETE = "complete"


class Availability(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class UserType(str, Enum):
    PASSENGER = "passenger"
    RIDER = "rider"


class InvalidTransition(ValueError):
    """Raised when an action is not legal for a ride's current status."""

    def __init__(self, status: RideStatus, action: RideAction) -> None:
        super().__init__(
            f"Cannot {action.value} a ride that is {status.value.replace('-', ' ')}."
        )
        self.status = status
        self.action = action


_TRANSITIONS: Dict[RideStatus, Dict[RideAction, RideStatus]] = {
    RideStatus.REQUESTED: {
        RideAction.ACCEPT: RideStatus.ACCEPTED,
        RideAction.REJECT: RideStatus.REJECTED,
    },
    RideStatus.ACCEPTED: {RideAction.START: RideStatus.IN_PROGRESS},
    RideStatus.IN_PROGRESS: {RideAction.COMPLETE: RideStatus.COMPLETED},
    RideStatus.COMPLETED: {},
    RideStatus.REJECTED: {},
}


def legal_actions(status: RideStatus) -> List[RideAction]:
    return list(_TRANSITIONS[status])


def transition(status: RideStatus, action: RideAction) -> RideStatus:
    target = _TRANSITIONS[status].get(action)
    if target is None:
        raise InvalidTransition(status, action)
    return target


def is_terminal(status: RideStatus) -> bool:
    return not _TRANSITIONS[status]


# Presentation dispatch ---------------------------------------------------------
# Each helper handles every member; an unhandled member raises.


def ride_type_label(ride_type: RideType) -> str:
    if ride_type is RideType.BIKE:
        return "Bike"
    if ride_type is RideType.CAR:
        return "Car"
    if ride_type is RideType.RICKSHAW:
        return "Rickshaw"
    raise AssertionError(f"Unhandled ride type: {ride_type!r}")


def ride_type_glyph(ride_type: RideType) -> str:
    if ride_type is RideType.BIKE:
        return "\U0001F6B2"
    if ride_type is RideType.CAR:
        return "\U0001F697"
    if ride_type is RideType.RICKSHAW:
        return "\U0001F6FA"
    raise AssertionError(f"Unhandled ride type: {ride_type!r}")


def status_label(status: RideStatus) -> str:
    return status.value.replace("-", " ").upper()


def status_colors(status: RideStatus) -> Tuple[str, str]:
    """Return (background, foreground) colours for a status badge."""
    if status is RideStatus.REQUESTED:
        return "#FEF9C3", "#854D0E"
    if status is RideStatus.ACCEPTED:
        return "#DBEAFE", "#1E40AF"
    if status is RideStatus.IN_PROGRESS:
        return "#DCFCE7", "#166534"
    if status is RideStatus.COMPLETED:
        return "#F3F4F6", "#1F2937"
    if status is RideStatus.REJECTED:
        return "#FEE2E2", "#991B1B"
    raise AssertionError(f"Unhandled ride status: {status!r}")


def action_label(action: RideAction) -> str:
    if action is RideAction.ACCEPT:
        return "Accept"
    if action is RideAction.REJECT:
        return "Reject"
    if action is RideAction.START:
        return "Start ride"
    if action is RideAction.COMPLETE:
        return "Complete"
    raise AssertionError(f"Unhandled ride action: {action!r}")


def availability_color(availability: Availability) -> str:
    if availability is Availability.AVAILABLE:
        return "#22C55E"
    if availability is Availability.BUSY:
        return "#EAB308"
    if availability is Availability.OFFLINE:
        return "#EF4444"
    raise AssertionError(f"Unhandled availability: {availability!r}")


# Payload models ----------------------------------------------------------------


class PayloadError(ValueError):
    """Raised when a server payload cannot be mapped onto a domain type."""


def _enum_value(enum_cls: Any, raw: Any, field_name: str) -> Any:
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as exc:
        raise PayloadError(f"Unexpected {field_name} {raw!r}") from exc


def _identifier(payload: Dict[str, Any]) -> str:
    raw = payload.get("id")
    if raw is None:
        raw = payload.get("_id")
    if raw is None:
        raise PayloadError("Payload is missing an id")
    return str(raw)


def _reference(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        inner = value.get("id") or value.get("_id")
        return str(inner) if inner is not None else None
    return str(value)


@dataclass(frozen=True)
class Ride:
    id: str
    pickup: str
    dropoff: str
    ride_type: RideType
    status: RideStatus
    customer_name: str = ""
    customer_phone: str = ""
    created_at: Optional[str] = None
    accepted_at: Optional[str] = None
    rider_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Ride":
        if not isinstance(payload, dict):
            raise PayloadError("Ride payload must be an object")
        return cls(
            id=_identifier(payload),
            pickup=str(payload.get("pickup") or ""),
            dropoff=str(payload.get("dropoff") or ""),
            ride_type=_enum_value(RideType, payload.get("rideType"), "ride type"),
            status=_enum_value(RideStatus, payload.get("status"), "ride status"),
            customer_name=str(payload.get("customerName") or ""),
            customer_phone=str(payload.get("customerPhone") or ""),
            created_at=payload.get("createdAt"),
            accepted_at=payload.get("acceptedAt"),
            rider_id=_reference(payload.get("riderId") or payload.get("rider")),
        )

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def legal_actions(self) -> List[RideAction]:
        return legal_actions(self.status)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    user_type: UserType = UserType.PASSENGER
    vehicle_type: Optional[RideType] = None
    availability: Optional[Availability] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "User":
        if not isinstance(payload, dict):
            raise PayloadError("User payload must be an object")
        vehicle = payload.get("vehicleType")
        availability = payload.get("availabilityStatus")
        return cls(
            id=_identifier(payload),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
            phone=str(payload.get("phone") or ""),
            user_type=_enum_value(
                UserType, payload.get("userType") or "passenger", "user type"
            ),
            vehicle_type=(
                _enum_value(RideType, vehicle, "vehicle type") if vehicle else None
            ),
            availability=(
                _enum_value(Availability, availability, "availability")
                if availability
                else None
            ),
        )

    @property
    def is_rider(self) -> bool:
        return self.user_type is UserType.RIDER


@dataclass(frozen=True)
class AvailableRider:
    id: str
    name: str
    vehicle_type: Optional[RideType] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AvailableRider":
        if not isinstance(payload, dict):
            raise PayloadError("Rider payload must be an object")
        vehicle = payload.get("vehicleType")
        return cls(
            id=_identifier(payload),
            name=str(payload.get("name") or "Rider"),
            vehicle_type=(
                _enum_value(RideType, vehicle, "vehicle type") if vehicle else None
            ),
        )


__all__ = [
    "Availability",
    "AvailableRider",
    "InvalidTransition",
    "PayloadError",
    "Ride",
    "RideAction",
    "RideStatus",
    "RideType",
    "User",
    "UserType",
    "action_label",
    "availability_color",
    "is_terminal",
    "legal_actions",
    "ride_type_glyph",
    "ride_type_label",
    "status_colors",
    "status_label",
    "transition",
]
