"""
Networking helpers for the RideBook client.

`ServerAPI` speaks the RideBook REST API (JSON over HTTP, bearer token auth).
A `MockServerAPI` is also provided so that the GUI remains usable without an
actual server while keeping the same public surface: it overrides only the
transport and answers every endpoint from an in-memory store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import itertools
import secrets
from typing import Any, Dict, List, Optional

import requests

from .core.constants import DEFAULT_API_URL, DEFAULT_TIMEOUT
from .core.logger import logger
from .rides import (
    Availability,
    RideStatus,
    RideType,
    UserType,
    is_terminal,
    legal_actions,
    transition,
)

_SENSITIVE_KEYS = {"password", "token", "authorization"}
_DEFAULT_ERROR_MESSAGE = "Something went wrong"


def _scrub_sensitive(value: Any) -> Any:
    if isinstance(value, dict):
        sanitized: Dict[str, Any] = {}
        for key, val in value.items():
            if isinstance(key, str) and key.lower() in _SENSITIVE_KEYS:
                sanitized[key] = "***"
            else:
                sanitized[key] = _scrub_sensitive(val)
        return sanitized
    if isinstance(value, list):
        return [_scrub_sensitive(item) for item in value]
    return value


class ServerAPIError(RuntimeError):
    """Raised when the server reports an error or the request fails."""


class NetworkFailure(ServerAPIError):
    """The request could not complete (connection, timeout, unreadable body)."""


class ServerRejected(ServerAPIError):
    """The server answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class Unauthenticated(ServerRejected):
    """The bearer token is missing, expired or was rejected."""

    def __init__(self, message: str = "Please log in to continue.") -> None:
        super().__init__(message, status_code=401)


class BookingFailed(ServerAPIError):
    """A booking request was refused."""


class ServerAPI:
    """
    Thin wrapper around the RideBook REST API.

    Every protected call takes the caller's `session_token` explicitly; the
    API object itself holds no identity.  Non-2xx responses carry
    `{"error": "..."}` and are raised as `ServerRejected` (or
    `Unauthenticated` for 401) with that message.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http or requests.Session()

    # Auth -----------------------------------------------------------------------
    def login(self, *, email: str, password: str) -> Dict[str, Any]:
        output = self._send_request(
            "POST",
            "/auth/login",
            payload={"email": (email or "").strip(), "password": password},
            auth_required=False,
        )
        return self._coerce_auth_payload(output)

    def signup(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str,
        user_type: str,
        vehicle_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        normalized_type = (user_type or "").strip().lower()
        payload: Dict[str, Any] = {
            "name": (name or "").strip(),
            "email": (email or "").strip(),
            "password": password,
            "phone": (phone or "").strip(),
            "userType": normalized_type,
        }
        if normalized_type == UserType.RIDER.value and vehicle_type:
            payload["vehicleType"] = vehicle_type.strip().lower()
        output = self._send_request(
            "POST", "/auth/signup", payload=payload, auth_required=False
        )
        return self._coerce_auth_payload(output)

    def verify_token(self, *, session_token: str) -> Dict[str, Any]:
        output = self._send_request(
            "GET", "/auth/verify", session_token=session_token
        )
        user = output.get("user")
        if not isinstance(user, dict):
            raise ServerAPIError("Server did not include user profile details.")
        return user

    # Rides ----------------------------------------------------------------------
    def book_ride(
        self,
        *,
        session_token: str,
        pickup: str,
        dropoff: str,
        ride_type: str,
        rider_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "pickup": pickup,
            "dropoff": dropoff,
            "rideType": ride_type,
        }
        if rider_id:
            payload["riderId"] = rider_id
        output = self._send_request(
            "POST", "/rides/book", payload=payload, session_token=session_token
        )
        return self._expect_object(output, "ride")

    def fetch_ride_history(self, *, session_token: str) -> List[Dict[str, Any]]:
        output = self._send_request(
            "GET", "/rides/history", session_token=session_token
        )
        return self._expect_list(output, "rides")

    def fetch_current_ride(self, *, session_token: str) -> Optional[Dict[str, Any]]:
        output = self._send_request(
            "GET", "/rides/current", session_token=session_token
        )
        ride = output.get("ride")
        if ride is None:
            return None
        if not isinstance(ride, dict):
            raise ServerAPIError("Unexpected response for current ride.")
        return ride

    def fetch_available_rides(self, *, session_token: str) -> List[Dict[str, Any]]:
        output = self._send_request(
            "GET", "/rides/available", session_token=session_token
        )
        return self._expect_list(output, "rides")

    def fetch_my_rides(self, *, session_token: str) -> List[Dict[str, Any]]:
        output = self._send_request(
            "GET", "/rides/my-rides", session_token=session_token
        )
        return self._expect_list(output, "rides")

    def update_ride_status(
        self, *, session_token: str, ride_id: str, status: str
    ) -> Dict[str, Any]:
        output = self._send_request(
            "PATCH",
            f"/rides/{ride_id}/status",
            payload={"status": status},
            session_token=session_token,
        )
        return self._expect_object(output, "ride")

    def fetch_available_riders(
        self, *, session_token: str, ride_type: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {"rideType": ride_type} if ride_type else None
        output = self._send_request(
            "GET", "/riders/available", params=params, session_token=session_token
        )
        return self._expect_list(output, "riders")

    def update_availability(self, *, session_token: str, status: str) -> Dict[str, Any]:
        return self._send_request(
            "PATCH",
            "/riders/availability",
            payload={"status": status},
            session_token=session_token,
        )

    # Internal helpers -----------------------------------------------------------
    def _send_request(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        session_token: Optional[str] = None,
        auth_required: bool = True,
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if session_token:
            headers["Authorization"] = f"Bearer {session_token}"
        elif auth_required:
            raise Unauthenticated()
        url = f"{self.base_url}{endpoint}"
        self._log_request(method, endpoint, payload)

        try:
            response = self._http.request(
                method,
                url,
                json=payload,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(
                "HTTP error while calling %s %s: %s", method, url, exc
            )
            raise NetworkFailure(
                f"Unable to reach RideBook API at {self.base_url}: {exc}"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            if response.ok:
                raise NetworkFailure("Malformed response from server") from exc
            body = {}
        self._log_response(method, endpoint, response.status_code, body)

        if not response.ok:
            message = body.get("error") if isinstance(body, dict) else None
            message = str(message or _DEFAULT_ERROR_MESSAGE)
            if response.status_code == 401:
                raise Unauthenticated(message)
            raise ServerRejected(message, status_code=response.status_code)
        if not isinstance(body, dict):
            raise ServerAPIError(f"Unexpected response for {method} {endpoint}.")
        return body

    def _log_request(
        self, method: str, endpoint: str, payload: Optional[Dict[str, Any]]
    ) -> None:
        logger.info(
            "[Client->Server] %s %s payload=%s",
            method,
            endpoint,
            _scrub_sensitive(payload or {}),
        )

    def _log_response(
        self, method: str, endpoint: str, status_code: int, body: Any
    ) -> None:
        logger.info(
            "[Client<-Server] %s %s status=%s body=%s",
            method,
            endpoint,
            status_code,
            _scrub_sensitive(body),
        )

    def _coerce_auth_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        token = payload.get("token")
        user = payload.get("user")
        if not token or not isinstance(user, dict):
            raise ServerAPIError("Server did not return a session token and user.")
        return {"token": str(token), "user": user}

    def _expect_object(self, payload: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = payload.get(key)
        if not isinstance(value, dict):
            raise ServerAPIError(f"Server response is missing '{key}'.")
        return value

    def _expect_list(self, payload: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        value = payload.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ServerAPIError(f"Server response field '{key}' is not a list.")
        return [item for item in value if isinstance(item, dict)]


# Mock implementation -----------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MockDatabase:
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    passwords: Dict[str, str] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)
    rides: List[Dict[str, Any]] = field(default_factory=list)


class MockServerAPI(ServerAPI):
    """
    Drop-in replacement for local development and tests.

    It applies the same rules the real server does (one outstanding ride per
    passenger, legal status transitions only, rider-only endpoints) and keeps
    everything in memory.
    """

    DEMO_PASSWORD = "password"

    def __init__(self, *, seed_demo_data: bool = True) -> None:
        super().__init__(base_url="mock://ridebook")
        self.db = MockDatabase()
        self._ids = itertools.count(1)
        if seed_demo_data:
            self._seed()

    def _seed(self) -> None:
        self._create_user(
            name="Priya Passenger",
            email="passenger@ridebook.dev",
            password=self.DEMO_PASSWORD,
            phone="555-0100",
            user_type=UserType.PASSENGER.value,
        )
        self._create_user(
            name="Ravi Rider",
            email="rider@ridebook.dev",
            password=self.DEMO_PASSWORD,
            phone="555-0101",
            user_type=UserType.RIDER.value,
            vehicle_type=RideType.CAR.value,
        )
        self._create_user(
            name="Bina Biker",
            email="biker@ridebook.dev",
            password=self.DEMO_PASSWORD,
            phone="555-0102",
            user_type=UserType.RIDER.value,
            vehicle_type=RideType.BIKE.value,
        )
        for pickup, dropoff, name in (
            ("Central Station", "Airport Terminal 2", "Sam Lee"),
            ("Harbor Road", "City Library", "Ana Costa"),
        ):
            self.db.rides.append(
                self._new_ride(
                    pickup=pickup,
                    dropoff=dropoff,
                    ride_type=RideType.CAR.value,
                    customer_id="walk-in",
                    customer_name=name,
                    customer_phone="555-0199",
                )
            )

    def add_ride_request(
        self,
        *,
        pickup: str,
        dropoff: str,
        ride_type: str = RideType.CAR.value,
        customer_name: str = "Guest",
    ) -> Dict[str, Any]:
        """Simulate another passenger booking, e.g. to exercise rider polling."""
        ride = self._new_ride(
            pickup=pickup,
            dropoff=dropoff,
            ride_type=ride_type,
            customer_id="walk-in",
            customer_name=customer_name,
            customer_phone="555-0199",
        )
        self.db.rides.append(ride)
        return dict(ride)

    def _next_id(self) -> str:
        return str(next(self._ids))

    def _create_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str,
        user_type: str,
        vehicle_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        user: Dict[str, Any] = {
            "id": self._next_id(),
            "name": name,
            "email": email,
            "phone": phone,
            "userType": user_type,
        }
        if user_type == UserType.RIDER.value:
            user["vehicleType"] = vehicle_type or RideType.CAR.value
            user["availabilityStatus"] = Availability.AVAILABLE.value
        self.db.users[user["id"]] = user
        self.db.passwords[email.lower()] = password
        return user

    def _new_ride(
        self,
        *,
        pickup: str,
        dropoff: str,
        ride_type: str,
        customer_id: str,
        customer_name: str,
        customer_phone: str,
        rider_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        return {
            "id": self._next_id(),
            "pickup": pickup,
            "dropoff": dropoff,
            "rideType": ride_type,
            "status": RideStatus.REQUESTED.value,
            "customerId": customer_id,
            "customerName": customer_name,
            "customerPhone": customer_phone,
            "createdAt": _now_iso(),
            "acceptedAt": None,
            "riderId": rider_id,
        }

    def _issue_token(self, user: Dict[str, Any]) -> Dict[str, Any]:
        token = secrets.token_hex(16)
        self.db.tokens[token] = user["id"]
        return {"token": token, "user": dict(user)}

    def _user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        wanted = (email or "").strip().lower()
        for user in self.db.users.values():
            if user["email"].lower() == wanted:
                return user
        return None

    def _send_request(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        session_token: Optional[str] = None,
        auth_required: bool = True,
    ) -> Dict[str, Any]:
        body = dict(payload or {})
        self._log_request(method, endpoint, body)
        if not auth_required:
            if (method, endpoint) == ("POST", "/auth/login"):
                return self._mock_login(body)
            if (method, endpoint) == ("POST", "/auth/signup"):
                return self._mock_signup(body)
            raise ServerRejected("Route not found", status_code=404)

        user = self._authenticate(session_token)
        if (method, endpoint) == ("GET", "/auth/verify"):
            return {"user": dict(user)}
        if (method, endpoint) == ("POST", "/rides/book"):
            return self._mock_book(user, body)
        if (method, endpoint) == ("GET", "/rides/history"):
            rides = [r for r in self.db.rides if r["customerId"] == user["id"]]
            return {"rides": [dict(r) for r in reversed(rides)]}
        if (method, endpoint) == ("GET", "/rides/current"):
            current = self._current_ride(user["id"])
            return {"ride": dict(current) if current else None}
        if (method, endpoint) == ("GET", "/rides/available"):
            self._require_rider(user)
            return {"rides": [dict(r) for r in self._available_for(user)]}
        if (method, endpoint) == ("GET", "/rides/my-rides"):
            self._require_rider(user)
            mine = [r for r in self.db.rides if r["riderId"] == user["id"]]
            return {"rides": [dict(r) for r in reversed(mine)]}
        if (method, endpoint) == ("GET", "/riders/available"):
            return {"riders": self._available_riders((params or {}).get("rideType"))}
        if (method, endpoint) == ("PATCH", "/riders/availability"):
            return self._mock_availability(user, body)
        if method == "PATCH" and endpoint.startswith("/rides/") and endpoint.endswith(
            "/status"
        ):
            ride_id = endpoint[len("/rides/") : -len("/status")]
            return self._mock_status(user, ride_id, body)
        raise ServerRejected("Route not found", status_code=404)

    def _authenticate(self, session_token: Optional[str]) -> Dict[str, Any]:
        if not session_token:
            raise Unauthenticated()
        user_id = self.db.tokens.get(session_token)
        if user_id is None or user_id not in self.db.users:
            raise Unauthenticated("Invalid or expired token")
        return self.db.users[user_id]

    def _require_rider(self, user: Dict[str, Any]) -> None:
        if user.get("userType") != UserType.RIDER.value:
            raise ServerRejected("Only riders can access this resource", status_code=403)

    def _mock_login(self, body: Dict[str, Any]) -> Dict[str, Any]:
        user = self._user_by_email(body.get("email", ""))
        if not user or self.db.passwords.get(user["email"].lower()) != body.get(
            "password"
        ):
            raise ServerRejected("Invalid email or password", status_code=400)
        return self._issue_token(user)

    def _mock_signup(self, body: Dict[str, Any]) -> Dict[str, Any]:
        required = ("name", "email", "password", "phone", "userType")
        missing = [key for key in required if not str(body.get(key) or "").strip()]
        if missing:
            raise ServerRejected(
                f"Missing required fields: {', '.join(missing)}", status_code=400
            )
        if self._user_by_email(body["email"]):
            raise ServerRejected("User already exists", status_code=400)
        if body["userType"] not in {t.value for t in UserType}:
            raise ServerRejected("Invalid user type", status_code=400)
        if body["userType"] == UserType.RIDER.value and not body.get("vehicleType"):
            raise ServerRejected("Vehicle type is required for riders", status_code=400)
        user = self._create_user(
            name=body["name"],
            email=body["email"],
            password=body["password"],
            phone=body["phone"],
            user_type=body["userType"],
            vehicle_type=body.get("vehicleType"),
        )
        return self._issue_token(user)

    def _current_ride(self, user_id: str) -> Optional[Dict[str, Any]]:
        for ride in reversed(self.db.rides):
            if ride["customerId"] == user_id and not is_terminal(
                RideStatus(ride["status"])
            ):
                return ride
        return None

    def _mock_book(self, user: Dict[str, Any], body: Dict[str, Any]) -> Dict[str, Any]:
        if user.get("userType") != UserType.PASSENGER.value:
            raise ServerRejected("Only passengers can book rides", status_code=403)
        pickup = str(body.get("pickup") or "").strip()
        dropoff = str(body.get("dropoff") or "").strip()
        ride_type = str(body.get("rideType") or "")
        if not pickup or not dropoff:
            raise ServerRejected("Pickup and dropoff are required", status_code=400)
        if ride_type not in {t.value for t in RideType}:
            raise ServerRejected("Invalid ride type", status_code=400)
        if self._current_ride(user["id"]):
            raise ServerRejected("You already have an active ride", status_code=400)
        ride = self._new_ride(
            pickup=pickup,
            dropoff=dropoff,
            ride_type=ride_type,
            customer_id=user["id"],
            customer_name=user["name"],
            customer_phone=user.get("phone", ""),
            rider_id=body.get("riderId"),
        )
        self.db.rides.append(ride)
        return {"ride": dict(ride)}

    def _available_for(self, rider: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            ride
            for ride in self.db.rides
            if ride["status"] == RideStatus.REQUESTED.value
            and ride["rideType"] == rider.get("vehicleType")
            and ride["riderId"] in (None, rider["id"])
        ]

    def _available_riders(self, ride_type: Optional[str]) -> List[Dict[str, Any]]:
        riders = []
        for user in self.db.users.values():
            if user.get("userType") != UserType.RIDER.value:
                continue
            if user.get("availabilityStatus") != Availability.AVAILABLE.value:
                continue
            if ride_type and user.get("vehicleType") != ride_type:
                continue
            riders.append(
                {"id": user["id"], "name": user["name"], "vehicleType": user["vehicleType"]}
            )
        return riders

    def _mock_availability(
        self, user: Dict[str, Any], body: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._require_rider(user)
        status = str(body.get("status") or "")
        if status not in {a.value for a in Availability}:
            raise ServerRejected("Invalid availability status", status_code=400)
        user["availabilityStatus"] = status
        return {"message": "Availability updated", "status": status}

    def _mock_status(
        self, user: Dict[str, Any], ride_id: str, body: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._require_rider(user)
        ride = next((r for r in self.db.rides if r["id"] == ride_id), None)
        if ride is None:
            raise ServerRejected("Ride not found", status_code=404)
        if ride["riderId"] not in (None, user["id"]):
            raise ServerRejected("Ride is assigned to another rider", status_code=403)
        current = RideStatus(ride["status"])
        try:
            target = RideStatus(str(body.get("status") or ""))
        except ValueError:
            raise ServerRejected("Invalid status", status_code=400) from None
        matching = [a for a in legal_actions(current) if transition(current, a) is target]
        if not matching:
            raise ServerRejected(
                f"Invalid status transition from {current.value} to {target.value}",
                status_code=400,
            )
        ride["status"] = target.value
        if target is RideStatus.ACCEPTED:
            ride["riderId"] = user["id"]
            ride["acceptedAt"] = _now_iso()
        return {"ride": dict(ride)}
