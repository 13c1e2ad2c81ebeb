from __future__ import annotations

import json
import unittest
from typing import Any, Optional
from unittest import mock

import requests

from ridebook.server_api import (
    NetworkFailure,
    ServerAPI,
    ServerAPIError,
    ServerRejected,
    Unauthenticated,
    _scrub_sensitive,
)


def _response(status_code: int, body: Any = None, *, raw: Optional[bytes] = None):
    response = requests.Response()
    response.status_code = status_code
    response._content = raw if raw is not None else json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    return response


class ServerAPITransportTest(unittest.TestCase):
    def setUp(self) -> None:
        self.http = mock.Mock(spec=requests.Session)
        self.api = ServerAPI("http://api.test/api/", 3.0, http=self.http)

    def _last_call(self):
        args, kwargs = self.http.request.call_args
        return args, kwargs

    def test_login_posts_credentials_without_auth_header(self) -> None:
        self.http.request.return_value = _response(
            200, {"token": "tok", "user": {"id": "1", "name": "Priya"}}
        )
        result = self.api.login(email=" priya@ridebook.dev ", password="pw")

        self.assertEqual(result["token"], "tok")
        args, kwargs = self._last_call()
        self.assertEqual(args, ("POST", "http://api.test/api/auth/login"))
        self.assertEqual(kwargs["json"], {"email": "priya@ridebook.dev", "password": "pw"})
        self.assertNotIn("Authorization", kwargs["headers"])
        self.assertEqual(kwargs["timeout"], 3.0)

    def test_passenger_signup_omits_vehicle_type(self) -> None:
        self.http.request.return_value = _response(
            201, {"token": "tok", "user": {"id": "1", "name": "Priya"}}
        )
        self.api.signup(
            name="Priya",
            email="p@ridebook.dev",
            password="pw",
            phone="555",
            user_type="passenger",
            vehicle_type="car",
        )
        _, kwargs = self._last_call()
        self.assertNotIn("vehicleType", kwargs["json"])
        self.assertEqual(kwargs["json"]["userType"], "passenger")

    def test_rider_signup_sends_vehicle_type(self) -> None:
        self.http.request.return_value = _response(
            201, {"token": "tok", "user": {"id": "2", "name": "Ravi"}}
        )
        self.api.signup(
            name="Ravi",
            email="r@ridebook.dev",
            password="pw",
            phone="555",
            user_type="Rider",
            vehicle_type="Bike",
        )
        _, kwargs = self._last_call()
        self.assertEqual(kwargs["json"]["vehicleType"], "bike")
        self.assertEqual(kwargs["json"]["userType"], "rider")

    def test_protected_call_sends_bearer_token(self) -> None:
        self.http.request.return_value = _response(200, {"rides": []})
        self.assertEqual(self.api.fetch_ride_history(session_token="abc"), [])
        _, kwargs = self._last_call()
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer abc")

    def test_protected_call_without_token_never_hits_network(self) -> None:
        with self.assertRaises(Unauthenticated):
            self.api.fetch_my_rides(session_token="")
        self.http.request.assert_not_called()

    def test_available_riders_filters_by_ride_type(self) -> None:
        self.http.request.return_value = _response(
            200, {"riders": [{"id": "9", "name": "Bina", "vehicleType": "bike"}]}
        )
        riders = self.api.fetch_available_riders(session_token="abc", ride_type="bike")
        self.assertEqual(riders[0]["name"], "Bina")
        args, kwargs = self._last_call()
        self.assertEqual(args[1], "http://api.test/api/riders/available")
        self.assertEqual(kwargs["params"], {"rideType": "bike"})

    def test_status_update_patches_ride(self) -> None:
        self.http.request.return_value = _response(
            200,
            {
                "ride": {
                    "id": "5",
                    "pickup": "A",
                    "dropoff": "B",
                    "rideType": "car",
                    "status": "accepted",
                }
            },
        )
        ride = self.api.update_ride_status(session_token="abc", ride_id="5", status="accepted")
        self.assertEqual(ride["status"], "accepted")
        args, kwargs = self._last_call()
        self.assertEqual(args, ("PATCH", "http://api.test/api/rides/5/status"))
        self.assertEqual(kwargs["json"], {"status": "accepted"})

    def test_current_ride_may_be_absent(self) -> None:
        self.http.request.return_value = _response(200, {"ride": None})
        self.assertIsNone(self.api.fetch_current_ride(session_token="abc"))

    def test_non_2xx_raises_server_rejected_with_message(self) -> None:
        self.http.request.return_value = _response(
            400, {"error": "You already have an active ride"}
        )
        with self.assertRaises(ServerRejected) as ctx:
            self.api.book_ride(
                session_token="abc", pickup="A", dropoff="B", ride_type="car"
            )
        self.assertEqual(str(ctx.exception), "You already have an active ride")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_non_2xx_without_message_uses_generic_text(self) -> None:
        self.http.request.return_value = _response(500, raw=b"<html>oops</html>")
        with self.assertRaises(ServerRejected) as ctx:
            self.api.fetch_available_rides(session_token="abc")
        self.assertEqual(str(ctx.exception), "Something went wrong")

    def test_401_raises_unauthenticated(self) -> None:
        self.http.request.return_value = _response(401, {"error": "Token expired"})
        with self.assertRaises(Unauthenticated) as ctx:
            self.api.verify_token(session_token="stale")
        self.assertEqual(str(ctx.exception), "Token expired")

    def test_connection_error_raises_network_failure(self) -> None:
        self.http.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(NetworkFailure):
            self.api.fetch_ride_history(session_token="abc")

    def test_malformed_success_body_raises_network_failure(self) -> None:
        self.http.request.return_value = _response(200, raw=b"not json")
        with self.assertRaises(NetworkFailure):
            self.api.fetch_ride_history(session_token="abc")

    def test_login_without_token_is_an_error(self) -> None:
        self.http.request.return_value = _response(200, {"user": {"id": "1"}})
        with self.assertRaises(ServerAPIError):
            self.api.login(email="a@b.c", password="pw")


class ScrubSensitiveTest(unittest.TestCase):
    def test_nested_secrets_are_masked(self) -> None:
        scrubbed = _scrub_sensitive(
            {"email": "a@b.c", "password": "pw", "items": [{"Token": "t"}]}
        )
        self.assertEqual(scrubbed["email"], "a@b.c")
        self.assertEqual(scrubbed["password"], "***")
        self.assertEqual(scrubbed["items"][0]["Token"], "***")


if __name__ == "__main__":
    unittest.main()
