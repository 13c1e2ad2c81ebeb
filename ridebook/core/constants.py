from __future__ import annotations

from typing import List, Tuple

from ..rides import Availability, RideType, UserType, ride_type_label

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 8.0

# Poll intervals (milliseconds)
PASSENGER_POLL_INTERVAL_MS = 5000
RIDER_POLL_INTERVAL_MS = 30000

TOKEN_COOKIE_NAME = "token"
RECENT_RIDES_LIMIT = 5

RIDE_TYPE_CHOICES: List[Tuple[str, str]] = [
    (ride_type.value, ride_type_label(ride_type)) for ride_type in RideType
]
AVAILABILITY_CHOICES: List[Tuple[str, str]] = [
    (status.value, status.value.title()) for status in Availability
]
USER_TYPE_CHOICES: List[Tuple[str, str]] = [
    (UserType.PASSENGER.value, "Passenger"),
    (UserType.RIDER.value, "Rider"),
]

# Styling snippets
BOOK_BUTTON_STYLE = """
QPushButton#bookRideAction {
    padding: 10px 18px;
    border-radius: 8px;
    background-color: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                                      stop:0 #4C51BF, stop:1 #667EEA);
    color: #ffffff;
    font-weight: 600;
    border: 0px;
}
QPushButton#bookRideAction:hover {
    background-color: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                                      stop:0 #5A67D8, stop:1 #5465d9);
}
QPushButton#bookRideAction:disabled {
    background-color: #CBD5E0;
    color: #4A5568;
}
"""

RIDE_ACTION_BUTTON_STYLE = """
QPushButton#rideActionBtn {
    padding: 4px 10px;
    border-radius: 6px;
    border: 1px solid #4C51BF;
    background-color: #EEF1FF;
    color: #1D2671;
}
QPushButton#rideActionBtn:hover {
    background-color: #E2E7FF;
}
QPushButton#rideActionBtn[destructive="true"] {
    border: 1px solid #DC2626;
    background-color: #FEE2E2;
    color: #991B1B;
}
"""
