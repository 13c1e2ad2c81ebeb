from .auth_page import AuthPage
from .passenger_page import PassengerPage
from .rider_page import RiderPage

__all__ = ["AuthPage", "PassengerPage", "RiderPage"]
