from .config import ClientSettings, load_env_files
from .constants import (
    AVAILABILITY_CHOICES,
    BOOK_BUTTON_STYLE,
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    PASSENGER_POLL_INTERVAL_MS,
    RECENT_RIDES_LIMIT,
    RIDE_ACTION_BUTTON_STYLE,
    RIDE_TYPE_CHOICES,
    RIDER_POLL_INTERVAL_MS,
    TOKEN_COOKIE_NAME,
    USER_TYPE_CHOICES,
)
from .logger import logger
from .theme import THEME_PALETTES, build_stylesheet
from .utils import (
    format_timestamp,
    parse_timestamp,
    ride_summary_line,
    ride_title,
    set_combo_value,
)

__all__ = [
    "AVAILABILITY_CHOICES",
    "BOOK_BUTTON_STYLE",
    "ClientSettings",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "PASSENGER_POLL_INTERVAL_MS",
    "RECENT_RIDES_LIMIT",
    "RIDE_ACTION_BUTTON_STYLE",
    "RIDE_TYPE_CHOICES",
    "RIDER_POLL_INTERVAL_MS",
    "THEME_PALETTES",
    "TOKEN_COOKIE_NAME",
    "USER_TYPE_CHOICES",
    "build_stylesheet",
    "format_timestamp",
    "load_env_files",
    "logger",
    "parse_timestamp",
    "ride_summary_line",
    "ride_title",
    "set_combo_value",
]
