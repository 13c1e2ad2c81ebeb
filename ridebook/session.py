"""
Session handling for the RideBook client.

The bearer token lives in a cookie named ``token`` (persisted to a Mozilla
cookie file between runs).  `SessionManager` turns login/signup/verify
responses into an explicit `Session` object that pages receive and pass to
every API call; nothing reads the token from global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from http.cookiejar import LoadError, MozillaCookieJar
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from requests.cookies import create_cookie

from .core.constants import TOKEN_COOKIE_NAME
from .core.logger import logger
from .rides import PayloadError, RideType, User, UserType
from .server_api import ServerAPI, ServerAPIError, Unauthenticated

_COOKIE_DOMAIN = "ridebook.local"


class TokenCookieStore:
    """Keeps the `token` cookie, optionally backed by a cookie file."""

    def __init__(self, path: Optional[Path] = None, *, domain: str = _COOKIE_DOMAIN):
        self.path = Path(path) if path else None
        self.domain = domain
        self._jar = MozillaCookieJar(str(self.path)) if self.path else MozillaCookieJar()
        if self.path and self.path.exists():
            try:
                self._jar.load(ignore_discard=True)
            except (OSError, LoadError) as exc:
                logger.warning("Ignoring unreadable cookie file %s: %s", self.path, exc)

    def get(self) -> Optional[str]:
        for cookie in self._jar:
            if cookie.name == TOKEN_COOKIE_NAME and cookie.domain == self.domain:
                return cookie.value
        return None

    def set(self, token: str) -> None:
        self._jar.set_cookie(
            create_cookie(TOKEN_COOKIE_NAME, token, domain=self.domain, path="/")
        )
        self._save()

    def clear(self) -> None:
        try:
            self._jar.clear(self.domain, "/", TOKEN_COOKIE_NAME)
        except KeyError:
            return
        self._save()

    def _save(self) -> None:
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._jar.save(ignore_discard=True)
        except OSError as exc:
            logger.error("Failed to persist session cookie to %s: %s", self.path, exc)


@dataclass(frozen=True)
class Session:
    token: str
    user: User

    @property
    def is_rider(self) -> bool:
        return self.user.is_rider


class Route(str, Enum):
    LOGIN = "login"
    PASSENGER = "passenger"
    RIDER = "rider"


def resolve_route(session: Optional[Session], requested: Optional[Route] = None) -> Route:
    """
    Return the view to show for `requested`.

    Dashboards require a session and are bound to the user's role, so any
    request without a session lands on the login view and any other request
    lands on the user's own dashboard.
    """
    if session is None:
        return Route.LOGIN
    home = Route.RIDER if session.is_rider else Route.PASSENGER
    if requested is not None and requested is not home:
        logger.info("Redirecting %s request to %s", requested.value, home.value)
    return home


class SessionManager:
    def __init__(self, api: ServerAPI, store: Optional[TokenCookieStore] = None) -> None:
        self.api = api
        self.store = store or TokenCookieStore()
        self._session: Optional[Session] = None
        self._invalidation_listeners: List[Callable[[str], None]] = []

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def add_invalidation_listener(self, callback: Callable[[str], None]) -> None:
        self._invalidation_listeners.append(callback)

    def login(self, email: str, password: str) -> Session:
        logger.info("Login requested for email=%s", (email or "").strip() or "<empty>")
        response = self.api.login(email=email, password=password)
        return self._start(response)

    def signup(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str,
        user_type: str,
        vehicle_type: Optional[str] = None,
    ) -> Session:
        normalized_type = (user_type or "").strip().lower()
        if normalized_type not in {t.value for t in UserType}:
            raise ServerAPIError("Please choose whether you are a passenger or a rider.")
        if normalized_type == UserType.RIDER.value:
            if (vehicle_type or "").strip().lower() not in {t.value for t in RideType}:
                raise ServerAPIError("Riders must choose a vehicle type.")
        else:
            vehicle_type = None
        response = self.api.signup(
            name=name,
            email=email,
            password=password,
            phone=phone,
            user_type=normalized_type,
            vehicle_type=vehicle_type,
        )
        return self._start(response)

    def restore(self) -> Optional[Session]:
        token = self.store.get()
        if not token:
            return None
        try:
            user_payload = self.api.verify_token(session_token=token)
            user = User.from_payload(user_payload)
        except (ServerAPIError, PayloadError) as exc:
            logger.warning("Stored session could not be restored: %s", exc)
            self.store.clear()
            self._session = None
            return None
        self._session = Session(token=token, user=user)
        logger.info("Restored session for user_id=%s", user.id)
        return self._session

    def logout(self) -> None:
        if self._session:
            logger.info("Logging out user_id=%s", self._session.user.id)
        self._session = None
        self.store.clear()

    def invalidate(self, reason: str = "Your session has expired.") -> None:
        if self._session is None and self.store.get() is None:
            return
        logger.warning("Session invalidated: %s", reason)
        self._session = None
        self.store.clear()
        for callback in list(self._invalidation_listeners):
            callback(reason)

    def handle_error(self, exc: ServerAPIError) -> None:
        """Invalidate the session when a call failed authentication."""
        if isinstance(exc, Unauthenticated):
            self.invalidate(str(exc))

    def _start(self, response: Dict[str, Any]) -> Session:
        try:
            user = User.from_payload(response["user"])
        except PayloadError as exc:
            raise ServerAPIError(str(exc)) from exc
        session = Session(token=response["token"], user=user)
        self.store.set(session.token)
        self._session = session
        logger.info(
            "Session started for user_id=%s type=%s", user.id, user.user_type.value
        )
        return session
