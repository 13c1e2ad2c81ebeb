from __future__ import annotations

import sys
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QCloseEvent
from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from .core.config import ClientSettings
from .core.logger import logger
from .core.theme import build_stylesheet
from .lifecycle import RideLifecycleClient
from .pages import AuthPage, PassengerPage, RiderPage
from .server_api import ServerAPI
from .session import Route, Session, SessionManager, TokenCookieStore, resolve_route


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        api: Optional[ServerAPI] = None,
        *,
        store: Optional[TokenCookieStore] = None,
        theme: str = "light",
    ):
        super().__init__()
        self.settings = settings or ClientSettings()
        self.api = api or ServerAPI(self.settings.api_url, self.settings.timeout)
        self.sessions = SessionManager(
            self.api, store or TokenCookieStore(self.settings.cookie_file)
        )
        self.sessions.add_invalidation_listener(self._on_session_invalidated)
        self.client = RideLifecycleClient(self.api)
        self.theme = theme
        self.route = Route.LOGIN
        self.setWindowTitle("RideBook")
        self.resize(1100, 780)

        central = QWidget()
        root = QVBoxLayout(central)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        self.nav_bar = self._build_nav_bar()
        root.addWidget(self.nav_bar, 0)

        # pages
        self.stack = QStackedWidget()
        self.auth_page = AuthPage(self.sessions)
        self.passenger_page = PassengerPage(
            self.client, poll_interval_ms=self.settings.passenger_poll_ms
        )
        self.rider_page = RiderPage(
            self.client, poll_interval_ms=self.settings.rider_poll_ms
        )
        for page in [self.auth_page, self.passenger_page, self.rider_page]:
            self.stack.addWidget(page)
        root.addWidget(self.stack, 1)
        self.setCentralWidget(central)

        # hooks
        self.auth_page.authenticated.connect(self._on_authenticated)
        for page in (self.passenger_page, self.rider_page):
            page.notification.connect(self._show_notification)
            page.session_expired.connect(self._on_session_expired)

        self.apply_theme(theme)
        self._restore_session()

    def _build_nav_bar(self) -> QFrame:
        bar = QFrame()
        bar.setObjectName("navBar")
        layout = QHBoxLayout(bar)
        layout.setContentsMargins(18, 10, 18, 10)
        layout.setSpacing(12)

        brand = QLabel("RideBook")
        brand.setObjectName("brandLabel")
        layout.addWidget(brand)
        layout.addStretch(1)

        self.user_label = QLabel()
        self.rider_tag = QLabel("Rider")
        self.rider_tag.setObjectName("riderTag")
        self.logout_btn = QPushButton("Logout")
        self.logout_btn.setObjectName("ghostButton")
        self.logout_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        self.logout_btn.clicked.connect(self._handle_logout)
        layout.addWidget(self.user_label)
        layout.addWidget(self.rider_tag)
        layout.addWidget(self.logout_btn)
        bar.setVisible(False)
        return bar

    # Routing ----------------------------------------------------------------
    def _restore_session(self) -> None:
        session = self.sessions.restore()
        if session is None:
            self.show_route(Route.LOGIN)
            return
        self._enter_session(session)

    def show_route(self, requested: Route) -> Route:
        session = self.sessions.session
        route = resolve_route(session, requested)
        self.route = route
        if route is Route.LOGIN:
            self.nav_bar.setVisible(False)
            self.stack.setCurrentWidget(self.auth_page)
            return route
        self._update_nav_bar(session)
        self.nav_bar.setVisible(True)
        if route is Route.RIDER:
            self.stack.setCurrentWidget(self.rider_page)
        else:
            self.stack.setCurrentWidget(self.passenger_page)
        return route

    def _enter_session(self, session: Session) -> None:
        if session.is_rider:
            self.rider_page.set_session(session)
            self.show_route(Route.RIDER)
        else:
            self.passenger_page.set_session(session)
            self.show_route(Route.PASSENGER)

    def _update_nav_bar(self, session: Optional[Session]) -> None:
        if session is None:
            self.user_label.clear()
            self.rider_tag.setVisible(False)
            return
        self.user_label.setText(session.user.name)
        self.rider_tag.setVisible(session.is_rider)

    # Session events -----------------------------------------------------------
    def _on_authenticated(self, session: Session) -> None:
        logger.info(
            "GUI session ready for user_id=%s type=%s",
            session.user.id,
            session.user.user_type.value,
        )
        self._enter_session(session)
        self.statusBar().showMessage(f"Logged in as {session.user.name}", 3000)

    def _handle_logout(self) -> None:
        if self.sessions.session is None:
            self.show_route(Route.LOGIN)
            self.statusBar().showMessage("No active session to log out.", 2500)
            return
        self.sessions.logout()
        self._clear_pages()
        self.show_route(Route.LOGIN)
        self.statusBar().showMessage("Logged out. Please sign back in.", 3000)

    def _on_session_expired(self, reason: str) -> None:
        self.sessions.invalidate(reason)

    def _on_session_invalidated(self, reason: str) -> None:
        self._clear_pages()
        self.show_route(Route.LOGIN)
        self.statusBar().showMessage(reason, 4000)

    def _clear_pages(self) -> None:
        self.passenger_page.clear_session()
        self.rider_page.clear_session()
        self.auth_page.reset()
        self._update_nav_bar(None)

    def _show_notification(self, title: str, message: str, is_error: bool) -> None:
        if is_error:
            logger.error("%s: %s", title, message)
        else:
            logger.info("%s: %s", title, message)
        self.statusBar().showMessage(f"{title}: {message}", 5000 if is_error else 3500)

    def apply_theme(self, theme: str) -> None:
        app = QApplication.instance()
        if not app:
            return
        self.theme = theme
        app.setStyleSheet(build_stylesheet(theme))

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        try:
            self.passenger_page.poller.stop()
            self.rider_page.poller.stop()
        finally:
            super().closeEvent(event)


# Entrypoint -------------------------------------------------------------------


def run(
    settings: Optional[ClientSettings] = None,
    api: Optional[ServerAPI] = None,
    theme: str = "light",
) -> None:
    app = QApplication(sys.argv)
    app.setStyleSheet(build_stylesheet(theme))
    window = MainWindow(settings=settings, api=api, theme=theme)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    run(ClientSettings.from_env())
