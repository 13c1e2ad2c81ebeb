from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QWidget

from ..core.logger import logger
from ..lifecycle import RideLifecycleClient
from ..polling import RefreshMode
from ..server_api import ServerAPIError, Unauthenticated
from ..session import Session


class SessionPage(QWidget):
    """
    Common plumbing for the dashboards.

    Pages never show dialogs themselves: user-facing messages go out through
    `notification` (title, message, is_error) and a rejected token through
    `session_expired`, both handled by the main window.
    """

    notification = pyqtSignal(str, str, bool)
    session_expired = pyqtSignal(str)

    def __init__(self, client: RideLifecycleClient) -> None:
        super().__init__()
        self.client = client
        self.session: Optional[Session] = None

    def set_session(self, session: Session) -> None:
        self.session = session

    def clear_session(self) -> None:
        self.session = None

    def _notify(self, title: str, message: str, *, error: bool = False) -> None:
        self.notification.emit(title, message, error)

    def _report_read_failure(
        self, exc: ServerAPIError, mode: RefreshMode, description: str
    ) -> None:
        if isinstance(exc, Unauthenticated):
            self.session_expired.emit(str(exc))
            return
        if mode.is_manual:
            self._notify("Error", f"{description}: {exc}", error=True)
        else:
            logger.warning("Automatic refresh failed (%s): %s", description, exc)

    def _report_write_failure(self, title: str, exc: ServerAPIError) -> None:
        if isinstance(exc, Unauthenticated):
            self.session_expired.emit(str(exc))
            return
        logger.error("%s: %s", title, exc)
        self._notify(title, str(exc), error=True)
