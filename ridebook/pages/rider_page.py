from __future__ import annotations

from typing import List

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QHideEvent, QShowEvent
from PyQt6.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..components import RideCard
from ..core.constants import AVAILABILITY_CHOICES, RIDER_POLL_INTERVAL_MS
from ..core.logger import logger
from ..core.utils import set_combo_value
from ..lifecycle import RideLifecycleClient
from ..polling import NewRideTracker, RefreshMode, RefreshPoller
from ..rides import (
    Availability,
    InvalidTransition,
    Ride,
    RideAction,
    availability_color,
    status_label,
)
from ..server_api import ServerAPIError
from ..session import Session
from .base import SessionPage


class _RideColumn(QScrollArea):
    """Scrollable stack of ride cards with an empty-state label."""

    def __init__(self, empty_text: str) -> None:
        super().__init__()
        self.setWidgetResizable(True)
        self.setFrameShape(QFrame.Shape.NoFrame)
        container = QWidget()
        self._layout = QVBoxLayout(container)
        self._layout.setContentsMargins(0, 8, 0, 8)
        self._layout.setSpacing(10)
        self._empty = QLabel(empty_text)
        self._empty.setObjectName("muted")
        self._empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._layout.addWidget(self._empty)
        self._layout.addStretch()
        self.setWidget(container)
        self.cards: List[RideCard] = []

    def set_cards(self, cards: List[RideCard]) -> None:
        for card in self.cards:
            self._layout.removeWidget(card)
            card.deleteLater()
        self.cards = list(cards)
        for index, card in enumerate(self.cards):
            self._layout.insertWidget(index, card)
        self._empty.setVisible(not self.cards)


class RiderPage(SessionPage):
    def __init__(
        self,
        client: RideLifecycleClient,
        *,
        poll_interval_ms: int = RIDER_POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(client)
        self.available_rides: List[Ride] = []
        self.my_rides: List[Ride] = []
        self.availability = Availability.AVAILABLE
        self.tracker = NewRideTracker()

        self.poller = RefreshPoller(poll_interval_ms, self.refresh_available, self)

        self._build_ui()
        self._apply_styles()

    # Layout ---------------------------------------------------------------------
    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(14)

        hero = QFrame()
        hero.setObjectName("riderHero")
        hero_layout = QHBoxLayout(hero)
        hero_layout.setContentsMargins(18, 16, 18, 16)
        title_box = QVBoxLayout()
        title = QLabel("Rider Dashboard")
        title.setObjectName("heroTitle")
        subtitle = QLabel("Manage your rides and availability")
        subtitle.setObjectName("heroSubtitle")
        title_box.addWidget(title)
        title_box.addWidget(subtitle)
        hero_layout.addLayout(title_box, 1)

        self.availability_dot = QLabel()
        self.availability_dot.setFixedSize(12, 12)
        self.availability_combo = QComboBox()
        for value, label in AVAILABILITY_CHOICES:
            self.availability_combo.addItem(label, value)
        self.availability_combo.currentIndexChanged.connect(
            self._on_availability_selected
        )
        hero_layout.addWidget(self.availability_dot, 0, Qt.AlignmentFlag.AlignVCenter)
        hero_layout.addWidget(self.availability_combo, 0, Qt.AlignmentFlag.AlignVCenter)

        self.loading_label = QLabel("Loading...")
        self.loading_label.setObjectName("heroSubtitle")
        self.loading_label.setVisible(False)
        hero_layout.addWidget(self.loading_label, 0, Qt.AlignmentFlag.AlignVCenter)

        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.setObjectName("refreshButton")
        self.refresh_btn.clicked.connect(self._manual_refresh)
        hero_layout.addWidget(self.refresh_btn, 0, Qt.AlignmentFlag.AlignVCenter)
        root.addWidget(hero)

        self.tabs = QTabWidget()
        self.available_column = _RideColumn("No available rides at the moment")
        self.my_rides_column = _RideColumn("No rides yet")
        self.tabs.addTab(self.available_column, "Available Rides")
        self.tabs.addTab(self.my_rides_column, "My Rides")
        root.addWidget(self.tabs, 1)

        self._render_availability()

    def _apply_styles(self) -> None:
        gradient = "qlineargradient(x1:0, y1:0, x2:1, y2:1, stop:0 #1D2671, stop:1 #4C51BF)"
        self.setStyleSheet(
            f"""
            #riderHero {{
                background: {gradient};
                border-radius: 16px;
            }}
            #riderHero QLabel {{ color: #F7FAFF; background: transparent; }}
            #heroSubtitle {{ color: #E6EAF9; font-size: 12px; }}
            #refreshButton {{
                background: #FFFFFF;
                color: #1D2671;
                border-radius: 10px;
                padding: 8px 16px;
                font-weight: 800;
            }}
            """
        )

    # Session / lifecycle --------------------------------------------------------
    def set_session(self, session: Session) -> None:
        super().set_session(session)
        self.available_rides = []
        self.my_rides = []
        self.tracker.reset()
        self.availability = session.user.availability or Availability.AVAILABLE
        self._render_availability()
        self._render_available()
        self._render_my_rides()
        if self.isVisible():
            self._mount()

    def clear_session(self) -> None:
        self.poller.stop()
        super().clear_session()
        self.available_rides = []
        self.my_rides = []
        self.tracker.reset()
        self._render_available()
        self._render_my_rides()

    def showEvent(self, event: QShowEvent) -> None:  # noqa: N802
        super().showEvent(event)
        if self.session is not None:
            self._mount()

    def hideEvent(self, event: QHideEvent) -> None:  # noqa: N802
        self.poller.stop()
        super().hideEvent(event)

    def _mount(self) -> None:
        self.refresh_my_rides(RefreshMode.AUTOMATIC)
        self.poller.start(immediate=True)

    def _manual_refresh(self) -> None:
        self._set_loading(True)
        try:
            self.refresh_available(RefreshMode.MANUAL)
            self.refresh_my_rides(RefreshMode.MANUAL)
        finally:
            self._set_loading(False)

    def _set_loading(self, loading: bool) -> None:
        self.loading_label.setVisible(loading)
        self.refresh_btn.setEnabled(not loading)

    # Refresh --------------------------------------------------------------------
    def refresh_available(self, mode: RefreshMode) -> None:
        if self.session is None:
            self.poller.stop()
            return
        try:
            rides = self.client.fetch_available_rides(self.session)
        except ServerAPIError as exc:
            self._report_read_failure(exc, mode, "Failed to fetch available rides")
            return
        self.available_rides = rides
        self._render_available()
        message = self.tracker.notification_for(rides)
        if message:
            logger.info("Rider user_id=%s: %s", self.session.user.id, message)
            self._notify("New Ride Requests", message)

    def refresh_my_rides(self, mode: RefreshMode) -> None:
        if self.session is None:
            return
        try:
            rides = self.client.fetch_my_rides(self.session)
        except ServerAPIError as exc:
            self._report_read_failure(exc, mode, "Failed to fetch your rides")
            return
        self.my_rides = rides
        self._render_my_rides()

    def refresh_all(self) -> None:
        self.refresh_available(RefreshMode.AUTOMATIC)
        self.refresh_my_rides(RefreshMode.AUTOMATIC)

    # Availability ---------------------------------------------------------------
    def _on_availability_selected(self, _index: int) -> None:
        value = self.availability_combo.currentData()
        if not value:
            return
        chosen = Availability(value)
        if chosen is self.availability:
            return
        self.set_availability(chosen)

    def set_availability(self, availability: Availability) -> bool:
        """Persist `availability`; the selector reverts when the server refuses."""
        if self.session is None:
            return False
        previous = self.availability
        try:
            self.client.set_availability(self.session, availability)
        except ServerAPIError as exc:
            self._render_availability()
            self._report_write_failure("Error", exc)
            return False
        self.availability = availability
        self._render_availability()
        self._notify("Status Updated", f"Your availability is now {availability.value}")
        if (
            availability is Availability.AVAILABLE
            and previous is not Availability.AVAILABLE
        ):
            self.refresh_available(RefreshMode.AUTOMATIC)
        return True

    def _render_availability(self) -> None:
        self.availability_combo.blockSignals(True)
        set_combo_value(self.availability_combo, self.availability.value)
        self.availability_combo.blockSignals(False)
        self.availability_dot.setStyleSheet(
            f"background-color: {availability_color(self.availability)};"
            "border-radius: 6px;"
        )

    # Ride actions ---------------------------------------------------------------
    def handle_action(self, ride: Ride, action: RideAction) -> None:
        if self.session is None:
            return
        card = self.sender() if isinstance(self.sender(), RideCard) else None
        if card is not None:
            card.set_busy(True)
        try:
            updated = self.client.apply_action(self.session, ride, action)
        except InvalidTransition as exc:
            self._notify("Error", str(exc), error=True)
        except ServerAPIError as exc:
            self._report_write_failure("Error", exc)
        else:
            self._notify(
                "Success", f"Ride {status_label(updated.status).lower()} successfully"
            )
        finally:
            if card is not None:
                card.set_busy(False)
        self.refresh_all()

    # Rendering ------------------------------------------------------------------
    def _render_available(self) -> None:
        cards = []
        for ride in self.available_rides:
            card = RideCard(
                ride,
                actions=ride.legal_actions(),
                title_prefix="Ride",
            )
            card.action_requested.connect(self.handle_action)
            cards.append(card)
        self.available_column.set_cards(cards)
        self.tabs.setTabText(0, f"Available Rides ({len(self.available_rides)})")

    def _render_my_rides(self) -> None:
        cards = []
        for ride in self.my_rides:
            card = RideCard(
                ride,
                actions=ride.legal_actions(),
                title_prefix="Ride",
                timestamp_caption="Accepted on",
            )
            card.action_requested.connect(self.handle_action)
            cards.append(card)
        self.my_rides_column.set_cards(cards)
        self.tabs.setTabText(1, f"My Rides ({len(self.my_rides)})")
