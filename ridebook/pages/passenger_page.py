from __future__ import annotations

from typing import List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QHideEvent, QShowEvent
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..components import RideCard
from ..core.constants import (
    BOOK_BUTTON_STYLE,
    PASSENGER_POLL_INTERVAL_MS,
    RECENT_RIDES_LIMIT,
    RIDE_TYPE_CHOICES,
)
from ..core.logger import logger
from ..core.utils import ride_summary_line
from ..lifecycle import RideLifecycleClient
from ..polling import RefreshMode, RefreshPoller
from ..rides import AvailableRider, Ride, RideType, ride_type_label
from ..server_api import ServerAPIError
from ..session import Session
from .base import SessionPage


class PassengerPage(SessionPage):
    def __init__(
        self,
        client: RideLifecycleClient,
        *,
        poll_interval_ms: int = PASSENGER_POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(client)
        self.rides: List[Ride] = []
        self.current_ride: Optional[Ride] = None
        self.available_riders: List[AvailableRider] = []
        self.selected_rider: Optional[AvailableRider] = None
        self._booking = False
        self._current_card: Optional[RideCard] = None

        self.poller = RefreshPoller(poll_interval_ms, self.refresh_data, self)

        self._build_ui()
        self._apply_styles()
        self._update_book_button()

    # Layout ---------------------------------------------------------------------
    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(14)

        root.addWidget(self._build_hero())

        self.current_ride_box = QFrame()
        self.current_ride_box.setObjectName("panelCard")
        current_layout = QVBoxLayout(self.current_ride_box)
        current_layout.setContentsMargins(16, 14, 16, 16)
        current_title = QLabel("Current Ride")
        current_title.setObjectName("sectionTitle")
        current_layout.addWidget(current_title)
        self._current_slot = QVBoxLayout()
        current_layout.addLayout(self._current_slot)
        self.current_ride_box.setVisible(False)
        root.addWidget(self.current_ride_box)

        main_row = QHBoxLayout()
        main_row.setSpacing(14)
        main_row.addWidget(self._build_booking_card(), 2)
        main_row.addWidget(self._build_history_card(), 1)
        root.addLayout(main_row, 1)

    def _build_hero(self) -> QWidget:
        card = QFrame()
        card.setObjectName("passengerHero")
        layout = QHBoxLayout(card)
        layout.setContentsMargins(18, 16, 18, 16)
        title_box = QVBoxLayout()
        self.welcome_label = QLabel("Welcome!")
        self.welcome_label.setObjectName("heroTitle")
        subtitle = QLabel("Book your ride or track your current journey")
        subtitle.setObjectName("heroSubtitle")
        title_box.addWidget(self.welcome_label)
        title_box.addWidget(subtitle)
        layout.addLayout(title_box, 1)

        self.loading_label = QLabel("Loading...")
        self.loading_label.setObjectName("heroSubtitle")
        self.loading_label.setVisible(False)
        layout.addWidget(self.loading_label, 0, Qt.AlignmentFlag.AlignRight)

        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.setObjectName("refreshButton")
        self.refresh_btn.clicked.connect(lambda: self.poller.trigger(RefreshMode.MANUAL))
        layout.addWidget(self.refresh_btn, 0, Qt.AlignmentFlag.AlignRight)
        return card

    def _build_booking_card(self) -> QWidget:
        card = QFrame()
        card.setObjectName("panelCard")
        layout = QVBoxLayout(card)
        layout.setContentsMargins(16, 14, 16, 16)
        layout.setSpacing(10)

        title = QLabel("Book a Ride")
        title.setObjectName("sectionTitle")
        layout.addWidget(title)

        form = QFormLayout()
        form.setVerticalSpacing(10)
        self.pickup_input = QLineEdit()
        self.pickup_input.setPlaceholderText("Enter pickup location")
        self.dropoff_input = QLineEdit()
        self.dropoff_input.setPlaceholderText("Enter drop-off location")
        self.ride_type_combo = QComboBox()
        self.ride_type_combo.addItem("Select ride type", None)
        for value, label in RIDE_TYPE_CHOICES:
            self.ride_type_combo.addItem(label, value)
        self.ride_type_combo.currentIndexChanged.connect(self._on_ride_type_changed)
        form.addRow("Pickup Location", self.pickup_input)
        form.addRow("Drop-off Location", self.dropoff_input)
        form.addRow("Ride Type", self.ride_type_combo)
        layout.addLayout(form)

        self.riders_label = QLabel("Available Riders")
        self.riders_label.setVisible(False)
        self.riders_list = QListWidget()
        self.riders_list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.riders_list.itemClicked.connect(self._on_rider_clicked)
        self.riders_list.setVisible(False)
        self.riders_hint = QLabel()
        self.riders_hint.setObjectName("muted")
        self.riders_hint.setVisible(False)
        layout.addWidget(self.riders_label)
        layout.addWidget(self.riders_list)
        layout.addWidget(self.riders_hint)

        self.book_btn = QPushButton("Book Ride")
        self.book_btn.setObjectName("bookRideAction")
        self.book_btn.setStyleSheet(BOOK_BUTTON_STYLE)
        self.book_btn.clicked.connect(self.submit_booking)
        layout.addWidget(self.book_btn)
        layout.addStretch()
        return card

    def _build_history_card(self) -> QWidget:
        card = QFrame()
        card.setObjectName("panelCard")
        layout = QVBoxLayout(card)
        layout.setContentsMargins(16, 14, 16, 16)
        layout.setSpacing(8)
        title = QLabel("Recent Rides")
        title.setObjectName("sectionTitle")
        subtitle = QLabel("Your ride history")
        subtitle.setObjectName("muted")
        layout.addWidget(title)
        layout.addWidget(subtitle)
        self.history_list = QListWidget()
        self.history_list.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        layout.addWidget(self.history_list, 1)
        self._render_history()
        return card

    def _apply_styles(self) -> None:
        gradient = "qlineargradient(x1:0, y1:0, x2:1, y2:1, stop:0 #4C51BF, stop:1 #667EEA)"
        self.setStyleSheet(
            f"""
            #passengerHero {{
                background: {gradient};
                border-radius: 16px;
            }}
            #passengerHero QLabel {{ color: #F7FAFF; background: transparent; }}
            #heroSubtitle {{ color: #E6EAF9; font-size: 12px; }}
            #refreshButton {{
                background: #FFFFFF;
                color: #4C51BF;
                border-radius: 10px;
                padding: 8px 16px;
                font-weight: 800;
            }}
            #refreshButton:disabled {{ color: #A0AEC0; }}
            """
        )

    # Session / lifecycle --------------------------------------------------------
    def set_session(self, session: Session) -> None:
        super().set_session(session)
        self.welcome_label.setText(f"Welcome, {session.user.name}!")
        self.rides = []
        self.current_ride = None
        self._reset_booking_form()
        self._render_history()
        self._render_current_ride()
        if self.isVisible():
            self.poller.start(immediate=True)

    def clear_session(self) -> None:
        self.poller.stop()
        super().clear_session()
        self.rides = []
        self.current_ride = None
        self.welcome_label.setText("Welcome!")
        self._reset_booking_form()
        self._render_history()
        self._render_current_ride()

    def showEvent(self, event: QShowEvent) -> None:  # noqa: N802
        super().showEvent(event)
        if self.session is not None:
            self.poller.start(immediate=True)

    def hideEvent(self, event: QHideEvent) -> None:  # noqa: N802
        self.poller.stop()
        super().hideEvent(event)

    @property
    def has_outstanding_ride(self) -> bool:
        return self.current_ride is not None and not self.current_ride.is_terminal

    def can_book(self) -> bool:
        return (
            self.session is not None
            and not self._booking
            and not self.has_outstanding_ride
            and bool(self.available_riders)
        )

    # Refresh --------------------------------------------------------------------
    def refresh_data(self, mode: RefreshMode) -> None:
        if self.session is None:
            self.poller.stop()
            return
        if mode.is_manual:
            self._set_loading(True)
        try:
            history_ok = self._refresh_history(mode)
            current_ok = self._refresh_current_ride(mode)
        finally:
            if mode.is_manual:
                self._set_loading(False)
        if mode.is_manual and history_ok and current_ok:
            self._notify("Refreshed", "Ride data has been updated")

    def _refresh_history(self, mode: RefreshMode) -> bool:
        if self.session is None:
            return False
        try:
            rides = self.client.fetch_history(self.session)
        except ServerAPIError as exc:
            self._report_read_failure(exc, mode, "Failed to fetch rides")
            return False
        self.rides = rides
        self._render_history()
        return True

    def _refresh_current_ride(self, mode: RefreshMode) -> bool:
        if self.session is None:
            return False
        try:
            ride = self.client.fetch_current_ride(self.session)
        except ServerAPIError as exc:
            self._report_read_failure(exc, mode, "Failed to fetch current ride")
            return False
        self.current_ride = ride
        self._render_current_ride()
        return True

    def _set_loading(self, loading: bool) -> None:
        self.loading_label.setVisible(loading)
        self.refresh_btn.setEnabled(not loading)

    # Booking --------------------------------------------------------------------
    def _on_ride_type_changed(self, _index: int) -> None:
        self.selected_rider = None
        self.available_riders = []
        self.riders_list.clear()
        value = self.ride_type_combo.currentData()
        if not value or self.session is None:
            self._render_riders(None)
            return
        ride_type = RideType(value)
        self.riders_hint.setText("Loading riders...")
        self.riders_hint.setVisible(True)
        try:
            self.available_riders = self.client.fetch_available_riders(
                self.session, ride_type
            )
        except ServerAPIError as exc:
            self._report_read_failure(
                exc, RefreshMode.MANUAL, "Failed to fetch available riders"
            )
            self.available_riders = []
        self._render_riders(ride_type)

    def _render_riders(self, ride_type: Optional[RideType]) -> None:
        self.riders_list.clear()
        show = ride_type is not None
        self.riders_label.setVisible(show)
        if not show:
            self.riders_list.setVisible(False)
            self.riders_hint.setVisible(False)
            self._update_book_button()
            return
        if not self.available_riders:
            self.riders_list.setVisible(False)
            self.riders_hint.setText(
                f"No riders available for {ride_type_label(ride_type).lower()}"
            )
            self.riders_hint.setVisible(True)
        else:
            for rider in self.available_riders:
                vehicle = ride_type_label(rider.vehicle_type) if rider.vehicle_type else "-"
                item = QListWidgetItem(f"{rider.name}\n{vehicle} | Available")
                item.setData(Qt.ItemDataRole.UserRole, rider)
                self.riders_list.addItem(item)
            self.riders_list.setVisible(True)
            self.riders_hint.setText("Select a rider, or book to notify all of them.")
            self.riders_hint.setVisible(True)
        self._update_book_button()

    def _on_rider_clicked(self, item: QListWidgetItem) -> None:
        rider = item.data(Qt.ItemDataRole.UserRole)
        if not isinstance(rider, AvailableRider):
            return
        if self.selected_rider is not None and self.selected_rider.id == rider.id:
            self.selected_rider = None
            self.riders_list.clearSelection()
        else:
            self.selected_rider = rider

    def submit_booking(self) -> None:
        if not self.can_book() or self.session is None:
            return
        chosen_rider = self.selected_rider
        self._set_booking(True)
        try:
            ride = self.client.book_ride(
                self.session,
                pickup=self.pickup_input.text(),
                dropoff=self.dropoff_input.text(),
                ride_type=self.ride_type_combo.currentData(),
                rider_id=chosen_rider.id if chosen_rider else None,
                current_ride=self.current_ride,
            )
        except ServerAPIError as exc:
            self._set_booking(False)
            self._report_write_failure("Booking Failed", exc)
            return
        self._set_booking(False)

        self.current_ride = ride
        self._render_current_ride()
        self._reset_booking_form()
        self._notify(
            "Ride Booked",
            f"Your ride has been assigned to {chosen_rider.name}!"
            if chosen_rider
            else "Your ride has been requested successfully!",
        )
        logger.info("Passenger booked ride id=%s", ride.id)
        self.refresh_data(RefreshMode.AUTOMATIC)

    def _set_booking(self, booking: bool) -> None:
        self._booking = booking
        self._update_book_button()

    def _reset_booking_form(self) -> None:
        self.pickup_input.clear()
        self.dropoff_input.clear()
        self.selected_rider = None
        self.available_riders = []
        self.ride_type_combo.blockSignals(True)
        self.ride_type_combo.setCurrentIndex(0)
        self.ride_type_combo.blockSignals(False)
        self._render_riders(None)

    def _update_book_button(self) -> None:
        if self._booking:
            self.book_btn.setText("Booking...")
        elif self.has_outstanding_ride:
            self.book_btn.setText("Ride in Progress")
        else:
            self.book_btn.setText("Book Ride")
        self.book_btn.setEnabled(self.can_book())

    # Rendering ------------------------------------------------------------------
    def _render_history(self) -> None:
        self.history_list.clear()
        if not self.rides:
            self.history_list.addItem("No rides yet")
            return
        for ride in self.rides[:RECENT_RIDES_LIMIT]:
            self.history_list.addItem(ride_summary_line(ride))

    def _render_current_ride(self) -> None:
        if self._current_card is not None:
            self._current_slot.removeWidget(self._current_card)
            self._current_card.deleteLater()
            self._current_card = None
        ride = self.current_ride
        if ride is None:
            self.current_ride_box.setVisible(False)
        else:
            self._current_card = RideCard(ride, title_prefix="Ride", show_customer=False)
            self._current_slot.addWidget(self._current_card)
            self.current_ride_box.setVisible(True)
        self._update_book_button()
