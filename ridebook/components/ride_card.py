from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..core.constants import RIDE_ACTION_BUTTON_STYLE
from ..core.utils import format_timestamp, ride_title
from ..rides import (
    Ride,
    RideAction,
    RideStatus,
    action_label,
    ride_type_label,
    status_colors,
    status_label,
)


class StatusBadge(QLabel):
    def __init__(self, status: Optional[RideStatus] = None):
        super().__init__()
        self.setObjectName("statusBadge")
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        if status is not None:
            self.set_status(status)

    def set_status(self, status: RideStatus) -> None:
        background, foreground = status_colors(status)
        self.setText(status_label(status))
        self.setStyleSheet(f"background-color: {background}; color: {foreground};")


class RideCard(QFrame):
    """Card for a single ride with optional lifecycle action buttons."""

    action_requested = pyqtSignal(object, object)

    def __init__(
        self,
        ride: Ride,
        *,
        actions: Sequence[RideAction] = (),
        title_prefix: str = "Ride",
        show_customer: bool = True,
        timestamp_caption: str = "Requested",
    ) -> None:
        super().__init__()
        self.ride = ride
        self.setObjectName("rideCard")
        self._buttons: Dict[RideAction, QPushButton] = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 14, 16, 14)
        layout.setSpacing(8)

        header = QHBoxLayout()
        title = QLabel(ride_title(ride, prefix=title_prefix))
        title.setObjectName("sectionTitle")
        self.badge = StatusBadge(ride.status)
        header.addWidget(title, 1)
        header.addWidget(self.badge, 0, Qt.AlignmentFlag.AlignRight)
        layout.addLayout(header)

        caption, when = timestamp_caption, ride.created_at
        if timestamp_caption == "Accepted on":
            if ride.accepted_at:
                when = ride.accepted_at
            else:
                caption = "Requested"
        self.timestamp_label = QLabel(f"{caption} {format_timestamp(when)}")
        self.timestamp_label.setObjectName("muted")
        layout.addWidget(self.timestamp_label)

        body = QHBoxLayout()
        body.setSpacing(24)
        body.addWidget(
            self._detail_block(
                "Trip details",
                [
                    f"From: {ride.pickup}",
                    f"To: {ride.dropoff}",
                    ride_type_label(ride.ride_type),
                ],
            ),
            1,
        )
        if show_customer:
            body.addWidget(
                self._detail_block(
                    "Passenger details",
                    [ride.customer_name or "-", ride.customer_phone or "-"],
                ),
                1,
            )
        layout.addLayout(body)

        if actions:
            action_row = QHBoxLayout()
            action_row.setSpacing(8)
            for action in actions:
                btn = QPushButton(action_label(action))
                btn.setObjectName("rideActionBtn")
                btn.setProperty("destructive", action is RideAction.REJECT)
                btn.setCursor(Qt.CursorShape.PointingHandCursor)
                btn.clicked.connect(
                    lambda _=False, chosen=action: self.action_requested.emit(
                        self.ride, chosen
                    )
                )
                action_row.addWidget(btn)
                self._buttons[action] = btn
            action_row.addStretch()
            layout.addLayout(action_row)
            self.setStyleSheet(RIDE_ACTION_BUTTON_STYLE)

    def _detail_block(self, heading: str, lines: List[str]) -> QWidget:
        block = QWidget()
        block_layout = QVBoxLayout(block)
        block_layout.setContentsMargins(0, 0, 0, 0)
        block_layout.setSpacing(4)
        title = QLabel(heading)
        title.setStyleSheet("font-weight: 600;")
        block_layout.addWidget(title)
        for line in lines:
            label = QLabel(line)
            label.setWordWrap(True)
            block_layout.addWidget(label)
        return block

    def action_button(self, action: RideAction) -> Optional[QPushButton]:
        return self._buttons.get(action)

    def set_busy(self, busy: bool) -> None:
        for action, btn in self._buttons.items():
            btn.setEnabled(not busy)
            btn.setText("Processing..." if busy else action_label(action))
