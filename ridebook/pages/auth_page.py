from __future__ import annotations

from typing import Dict, Optional

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ..core.constants import RIDE_TYPE_CHOICES, USER_TYPE_CHOICES
from ..core.logger import logger
from ..rides import UserType
from ..server_api import ServerAPIError
from ..session import SessionManager


class AuthPage(QWidget):
    authenticated = pyqtSignal(object)

    def __init__(self, sessions: SessionManager):
        super().__init__()
        self.sessions = sessions
        self._status_timers: Dict[QLabel, QTimer] = {}

        self._build_shell()
        self._apply_styles()

    def _build_shell(self) -> None:
        root = QHBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(18)

        auth_card = self._build_auth_card()
        auth_card.setMinimumWidth(460)
        auth_card.setMaximumWidth(620)
        root.addStretch(1)
        root.addWidget(auth_card, 0, Qt.AlignmentFlag.AlignCenter)
        root.addStretch(1)

    def _build_auth_card(self) -> QWidget:
        card = QFrame()
        card.setObjectName("authCard")
        layout = QVBoxLayout(card)
        layout.setContentsMargins(18, 18, 18, 18)
        layout.setSpacing(14)

        title = QLabel("RideBook")
        title.setObjectName("cardTitle")
        subtitle = QLabel("Book a bike, car or rickshaw, or drive one.")
        subtitle.setWordWrap(True)
        subtitle.setObjectName("cardSubtitle")
        layout.addWidget(title)
        layout.addWidget(subtitle)

        toggle_row = QHBoxLayout()
        toggle_row.setSpacing(10)
        toggle_row.addStretch()
        self._mode_group = QButtonGroup(self)

        self.login_tab_btn = QPushButton("Log in")
        self.login_tab_btn.setObjectName("ghostButton")
        self.login_tab_btn.setCheckable(True)
        self.login_tab_btn.setChecked(True)
        self.login_tab_btn.clicked.connect(lambda: self._set_mode(0))
        self._mode_group.addButton(self.login_tab_btn)

        self.register_tab_btn = QPushButton("Sign up")
        self.register_tab_btn.setObjectName("ghostButton")
        self.register_tab_btn.setCheckable(True)
        self.register_tab_btn.clicked.connect(lambda: self._set_mode(1))
        self._mode_group.addButton(self.register_tab_btn)

        toggle_row.addWidget(self.login_tab_btn)
        toggle_row.addWidget(self.register_tab_btn)
        layout.addLayout(toggle_row)

        self.mode_hint = QLabel("Welcome back! Sign in to your account.")
        self.mode_hint.setWordWrap(True)
        self.mode_hint.setObjectName("modeHint")
        layout.addWidget(self.mode_hint)

        self.auth_stack = QStackedWidget()
        self.auth_stack.addWidget(self._build_login_tab())
        self.auth_stack.addWidget(self._build_register_tab())
        layout.addWidget(self.auth_stack, 1)
        return card

    def _set_mode(self, index: int) -> None:
        self.auth_stack.setCurrentIndex(index)
        self.login_tab_btn.setChecked(index == 0)
        self.register_tab_btn.setChecked(index == 1)
        if index == 0:
            self.mode_hint.setText("Welcome back! Sign in to your account.")
        else:
            self.mode_hint.setText("Create an account to book or drive rides.")

    def _form(self) -> QFormLayout:
        form = QFormLayout()
        form.setLabelAlignment(
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        )
        form.setVerticalSpacing(10)
        form.setHorizontalSpacing(12)
        return form

    def _build_login_tab(self) -> QWidget:
        widget = QWidget()
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(4, 0, 4, 0)
        form = self._form()

        self.login_email = QLineEdit()
        self.login_email.setPlaceholderText("you@example.com")
        self.login_password = QLineEdit()
        self.login_password.setEchoMode(QLineEdit.EchoMode.Password)
        self.login_password.setPlaceholderText("********")
        self.login_password.returnPressed.connect(self._handle_login)
        self.login_status = QLabel()
        self.login_status.setObjectName("statusLabel")

        form.addRow("Email", self.login_email)
        form.addRow("Password", self.login_password)

        action_row = QHBoxLayout()
        action_row.setSpacing(10)
        self.login_btn = QPushButton("Log in")
        self.login_btn.setObjectName("primaryButton")
        self.login_btn.setMinimumHeight(40)
        self.login_btn.clicked.connect(self._handle_login)
        action_row.addWidget(self.login_btn, 0)
        action_row.addWidget(self.login_status, 1)
        form.addRow(action_row)

        quick_link = QPushButton("Don't have an account? Sign up")
        quick_link.setObjectName("textLink")
        quick_link.setCursor(Qt.CursorShape.PointingHandCursor)
        quick_link.clicked.connect(lambda: self._set_mode(1))
        form.addRow(quick_link)

        layout.addLayout(form)
        layout.addStretch()
        return widget

    def _build_register_tab(self) -> QWidget:
        widget = QWidget()
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(4, 0, 4, 0)
        form = self._form()

        self.reg_name = QLineEdit()
        self.reg_email = QLineEdit()
        self.reg_email.setPlaceholderText("you@example.com")
        self.reg_phone = QLineEdit()
        self.reg_password = QLineEdit()
        self.reg_password.setEchoMode(QLineEdit.EchoMode.Password)
        self.reg_user_type = QComboBox()
        for value, label in USER_TYPE_CHOICES:
            self.reg_user_type.addItem(label, value)
        self.reg_vehicle_label = QLabel("Vehicle Type")
        self.reg_vehicle_type = QComboBox()
        self.reg_vehicle_type.addItem("Select vehicle type", None)
        for value, label in RIDE_TYPE_CHOICES:
            self.reg_vehicle_type.addItem(label, value)
        self.reg_user_type.currentIndexChanged.connect(
            lambda _: self._update_register_role_state(self.reg_user_type.currentData())
        )
        self.reg_status = QLabel()
        self.reg_status.setObjectName("statusLabel")

        form.addRow("Full Name", self.reg_name)
        form.addRow("Email", self.reg_email)
        form.addRow("Phone", self.reg_phone)
        form.addRow("Password", self.reg_password)
        form.addRow("I am a", self.reg_user_type)
        form.addRow(self.reg_vehicle_label, self.reg_vehicle_type)

        action_row = QHBoxLayout()
        action_row.setSpacing(10)
        self.sign_up_btn = QPushButton("Create account")
        self.sign_up_btn.setObjectName("primaryButton")
        self.sign_up_btn.setMinimumHeight(40)
        self.sign_up_btn.clicked.connect(self._handle_register)
        action_row.addWidget(self.sign_up_btn, 0)
        action_row.addWidget(self.reg_status, 1)
        form.addRow(action_row)

        quick_link = QPushButton("Already have an account? Log in")
        quick_link.setObjectName("textLink")
        quick_link.setCursor(Qt.CursorShape.PointingHandCursor)
        quick_link.clicked.connect(lambda: self._set_mode(0))
        form.addRow(quick_link)

        layout.addLayout(form)
        layout.addStretch()
        self._update_register_role_state(self.reg_user_type.currentData())
        return widget

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            """
            #cardTitle {
                font-size: 26px;
                font-weight: 900;
                color: #1D2671;
            }
            #cardSubtitle, #modeHint {
                color: #4A5568;
                font-size: 13px;
            }
            #primaryButton {
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 #4C51BF, stop:1 #667EEA);
                color: #FFFFFF;
                border-radius: 10px;
                padding: 8px 18px;
                font-weight: 700;
            }
            #primaryButton:disabled {
                background: #CBD5E0;
                color: #4A5568;
            }
            #statusLabel {
                font-weight: 700;
            }
            """
        )

    def _update_register_role_state(self, user_type: Optional[str]) -> None:
        is_rider = str(user_type or "").strip().lower() == UserType.RIDER.value
        self.reg_vehicle_label.setVisible(is_rider)
        self.reg_vehicle_type.setVisible(is_rider)
        if not is_rider:
            self.reg_vehicle_type.setCurrentIndex(0)

    def _handle_login(self) -> None:
        email = self.login_email.text().strip()
        logger.info("GUI login requested for email=%s", email or "<empty>")
        self.login_btn.setEnabled(False)
        try:
            session = self.sessions.login(email, self.login_password.text())
        except ServerAPIError as exc:
            logger.error("GUI login failed for %s: %s", email or "<empty>", exc)
            self._flash_status(self.login_status, str(exc), "red")
            return
        finally:
            self.login_btn.setEnabled(True)

        self._flash_status(self.login_status, "Logged in", "green")
        self.login_password.clear()
        self.authenticated.emit(session)

    def _handle_register(self) -> None:
        email = self.reg_email.text().strip()
        user_type = self.reg_user_type.currentData()
        self.sign_up_btn.setEnabled(False)
        try:
            session = self.sessions.signup(
                name=self.reg_name.text().strip(),
                email=email,
                password=self.reg_password.text(),
                phone=self.reg_phone.text().strip(),
                user_type=user_type,
                vehicle_type=self.reg_vehicle_type.currentData(),
            )
        except ServerAPIError as exc:
            logger.error("GUI signup failed for %s: %s", email or "<empty>", exc)
            self._flash_status(self.reg_status, str(exc), "red")
            return
        finally:
            self.sign_up_btn.setEnabled(True)

        self._flash_status(self.reg_status, "Account created", "green")
        self.reg_password.clear()
        self.authenticated.emit(session)

    def reset(self) -> None:
        self.login_password.clear()
        self.reg_password.clear()
        self._set_mode(0)

    def _flash_status(self, label: QLabel, text: str, color: str) -> None:
        label.setText(text)
        label.setStyleSheet(f"color: {color};")
        timer = self._status_timers.get(label)
        if not timer:
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.timeout.connect(lambda lab=label: lab.clear())
            self._status_timers[label] = timer
        timer.start(3000)
