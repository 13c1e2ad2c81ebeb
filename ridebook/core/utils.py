from __future__ import annotations

from datetime import datetime
from typing import Optional

from PyQt6.QtWidgets import QComboBox

from ..rides import Ride, ride_type_glyph, ride_type_label, status_label


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_timestamp(value: Optional[str], *, date_only: bool = False) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value or "-")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d" if date_only else "%Y-%m-%d %H:%M")


def ride_title(ride: Ride, *, prefix: str = "Ride") -> str:
    return f"{ride_type_glyph(ride.ride_type)} {prefix} #{ride.id}"


def ride_summary_line(ride: Ride) -> str:
    when = format_timestamp(ride.created_at, date_only=True)
    return (
        f"{ride_type_label(ride.ride_type)} | {status_label(ride.status).lower()}\n"
        f"{ride.pickup} -> {ride.dropoff}\n{when}"
    )


def set_combo_value(combo: QComboBox, value: Optional[str]) -> None:
    idx = combo.findData(value)
    if idx >= 0:
        combo.setCurrentIndex(idx)
