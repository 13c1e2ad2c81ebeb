from __future__ import annotations

from typing import Dict

THEME_PALETTES: Dict[str, Dict[str, str]] = {
    "light": {
        "text": "#111111",
        "muted": "#6B6F76",
        "background": "#F9FAFB",
        "card": "#FFFFFF",
        "border": "#E5E7EB",
        "list_bg": "#F7F8F9",
        "accent": "#4C51BF",
        "accent_alt": "#667EEA",
        "button_text": "#FFFFFF",
        "input_bg": "#FFFFFF",
        "danger": "#DC2626",
        "statusbar": "#FFFFFF",
        "tag_bg": "#4C51BF",
        "tag_text": "#FFFFFF",
    },
}


def build_stylesheet(mode: str) -> str:
    colors = THEME_PALETTES.get(mode, THEME_PALETTES["light"])
    return f"""
* {{
    font-family: 'Segoe UI', 'Inter', system-ui, sans-serif;
    color: {colors["text"]};
}}
QWidget {{
    background-color: {colors["background"]};
    font-size: 10pt;
}}

/* --- Cards --- */
QFrame#rideCard, QFrame#panelCard, QFrame#authCard {{
    background-color: {colors["card"]};
    border: 1px solid {colors["border"]};
    border-radius: 12px;
}}
QFrame#rideCard QLabel, QFrame#panelCard QLabel, QFrame#authCard QLabel {{
    background: transparent;
}}

/* --- Labels --- */
QLabel#muted {{ color: {colors["muted"]}; }}
QLabel#heroTitle {{ font-size: 22pt; font-weight: bold; }}
QLabel#sectionTitle {{ font-size: 12pt; font-weight: bold; color: {colors["text"]}; }}
QLabel#statusBadge {{
    border-radius: 8px;
    padding: 2px 8px;
    font-size: 9pt;
    font-weight: 700;
}}
QLabel#riderTag {{
    background-color: {colors["tag_bg"]};
    color: {colors["tag_text"]};
    border-radius: 4px;
    padding: 2px 6px;
    font-size: 8pt;
}}

/* --- Buttons --- */
QPushButton {{
    background-color: {colors["accent"]};
    border: none;
    border-radius: 6px;
    padding: 8px 16px;
    font-weight: 600;
    color: {colors["button_text"]};
}}
QPushButton:hover {{ background-color: {colors["accent_alt"]}; }}
QPushButton:disabled {{ background-color: {colors["border"]}; color: {colors["muted"]}; }}

QPushButton#ghostButton {{
    background-color: transparent;
    border: 1px solid {colors["accent"]};
    color: {colors["accent"]};
}}
QPushButton#ghostButton:hover {{
    background-color: {colors["list_bg"]};
}}
QPushButton#ghostButton:checked {{
    background-color: {colors["card"]};
    color: {colors["text"]};
}}

QPushButton#textLink {{
    background-color: transparent;
    color: {colors["accent"]};
    text-align: left;
    padding: 0;
}}
QPushButton#textLink:hover {{ text-decoration: underline; }}

/* --- Inputs --- */
QLineEdit, QComboBox {{
    background-color: {colors["input_bg"]};
    border: 1px solid {colors["border"]};
    border-radius: 6px;
    padding: 8px;
    selection-background-color: {colors["accent"]};
}}
QLineEdit:focus, QComboBox:focus {{
    border: 1px solid {colors["accent"]};
}}

/* --- Lists --- */
QListWidget {{
    background-color: {colors["list_bg"]};
    border: 1px solid {colors["border"]};
    border-radius: 8px;
    padding: 4px;
}}
QListWidget::item {{
    padding: 8px;
    border-radius: 4px;
}}
QListWidget::item:selected {{
    background-color: {colors["accent"]};
    color: {colors["button_text"]};
}}

/* --- Navigation --- */
QFrame#navBar {{
    background-color: {colors["card"]};
    border-bottom: 1px solid {colors["border"]};
}}
QFrame#navBar QLabel {{ background: transparent; }}
QLabel#brandLabel {{
    font-size: 15pt;
    font-weight: 800;
    color: {colors["accent"]};
}}

/* --- Status bar --- */
QStatusBar {{
    background-color: {colors["statusbar"]};
    border-top: 1px solid {colors["border"]};
}}

/* --- Scrollbars --- */
QScrollBar:vertical {{
    border: none;
    background: {colors["list_bg"]};
    width: 8px;
    margin: 0px;
}}
QScrollBar::handle:vertical {{
    background: {colors["muted"]};
    min-height: 20px;
    border-radius: 4px;
}}
QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {{
    height: 0px;
}}
"""
