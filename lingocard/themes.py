"""Card color themes."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Theme:
    name: str
    background: str
    text: str
    subtext: str
    line: str
    accent: str
    # set => background is painted with a linear gradient
    gradient: Optional[Tuple[str, str]] = None


THEMES = {
    "light": Theme("light", "#ffffff", "#0b1220", "#6b7280", "#e5e7eb", "#58cc02"),
    "dark": Theme("dark", "#071018", "#e6f0e0", "#93a09a", "#1f2a33", "#58cc02"),
    "brand": Theme("brand", "#58cc02", "#ffffff", "#e8ffd6", "#89e219", "#ffc800"),
    "gradient": Theme("gradient", "#1cb0f6", "#ffffff", "#e3f6ff", "#ffffff", "#ffc800",
                      gradient=("#1cb0f6", "#58cc02")),
}
DEFAULT_THEME = "light"

ICON_POSITIONS = ("left", "right")
DEFAULT_ICON_POSITION = "left"


def get_theme(name: Optional[str]) -> Theme:
    return THEMES.get((name or "").strip().lower(), THEMES[DEFAULT_THEME])


def parse_icon_position(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    return value if value in ICON_POSITIONS else DEFAULT_ICON_POSITION
