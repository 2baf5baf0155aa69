from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..models import Profile, Role


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


PALETTES: dict[Theme, dict[str, str]] = {
    Theme.LIGHT: {
        "background": "#ffffff",
        "text": "#333333",
        "input_background": "#ffffff",
        "input_border": "#dddddd",
        "primary": "#007bff",
        "error": "#ff4444",
        "success": "#00c851",
    },
    Theme.DARK: {
        "background": "#121212",
        "text": "#f0f0f0",
        "input_background": "#1e1e1e",
        "input_border": "#444444",
        "primary": "#6a11cb",
        "error": "#d32f2f",
        "success": "#388e3c",
    },
}


@dataclass
class ViewContext:
    """Theme and signed-in profile handed to every view."""

    theme: Theme = Theme.LIGHT
    profile: Profile | None = None

    @property
    def role(self) -> Role | None:
        return self.profile.effective_role if self.profile else None

    @property
    def display_name(self) -> str | None:
        if self.profile is None:
            return None
        return self.profile.full_name or self.profile.username or self.profile.email

    def toggle_theme(self) -> Theme:
        self.theme = Theme.DARK if self.theme is Theme.LIGHT else Theme.LIGHT
        return self.theme

    def render(self) -> dict[str, Any]:
        return {
            "theme": self.theme.value,
            "palette": dict(PALETTES[self.theme]),
            "user": self.display_name,
            "role": self.role.value if self.role else None,
        }
