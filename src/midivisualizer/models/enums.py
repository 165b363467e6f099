"""Enumerations for the visualizer settings."""

from enum import Enum


class VisualizationStyle(str, Enum):
    """How active notes are drawn."""

    CIRCLES = "circles"  # One circle per note, placed by pitch
    BARS = "bars"        # One bar per pitch class, height by radius


class ColorScheme(str, Enum):
    """Color policy applied when a note starts."""

    RAINBOW = "rainbow"  # Hue rotates with pitch class
    FIRE = "fire"        # Red-dominant, brighter with velocity
    OCEAN = "ocean"      # Blue-green, brighter with velocity

    def next(self) -> "ColorScheme":
        """Return the scheme after this one, wrapping around."""
        members = list(ColorScheme)
        return members[(members.index(self) + 1) % len(members)]
