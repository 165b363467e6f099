"""Derived visual attributes of a note.

Pure functions: the same pitch, velocity and scheme always give the same
radius and color.
"""

from midivisualizer.models import MIDI_MAX, Color, ColorScheme

DEFAULT_MIN_RADIUS = 10.0
DEFAULT_MAX_RADIUS = 50.0


def velocity_to_radius(
    velocity: int,
    min_radius: float = DEFAULT_MIN_RADIUS,
    max_radius: float = DEFAULT_MAX_RADIUS,
) -> float:
    """
    Map velocity 0-127 linearly onto [min_radius, max_radius].

    Example:
        >>> velocity_to_radius(0), velocity_to_radius(127)
        (10.0, 50.0)
    """
    return min_radius + (max_radius - min_radius) * (velocity / MIDI_MAX)


def _rainbow(pitch: int, velocity: int) -> Color:
    return Color.from_hsv((pitch % 12) / 12.0, 0.8, 0.9)


def _fire(pitch: int, velocity: int) -> Color:
    intensity = velocity / MIDI_MAX
    return Color.from_unit_rgb(1.0, 0.3 + 0.4 * intensity, 0.1)


def _ocean(pitch: int, velocity: int) -> Color:
    intensity = velocity / MIDI_MAX
    return Color.from_unit_rgb(0.1, 0.5 + 0.3 * intensity, 0.7 + 0.3 * intensity)


_SCHEMES = {
    ColorScheme.RAINBOW: _rainbow,
    ColorScheme.FIRE: _fire,
    ColorScheme.OCEAN: _ocean,
}


def note_color(scheme: ColorScheme, pitch: int, velocity: int) -> Color:
    """
    Color of a note under the given scheme.

    - rainbow: hue by pitch class (pitch mod 12)
    - fire: red-dominant, green rises with velocity
    - ocean: blue-green, brighter with velocity
    """
    return _SCHEMES[ColorScheme(scheme)](pitch, velocity)


def scheme_preview(scheme: ColorScheme) -> list[Color]:
    """Three representative colors of a scheme, for the settings screen."""
    if scheme == ColorScheme.RAINBOW:
        return [Color.from_hsv(i / 3.0, 0.8, 0.9) for i in range(3)]
    return [note_color(scheme, 60, round(MIDI_MAX * i / 2)) for i in range(3)]
