"""Color model for note rendering."""

import colorsys

from pydantic import BaseModel, ConfigDict, Field


class Color(BaseModel):
    """Standard 8-bit RGB color model.

    Color schemes compute unit-range (0.0-1.0) components; this model
    stores them as 8-bit integers so they can be hashed, compared and
    converted to terminal hex colors.

    The model is frozen so that ActiveNote snapshots can share instances.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red (0-255)")
    g: int = Field(ge=0, le=255, description="Green (0-255)")
    b: int = Field(ge=0, le=255, description="Blue (0-255)")

    @classmethod
    def black(cls) -> "Color":
        """Create black color."""
        return cls(r=0, g=0, b=0)

    @classmethod
    def from_unit_rgb(cls, red: float, green: float, blue: float) -> "Color":
        """Create a color from components in the 0.0-1.0 range.

        Components outside the range are clamped.
        """
        def to_byte(value: float) -> int:
            return int(round(min(max(value, 0.0), 1.0) * 255))

        return cls(r=to_byte(red), g=to_byte(green), b=to_byte(blue))

    @classmethod
    def from_hsv(cls, hue: float, saturation: float, value: float) -> "Color":
        """Create a color from hue/saturation/value in the 0.0-1.0 range."""
        return cls.from_unit_rgb(*colorsys.hsv_to_rgb(hue % 1.0, saturation, value))

    def blend(self, background: "Color", opacity: float) -> "Color":
        """Composite this color over a background at the given opacity.

        Example:
            >>> Color(r=200, g=100, b=0).blend(Color.black(), 0.5).to_rgb_tuple()
            (100, 50, 0)
        """
        opacity = min(max(opacity, 0.0), 1.0)
        return Color(
            r=int(round(background.r + (self.r - background.r) * opacity)),
            g=int(round(background.g + (self.g - background.g) * opacity)),
            b=int(round(background.b + (self.b - background.b) * opacity)),
        )

    def to_rgb_tuple(self) -> tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Convert to CSS hex color string (e.g., '#FF0000')."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"
