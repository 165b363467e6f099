"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from midivisualizer.utils import PydanticPersistence, default_config_path

from .enums import ColorScheme, VisualizationStyle

MIN_ANIMATION_SPEED = 0.5
MAX_ANIMATION_SPEED = 2.0


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Visualization
    visualization_style: VisualizationStyle = Field(
        default=VisualizationStyle.CIRCLES, description="How active notes are drawn"
    )
    color_scheme: ColorScheme = Field(
        default=ColorScheme.RAINBOW, description="Color policy for new notes"
    )
    animation_speed: float = Field(
        default=1.0,
        ge=MIN_ANIMATION_SPEED,
        le=MAX_ANIMATION_SPEED,
        description="Fade speed multiplier (fade = base_fade_duration / speed)",
    )
    show_grid: bool = Field(default=True, description="Draw the background grid")
    base_fade_duration: float = Field(
        default=2.0, gt=0, description="Fade-out time in seconds at animation speed 1.0"
    )
    min_radius: float = Field(default=10.0, ge=0, description="Radius of a velocity-0 note")
    max_radius: float = Field(default=50.0, gt=0, description="Radius of a velocity-127 note")

    # MIDI endpoints
    client_name: str = Field(default="MIDI Visualizer", description="MIDI client name")
    source_name: str = Field(
        default="MIDI Visualizer Source", description="Virtual port other apps read from"
    )
    destination_name: str = Field(
        default="MIDI Visualizer Destination", description="Virtual port other apps write to"
    )

    # On-screen input
    key_velocity_min: int = Field(default=60, ge=1, le=127)
    key_velocity_max: int = Field(default=100, ge=1, le=127)
    key_hold_duration: float = Field(
        default=0.4, gt=0, description="Seconds an on-screen key is held before note-off"
    )
    demo_velocity: int = Field(default=80, ge=1, le=127)

    # Audio
    sound_enabled: bool = Field(default=True, description="Echo notes as synthesized tones")
    audio_device: int | None = Field(
        default=None, description="Audio output device ID (None = system default)"
    )
    audio_buffer_size: int = Field(default=256, gt=0, description="Audio buffer size in frames")
    sample_rate: int = Field(default=44100, gt=0)
    master_volume: float = Field(default=0.3, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_ranges(self) -> "AppConfig":
        """Validate paired min/max fields."""
        if self.min_radius >= self.max_radius:
            raise ValueError("min_radius must be smaller than max_radius")
        if self.key_velocity_min > self.key_velocity_max:
            raise ValueError("key_velocity_min must not exceed key_velocity_max")
        return self

    @property
    def fade_duration(self) -> float:
        """Fade-out time for a note released now."""
        return self.base_fade_duration / self.animation_speed

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.midivisualizer/config.json

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return PydanticPersistence.load_json_or_default(path or default_config_path(), cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        PydanticPersistence.save_json(self, path or default_config_path())
