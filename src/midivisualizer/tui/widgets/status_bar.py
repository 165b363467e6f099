"""Status bar widget showing MIDI, sound and style state."""

from textual.widgets import Static

from midivisualizer.models import ColorScheme, VisualizationStyle


class StatusBar(Static):
    """
    Single-line status display.

    Shows:
    - MIDI endpoint status (connected or loopback only)
    - Sound on/off
    - Visualization style, color scheme and animation speed
    - Active note count
    """

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $panel;
        color: $text;
        padding: 0 1;
    }

    StatusBar.degraded {
        background: $warning 40%;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._midi_connected = False
        self._midi_label = "No MIDI"
        self._sound = False
        self._style = VisualizationStyle.CIRCLES
        self._scheme = ColorScheme.RAINBOW
        self._speed = 1.0
        self._notes = 0
        self._update_display()

    def update_midi(self, connected: bool, label: str) -> None:
        self._midi_connected = connected
        self._midi_label = label
        self._update_display()

    def update_settings(
        self,
        style: VisualizationStyle,
        scheme: ColorScheme,
        speed: float,
        sound: bool,
    ) -> None:
        """
        Update the displayed settings.

        Args:
            style: Current visualization style
            scheme: Current color scheme
            speed: Animation speed multiplier
            sound: Whether notes are echoed as sound
        """
        self._style = VisualizationStyle(style)
        self._scheme = ColorScheme(scheme)
        self._speed = speed
        self._sound = sound
        self._update_display()

    def update_note_count(self, count: int) -> None:
        if count != self._notes:
            self._notes = count
            self._update_display()

    @property
    def status_text(self) -> str:
        """Current status line as plain text."""
        return self._compose_text()

    def _compose_text(self) -> str:
        midi_text = f"🎹 {self._midi_label}" if self._midi_connected else "🎹 Loopback only"
        sound_text = "🔊 On" if self._sound else "🔇 Off"
        style_text = f"{self._style.value} / {self._scheme.value} / {self._speed:.1f}x"
        parts = [midi_text, sound_text, style_text]
        if self._notes > 0:
            parts.append(f"♫ {self._notes}")
        return " | ".join(parts)

    def _update_display(self) -> None:
        self.set_class(not self._midi_connected, "degraded")
        self.update(self._compose_text())
