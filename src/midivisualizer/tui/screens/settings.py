"""Modal settings dialog."""

from typing import Any, Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Select, Static, Switch

from midivisualizer.core.styling import scheme_preview
from midivisualizer.models import (
    MAX_ANIMATION_SPEED,
    MIN_ANIMATION_SPEED,
    AppConfig,
    ColorScheme,
    VisualizationStyle,
)

SPEED_STEP = 0.1


def speed_options() -> list[float]:
    """Selectable animation speeds: 0.5 to 2.0 in steps of 0.1."""
    count = int(round((MAX_ANIMATION_SPEED - MIN_ANIMATION_SPEED) / SPEED_STEP)) + 1
    return [round(MIN_ANIMATION_SPEED + i * SPEED_STEP, 1) for i in range(count)]


def nearest_speed(speed: float) -> float:
    return min(speed_options(), key=lambda option: abs(option - speed))


def preview_text(scheme: ColorScheme) -> Text:
    """Three colored swatches for a color scheme."""
    text = Text()
    for color in scheme_preview(scheme):
        text.append("    ", style=f"on {color.to_hex()}")
        text.append(" ")
    return text


class SettingsScreen(ModalScreen[Optional[dict[str, Any]]]):
    """
    Edit the visualization settings.

    Dismisses with a dict of changed values (possibly empty) on Apply,
    or None on Cancel.
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    DEFAULT_CSS = """
    SettingsScreen {
        align: center middle;
    }

    #dialog {
        width: 60;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #title {
        width: 100%;
        content-align: center middle;
        text-style: bold;
        padding: 0 0 1 0;
    }

    .row {
        height: auto;
        margin: 0 0 1 0;
    }

    .row Label {
        width: 18;
        padding: 1 0 0 0;
    }

    .row Select {
        width: 1fr;
    }

    #scheme-preview {
        padding: 0 0 1 18;
    }

    #button-container {
        width: 100%;
        height: auto;
        align: center middle;
    }

    #button-container Button {
        margin: 0 1;
        min-width: 12;
    }
    """

    def __init__(self, config: AppConfig) -> None:
        """
        Initialize the dialog.

        Args:
            config: Settings to start from
        """
        super().__init__()
        self.config = config

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("Settings", id="title")
            with Horizontal(classes="row"):
                yield Label("Style")
                yield Select(
                    [(style.value.title(), style) for style in VisualizationStyle],
                    value=VisualizationStyle(self.config.visualization_style),
                    allow_blank=False,
                    id="style",
                )
            with Horizontal(classes="row"):
                yield Label("Color scheme")
                yield Select(
                    [(scheme.value.title(), scheme) for scheme in ColorScheme],
                    value=ColorScheme(self.config.color_scheme),
                    allow_blank=False,
                    id="scheme",
                )
            yield Static(preview_text(ColorScheme(self.config.color_scheme)), id="scheme-preview")
            with Horizontal(classes="row"):
                yield Label("Animation speed")
                yield Select(
                    [(f"{speed:.1f}x", speed) for speed in speed_options()],
                    value=nearest_speed(self.config.animation_speed),
                    allow_blank=False,
                    id="speed",
                )
            with Horizontal(classes="row"):
                yield Label("Show grid")
                yield Switch(value=self.config.show_grid, id="grid")
            with Horizontal(classes="row"):
                yield Label("Sound")
                yield Switch(value=self.config.sound_enabled, id="sound")
            with Horizontal(id="button-container"):
                yield Button("Apply", variant="primary", id="apply-btn")
                yield Button("Cancel", variant="default", id="cancel-btn")

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "scheme" and isinstance(event.value, ColorScheme):
            self.query_one("#scheme-preview", Static).update(preview_text(event.value))

    def collect_changes(self) -> dict[str, Any]:
        """Values that differ from the starting config."""
        values = {
            "visualization_style": self.query_one("#style", Select).value,
            "color_scheme": self.query_one("#scheme", Select).value,
            "animation_speed": self.query_one("#speed", Select).value,
            "show_grid": self.query_one("#grid", Switch).value,
            "sound_enabled": self.query_one("#sound", Switch).value,
        }
        current = self.config.model_dump()
        changes = {key: value for key, value in values.items() if value != current[key]}
        # Only treat the speed as changed if the user picked a different step
        if "animation_speed" in changes and changes["animation_speed"] == nearest_speed(current["animation_speed"]):
            del changes["animation_speed"]
        return changes

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "apply-btn":
            event.stop()
            self.dismiss(self.collect_changes())
        elif event.button.id == "cancel-btn":
            event.stop()
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
