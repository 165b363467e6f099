"""Textual application: the presentation layer of the visualizer."""

import asyncio
import logging
from typing import Any, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.timer import Timer
from textual.widgets import Footer, Header

from midivisualizer.core import VisualizerSession
from midivisualizer.core.session import SPEED_STEP
from midivisualizer.models import KEYBOARD_RANGE, AppConfig, get_note_name
from midivisualizer.protocols import ConfigEvent, NoteLifecycleEvent

from .screens import SettingsScreen
from .widgets import KEY_BINDINGS, NoteCanvas, StatusBar, VirtualKeyboard

logger = logging.getLogger(__name__)

REDRAW_INTERVAL = 1 / 30


def _note_bindings() -> list[Binding]:
    return [
        Binding(key, f"play_note({pitch})", get_note_name(pitch), show=False)
        for key, pitch in zip(KEY_BINDINGS, KEYBOARD_RANGE)
    ]


class VisualizerApp(App):
    """
    Textual TUI for the MIDI visualizer.

    A pure presentation layer: the session owns every component. The app
    initializes the session on mount so that the dispatcher's timers and
    the adapter's thread hop both target Textual's running event loop,
    then redraws the canvas from dispatcher snapshots at about 30 fps.

    Observes the dispatcher (NoteObserver) and the config service
    (ConfigObserver) by structural typing.

    Terminals report no key release, so a key press holds its note for
    `key_hold_duration` seconds and then sends the note-off.
    """

    TITLE = "MIDI Visualizer"

    BINDINGS = [
        *_note_bindings(),
        Binding("space", "play_demo", "Demo", show=True),
        Binding("ctrl+s", "settings", "Settings", show=True),
        Binding("ctrl+t", "cycle_style", "Style", show=True),
        Binding("ctrl+k", "cycle_scheme", "Colors", show=True),
        Binding("ctrl+g", "toggle_grid", "Grid", show=True),
        Binding("ctrl+n", "toggle_sound", "Sound", show=True),
        Binding("plus,equals_sign", "speed_up", "Faster", show=True),
        Binding("minus", "speed_down", "Slower", show=True),
        Binding("escape", "panic", "Panic", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(self, session: VisualizerSession, redraw_interval: float = REDRAW_INTERVAL):
        """
        Initialize the Textual UI application.

        Args:
            session: The session to drive (not yet initialized)
            redraw_interval: Seconds between canvas redraws
        """
        super().__init__()
        self.session = session
        self._redraw_interval = redraw_interval
        self._held_keys: dict[int, Timer] = {}
        self._redraw_timer: Optional[Timer] = None

        # Widgets live on the default screen; keep them reachable while a
        # modal is on top or the screen is being torn down
        self.canvas = NoteCanvas(id="canvas")
        self.keyboard = VirtualKeyboard()
        self.status_bar = StatusBar()
        logger.info("VisualizerApp created")

    # =================================================================
    # Textual Lifecycle
    # =================================================================

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield self.canvas
        yield self.keyboard
        yield self.status_bar
        yield Footer()

    def on_mount(self) -> None:
        """Start the session on Textual's loop and begin redrawing."""
        self.session.initialize(asyncio.get_running_loop())
        self.session.dispatcher.register_observer(self)
        self.session.config_service.register_observer(self)

        self._apply_config(self.session.config)
        self._update_midi_status()
        self._report_degraded_modes()

        self._redraw_timer = self.set_interval(self._redraw_interval, self._redraw)
        logger.info("TUI mounted")

    def on_unmount(self) -> None:
        if self._redraw_timer is not None:
            self._redraw_timer.stop()
            self._redraw_timer = None
        for timer in self._held_keys.values():
            timer.stop()
        self._held_keys.clear()
        if self.session.is_initialized:
            self.session.dispatcher.unregister_observer(self)
            self.session.config_service.unregister_observer(self)
        self.session.shutdown()
        logger.info("TUI unmounted")

    def _report_degraded_modes(self) -> None:
        if self.session.midi_error is not None:
            error = self.session.midi_error
            self.notify(
                f"{error.user_message}\n{error.recovery_hint or ''}".strip(),
                title="MIDI unavailable",
                severity="warning",
                timeout=8,
            )
        if self.session.audio_error is not None:
            self.notify(self.session.audio_error.user_message, title="No sound", severity="warning", timeout=8)

    # =================================================================
    # Drawing
    # =================================================================

    def _redraw(self) -> None:
        if not self.session.is_initialized or not self.canvas.is_mounted:
            return
        notes = self.session.dispatcher.snapshot()
        self.canvas.update_notes(notes)
        self.status_bar.update_note_count(len(notes))

    def _apply_config(self, config: AppConfig) -> None:
        self.canvas.configure(config.visualization_style, config.show_grid, config.max_radius)
        self.status_bar.update_settings(
            config.visualization_style,
            config.color_scheme,
            config.animation_speed,
            config.sound_enabled,
        )

    def _update_midi_status(self) -> None:
        adapter = self.session.adapter
        self.status_bar.update_midi(adapter.is_connected, adapter.destination_name)

    # =================================================================
    # Observers
    # =================================================================

    def on_note_event(self, event: NoteLifecycleEvent, pitch: Optional[int]) -> None:
        if event in (NoteLifecycleEvent.NOTE_STARTED, NoteLifecycleEvent.NOTES_CLEARED):
            self.status_bar.update_note_count(len(self.session.dispatcher))

    def on_config_event(self, event: ConfigEvent, **kwargs: Any) -> None:
        config = kwargs.get("config")
        if config is not None and event != ConfigEvent.CONFIG_SAVED:
            self._apply_config(config)

    # =================================================================
    # Playing
    # =================================================================

    def press_key(self, pitch: int) -> None:
        """Play `pitch` and schedule its release."""
        timer = self._held_keys.pop(pitch, None)
        if timer is not None:
            timer.stop()

        self.session.play_key(pitch)
        self.keyboard.set_held(pitch, True)
        hold = self.session.config.key_hold_duration
        self._held_keys[pitch] = self.set_timer(hold, lambda: self._on_hold_elapsed(pitch))

    def release_key(self, pitch: int) -> None:
        timer = self._held_keys.pop(pitch, None)
        if timer is not None:
            timer.stop()
        self.session.release_key(pitch)
        self.keyboard.set_held(pitch, False)

    def _on_hold_elapsed(self, pitch: int) -> None:
        self._held_keys.pop(pitch, None)
        if not self.session.is_initialized:
            return
        self.release_key(pitch)

    def on_virtual_keyboard_key_pressed(self, message: VirtualKeyboard.KeyPressed) -> None:
        self.press_key(message.pitch)

    def action_play_note(self, pitch: int) -> None:
        self.press_key(pitch)

    def action_play_demo(self) -> None:
        self.session.play_demo()

    def action_panic(self) -> None:
        for pitch in list(self._held_keys):
            self._held_keys.pop(pitch).stop()
            self.keyboard.set_held(pitch, False)
        self.session.panic()

    # =================================================================
    # Settings
    # =================================================================

    def action_settings(self) -> None:
        self.push_screen(SettingsScreen(self.session.config), callback=self._apply_settings)

    def _apply_settings(self, changes: Optional[dict[str, Any]]) -> None:
        if not changes:
            return
        service = self.session.config_service
        service.update(changes)
        logger.info(f"Settings changed: {changes}")

        if service.default_path is not None:
            try:
                service.save()
            except OSError as e:
                logger.error(f"Could not save settings: {e}")
                self.notify(f"Settings not saved: {e}", severity="error")

    def action_cycle_style(self) -> None:
        style = self.session.cycle_style()
        self.notify(f"Style: {style.value}", timeout=1.5)

    def action_cycle_scheme(self) -> None:
        scheme = self.session.cycle_color_scheme()
        self.notify(f"Colors: {scheme.value}", timeout=1.5)

    def action_toggle_grid(self) -> None:
        self.session.toggle_grid()

    def action_toggle_sound(self) -> None:
        enabled = self.session.toggle_sound()
        self.notify(f"Sound {'on' if enabled else 'off'}", timeout=1.5)

    def action_speed_up(self) -> None:
        self.session.adjust_speed(SPEED_STEP)

    def action_speed_down(self) -> None:
        self.session.adjust_speed(-SPEED_STEP)
