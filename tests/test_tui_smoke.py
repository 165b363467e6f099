"""Smoke tests for the TUI using Textual's test framework.

These tests verify that the TUI can launch, render, and respond to basic
interactions without crashing. MIDI endpoints come from the in-memory fake
backend and the session runs without an audio device.
"""

import pytest
from textual.widgets import Button, Select

from midivisualizer.core import VisualizerSession
from midivisualizer.models import AppConfig, ColorScheme, NoteState
from midivisualizer.tui import VisualizerApp
from midivisualizer.tui.screens import SettingsScreen
from midivisualizer.tui.widgets import NoteCanvas, StatusBar, VirtualKeyboard


@pytest.fixture
def tui_config():
    """Keys stay held for the whole test unless released explicitly."""
    return AppConfig(sound_enabled=False, key_hold_duration=30.0)


def make_app(config, backend, config_path=None) -> VisualizerApp:
    session = VisualizerSession(config, client_factory=backend, audio_factory=None, config_path=config_path)
    return VisualizerApp(session)


async def wait_until(pilot, condition, timeout: float = 5.0) -> None:
    """Let the app run until `condition()` holds."""
    waited = 0.0
    while not condition():
        if waited >= timeout:
            raise AssertionError("condition not reached within timeout")
        await pilot.pause(0.02)
        waited += 0.02


@pytest.mark.integration
@pytest.mark.asyncio
class TestTUILaunch:
    """Test that the TUI can launch without crashing."""

    async def test_mounts_widgets(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            assert app.session.is_initialized
            assert app.query_one(NoteCanvas) is not None
            assert app.query_one(VirtualKeyboard) is not None
            assert app.query_one("Header") is not None
            assert app.query_one("Footer") is not None
            assert len(app.query(Button)) == 12

    async def test_status_bar_shows_connected_destination(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            status = app.query_one(StatusBar)
            assert "MIDI Visualizer Destination" in status.status_text
            assert "circles / rainbow / 1.0x" in status.status_text
            assert not status.has_class("degraded")

    async def test_loopback_only_when_ports_refused(self, tui_config, refusing_midi_backend):
        app = make_app(tui_config, refusing_midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            status = app.query_one(StatusBar)
            assert app.session.midi_error is not None
            assert "Loopback only" in status.status_text
            assert status.has_class("degraded")


@pytest.mark.integration
@pytest.mark.asyncio
class TestTUIPlaying:
    """On-screen input reaches the dispatcher."""

    async def test_key_press_plays_note(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            await pilot.press("a")
            await wait_until(pilot, lambda: app.session.dispatcher.get_note(60) is not None)

            assert app.session.dispatcher.state_of(60) == NoteState.SOUNDING
            assert midi_backend.client.source.sent[0][:2] == [0x90, 60]

    async def test_key_released_after_hold(self, midi_backend):
        config = AppConfig(sound_enabled=False, key_hold_duration=0.05, base_fade_duration=30.0)
        app = make_app(config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            await pilot.press("d")
            await wait_until(pilot, lambda: app.session.dispatcher.state_of(64) == NoteState.FADING_OUT)

            assert app.session.dispatcher.state_of(64) == NoteState.FADING_OUT
            assert midi_backend.client.source.sent[-1] == [0x80, 64, 64]

    async def test_keyboard_button_plays_note(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            app.query_one("#key-67", Button).press()
            await wait_until(pilot, lambda: app.session.dispatcher.get_note(67) is not None)

            assert app.session.dispatcher.get_note(67) is not None

    async def test_panic_releases_everything(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("a")
            await pilot.press("s")
            await wait_until(pilot, lambda: len(app.session.dispatcher.sounding_pitches) == 2)
            assert sorted(app.session.dispatcher.sounding_pitches) == [60, 62]

            app.action_panic()
            await pilot.pause()

            assert app.session.dispatcher.sounding_pitches == []

    async def test_canvas_receives_snapshots(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("a")
            await wait_until(pilot, lambda: len(app.canvas.notes) == 1)

            assert [note.pitch for note in app.canvas.notes] == [60]


@pytest.mark.integration
@pytest.mark.asyncio
class TestTUISettings:
    """Settings dialog and shortcuts."""

    async def test_settings_cancel(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            app.action_settings()
            await wait_until(pilot, lambda: isinstance(app.screen, SettingsScreen))

            app.screen.query_one("#cancel-btn", Button).press()
            await wait_until(pilot, lambda: not isinstance(app.screen, SettingsScreen))

            assert not isinstance(app.screen, SettingsScreen)
            assert app.session.config.color_scheme == ColorScheme.RAINBOW

    async def test_settings_apply_updates_and_saves(self, tui_config, midi_backend, temp_dir):
        config_path = temp_dir / "config.json"
        app = make_app(tui_config, midi_backend, config_path=config_path)

        async with app.run_test() as pilot:
            await pilot.pause()

            app.action_settings()
            await wait_until(pilot, lambda: isinstance(app.screen, SettingsScreen))
            screen = app.screen
            screen.query_one("#scheme", Select).value = ColorScheme.FIRE
            await pilot.pause()
            screen.query_one("#apply-btn", Button).press()
            await wait_until(pilot, config_path.exists)

            assert app.session.config.color_scheme == ColorScheme.FIRE
            assert app.session.dispatcher.color_scheme == ColorScheme.FIRE
            assert "fire" in app.status_bar.status_text
            assert AppConfig.load_or_default(config_path).color_scheme == ColorScheme.FIRE

    async def test_shortcut_actions(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            app.action_cycle_style()
            app.action_cycle_scheme()
            app.action_speed_up()
            app.action_toggle_grid()
            await pilot.pause()

            config = app.session.config
            assert config.visualization_style.value == "bars"
            assert config.color_scheme == ColorScheme.FIRE
            assert config.animation_speed == 1.1
            assert config.show_grid is False
            assert "bars / fire / 1.1x" in app.status_bar.status_text


@pytest.mark.integration
@pytest.mark.asyncio
class TestTUIRedraw:
    """The periodic redraw keeps working while another screen is on top."""

    async def test_redraw_timer_running(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()

            assert app._redraw_timer is not None

    async def test_redraw_with_settings_open(self, tui_config, midi_backend):
        app = make_app(tui_config, midi_backend)

        async with app.run_test() as pilot:
            await pilot.pause()
            app.action_settings()
            await wait_until(pilot, lambda: isinstance(app.screen, SettingsScreen))

            app.session.play_key(65, 100)
            await wait_until(pilot, lambda: app.session.dispatcher.get_note(65) is not None)
            app._redraw()

            assert [note.pitch for note in app.canvas.notes] == [65]
            assert "♫ 1" in app.status_bar.status_text
