"""Top-level session: owns and wires every runtime component."""

import asyncio
import logging
import random
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from midivisualizer.audio import ToneSynth
from midivisualizer.exceptions import AudioDeviceError, PortUnavailableError
from midivisualizer.midi import MidiPortAdapter, VirtualMidiClient
from midivisualizer.models import (
    MAX_ANIMATION_SPEED,
    MIN_ANIMATION_SPEED,
    AppConfig,
    ColorScheme,
    VisualizationStyle,
)
from midivisualizer.services import ConfigService

from .dispatcher import NoteLifecycleDispatcher
from .sequencer import DemoSequencer

if TYPE_CHECKING:
    from midivisualizer.audio.device import AudioDevice

logger = logging.getLogger(__name__)

SPEED_STEP = 0.1


def open_audio_device(config: AppConfig) -> "AudioDevice":
    """
    Default audio factory: an output stream on the configured device.

    Raises:
        AudioDeviceError: If PortAudio cannot be loaded
    """
    try:
        from midivisualizer.audio.device import AudioDevice
    except OSError as e:
        raise AudioDeviceError(
            "Audio output is unavailable: the PortAudio library could not be loaded.",
            technical_message=str(e),
            device_id=config.audio_device,
        ) from e

    return AudioDevice.from_config(config)


class VisualizerSession:
    """
    Builds, connects and tears down the visualizer components.

    Ownership:
        The session owns the config service, dispatcher, port adapter,
        synth, audio device and sequencer. Components only hold
        non-owning references to each other:

            adapter --sink--> dispatcher
            adapter --audio--> synth
            config service --observers--> dispatcher, synth

    Degraded modes:
        - MIDI endpoints refused: `midi_error` is set, and on-screen keys and
          the demo still work through the adapter's loopback.
        - Audio stream refused: `audio_error` is set and notes are silent.

    Threading:
        Every method runs on the presentation loop passed to `initialize()`.
    """

    def __init__(
        self,
        config: AppConfig,
        client_factory: Callable[[str], VirtualMidiClient] = VirtualMidiClient,
        synth: Optional[ToneSynth] = None,
        audio_factory: Optional[Callable[[AppConfig], "AudioDevice"]] = open_audio_device,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the session (nothing is started until `initialize()`).

        Args:
            config: Starting configuration
            client_factory: Creates the platform MIDI client
            synth: Tone synth (created from config if None)
            audio_factory: Creates the audio output device; None runs silent
            config_path: Where the config service saves to
        """
        self._initial_config = config
        self._client_factory = client_factory
        self._audio_factory = audio_factory
        self._config_path = config_path

        self.synth = synth or ToneSynth.from_config(config)
        self.config_service: Optional[ConfigService[AppConfig]] = None
        self.dispatcher: Optional[NoteLifecycleDispatcher] = None
        self.adapter: Optional[MidiPortAdapter] = None
        self.sequencer: Optional[DemoSequencer] = None
        self.audio_device: Optional["AudioDevice"] = None

        self.midi_error: Optional[PortUnavailableError] = None
        self.audio_error: Optional[AudioDeviceError] = None

        self._rng = random.Random()
        self._initialized = False
        self._shut_down = False

    # =================================================================
    # Lifecycle
    # =================================================================

    def initialize(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Build every component on `loop` and open MIDI and audio.

        Neither a refused MIDI endpoint nor a refused audio stream is fatal;
        both are logged once and kept in `midi_error`/`audio_error`.
        """
        if self._initialized:
            logger.warning("Session already initialized")
            return

        config = self._initial_config
        self.config_service = ConfigService[AppConfig](AppConfig, config, default_path=self._config_path)

        self.dispatcher = NoteLifecycleDispatcher.from_config(loop, config)
        self.config_service.register_observer(self.dispatcher)
        self.config_service.register_observer(self.synth)

        self.adapter = MidiPortAdapter(
            loop,
            client_name=config.client_name,
            source_name=config.source_name,
            destination_name=config.destination_name,
            client_factory=self._client_factory,
        )
        self.adapter.set_sink(self.dispatcher)
        self.adapter.set_audio(self.synth)

        self.sequencer = DemoSequencer(self.adapter, loop, velocity=config.demo_velocity)
        self._initialized = True

        self._open_midi()
        self._start_audio(config)
        logger.info("Session initialized")

    def _open_midi(self) -> None:
        try:
            self.adapter.open()
        except PortUnavailableError as e:
            self.midi_error = e
            logger.warning(f"Running in loopback-only mode: {e.technical_message or e.user_message}")

    def _start_audio(self, config: AppConfig) -> None:
        if self._audio_factory is None:
            logger.info("Audio output disabled for this session")
            return
        try:
            device = self._audio_factory(config)
            device.set_callback(self.synth.fill_buffer)
            device.start()
        except AudioDeviceError as e:
            self.audio_error = e
            logger.warning(f"Running without sound: {e.technical_message or e.user_message}")
            return
        self.audio_device = device

    def shutdown(self) -> None:
        """
        Stop the demo, cancel timers, release notes, MIDI handles and audio.

        Idempotent.
        """
        if not self._initialized or self._shut_down:
            return
        self._shut_down = True

        self.sequencer.stop()
        self.dispatcher.clear()
        self.adapter.close()
        self.adapter.set_sink(None)
        self.adapter.set_audio(None)

        self.synth.all_notes_off()
        if self.audio_device is not None:
            self.audio_device.stop()
            self.audio_device = None

        self.config_service.unregister_observer(self.dispatcher)
        self.config_service.unregister_observer(self.synth)
        logger.info("Session shut down")

    @property
    def is_initialized(self) -> bool:
        return self._initialized and not self._shut_down

    @property
    def config(self) -> AppConfig:
        """Current configuration (a copy)."""
        if self.config_service is None:
            return self._initial_config.model_copy(deep=True)
        return self.config_service.get_config()

    # =================================================================
    # Playing
    # =================================================================

    def random_key_velocity(self) -> int:
        """Velocity for an on-screen key press, uniformly drawn from the configured range."""
        config = self.config
        return self._rng.randint(config.key_velocity_min, config.key_velocity_max)

    def play_key(self, pitch: int, velocity: Optional[int] = None) -> None:
        """Send a note-on for an on-screen key."""
        self.adapter.send_note_on(pitch, velocity if velocity is not None else self.random_key_velocity())

    def release_key(self, pitch: int) -> None:
        """Send the note-off for an on-screen key."""
        self.adapter.send_note_off(pitch)

    def play_demo(self) -> asyncio.Task:
        """Start (or restart) the demo melody."""
        return self.sequencer.play()

    def panic(self) -> None:
        """Stop the demo and send a note-off for every sounding pitch."""
        self.sequencer.stop()
        pitches = self.dispatcher.sounding_pitches
        for pitch in pitches:
            self.adapter.send_note_off(pitch)
        self.synth.all_notes_off()
        logger.info(f"Panic: released {len(pitches)} note(s)")

    # =================================================================
    # Settings shortcuts
    # =================================================================

    def cycle_style(self) -> VisualizationStyle:
        styles = list(VisualizationStyle)
        current = VisualizationStyle(self.config_service.get("visualization_style"))
        style = styles[(styles.index(current) + 1) % len(styles)]
        self.config_service.set("visualization_style", style)
        return style

    def cycle_color_scheme(self) -> ColorScheme:
        scheme = ColorScheme(self.config_service.get("color_scheme")).next()
        self.config_service.set("color_scheme", scheme)
        return scheme

    def adjust_speed(self, delta: float = SPEED_STEP) -> float:
        """Change the animation speed by `delta`, clamped to the allowed range."""
        speed = self.config_service.get("animation_speed") + delta
        speed = round(min(max(speed, MIN_ANIMATION_SPEED), MAX_ANIMATION_SPEED), 2)
        self.config_service.set("animation_speed", speed)
        return speed

    def toggle_grid(self) -> bool:
        show_grid = not self.config_service.get("show_grid")
        self.config_service.set("show_grid", show_grid)
        return show_grid

    def toggle_sound(self) -> bool:
        sound_enabled = not self.config_service.get("sound_enabled")
        self.config_service.set("sound_enabled", sound_enabled)
        return sound_enabled
