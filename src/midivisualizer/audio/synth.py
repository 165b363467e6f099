"""Sine-tone synthesizer that echoes notes as sound."""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any

import numpy as np
import numpy.typing as npt

from midivisualizer.models import MIDI_MAX, AppConfig
from midivisualizer.protocols import ConfigEvent

logger = logging.getLogger(__name__)

DEFAULT_ATTACK = 0.005
DEFAULT_RELEASE = 0.3
A4_PITCH = 69
A4_FREQUENCY = 440.0


def pitch_to_frequency(pitch: int) -> float:
    """Equal-tempered frequency in Hz (A4 = 440 Hz)."""
    return A4_FREQUENCY * 2.0 ** ((pitch - A4_PITCH) / 12.0)


@dataclass(slots=True)
class _Voice:
    frequency: float
    amplitude: float
    phase: float = 0.0
    level: float = 0.0
    releasing: bool = False


class ToneSynth:
    """
    Polyphonic sine synth, one voice per pitch.

    Implements SynthOutput for the port adapter and ConfigObserver for the
    sound on/off switch and master volume.

    Threading:
        `play_note`/`stop_note` run on the presentation loop while `render`
        runs on the audio thread; the voice table is guarded by a lock.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        master_volume: float = 0.3,
        enabled: bool = True,
        num_channels: int = 2,
        attack: float = DEFAULT_ATTACK,
        release: float = DEFAULT_RELEASE,
    ):
        self.sample_rate = sample_rate
        self.master_volume = master_volume
        self.num_channels = num_channels
        self.attack = attack
        self.release = release

        self._voices: dict[int, _Voice] = {}
        self._lock = Lock()
        self._enabled = enabled

    @classmethod
    def from_config(cls, config: AppConfig) -> "ToneSynth":
        return cls(
            sample_rate=config.sample_rate,
            master_volume=config.master_volume,
            enabled=config.sound_enabled,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        """Switching sound off releases every voice."""
        self._enabled = bool(value)
        if not self._enabled:
            self.all_notes_off()
        logger.info(f"Sound {'enabled' if self._enabled else 'disabled'}")

    # =================================================================
    # SynthOutput
    # =================================================================

    def play_note(self, pitch: int, velocity: int) -> None:
        """Start a tone, or restart it at the new velocity keeping its phase."""
        if not self._enabled or velocity <= 0:
            return
        amplitude = velocity / MIDI_MAX
        with self._lock:
            voice = self._voices.get(pitch)
            if voice is None:
                self._voices[pitch] = _Voice(pitch_to_frequency(pitch), amplitude)
            else:
                voice.amplitude = amplitude
                voice.releasing = False

    def stop_note(self, pitch: int) -> None:
        """Release the tone; it decays over the release time."""
        with self._lock:
            voice = self._voices.get(pitch)
            if voice is not None:
                voice.releasing = True

    def all_notes_off(self) -> None:
        with self._lock:
            for voice in self._voices.values():
                voice.releasing = True

    @property
    def active_voice_count(self) -> int:
        with self._lock:
            return len(self._voices)

    def is_voice_active(self, pitch: int) -> bool:
        """True while `pitch` is sounding or still decaying."""
        with self._lock:
            return pitch in self._voices

    # =================================================================
    # Rendering (audio thread)
    # =================================================================

    def render(self, frames: int) -> npt.NDArray[np.float32]:
        """
        Generate the next `frames` frames.

        Returns:
            float32 buffer of shape (frames, num_channels), soft-clipped
            to (-1, 1)
        """
        mono = np.zeros(frames, dtype=np.float64)
        steps = np.arange(1, frames + 1, dtype=np.float64)
        attack_step = 1.0 / max(self.attack * self.sample_rate, 1.0)
        release_step = 1.0 / max(self.release * self.sample_rate, 1.0)

        with self._lock:
            finished = []
            for pitch, voice in self._voices.items():
                if voice.releasing:
                    levels = np.maximum(voice.level - release_step * steps, 0.0)
                else:
                    levels = np.minimum(voice.level + attack_step * steps, voice.amplitude)

                increment = 2.0 * np.pi * voice.frequency / self.sample_rate
                phases = voice.phase + increment * steps
                mono += np.sin(phases - increment) * levels

                voice.phase = float(phases[-1] % (2.0 * np.pi)) if frames else voice.phase
                voice.level = float(levels[-1]) if frames else voice.level
                if voice.releasing and voice.level <= 0.0:
                    finished.append(pitch)

            for pitch in finished:
                del self._voices[pitch]

        output = np.tanh(mono * self.master_volume).astype(np.float32)
        if self.num_channels == 1:
            return output
        return np.repeat(output[:, np.newaxis], self.num_channels, axis=1)

    def fill_buffer(self, outdata: np.ndarray, frames: int) -> None:
        """AudioDevice callback: render straight into the stream buffer."""
        block = self.render(frames)
        outdata[:] = block.reshape(outdata.shape)

    # =================================================================
    # ConfigObserver
    # =================================================================

    def on_config_event(self, event: ConfigEvent, **kwargs: Any) -> None:
        config: AppConfig | None = kwargs.get("config")
        if config is None:
            return
        self.master_volume = config.master_volume
        if config.sound_enabled != self._enabled:
            self.enabled = config.sound_enabled
