"""Audio output stream management."""

import logging
from typing import Any, Callable, Optional

import numpy as np
import sounddevice as sd

from midivisualizer.exceptions import wrap_audio_device_error
from midivisualizer.models import AppConfig

logger = logging.getLogger(__name__)

AudioCallback = Callable[[np.ndarray, int], None]


class AudioDevice:
    """
    One sounddevice OutputStream and its lifecycle.

    The stream pulls float32 blocks from a callback set with
    `set_callback`; the callback runs on the PortAudio thread.
    """

    def __init__(
        self,
        device: Optional[int] = None,
        sample_rate: int = 44100,
        buffer_size: int = 256,
        num_channels: int = 2,
    ):
        """
        Initialize audio device (no stream is opened yet).

        Args:
            device: Output device ID (None for the system default)
            sample_rate: Stream sample rate in Hz
            buffer_size: Frames per block (lower = less latency)
            num_channels: Number of output channels (1=mono, 2=stereo)
        """
        self.device = device
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.num_channels = num_channels

        self._stream: Optional[sd.OutputStream] = None
        self._callback: Optional[AudioCallback] = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "AudioDevice":
        return cls(
            device=config.audio_device,
            sample_rate=config.sample_rate,
            buffer_size=config.audio_buffer_size,
        )

    def set_callback(self, callback: AudioCallback) -> None:
        """
        Set the block generator.

        Args:
            callback: Function(outdata: np.ndarray, frames: int) -> None that
                      fills `outdata` in place
        """
        self._callback = callback

    def start(self) -> None:
        """
        Open and start the output stream.

        Raises:
            RuntimeError: If no callback was set
            AudioDeviceError: If PortAudio refuses the device or settings
        """
        if self.is_running:
            return
        if self._callback is None:
            raise RuntimeError("No audio callback set. Call set_callback() first.")

        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                blocksize=self.buffer_size,
                channels=self.num_channels,
                device=self.device,
                dtype=np.float32,
                callback=self._audio_callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            logger.error(f"Failed to start audio stream on device {self.device}: {e}")
            raise wrap_audio_device_error(e, self.device) from e

        self._stream = stream
        buffer_ms = self.buffer_size / self.sample_rate * 1000
        logger.info(
            f"Audio stream started: {self.device_name}, {self.sample_rate} Hz, "
            f"{self.buffer_size} frames ({buffer_ms:.1f}ms), latency {self.latency * 1000:.1f}ms"
        )

    def stop(self) -> None:
        """Stop and close the stream (idempotent)."""
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            logger.warning(f"Error closing audio stream: {e}")
        logger.info("Audio stream stopped")

    def _audio_callback(self, outdata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        """PortAudio callback; delegates to the block generator."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback is not None:
            self._callback(outdata, frames)
        else:
            outdata.fill(0)

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    @property
    def latency(self) -> float:
        """Current stream latency in seconds."""
        if self._stream is not None:
            return self._stream.latency
        return 0.0

    @property
    def device_name(self) -> str:
        """Name of the selected output device."""
        try:
            if self.device is not None:
                return sd.query_devices(self.device)["name"]
            default_device = sd.default.device[1]
            if default_device is not None and default_device >= 0:
                return f"{sd.query_devices(default_device)['name']} (default)"
        except (sd.PortAudioError, ValueError):
            return "Unknown Device"
        return "Default Device"

    @staticmethod
    def list_output_devices() -> list[tuple[int, str, str, float]]:
        """
        List every device with output channels.

        Returns:
            List of (device_id, device_name, host_api_name, default_sample_rate)

        Raises:
            AudioDeviceError: If PortAudio cannot enumerate devices
        """
        try:
            devices = sd.query_devices()
            hostapis = sd.query_hostapis()
        except sd.PortAudioError as e:
            raise wrap_audio_device_error(e) from e

        return [
            (index, device["name"], hostapis[device["hostapi"]]["name"], device["default_samplerate"])
            for index, device in enumerate(devices)
            if device["max_output_channels"] > 0
        ]

    @staticmethod
    def get_default_device() -> Optional[int]:
        """Default output device ID, or None when there is none."""
        device = sd.default.device[1]
        return device if device is not None and device >= 0 else None

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
