"""Audio echo: tone synthesis and the output stream.

`AudioDevice` lives in `midivisualizer.audio.device` and is imported on
demand, since loading sounddevice requires the PortAudio library.
"""

from .synth import ToneSynth, pitch_to_frequency

__all__ = ["ToneSynth", "pitch_to_frequency"]
