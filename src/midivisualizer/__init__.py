"""MIDI Visualizer: real-time note visualization with virtual MIDI ports."""

__version__ = "0.1.0"
