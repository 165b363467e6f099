"""
Custom exception hierarchy for MIDI Visualizer.

## Exception Hierarchy

```
MidiVisualizerError (base)
├── MidiPortError
│   └── PortUnavailableError
├── AudioDeviceError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

Every error carries a `user_message`, a `technical_message` for the logs,
a `recoverable` flag and an optional `recovery_hint`. Port and audio
errors are recoverable: the session keeps running in a degraded mode
(loopback-only MIDI, silent audio).

### Example: Virtual port refused

```python
from midivisualizer.exceptions import PortUnavailableError

raise PortUnavailableError("MIDI Visualizer Destination", original_error="ALSA error")
```
"""

from .audio import AudioDeviceError
from .base import MidiVisualizerError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    format_error_for_display,
    wrap_audio_device_error,
    wrap_midi_error,
    wrap_pydantic_error,
)
from .midi import MidiPortError, PortUnavailableError

__all__ = [
    "AudioDeviceError",
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "MidiPortError",
    "MidiVisualizerError",
    "PortUnavailableError",
    "format_error_for_display",
    "wrap_audio_device_error",
    "wrap_midi_error",
    "wrap_pydantic_error",
]
