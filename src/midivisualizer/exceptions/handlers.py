"""Helpers that translate library errors into MidiVisualizerError types.

Low-level libraries (pydantic, python-rtmidi, sounddevice) raise their own
exception types. These helpers map them onto the application hierarchy so
the CLI and the TUI can show one consistent message plus a recovery hint.
"""

import logging
from typing import Optional

from .audio import AudioDeviceError
from .base import MidiVisualizerError
from .config import ConfigFileInvalidError, ConfigValidationError
from .midi import PortUnavailableError

logger = logging.getLogger(__name__)


def wrap_pydantic_error(error: Exception, file_path: str) -> MidiVisualizerError:
    """
    Convert Pydantic validation errors to configuration exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    # Invalid JSON syntax rather than invalid values
    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", ("unknown",)))
            return ConfigValidationError(
                field=field,
                value=first_error.get("input"),
                error_msg=first_error.get("msg", "validation failed"),
                file_path=file_path,
            )
        if errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get("loc", ("unknown",)))
                error_lines.append(f"  - {field}: {err.get('msg', 'validation failed')}")
            combined_msg = f"{len(errors)} validation errors:\n" + "\n".join(error_lines)
            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=combined_msg,
                file_path=file_path,
            )

    return ConfigValidationError(field="unknown", value=None, error_msg=error_msg, file_path=file_path)


def wrap_midi_error(error: Exception, port_name: str) -> PortUnavailableError:
    """
    Convert a python-rtmidi failure into PortUnavailableError.

    Args:
        error: The exception raised by the MIDI backend
        port_name: Name of the virtual endpoint being registered

    Returns:
        PortUnavailableError carrying the original message
    """
    return PortUnavailableError(port_name=port_name, original_error=f"{type(error).__name__}: {error}")


def wrap_audio_device_error(error: Exception, device_id: Optional[int] = None) -> AudioDeviceError:
    """
    Convert low-level audio errors (PortAudio, sounddevice) to AudioDeviceError.

    Args:
        error: The original exception from the audio library
        device_id: The device ID involved in the error

    Returns:
        AudioDeviceError with a user-facing message
    """
    error_msg = str(error)

    if "PaErrorCode -9996" in error_msg or "Invalid device" in error_msg:
        user_msg = "Audio device is unavailable or already in use."
    else:
        user_msg = f"Audio device error: {error_msg}"

    return AudioDeviceError(
        user_message=user_msg,
        technical_message=f"Audio device {device_id} error: {error_msg}",
        device_id=device_id,
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, MidiVisualizerError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None
