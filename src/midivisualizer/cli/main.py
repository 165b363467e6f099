"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from midivisualizer import __version__
from midivisualizer.models import MAX_ANIMATION_SPEED, MIN_ANIMATION_SPEED, ColorScheme, VisualizationStyle
from midivisualizer.utils import default_log_path

from .commands import audio_group, config_group, midi_group

logger = logging.getLogger(__name__)

DEBUG_LOG_NAME = "midivisualizer-debug.log"


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Log file used for the given flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / DEBUG_LOG_NAME
    return default_log_path()


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure file logging (the TUI owns stdout).

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: DEBUG level, logging to ./midivisualizer-debug.log
        log_file: Custom log file path (its level comes from `log_level`)
        log_level: Level used together with `log_file`

    Returns:
        Path of the log file
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Keeps the last 5 files, 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


def show_error(error: Exception, log_path: Optional[Path] = None) -> None:
    """Print an error with its recovery hint, without a traceback."""
    from midivisualizer.exceptions import format_error_for_display

    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)
    if log_path is not None:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
        click.echo("For logging options, run: midivisualizer --help", err=True)


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="midivisualizer")
@click.option(
    "--style",
    type=click.Choice([style.value for style in VisualizationStyle], case_sensitive=False),
    default=None,
    help="Visualization style for this session",
)
@click.option(
    "--scheme",
    type=click.Choice([scheme.value for scheme in ColorScheme], case_sensitive=False),
    default=None,
    help="Color scheme for this session",
)
@click.option(
    "--speed",
    type=click.FloatRange(MIN_ANIMATION_SPEED, MAX_ANIMATION_SPEED),
    default=None,
    help=f"Animation speed ({MIN_ANIMATION_SPEED}-{MAX_ANIMATION_SPEED})",
)
@click.option(
    "--sound/--no-sound",
    default=None,
    help="Echo notes as tones (default: from config)",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG)")
@click.option(
    "--debug",
    is_flag=True,
    help=f"Enable debug mode (DEBUG level, logs to ./{DEBUG_LOG_NAME})",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom log file path",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level for --log-file (default: INFO)",
)
def cli(
    ctx,
    style: Optional[str],
    scheme: Optional[str],
    speed: Optional[float],
    sound: Optional[bool],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str,
):
    """
    MIDI Visualizer - see MIDI notes as they are played.

    Creates a virtual MIDI destination that other applications (DAWs,
    sequencers, controllers) can send notes to, and a virtual source that
    carries the notes played on the on-screen keyboard.

    \b
    Keys:
      a w s e d f t g y h u j   play C4..B4
      space                     play the demo melody
      ctrl+s                    settings
      escape                    release all notes

    \b
    Examples:
      # Start the visualizer
      midivisualizer

      # Bars, fire colors, faster fades, no sound
      midivisualizer --style bars --scheme fire --speed 1.5 --no-sound

      # Enable debug logging
      midivisualizer --debug

      # List MIDI ports / watch incoming notes
      midivisualizer midi list
      midivisualizer midi monitor
    """
    if ctx.invoked_subcommand is not None:
        return

    # Lazy imports to keep subcommands light
    from midivisualizer.core import VisualizerSession
    from midivisualizer.models import AppConfig
    from midivisualizer.tui import VisualizerApp
    from midivisualizer.utils import default_config_path

    log_path = setup_logging(verbose, debug, log_file, log_level)
    logger.info("Starting MIDI Visualizer")

    session = None
    try:
        config_path = default_config_path()
        config_obj = AppConfig.load_or_default(config_path)
        if not config_path.exists():
            config_obj.save(config_path)

        overrides = {
            "visualization_style": style,
            "color_scheme": scheme,
            "animation_speed": speed,
            "sound_enabled": sound,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if overrides:
            logger.info(f"Session overrides: {overrides}")
            config_obj = AppConfig.model_validate({**config_obj.model_dump(), **overrides})

        session = VisualizerSession(config_obj, config_path=config_path)
        VisualizerApp(session).run()

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running application")
        show_error(e, log_path)
        sys.exit(1)
    finally:
        if session is not None:
            session.shutdown()


cli.add_command(audio_group)
cli.add_command(midi_group)
cli.add_command(config_group)

if __name__ == "__main__":
    cli()
