"""MIDI command implementations."""

import asyncio
import logging
from datetime import datetime

import click

from midivisualizer.exceptions import MidiPortError, PortUnavailableError
from midivisualizer.midi import MidiPortAdapter, VirtualMidiClient
from midivisualizer.models import AppConfig, NoteEvent, get_note_name

logger = logging.getLogger(__name__)


def format_note_event(event: NoteEvent) -> str:
    """One-line description of a note event."""
    name = get_note_name(event.pitch)
    if event.is_note_on:
        return f"Note On  {name:<4} (pitch {event.pitch:>3}, velocity {event.velocity:>3})"
    return f"Note Off {name:<4} (pitch {event.pitch:>3})"


class EchoSink:
    """NoteEventSink printing every event with a timestamp."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.count = 0

    def handle_note_event(self, event: NoteEvent) -> None:
        self.count += 1
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        click.echo(f"[{timestamp}] {self.prefix}{format_note_event(event)}")


def _make_adapter(loop: asyncio.AbstractEventLoop, config: AppConfig) -> MidiPortAdapter:
    return MidiPortAdapter(
        loop,
        client_name=config.client_name,
        source_name=config.source_name,
        destination_name=config.destination_name,
        client_factory=VirtualMidiClient,
    )


@click.group(name="midi")
def midi_group():
    """MIDI port commands."""
    pass


@midi_group.command(name="list")
def list_midi():
    """List available MIDI ports."""
    try:
        ports = VirtualMidiClient.list_ports()
    except MidiPortError as e:
        logger.error(e.technical_message)
        raise click.ClickException(f"{e.user_message} {e.recovery_hint or ''}".strip())

    click.echo("MIDI Input Ports:\n")
    if not ports["input"]:
        click.echo("  No MIDI input ports found.")
    else:
        for i, port in enumerate(ports["input"]):
            click.echo(f"  [{i}] {port}")

    click.echo("\nMIDI Output Ports:\n")
    if not ports["output"]:
        click.echo("  No MIDI output ports found.")
    else:
        for i, port in enumerate(ports["output"]):
            click.echo(f"  [{i}] {port}")


async def _monitor(config: AppConfig) -> None:
    loop = asyncio.get_running_loop()
    with _make_adapter(loop, config) as adapter:
        adapter.set_sink(EchoSink())
        click.echo(f"Listening on virtual destination '{adapter.destination_name}'")
        click.echo("Send notes to it from any MIDI application. Press Ctrl+C to stop\n")
        await asyncio.Event().wait()


@midi_group.command(name="monitor")
def monitor_midi():
    """
    Print the notes arriving at the virtual destination.

    Opens the same virtual ports as the visualizer and prints every
    decoded note-on and note-off with its note name.

    Press Ctrl+C to stop monitoring.
    """
    config = AppConfig.load_or_default()
    try:
        asyncio.run(_monitor(config))
    except PortUnavailableError as e:
        logger.error(f"Cannot monitor: {e.technical_message}")
        raise click.ClickException(f"{e.user_message} {e.recovery_hint or ''}".strip())
    except KeyboardInterrupt:
        click.echo("\n\nStopping monitor...")


async def _play_demo(config: AppConfig, delay: float) -> int:
    from midivisualizer.core import DemoSequencer

    loop = asyncio.get_running_loop()
    with _make_adapter(loop, config) as adapter:
        sink = EchoSink(prefix="-> ")
        adapter.set_sink(sink)
        click.echo(f"Playing demo through virtual source '{adapter.source_name}'")
        if delay > 0:
            click.echo(f"Starting in {delay:.1f}s...")
            await asyncio.sleep(delay)

        await DemoSequencer(adapter, loop, velocity=config.demo_velocity).play()
        # Let the loopback of the final note-off reach the sink
        await asyncio.sleep(0)
        return sink.count


@midi_group.command(name="demo")
@click.option(
    "--delay",
    type=click.FloatRange(min=0.0),
    default=0.0,
    help="Seconds to wait before playing, to connect a listener",
)
def demo_midi(delay: float):
    """
    Play the demo melody out of the virtual source (no UI).

    Any application connected to the visualizer's virtual source receives
    the notes.
    """
    config = AppConfig.load_or_default()
    try:
        count = asyncio.run(_play_demo(config, delay))
    except PortUnavailableError as e:
        logger.error(f"Cannot play demo: {e.technical_message}")
        raise click.ClickException(f"{e.user_message} {e.recovery_hint or ''}".strip())
    except KeyboardInterrupt:
        click.echo("\nDemo interrupted")
        return
    click.echo(f"\nDemo finished ({count} events)")
