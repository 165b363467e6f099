"""Audio command implementations."""

import click


@click.group(name="audio")
def audio_group():
    """Audio device commands."""
    pass


@audio_group.command(name="list")
def list_audio():
    """List available audio output devices."""
    from midivisualizer.audio.device import AudioDevice

    devices = AudioDevice.list_output_devices()
    default_device_id = AudioDevice.get_default_device()

    click.echo("Available audio output devices:\n")
    if not devices:
        click.echo("No audio output devices found.")
        return

    for device_id, name, host_api, sample_rate in devices:
        marker = "  [Default]" if device_id == default_device_id else ""
        click.echo(f"[{device_id}] {name}{marker}")
        click.echo(f"    Host API: {host_api}")
        click.echo(f"    Sample Rate: {sample_rate:.0f} Hz")
        click.echo()

    click.echo("Set one with the 'audio_device' field in the config file "
               "(see 'midivisualizer config path').")
