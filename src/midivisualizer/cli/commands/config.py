"""Config command implementations."""

from enum import Enum
from pathlib import Path
from typing import Optional

import click

from midivisualizer.exceptions import ConfigurationError, format_error_for_display
from midivisualizer.models import AppConfig
from midivisualizer.services import ConfigService
from midivisualizer.utils import default_config_path


def _format_value(value: object) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if value is None:
        return "(default)"
    return str(value)


def _load_service(path: Path) -> ConfigService[AppConfig]:
    try:
        config = AppConfig.load_or_default(path)
    except ConfigurationError as e:
        user_message, recovery_hint = format_error_for_display(e)
        raise click.ClickException(f"{user_message}\n{recovery_hint or ''}".strip())
    return ConfigService[AppConfig](AppConfig, config, default_path=path)


@click.group(name="config")
@click.option(
    "--file",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.midivisualizer/config.json)",
)
@click.pass_context
def config_group(ctx, config_file: Optional[Path]):
    """Show or reset the saved settings."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_file or default_config_path()


@config_group.command(name="show")
@click.option("--field", "-f", default=None, help="Show a single field")
@click.pass_context
def show_config(ctx, field: Optional[str]):
    """Display the current configuration."""
    path: Path = ctx.obj["config_path"]
    service = _load_service(path)
    values = service.get_all()

    if field is not None:
        if field not in values:
            raise click.BadParameter(f"Unknown field '{field}'", param_hint="--field")
        click.echo(_format_value(values[field]))
        return

    source = path if path.exists() else f"{path} (not saved yet, showing defaults)"
    click.echo(f"Configuration: {source}\n")
    width = max(len(key) for key in values)
    for key, value in values.items():
        click.echo(f"  {key:<{width}}  {_format_value(value)}")


@config_group.command(name="reset")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def reset_config(ctx, yes: bool):
    """Reset every setting to its default and save."""
    path: Path = ctx.obj["config_path"]
    if not yes:
        click.confirm(f"Reset all settings in {path}?", abort=True)

    service = ConfigService[AppConfig](AppConfig, AppConfig(), default_path=path)
    service.reset()
    service.save()
    click.echo(f"Configuration reset: {path}")


@config_group.command(name="path")
@click.pass_context
def config_path(ctx):
    """Print the config file location."""
    click.echo(str(ctx.obj["config_path"]))
