"""
Config command group.

Commands:
    - config show          # Display configuration
    - config path          # Print the config file location
    - config set-port NAME # Set the default MIDI output port
    - config validate      # Check the config and mapping files load
    - config reset         # Reset to defaults
"""

import json
import sys

import click

from xinputdj.exceptions import ConfigurationError
from xinputdj.midi import MidiOutputManager
from xinputdj.models import AppConfig, MappingTable
from xinputdj.utils.paths import get_config_path
from xinputdj.utils.persistence import check_model_file


def _load() -> AppConfig:
    try:
        return AppConfig.load_or_default(get_config_path())
    except ConfigurationError as e:
        raise click.ClickException(e.describe()) from e


@click.group(name="config")
def config():
    """Configure XInputDJ settings."""
    pass


@config.command(name="show")
def show_config():
    """Display the current configuration."""
    path = get_config_path()
    config_obj = _load()

    source = str(path) if path.exists() else f"{path} (not created yet, showing defaults)"
    click.echo(f"Config: {source}\n")
    for field, value in config_obj.model_dump(mode="json").items():
        click.echo(f"  {field}: {json.dumps(value)}")


@config.command(name="path")
def config_path():
    """Print the config file location."""
    click.echo(str(get_config_path()))


@config.command(name="set-port")
@click.argument("name")
def set_port(name: str):
    """Set the default MIDI output port."""
    config_obj = _load()

    available = MidiOutputManager.list_ports()
    if name not in available:
        # Still accepted: virtual ports are often created after configuring
        click.echo(
            f"Warning: '{name}' is not currently available. "
            "Use 'xinputdj midi list' to see available ports.",
            err=True,
        )

    config_obj.default_midi_port = name
    config_obj.save(get_config_path())
    click.echo(f"Default MIDI port set to '{name}'")


@config.command(name="validate")
def validate_config():
    """Check that the config file and its mapping file load."""
    path = get_config_path()
    if not path.exists():
        click.echo(f"[OK]   {path} (not created yet, defaults apply)")
        return

    problem = check_model_file(path, AppConfig)
    if problem:
        click.echo(f"[FAIL] {path}: {problem}")
        sys.exit(1)
    click.echo(f"[OK]   {path}")

    mapping_file = AppConfig.load_or_default(path).mapping_file
    if mapping_file is None:
        click.echo("[OK]   mapping: built-in default")
        return

    problem = check_model_file(mapping_file, MappingTable)
    if problem:
        click.echo(f"[FAIL] {mapping_file}: {problem}")
        sys.exit(1)
    click.echo(f"[OK]   {mapping_file}")


@config.command(name="reset")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def reset_config(yes: bool):
    """Reset the configuration to defaults."""
    if not yes:
        click.confirm("Reset all settings to defaults?", abort=True)

    AppConfig().save(get_config_path())
    click.echo("Configuration reset to defaults")
