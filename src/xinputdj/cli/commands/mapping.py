"""Mapping command implementations."""

from pathlib import Path
from typing import Optional

import click

from xinputdj.exceptions import ConfigurationError
from xinputdj.models import (
    AppConfig,
    Deck,
    Layer,
    MappingTable,
    default_mapping,
    load_mapping,
    save_mapping,
)
from xinputdj.utils.paths import get_config_path


def _active_table() -> MappingTable:
    """Mapping table the run command would use."""
    try:
        config_obj = AppConfig.load_or_default(get_config_path())
        if config_obj.mapping_file:
            return load_mapping(config_obj.mapping_file)
    except FileNotFoundError as e:
        raise click.ClickException(f"{e}. Check the mapping_file setting.") from e
    except ConfigurationError as e:
        raise click.ClickException(e.describe()) from e
    return default_mapping()


@click.group(name="mapping")
def mapping_group():
    """Inspect and export mapping tables."""
    pass


@mapping_group.command(name="show")
@click.option(
    "--layer",
    "-l",
    type=click.Choice([layer.value for layer in Layer], case_sensitive=False),
    default=None,
    help="Only show one layer",
)
def show_mapping(layer: Optional[str]):
    """Print the active mapping table."""
    table = _active_table()
    click.echo(f"Mapping: {table.name}")

    layers = [Layer(layer.lower())] if layer else [lay for lay in Layer if lay in table.layers]
    for current in layers:
        click.echo(f"\n[{current.value}]")
        for deck in Deck:
            entries = table.entries(current, deck)
            if not entries:
                continue
            click.echo(f"  {deck.value} deck (channel {deck.channel + 1}):")
            for entry in entries:
                source = entry.button.value if entry.button else "stick"
                steps = f", {entry.steps} steps" if entry.steps else ""
                click.echo(
                    f"    {source:<16} {entry.behavior.value:<20} "
                    f"{entry.identifier:>3}  {entry.label}{steps}"
                )


@mapping_group.command(name="export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def export_mapping(path: Path):
    """
    Write the built-in mapping table to PATH as JSON.

    Edit the file and point the mapping_file config setting at it to use a
    custom mapping.
    """
    save_mapping(default_mapping(), path)
    click.echo(f"Default mapping written to {path}")
