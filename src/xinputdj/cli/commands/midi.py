"""MIDI command implementations."""

import click

from xinputdj.midi import MidiOutputManager


@click.group(name="midi")
def midi_group():
    """MIDI device commands."""
    pass


@midi_group.command(name="list")
def list_midi():
    """List available MIDI output ports."""
    ports = MidiOutputManager.list_ports()

    click.echo("MIDI Output Ports:\n")
    if not ports:
        click.echo("  No MIDI output ports found.")
        click.echo("  On Windows, create a virtual port with loopMIDI.")
        return

    for i, port in enumerate(ports):
        click.echo(f"  [{i}] {port}")
