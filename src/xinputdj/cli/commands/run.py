"""Run command - starts the gamepad poller and mapping engine."""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click

logger = logging.getLogger(__name__)


def run_engine(port: Optional[str], save_port: bool, log_path: Path) -> None:
    """
    Open the MIDI port, start engine and poller, and block until Ctrl+C.

    Errors are shown as a short message plus recovery hint and exit with
    status 1; details go to the log file.
    """
    # Lazy imports to keep pygame out of the other commands
    from xinputdj.core import ExitReason, MappingEngine
    from xinputdj.exceptions import format_error_for_display
    from xinputdj.input import GamepadPoller
    from xinputdj.midi import MidiOutputManager
    from xinputdj.models import AppConfig, default_mapping, load_mapping

    logger.info("Starting XInputDJ")

    midi = MidiOutputManager()
    engine = None
    poller = None

    try:
        config_obj = AppConfig.load_or_default()
        table = load_mapping(config_obj.mapping_file) if config_obj.mapping_file else default_mapping()

        port_name = port or config_obj.default_midi_port
        if port_name is None:
            raise click.UsageError(
                "No MIDI port selected. Pass --port NAME or run 'xinputdj config set-port NAME' "
                "(see 'xinputdj midi list')."
            )

        midi.open(port_name)
        midi.start()

        engine = MappingEngine(midi, table)
        channel = engine.start(config_obj.engine_settings())

        poller = GamepadPoller(
            channel,
            joystick_index=config_obj.joystick_index,
            poll_interval=config_obj.poll_interval,
            trigger_threshold=config_obj.trigger_threshold,
            layout=config_obj.gamepad_layout,
        )
        poller.start()

        if save_port and port:
            config_obj.default_midi_port = port
            config_obj.save()
            logger.info(f"Saved default MIDI port: {port}")

        click.echo(f"Sending to '{port_name}' using mapping '{table.name}'. Press Ctrl+C to stop.")

        # The engine stops on its own when the poller closes the channel
        while engine.is_running:
            time.sleep(0.1)

        if engine.exit_reason is ExitReason.FAILED:
            raise engine.failure

        click.echo("Gamepad input ended, shutting down.", err=True)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.ClickException:
        raise
    except Exception as e:
        logger.exception("Error running XInputDJ")

        user_message, recovery_hint = format_error_for_display(e)

        click.echo("\n" + "=" * 70, err=True)
        click.echo(f"ERROR: {user_message}", err=True)
        click.echo("=" * 70, err=True)

        if recovery_hint:
            click.echo(f"\n{recovery_hint}", err=True)

        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
        click.echo("For logging options, run: xinputdj --help", err=True)
        sys.exit(1)
    finally:
        if poller is not None:
            poller.stop()
        if engine is not None:
            engine.stop()
        midi.stop()


@click.command()
@click.option(
    '--port',
    '-p',
    type=str,
    default=None,
    help='MIDI output port name (default: default_midi_port from config)'
)
@click.option(
    '--save-port',
    is_flag=True,
    help='Remember --port as the default MIDI port once the engine has started'
)
@click.pass_context
def run(ctx, port: Optional[str], save_port: bool):
    """
    Run the mapping engine (the default when no command is given).

    \b
    Examples:
      xinputdj run --port "loopMIDI Port"
      xinputdj -v run
    """
    from xinputdj.cli.main import setup_logging

    opts = ctx.obj or {}
    log_path = setup_logging(
        opts.get("verbose", 0),
        opts.get("debug", False),
        opts.get("log_file"),
        opts.get("log_level", "INFO"),
    )
    run_engine(port, save_port, log_path)
