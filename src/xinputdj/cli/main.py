"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from xinputdj import __version__
from xinputdj.utils.paths import get_log_dir

from .commands import config, gamepad_group, mapping_group, midi_group, run, run_engine

logger = logging.getLogger(__name__)


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Where the log file goes for a given combination of flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "xinputdj-debug.log"
    return get_log_dir() / "xinputdj.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit log level wins when logging to a custom file
    if log_file and not debug:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Keeps last 5 files, max 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Warnings and errors also go to the terminal while the engine runs
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(max(level, logging.WARNING) if verbose == 0 else level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="xinputdj")
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
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./xinputdj-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    port: Optional[str],
    save_port: bool,
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    XInputDJ - turn a dual-stick gamepad into a MIDI DJ controller.

    Each stick drives one deck: the controller a stick sends is picked by
    pressing a mapped button, and holding START or SELECT switches to the
    secondary layer (library browsing, sync, cue, load).

    \b
    Examples:
      # Run with the port saved in the config
      xinputdj

      # Run on a given port and remember it
      xinputdj --port "loopMIDI Port" --save-port

      # Enable debug logging
      xinputdj --debug

      # List MIDI output ports
      xinputdj midi list

      # Show the active mapping
      xinputdj mapping show
    """
    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, debug=debug, log_file=log_file, log_level=log_level)

    # If a subcommand was invoked, don't run the engine
    if ctx.invoked_subcommand is not None:
        return

    log_path = setup_logging(verbose, debug, log_file, log_level)
    run_engine(port, save_port, log_path)


# Register commands
cli.add_command(run)
cli.add_command(midi_group)
cli.add_command(gamepad_group)
cli.add_command(config)
cli.add_command(mapping_group)

if __name__ == "__main__":
    cli()
