"""CLI commands for xinputdj."""

from .config import config
from .gamepad import gamepad_group
from .mapping import mapping_group
from .midi import midi_group
from .run import run, run_engine

__all__ = ["config", "gamepad_group", "mapping_group", "midi_group", "run", "run_engine"]
