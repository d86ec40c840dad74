"""Default locations for XInputDJ files."""

from pathlib import Path

APP_DIR_NAME = ".xinputdj"


def get_app_dir() -> Path:
    """Directory holding config and logs (~/.xinputdj)."""
    return Path.home() / APP_DIR_NAME


def get_config_path() -> Path:
    """Default config file location (~/.xinputdj/config.json)."""
    return get_app_dir() / "config.json"


def get_log_dir() -> Path:
    """Default log directory (~/.xinputdj/logs)."""
    return get_app_dir() / "logs"
