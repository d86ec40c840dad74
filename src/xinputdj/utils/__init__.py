"""Utility helpers."""

from .paths import get_app_dir, get_config_path, get_log_dir
from .persistence import check_model_file, read_model, read_model_or_default, write_model

__all__ = [
    "check_model_file",
    "get_app_dir",
    "get_config_path",
    "get_log_dir",
    "read_model",
    "read_model_or_default",
    "write_model",
]
