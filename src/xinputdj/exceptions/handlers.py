"""Error handling utilities.

Helpers that turn low-level errors into XInputDJError instances and render
any exception for the CLI.
"""

from typing import Optional

from pydantic import ValidationError

from .base import XInputDJError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError


def wrap_pydantic_error(error: ValidationError, file_path: str) -> ConfigurationError:
    """
    Convert a Pydantic ValidationError raised while reading a file.

    JSON syntax errors become ConfigFileInvalidError; field errors become a
    ConfigValidationError naming the field (or "multiple fields").
    """
    details = error.errors()

    for detail in details:
        if detail["type"] == "json_invalid":
            return ConfigFileInvalidError(file_path, detail.get("ctx", {}).get("error", detail["msg"]))

    def location(detail) -> str:
        return ".".join(str(part) for part in detail["loc"]) or "value"

    if len(details) == 1:
        detail = details[0]
        return ConfigValidationError(location(detail), detail.get("input"), detail["msg"], file_path)

    lines = "\n".join(f"  - {location(d)}: {d['msg']}" for d in details)
    return ConfigValidationError(
        "multiple fields", None, f"{len(details)} validation errors:\n{lines}", file_path
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, XInputDJError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None
