"""Configuration-related exceptions.

This module defines exceptions for configuration errors:
- ConfigurationError: Base class for configuration errors
- ConfigFileInvalidError: Config file has invalid syntax
- ConfigValidationError: Config values fail validation
- MappingError: A mapping table breaks one of its invariants
"""

from pathlib import Path
from typing import Any, Optional

from .base import XInputDJError


class ConfigurationError(XInputDJError):
    """Configuration is invalid or cannot be loaded."""
    pass


class ConfigFileInvalidError(ConfigurationError):
    """A config or mapping file is empty or not valid JSON."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Initialize invalid file error.

        Args:
            file_path: Path to the unreadable file
            parse_error: What the JSON parser reported
        """
        name = Path(file_path).name
        if "trailing comma" in parse_error.lower():
            user_msg = f"{name} has a trailing comma"
            recovery = f"Remove the comma after the last item in {file_path}"
        else:
            user_msg = f"{name} is not valid JSON"
            recovery = (
                f"Fix or delete {file_path}\n"
                "A .bak copy of the previous version may sit next to it"
            )

        super().__init__(
            user_message=user_msg,
            technical_message=f"JSON parse error in {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=recovery,
        )
        self.file_path = file_path
        self.parse_error = parse_error

class ConfigValidationError(ConfigurationError):
    """Configuration values fail validation."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: Optional[str] = None):
        """
        Initialize config validation error.

        Args:
            field: The configuration field that failed validation
            value: The invalid value
            error_msg: Why the value is invalid
            file_path: Path to the config file (optional)
        """
        user_msg = f"Invalid configuration value for '{field}': {error_msg}"

        recovery = f"Update the '{field}' value in your configuration"
        if file_path:
            recovery += f"\nConfig file: {file_path}"

        if "midi" in field.lower():
            recovery += "\nRun 'xinputdj midi list' to see valid MIDI output ports"
        elif "deadzone" in field.lower():
            recovery += "\nDeadzones are stick deflection radii between 0.0 and 1.0"
        elif "steps" in field.lower():
            recovery += "\nSteps is the number of relative increments per full stick revolution"

        super().__init__(
            user_message=user_msg,
            technical_message=f"Config validation failed for {field}={value}: {error_msg}",
            recoverable=True,
            recovery_hint=recovery
        )
        self.field = field
        self.value = value
        self.file_path = file_path


class MappingError(ConfigurationError):
    """A mapping table breaks one of its structural rules."""

    def __init__(self, error_msg: str, layer: Optional[str] = None, deck: Optional[str] = None):
        """
        Initialize mapping error.

        Args:
            error_msg: What is wrong with the table
            layer: Layer the offending entry lives in (optional)
            deck: Deck the offending entry targets (optional)
        """
        where = ""
        if layer and deck:
            where = f" ({layer} layer, {deck} deck)"
        elif layer:
            where = f" ({layer} layer)"

        super().__init__(
            user_message=f"Invalid mapping table{where}: {error_msg}",
            technical_message=f"Mapping validation failed{where}: {error_msg}",
            recoverable=True,
            recovery_hint="Run 'xinputdj mapping export' to get a valid table to start from",
        )
        self.layer = layer
        self.deck = deck
