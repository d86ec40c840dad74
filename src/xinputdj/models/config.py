"""Application configuration model."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from xinputdj.utils.persistence import read_model_or_default, write_model
from xinputdj.utils.paths import get_config_path

from .enums import Deck


class EngineSettings(BaseModel):
    """Values the mapping engine is started with."""

    model_config = ConfigDict(frozen=True)

    deadzone: float = Field(default=0.75, ge=0.0, le=1.0, description="Stick deadzone radius")
    note_on_deadzone: float = Field(
        default=0.9, ge=0.0, le=1.0, description="Deflection that sends the stick touch note-on"
    )
    note_off_deadzone: float = Field(
        default=0.8, ge=0.0, le=1.0, description="Deflection below which the touch note is released"
    )
    scratch_steps: int = Field(
        default=720, gt=0, description="Relative increments per revolution (primary layer)"
    )
    jog_steps: int = Field(
        default=12, gt=0, description="Relative increments per revolution (secondary layer)"
    )
    initial_controllers: dict[Deck, int] = Field(
        default_factory=lambda: {Deck.LEFT: 28, Deck.RIGHT: 28},
        description="Controller number each deck starts on",
    )

    @model_validator(mode="after")
    def _check_note_hysteresis(self) -> "EngineSettings":
        if self.note_off_deadzone > self.note_on_deadzone:
            raise ValueError("note_off_deadzone must not exceed note_on_deadzone")
        return self


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # MIDI settings
    default_midi_port: str | None = Field(
        default=None, description="MIDI output port opened when none is given on the command line"
    )

    # Engine settings
    deadzone: float = Field(default=0.75, ge=0.0, le=1.0, description="Stick deadzone radius")
    note_on_deadzone: float = Field(
        default=0.9, ge=0.0, le=1.0, description="Deflection that sends the stick touch note-on"
    )
    note_off_deadzone: float = Field(
        default=0.8, ge=0.0, le=1.0, description="Deflection below which the touch note is released"
    )
    scratch_steps: int = Field(default=720, gt=0, description="Jog/scratch resolution (primary layer)")
    jog_steps: int = Field(default=12, gt=0, description="Library jog resolution (secondary layer)")
    initial_controllers: dict[Deck, int] = Field(
        default_factory=lambda: {Deck.LEFT: 28, Deck.RIGHT: 28},
        description="Controller number each deck starts on",
    )

    # Gamepad settings
    joystick_index: int = Field(default=0, ge=0, description="Gamepad to read (pygame joystick index)")
    poll_interval: float = Field(default=0.016, gt=0.0, description="Gamepad polling interval (seconds)")
    trigger_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Trigger travel that counts as pressed"
    )
    gamepad_layout: Literal["xbox", "xbox360"] = Field(
        default="xbox", description="Axis/button layout (xbox = Xbox One/Series, xbox360)"
    )

    # Mapping
    mapping_file: Path | None = Field(
        default=None, description="JSON mapping table (None = built-in default)"
    )

    @field_serializer("mapping_file")
    def serialize_path(self, path: Path | None) -> str | None:
        """Serialize Path to string."""
        return str(path) if path is not None else None

    def engine_settings(self) -> EngineSettings:
        """Extract the settings the mapping engine starts with."""
        return EngineSettings(
            deadzone=self.deadzone,
            note_on_deadzone=self.note_on_deadzone,
            note_off_deadzone=self.note_off_deadzone,
            scratch_steps=self.scratch_steps,
            jog_steps=self.jog_steps,
            initial_controllers=dict(self.initial_controllers),
        )

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses default location
                  (~/.xinputdj/config.json).

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return read_model_or_default(path or get_config_path(), cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        write_model(self, path or get_config_path())
