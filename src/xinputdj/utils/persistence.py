"""JSON files backed by Pydantic models.

Used for the application config and for mapping tables. Reading turns
parse and validation failures into ConfigurationError subclasses so the CLI
can show a recovery hint. Writing keeps the previous file as ``.bak`` and
replaces the target in one rename, so a crash mid-write never leaves a
half-written config behind.
"""

import logging
import shutil
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from xinputdj.exceptions import ConfigFileInvalidError, ConfigurationError, wrap_pydantic_error

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def read_model(path: Path, model_type: type[M]) -> M:
    """
    Parse a JSON file into a model.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigFileInvalidError: If the file is empty or not valid JSON
        ConfigValidationError: If the content fails field validation
        MappingError: If a mapping table breaks its structural rules
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileInvalidError(str(path), f"Cannot read file: {e}") from e

    if not text.strip():
        raise ConfigFileInvalidError(str(path), "File is empty")

    try:
        model = model_type.model_validate_json(text)
    except ValidationError as e:
        logger.error(f"{path} is not a valid {model_type.__name__}: {e}")
        raise wrap_pydantic_error(e, str(path)) from e

    logger.debug(f"Read {model_type.__name__} from {path}")
    return model


def read_model_or_default(path: Path, model_type: type[M]) -> M:
    """
    Like read_model(), but a missing file yields ``model_type()``.

    The default is not written back: an unreadable file is reported, never
    silently replaced.
    """
    try:
        return read_model(path, model_type)
    except FileNotFoundError:
        logger.info(f"{path} does not exist, using default {model_type.__name__}")
        return model_type()


def write_model(model: BaseModel, path: Path, backup: bool = True) -> None:
    """
    Write a model as indented JSON.

    Args:
        model: Model to serialize
        path: Target file; parent directories are created
        backup: Copy an existing target to ``<name>.bak`` first

    Raises:
        OSError: If the file cannot be written
        ConfigurationError: If the model cannot be serialized
    """
    try:
        content = model.model_dump_json(indent=2)
    except Exception as e:
        raise ConfigurationError(
            user_message=f"Failed to save {path}",
            technical_message=f"Cannot serialize {type(model).__name__}: {e}",
        ) from e

    path.parent.mkdir(parents=True, exist_ok=True)

    if backup and path.exists():
        shutil.copy2(path, path.with_suffix(path.suffix + ".bak"))

    staging = path.with_suffix(path.suffix + ".tmp")
    try:
        staging.write_text(content, encoding="utf-8")
        staging.replace(path)
    except OSError as e:
        logger.error(f"Could not write {path}: {e}")
        raise
    finally:
        if staging.exists():
            staging.unlink()

    logger.debug(f"Wrote {type(model).__name__} to {path}")


def check_model_file(path: Path, model_type: type[M]) -> str | None:
    """Return why ``path`` would fail to load, or None if it loads."""
    try:
        read_model(path, model_type)
    except FileNotFoundError:
        return f"File not found: {path}"
    except ConfigurationError as e:
        return e.user_message
    return None
