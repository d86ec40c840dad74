"""
Custom exception hierarchy for XInputDJ.

## Exception Hierarchy

```
XInputDJError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   ├── ConfigValidationError
│   └── MappingError
└── MidiError
    ├── MidiPortNotFoundError
    ├── MidiNotConnectedError
    └── MidiSendError
```

All custom exceptions carry a `user_message`, a `technical_message` for logs,
a `recoverable` flag and an optional `recovery_hint`.

MIDI send errors raised by the output sink are caught per message by the
mapping engine, logged and dropped. Configuration and mapping errors surface
at start-up, before the engine runs.
"""

from .base import XInputDJError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError, MappingError
from .handlers import format_error_for_display, wrap_pydantic_error
from .midi import MidiError, MidiNotConnectedError, MidiPortNotFoundError, MidiSendError

__all__ = [
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "MappingError",
    # Handlers
    "format_error_for_display",
    "wrap_pydantic_error",
    # MIDI
    "MidiError",
    "MidiNotConnectedError",
    "MidiPortNotFoundError",
    "MidiSendError",
    # Base
    "XInputDJError",
]
