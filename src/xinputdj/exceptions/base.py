"""Root of the XInputDJ exception tree."""

from typing import Optional


class XInputDJError(Exception):
    """
    Base exception for all XInputDJ errors.

    Attributes:
        user_message: Short sentence shown by the CLI
        technical_message: Detail written to the log (defaults to user_message)
        recoverable: True if the user can fix the cause and retry
        recovery_hint: What to try next, if there is something to suggest
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def describe(self) -> str:
        """User message followed by the recovery hint, if any."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"
