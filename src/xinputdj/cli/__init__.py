"""Command-line interface for XInputDJ."""
