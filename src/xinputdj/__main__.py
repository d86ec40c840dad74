"""Allow running with ``python -m xinputdj``."""

from xinputdj.cli.main import cli

if __name__ == "__main__":
    cli()
