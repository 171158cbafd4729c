"""Command line interface for publist."""

from publist.cli.main import cli, main

__all__ = ["cli", "main"]
