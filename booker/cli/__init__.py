"""Command line entry point."""

from booker.cli.main import BookerCLI, main

__all__ = ["BookerCLI", "main"]
