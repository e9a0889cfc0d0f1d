"""Command-line interface."""

from .commands import COMMANDS, run_command

__all__ = ["COMMANDS", "run_command"]
