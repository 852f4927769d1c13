"""Coloured status messages shown to the learner."""

import os

from rich.console import Console
from rich.text import Text


def use_emoji() -> bool:
    """Return True unless the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" not in os.environ


def _emit(symbol: str, message: str, colour: str) -> None:
    console = Console(highlight=False, soft_wrap=True)
    line = Text()
    line.append(symbol, style=colour)
    line.append(" ")
    line.append(str(message), style=colour)
    console.print(line)


def warn(message: str) -> None:
    """Print a warning line in red."""
    _emit("⚠️ " if use_emoji() else "!", message, "red")


def success(message: str) -> None:
    """Print a success line in green."""
    _emit("✅" if use_emoji() else "✓", message, "green")