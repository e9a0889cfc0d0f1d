"""Colorful CLI output helpers."""

import sys

from ..models import Label, LabelColor, Notification

GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"
CHECK = "\u2713"  # ✓
BULLET = "\u2022"  # •
CROSS = "\u2717"  # ✗
SWATCH = "\u25cf"  # ●

# Closest 8-color ANSI code for each label color
LABEL_ANSI: dict[LabelColor, str] = {
    LabelColor.RED: "31",
    LabelColor.ORANGE: "33",
    LabelColor.AMBER: "33",
    LabelColor.YELLOW: "93",
    LabelColor.LIME: "92",
    LabelColor.GREEN: "32",
    LabelColor.TEAL: "36",
    LabelColor.CYAN: "96",
    LabelColor.SKY: "94",
    LabelColor.BLUE: "34",
    LabelColor.INDIGO: "34",
    LabelColor.VIOLET: "35",
    LabelColor.PURPLE: "35",
    LabelColor.FUCHSIA: "95",
    LabelColor.PINK: "95",
    LabelColor.ROSE: "91",
}


def _supports_color() -> bool:
    """Check if stdout is a terminal."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _colorize(text: str, color: str) -> str:
    """Apply color to text if the terminal supports it."""
    if _supports_color():
        return f"{color}{text}{RESET}"
    return text


def success(message: str) -> None:
    """Print success message with green checkmark."""
    print(f"{_colorize(CHECK, GREEN)} {message}")


def info(message: str) -> None:
    """Print info message with yellow bullet."""
    print(f"{_colorize(BULLET, YELLOW)} {message}")


def header(message: str) -> None:
    """Print header message in blue."""
    print(_colorize(message, BLUE))


def error(message: str) -> None:
    """Print error message with red cross to stderr."""
    print(f"{_colorize(CROSS, RED)} {message}", file=sys.stderr)


def dim(text: str) -> str:
    """Dim secondary text such as ids and due dates."""
    return _colorize(text, DIM)


def label_chip(label: Label) -> str:
    """Colored swatch plus name."""
    swatch = _colorize(SWATCH, f"\033[{LABEL_ANSI[label.color]}m")
    return f"{swatch} {label.name}"


def notification(note: Notification) -> None:
    """Print a store notification as an error or info line."""
    if note.level == "error":
        error(note.message)
    else:
        info(note.message)
