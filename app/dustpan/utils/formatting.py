"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich, plus the
human-readable size and age strings shared by the report and the
interactive view.
"""

import sys
from datetime import UTC, datetime

from rich.console import Console

from dustpan.core.theme import ThemeColors, get_rich_theme, get_theme

_SECONDS_PER_DAY = 24 * 60 * 60


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances. They start on the built-in palette; the user
# theme is read by apply_theme() once logging can record its warnings.
_default_theme = get_rich_theme(ThemeColors())
console = Console(theme=_default_theme, color_system=_detect_color_system())
err_console = Console(theme=_default_theme, stderr=True, color_system=_detect_color_system())
_theme_applied = False


def apply_theme() -> None:
    """Load the user theme and push it onto the shared consoles (once)."""
    global _theme_applied
    if _theme_applied:
        return
    theme = get_theme()
    console.push_theme(theme)
    err_console.push_theme(theme)
    _theme_applied = True


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string (1024-based)."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def age_in_days(moment: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since ``moment`` (never negative)."""
    now = now or datetime.now(tz=UTC)
    seconds = (now - moment).total_seconds()
    return max(0, int(seconds // _SECONDS_PER_DAY))


def format_age(moment: datetime, now: datetime | None = None) -> str:
    """Format the age of a timestamp as "today", "1 day" or "N days"."""
    days = age_in_days(moment, now)
    if days == 0:
        return "today"
    if days == 1:
        return "1 day"
    return f"{days} days"
