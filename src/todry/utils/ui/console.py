"""Console utilities for Todry."""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=2)
def get_console(highlight: bool = True) -> Console:
    """Get a Rich Console instance for consistent output formatting."""
    return Console(highlight=highlight)


def apply_color_setting(color: bool) -> None:
    """Switch colour on or off for every cached console."""
    for highlight in (True, False):
        get_console(highlight).no_color = not color
