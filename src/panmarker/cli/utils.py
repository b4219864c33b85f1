"""
CLI utility functions.

Common helpers for CLI commands: styled messages, number formatting and
option parsing.
"""

import click
from typing import List, Optional


# Color definitions for consistent styling
COLORS = {
    "success": "green",
    "error": "red",
    "info": "blue",
}


def echo_success(message: str) -> None:
    """Print success message with green checkmark."""
    click.echo(click.style("✓ ", fg=COLORS["success"]) + message, err=True)


def echo_error(message: str) -> None:
    """Print error message with red X."""
    click.echo(click.style("✗ ", fg=COLORS["error"]) + message, err=True)


def echo_info(message: str) -> None:
    """Print info message with blue arrow."""
    click.echo(click.style("→ ", fg=COLORS["info"]) + message, err=True)


def format_number(n: int) -> str:
    """Format large numbers with thousand separators."""
    return f"{n:,}"


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    else:
        return f"{seconds / 3600:.1f}h"


def split_list(value: Optional[str]) -> Optional[List[str]]:
    """Parse a comma-separated option ('CEU,YRI' -> ['CEU', 'YRI'])."""
    if value is None:
        return None
    items = [v.strip() for v in value.split(",")]
    return [v for v in items if v]
