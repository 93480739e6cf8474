"""Formatting and conversion utilities.

Number formatting and time formatting for display payloads.
"""

from __future__ import annotations


def format_time(seconds: float) -> str:
    """Format seconds into a human-readable time string."""
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}h {minutes}m"


def format_money(value: float) -> str:
    """Truncate a balance and group thousands: 12345.9 → '12,345'."""
    return f"{int(value):,}"


def format_percent(value: float) -> str:
    """Format a percentage value with two decimals: 12.3456 → '12.35%'."""
    return f"{value:.2f}%"
