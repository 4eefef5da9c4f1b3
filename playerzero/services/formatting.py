"""Display helpers for stat cards.

The engine reports raw units; everything here is presentation only.
"""
from __future__ import annotations

from playerzero.services.access import TimeRemaining
from playerzero.services.stats_delta import round_half_up

INSUFFICIENT_DATA_MESSAGE = (
    "Need at least two data points for this range. Select a wider date range."
)


def format_number(num: float) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    if isinstance(num, float) and not num.is_integer():
        return f"{num:,.1f}"
    return f"{int(num):,}"


def format_xp_rate(rate: float) -> str:
    """XP per day with a K suffix above one thousand."""
    if rate > 1000:
        return f"{round_half_up(rate / 1000, 1)}K"
    return str(int(round_half_up(rate)))


def format_distance(km: float) -> str:
    return f"{format_number(km)} km"


def format_countdown(remaining: TimeRemaining) -> str:
    if remaining.days > 0:
        return (
            f"{remaining.days}d {remaining.hours}h "
            f"{remaining.minutes}m {remaining.seconds}s left"
        )
    if remaining.hours > 0:
        return f"{remaining.hours}h {remaining.minutes}m {remaining.seconds}s left"
    return f"{remaining.minutes}m {remaining.seconds}s left"


def insufficient_data_message() -> str:
    return INSUFFICIENT_DATA_MESSAGE


__all__ = [
    "INSUFFICIENT_DATA_MESSAGE",
    "format_number",
    "format_xp_rate",
    "format_distance",
    "format_countdown",
    "insufficient_data_message",
]
