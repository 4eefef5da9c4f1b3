"""Level 50 ("summit") projection from the lifetime XP rate."""
from __future__ import annotations

import math
from datetime import date, timedelta

LEVEL_50_XP = 176_000_000


def is_summit_complete(total_xp: int) -> bool:
    return total_xp >= LEVEL_50_XP


def project_summit_date(total_xp: int, start_date: date | None, today: date) -> date | None:
    """Date the trainer reaches level 50 at their average daily XP.

    Returns ``None`` when the summit is already reached, no positive rate can
    be derived or the projection falls past ``date.max``.
    """
    if is_summit_complete(total_xp):
        return None
    if start_date is None:
        return None
    days_since_start = max(1, (today - start_date).days)
    daily_rate = total_xp / days_since_start
    if daily_rate <= 0:
        return None
    days_needed = math.ceil((LEVEL_50_XP - total_xp) / daily_rate)
    if days_needed > (date.max - today).days:
        return None
    return today + timedelta(days=days_needed)


__all__ = ["LEVEL_50_XP", "is_summit_complete", "project_summit_date"]
