from .access import Account, AccessDecision, TimeRemaining, resolve_access
from .stats_delta import (
    AllTime,
    CurrentMonth,
    CurrentWeek,
    ExplicitRange,
    InsufficientData,
    StatDelta,
    StatSnapshot,
    compute_stats_delta,
)

__all__ = [
    "Account",
    "AccessDecision",
    "TimeRemaining",
    "resolve_access",
    "AllTime",
    "CurrentMonth",
    "CurrentWeek",
    "ExplicitRange",
    "InsufficientData",
    "StatDelta",
    "StatSnapshot",
    "compute_stats_delta",
]
