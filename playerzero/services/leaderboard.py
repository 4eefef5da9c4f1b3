"""Weekly, monthly and all-time leaderboards.

Only accounts allowed to appear on the leaderboard (paid, or everyone while
free mode is on) are ranked. Weekly and monthly boards rank by the delta engine's
period deltas; the all-time board ranks by current totals.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Literal, NamedTuple, Sequence

from sqlalchemy.orm import Session

from playerzero.models import Profile, StatEntry
from playerzero.services.access import TRIAL_DAYS, Account, resolve_access
from playerzero.services.stat_entries import profile_totals, to_account, to_snapshot
from playerzero.services.stats_delta import (
    DEFAULT_BUFFER_WINDOW,
    AllTime,
    CurrentMonth,
    CurrentWeek,
    StatDelta,
    StatSnapshot,
    compute_stats_delta,
    sort_snapshots,
)

Period = Literal["weekly", "monthly", "all-time"]
SortBy = Literal["xp", "catches", "distance", "pokestops"]

_SORT_FIELDS = {
    "xp": "xp_delta",
    "catches": "catches_delta",
    "distance": "distance_delta",
    "pokestops": "pokestops_delta",
}


class LeaderboardCandidate(NamedTuple):
    profile_id: int
    trainer_name: str
    account: Account
    snapshots: Sequence[StatSnapshot]
    totals: StatSnapshot
    registered_on: date | None = None


class LeaderboardEntry(NamedTuple):
    rank: int
    profile_id: int
    trainer_name: str
    xp: int
    catches: int
    distance: float
    pokestops: int
    last_update: date | None


def _period_delta(
    candidate: LeaderboardCandidate,
    period: Period,
    now: datetime,
    buffer_window: timedelta,
) -> StatDelta:
    if period == "weekly":
        window = CurrentWeek()
    elif period == "monthly":
        window = CurrentMonth()
    elif period == "all-time":
        window = AllTime(registered_on=candidate.registered_on, totals=candidate.totals)
    else:
        raise ValueError(f"Unknown leaderboard period: {period}")
    return compute_stats_delta(candidate.snapshots, window, now, buffer_window=buffer_window)


def build_leaderboard(
    candidates: Sequence[LeaderboardCandidate],
    period: Period,
    sort_by: SortBy,
    free_mode_enabled: bool,
    now: datetime,
    *,
    limit: int = 100,
    buffer_window: timedelta = DEFAULT_BUFFER_WINDOW,
    trial_days: int = TRIAL_DAYS,
) -> list[LeaderboardEntry]:
    if sort_by not in _SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_by}")
    field = _SORT_FIELDS[sort_by]

    rows: list[tuple[LeaderboardCandidate, StatDelta]] = []
    for candidate in candidates:
        decision = resolve_access(
            candidate.account, free_mode_enabled, now, trial_days=trial_days
        )
        if not decision.can_appear_on_leaderboard:
            continue
        rows.append((candidate, _period_delta(candidate, period, now, buffer_window)))

    # stable: ties keep candidate order
    rows.sort(key=lambda row: getattr(row[1], field), reverse=True)

    return [
        LeaderboardEntry(
            rank=index,
            profile_id=candidate.profile_id,
            trainer_name=candidate.trainer_name,
            xp=delta.xp_delta,
            catches=delta.catches_delta,
            distance=delta.distance_delta,
            pokestops=delta.pokestops_delta,
            last_update=candidate.snapshots[-1].entry_date if candidate.snapshots else None,
        )
        for index, (candidate, delta) in enumerate(rows[:limit], start=1)
    ]


def load_candidates(db: Session) -> list[LeaderboardCandidate]:
    profiles = db.query(Profile).order_by(Profile.id).all()
    by_profile: dict[int, list[StatSnapshot]] = defaultdict(list)
    for entry in db.query(StatEntry).all():
        by_profile[entry.profile_id].append(to_snapshot(entry))
    return [
        LeaderboardCandidate(
            profile_id=profile.id,
            trainer_name=profile.trainer_name,
            account=to_account(profile),
            snapshots=sort_snapshots(by_profile.get(profile.id, [])),
            totals=profile_totals(profile),
            registered_on=profile.start_date,
        )
        for profile in profiles
    ]


__all__ = [
    "LeaderboardCandidate",
    "LeaderboardEntry",
    "build_leaderboard",
    "load_candidates",
]
