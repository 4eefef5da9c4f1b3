"""Period-bounded stat deltas.

Given one account's snapshot history (sorted by ``entry_date`` then
``created_at``) the engine picks a baseline and a latest snapshot for the
requested period and reports the non-negative difference of each counter plus
per-day rates.

Week and month windows tolerate sparse uploads: an upload made shortly before
the period starts (inside the buffer window) but dated to the previous period
serves as the starting baseline for the new one.
"""
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Sequence, Union

from playerzero.services.clock import as_utc, start_of_day

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_WINDOW = timedelta(hours=4)
WEEK_DAYS = 7

COUNTERS = (
    "total_xp",
    "pokemon_caught",
    "distance_walked",
    "pokestops_visited",
    "unique_pokedex_entries",
)


class StatSnapshot(NamedTuple):
    """Cumulative counters recorded by one upload."""
    entry_date: date
    created_at: datetime
    total_xp: int
    pokemon_caught: int
    distance_walked: float
    pokestops_visited: int
    unique_pokedex_entries: int
    trainer_level: int = 1


@dataclass(frozen=True)
class ExplicitRange:
    start: date
    end: date


@dataclass(frozen=True)
class CurrentWeek:
    pass


@dataclass(frozen=True)
class CurrentMonth:
    pass


@dataclass(frozen=True)
class AllTime:
    """Lifetime totals.

    ``registered_on`` defaults to the first snapshot's date and ``totals`` to
    the latest snapshot.
    """
    registered_on: date | None = None
    totals: StatSnapshot | None = None


PeriodWindow = Union[ExplicitRange, CurrentWeek, CurrentMonth, AllTime]


class StatDelta(NamedTuple):
    period: str
    start_date: date
    end_date: date
    day_count: int
    xp_delta: int
    catches_delta: int
    distance_delta: float
    pokestops_delta: int
    pokedex_delta: int
    level_delta: int
    xp_per_day: int
    catches_per_day: int
    distance_per_day: float
    pokestops_per_day: int
    baseline_date: date | None = None
    latest_date: date | None = None

    @property
    def is_zero(self) -> bool:
        return not any(
            (
                self.xp_delta,
                self.catches_delta,
                self.distance_delta,
                self.pokestops_delta,
                self.pokedex_delta,
            )
        )


class InsufficientData(Exception):
    """An explicit range holds fewer than two snapshots."""

    def __init__(self, start: date, end: date, found: int):
        self.start = start
        self.end = end
        self.found = found
        super().__init__(
            f"Need at least two data points between {start} and {end} "
            f"(found {found}); select a wider date range"
        )


def round_half_up(value: float, digits: int = 0) -> float:
    quant = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP))


def week_start(now: datetime) -> datetime:
    """Sunday 00:00 UTC of the week containing ``now``."""
    today = as_utc(now).date()
    days_since_sunday = (today.weekday() + 1) % 7
    return start_of_day(today - timedelta(days=days_since_sunday))


def month_start(now: datetime) -> datetime:
    return start_of_day(as_utc(now).date().replace(day=1))


def _month_end(start: date) -> date:
    last = calendar.monthrange(start.year, start.month)[1]
    return start.replace(day=last)


def _build(
    period: str,
    start: date,
    end: date,
    day_count: int,
    baseline: StatSnapshot | None,
    latest: StatSnapshot | None,
) -> StatDelta:
    day_count = max(1, day_count)
    if baseline is None:
        deltas = {name: 0 for name in COUNTERS}
        level = 0
    else:
        deltas = {
            name: max(0, getattr(latest, name) - getattr(baseline, name))
            for name in COUNTERS
        }
        level = max(0, latest.trainer_level - baseline.trainer_level)
    distance = round(float(deltas["distance_walked"]), 2)
    return StatDelta(
        period=period,
        start_date=start,
        end_date=end,
        day_count=day_count,
        xp_delta=int(deltas["total_xp"]),
        catches_delta=int(deltas["pokemon_caught"]),
        distance_delta=distance,
        pokestops_delta=int(deltas["pokestops_visited"]),
        pokedex_delta=int(deltas["unique_pokedex_entries"]),
        level_delta=int(level),
        xp_per_day=int(round_half_up(deltas["total_xp"] / day_count)),
        catches_per_day=int(round_half_up(deltas["pokemon_caught"] / day_count)),
        distance_per_day=round_half_up(distance / day_count, 1),
        pokestops_per_day=int(round_half_up(deltas["pokestops_visited"] / day_count)),
        baseline_date=baseline.entry_date if baseline else None,
        latest_date=latest.entry_date if latest else None,
    )


def _explicit_range(snapshots: Sequence[StatSnapshot], window: ExplicitRange) -> StatDelta:
    start, end = window.start, window.end
    if start > end:
        start, end = end, start
    in_range = [s for s in snapshots if start <= s.entry_date <= end]
    if len(in_range) < 2:
        raise InsufficientData(start, end, len(in_range))
    return _build("range", start, end, (end - start).days, in_range[0], in_range[-1])


def _all_time(snapshots: Sequence[StatSnapshot], window: AllTime, now: datetime) -> StatDelta:
    today = as_utc(now).date()
    totals = window.totals or (snapshots[-1] if snapshots else None)
    registered = window.registered_on
    if registered is None:
        registered = snapshots[0].entry_date if snapshots else today
    if totals is None:
        return _build("all", registered, today, (today - registered).days, None, None)
    zero = StatSnapshot(
        entry_date=registered,
        created_at=start_of_day(registered),
        total_xp=0,
        pokemon_caught=0,
        distance_walked=0.0,
        pokestops_visited=0,
        unique_pokedex_entries=0,
        trainer_level=0,
    )
    delta = _build("all", registered, today, (today - registered).days, zero, totals)
    return delta._replace(baseline_date=None)


def _calendar_period(
    snapshots: Sequence[StatSnapshot],
    period: str,
    start: datetime,
    end: date,
    day_count: int,
    buffer_window: timedelta,
) -> StatDelta:
    first_day = start.date()
    in_period = [s for s in snapshots if first_day <= s.entry_date <= end]
    buffer_start = start - buffer_window
    buffered = [
        s
        for s in snapshots
        if s.entry_date < first_day and buffer_start <= as_utc(s.created_at) < start
    ]

    baseline = buffered[-1] if buffered else (in_period[0] if in_period else None)
    latest = in_period[-1] if in_period else None

    if baseline is None or latest is None or baseline is latest:
        return _build(period, first_day, end, day_count, None, None)
    if buffered:
        logger.debug(
            "%s baseline taken from upload at %s (entry %s)",
            period,
            baseline.created_at,
            baseline.entry_date,
        )
    return _build(period, first_day, end, day_count, baseline, latest)


def compute_stats_delta(
    snapshots: Sequence[StatSnapshot],
    period: PeriodWindow,
    now: datetime,
    *,
    buffer_window: timedelta = DEFAULT_BUFFER_WINDOW,
) -> StatDelta:
    """Compute counter deltas and per-day rates for ``period``.

    Raises:
        InsufficientData: an explicit range contains fewer than two snapshots.
    """
    if isinstance(period, ExplicitRange):
        return _explicit_range(snapshots, period)
    if isinstance(period, AllTime):
        return _all_time(snapshots, period, now)
    if isinstance(period, CurrentWeek):
        start = week_start(now)
        end = start.date() + timedelta(days=WEEK_DAYS - 1)
        return _calendar_period(snapshots, "week", start, end, WEEK_DAYS, buffer_window)
    if isinstance(period, CurrentMonth):
        start = month_start(now)
        return _calendar_period(
            snapshots,
            "month",
            start,
            _month_end(start.date()),
            as_utc(now).day,
            buffer_window,
        )
    raise TypeError(f"Unsupported period: {period!r}")


def sort_snapshots(snapshots: Sequence[StatSnapshot]) -> list[StatSnapshot]:
    """Order snapshots the way ``compute_stats_delta`` expects."""
    return sorted(snapshots, key=lambda s: (s.entry_date, as_utc(s.created_at)))


__all__ = [
    "COUNTERS",
    "DEFAULT_BUFFER_WINDOW",
    "StatSnapshot",
    "ExplicitRange",
    "CurrentWeek",
    "CurrentMonth",
    "AllTime",
    "PeriodWindow",
    "StatDelta",
    "InsufficientData",
    "week_start",
    "month_start",
    "round_half_up",
    "compute_stats_delta",
    "sort_snapshots",
]
