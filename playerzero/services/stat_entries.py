"""Stat upload ingestion and snapshot loading.

Rows become typed ``StatSnapshot`` values here; null counters are coerced to
zero so the delta engine never sees them.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playerzero.metrics import stat_updates_total
from playerzero.models import Event, Profile, StatEntry
from playerzero.services.access import Account
from playerzero.services.clock import as_utc, next_utc_midnight, utcnow
from playerzero.services.stats_delta import StatSnapshot, sort_snapshots

logger = logging.getLogger(__name__)

MONOTONIC_FIELDS = {
    "total_xp": "Total XP",
    "pokemon_caught": "Pokémon caught",
    "distance_walked": "Distance walked",
    "pokestops_visited": "PokéStops visited",
    "unique_pokedex_entries": "Pokédex entries",
}
UPDATABLE_FIELDS = tuple(MONOTONIC_FIELDS) + ("trainer_level",)


class ProfileNotFound(Exception):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Profile not found for user {user_id}")


class StatUpdateError(Exception):
    """Base class for rejected stat uploads."""


class DailyLimitReached(StatUpdateError):
    def __init__(self, next_update_at: datetime):
        self.next_update_at = next_update_at
        super().__init__(
            "You have already updated your stats today. "
            f"Next update available at {next_update_at.isoformat()}"
        )


class StatRegression(StatUpdateError):
    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(
            ", ".join(
                f"{MONOTONIC_FIELDS[name]} cannot be lower than current value"
                for name in fields
            )
        )


class PokedexLimitExceeded(StatUpdateError):
    def __init__(self, value: int, limit: int):
        self.value = value
        self.limit = limit
        super().__init__(f"Pokédex entries cannot exceed {limit}")


def get_profile(db: Session, user_id: int) -> Profile:
    profile = db.query(Profile).filter_by(user_id=user_id).first()
    if profile is None:
        raise ProfileNotFound(user_id)
    return profile


def to_account(profile: Profile) -> Account:
    expires = profile.subscription_expires_at
    return Account(
        id=profile.id,
        created_at=as_utc(profile.created_at),
        is_paid_subscriber=bool(profile.is_paid_user),
        subscription_expires_at=as_utc(expires) if expires else None,
    )


def to_snapshot(entry: StatEntry) -> StatSnapshot:
    return StatSnapshot(
        entry_date=entry.entry_date,
        created_at=as_utc(entry.created_at),
        total_xp=entry.total_xp or 0,
        pokemon_caught=entry.pokemon_caught or 0,
        distance_walked=float(entry.distance_walked or 0.0),
        pokestops_visited=entry.pokestops_visited or 0,
        unique_pokedex_entries=entry.unique_pokedex_entries or 0,
        trainer_level=entry.trainer_level or 1,
    )


def profile_totals(profile: Profile) -> StatSnapshot:
    """Current cumulative counters as a snapshot (all-time totals)."""
    return StatSnapshot(
        entry_date=as_utc(profile.updated_at or profile.created_at).date(),
        created_at=as_utc(profile.updated_at or profile.created_at),
        total_xp=profile.total_xp or 0,
        pokemon_caught=profile.pokemon_caught or 0,
        distance_walked=float(profile.distance_walked or 0.0),
        pokestops_visited=profile.pokestops_visited or 0,
        unique_pokedex_entries=profile.unique_pokedex_entries or 0,
        trainer_level=profile.trainer_level or 1,
    )


def load_snapshots(db: Session, profile_id: int) -> list[StatSnapshot]:
    entries = (
        db.query(StatEntry)
        .filter(StatEntry.profile_id == profile_id)
        .order_by(StatEntry.entry_date.asc(), StatEntry.created_at.asc())
        .all()
    )
    return sort_snapshots([to_snapshot(e) for e in entries])


def stat_history(db: Session, profile_id: int, limit: int = 30) -> list[StatEntry]:
    return (
        db.query(StatEntry)
        .filter(StatEntry.profile_id == profile_id)
        .order_by(StatEntry.entry_date.desc())
        .limit(limit)
        .all()
    )


def has_updated_today(db: Session, profile_id: int, now: datetime | None = None) -> bool:
    today = as_utc(now or utcnow()).date()
    return (
        db.query(StatEntry.id)
        .filter(StatEntry.profile_id == profile_id, StatEntry.entry_date == today)
        .first()
        is not None
    )


def record_stat_update(
    db: Session,
    profile: Profile,
    updates: Mapping[str, float | int | None],
    now: datetime | None = None,
    *,
    max_pokedex_entries: int = 1000,
) -> StatEntry:
    """Validate an upload, bump the profile totals and append a snapshot.

    Omitted (``None``) fields keep their current value.

    Raises:
        DailyLimitReached: the profile already uploaded this UTC day.
        StatRegression: a counter is lower than the current value.
        PokedexLimitExceeded: more Pokédex entries than exist.
    """
    now = as_utc(now or utcnow())
    if has_updated_today(db, profile.id, now):
        stat_updates_total.labels(result="daily_limit").inc()
        raise DailyLimitReached(next_utc_midnight(now))

    provided = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}

    regressions = [
        name
        for name in MONOTONIC_FIELDS
        if name in provided and provided[name] < (getattr(profile, name) or 0)
    ]
    if regressions:
        stat_updates_total.labels(result="regression").inc()
        raise StatRegression(regressions)

    pokedex = provided.get("unique_pokedex_entries")
    if pokedex is not None and pokedex > max_pokedex_entries:
        stat_updates_total.labels(result="pokedex_limit").inc()
        raise PokedexLimitExceeded(int(pokedex), max_pokedex_entries)

    for name, value in provided.items():
        setattr(profile, name, value)
    profile.updated_at = now
    if profile.start_date is None:
        profile.start_date = now.date()

    entry = StatEntry(
        profile_id=profile.id,
        entry_date=now.date(),
        created_at=now,
        total_xp=profile.total_xp,
        pokemon_caught=profile.pokemon_caught,
        distance_walked=profile.distance_walked,
        pokestops_visited=profile.pokestops_visited,
        unique_pokedex_entries=profile.unique_pokedex_entries,
        trainer_level=profile.trainer_level,
    )
    db.add(profile)
    db.add(entry)
    db.add(Event(user_id=profile.user_id, event="stats_updated"))
    try:
        db.commit()
    except IntegrityError as exc:
        # a concurrent upload for the same day won the unique constraint
        db.rollback()
        stat_updates_total.labels(result="daily_limit").inc()
        raise DailyLimitReached(next_utc_midnight(now)) from exc
    db.refresh(entry)
    stat_updates_total.labels(result="ok").inc()
    logger.info(
        "stats updated for %s",
        entry.entry_date,
        extra={"user_id": profile.user_id, "profile_id": profile.id},
    )
    return entry


__all__ = [
    "ProfileNotFound",
    "StatUpdateError",
    "DailyLimitReached",
    "StatRegression",
    "PokedexLimitExceeded",
    "get_profile",
    "to_account",
    "to_snapshot",
    "profile_totals",
    "load_snapshots",
    "stat_history",
    "has_updated_today",
    "record_stat_update",
]
