"""Global feature flags, runtime settings and the free mode refresher.

Flags live in the ``feature_flags`` table. The free mode value handed to the
access resolver is a timestamped ``FreeModeFlag`` published by
``FreeModeRefresher``; request handlers read ``refresher.current`` instead of
hitting the database on every call.

Numeric runtime settings such as the Pokédex cap live in ``system_settings``
as text and fall back to the process configuration when unset.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, NamedTuple

from sqlalchemy.orm import Session

from playerzero import db as db_module
from playerzero.metrics import free_mode_enabled, free_mode_refresh_total
from playerzero.models import Event, FeatureFlag, SystemSetting
from playerzero.services.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

FREE_MODE_KEY = "is_free_mode"

DEFAULT_FEATURE_FLAGS: dict[str, bool] = {
    FREE_MODE_KEY: False,
}

FLAG_DESCRIPTIONS: dict[str, str] = {
    FREE_MODE_KEY: (
        "When enabled, all users get full access without trial or payment "
        "restrictions. Bypasses all paywall and subscription checks."
    ),
}


def get_all_flags(db: Session) -> dict[str, bool]:
    """Defaults overlaid with stored values; unknown keys are ignored."""
    flags = dict(DEFAULT_FEATURE_FLAGS)
    for key, value in db.query(FeatureFlag.key, FeatureFlag.value).all():
        if key in flags:
            flags[key] = bool(value)
    return flags


def get_flags_detailed(db: Session) -> list[FeatureFlag]:
    return db.query(FeatureFlag).order_by(FeatureFlag.key).all()


def set_flag(db: Session, key: str, value: bool, updated_by: int | None = None) -> FeatureFlag:
    if key not in DEFAULT_FEATURE_FLAGS:
        raise KeyError(key)
    flag = db.query(FeatureFlag).filter_by(key=key).first()
    now = utcnow()
    if flag is None:
        flag = FeatureFlag(
            key=key,
            description=FLAG_DESCRIPTIONS.get(key, "No description available"),
        )
    flag.value = bool(value)
    flag.updated_at = now
    flag.updated_by = updated_by
    db.add(flag)
    db.add(Event(user_id=updated_by, event=f"flag_{key}_{'on' if value else 'off'}"))
    db.commit()
    db.refresh(flag)
    logger.warning("audit: flag %s set to %s by %s", key, flag.value, updated_by)
    return flag


def toggle_free_mode(db: Session, updated_by: int | None = None) -> bool:
    current = get_all_flags(db)[FREE_MODE_KEY]
    return set_flag(db, FREE_MODE_KEY, not current, updated_by).value


def initialize_flags(db: Session) -> None:
    """Insert missing flags with their default values."""
    existing = {key for (key,) in db.query(FeatureFlag.key).all()}
    for key, value in DEFAULT_FEATURE_FLAGS.items():
        if key in existing:
            continue
        db.add(
            FeatureFlag(
                key=key,
                value=value,
                description=FLAG_DESCRIPTIONS.get(key, "No description available"),
                updated_at=utcnow(),
            )
        )
    db.commit()


MAX_POKEDEX_KEY = "max_pokedex_entries"

SETTING_DESCRIPTIONS: dict[str, str] = {
    MAX_POKEDEX_KEY: "Upper bound for unique Pokédex entries accepted on stat uploads.",
}


def get_setting(db: Session, key: str) -> str | None:
    row = db.query(SystemSetting.value).filter_by(key=key).first()
    return row[0] if row else None


def set_setting(db: Session, key: str, value: str, updated_by: int | None = None) -> SystemSetting:
    if key not in SETTING_DESCRIPTIONS:
        raise KeyError(key)
    setting = db.query(SystemSetting).filter_by(key=key).first()
    if setting is None:
        setting = SystemSetting(key=key, description=SETTING_DESCRIPTIONS[key])
    setting.value = value
    setting.updated_at = utcnow()
    setting.updated_by = updated_by
    db.add(setting)
    db.add(Event(user_id=updated_by, event=f"setting_{key}_changed"))
    db.commit()
    db.refresh(setting)
    logger.warning("audit: setting %s set to %s by %s", key, value, updated_by)
    return setting


def get_max_pokedex_entries(db: Session, default: int) -> int:
    """Stored cap, or ``default`` when unset or unparsable."""
    raw = get_setting(db, MAX_POKEDEX_KEY)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.error("invalid %s value %r, using %s", MAX_POKEDEX_KEY, raw, default)
        return default


def set_max_pokedex_entries(db: Session, value: int, updated_by: int | None = None) -> int:
    if value < 1:
        raise ValueError("max_pokedex_entries must be positive")
    return int(set_setting(db, MAX_POKEDEX_KEY, str(int(value)), updated_by).value)


def load_free_mode() -> bool:
    with db_module.SessionLocal() as db:
        return get_all_flags(db)[FREE_MODE_KEY]


class FreeModeFlag(NamedTuple):
    value: bool
    fetched_at: datetime | None = None

    def is_stale(self, now: datetime, max_age: timedelta) -> bool:
        if self.fetched_at is None:
            return True
        return as_utc(now) - as_utc(self.fetched_at) > max_age


class FreeModeRefresher:
    """Poll the free mode flag and publish each reading to subscribers.

    Callers that must see a change immediately, e.g. right after an admin
    toggles the flag, await ``refresh()`` directly.
    """

    def __init__(
        self,
        loader: Callable[[], bool] = load_free_mode,
        interval_s: float = 300,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._loader = loader
        self._interval = interval_s
        self._clock = clock
        self._current = FreeModeFlag(DEFAULT_FEATURE_FLAGS[FREE_MODE_KEY])
        self._subscribers: list[asyncio.Queue[FreeModeFlag]] = []
        self._task: asyncio.Task | None = None

    @property
    def current(self) -> FreeModeFlag:
        return self._current

    def subscribe(self) -> asyncio.Queue[FreeModeFlag]:
        """Queue receiving every published flag; only the newest is kept."""
        queue: asyncio.Queue[FreeModeFlag] = asyncio.Queue(maxsize=1)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[FreeModeFlag]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def _publish(self, flag: FreeModeFlag) -> None:
        self._current = flag
        free_mode_enabled.set(1 if flag.value else 0)
        for queue in self._subscribers:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(flag)

    async def refresh(self) -> FreeModeFlag:
        try:
            value = await asyncio.to_thread(self._loader)
        except Exception as exc:
            free_mode_refresh_total.labels(result="error").inc()
            logger.exception("Free mode refresh failed, keeping %s: %s", self._current.value, exc)
            return self._current
        free_mode_refresh_total.labels(result="ok").inc()
        if value != self._current.value:
            logger.info("free mode changed: %s -> %s", self._current.value, value)
        flag = FreeModeFlag(bool(value), self._clock())
        self._publish(flag)
        return flag

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="free-mode-refresher")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None


__all__ = [
    "FREE_MODE_KEY",
    "DEFAULT_FEATURE_FLAGS",
    "FLAG_DESCRIPTIONS",
    "get_all_flags",
    "get_flags_detailed",
    "set_flag",
    "toggle_free_mode",
    "initialize_flags",
    "MAX_POKEDEX_KEY",
    "SETTING_DESCRIPTIONS",
    "get_setting",
    "set_setting",
    "get_max_pokedex_entries",
    "set_max_pokedex_entries",
    "load_free_mode",
    "FreeModeFlag",
    "FreeModeRefresher",
]
