from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from playerzero import db as db_module
from playerzero.config import Settings
from playerzero.dependencies import rate_limit, raise_error
from playerzero.metrics import (
    insufficient_data_total,
    stats_delta_requests_total,
    stats_delta_seconds,
)
from playerzero.models import ErrorCode
from playerzero.services.clock import utcnow
from playerzero.services.feature_flags import get_max_pokedex_entries
from playerzero.services.formatting import (
    format_distance,
    format_number,
    format_xp_rate,
    insufficient_data_message,
)
from playerzero.services.stat_entries import (
    DailyLimitReached,
    PokedexLimitExceeded,
    ProfileNotFound,
    StatRegression,
    get_profile,
    load_snapshots,
    profile_totals,
    record_stat_update,
    stat_history,
)
from playerzero.services.stats_delta import (
    AllTime,
    CurrentMonth,
    CurrentWeek,
    ExplicitRange,
    InsufficientData,
    compute_stats_delta,
)
from playerzero.services.summit import LEVEL_50_XP, is_summit_complete, project_summit_date

settings = Settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats")


class StatUpdateRequest(BaseModel):
    total_xp: int | None = Field(default=None, ge=0)
    pokemon_caught: int | None = Field(default=None, ge=0)
    distance_walked: float | None = Field(default=None, ge=0)
    pokestops_visited: int | None = Field(default=None, ge=0)
    unique_pokedex_entries: int | None = Field(default=None, ge=0)
    trainer_level: int | None = Field(default=None, ge=1, le=50)


class StatEntryOut(BaseModel):
    entry_date: date
    total_xp: int | None
    pokemon_caught: int | None
    distance_walked: float | None
    pokestops_visited: int | None
    unique_pokedex_entries: int | None
    trainer_level: int | None

    model_config = ConfigDict(from_attributes=True)


def _not_found() -> None:
    raise_error(404, ErrorCode.NOT_FOUND, "Profile not found")


@router.get("/delta")
async def stats_delta(
    period: Literal["week", "month", "all", "range"] = "week",
    start: date | None = None,
    end: date | None = None,
    user_id: int = Depends(rate_limit),
):
    if period == "range" and (start is None or end is None):
        raise_error(400, ErrorCode.BAD_REQUEST, "start and end are required for range")

    def _db_call():
        with db_module.SessionLocal() as db:
            profile = get_profile(db, user_id)
            return load_snapshots(db, profile.id), profile_totals(profile), profile.start_date

    stats_delta_requests_total.labels(period=period).inc()
    with stats_delta_seconds.time():
        try:
            snapshots, totals, start_date = await asyncio.to_thread(_db_call)
        except ProfileNotFound:
            _not_found()

        if period == "range":
            window = ExplicitRange(start, end)
        elif period == "month":
            window = CurrentMonth()
        elif period == "all":
            window = AllTime(registered_on=start_date, totals=totals)
        else:
            window = CurrentWeek()

        try:
            delta = compute_stats_delta(
                snapshots,
                window,
                utcnow(),
                buffer_window=timedelta(hours=settings.buffer_window_hours),
            )
        except InsufficientData as exc:
            insufficient_data_total.inc()
            logger.info(
                "insufficient data: %s", exc, extra={"user_id": user_id, "period": period}
            )
            raise_error(
                422,
                ErrorCode.INSUFFICIENT_DATA,
                insufficient_data_message(),
                found=exc.found,
            )

    body = delta._asdict()
    body["formatted"] = {
        "xp": format_number(delta.xp_delta),
        "xp_per_day": format_xp_rate(delta.xp_per_day),
        "catches": format_number(delta.catches_delta),
        "distance": format_distance(delta.distance_delta),
        "distance_per_day": format_distance(delta.distance_per_day),
        "pokestops": format_number(delta.pokestops_delta),
    }
    return body


@router.post("", status_code=201)
async def update_stats(
    body: StatUpdateRequest,
    user_id: int = Depends(rate_limit),
) -> StatEntryOut:
    def _db_call() -> StatEntryOut:
        with db_module.SessionLocal() as db:
            profile = get_profile(db, user_id)
            entry = record_stat_update(
                db,
                profile,
                body.model_dump(),
                max_pokedex_entries=get_max_pokedex_entries(
                    db, settings.max_pokedex_entries
                ),
            )
            return StatEntryOut.model_validate(entry)

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        _not_found()
    except DailyLimitReached as exc:
        raise_error(
            429,
            ErrorCode.DAILY_LIMIT,
            str(exc),
            next_update_at=exc.next_update_at.isoformat(),
        )
    except StatRegression as exc:
        raise_error(400, ErrorCode.STAT_REGRESSION, str(exc), fields=exc.fields)
    except PokedexLimitExceeded as exc:
        raise_error(400, ErrorCode.BAD_REQUEST, str(exc))


@router.get("/history")
async def get_history(
    limit: int = Query(30, ge=1, le=365),
    user_id: int = Depends(rate_limit),
) -> list[StatEntryOut]:
    def _db_call() -> list[StatEntryOut]:
        with db_module.SessionLocal() as db:
            profile = get_profile(db, user_id)
            return [
                StatEntryOut.model_validate(e)
                for e in stat_history(db, profile.id, limit)
            ]

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        _not_found()


@router.get("/summit")
async def get_summit(user_id: int = Depends(rate_limit)):
    def _db_call():
        with db_module.SessionLocal() as db:
            profile = get_profile(db, user_id)
            return profile.total_xp or 0, profile.start_date

    try:
        total_xp, start_date = await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        _not_found()

    return {
        "total_xp": total_xp,
        "target_xp": LEVEL_50_XP,
        "is_complete": is_summit_complete(total_xp),
        "projected_date": project_summit_date(total_xp, start_date, utcnow().date()),
    }
