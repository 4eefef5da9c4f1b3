from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Literal

from fastapi import APIRouter, Depends

from playerzero import db as db_module
from playerzero.config import Settings
from playerzero.dependencies import get_free_mode, rate_limit, raise_error
from playerzero.models import ErrorCode, Profile
from playerzero.services.access import resolve_access
from playerzero.services.clock import utcnow
from playerzero.services.feature_flags import FreeModeFlag
from playerzero.services.leaderboard import build_leaderboard, load_candidates
from playerzero.services.stat_entries import to_account

settings = Settings()

router = APIRouter()


@router.get("/leaderboard")
async def get_leaderboard(
    period: Literal["weekly", "monthly", "all-time"] = "weekly",
    sort_by: Literal["xp", "catches", "distance", "pokestops"] = "xp",
    user_id: int = Depends(rate_limit),
    free_mode: FreeModeFlag = Depends(get_free_mode),
):
    def _viewer():
        with db_module.SessionLocal() as db:
            profile = db.query(Profile).filter_by(user_id=user_id).first()
            return to_account(profile) if profile else None

    now = utcnow()
    account = await asyncio.to_thread(_viewer)
    decision = resolve_access(account, free_mode.value, now, trial_days=settings.trial_days)
    if not decision.can_view_leaderboard:
        raise_error(402, ErrorCode.PAYWALL, "Leaderboard requires an account")

    def _db_call():
        with db_module.SessionLocal() as db:
            return load_candidates(db)

    candidates = await asyncio.to_thread(_db_call)
    entries = build_leaderboard(
        candidates,
        period,
        sort_by,
        free_mode.value,
        now,
        limit=settings.leaderboard_limit,
        buffer_window=timedelta(hours=settings.buffer_window_hours),
        trial_days=settings.trial_days,
    )
    return {
        "period": period,
        "sort_by": sort_by,
        "entries": [e._asdict() for e in entries],
    }
