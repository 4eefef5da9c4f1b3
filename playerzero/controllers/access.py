from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from playerzero import db as db_module
from playerzero.config import Settings
from playerzero.dependencies import get_free_mode, rate_limit, raise_error
from playerzero.metrics import access_decisions_total
from playerzero.models import ErrorCode
from playerzero.services.access import Account, resolve_access
from playerzero.services.clock import utcnow
from playerzero.services.feature_flags import FreeModeFlag
from playerzero.services.formatting import format_countdown
from playerzero.services.stat_entries import ProfileNotFound, get_profile, to_account

settings = Settings()
logger = logging.getLogger(__name__)

router = APIRouter()


async def load_account(user_id: int) -> Account:
    def _db_call() -> Account:
        with db_module.SessionLocal() as db:
            return to_account(get_profile(db, user_id))

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        raise_error(404, ErrorCode.NOT_FOUND, "Profile not found")


@router.get("/access")
async def get_access(
    user_id: int = Depends(rate_limit),
    free_mode: FreeModeFlag = Depends(get_free_mode),
):
    account = await load_account(user_id)
    decision = resolve_access(
        account, free_mode.value, utcnow(), trial_days=settings.trial_days
    )
    access_decisions_total.labels(tier=decision.tier).inc()
    logger.debug("access resolved", extra={"user_id": user_id, "tier": decision.tier})
    body = decision.as_dict()
    body["countdown"] = (
        format_countdown(decision.time_remaining) if decision.is_in_trial else None
    )
    return body
