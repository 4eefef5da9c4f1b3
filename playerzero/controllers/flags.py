from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel

from playerzero import db as db_module
from playerzero.dependencies import get_refresher, rate_limit, verify_admin_signature
from playerzero.services.feature_flags import (
    FREE_MODE_KEY,
    FreeModeRefresher,
    get_all_flags,
    set_flag,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flags")


class FreeModeUpdate(BaseModel):
    value: bool


@router.get("")
async def list_flags(
    user_id: int = Depends(rate_limit),
    refresher: FreeModeRefresher = Depends(get_refresher),
):
    def _db_call() -> dict[str, bool]:
        with db_module.SessionLocal() as db:
            return get_all_flags(db)

    flags = await asyncio.to_thread(_db_call)
    current = refresher.current
    return {
        "flags": flags,
        "free_mode": {"value": current.value, "fetched_at": current.fetched_at},
    }


@router.put("/free_mode")
async def update_free_mode(
    body: FreeModeUpdate,
    x_sign: str | None = Header(None, alias="X-Sign"),
    user_id: int = Depends(rate_limit),
    refresher: FreeModeRefresher = Depends(get_refresher),
):
    verify_admin_signature({"key": FREE_MODE_KEY, "value": body.value}, x_sign)

    def _db_call() -> bool:
        with db_module.SessionLocal() as db:
            return set_flag(db, FREE_MODE_KEY, body.value, updated_by=user_id).value

    value = await asyncio.to_thread(_db_call)
    flag = await refresher.refresh()
    logger.info("free mode set to %s by %s", value, user_id)
    return {"key": FREE_MODE_KEY, "value": value, "fetched_at": flag.fetched_at}
