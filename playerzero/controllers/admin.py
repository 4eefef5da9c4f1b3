from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from playerzero import db as db_module
from playerzero.config import Settings
from playerzero.dependencies import rate_limit, raise_error, verify_admin_signature
from playerzero.models import ErrorCode
from playerzero.services.feature_flags import (
    MAX_POKEDEX_KEY,
    get_max_pokedex_entries,
    set_max_pokedex_entries,
)
from playerzero.services.profiles import update_payment_status
from playerzero.services.stat_entries import ProfileNotFound

settings = Settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


class PaymentUpdate(BaseModel):
    is_paid: bool
    subscription_type: str | None = Field(default=None, max_length=32)


class SettingUpdate(BaseModel):
    value: int = Field(ge=1)


@router.put("/users/{target_user_id}/payment")
async def update_payment(
    target_user_id: int,
    body: PaymentUpdate,
    x_sign: str | None = Header(None, alias="X-Sign"),
    user_id: int = Depends(rate_limit),
):
    verify_admin_signature(
        {
            "user_id": target_user_id,
            "is_paid": body.is_paid,
            "subscription_type": body.subscription_type,
        },
        x_sign,
    )

    def _db_call() -> dict:
        with db_module.SessionLocal() as db:
            profile = update_payment_status(
                db,
                target_user_id,
                body.is_paid,
                body.subscription_type,
                updated_by=user_id,
            )
            return {
                "user_id": profile.user_id,
                "is_paid_user": profile.is_paid_user,
                "subscription_type": profile.subscription_type,
                "subscription_expires_at": profile.subscription_expires_at,
            }

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        raise_error(404, ErrorCode.NOT_FOUND, "Profile not found")


@router.get("/settings/max_pokedex_entries")
async def get_pokedex_cap(user_id: int = Depends(rate_limit)):
    def _db_call() -> int:
        with db_module.SessionLocal() as db:
            return get_max_pokedex_entries(db, settings.max_pokedex_entries)

    value = await asyncio.to_thread(_db_call)
    return {"key": MAX_POKEDEX_KEY, "value": value}


@router.put("/settings/max_pokedex_entries")
async def update_pokedex_cap(
    body: SettingUpdate,
    x_sign: str | None = Header(None, alias="X-Sign"),
    user_id: int = Depends(rate_limit),
):
    verify_admin_signature({"key": MAX_POKEDEX_KEY, "value": body.value}, x_sign)

    def _db_call() -> int:
        with db_module.SessionLocal() as db:
            return set_max_pokedex_entries(db, body.value, updated_by=user_id)

    value = await asyncio.to_thread(_db_call)
    logger.info("%s set to %s by %s", MAX_POKEDEX_KEY, value, user_id)
    return {"key": MAX_POKEDEX_KEY, "value": value}
