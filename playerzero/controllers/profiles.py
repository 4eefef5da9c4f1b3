from __future__ import annotations

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from playerzero import db as db_module
from playerzero.config import Settings
from playerzero.dependencies import get_free_mode, rate_limit, raise_error
from playerzero.models import ErrorCode, Profile
from playerzero.services.access import resolve_access
from playerzero.services.clock import utcnow
from playerzero.services.feature_flags import FreeModeFlag
from playerzero.services.profiles import (
    ProfileExists,
    create_profile,
    public_profile,
    update_profile_details,
)
from playerzero.services.stat_entries import ProfileNotFound, get_profile, to_account

settings = Settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles")

TRAINER_CODE_PATTERN = r"^\d{4} ?\d{4} ?\d{4}$"


class ProfileDetails(BaseModel):
    trainer_code: str | None = Field(default=None, pattern=TRAINER_CODE_PATTERN)
    trainer_code_private: bool | None = None
    social_links_private: bool | None = None
    country: str | None = Field(default=None, max_length=64)
    team_color: str | None = Field(default=None, max_length=16)
    instagram: str | None = Field(default=None, max_length=255)
    tiktok: str | None = Field(default=None, max_length=255)
    twitter: str | None = Field(default=None, max_length=255)
    youtube: str | None = Field(default=None, max_length=255)
    twitch: str | None = Field(default=None, max_length=255)
    reddit: str | None = Field(default=None, max_length=255)
    facebook: str | None = Field(default=None, max_length=255)
    snapchat: str | None = Field(default=None, max_length=255)
    github: str | None = Field(default=None, max_length=255)
    vimeo: str | None = Field(default=None, max_length=255)
    discord: str | None = Field(default=None, max_length=255)
    telegram: str | None = Field(default=None, max_length=255)
    whatsapp: str | None = Field(default=None, max_length=255)


class ProfileCreate(ProfileDetails):
    trainer_name: str = Field(min_length=1, max_length=64)
    start_date: date | None = None
    total_xp: int | None = Field(default=None, ge=0)
    pokemon_caught: int | None = Field(default=None, ge=0)
    distance_walked: float | None = Field(default=None, ge=0)
    pokestops_visited: int | None = Field(default=None, ge=0)
    unique_pokedex_entries: int | None = Field(default=None, ge=0)
    trainer_level: int | None = Field(default=None, ge=1, le=50)


class ProfileUpdate(ProfileDetails):
    trainer_name: str | None = Field(default=None, min_length=1, max_length=64)


def _own_view(profile: Profile, free_mode: bool) -> dict:
    owner = resolve_access(
        to_account(profile), free_mode, utcnow(), trial_days=settings.trial_days
    )
    return public_profile(profile, owner, is_owner=True)


@router.post("", status_code=201)
async def create_own_profile(
    body: ProfileCreate,
    user_id: int = Depends(rate_limit),
    free_mode: FreeModeFlag = Depends(get_free_mode),
):
    def _db_call() -> dict:
        with db_module.SessionLocal() as db:
            profile = create_profile(db, user_id, body.model_dump())
            return _own_view(profile, free_mode.value)

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileExists:
        raise_error(409, ErrorCode.CONFLICT, "Profile already exists")


@router.get("/me")
async def get_own_profile(
    user_id: int = Depends(rate_limit),
    free_mode: FreeModeFlag = Depends(get_free_mode),
):
    def _db_call() -> dict:
        with db_module.SessionLocal() as db:
            return _own_view(get_profile(db, user_id), free_mode.value)

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        raise_error(404, ErrorCode.NOT_FOUND, "Profile not found")


@router.patch("/me")
async def update_own_profile(
    body: ProfileUpdate,
    user_id: int = Depends(rate_limit),
    free_mode: FreeModeFlag = Depends(get_free_mode),
):
    def _db_call() -> dict:
        with db_module.SessionLocal() as db:
            profile = update_profile_details(
                db, get_profile(db, user_id), body.model_dump(exclude_unset=True)
            )
            return _own_view(profile, free_mode.value)

    try:
        return await asyncio.to_thread(_db_call)
    except ProfileNotFound:
        raise_error(404, ErrorCode.NOT_FOUND, "Profile not found")


@router.get("/{profile_id}")
async def view_profile(
    profile_id: int,
    user_id: int = Depends(rate_limit),
    free_mode: FreeModeFlag = Depends(get_free_mode),
):
    now = utcnow()

    def _db_call():
        with db_module.SessionLocal() as db:
            viewer = db.query(Profile).filter_by(user_id=user_id).first()
            target = db.get(Profile, profile_id)
            viewer_account = to_account(viewer) if viewer else None
            if target is None:
                return viewer_account, False, None
            is_owner = viewer is not None and viewer.id == target.id
            owner = resolve_access(
                to_account(target), free_mode.value, now, trial_days=settings.trial_days
            )
            return viewer_account, is_owner, public_profile(target, owner, is_owner=is_owner)

    viewer_account, is_owner, body = await asyncio.to_thread(_db_call)
    if not is_owner:
        viewer = resolve_access(
            viewer_account, free_mode.value, now, trial_days=settings.trial_days
        )
        if not viewer.can_click_into_profiles:
            logger.info(
                "profile view blocked", extra={"user_id": user_id, "tier": viewer.tier}
            )
            raise_error(
                402,
                ErrorCode.PAYWALL,
                "Upgrade to view other trainers' profiles",
                tier=viewer.tier,
            )
    if body is None:
        raise_error(404, ErrorCode.NOT_FOUND, "Profile not found")
    return body
