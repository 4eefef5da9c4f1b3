"""Profile creation, payment status and the public profile view.

What another trainer sees of a profile depends on two decisions: the viewer's
(may they open profiles at all) and the owner's (may the owner's trainer code
and social links be shown). The owner's privacy toggles apply on top.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playerzero.models import SOCIAL_FIELDS, Event, Profile
from playerzero.services.access import AccessDecision
from playerzero.services.clock import as_utc, utcnow
from playerzero.services.stat_entries import MONOTONIC_FIELDS, get_profile

logger = logging.getLogger(__name__)

DETAIL_FIELDS = (
    "trainer_name",
    "trainer_code",
    "trainer_code_private",
    "social_links_private",
    "country",
    "team_color",
) + SOCIAL_FIELDS
NOT_NULL_FIELDS = ("trainer_name", "trainer_code_private", "social_links_private")
CREATE_FIELDS = DETAIL_FIELDS + tuple(MONOTONIC_FIELDS) + ("trainer_level", "start_date")


class ProfileExists(Exception):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Profile already exists for user {user_id}")


def one_year_from(now: datetime) -> datetime:
    try:
        return now.replace(year=now.year + 1)
    except ValueError:
        # 29 February
        return now.replace(year=now.year + 1, month=3, day=1)


def create_profile(
    db: Session,
    user_id: int,
    data: Mapping[str, object],
    now: datetime | None = None,
) -> Profile:
    """Insert the caller's profile; ``start_date`` defaults to today."""
    now = as_utc(now or utcnow())
    if db.query(Profile.id).filter_by(user_id=user_id).first() is not None:
        raise ProfileExists(user_id)

    values = {k: v for k, v in data.items() if k in CREATE_FIELDS and v is not None}
    values.setdefault("start_date", now.date())
    profile = Profile(user_id=user_id, created_at=now, updated_at=now, **values)
    db.add(profile)
    db.add(Event(user_id=user_id, event="profile_created"))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ProfileExists(user_id) from exc
    db.refresh(profile)
    logger.info("profile created", extra={"user_id": user_id, "profile_id": profile.id})
    return profile


def update_profile_details(
    db: Session,
    profile: Profile,
    data: Mapping[str, object],
) -> Profile:
    """Apply descriptive fields only; counters change through stat uploads."""
    for name, value in data.items():
        if name not in DETAIL_FIELDS:
            continue
        if value is None and name in NOT_NULL_FIELDS:
            continue
        setattr(profile, name, value)
    profile.updated_at = utcnow()
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def update_payment_status(
    db: Session,
    user_id: int,
    is_paid: bool,
    subscription_type: str | None = None,
    *,
    updated_by: int | None = None,
    now: datetime | None = None,
) -> Profile:
    """Mark an account paid for one year, or clear its subscription.

    Raises:
        ProfileNotFound: no profile for ``user_id``.
    """
    now = as_utc(now or utcnow())
    profile = get_profile(db, user_id)
    profile.is_paid_user = bool(is_paid)
    profile.subscription_type = subscription_type
    profile.subscription_expires_at = one_year_from(now) if is_paid else None
    profile.updated_at = now
    db.add(profile)
    db.add(
        Event(user_id=user_id, event=f"payment_status_{'paid' if is_paid else 'unpaid'}")
    )
    db.commit()
    db.refresh(profile)
    logger.warning(
        "audit: payment status for %s set to %s by %s",
        user_id,
        profile.is_paid_user,
        updated_by,
        extra={"user_id": user_id, "profile_id": profile.id},
    )
    return profile


def social_links(profile: Profile) -> dict[str, str]:
    return {
        name: getattr(profile, name)
        for name in SOCIAL_FIELDS
        if getattr(profile, name)
    }


def public_profile(profile: Profile, owner: AccessDecision, *, is_owner: bool = False) -> dict:
    """Profile as shown to another trainer.

    The trainer code is shown only when the owner's tier allows it and the
    owner has not made it private; social links follow the same rule. The
    owner always sees everything.
    """
    show_code = is_owner or (owner.can_show_trainer_code and not profile.trainer_code_private)
    show_social = is_owner or (
        owner.can_show_social_links and not profile.social_links_private
    )
    return {
        "id": profile.id,
        "trainer_name": profile.trainer_name,
        "trainer_level": profile.trainer_level,
        "country": profile.country,
        "team_color": profile.team_color,
        "start_date": profile.start_date,
        "total_xp": profile.total_xp or 0,
        "pokemon_caught": profile.pokemon_caught or 0,
        "distance_walked": float(profile.distance_walked or 0.0),
        "pokestops_visited": profile.pokestops_visited or 0,
        "unique_pokedex_entries": profile.unique_pokedex_entries or 0,
        "is_paid_user": bool(profile.is_paid_user),
        "trainer_code": profile.trainer_code if show_code else None,
        "social_links": social_links(profile) if show_social else {},
    }


__all__ = [
    "DETAIL_FIELDS",
    "ProfileExists",
    "one_year_from",
    "create_profile",
    "update_profile_details",
    "update_payment_status",
    "social_links",
    "public_profile",
]
