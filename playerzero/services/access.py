"""Tiered access control.

Priority order, first match wins:

1. no account            -> nothing granted
2. free mode switched on -> everything granted
3. active paid account   -> everything granted
4. inside the trial      -> card generation and grind card sharing
5. otherwise             -> leaderboard browsing only

The resolver is a pure function of its inputs; fetching the account and the
free mode flag is the caller's job.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import NamedTuple

from playerzero.services.clock import as_utc

TRIAL_DAYS = 7

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR


class Account(NamedTuple):
    """Subset of the profile row the resolver needs."""
    id: int
    created_at: datetime
    is_paid_subscriber: bool = False
    subscription_expires_at: datetime | None = None


class TimeRemaining(NamedTuple):
    days: int
    hours: int
    minutes: int
    seconds: int
    total_hours: int
    total_minutes: int
    total_seconds: int

    @classmethod
    def from_ms(cls, remaining_ms: int) -> "TimeRemaining":
        remaining_ms = max(0, int(remaining_ms))
        return cls(
            days=remaining_ms // _MS_PER_DAY,
            hours=(remaining_ms % _MS_PER_DAY) // _MS_PER_HOUR,
            minutes=(remaining_ms % _MS_PER_HOUR) // _MS_PER_MINUTE,
            seconds=(remaining_ms % _MS_PER_MINUTE) // _MS_PER_SECOND,
            total_hours=remaining_ms // _MS_PER_HOUR,
            total_minutes=remaining_ms // _MS_PER_MINUTE,
            total_seconds=remaining_ms // _MS_PER_SECOND,
        )


ZERO_REMAINING = TimeRemaining(0, 0, 0, 0, 0, 0, 0)


class AccessDecision(NamedTuple):
    tier: str
    is_free_mode: bool
    is_in_trial: bool
    days_remaining: int
    time_remaining: TimeRemaining
    is_paid_user: bool
    has_full_access: bool
    can_generate_all_time_card: bool
    can_share_grind_card: bool
    can_view_weekly_monthly_cards: bool
    can_appear_on_leaderboard: bool
    can_view_leaderboard: bool
    can_click_into_profiles: bool
    can_show_trainer_code: bool
    can_show_social_links: bool

    def as_dict(self) -> dict:
        data = self._asdict()
        data["time_remaining"] = self.time_remaining._asdict()
        return data


def trial_end(account: Account, trial_days: int = TRIAL_DAYS) -> datetime:
    return as_utc(account.created_at) + timedelta(days=trial_days)


def is_paid_active(account: Account, now: datetime) -> bool:
    """Stored paid flag, unless the subscription has already expired."""
    if not account.is_paid_subscriber:
        return False
    expires = account.subscription_expires_at
    return expires is None or as_utc(expires) > as_utc(now)


def _full(tier: str, free_mode: bool, in_trial: bool, remaining: TimeRemaining) -> AccessDecision:
    return AccessDecision(
        tier=tier,
        is_free_mode=free_mode,
        is_in_trial=in_trial,
        days_remaining=remaining.days,
        time_remaining=remaining,
        is_paid_user=True,
        has_full_access=True,
        can_generate_all_time_card=True,
        can_share_grind_card=True,
        can_view_weekly_monthly_cards=True,
        can_appear_on_leaderboard=True,
        can_view_leaderboard=True,
        can_click_into_profiles=True,
        can_show_trainer_code=True,
        can_show_social_links=True,
    )


def resolve_access(
    account: Account | None,
    free_mode_enabled: bool,
    now: datetime,
    *,
    trial_days: int = TRIAL_DAYS,
) -> AccessDecision:
    """Compute the capability set for ``account`` at ``now``."""
    if account is None:
        return AccessDecision(
            tier="anonymous",
            is_free_mode=free_mode_enabled,
            is_in_trial=False,
            days_remaining=0,
            time_remaining=ZERO_REMAINING,
            is_paid_user=False,
            has_full_access=False,
            can_generate_all_time_card=False,
            can_share_grind_card=False,
            can_view_weekly_monthly_cards=False,
            can_appear_on_leaderboard=False,
            can_view_leaderboard=False,
            can_click_into_profiles=False,
            can_show_trainer_code=False,
            can_show_social_links=False,
        )

    now = as_utc(now)
    end = trial_end(account, trial_days)
    in_trial = now < end
    remaining = TimeRemaining.from_ms((end - now) // timedelta(milliseconds=1))

    if free_mode_enabled:
        return _full("free_mode", True, in_trial, remaining)

    if is_paid_active(account, now):
        return _full("paid", False, in_trial, remaining)

    return AccessDecision(
        tier="trial" if in_trial else "expired",
        is_free_mode=False,
        is_in_trial=in_trial,
        days_remaining=remaining.days,
        time_remaining=remaining,
        is_paid_user=False,
        has_full_access=False,
        can_generate_all_time_card=in_trial,
        can_share_grind_card=in_trial,
        can_view_weekly_monthly_cards=False,
        can_appear_on_leaderboard=False,
        can_view_leaderboard=True,
        can_click_into_profiles=False,
        can_show_trainer_code=False,
        can_show_social_links=False,
    )


__all__ = [
    "TRIAL_DAYS",
    "Account",
    "TimeRemaining",
    "AccessDecision",
    "trial_end",
    "is_paid_active",
    "resolve_access",
]
