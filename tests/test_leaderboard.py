from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from playerzero.db import SessionLocal
from playerzero.services import leaderboard as leaderboard_module
from playerzero.services.access import Account, resolve_access
from playerzero.services.leaderboard import (
    LeaderboardCandidate,
    build_leaderboard,
    load_candidates,
)
from tests.utils.profiles import add_entry, create_profile, snap

NOW = datetime(2024, 6, 12, 15, 0, tzinfo=timezone.utc)
OLD = NOW - timedelta(days=100)


def _candidate(profile_id, week_xp, *, paid=True, total_xp=0, catches=0):
    account = Account(id=profile_id, created_at=OLD, is_paid_subscriber=paid)
    snapshots = [
        snap(date(2024, 6, 9), xp=0, catches=0),
        snap(date(2024, 6, 12), xp=week_xp, catches=catches),
    ]
    return LeaderboardCandidate(
        profile_id=profile_id,
        trainer_name=f"t{profile_id}",
        account=account,
        snapshots=snapshots,
        totals=snap(date(2024, 6, 12), xp=total_xp),
        registered_on=date(2024, 1, 1),
    )


def test_weekly_board_ranks_by_delta():
    board = build_leaderboard(
        [_candidate(1, 100), _candidate(2, 300), _candidate(3, 200)],
        "weekly",
        "xp",
        False,
        NOW,
    )
    assert [e.profile_id for e in board] == [2, 3, 1]
    assert [e.rank for e in board] == [1, 2, 3]
    assert board[0].xp == 300
    assert board[0].last_update == date(2024, 6, 12)


def test_unpaid_accounts_excluded_unless_free_mode():
    candidates = [_candidate(1, 100), _candidate(2, 500, paid=False)]
    board = build_leaderboard(candidates, "weekly", "xp", False, NOW)
    assert [e.profile_id for e in board] == [1]

    board = build_leaderboard(candidates, "weekly", "xp", True, NOW)
    assert [e.profile_id for e in board] == [2, 1]


def test_trial_length_forwarded_to_resolver(monkeypatch):
    seen = []

    def _resolve(account, free_mode_enabled, now, **kwargs):
        seen.append(kwargs.get("trial_days"))
        return resolve_access(account, free_mode_enabled, now, **kwargs)

    monkeypatch.setattr(leaderboard_module, "resolve_access", _resolve)
    board = build_leaderboard(
        [_candidate(1, 100), _candidate(2, 200)], "weekly", "xp", False, NOW, trial_days=30
    )
    assert [e.profile_id for e in board] == [2, 1]
    assert seen == [30, 30]


def test_default_trial_length(monkeypatch):
    seen = []

    def _resolve(account, free_mode_enabled, now, **kwargs):
        seen.append(kwargs.get("trial_days"))
        return resolve_access(account, free_mode_enabled, now, **kwargs)

    monkeypatch.setattr(leaderboard_module, "resolve_access", _resolve)
    build_leaderboard([_candidate(1, 100)], "weekly", "xp", False, NOW)
    assert seen == [7]


def test_sort_by_catches():
    board = build_leaderboard(
        [_candidate(1, 500, catches=5), _candidate(2, 100, catches=50)],
        "weekly",
        "catches",
        False,
        NOW,
    )
    assert [e.profile_id for e in board] == [2, 1]


def test_ties_keep_candidate_order():
    board = build_leaderboard(
        [_candidate(5, 100), _candidate(4, 100), _candidate(6, 100)],
        "weekly",
        "xp",
        False,
        NOW,
    )
    assert [e.profile_id for e in board] == [5, 4, 6]


def test_all_time_ranks_by_totals():
    board = build_leaderboard(
        [_candidate(1, 900, total_xp=1000), _candidate(2, 10, total_xp=9000)],
        "all-time",
        "xp",
        False,
        NOW,
    )
    assert [(e.profile_id, e.xp) for e in board] == [(2, 9000), (1, 1000)]


def test_limit():
    candidates = [_candidate(i, i * 10) for i in range(1, 6)]
    board = build_leaderboard(candidates, "weekly", "xp", False, NOW, limit=2)
    assert [e.profile_id for e in board] == [5, 4]


def test_unknown_sort_field():
    with pytest.raises(ValueError):
        build_leaderboard([], "weekly", "level", False, NOW)


def test_load_candidates(clean_db):
    first = create_profile(21, is_paid_user=True, total_xp=800, created_at=OLD)
    second = create_profile(22, created_at=OLD)
    add_entry(first, date(2024, 6, 10), total_xp=500)
    add_entry(first, date(2024, 6, 9), total_xp=100)
    with SessionLocal() as session:
        candidates = load_candidates(session)
    by_id = {c.profile_id: c for c in candidates}
    assert [s.total_xp for s in by_id[first].snapshots] == [100, 500]
    assert by_id[first].totals.total_xp == 800
    assert by_id[first].account.is_paid_subscriber
    assert by_id[second].snapshots == []
