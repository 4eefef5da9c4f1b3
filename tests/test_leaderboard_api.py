from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from playerzero.services.stats_delta import week_start
from tests.utils.profiles import add_entry, create_profile, headers

pytestmark = pytest.mark.usefixtures("clean_db")


def _seed():
    now = datetime.now(timezone.utc)
    start = week_start(now)
    old = now - timedelta(days=60)
    rows = [
        (1, True, 2000),
        (2, True, 5000),
        (3, False, 9000),
    ]
    for user_id, paid, gained in rows:
        profile_id = create_profile(
            user_id,
            created_at=old,
            is_paid_user=paid,
            total_xp=10_000 + gained,
        )
        add_entry(
            profile_id,
            start.date() - timedelta(days=1),
            created_at=start - timedelta(hours=2),
            total_xp=10_000,
        )
        add_entry(profile_id, now.date(), created_at=now, total_xp=10_000 + gained)


def test_leaderboard_ranks_paid_accounts(client):
    _seed()
    resp = client.get("/v1/leaderboard", headers=headers(3))
    assert resp.status_code == 200
    body = resp.json()
    assert body["period"] == "weekly"
    assert [(e["trainer_name"], e["xp"]) for e in body["entries"]] == [
        ("trainer2", 5000),
        ("trainer1", 2000),
    ]
    assert [e["rank"] for e in body["entries"]] == [1, 2]


def test_leaderboard_all_time(client):
    _seed()
    body = client.get(
        "/v1/leaderboard", params={"period": "all-time"}, headers=headers(1)
    ).json()
    assert [e["xp"] for e in body["entries"]] == [15_000, 12_000]


def test_leaderboard_requires_account(client):
    resp = client.get("/v1/leaderboard", headers=headers(404))
    assert resp.status_code == 402
    assert resp.json()["detail"]["code"] == "PAYWALL"


def test_leaderboard_rejects_unknown_sort(client):
    _seed()
    resp = client.get(
        "/v1/leaderboard", params={"sort_by": "level"}, headers=headers(1)
    )
    assert resp.status_code == 422
