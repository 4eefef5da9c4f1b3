from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from playerzero.config import Settings
from playerzero.dependencies import compute_signature
from tests.utils.profiles import create_profile, headers

pytestmark = pytest.mark.usefixtures("clean_db")


def _now():
    return datetime.now(timezone.utc)


def test_access_requires_profile(client):
    resp = client.get("/v1/access", headers=headers(404))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND"


def test_access_trial(client):
    create_profile(1, created_at=_now() - timedelta(days=2))
    resp = client.get("/v1/access", headers=headers(1))
    assert resp.status_code == 200
    body = resp.json()
    assert body["tier"] == "trial"
    assert body["is_in_trial"] is True
    assert body["can_generate_all_time_card"] is True
    assert body["can_appear_on_leaderboard"] is False
    assert body["days_remaining"] == 4
    assert body["time_remaining"]["days"] == 4
    assert body["countdown"].startswith("4d ")


def test_access_expired(client):
    create_profile(2, created_at=_now() - timedelta(days=8))
    body = client.get("/v1/access", headers=headers(2)).json()
    assert body["tier"] == "expired"
    assert body["can_view_leaderboard"] is True
    assert body["can_generate_all_time_card"] is False
    assert body["countdown"] is None


def test_access_paid(client):
    create_profile(
        3,
        created_at=_now() - timedelta(days=40),
        is_paid_user=True,
        subscription_expires_at=_now() + timedelta(days=20),
    )
    body = client.get("/v1/access", headers=headers(3)).json()
    assert body["tier"] == "paid"
    assert body["has_full_access"] is True


def test_access_free_mode(client):
    create_profile(4, created_at=_now() - timedelta(days=30))
    payload = {"key": "is_free_mode", "value": True}
    sign = compute_signature(Settings().hmac_secret, payload)
    resp = client.put(
        "/v1/flags/free_mode",
        headers={**headers(99), "X-Sign": sign},
        json={"value": True},
    )
    assert resp.status_code == 200

    body = client.get("/v1/access", headers=headers(4)).json()
    assert body["tier"] == "free_mode"
    assert body["is_free_mode"] is True
    assert body["can_show_social_links"] is True
