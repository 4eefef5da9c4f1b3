from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from playerzero.config import Settings
from playerzero.dependencies import compute_signature
from tests.utils.profiles import create_profile, headers

pytestmark = pytest.mark.usefixtures("clean_db")

CODE = "1234 5678 9012"


def _now():
    return datetime.now(timezone.utc)


def _owner(user_id: int = 2, **kwargs) -> int:
    kwargs.setdefault("created_at", _now() - timedelta(days=60))
    return create_profile(
        user_id,
        trainer_code=CODE,
        instagram="ash.ketchum",
        discord="ash#0001",
        **kwargs,
    )


def _paid_viewer(user_id: int = 1) -> None:
    create_profile(
        user_id,
        created_at=_now() - timedelta(days=60),
        is_paid_user=True,
        subscription_expires_at=_now() + timedelta(days=30),
    )


def _enable_free_mode(client) -> None:
    payload = {"key": "is_free_mode", "value": True}
    sign = compute_signature(Settings().hmac_secret, payload)
    resp = client.put(
        "/v1/flags/free_mode",
        headers={**headers(99), "X-Sign": sign},
        json={"value": True},
    )
    assert resp.status_code == 200


def test_create_profile(client):
    resp = client.post(
        "/v1/profiles",
        json={
            "trainer_name": "Ash",
            "trainer_code": CODE,
            "instagram": "ash.ketchum",
            "total_xp": 1000,
        },
        headers=headers(1),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["trainer_name"] == "Ash"
    assert body["total_xp"] == 1000
    assert body["trainer_code"] == CODE
    assert body["social_links"] == {"instagram": "ash.ketchum"}
    assert body["start_date"] == _now().date().isoformat()

    resp = client.post("/v1/profiles", json={"trainer_name": "Ash"}, headers=headers(1))
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "CONFLICT"


def test_create_profile_rejects_bad_trainer_code(client):
    resp = client.post(
        "/v1/profiles",
        json={"trainer_name": "Ash", "trainer_code": "12-34"},
        headers=headers(1),
    )
    assert resp.status_code == 422


def test_update_own_profile_details(client):
    create_profile(1, total_xp=500)
    resp = client.patch(
        "/v1/profiles/me",
        json={"trainer_code_private": True, "twitch": "ashplays", "total_xp": 1},
        headers=headers(1),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["social_links"] == {"twitch": "ashplays"}
    # counters are not editable here
    assert body["total_xp"] == 500

    assert client.get("/v1/profiles/me", headers=headers(1)).json()["social_links"] == {
        "twitch": "ashplays"
    }


def test_own_profile_missing(client):
    assert client.get("/v1/profiles/me", headers=headers(1)).status_code == 404


def test_trial_viewer_hits_paywall(client):
    create_profile(1)
    profile_id = _owner()
    resp = client.get(f"/v1/profiles/{profile_id}", headers=headers(1))
    assert resp.status_code == 402
    detail = resp.json()["detail"]
    assert detail["code"] == "PAYWALL"
    assert detail["tier"] == "trial"


def test_expired_viewer_hits_paywall(client):
    create_profile(1, created_at=_now() - timedelta(days=30))
    profile_id = _owner()
    resp = client.get(f"/v1/profiles/{profile_id}", headers=headers(1))
    assert resp.status_code == 402
    assert resp.json()["detail"]["tier"] == "expired"


def test_viewer_without_profile_hits_paywall(client):
    profile_id = _owner()
    resp = client.get(f"/v1/profiles/{profile_id}", headers=headers(1))
    assert resp.status_code == 402
    assert resp.json()["detail"]["tier"] == "anonymous"


def test_free_mode_opens_profiles_and_links(client):
    create_profile(1, created_at=_now() - timedelta(days=30))
    profile_id = _owner()
    _enable_free_mode(client)

    resp = client.get(f"/v1/profiles/{profile_id}", headers=headers(1))
    assert resp.status_code == 200
    body = resp.json()
    assert body["trainer_code"] == CODE
    assert body["social_links"] == {"instagram": "ash.ketchum", "discord": "ash#0001"}
    assert body["is_paid_user"] is False


def test_unpaid_owner_details_hidden_from_paid_viewer(client):
    _paid_viewer()
    profile_id = _owner(created_at=_now())
    resp = client.get(f"/v1/profiles/{profile_id}", headers=headers(1))
    assert resp.status_code == 200
    body = resp.json()
    assert body["trainer_name"] == "trainer2"
    assert body["trainer_code"] is None
    assert body["social_links"] == {}


def test_paid_owner_privacy_toggles(client):
    _paid_viewer()
    profile_id = _owner(
        is_paid_user=True,
        subscription_expires_at=_now() + timedelta(days=30),
        trainer_code_private=True,
    )
    body = client.get(f"/v1/profiles/{profile_id}", headers=headers(1)).json()
    assert body["trainer_code"] is None
    assert body["social_links"] == {"instagram": "ash.ketchum", "discord": "ash#0001"}


def test_owner_sees_own_profile_during_trial(client):
    profile_id = _owner(user_id=1, created_at=_now(), social_links_private=True)
    resp = client.get(f"/v1/profiles/{profile_id}", headers=headers(1))
    assert resp.status_code == 200
    body = resp.json()
    assert body["trainer_code"] == CODE
    assert body["social_links"]["instagram"] == "ash.ketchum"


def test_unknown_profile(client):
    _paid_viewer()
    resp = client.get("/v1/profiles/424242", headers=headers(1))
    assert resp.status_code == 404
