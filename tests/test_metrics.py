from datetime import date

import pytest

from tests.utils.profiles import add_entry, create_profile, headers

pytestmark = pytest.mark.usefixtures("clean_db")


def test_delta_metrics(client):
    profile_id = create_profile(1)
    add_entry(profile_id, date(2024, 6, 1), total_xp=0)
    resp = client.get(
        "/v1/stats/delta",
        params={"period": "range", "start": "2024-06-01", "end": "2024-06-08"},
        headers=headers(1),
    )
    assert resp.status_code == 422
    client.get("/v1/access", headers=headers(1))

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    body = metrics.text
    assert 'stats_delta_requests_total{period="range"}' in body
    assert "insufficient_data_total" in body
    assert "stats_delta_seconds_bucket" in body
    assert 'access_decisions_total{tier="trial"}' in body
    assert "free_mode_enabled" in body
