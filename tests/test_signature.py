from __future__ import annotations

import hashlib
import hmac

import pytest
from fastapi import HTTPException

from playerzero.dependencies import compute_signature, verify_admin_signature

SECRET = "test-hmac-secret"


def test_compute_signature_is_key_order_independent():
    a = compute_signature(SECRET, {"key": "is_free_mode", "value": True})
    b = compute_signature(SECRET, {"value": True, "key": "is_free_mode"})
    assert a == b
    body = b'{"key":"is_free_mode","value":true}'
    assert a == hmac.new(SECRET.encode(), body, hashlib.sha256).hexdigest()


def test_verify_admin_signature_success():
    payload = {"key": "is_free_mode", "value": False}
    verify_admin_signature(payload, compute_signature(SECRET, payload))


@pytest.mark.parametrize("sign", [None, "", "bad"])
def test_verify_admin_signature_fail(sign):
    with pytest.raises(HTTPException) as exc:
        verify_admin_signature({"key": "is_free_mode", "value": True}, sign)
    assert exc.value.status_code == 401
