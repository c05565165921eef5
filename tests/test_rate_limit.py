# SPDX-License-Identifier: Apache-2.0
"""Signup rate limit (shared limiter storage)."""
import uuid

import pytest
from fastapi.testclient import TestClient

from arbase.core.security import get_limiter
from arbase.main import app
from conftest import STRONG_PASSWORD

client = TestClient(app)


@pytest.fixture
def limiter():
    lim = get_limiter()
    lim.reset()
    lim.enabled = True
    yield lim
    lim.enabled = False
    lim.reset()


def _signup():
    return client.post(
        "/auth/signup",
        json={"email": f"rl-{uuid.uuid4().hex[:10]}@example.org", "password": STRONG_PASSWORD, "full_name": "Rate Limited"},
    )


def test_signup_limited_after_five_attempts(limiter):
    for _ in range(5):
        assert _signup().status_code == 201
    r = _signup()
    assert r.status_code == 429
    assert r.json()["error"] == "Too many requests. Please try again later."


def test_failed_attempts_count_toward_limit(limiter):
    for _ in range(5):
        r = client.post("/auth/signup", json={"email": "bad", "password": "x", "full_name": "No"})
        assert r.status_code == 400
    assert _signup().status_code == 429


def test_limiter_disabled_by_default():
    assert get_limiter().enabled is False
    for _ in range(7):
        assert _signup().status_code == 201
