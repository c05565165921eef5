# SPDX-License-Identifier: Apache-2.0
"""Points ledger service and /users/me/points."""
import pytest
from fastapi.testclient import TestClient

from arbase.core.exceptions import NotFoundError
from arbase.database import Session, engine
from arbase.main import app
from arbase.models import User
from arbase.services.points_service import award_points, ledger_for_user
from conftest import upload

client = TestClient(app)


def test_ledger_after_signup_and_upload(user, ai_score):
    ai_score(85)
    upload(client, user["headers"])
    r = client.get("/users/me/points", headers=user["headers"])
    assert r.status_code == 200
    body = r.json()
    assert body["total_points"] == 100 + 90
    types = [t["transaction_type"] for t in body["transactions"]]
    assert types == ["dataset_upload", "signup_bonus"]
    assert body["transactions"][0]["details"]["breakdown"] == {"base": 50, "quality": 40}
    assert sum(t["points"] for t in body["transactions"]) == body["total_points"]


def test_award_points_updates_total_and_ledger(user):
    with Session(engine) as session:
        award_points(session, user["id"], 15, "adjustment", "Manual correction", details={"by": "admin"})
        session.commit()
    with Session(engine) as session:
        assert session.get(User, user["id"]).total_points == 115
        entries = ledger_for_user(session, user["id"])
        assert entries[0].points == 15
        assert entries[0].details == '{"by": "admin"}'


def test_award_points_uncommitted_is_discarded(user):
    with Session(engine) as session:
        award_points(session, user["id"], 500, "adjustment", "Rolled back")
        session.rollback()
    with Session(engine) as session:
        assert session.get(User, user["id"]).total_points == 100


def test_award_points_unknown_user():
    with Session(engine) as session:
        with pytest.raises(NotFoundError):
            award_points(session, 999999, 10, "adjustment", "Nobody")


def test_points_requires_auth():
    assert client.get("/users/me/points").status_code == 401
