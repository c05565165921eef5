# SPDX-License-Identifier: Apache-2.0
"""Review submission, aggregation, verification, and the review queue."""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from arbase.database import Session, engine
from arbase.main import app
from arbase.models import Dataset, PointsTransaction, User
from conftest import upload
from sqlmodel import select

client = TestClient(app)


def review_body(dataset_id, rating=5, **overrides):
    body = {
        "dataset_id": dataset_id,
        "accuracy_rating": rating,
        "completeness_rating": rating,
        "relevance_rating": rating,
        "methodology_rating": rating,
        "feedback": "Clear documentation.",
        "recommendation": "approve",
    }
    body.update(overrides)
    return body


def points_of(user_id):
    with Session(engine) as session:
        return session.get(User, user_id).total_points


@pytest.fixture
def scored_dataset(user, ai_score):
    """Upload by `user` with a fixed AI score. Call with the score; returns the dataset dict."""
    def _upload(score):
        ai_score(score)
        r = upload(client, user["headers"])
        assert r.status_code == 201, r.text
        return r.json()["dataset"]
    return _upload


def test_verified_end_to_end(user, make_user, scored_dataset):
    dataset = scored_dataset(80)
    reviewer = make_user()
    uploader_before = points_of(user["id"])

    r = client.post("/reviews", json=review_body(dataset["id"], 5), headers=reviewer["headers"])
    assert r.status_code == 201, r.text
    v = r.json()["verification"]
    assert v["human_score"] == 100
    assert v["final_score"] == pytest.approx(92)
    assert v["is_verified"] is True
    assert v["status"] == "verified"
    assert r.json()["rewards"] == {"points_earned": 20, "uploader_bonus": 200}

    d = client.get(f"/datasets/{dataset['id']}").json()
    assert d["is_verified"] is True
    assert d["is_public"] is True
    assert d["verified_at"] is not None
    assert d["total_reviews"] == 1
    assert points_of(reviewer["id"]) == 120
    assert points_of(user["id"]) == uploader_before + 200


def test_rejected_end_to_end(user, make_user, scored_dataset):
    dataset = scored_dataset(50)
    reviewer = make_user()
    r = client.post("/reviews", json=review_body(dataset["id"], 1, recommendation="reject"), headers=reviewer["headers"])
    assert r.status_code == 201
    v = r.json()["verification"]
    assert v["human_score"] == 20
    assert v["final_score"] == pytest.approx(32)
    assert v["is_verified"] is False
    assert v["status"] == "under_review"
    assert r.json()["rewards"]["uploader_bonus"] == 0
    d = client.get(f"/datasets/{dataset['id']}").json()
    assert d["is_public"] is False
    assert d["verified_at"] is None


def test_final_score_averages_all_reviews(make_user, scored_dataset):
    dataset = scored_dataset(60)
    first, second = make_user(), make_user()
    client.post("/reviews", json=review_body(dataset["id"], 5), headers=first["headers"])
    r = client.post("/reviews", json=review_body(dataset["id"], 3), headers=second["headers"])
    v = r.json()["verification"]
    assert v["human_score"] == pytest.approx(80)
    assert v["final_score"] == pytest.approx(0.4 * 60 + 0.6 * 80)
    assert v["total_reviews"] == 2


def test_verification_bonus_paid_once(user, make_user, scored_dataset):
    dataset = scored_dataset(90)
    for _ in range(3):
        reviewer = make_user()
        r = client.post("/reviews", json=review_body(dataset["id"], 5), headers=reviewer["headers"])
        assert r.status_code == 201
    with Session(engine) as session:
        bonuses = session.exec(
            select(PointsTransaction).where(
                PointsTransaction.dataset_id == dataset["id"],
                PointsTransaction.transaction_type == "verification_bonus",
            )
        ).all()
    assert len(bonuses) == 1
    assert bonuses[0].user_id == user["id"]


def test_verified_dataset_can_drop_below_threshold(make_user, scored_dataset):
    dataset = scored_dataset(70)
    client.post("/reviews", json=review_body(dataset["id"], 5), headers=make_user()["headers"])
    for _ in range(2):
        r = client.post("/reviews", json=review_body(dataset["id"], 1), headers=make_user()["headers"])
    v = r.json()["verification"]
    assert v["is_verified"] is False
    with Session(engine) as session:
        d = session.get(Dataset, dataset["id"])
        assert d.verified_at is not None
        assert d.is_public is True
        assert d.status == "under_review"


def test_self_review_rejected(user, scored_dataset):
    dataset = scored_dataset(80)
    r = client.post("/reviews", json=review_body(dataset["id"]), headers=user["headers"])
    assert r.status_code == 400
    assert "own dataset" in r.json()["error"]


def test_duplicate_review_conflict(make_user, scored_dataset):
    dataset = scored_dataset(80)
    reviewer = make_user()
    assert client.post("/reviews", json=review_body(dataset["id"]), headers=reviewer["headers"]).status_code == 201
    r = client.post("/reviews", json=review_body(dataset["id"], 1), headers=reviewer["headers"])
    assert r.status_code == 409
    assert points_of(reviewer["id"]) == 120


@pytest.mark.parametrize("bad", [0, 6])
def test_rating_out_of_range(make_user, scored_dataset, bad):
    dataset = scored_dataset(80)
    reviewer = make_user()
    r = client.post("/reviews", json=review_body(dataset["id"], accuracy_rating=bad), headers=reviewer["headers"])
    assert r.status_code == 400
    assert points_of(reviewer["id"]) == 100


def test_invalid_recommendation(make_user, scored_dataset):
    dataset = scored_dataset(80)
    r = client.post("/reviews", json=review_body(dataset["id"], recommendation="maybe"), headers=make_user()["headers"])
    assert r.status_code == 400


def test_review_unknown_dataset(user):
    r = client.post("/reviews", json=review_body(999999), headers=user["headers"])
    assert r.status_code == 404


def test_review_requires_auth():
    assert client.post("/reviews", json=review_body(1)).status_code == 401


def test_list_reviews_with_stats(make_user, scored_dataset):
    dataset = scored_dataset(80)
    client.post("/reviews", json=review_body(dataset["id"], 5), headers=make_user()["headers"])
    client.post(
        "/reviews",
        json=review_body(dataset["id"], 3, recommendation="needs_improvement"),
        headers=make_user()["headers"],
    )
    r = client.get("/reviews", params={"dataset_id": dataset["id"]})
    assert r.status_code == 200
    body = r.json()
    assert len(body["reviews"]) == 2
    assert body["reviews"][0]["reviewer"]["full_name"] == "Amina Okafor"
    assert body["stats"]["total_reviews"] == 2
    assert body["stats"]["avg_accuracy"] == 4.0
    assert body["stats"]["recommendations"] == {"approve": 1, "reject": 0, "needs_improvement": 1}


def test_list_reviews_requires_dataset_id():
    r = client.get("/reviews")
    assert r.status_code == 400
    assert r.json() == {"error": "dataset_id is required"}


def test_pending_excludes_own_and_reviewed(user, make_user, scored_dataset):
    dataset = scored_dataset(60)
    # oldest first: backdate so the dataset is at the head of the queue
    with Session(engine) as session:
        d = session.get(Dataset, dataset["id"])
        d.created_at = datetime(2000, 1, 1)
        session.add(d)
        session.commit()
    reviewer = make_user()
    own = client.get("/reviews/pending", params={"limit": 100}, headers=user["headers"]).json()["datasets"]
    assert dataset["id"] not in [d["id"] for d in own]
    queue = client.get("/reviews/pending", params={"limit": 100}, headers=reviewer["headers"]).json()["datasets"]
    assert dataset["id"] in [d["id"] for d in queue]
    client.post("/reviews", json=review_body(dataset["id"], 2), headers=reviewer["headers"])
    queue = client.get("/reviews/pending", params={"limit": 100}, headers=reviewer["headers"]).json()["datasets"]
    assert dataset["id"] not in [d["id"] for d in queue]


def test_pending_skips_low_score_uploads(make_user, scored_dataset):
    dataset = scored_dataset(30)
    queue = client.get("/reviews/pending", params={"limit": 100}, headers=make_user()["headers"]).json()["datasets"]
    assert dataset["id"] not in [d["id"] for d in queue]
