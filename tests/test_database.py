# SPDX-License-Identifier: Apache-2.0
"""Database and session tests."""
import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from arbase.database import Session, create_db_and_tables, engine, get_session, session_scope
from arbase.models import Dataset, Review, User


def test_create_db_and_tables():
    create_db_and_tables()
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'")).fetchall()
    names = {r[0] for r in rows}
    assert {"users", "datasets", "reviews", "points_transactions"} <= names


def test_get_session_generator():
    gen = get_session()
    session = next(gen)
    assert session is not None
    try:
        next(gen)
    except StopIteration:
        pass


def test_session_scope_rolls_back_on_error():
    email = "rollback-check@example.org"
    with pytest.raises(RuntimeError):
        with session_scope() as session:
            session.add(User(email=email, hashed_password="x"))
            session.flush()
            raise RuntimeError("abort")
    with Session(engine) as session:
        assert session.exec(select(User).where(User.email == email)).first() is None


def test_review_unique_per_reviewer():
    with session_scope() as session:
        uploader = User(email="uq-uploader@example.org", hashed_password="x")
        reviewer = User(email="uq-reviewer@example.org", hashed_password="x")
        session.add(uploader)
        session.add(reviewer)
        session.flush()
        dataset = Dataset(uploader_id=uploader.id, title="Unique check")
        session.add(dataset)
        session.flush()
        ids = (dataset.id, reviewer.id)
    ratings = dict(accuracy_rating=3, completeness_rating=3, relevance_rating=3, methodology_rating=3, human_score=60.0)
    with session_scope() as session:
        session.add(Review(dataset_id=ids[0], reviewer_id=ids[1], **ratings))
    with pytest.raises(IntegrityError):
        with session_scope() as session:
            session.add(Review(dataset_id=ids[0], reviewer_id=ids[1], **ratings))


def test_stats_route_uses_session_dependency():
    from fastapi.testclient import TestClient

    from arbase.main import app

    opened = []

    def recording_session():
        with Session(engine) as session:
            opened.append(session)
            yield session

    app.dependency_overrides[get_session] = recording_session
    try:
        r = TestClient(app).get("/stats")
    finally:
        app.dependency_overrides.pop(get_session, None)
    assert r.status_code == 200
    assert len(opened) == 1
    assert r.json()["total_users"] >= 0
