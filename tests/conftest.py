# SPDX-License-Identifier: Apache-2.0
"""pytest fixtures for backend tests."""
import json
import os
import tempfile
import uuid
from pathlib import Path

_tmp = Path(tempfile.mkdtemp(prefix="arbase-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_tmp / "uploads")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["SOLANA_RPC_URL"] = ""
os.environ["SOLANA_PROGRAM_ID"] = ""
os.environ["SOLANA_KEYPAIR"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from arbase.database import create_db_and_tables  # noqa: E402
from arbase.main import app  # noqa: E402
from arbase.services.ai_service import DatasetAnalyzer, get_analyzer  # noqa: E402

create_db_and_tables()

STRONG_PASSWORD = "Str0ng!Passw0rd"

SAMPLE_CSV = (
    b"region,year,rainfall_mm,maize_yield_t\n"
    b"Kano,2019,812,2.1\n"
    b"Kano,2020,790,1.9\n"
    b"Kaduna,2019,1020,2.6\n"
    b"Kaduna,2020,,2.4\n"
)


class FakeMessage:
    def __init__(self, text):
        self.content = [type("Block", (), {"type": "text", "text": text})()]


class FakeMessages:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return FakeMessage(self.text)


class FakeAnthropic:
    """Stands in for anthropic.Anthropic: only messages.create is used."""

    def __init__(self, text=None, error=None):
        self.messages = FakeMessages(text=text, error=error)


def assessment_json(score, **extra):
    doc = {
        "confidence_score": score,
        "summary": "Well structured agricultural panel data.",
        "strengths": ["Clear column names"],
        "improvements": ["Add units metadata"],
        "tags": ["agriculture", "climate"],
    }
    doc.update(extra)
    return json.dumps(doc)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def ai_score():
    """Override the analyzer so uploads get a fixed AI confidence score. Call with the score."""
    def _set(score):
        app.dependency_overrides[get_analyzer] = lambda: DatasetAnalyzer(
            client=FakeAnthropic(text=assessment_json(score)), model="test-model"
        )
    yield _set
    app.dependency_overrides.pop(get_analyzer, None)


def signup(client, **overrides):
    """Create a fresh account; returns the signup response body."""
    body = {
        "email": f"user-{uuid.uuid4().hex[:12]}@example.org",
        "password": STRONG_PASSWORD,
        "full_name": "Amina Okafor",
        "institution": "University of Lagos",
        "research_field": "agriculture",
        "country": "Nigeria",
    }
    body.update(overrides)
    r = client.post("/auth/signup", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client):
    """Signed-up user: dict with id, email, token, headers."""
    data = signup(client)
    return {
        "id": data["user"]["id"],
        "email": data["user"]["email"],
        "token": data["access_token"],
        "headers": auth_header(data["access_token"]),
    }


@pytest.fixture
def make_user(client):
    def _make():
        data = signup(client)
        return {
            "id": data["user"]["id"],
            "email": data["user"]["email"],
            "token": data["access_token"],
            "headers": auth_header(data["access_token"]),
        }
    return _make


def upload(client, headers, content=SAMPLE_CSV, filename="rainfall.csv", **form):
    data = {
        "title": "Northern Nigeria rainfall and maize yields",
        "research_field": "agriculture",
        "description": "Seasonal rainfall and maize yield by state, 2019-2020.",
    }
    data.update(form)
    return client.post(
        "/datasets/upload",
        headers=headers,
        data=data,
        files={"file": (filename, content, "text/csv")},
    )
