# SPDX-License-Identifier: Apache-2.0
"""Main SDK class: ResearchBaseClient. Thin wrapper over the REST API."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import requests

from .exceptions import APIError

DEFAULT_TIMEOUT = 60


class ResearchBaseClient:
    """Client for the Africa Research Base API."""

    def __init__(self, api_base_url: str = "http://localhost:8000", token: str | None = None, session=None):
        self.api_base_url = api_base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        url = f"{self.api_base_url}{path}"
        try:
            resp = self.session.request(method, url, headers=self._headers(), timeout=DEFAULT_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise APIError(0, f"Request to {url} failed: {e}") from e
        try:
            body = resp.json()
        except ValueError:
            body = {"error": resp.text}
        if not resp.ok:
            if isinstance(body, dict):
                raise APIError(resp.status_code, str(body.get("error", resp.reason)), body.get("details"))
            raise APIError(resp.status_code, resp.reason)
        return body

    # Account

    def signup(self, email: str, password: str, full_name: str, **profile: str) -> dict[str, Any]:
        """Create an account; the returned token is kept for later calls."""
        r = self._request(
            "POST", "/auth/signup", json={"email": email, "password": password, "full_name": full_name, **profile}
        )
        self.token = r.get("access_token", self.token)
        return r

    def login(self, email: str, password: str) -> str:
        r = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = r["access_token"]
        return self.token

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/users/me")["user"]

    def points(self) -> dict[str, Any]:
        return self._request("GET", "/users/me/points")

    # Datasets

    def list_datasets(
        self,
        field: str | None = None,
        tag: str | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> dict[str, Any]:
        params = {"limit": limit, "offset": offset}
        params.update({k: v for k, v in (("field", field), ("tag", tag), ("search", search)) if v})
        return self._request("GET", "/datasets", params=params)

    def get_dataset(self, dataset_id: int) -> dict[str, Any]:
        return self._request("GET", f"/datasets/{dataset_id}")

    def upload_dataset(
        self,
        file_path: str | Path,
        title: str,
        research_field: str,
        description: str = "",
        tags: list[str] | None = None,
        price_usd: float = 0.0,
    ) -> dict[str, Any]:
        """Upload a local file. Returns the created dataset, AI analysis and rewards."""
        path = Path(file_path)
        form = {
            "title": title,
            "research_field": research_field,
            "description": description,
            "tags": ",".join(tags or []),
            "price_usd": str(price_usd),
        }
        with path.open("rb") as fh:
            return self._request(
                "POST", "/datasets/upload", data=form, files={"file": (path.name, fh, "application/octet-stream")}
            )

    def download_dataset(self, dataset_id: int) -> dict[str, Any]:
        return self._request("POST", f"/datasets/{dataset_id}/download")

    # Reviews

    def submit_review(
        self,
        dataset_id: int,
        accuracy: int,
        completeness: int,
        relevance: int,
        methodology: int,
        feedback: str = "",
        recommendation: str = "approve",
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            "/reviews",
            json={
                "dataset_id": dataset_id,
                "accuracy_rating": accuracy,
                "completeness_rating": completeness,
                "relevance_rating": relevance,
                "methodology_rating": methodology,
                "feedback": feedback,
                "recommendation": recommendation,
            },
        )

    def pending_reviews(self, limit: int = 20) -> list[dict[str, Any]]:
        return self._request("GET", "/reviews/pending", params={"limit": limit})["datasets"]

    def stats(self) -> dict[str, Any]:
        return self._request("GET", "/stats")
