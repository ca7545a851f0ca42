"""
Tests for API Routes.

Requires Python 3.11+.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Test cases for health endpoint."""

    def test_health_check(self, client):
        """Test health check returns valid response."""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data


class TestTreeEndpoints:
    """Test cases for tree endpoints."""

    def test_build_tree(self, client, sample_csv: str):
        """Test hashing an export."""
        response = client.post("/trees", json={"csv_text": sample_csv})
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "loaded"
        assert data["leaf_count"] == 3
        assert [len(level) for level in data["levels"]] == [4, 2, 1]
        assert data["levels"][0][3]["is_duplicate"] is True
        assert data["root"] == data["levels"][-1][0]["hash"]
        assert data["root"].startswith(data["root_prefix"])
        assert data["selected_fields"] == ["title", "username", "password", "last modified"]

    def test_field_selection(self, client, sample_csv: str):
        """Test selection order does not change the root."""
        first = client.post(
            "/trees", json={"csv_text": sample_csv, "fields": ["password", "title"]}
        ).json()
        second = client.post(
            "/trees", json={"csv_text": sample_csv, "fields": ["Title", "Password"]}
        ).json()

        assert first["root"] == second["root"]
        assert first["selected_fields"] == ["title", "password"]

    def test_no_headers(self, client):
        """Test structural problems are reported as a status."""
        response = client.post("/trees", json={"csv_text": "\n\n"})
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "no_headers"
        assert data["root"] is None

    def test_unbound_selection_is_empty(self, client):
        """Test selecting only missing fields yields an empty tree."""
        response = client.post(
            "/trees", json={"csv_text": "Title\nGitHub\n", "fields": ["password"]}
        )
        data = response.json()

        assert data["status"] == "empty"
        assert data["levels"] == []

    def test_unknown_field(self, client, sample_csv: str):
        """Test unknown field names are rejected."""
        response = client.post("/trees", json={"csv_text": sample_csv, "fields": ["notes"]})
        assert response.status_code == 422

    def test_diff(self, client, sample_csv: str):
        """Test only candidate-side rows are reported."""
        extra = sample_csv + "Forum,carol,pw,2024-05-05T05:05:05Z,\n"

        forward = client.post(
            "/trees/diff",
            json={"reference": {"csv_text": sample_csv}, "candidate": {"csv_text": extra}},
        ).json()
        backward = client.post(
            "/trees/diff",
            json={"reference": {"csv_text": extra}, "candidate": {"csv_text": sample_csv}},
        ).json()

        assert forward["total"] == 1
        assert forward["reference_root"] != forward["candidate_root"]
        assert backward["differences"] == []
