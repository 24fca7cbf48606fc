"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status and version
  - No authentication required
  - Unknown paths use the error envelope
"""

from __future__ import annotations


def test_health_returns_200(api_client):
    resp = api_client.client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "version" in data


def test_health_no_auth_required(api_client):
    resp = api_client.client.get("/api/v1/health", headers={})
    assert resp.status_code == 200


def test_unknown_path_uses_error_envelope(api_client):
    resp = api_client.client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "http_404"
