"""Tests for FastAPI application."""

import json

from fastapi.testclient import TestClient

from ytm_proxy.services.exceptions import ContentNotFoundError, UpstreamError


def test_health_endpoint(client: TestClient):
    """Test health check endpoint returns 200."""
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["name"] == "YouTube Music API Proxy"
    assert "timestamp" in body


def test_api_info(client: TestClient):
    response = client.get("/api")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_cors_headers(client: TestClient):
    """Test CORS headers are present."""
    response = client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5000"


def test_proxy_errors_become_json(client: TestClient, ytmusic):
    ytmusic.get_album.side_effect = ContentNotFoundError("Album MPREb_x not found")

    response = client.get("/api/album/MPREb_x")

    assert response.status_code == 404
    assert response.json() == {"error": "Album MPREb_x not found"}


def test_upstream_errors_are_502(client: TestClient, ytmusic):
    ytmusic.get_artist.side_effect = UpstreamError("YouTube Music request failed")

    response = client.get("/api/artist/UCabc")

    assert response.status_code == 502
    assert response.json()["error"] == "YouTube Music request failed"


def test_settings_are_persisted(context, client: TestClient):
    client.post("/api/settings/repeat/cycle")

    stored = json.loads(context.storage.get("app-settings"))
    assert stored["repeat_mode"] == "one"


def test_shutdown_stops_playback(context, engine, client: TestClient, track_payload: dict):
    client.post("/api/player/play", json={"track": track_payload})
    assert context.playback.is_playing

    client.__exit__(None, None, None)

    assert not context.playback.is_playing
    assert engine.handles() == []
