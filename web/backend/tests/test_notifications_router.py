"""Tests for the notification endpoints."""

from fastapi.testclient import TestClient


def test_empty(client: TestClient):
    response = client.get("/api/notifications")
    assert response.status_code == 200
    assert response.json() == []


def test_show_notification(client: TestClient):
    response = client.post(
        "/api/notifications",
        json={"severity": "success", "title": "Saved", "message": "Playlist saved"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["severity"] == "success"
    assert body["title"] == "Saved"
    assert body["durationMs"] == 5000
    assert body["id"]
    assert body["createdAtMs"] > 0

    assert [n["id"] for n in client.get("/api/notifications").json()] == [body["id"]]


def test_default_severity_and_sticky_duration(client: TestClient):
    body = client.post("/api/notifications", json={"title": "Hello", "durationMs": 0}).json()

    assert body["severity"] == "info"
    assert body["durationMs"] == 0


def test_invalid_requests(client: TestClient):
    assert client.post("/api/notifications", json={"title": "x", "severity": "fatal"}).status_code == 422
    assert client.post("/api/notifications", json={"title": "x", "durationMs": -1}).status_code == 422
    assert client.post("/api/notifications", json={"message": "no title"}).status_code == 422


def test_remove_notification(client: TestClient):
    notification_id = client.post("/api/notifications", json={"title": "Hello"}).json()["id"]

    assert client.delete(f"/api/notifications/{notification_id}").status_code == 204
    assert client.get("/api/notifications").json() == []
    assert client.delete(f"/api/notifications/{notification_id}").status_code == 404


def test_clear_notifications(client: TestClient):
    client.post("/api/notifications", json={"title": "One"})
    client.post("/api/notifications", json={"title": "Two", "severity": "warning"})

    assert client.delete("/api/notifications").status_code == 204
    assert client.get("/api/notifications").json() == []
