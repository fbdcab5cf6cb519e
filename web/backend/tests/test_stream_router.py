"""Tests for the audio stream proxy."""

from unittest.mock import MagicMock, patch

import requests
from fastapi.testclient import TestClient

from ytm_proxy.services.exceptions import ContentNotFoundError, StreamUnavailableError
from ytm_proxy.services.ytmusic import StreamInfo


def upstream_response(status_code=200, headers=None, chunks=(b"abc", b"def")) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.iter_content.return_value = iter(chunks)
    return response


def stream_info() -> StreamInfo:
    return StreamInfo(
        url="https://rr1.googlevideo.com/videoplayback?id=1",
        mime_type="audio/mp4",
        content_length=6,
        headers={"User-Agent": "Mozilla/5.0"},
    )


def test_streams_audio(client: TestClient, ytmusic):
    ytmusic.resolve_stream.return_value = stream_info()
    upstream = upstream_response(headers={"Content-Type": "audio/mp4", "Content-Length": "6"})

    with patch("web.backend.routers.stream.requests.get", return_value=upstream) as mock_get:
        response = client.get("/api/stream/abc")

    assert response.status_code == 200
    assert response.content == b"abcdef"
    assert response.headers["content-type"] == "audio/mp4"
    assert response.headers["accept-ranges"] == "bytes"
    ytmusic.resolve_stream.assert_called_once_with("abc")
    assert mock_get.call_args.kwargs["headers"] == {"User-Agent": "Mozilla/5.0"}
    assert mock_get.call_args.kwargs["stream"] is True
    upstream.close.assert_called()


def test_m4a_suffix_is_stripped(client: TestClient, ytmusic):
    ytmusic.resolve_stream.return_value = stream_info()

    with patch("web.backend.routers.stream.requests.get", return_value=upstream_response()):
        response = client.get("/api/stream/abc.m4a")

    assert response.status_code == 200
    ytmusic.resolve_stream.assert_called_once_with("abc")
    # Upstream sent no Content-Type, so the resolved format decides
    assert response.headers["content-type"] == "audio/mp4"


def test_range_is_forwarded(client: TestClient, ytmusic):
    ytmusic.resolve_stream.return_value = stream_info()
    upstream = upstream_response(
        status_code=206,
        headers={"Content-Range": "bytes 0-5/100", "Content-Length": "6", "Accept-Ranges": "bytes"},
    )

    with patch("web.backend.routers.stream.requests.get", return_value=upstream) as mock_get:
        response = client.get("/api/stream/abc", headers={"Range": "bytes=0-5"})

    assert response.status_code == 206
    assert response.headers["content-range"] == "bytes 0-5/100"
    assert mock_get.call_args.kwargs["headers"]["Range"] == "bytes=0-5"


def test_upstream_error_status_is_mirrored(client: TestClient, ytmusic):
    ytmusic.resolve_stream.return_value = stream_info()
    upstream = upstream_response(status_code=403)

    with patch("web.backend.routers.stream.requests.get", return_value=upstream):
        response = client.get("/api/stream/abc")

    assert response.status_code == 403
    assert response.json() == {"error": "Upstream returned 403"}
    upstream.close.assert_called_once()


def test_connection_failure_is_502(client: TestClient, ytmusic):
    ytmusic.resolve_stream.return_value = stream_info()

    with patch(
        "web.backend.routers.stream.requests.get",
        side_effect=requests.ConnectionError("connection reset"),
    ):
        response = client.get("/api/stream/abc")

    assert response.status_code == 502


def test_unavailable_video(client: TestClient, ytmusic):
    ytmusic.resolve_stream.side_effect = ContentNotFoundError("Video abc is unavailable")

    response = client.get("/api/stream/abc")

    assert response.status_code == 404
    assert response.json() == {"error": "Video abc is unavailable"}


def test_no_audio_format(client: TestClient, ytmusic):
    ytmusic.resolve_stream.side_effect = StreamUnavailableError("No audio stream for abc")

    response = client.get("/api/stream/abc")

    assert response.status_code == 404
