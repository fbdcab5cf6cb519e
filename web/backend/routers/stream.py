"""Stream router: proxies audio bytes for a video ID.

The session player and browsers both load ``/api/stream/{id}``; Range
requests are forwarded so seeking works.
"""

from typing import Iterator

import requests
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from ytm_proxy.services.exceptions import UpstreamError
from ytm_proxy.services.ytmusic import YTMusicService

from ..deps import get_ytmusic

router = APIRouter()

CHUNK_SIZE = 64 * 1024

# Upstream headers mirrored to the client (Content-Type goes through media_type)
PASSTHROUGH_HEADERS = ("Content-Length", "Content-Range", "Accept-Ranges")


def _iter_upstream(upstream: requests.Response) -> Iterator[bytes]:
    try:
        for chunk in upstream.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                yield chunk
    finally:
        upstream.close()


def proxy_stream(video_id: str, request: Request, ytmusic: YTMusicService):
    info = ytmusic.resolve_stream(video_id)

    headers = dict(info.headers)
    range_header = request.headers.get("range")
    if range_header:
        headers["Range"] = range_header

    try:
        upstream = requests.get(info.url, headers=headers, stream=True, timeout=(10, 30))
    except requests.RequestException as e:
        logger.error(f"Stream request failed for {video_id}: {e}")
        raise UpstreamError(f"Failed to fetch stream: {e}") from e

    if upstream.status_code >= 400:
        logger.warning(f"Upstream returned {upstream.status_code} for {video_id}")
        upstream.close()
        return JSONResponse(
            status_code=upstream.status_code,
            content={"error": f"Upstream returned {upstream.status_code}"},
        )

    response_headers = {
        name: upstream.headers[name]
        for name in PASSTHROUGH_HEADERS
        if name in upstream.headers
    }
    response_headers.setdefault("Accept-Ranges", "bytes")

    logger.debug(f"Streaming {video_id} ({upstream.status_code})")
    return StreamingResponse(
        _iter_upstream(upstream),
        status_code=upstream.status_code,
        media_type=upstream.headers.get("Content-Type") or info.mime_type,
        headers=response_headers,
    )


# Declared first so the suffix is not swallowed by the bare ID route
@router.get("/stream/{video_id}.m4a")
def stream_audio_m4a(
    video_id: str, request: Request, ytmusic: YTMusicService = Depends(get_ytmusic)
):
    return proxy_stream(video_id, request, ytmusic)


@router.get("/stream/{video_id}")
def stream_audio(
    video_id: str, request: Request, ytmusic: YTMusicService = Depends(get_ytmusic)
):
    return proxy_stream(video_id, request, ytmusic)
