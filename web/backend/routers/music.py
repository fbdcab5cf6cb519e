"""Music router: search and browse passthrough to YouTube Music."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from ytm_proxy.services.ytmusic import YTMusicService

from ..deps import get_ytmusic
from ..schemas import SearchResponse

router = APIRouter()


@router.get("/search", response_model=SearchResponse)
def search(
    query: str = Query(""),
    category: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    ytmusic: YTMusicService = Depends(get_ytmusic),
):
    results = ytmusic.search(query, category=category, limit=limit)
    return SearchResponse(
        results=results, total_count=len(results), query=query, category=category
    )


@router.get("/song/{video_id}")
def get_song(video_id: str, ytmusic: YTMusicService = Depends(get_ytmusic)):
    return ytmusic.get_song(video_id)


@router.get("/album/{browse_id}")
def get_album(browse_id: str, ytmusic: YTMusicService = Depends(get_ytmusic)):
    return ytmusic.get_album(browse_id)


@router.get("/artist/{browse_id}")
def get_artist(browse_id: str, ytmusic: YTMusicService = Depends(get_ytmusic)):
    return ytmusic.get_artist(browse_id)


@router.get("/playlist/{playlist_id}")
def get_playlist(
    playlist_id: str,
    limit: int = Query(100, ge=1, le=5000),
    ytmusic: YTMusicService = Depends(get_ytmusic),
):
    return ytmusic.get_playlist(playlist_id, limit=limit)


@router.get("/lyrics/{video_id}")
def get_lyrics(video_id: str, ytmusic: YTMusicService = Depends(get_ytmusic)):
    lyrics = ytmusic.get_lyrics(video_id)
    if lyrics is None:
        logger.debug(f"No lyrics for {video_id}")
        raise HTTPException(404, "No lyrics available for this song")
    return lyrics


@router.get("/library/playlists")
def get_library_playlists(
    limit: int = Query(25, ge=1, le=500),
    ytmusic: YTMusicService = Depends(get_ytmusic),
):
    return ytmusic.get_library_playlists(limit=limit)
