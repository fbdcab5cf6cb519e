"""Player router: transport control for the server-side playback session."""

from fastapi import APIRouter, Depends, HTTPException

from ytm_proxy.context import AppContext
from ytm_proxy.domain.playback.media_session import ACTIONS

from ..deps import get_context
from ..schemas import (
    AutoSkipRequest,
    MediaActionRequest,
    PlaybackStateResponse,
    PlaylistRequest,
    PlayRequest,
    SeekRequest,
    VolumeRequest,
)

router = APIRouter(prefix="/player")


def get_playback_state(context: AppContext) -> PlaybackStateResponse:
    return PlaybackStateResponse(
        **context.playback.snapshot(), repeat_mode=context.settings.repeat_mode
    )


@router.get("/state", response_model=PlaybackStateResponse)
async def get_state(context: AppContext = Depends(get_context)):
    return get_playback_state(context)


@router.post("/play", response_model=PlaybackStateResponse)
async def play(request: PlayRequest, context: AppContext = Depends(get_context)):
    """Play a track. Start failures show up as a notification, not an HTTP error."""
    if request.playlist is not None:
        context.playback.set_playlist_songs([song.to_track() for song in request.playlist])
    await context.playback.play_track(request.track.to_track(), request.index)
    return get_playback_state(context)


@router.post("/pause", response_model=PlaybackStateResponse)
async def pause(context: AppContext = Depends(get_context)):
    context.playback.pause()
    return get_playback_state(context)


@router.post("/resume", response_model=PlaybackStateResponse)
async def resume(context: AppContext = Depends(get_context)):
    await context.playback.play()
    return get_playback_state(context)


@router.post("/toggle", response_model=PlaybackStateResponse)
async def toggle(context: AppContext = Depends(get_context)):
    await context.playback.toggle_play()
    return get_playback_state(context)


@router.post("/stop", response_model=PlaybackStateResponse)
async def stop(context: AppContext = Depends(get_context)):
    context.playback.stop()
    return get_playback_state(context)


@router.post("/next", response_model=PlaybackStateResponse)
async def next_track(context: AppContext = Depends(get_context)):
    await context.playback.next()
    return get_playback_state(context)


@router.post("/previous", response_model=PlaybackStateResponse)
async def previous_track(context: AppContext = Depends(get_context)):
    await context.playback.previous()
    return get_playback_state(context)


@router.post("/seek", response_model=PlaybackStateResponse)
async def seek(request: SeekRequest, context: AppContext = Depends(get_context)):
    context.playback.seek(request.position)
    return get_playback_state(context)


@router.post("/volume", response_model=PlaybackStateResponse)
async def set_volume(request: VolumeRequest, context: AppContext = Depends(get_context)):
    context.playback.set_volume(request.volume)
    return get_playback_state(context)


@router.put("/playlist", response_model=PlaybackStateResponse)
async def set_playlist(request: PlaylistRequest, context: AppContext = Depends(get_context)):
    context.playback.set_playlist_songs([song.to_track() for song in request.songs])
    return get_playback_state(context)


@router.post("/auto-skip", response_model=PlaybackStateResponse)
async def set_auto_skip(request: AutoSkipRequest, context: AppContext = Depends(get_context)):
    context.playback.set_auto_skip(request.enabled)
    return get_playback_state(context)


@router.post("/media/{action}", response_model=PlaybackStateResponse)
async def media_action(
    action: str,
    request: MediaActionRequest = MediaActionRequest(),
    context: AppContext = Depends(get_context),
):
    """Forward a media key press (play, pause, nexttrack, seekto, ...)."""
    if action not in ACTIONS:
        raise HTTPException(400, f"Unknown media action: {action}")

    details = {}
    if request.seek_time is not None:
        details["seek_time"] = request.seek_time

    handled = await context.media_session.dispatch(action, **details)
    if not handled:
        raise HTTPException(404, f"No handler registered for {action}")
    return get_playback_state(context)
