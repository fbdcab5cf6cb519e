"""Settings router: read and update the session settings."""

from fastapi import APIRouter, Depends

from ytm_proxy.context import AppContext

from ..deps import get_context
from ..schemas import SettingsResponse, SettingsUpdate

router = APIRouter(prefix="/settings")


def get_settings_response(context: AppContext) -> SettingsResponse:
    state = context.settings.get_state()
    return SettingsResponse(**state._asdict(), url=context.location.href)


@router.get("", response_model=SettingsResponse)
async def get_settings(context: AppContext = Depends(get_context)):
    return get_settings_response(context)


@router.patch("", response_model=SettingsResponse)
async def update_settings(update: SettingsUpdate, context: AppContext = Depends(get_context)):
    """Apply the fields present in the body. ``playlistId: null`` clears the playlist."""
    settings = context.settings
    fields = update.model_fields_set

    if "repeat_mode" in fields and update.repeat_mode is not None:
        settings.set_repeat_mode(update.repeat_mode)
    if "active_tab" in fields and update.active_tab is not None:
        settings.set_active_tab(update.active_tab)
    if "side_panel_width" in fields and update.side_panel_width is not None:
        settings.set_sidebar_split(update.side_panel_width)
    if "playlist_id" in fields:
        settings.set_current_playlist(update.playlist_id or None)
    if "song_id" in fields:
        settings.set_current_song(update.song_id or None)

    return get_settings_response(context)


@router.post("/repeat/cycle", response_model=SettingsResponse)
async def cycle_repeat_mode(context: AppContext = Depends(get_context)):
    context.settings.cycle_repeat_mode()
    return get_settings_response(context)


@router.post("/reset", response_model=SettingsResponse)
async def reset_settings(context: AppContext = Depends(get_context)):
    """Restore default settings. The page URL keeps its query parameters."""
    context.settings.reset()
    return get_settings_response(context)
