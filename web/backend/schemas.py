from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ytm_proxy.domain.models import Track


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackModel(CamelModel):
    id: str = Field(min_length=1)
    title: str
    artist: str = ""
    album: str = ""
    duration: str = ""
    thumbnail: Optional[str] = None

    def to_track(self) -> Track:
        return Track(**self.model_dump())


class PlaybackStateResponse(CamelModel):
    is_playing: bool
    position: float
    duration: float
    volume: float
    current_track: Optional[TrackModel] = None
    playlist: list[TrackModel] = []
    current_index: int = -1
    auto_skip: bool = False
    recovery_pending: bool = False
    repeat_mode: str


class PlayRequest(CamelModel):
    """Start a track; ``playlist`` replaces the session playlist first."""

    track: TrackModel
    index: int = -1
    playlist: Optional[list[TrackModel]] = None


class SeekRequest(CamelModel):
    position: float


class VolumeRequest(CamelModel):
    volume: float


class PlaylistRequest(CamelModel):
    songs: list[TrackModel]


class AutoSkipRequest(CamelModel):
    enabled: bool


class MediaActionRequest(CamelModel):
    seek_time: Optional[float] = None


class SettingsResponse(CamelModel):
    repeat_mode: str
    playlist_id: Optional[str] = None
    song_id: Optional[str] = None
    active_tab: str
    side_panel_width: int
    url: str


class SettingsUpdate(CamelModel):
    """Partial settings update. Only fields present in the body are applied."""

    repeat_mode: Optional[Literal["none", "one", "all"]] = None
    playlist_id: Optional[str] = None
    song_id: Optional[str] = None
    active_tab: Optional[Literal["info", "lyrics"]] = None
    side_panel_width: Optional[int] = None


class NotificationModel(CamelModel):
    id: str
    severity: str
    title: str
    message: str
    created_at_ms: int
    duration_ms: int


class NotificationRequest(CamelModel):
    severity: Literal["success", "error", "warning", "info"] = "info"
    title: str
    message: str = ""
    duration_ms: Optional[int] = Field(default=None, ge=0)


class SearchResponse(CamelModel):
    results: list[dict[str, Any]]
    total_count: int
    query: str
    category: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
