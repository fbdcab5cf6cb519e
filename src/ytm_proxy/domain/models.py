"""
Domain models and shared constants.
"""

from typing import Any, Mapping, NamedTuple, Optional

REPEAT_NONE = "none"
REPEAT_ONE = "one"
REPEAT_ALL = "all"
REPEAT_MODES = (REPEAT_NONE, REPEAT_ONE, REPEAT_ALL)

TAB_INFO = "info"
TAB_LYRICS = "lyrics"
TABS = (TAB_INFO, TAB_LYRICS)

SEVERITIES = ("success", "error", "warning", "info")

DEFAULT_SIDE_PANEL_WIDTH = 300
MIN_SIDE_PANEL_WIDTH = 200
MAX_SIDE_PANEL_WIDTH = 600

DEFAULT_NOTIFICATION_DURATION_MS = 5000

# Delay before auto-advancing past a track that failed to play
ERROR_RECOVERY_SECONDS = 3.0


class Track(NamedTuple):
    """A playable song or video.

    Immutable: whatever list produced the track owns it, players only hold
    references.
    """

    id: str  # YouTube video ID
    title: str
    artist: str = ""  # Primary artist name
    album: str = ""
    duration: str = ""  # Display label, e.g. "3:45"
    thumbnail: Optional[str] = None

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "Track":
        """Build a track from a ytmusicapi result dict.

        Accepts search results, playlist/album entries and watch-playlist
        entries, which all share ``videoId``/``title``/``artists``.

        Raises:
            ValueError: If the item has no video ID
        """
        video_id = item.get("videoId") or item.get("id")
        if not video_id:
            raise ValueError(f"Item has no videoId: {item.get('title', '<untitled>')}")

        artists = item.get("artists") or []
        artist = artists[0].get("name", "") if artists else item.get("artist", "")

        album = item.get("album") or ""
        if isinstance(album, Mapping):
            album = album.get("name") or ""

        thumbnails = item.get("thumbnails") or []
        thumbnail = thumbnails[-1].get("url") if thumbnails else item.get("thumbnail")

        return cls(
            id=video_id,
            title=item.get("title") or "Unknown Title",
            artist=artist or "",
            album=album,
            duration=item.get("duration") or "",
            thumbnail=thumbnail,
        )

    def to_dict(self) -> dict[str, Any]:
        return self._asdict()
