"""
YouTube Music facade.

Metadata comes from ytmusicapi, audio stream URLs from yt-dlp. Library errors
are translated into the proxy exception hierarchy so the HTTP layer can map
them to status codes.
"""

import re
from typing import Any, Dict, List, NamedTuple, Optional

import yt_dlp
from loguru import logger
from ytmusicapi import YTMusic
from ytmusicapi.exceptions import YTMusicError, YTMusicUserError

from ..core.config import YTMusicConfig
from .exceptions import (
    AuthRequiredError,
    ContentNotFoundError,
    InvalidIdError,
    StreamUnavailableError,
    UpstreamError,
)

# Category name -> ytmusicapi search filter
SEARCH_CATEGORIES = {
    "songs": "songs",
    "videos": "videos",
    "albums": "albums",
    "artists": "artists",
    "playlists": "playlists",
    "community_playlists": "community_playlists",
    "featured_playlists": "featured_playlists",
    "podcasts": "podcasts",
    "episodes": "episodes",
    "profiles": "profiles",
    "uploads": "uploads",
}

STREAM_FORMAT = "bestaudio[ext=m4a]/bestaudio"

WATCH_URL = "https://music.youtube.com/watch?v={video_id}"

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_MIME_TYPES = {
    "m4a": "audio/mp4",
    "mp4": "audio/mp4",
    "webm": "audio/webm",
    "opus": "audio/ogg",
    "mp3": "audio/mpeg",
}


class StreamInfo(NamedTuple):
    url: str
    mime_type: str
    content_length: Optional[int] = None
    headers: Dict[str, str] = {}


def validate_id(value: Optional[str], kind: str = "ID") -> str:
    """Return ``value`` stripped, or raise ``InvalidIdError``."""
    value = (value or "").strip()
    if not value:
        raise InvalidIdError(f"{kind} parameter is required")
    if not _ID_PATTERN.match(value):
        raise InvalidIdError(f"Invalid {kind}: {value}")
    return value


def normalize_category(category: Optional[str]) -> Optional[str]:
    """Map ``Songs``/``CommunityPlaylists``/``community-playlists`` to a search filter."""
    if not category:
        return None
    key = category.strip()
    if not (key.isupper() or key.islower()):
        key = re.sub(r"(?<!^)(?=[A-Z])", "_", key)
    key = key.lower().replace("-", "_")
    key = re.sub(r"_+", "_", key)
    if key not in SEARCH_CATEGORIES:
        raise InvalidIdError(
            f"Unknown category: {category}. Valid categories: {', '.join(SEARCH_CATEGORIES)}"
        )
    return SEARCH_CATEGORIES[key]


class YTMusicService:
    """Lazily-initialized ytmusicapi client plus yt-dlp stream resolution."""

    def __init__(self, config: Optional[YTMusicConfig] = None) -> None:
        self.config = config or YTMusicConfig()
        self._ytmusic: Optional[YTMusic] = None

    @property
    def ytmusic(self) -> YTMusic:
        if self._ytmusic is None:
            try:
                self._ytmusic = YTMusic(
                    auth=self.config.auth_file,
                    language=self.config.language,
                    location=self.config.location,
                )
                logger.info("YouTube Music API initialized")
            except Exception as e:
                logger.error(f"Failed to initialize YouTube Music API: {e}")
                raise UpstreamError(f"YouTube Music initialization failed: {e}") from e
        return self._ytmusic

    @property
    def authenticated(self) -> bool:
        return bool(self.config.auth_file)

    def _call(self, what: str, func, *args, **kwargs) -> Any:
        """Run a ytmusicapi call, translating its failures."""
        try:
            return func(*args, **kwargs)
        except YTMusicUserError as e:
            raise InvalidIdError(str(e)) from e
        except YTMusicError as e:
            logger.warning(f"YouTube Music request failed ({what}): {e}")
            if "404" in str(e) or "not found" in str(e).lower():
                raise ContentNotFoundError(f"{what} not found") from e
            raise UpstreamError(f"YouTube Music request failed: {e}") from e
        except (KeyError, IndexError, TypeError) as e:
            # ytmusicapi's parsers fail this way on empty responses for unknown IDs
            logger.debug(f"Unparsable response for {what}: {e!r}")
            raise ContentNotFoundError(f"{what} not found") from e
        except Exception as e:
            logger.error(f"Unexpected YouTube Music error ({what}): {e}")
            raise UpstreamError(f"YouTube Music request failed: {e}") from e

    def search(
        self, query: str, category: Optional[str] = None, limit: int = 20
    ) -> List[Dict[str, Any]]:
        query = (query or "").strip()
        if not query:
            raise InvalidIdError("Query parameter is required")
        search_filter = normalize_category(category)

        results = self._call(
            f"search '{query}'",
            self.ytmusic.search,
            query,
            filter=search_filter,
            limit=limit,
        )
        logger.debug(f"Search '{query}' ({search_filter or 'all'}) returned {len(results)} results")
        return results

    def get_song(self, video_id: str) -> Dict[str, Any]:
        video_id = validate_id(video_id)
        song = self._call(f"Song {video_id}", self.ytmusic.get_song, video_id)

        status = (song.get("playabilityStatus") or {}).get("status")
        if not song.get("videoDetails") or status == "ERROR":
            raise ContentNotFoundError(f"Song {video_id} not found")
        return song

    def get_album(self, browse_id: str) -> Dict[str, Any]:
        browse_id = validate_id(browse_id, "browse ID")
        return self._call(f"Album {browse_id}", self.ytmusic.get_album, browse_id)

    def get_artist(self, channel_id: str) -> Dict[str, Any]:
        channel_id = validate_id(channel_id, "browse ID")
        return self._call(f"Artist {channel_id}", self.ytmusic.get_artist, channel_id)

    def get_playlist(self, playlist_id: str, limit: Optional[int] = 100) -> Dict[str, Any]:
        playlist_id = validate_id(playlist_id, "playlist ID")
        return self._call(
            f"Playlist {playlist_id}", self.ytmusic.get_playlist, playlist_id, limit=limit
        )

    def get_lyrics(self, video_id: str) -> Optional[Dict[str, Any]]:
        """Lyrics for a song, or None when the song has none."""
        video_id = validate_id(video_id)
        watch = self._call(
            f"Song {video_id}", self.ytmusic.get_watch_playlist, videoId=video_id, limit=1
        )
        lyrics_id = watch.get("lyrics")
        if not lyrics_id:
            return None
        return self._call(f"Lyrics {lyrics_id}", self.ytmusic.get_lyrics, lyrics_id)

    def get_library_playlists(self, limit: int = 25) -> List[Dict[str, Any]]:
        if not self.authenticated:
            raise AuthRequiredError("Library access requires an auth file (ytmusic.auth_file)")
        return self._call("Library playlists", self.ytmusic.get_library_playlists, limit=limit)

    def resolve_stream(self, video_id: str) -> StreamInfo:
        """Find the best audio-only format for a video.

        Raises:
            InvalidIdError: If the ID is malformed
            ContentNotFoundError: If the video is unavailable
            StreamUnavailableError: If no audio format exists
            UpstreamError: For any other extraction failure
        """
        video_id = validate_id(video_id)
        ydl_opts: Dict[str, Any] = {
            "format": STREAM_FORMAT,
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "skip_download": True,
        }
        if self.config.cookies:
            ydl_opts["http_headers"] = {"Cookie": self.config.cookies}

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(WATCH_URL.format(video_id=video_id), download=False)
        except yt_dlp.utils.DownloadError as e:
            error_msg = str(e).lower()
            if "requested format is not available" in error_msg:
                raise StreamUnavailableError(f"No audio stream for {video_id}") from e
            if "unavailable" in error_msg or "private video" in error_msg or "removed" in error_msg:
                raise ContentNotFoundError(f"Video {video_id} is unavailable") from e
            logger.error(f"yt-dlp failed for {video_id}: {e}")
            raise UpstreamError(f"Failed to resolve stream: {e}") from e

        if not info or not info.get("url"):
            raise StreamUnavailableError(f"No audio stream for {video_id}")

        ext = info.get("ext") or ""
        return StreamInfo(
            url=info["url"],
            mime_type=_MIME_TYPES.get(ext, "application/octet-stream"),
            content_length=info.get("filesize") or info.get("filesize_approx"),
            headers=dict(info.get("http_headers") or {}),
        )
