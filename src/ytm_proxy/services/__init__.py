"""External services: YouTube Music metadata and audio stream resolution."""

from .exceptions import (
    AuthRequiredError,
    ContentNotFoundError,
    InvalidIdError,
    StreamUnavailableError,
    UpstreamError,
    YTMusicProxyError,
)
from .ytmusic import SEARCH_CATEGORIES, StreamInfo, YTMusicService, validate_id

__all__ = [
    "AuthRequiredError",
    "ContentNotFoundError",
    "InvalidIdError",
    "StreamUnavailableError",
    "UpstreamError",
    "YTMusicProxyError",
    "SEARCH_CATEGORIES",
    "StreamInfo",
    "YTMusicService",
    "validate_id",
]
