"""Proxy-layer exceptions. Each carries the HTTP status it maps to."""


class YTMusicProxyError(Exception):
    """Base exception for YouTube Music operations."""

    status_code = 500


class InvalidIdError(YTMusicProxyError):
    """Raised when an ID, query or category is malformed."""

    status_code = 400


class ContentNotFoundError(YTMusicProxyError):
    """Raised when the song, album, artist or playlist does not exist."""

    status_code = 404


class StreamUnavailableError(YTMusicProxyError):
    """Raised when a video exists but has no playable audio format."""

    status_code = 404


class UpstreamError(YTMusicProxyError):
    """Raised when YouTube Music or the stream host fails."""

    status_code = 502


class AuthRequiredError(YTMusicProxyError):
    """Raised when an endpoint needs an authenticated YouTube Music session."""

    status_code = 401
