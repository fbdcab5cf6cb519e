"""Playback domain - audio engines and the playback coordinator.

This domain handles:
- The audio handle contract and its MPV implementation (JSON IPC)
- Media key integration
- Transport control, playlist position and error recovery
"""

# Engines
from .engine import AudioEngine, AudioHandle, PlaybackStartError
from .mpv import MpvAudioHandle, MpvEngine, check_mpv_available

# Media keys
from .media_session import MediaMetadata, MediaSession

# Coordinator
from .coordinator import PlaybackEvents, PlaybackManager, PlaybackState

__all__ = [
    # Engines
    "AudioEngine",
    "AudioHandle",
    "PlaybackStartError",
    "MpvAudioHandle",
    "MpvEngine",
    "check_mpv_available",
    # Media keys
    "MediaMetadata",
    "MediaSession",
    # Coordinator
    "PlaybackEvents",
    "PlaybackManager",
    "PlaybackState",
]
