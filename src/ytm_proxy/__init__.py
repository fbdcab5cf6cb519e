"""ytm-proxy: a YouTube Music proxy with a server-side playback session."""

__version__ = "0.1.0"
