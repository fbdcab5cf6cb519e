from fastapi import Depends

from ytm_proxy.context import AppContext, get_app_context
from ytm_proxy.core.config import Config
from ytm_proxy.services.ytmusic import YTMusicService


def get_context() -> AppContext:
    """FastAPI dependency for the session services."""
    return get_app_context()


def get_config(context: AppContext = Depends(get_context)) -> Config:
    """FastAPI dependency for configuration."""
    return context.config


def get_ytmusic(context: AppContext = Depends(get_context)) -> YTMusicService:
    """FastAPI dependency for the YouTube Music service."""
    return context.ytmusic
