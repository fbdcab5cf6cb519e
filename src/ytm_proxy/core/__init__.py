"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging setup (loguru)
- Event emitter and observable state container
- Durable key-value storage and the page location
"""

# Configuration
from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    write_default_config,
)

# Events and state
from .events import EventEmitter
from .state import STATE_CHANGED, StateChange, StateManager

# Storage and location
from .storage import KeyValueStore, MemoryStore, SqliteStore
from .location import URL_CHANGED, PageLocation

__all__ = [
    # Configuration
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "write_default_config",
    # Events and state
    "EventEmitter",
    "STATE_CHANGED",
    "StateChange",
    "StateManager",
    # Storage and location
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "URL_CHANGED",
    "PageLocation",
]
