"""
Configuration management for ytm-proxy
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

SUPPORTED_ENGINES = ("mpv",)


@dataclass
class ServerConfig:
    """Configuration for the HTTP proxy server."""

    host: str = "127.0.0.1"
    port: int = 5000
    public_url: Optional[str] = None  # Externally reachable base URL, if behind a proxy
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5000"]
    )

    @property
    def base_url(self) -> str:
        if self.public_url:
            return self.public_url.rstrip("/")
        return f"http://{self.host}:{self.port}"


@dataclass
class YTMusicConfig:
    """Configuration for the YouTube Music client."""

    auth_file: Optional[str] = None  # ytmusicapi browser/oauth JSON file
    cookies: Optional[str] = None  # Raw cookie header, used by yt-dlp for streams
    language: str = "en"
    location: str = "US"


@dataclass
class PlayerConfig:
    """Configuration for the session audio player."""

    engine: str = "mpv"
    mpv_path: str = "mpv"
    volume: float = 1.0  # 0.0 - 1.0
    auto_skip: bool = False  # Advance the playlist after a playback error
    error_recovery_seconds: float = 3.0
    start_timeout_seconds: float = 10.0

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.engine not in SUPPORTED_ENGINES:
            raise ValueError(
                f"Invalid player engine: {self.engine!r}. "
                f"Valid engines are: {SUPPORTED_ENGINES}"
            )
        if self.start_timeout_seconds <= 0:
            raise ValueError("start_timeout_seconds must be positive")
        if self.error_recovery_seconds < 0:
            raise ValueError("error_recovery_seconds must not be negative")


@dataclass
class SessionConfig:
    """Configuration for persisted session settings."""

    storage_path: Optional[str] = None  # Default: <data dir>/session.db
    autosave_seconds: float = 30.0
    page_url: Optional[str] = None  # Default: server base URL


@dataclass
class NotificationsConfig:
    """Configuration for user-facing notifications."""

    default_duration_ms: int = 5000
    desktop: bool = False  # Mirror notifications to notify-send


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/ytm-proxy/ytm-proxy.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = True  # Also output to stderr


@dataclass
class Config:
    """Main configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    ytmusic: YTMusicConfig = field(default_factory=YTMusicConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "ytm-proxy"
    return Path.home() / ".config" / "ytm-proxy"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "ytm-proxy"
    return Path.home() / ".local" / "share" / "ytm-proxy"


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for the configuration file in the following order:
    1. YTM_PROXY_CONFIG environment variable
    2. config.toml in the current working directory
    3. XDG_CONFIG_HOME/ytm-proxy (or ~/.config/ytm-proxy)
    """
    env_path = os.environ.get("YTM_PROXY_CONFIG")
    if env_path:
        return Path(env_path).expanduser()

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# ytm-proxy Configuration

[server]
# Interface and port the HTTP proxy binds to
host = "127.0.0.1"
port = 5000

# Externally reachable URL (defaults to http://host:port)
# public_url = "https://music.example.com"

# Origins allowed to call the API from a browser
allowed_origins = ["http://localhost:5000"]

[ytmusic]
# ytmusicapi auth file (browser.json / oauth.json) for library access
# auth_file = "~/.config/ytm-proxy/browser.json"

# Cookie header passed to yt-dlp when resolving streams
# cookies = "SID=...; HSID=..."

language = "en"
location = "US"

[player]
# Audio engine used for session playback
engine = "mpv"
mpv_path = "mpv"

# Initial volume (0.0 - 1.0)
volume = 1.0

# Skip to the next playlist entry after a playback error
auto_skip = false
error_recovery_seconds = 3.0

# Seconds to wait for a stream to start before reporting an error
start_timeout_seconds = 10.0

[session]
# SQLite file for persisted settings (default: ~/.local/share/ytm-proxy/session.db)
# storage_path = "/path/to/session.db"

# Periodic settings save interval in seconds
autosave_seconds = 30.0

[notifications]
default_duration_ms = 5000

# Mirror notifications to the desktop via notify-send
desktop = false

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/ytm-proxy/ytm-proxy.log)
# log_file = "/path/to/custom/ytm-proxy.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to console
console_output = true
""".strip()


def write_default_config(config_path: Path) -> None:
    """Write the default configuration template, creating parent directories."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(create_default_config())


def _apply_env_overrides(config: Config) -> None:
    """Environment variables win over TOML values."""
    host = os.environ.get("YTM_PROXY_HOST")
    if host:
        config.server.host = host

    port = os.environ.get("YTM_PROXY_PORT")
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            logger.warning(f"Ignoring invalid YTM_PROXY_PORT: {port!r}")

    cookies = os.environ.get("YTM_PROXY_COOKIES")
    if cookies:
        config.ytmusic.cookies = cookies

    level = os.environ.get("YTM_PROXY_LOG_LEVEL")
    if level:
        config.logging.level = level.upper()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, falling back to defaults.

    A missing file yields the defaults. An unreadable file is reported and
    also yields the defaults. Environment variables override TOML values:
    - YTM_PROXY_HOST / YTM_PROXY_PORT
    - YTM_PROXY_COOKIES
    - YTM_PROXY_LOG_LEVEL
    """
    # Load .env file from config directory if it exists
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()
    config = Config()

    if not config_path.exists():
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to read config {config_path}: {e}. Using defaults.")
        _apply_env_overrides(config)
        return config

    if "server" in toml_data:
        server_data = toml_data["server"]
        config.server = ServerConfig(
            host=server_data.get("host", config.server.host),
            port=int(server_data.get("port", config.server.port)),
            public_url=server_data.get("public_url"),
            allowed_origins=server_data.get(
                "allowed_origins", config.server.allowed_origins
            ),
        )

    if "ytmusic" in toml_data:
        ytmusic_data = toml_data["ytmusic"]
        auth_file = ytmusic_data.get("auth_file")
        config.ytmusic = YTMusicConfig(
            auth_file=str(Path(auth_file).expanduser()) if auth_file else None,
            cookies=ytmusic_data.get("cookies"),
            language=ytmusic_data.get("language", config.ytmusic.language),
            location=ytmusic_data.get("location", config.ytmusic.location),
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            engine=player_data.get("engine", config.player.engine),
            mpv_path=player_data.get("mpv_path", config.player.mpv_path),
            volume=float(player_data.get("volume", config.player.volume)),
            auto_skip=player_data.get("auto_skip", config.player.auto_skip),
            error_recovery_seconds=float(
                player_data.get(
                    "error_recovery_seconds", config.player.error_recovery_seconds
                )
            ),
            start_timeout_seconds=float(
                player_data.get(
                    "start_timeout_seconds", config.player.start_timeout_seconds
                )
            ),
        )
        try:
            config.player.validate()
        except ValueError as e:
            logger.warning(f"Invalid player configuration: {e}. Using defaults.")
            config.player = PlayerConfig()

    if "session" in toml_data:
        session_data = toml_data["session"]
        storage_path = session_data.get("storage_path")
        config.session = SessionConfig(
            storage_path=str(Path(storage_path).expanduser()) if storage_path else None,
            autosave_seconds=float(
                session_data.get("autosave_seconds", config.session.autosave_seconds)
            ),
            page_url=session_data.get("page_url"),
        )

    if "notifications" in toml_data:
        notifications_data = toml_data["notifications"]
        config.notifications = NotificationsConfig(
            default_duration_ms=int(
                notifications_data.get(
                    "default_duration_ms", config.notifications.default_duration_ms
                )
            ),
            desktop=notifications_data.get("desktop", config.notifications.desktop),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level),
            log_file=logging_data.get("log_file"),
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    _apply_env_overrides(config)
    return config
