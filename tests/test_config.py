"""Tests for configuration loading."""

import tomllib
from pathlib import Path

import pytest

from ytm_proxy.core.config import (
    Config,
    PlayerConfig,
    create_default_config,
    get_config_path,
    load_config,
    write_default_config,
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's real config and environment out of the tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in (
        "YTM_PROXY_CONFIG",
        "YTM_PROXY_HOST",
        "YTM_PROXY_PORT",
        "YTM_PROXY_COOKIES",
        "YTM_PROXY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "missing.toml")
    assert config == Config()
    assert config.server.base_url == "http://127.0.0.1:5000"


def test_default_template_is_valid_toml() -> None:
    data = tomllib.loads(create_default_config())
    assert data["server"]["port"] == 5000
    assert data["player"]["engine"] == "mpv"


def test_written_template_loads_as_defaults(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "config.toml"
    write_default_config(path)

    config = load_config(path)

    assert config.server == Config().server
    assert config.player == PlayerConfig()


def test_sections_override_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[server]
port = 8080
public_url = "https://music.example.com/"

[player]
volume = 0.5
auto_skip = true

[session]
autosave_seconds = 10

[notifications]
default_duration_ms = 1000
"""
    )

    config = load_config(path)

    assert config.server.port == 8080
    assert config.server.base_url == "https://music.example.com"
    assert config.player.volume == 0.5
    assert config.player.auto_skip is True
    assert config.session.autosave_seconds == 10.0
    assert config.notifications.default_duration_ms == 1000


def test_invalid_toml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[server\nport = ")
    assert load_config(path) == Config()


def test_invalid_player_engine_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[player]\nengine = "vlc"\nvolume = 0.3\n')

    config = load_config(path)

    assert config.player == PlayerConfig()


def test_player_validate_rejects_bad_timeout() -> None:
    with pytest.raises(ValueError):
        PlayerConfig(start_timeout_seconds=0).validate()


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YTM_PROXY_HOST", "0.0.0.0")
    monkeypatch.setenv("YTM_PROXY_PORT", "9000")
    monkeypatch.setenv("YTM_PROXY_COOKIES", "SID=abc")
    monkeypatch.setenv("YTM_PROXY_LOG_LEVEL", "debug")

    config = load_config(tmp_path / "missing.toml")

    assert config.server.host == "0.0.0.0"
    assert config.server.port == 9000
    assert config.ytmusic.cookies == "SID=abc"
    assert config.logging.level == "DEBUG"


def test_invalid_port_env_is_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YTM_PROXY_PORT", "not-a-port")
    assert load_config(tmp_path / "missing.toml").server.port == 5000


def test_config_path_prefers_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YTM_PROXY_CONFIG", str(tmp_path / "custom.toml"))
    assert get_config_path() == tmp_path / "custom.toml"


def test_config_path_uses_working_directory(tmp_path: Path) -> None:
    (tmp_path / "config.toml").write_text("")
    assert get_config_path().resolve() == (tmp_path / "config.toml").resolve()


def test_config_path_defaults_to_xdg(tmp_path: Path) -> None:
    assert get_config_path() == tmp_path / "config" / "ytm-proxy" / "config.toml"
