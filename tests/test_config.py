"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest

from seedwise import config
from seedwise.config import Config, ConfigError, SearchConfig, load_config

FULL_CONFIG = """\
global:
  loglevel: debug
  notification_urls:
    - json://localhost:8000/hook
  concurrency: 4
search:
  include_episodes: true
  exclude_older: 2 weeks
  exclude_recent_search: 1 day
downloader:
  client: deluge+http://:secret@localhost:8112/json
  label: seedwise
  skip_recheck: true
database:
  url: sqlite+aiosqlite:///data/seedwise.db
"""


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(content)
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_full_config(self, tmp_path: Path) -> None:
        """Should decode every section, including the ``global`` key."""
        cfg = load_config(write_config(tmp_path, FULL_CONFIG))

        assert cfg.global_config.loglevel == "debug"
        assert cfg.global_config.concurrency == 4
        assert cfg.global_config.notification_urls == ["json://localhost:8000/hook"]
        assert cfg.search.include_episodes is True
        assert cfg.search.include_non_videos is False
        assert cfg.search.exclude_older_ms == 14 * 86_400_000
        assert cfg.search.exclude_recent_search_ms == 86_400_000
        assert cfg.downloader.label == "seedwise"
        assert cfg.downloader.skip_recheck is True
        assert cfg.database.url == "sqlite+aiosqlite:///data/seedwise.db"

    def test_defaults(self, tmp_path: Path) -> None:
        """Should fill omitted sections with defaults."""
        cfg = load_config(write_config(tmp_path, "search:\n  include_non_videos: true\n"))

        assert cfg.global_config.loglevel == "info"
        assert cfg.search.include_non_videos is True
        assert cfg.search.exclude_older_ms is None
        assert cfg.downloader.label == "cross-seed"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_duration(self, tmp_path: Path) -> None:
        """Should reject durations humanfriendly cannot parse."""
        path = write_config(tmp_path, "search:\n  exclude_older: forever\n")

        with pytest.raises(ConfigError, match="exclude_older"):
            load_config(path)

    def test_wrong_type(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "global:\n  concurrency: many\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_zero_concurrency(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "global:\n  concurrency: 0\n")

        with pytest.raises(ConfigError, match="concurrency"):
            load_config(path)

    def test_downloader_without_scheme(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "downloader:\n  client: //localhost:8112/json\n")

        with pytest.raises(ConfigError, match="scheme"):
            load_config(path)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "search: [unclosed\n")

        with pytest.raises(ConfigError, match="Malformed"):
            load_config(path)


class TestSearchConfig:
    """Tests for SearchConfig duration handling."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1 day", 86_400_000), ("3d", 259_200_000), ("90 minutes", 5_400_000)],
    )
    def test_durations(self, value: str, expected: int) -> None:
        assert SearchConfig(exclude_recent_search=value).exclude_recent_search_ms == expected

    def test_invalid_duration_on_construction(self) -> None:
        with pytest.raises(ConfigError):
            SearchConfig(exclude_older="someday")


class TestInitConfig:
    """Tests for init_config."""

    def test_replaces_global(self, tmp_path: Path) -> None:
        with patch.object(config, "cfg", Config()):
            loaded = config.init_config(write_config(tmp_path, FULL_CONFIG))
            assert config.cfg is loaded
            assert config.cfg.downloader.label == "seedwise"
