"""Configuration loading for seedwise.

The configuration file is YAML, decoded into msgspec structs. After
``init_config()`` the parsed configuration is available as ``config.cfg``.
"""

from pathlib import Path
from urllib.parse import urlparse

import msgspec
from humanfriendly import InvalidTimespan, parse_timespan


class ConfigError(ValueError):
    """Raised when the configuration is invalid.

    Configuration errors are fatal and surface before any pipeline work.
    """


def _parse_duration_ms(value: str | None, field_name: str) -> int | None:
    """Parse a human readable duration ("2 weeks", "3d") into milliseconds."""
    if value is None:
        return None
    try:
        return int(parse_timespan(value) * 1000)
    except InvalidTimespan as e:
        raise ConfigError(f"Invalid duration for {field_name}: {value!r}") from e


class GlobalConfig(msgspec.Struct, kw_only=True):
    """Global application settings."""

    loglevel: str = "info"
    notification_urls: list[str] = msgspec.field(default_factory=list)
    # Maximum number of concurrent timestamp checks
    concurrency: int = 8

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigError("concurrency must be at least 1")


class SearchConfig(msgspec.Struct, kw_only=True):
    """Settings deciding which searchees are searched."""

    include_episodes: bool = False
    include_single_episodes: bool = False
    include_non_videos: bool = False
    exclude_older: str | None = None
    exclude_recent_search: str | None = None

    def __post_init__(self) -> None:
        # Validate eagerly so a typo fails at startup
        _parse_duration_ms(self.exclude_older, "exclude_older")
        _parse_duration_ms(self.exclude_recent_search, "exclude_recent_search")

    @property
    def exclude_older_ms(self) -> int | None:
        return _parse_duration_ms(self.exclude_older, "exclude_older")

    @property
    def exclude_recent_search_ms(self) -> int | None:
        return _parse_duration_ms(self.exclude_recent_search, "exclude_recent_search")


class DownloaderConfig(msgspec.Struct, kw_only=True):
    """Download client settings.

    Attributes:
        client: Client URL, e.g. ``deluge+http://:password@localhost:8112/json``.
        label: Label applied to injected torrents. Empty disables labelling.
        skip_recheck: Add torrents in seed mode without rechecking pieces.
    """

    client: str = ""
    label: str = "cross-seed"
    skip_recheck: bool = False

    def __post_init__(self) -> None:
        if self.client and not urlparse(self.client).scheme:
            raise ConfigError(f"Downloader URL must have a scheme: {self.client}")


class DatabaseConfig(msgspec.Struct, kw_only=True):
    url: str = "sqlite+aiosqlite:///seedwise.db"


class Config(msgspec.Struct, kw_only=True):
    """Top level configuration."""

    global_config: GlobalConfig = msgspec.field(
        default_factory=GlobalConfig, name="global"
    )
    search: SearchConfig = msgspec.field(default_factory=SearchConfig)
    downloader: DownloaderConfig = msgspec.field(default_factory=DownloaderConfig)
    database: DatabaseConfig = msgspec.field(default_factory=DatabaseConfig)


def load_config(path: str | Path) -> Config:
    """Load and validate a YAML configuration file.

    Args:
        path: Path to the configuration file.

    Returns:
        Config: Parsed configuration.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    config_path = Path(path)
    try:
        content = config_path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e

    try:
        return msgspec.yaml.decode(content, type=Config)
    except ConfigError:
        raise
    except msgspec.ValidationError as e:
        # __post_init__ errors are wrapped by msgspec
        raise ConfigError(f"Invalid configuration: {e}") from e
    except msgspec.DecodeError as e:
        raise ConfigError(f"Malformed configuration file: {e}") from e


# Global configuration instance, defaults until init_config() is called
cfg: Config = Config()


def init_config(path: str | Path) -> Config:
    """Load the configuration file into the global ``cfg``.

    Args:
        path: Path to the configuration file.

    Returns:
        Config: The loaded configuration.
    """
    global cfg
    cfg = load_config(path)
    return cfg
