"""
Common torrent client functionality.

Provides the base class, reply types and URL parsing shared by all torrent
client implementations.
"""

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any
from urllib.parse import unquote, urlparse

import msgspec


class ClientConnectionError(Exception):
    """Raised when the torrent client cannot be reached at all."""


class ClientAuthenticationError(Exception):
    """Raised when the torrent client rejects our credentials."""


class TorrentState(StrEnum):
    """Torrent download state enumeration."""

    UNKNOWN = "unknown"
    DOWNLOADING = "downloading"
    SEEDING = "seeding"
    PAUSED = "paused"
    COMPLETED = "completed"
    CHECKING = "checking"
    ERROR = "error"
    QUEUED = "queued"
    MOVING = "moving"
    ALLOCATING = "allocating"
    METADATA_DOWNLOADING = "metadata_downloading"


class ClientReply(msgspec.Struct, frozen=True):
    """Application level reply from a torrent client.

    Error replies are data, not exceptions: callers interpret them.

    Attributes:
        result: Result payload of a successful call.
        error: Error message reported by the client, None on success.
    """

    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error or ""


class TorrentClient(ABC):
    """Abstract base class for torrent clients.

    The injector and label manager only depend on this interface.
    """

    # Substrings of error messages with a special meaning
    already_exists_markers: tuple[str, ...] = ("already",)
    unknown_label_markers: tuple[str, ...] = ("Unknown Label",)

    def __init__(self, label: str = "", skip_recheck: bool = False) -> None:
        self.label = label
        self.skip_recheck = skip_recheck

    # region Abstract Public

    @abstractmethod
    async def validate_config(self) -> None:
        """Validate connection settings and authenticate.

        Raises:
            ConfigError: If the connection settings are malformed.
            ClientConnectionError: If the client cannot be reached.
            ClientAuthenticationError: If the credentials are rejected.
        """

    @abstractmethod
    async def get_torrent_state(self, torrent_hash: str) -> TorrentState | None:
        """Get the state of a torrent.

        Args:
            torrent_hash (str): Torrent hash.

        Returns:
            TorrentState | None: Current state, or None if the client does
                not know the torrent.
        """

    @abstractmethod
    async def add_torrent(
        self, filename: str, torrent_data: bytes, download_dir: str | None = None
    ) -> ClientReply:
        """Submit a torrent file to the client.

        Args:
            filename (str): File name to submit the torrent under.
            torrent_data (bytes): Encoded torrent.
            download_dir (str | None): Download location override.

        Returns:
            ClientReply: The client's reply, result truthy when added.
        """

    @abstractmethod
    async def label_supported(self) -> bool:
        """Check whether the client can label torrents."""

    @abstractmethod
    async def set_torrent_label(self, torrent_hash: str, label: str) -> ClientReply:
        """Apply a label to a torrent."""

    @abstractmethod
    async def add_label(self, label: str) -> ClientReply:
        """Create a label on the client."""

    async def close(self) -> None:
        """Release network resources."""

    # endregion

    def is_already_exists(self, reply: ClientReply) -> bool:
        return not reply.ok and any(
            marker in reply.message for marker in self.already_exists_markers
        )

    def is_unknown_label(self, reply: ClientReply) -> bool:
        return not reply.ok and any(
            marker in reply.message for marker in self.unknown_label_markers
        )


class TorrentClientConfig(msgspec.Struct):
    """Configuration for torrent client connection."""

    client: str
    url: str
    username: str | None = None
    password: str | None = None


def parse_client_url(url: str) -> TorrentClientConfig:
    """Parse torrent client URL and extract connection parameters.

    Supported URL formats:
    - deluge+http://:password@127.0.0.1:8112/json

    The part before ``+`` selects the client, the part after it is the
    transport scheme. Credentials are stripped from the returned URL.

    Args:
        url: The torrent client URL to parse

    Returns:
        TorrentClientConfig: Structured configuration object

    Raises:
        ValueError: If the URL is empty or has no scheme
    """
    if not url:
        raise ValueError("URL cannot be empty")

    parsed = urlparse(url)
    if not parsed.scheme:
        raise ValueError("URL must have a scheme")

    scheme = parsed.scheme.split("+")
    transport = scheme[-1] if len(scheme) > 1 else "http"

    netloc = parsed.hostname or ""
    if parsed.port:
        netloc = f"{netloc}:{parsed.port}"

    return TorrentClientConfig(
        client=scheme[0],
        url=f"{transport}://{netloc}{parsed.path}",
        username=unquote(parsed.username) if parsed.username else None,
        password=unquote(parsed.password) if parsed.password else None,
    )
