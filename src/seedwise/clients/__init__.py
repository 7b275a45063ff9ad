"""Torrent client implementations for seedwise."""

from .client_common import (
    ClientAuthenticationError,
    ClientConnectionError,
    ClientReply,
    TorrentClient,
    TorrentState,
    parse_client_url,
)
from .deluge import DelugeClient, DelugeSession
from .registry import (
    create_torrent_client,
    get_torrent_client,
    init_torrent_client,
)

__all__ = [
    "ClientAuthenticationError",
    "ClientConnectionError",
    "ClientReply",
    "DelugeClient",
    "DelugeSession",
    "TorrentClient",
    "TorrentState",
    "create_torrent_client",
    "get_torrent_client",
    "init_torrent_client",
    "parse_client_url",
]
