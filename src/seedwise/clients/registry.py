"""Torrent client registry and global instance management for seedwise."""

import anyio

from .. import config, logger
from .client_common import TorrentClient, parse_client_url
from .deluge import DelugeClient

# Torrent client factory mapping
TORRENT_CLIENT_MAPPING: dict[str, type[TorrentClient]] = {
    "deluge": DelugeClient,
}


def create_torrent_client(
    url: str, label: str = "", skip_recheck: bool = False
) -> TorrentClient:
    """Create a torrent client instance based on the URL scheme.

    Args:
        url: The torrent client URL.
        label: Label applied to injected torrents.
        skip_recheck: Add torrents without rechecking pieces.

    Returns:
        Configured torrent client instance.

    Raises:
        ValueError: If URL is empty, None, or client type is not supported.
        ConfigError: If the URL carries a username without a password.
    """
    if not url or not url.strip():
        raise ValueError("URL cannot be empty")

    client_type = parse_client_url(url).client
    if client_type not in TORRENT_CLIENT_MAPPING:
        raise ValueError(f"Unsupported torrent client type: {client_type}")

    logger.debug("Creating %s client for %s", client_type, logger.redact_url_password(url))
    return TORRENT_CLIENT_MAPPING[client_type](
        url, label=label, skip_recheck=skip_recheck
    )


# Global torrent client instance
_torrent_client_instance: TorrentClient | None = None
_torrent_client_lock = anyio.Lock()


async def init_torrent_client(url: str | None = None) -> TorrentClient:
    """Initialize and validate the global torrent client instance.

    Should be called once during application startup.

    Args:
        url: The torrent client URL, defaults to the configured one.

    Returns:
        The validated torrent client.

    Raises:
        RuntimeError: If already initialized.
    """
    global _torrent_client_instance
    async with _torrent_client_lock:
        if _torrent_client_instance is not None:
            raise RuntimeError("Torrent client already initialized.")

        downloader = config.cfg.downloader
        client = create_torrent_client(
            url or downloader.client,
            label=downloader.label,
            skip_recheck=downloader.skip_recheck,
        )
        await client.validate_config()
        _torrent_client_instance = client
        return client


def get_torrent_client() -> TorrentClient:
    """Get global torrent client instance.

    Must be called after init_torrent_client() has been invoked.

    Returns:
        Torrent client instance.

    Raises:
        RuntimeError: If torrent client has not been initialized.
    """
    if _torrent_client_instance is None:
        raise RuntimeError(
            "Torrent client not initialized. Call init_torrent_client() first."
        )
    return _torrent_client_instance
