"""Core global instance management for seedwise."""

import anyio

from .. import config, db
from ..clients import get_torrent_client
from ..notifier import get_notifier
from .injector import TorrentInjector
from .labels import LabelManager
from .processor import SeedwiseCore

# Global core instance
_core_instance: SeedwiseCore | None = None
_core_lock = anyio.Lock()


async def init_core() -> None:
    """Initialize global core instance.

    Assembles SeedwiseCore from global singletons.
    Should be called once during application startup.

    Raises:
        RuntimeError: If already initialized.
    """
    global _core_instance
    async with _core_lock:
        if _core_instance is not None:
            raise RuntimeError("Core already initialized.")

        torrent_client = get_torrent_client()
        label_manager = LabelManager(torrent_client, config.cfg.downloader.label)
        injector = TorrentInjector(torrent_client, label_manager)

        # Build notifier only when notification URLs are configured
        notifier = None
        if config.cfg.global_config.notification_urls:
            notifier = get_notifier()

        _core_instance = SeedwiseCore(
            torrent_client=torrent_client,
            database=db.get_database(),
            injector=injector,
            notifier=notifier,
        )


def get_core() -> SeedwiseCore:
    """Get global core instance.

    Must be called after init_core() has been invoked.

    Returns:
        SeedwiseCore: Core instance.

    Raises:
        RuntimeError: If core has not been initialized.
    """
    if _core_instance is None:
        raise RuntimeError("Core not initialized. Call init_core() first.")
    return _core_instance
