"""Torrent injection logic for seedwise."""

from .. import logger
from ..clients import TorrentClient, TorrentState
from .labels import LabelManager
from .models import InjectionResult, Metafile, Searchee

TORRENT_FILE_SUFFIX = ".seedwise.torrent"


class TorrentInjector:
    """Injects matched torrents into the client next to their source data.

    Args:
        torrent_client: TorrentClient instance for injection operations.
        label_manager: Optional LabelManager. Defaults to one applying the
            client's configured label.
    """

    def __init__(
        self,
        torrent_client: TorrentClient,
        label_manager: LabelManager | None = None,
    ) -> None:
        self.torrent_client = torrent_client
        self.label_manager = label_manager or LabelManager(
            torrent_client, torrent_client.label
        )

    async def check_source_complete(self, searchee: Searchee) -> bool:
        """Check that the searchee's own torrent is fully downloaded.

        Searchees without an infohash cannot be checked and pass.

        Args:
            searchee: Source of the data the new torrent will reuse.

        Returns:
            bool: False if the source is missing from the client or not
                seeding.
        """
        if not searchee.info_hash:
            return True

        state = await self.torrent_client.get_torrent_state(searchee.info_hash)
        if state is None:
            logger.debug(
                "Source torrent %s (%s) not found in client",
                searchee.name,
                searchee.info_hash,
            )
            return False
        if state is not TorrentState.SEEDING:
            logger.debug(
                "Source torrent %s is not seeding (state=%s)", searchee.name, state
            )
            return False
        return True

    async def inject(
        self,
        metafile: Metafile,
        searchee: Searchee,
        download_dir: str | None = None,
    ) -> InjectionResult:
        """Inject a matched torrent into the client.

        Args:
            metafile: Torrent found on another tracker.
            searchee: Local torrent whose data the new torrent reuses.
            download_dir: Download location override.

        Returns:
            InjectionResult: Outcome of the injection.
        """
        if not await self.check_source_complete(searchee):
            return InjectionResult.TORRENT_NOT_COMPLETE

        filename = f"{metafile.name}{TORRENT_FILE_SUFFIX}"
        logger.debug("Attempting to inject torrent: %s", filename)
        reply = await self.torrent_client.add_torrent(
            filename, metafile.encoded, download_dir
        )

        if reply.ok and reply.result:
            await self._apply_label(metafile.info_hash)
            return InjectionResult.SUCCESS

        if self.torrent_client.is_already_exists(reply):
            return InjectionResult.ALREADY_EXISTS

        logger.debug("Injection of %s failed: %s", metafile.name, reply.message)
        return InjectionResult.FAILURE

    async def _apply_label(self, torrent_hash: str) -> None:
        # Labelling never changes the injection outcome
        try:
            await self.label_manager.ensure_label(torrent_hash)
        except Exception as e:
            logger.warning("Failed to label %s: %s", torrent_hash, e)
