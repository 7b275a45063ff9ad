"""Labelling of injected torrents."""

from .. import logger
from ..clients import TorrentClient


class LabelManager:
    """Applies the configured label to injected torrents.

    The label is created on the client on demand, the first time setting it
    fails because the client does not know it.

    Args:
        torrent_client: TorrentClient instance to label torrents on.
        label: Label to apply. Empty disables labelling.
    """

    def __init__(self, torrent_client: TorrentClient, label: str) -> None:
        self.torrent_client = torrent_client
        self.label = label

    async def ensure_label(self, torrent_hash: str) -> bool:
        """Apply the label to a torrent, creating the label if needed.

        Args:
            torrent_hash: Hash of the torrent to label.

        Returns:
            bool: True if labelling was attempted, False if the client does
                not support labels or no label is configured.
        """
        if not self.label or not await self.torrent_client.label_supported():
            return False

        reply = await self.torrent_client.set_torrent_label(torrent_hash, self.label)
        if self.torrent_client.is_unknown_label(reply):
            logger.debug("Creating label %s", self.label)
            add_reply = await self.torrent_client.add_label(self.label)
            if not add_reply.ok:
                logger.debug("Failed to create label %s: %s", self.label, add_reply.error)
            reply = await self.torrent_client.set_torrent_label(
                torrent_hash, self.label
            )

        if reply.ok:
            logger.debug("Labelled %s with %s", torrent_hash, self.label)
        else:
            logger.warning(
                "Failed to set label %s on %s: %s", self.label, torrent_hash, reply.error
            )
        return True
