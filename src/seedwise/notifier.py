"""Notification module for seedwise using Apprise."""

from typing import TYPE_CHECKING

import apprise

from . import logger

if TYPE_CHECKING:
    from .core import ProcessorStats


class Notifier:
    """Push notification handler using Apprise."""

    def __init__(self, urls: list[str]):
        """Initialize the notifier with Apprise URLs.

        Args:
            urls: List of Apprise notification URLs.

        Raises:
            ValueError: If any URL is invalid.
        """
        self.apprise = apprise.Apprise()

        for url in urls:
            if not self.apprise.add(url):
                raise ValueError(
                    f"Invalid notification URL: {logger.redact_url_password(url)}"
                )
            logger.debug("Added notification URL: %s", logger.redact_url_password(url))

        logger.info(
            "Notifier initialized with %d notification service(s)", len(self.apprise)
        )

    async def notify(
        self,
        title: str,
        body: str,
        notify_type: apprise.NotifyType = apprise.NotifyType.INFO,
    ) -> bool:
        """Send notification to all configured services.

        Returns:
            True if at least one notification was sent successfully.
        """
        try:
            result = await self.apprise.async_notify(
                title=title,
                body=body,
                notify_type=notify_type,
            )
            if result:
                logger.debug("Notification sent: %s", title)
            else:
                logger.warning("Failed to send notification: %s", title)
            return bool(result)
        except Exception as e:
            logger.error("Error sending notification: %s", e)
            return False

    async def send_inject_success(self, torrent_name: str, torrent_hash: str) -> bool:
        return await self.notify(
            title="seedwise - Torrent Injected",
            body=f"Injected: {torrent_name}\nHash: {torrent_hash}",
            notify_type=apprise.NotifyType.SUCCESS,
        )

    async def send_inject_failure(self, torrent_name: str, reason: str) -> bool:
        return await self.notify(
            title="seedwise - Injection Failed",
            body=f"Failed: {torrent_name}\nReason: {reason}",
            notify_type=apprise.NotifyType.FAILURE,
        )

    async def send_scan_summary(self, stats: "ProcessorStats") -> bool:
        """Send a summary of a finished run.

        Args:
            stats: Processing statistics of the run.

        Returns:
            True if notification was sent successfully.
        """
        return await self.notify(
            title="seedwise - Run Complete",
            body=(
                f"Searchees: {stats.searchees}\n"
                f"Eligible: {stats.eligible}\n"
                f"Injected: {stats.injected}\n"
                f"Failed: {stats.failed}"
            ),
            notify_type=apprise.NotifyType.INFO,
        )


# Global notifier instance
_notifier_instance: Notifier | None = None


def init_notifier(urls: list[str]) -> None:
    """Initialize global notifier instance.

    Raises:
        RuntimeError: If already initialized.
        ValueError: If any URL is invalid.
    """
    global _notifier_instance
    if _notifier_instance is not None:
        raise RuntimeError("Notifier already initialized.")

    _notifier_instance = Notifier(urls)


def get_notifier() -> Notifier:
    """Get global notifier instance.

    Raises:
        RuntimeError: If notifier has not been initialized.
    """
    if _notifier_instance is None:
        raise RuntimeError("Notifier not initialized. Call init_notifier() first.")
    return _notifier_instance
