"""Core processing orchestrator for seedwise."""

from typing import TYPE_CHECKING

import anyio

from .. import config, logger
from .injector import TorrentInjector
from .models import InjectionResult, Metafile, ProcessorStats, Searchee
from .prefilter import filter_all_by_content, filter_dupes, filter_timestamps

if TYPE_CHECKING:
    from ..clients import TorrentClient
    from ..db import SeedwiseDatabase
    from ..notifier import Notifier


class SeedwiseCore:
    """Orchestrator for searchee filtering and cross-seed injection."""

    def __init__(
        self,
        torrent_client: "TorrentClient",
        database: "SeedwiseDatabase",
        injector: TorrentInjector,
        notifier: "Notifier | None" = None,
    ) -> None:
        """Initialize the processor.

        Args:
            torrent_client: TorrentClient instance for client operations.
            database: SeedwiseDatabase instance holding search history.
            injector: TorrentInjector instance for injection operations.
            notifier: Optional Notifier instance for push notifications.
        """
        self.torrent_client = torrent_client
        self.database = database
        self.injector = injector
        self.notifier = notifier
        self.stats = ProcessorStats()

    async def filter_searchees(self, searchees: list[Searchee]) -> list[Searchee]:
        """Select the searchees worth searching.

        Runs the content filter, the duplicate resolver and the timestamp
        gate in that order. Timestamp checks run concurrently; names are
        unique after deduplication so no two checks share a searchee.

        Args:
            searchees: Local inventory.

        Returns:
            list[Searchee]: Eligible searchees in input order.
        """
        self.stats.searchees += len(searchees)
        included = filter_dupes(filter_all_by_content(searchees))
        self.stats.included += len(included)

        eligible_flags = [False] * len(included)
        limiter = anyio.CapacityLimiter(config.cfg.global_config.concurrency)

        async def check(index: int, searchee: Searchee) -> None:
            async with limiter:
                eligible_flags[index] = await filter_timestamps(searchee, self.database)

        async with anyio.create_task_group() as tg:
            for index, searchee in enumerate(included):
                tg.start_soon(check, index, searchee)

        eligible = [
            searchee
            for searchee, is_eligible in zip(included, eligible_flags, strict=True)
            if is_eligible
        ]
        self.stats.eligible += len(eligible)
        logger.info(
            "Selected %d of %d torrents for searching", len(eligible), len(searchees)
        )
        return eligible

    async def record_search(
        self,
        searchee: Searchee,
        indexer_ids: list[int],
        searched_at: int | None = None,
    ) -> None:
        """Persist that a searchee was searched on some indexers."""
        for indexer_id in indexer_ids:
            await self.database.record_search(searchee.name, indexer_id, searched_at)

    async def inject(
        self,
        metafile: Metafile,
        searchee: Searchee,
        download_dir: str | None = None,
    ) -> InjectionResult:
        """Inject a match and account for the outcome.

        Client faults (connection or authentication errors) propagate.

        Args:
            metafile: Torrent found on another tracker.
            searchee: Local torrent the match was found for.
            download_dir: Download location override.

        Returns:
            InjectionResult: Outcome of the injection.
        """
        result = await self.injector.inject(metafile, searchee, download_dir)

        if result == InjectionResult.SUCCESS:
            self.stats.injected += 1
            logger.success("Injected %s (%s)", metafile.name, metafile.info_hash)
            if self.notifier:
                await self.notifier.send_inject_success(
                    metafile.name, metafile.info_hash
                )
        elif result == InjectionResult.ALREADY_EXISTS:
            self.stats.already_exists += 1
            logger.info("%s already exists in client", metafile.name)
        elif result == InjectionResult.TORRENT_NOT_COMPLETE:
            self.stats.not_complete += 1
            logger.info(
                "Skipped %s: source torrent %s is not complete",
                metafile.name,
                searchee.name,
            )
        else:
            self.stats.failed += 1
            logger.error("Failed to inject %s", metafile.name)
            if self.notifier:
                await self.notifier.send_inject_failure(
                    metafile.name, "client rejected the torrent"
                )

        return result

    async def log_summary(self) -> None:
        """Log run statistics and send a summary notification."""
        logger.info(
            "Searchees: %d, included: %d, eligible: %d",
            self.stats.searchees,
            self.stats.included,
            self.stats.eligible,
        )
        logger.info(
            "Injected: %d, already present: %d, source incomplete: %d, failed: %d",
            self.stats.injected,
            self.stats.already_exists,
            self.stats.not_complete,
            self.stats.failed,
        )
        if self.notifier:
            await self.notifier.send_scan_summary(self.stats)
