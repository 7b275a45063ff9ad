"""Tests for the timestamp gate against a real SQLite store."""

from unittest.mock import patch

import pytest

from seedwise.config import SearchConfig
from seedwise.core.prefilter import filter_timestamps
from seedwise.db import SeedwiseDatabase

from .conftest import make_searchee

pytestmark = pytest.mark.anyio

NOW = 1_700_000_000_000
DAY = 86_400_000
NAME = "Movie.Name.2019.1080p.BluRay.x264-GRP"


@pytest.fixture
def searchee():
    return make_searchee(NAME, files=[f"{NAME}.mkv"])


@pytest.fixture(autouse=True)
def frozen_now():
    """Pin the gate's clock."""
    with patch("seedwise.core.prefilter.now_ms", return_value=NOW):
        yield


async def add_indexer(database: SeedwiseDatabase, url: str, active: bool = True) -> int:
    return await database.upsert_indexer(url, name=url, active=active)


class TestNeverSearched:
    """Searchees without history are always eligible."""

    async def test_unknown_searchee_eligible(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should be eligible with both windows configured."""
        await add_indexer(database, "https://indexer.one")
        settings = SearchConfig(exclude_older="1 day", exclude_recent_search="1 day")

        assert await filter_timestamps(searchee, database, settings) is True

    async def test_no_enabled_indexers_eligible(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should be eligible when no indexer is enabled."""
        settings = SearchConfig(exclude_older="1 day", exclude_recent_search="1 day")

        assert await filter_timestamps(searchee, database, settings) is True


class TestExcludeOlder:
    """Tests for the exclude_older window."""

    async def test_boundary_is_eligible(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should keep a searchee first searched exactly exclude_older ago."""
        indexer_id = await add_indexer(database, "https://indexer.one")
        await database.record_search(NAME, indexer_id, NOW - DAY)

        assert (
            await filter_timestamps(searchee, database, SearchConfig(exclude_older="1 day"))
            is True
        )

    async def test_older_is_excluded(self, database: SeedwiseDatabase, searchee) -> None:
        """Should exclude a searchee first searched before the window."""
        indexer_id = await add_indexer(database, "https://indexer.one")
        await database.record_search(NAME, indexer_id, NOW - DAY - 1)

        assert (
            await filter_timestamps(searchee, database, SearchConfig(exclude_older="1 day"))
            is False
        )

    async def test_earliest_indexer_counts(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should use the earliest first search across enabled indexers."""
        one = await add_indexer(database, "https://indexer.one")
        two = await add_indexer(database, "https://indexer.two")
        await database.record_search(NAME, one, NOW - 1000)
        await database.record_search(NAME, two, NOW - 3 * DAY)

        assert (
            await filter_timestamps(searchee, database, SearchConfig(exclude_older="2 days"))
            is False
        )

    async def test_disabled_indexer_ignored(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should ignore history on indexers that are not enabled."""
        one = await add_indexer(database, "https://indexer.one")
        two = await add_indexer(database, "https://indexer.two")
        await database.record_search(NAME, one, NOW - 1000)
        await database.record_search(NAME, two, NOW - 3 * DAY)
        await database.upsert_indexer("https://indexer.two", active=False)

        assert (
            await filter_timestamps(searchee, database, SearchConfig(exclude_older="2 days"))
            is True
        )

    async def test_not_configured(self, database: SeedwiseDatabase, searchee) -> None:
        """Should not exclude old searchees without exclude_older."""
        indexer_id = await add_indexer(database, "https://indexer.one")
        await database.record_search(NAME, indexer_id, NOW - 365 * DAY)

        assert await filter_timestamps(searchee, database, SearchConfig()) is True


class TestExcludeRecentSearch:
    """Tests for the exclude_recent_search window."""

    async def test_recent_is_excluded(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should exclude a searchee searched within the window."""
        indexer_id = await add_indexer(database, "https://indexer.one")
        await database.record_search(NAME, indexer_id, NOW - 1000)

        assert (
            await filter_timestamps(
                searchee, database, SearchConfig(exclude_recent_search="1 day")
            )
            is False
        )

    async def test_outside_window_is_eligible(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should keep a searchee last searched before the window."""
        indexer_id = await add_indexer(database, "https://indexer.one")
        await database.record_search(NAME, indexer_id, NOW - 2 * DAY)

        assert (
            await filter_timestamps(
                searchee, database, SearchConfig(exclude_recent_search="1 day")
            )
            is True
        )

    async def test_latest_indexer_counts(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should use the latest last search across enabled indexers."""
        one = await add_indexer(database, "https://indexer.one")
        two = await add_indexer(database, "https://indexer.two")
        await database.record_search(NAME, one, NOW - 5 * DAY)
        await database.record_search(NAME, two, NOW - 1000)

        assert (
            await filter_timestamps(
                searchee, database, SearchConfig(exclude_recent_search="1 day")
            )
            is False
        )

    async def test_rate_limited_indexer_ignored(
        self, database: SeedwiseDatabase, searchee
    ) -> None:
        """Should ignore history on snoozed indexers."""
        one = await add_indexer(database, "https://indexer.one")
        two = await add_indexer(database, "https://indexer.two")
        await database.record_search(NAME, one, NOW - 5 * DAY)
        await database.record_search(NAME, two, NOW - 1000)
        # Far past any real clock the store compares against
        await database.set_indexer_retry_after(two, 2**62)

        assert (
            await filter_timestamps(
                searchee, database, SearchConfig(exclude_recent_search="1 day")
            )
            is True
        )
