"""Filters deciding which searchees are worth searching."""

from typing import TYPE_CHECKING

import msgspec
from humanfriendly import format_timespan

from .. import config, logger
from ..config import SearchConfig
from .models import NEVER_LAST_SEARCHED, PrefilterResult, Searchee
from .utils import (
    all_files_are_videos,
    format_timestamp,
    is_season_pack_episode,
    is_single_episode,
    now_ms,
)

if TYPE_CHECKING:
    from ..db import SeedwiseDatabase


class ExclusionTally(msgspec.Struct):
    """Exclusion count and its human readable reason."""

    reason: str
    count: int = 0


def _new_tallies() -> dict[PrefilterResult, ExclusionTally]:
    # Insertion order is the order summary lines are logged in
    return {
        PrefilterResult.EXCLUDED_SINGLE_EPISODE: ExclusionTally(
            reason="it is a single episode"
        ),
        PrefilterResult.EXCLUDED_SEASON_PACK_EPISODE: ExclusionTally(
            reason="it is a season pack episode"
        ),
        PrefilterResult.EXCLUDED_NON_VIDEOS: ExclusionTally(
            reason="not all files are videos"
        ),
    }


def _log_reason(name: str, reason: str) -> None:
    logger.debug("Torrent %s was not selected for searching because %s", name, reason)


def filter_by_content(
    searchee: Searchee, search_config: SearchConfig | None = None
) -> PrefilterResult:
    """Classify a searchee by its file shape and naming.

    Rules are applied in order, the first match wins.

    Args:
        searchee: Searchee to classify.
        search_config: Inclusion settings, defaults to ``config.cfg.search``.

    Returns:
        PrefilterResult: Inclusion or the exclusion category.
    """
    settings = search_config or config.cfg.search
    season_pack_episode = is_season_pack_episode(searchee)

    if (
        not settings.include_episodes
        and not settings.include_single_episodes
        and is_single_episode(searchee)
        and not season_pack_episode
    ):
        return PrefilterResult.EXCLUDED_SINGLE_EPISODE

    # Opting into single episodes does not opt into episodes extracted from packs
    if settings.include_single_episodes and season_pack_episode:
        return PrefilterResult.EXCLUDED_SEASON_PACK_EPISODE

    if not settings.include_non_videos and not all_files_are_videos(searchee.files):
        return PrefilterResult.EXCLUDED_NON_VIDEOS

    return PrefilterResult.INCLUDED


def filter_all_by_content(
    searchees: list[Searchee], search_config: SearchConfig | None = None
) -> list[Searchee]:
    """Keep the searchees passing the content filter.

    Logs every exclusion, then one summary line per exclusion category that
    excluded anything.

    Args:
        searchees: Searchees to filter.
        search_config: Inclusion settings, defaults to ``config.cfg.search``.

    Returns:
        list[Searchee]: Included searchees in input order.
    """
    included: list[Searchee] = []
    tallies = _new_tallies()

    for searchee in searchees:
        result = filter_by_content(searchee, search_config)
        if result is PrefilterResult.INCLUDED:
            included.append(searchee)
            continue
        tally = tallies[result]
        tally.count += 1
        _log_reason(searchee.name, tally.reason)

    for tally in tallies.values():
        if tally.count > 0:
            logger.info(
                "Excluded %d torrents with reason: %s", tally.count, tally.reason
            )

    return included


def filter_dupes(searchees: list[Searchee]) -> list[Searchee]:
    """Collapse searchees sharing a name.

    A searchee with an infohash supersedes one without, whatever the arrival
    order. Otherwise the first seen wins.

    Args:
        searchees: Searchees to deduplicate.

    Returns:
        list[Searchee]: One searchee per name, in first-seen name order.
    """
    by_name: dict[str, Searchee] = {}
    for searchee in searchees:
        existing = by_name.get(searchee.name)
        if existing is None or (searchee.info_hash and not existing.info_hash):
            by_name[searchee.name] = searchee

    filtered = list(by_name.values())
    num_dupes = len(searchees) - len(filtered)
    if num_dupes > 0:
        logger.debug("%d duplicates not selected for searching", num_dupes)
    return filtered


async def filter_timestamps(
    searchee: Searchee,
    database: "SeedwiseDatabase",
    search_config: SearchConfig | None = None,
) -> bool:
    """Check a searchee against the search history windows.

    Only the currently enabled indexers are taken into account. A searchee
    never searched on any of them is always eligible.

    Args:
        searchee: Searchee to check.
        database: Store holding the search timestamps.
        search_config: Window settings, defaults to ``config.cfg.search``.

    Returns:
        bool: True if the searchee should be searched.
    """
    settings = search_config or config.cfg.search
    exclude_older = settings.exclude_older_ms
    exclude_recent_search = settings.exclude_recent_search_ms

    enabled_indexers = await database.get_enabled_indexers()
    aggregate = await database.get_timestamp_aggregate(
        searchee.name, [indexer.id for indexer in enabled_indexers]
    )
    first_searched_any = aggregate.first_searched_any
    last_searched_all = aggregate.last_searched_all
    now = now_ms()

    if (
        exclude_older is not None
        and aggregate.ever_searched
        and first_searched_any < now - exclude_older
    ):
        _log_reason(
            searchee.name,
            f"its first search timestamp {format_timestamp(first_searched_any)} "
            f"is older than {format_timespan(exclude_older / 1000)} ago",
        )
        return False

    if (
        exclude_recent_search is not None
        and last_searched_all != NEVER_LAST_SEARCHED
        and last_searched_all > now - exclude_recent_search
    ):
        _log_reason(
            searchee.name,
            f"its last search timestamp {format_timestamp(last_searched_all)} "
            f"is newer than {format_timespan(exclude_recent_search / 1000)} ago",
        )
        return False

    return True
