"""Data models for seedwise core processing."""

from enum import StrEnum
from typing import TYPE_CHECKING

import msgspec

if TYPE_CHECKING:
    from torf import Torrent

# "Never searched" sentinels used by the timestamp store
NEVER_FIRST_SEARCHED = 9223372036854775807
NEVER_LAST_SEARCHED = 0


class PrefilterResult(StrEnum):
    """Outcome of the content filter for a single searchee."""

    INCLUDED = "included"
    EXCLUDED_SINGLE_EPISODE = "excluded_single_episode"
    EXCLUDED_SEASON_PACK_EPISODE = "excluded_season_pack_episode"
    EXCLUDED_NON_VIDEOS = "excluded_non_videos"


class InjectionResult(StrEnum):
    """Outcome of injecting a torrent into the download client.

    These are normal outcomes, not faults.
    """

    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"
    TORRENT_NOT_COMPLETE = "torrent_not_complete"
    FAILURE = "failure"


class SearcheeFile(msgspec.Struct, frozen=True):
    """A file within a searchee."""

    name: str
    length: int


class Searchee(msgspec.Struct, frozen=True):
    """A locally present torrent considered for cross-seeding.

    Attributes:
        name: Torrent name, the identity key for deduplication.
        files: Files of the torrent, never empty.
        path: Filesystem location, used to detect season pack structure.
        info_hash: Set when the searchee is backed by client metadata.
    """

    name: str
    files: list[SearcheeFile]
    path: str | None = None
    info_hash: str | None = None

    def __post_init__(self) -> None:
        if not self.files:
            raise ValueError(f"Searchee {self.name!r} has no files")

    @classmethod
    def from_torrent(cls, torrent: "Torrent", path: str | None = None) -> "Searchee":
        """Build a searchee from a parsed torrent.

        Args:
            torrent: Parsed torrent metadata.
            path: Optional location of the torrent's data on disk.

        Returns:
            Searchee: The searchee, carrying the torrent's infohash.
        """
        files = [
            SearcheeFile(name="/".join(f.parts[1:]) or f.name, length=f.size)
            for f in torrent.files
        ]
        return cls(
            name=torrent.name,
            files=files,
            path=path,
            info_hash=torrent.infohash,
        )


class Metafile(msgspec.Struct, frozen=True):
    """Encoded torrent for a release to inject."""

    name: str
    info_hash: str
    encoded: bytes

    @classmethod
    def from_torrent(cls, torrent: "Torrent") -> "Metafile":
        return cls(name=torrent.name, info_hash=torrent.infohash, encoded=torrent.dump())


class TimestampAggregate(msgspec.Struct, frozen=True):
    """Search history of one searchee across the enabled indexers.

    Attributes:
        first_searched_any: Earliest first search in epoch milliseconds,
            ``NEVER_FIRST_SEARCHED`` if never searched.
        last_searched_all: Latest last search in epoch milliseconds,
            ``NEVER_LAST_SEARCHED`` if never searched.
    """

    first_searched_any: int = NEVER_FIRST_SEARCHED
    last_searched_all: int = NEVER_LAST_SEARCHED

    @property
    def ever_searched(self) -> bool:
        return self.first_searched_any != NEVER_FIRST_SEARCHED


class ProcessorStats(msgspec.Struct):
    """Statistics for a seedwise run."""

    searchees: int = 0
    included: int = 0
    eligible: int = 0
    injected: int = 0
    already_exists: int = 0
    not_complete: int = 0
    failed: int = 0
