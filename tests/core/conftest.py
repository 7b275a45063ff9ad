"""Shared fixtures for core tests."""

from unittest.mock import AsyncMock

import pytest

from seedwise.clients.client_common import ClientReply, TorrentClient, TorrentState
from seedwise.core.models import Metafile, Searchee, SearcheeFile


class FakeTorrentClient(TorrentClient):
    """TorrentClient whose operations are AsyncMocks."""

    def __init__(self, label: str = "cross-seed") -> None:
        super().__init__(label=label)
        self.validate_config = AsyncMock()
        self.get_torrent_state = AsyncMock(return_value=TorrentState.SEEDING)
        self.add_torrent = AsyncMock(return_value=ClientReply(result="def456"))
        self.label_supported = AsyncMock(return_value=True)
        self.set_torrent_label = AsyncMock(return_value=ClientReply())
        self.add_label = AsyncMock(return_value=ClientReply())

    # Stubs satisfying the ABC, shadowed by the mocks above
    async def validate_config(self) -> None: ...

    async def get_torrent_state(self, torrent_hash: str) -> TorrentState | None: ...

    async def add_torrent(
        self, filename: str, torrent_data: bytes, download_dir: str | None = None
    ) -> ClientReply: ...

    async def label_supported(self) -> bool: ...

    async def set_torrent_label(self, torrent_hash: str, label: str) -> ClientReply: ...

    async def add_label(self, label: str) -> ClientReply: ...


def make_searchee(
    name: str,
    files: list[str] | None = None,
    path: str | None = None,
    info_hash: str | None = None,
) -> Searchee:
    """Build a searchee with 1 GiB files named after ``files`` (or ``name``)."""
    return Searchee(
        name=name,
        files=[SearcheeFile(name=f, length=1 << 30) for f in (files or [name])],
        path=path,
        info_hash=info_hash,
    )


@pytest.fixture
def fake_torrent_client() -> FakeTorrentClient:
    """Create a fake TorrentClient."""
    return FakeTorrentClient()


@pytest.fixture
def sample_searchee() -> Searchee:
    """Create a seeding-source searchee carrying an infohash."""
    return make_searchee(
        "Movie.Name.2019.1080p.BluRay.x264-GRP",
        files=["Movie.Name.2019.1080p.BluRay.x264-GRP.mkv"],
        info_hash="abc123",
    )


@pytest.fixture
def sample_metafile() -> Metafile:
    """Create a metafile for a matched release."""
    return Metafile(
        name="Movie.Name.2019.1080p.BluRay.x264-GRP",
        info_hash="def456",
        encoded=b"d4:infod4:name5:movieee",
    )
