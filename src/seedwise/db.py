"""Persistent search history for seedwise.

Stores per (searchee, indexer) search timestamps in SQLite through
SQLAlchemy's asyncio extension. Timestamps are epoch milliseconds.
"""

import anyio
import msgspec
from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, func, or_, select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from . import logger
from .core.models import NEVER_FIRST_SEARCHED, NEVER_LAST_SEARCHED, TimestampAggregate
from .core.utils import now_ms


class Base(DeclarativeBase):
    pass


class SearcheeRecord(Base):
    __tablename__ = "searchee"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, index=True)


class IndexerRecord(Base):
    __tablename__ = "indexer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String, unique=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    # Rate limited until this time (epoch ms)
    retry_after: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class TimestampRecord(Base):
    __tablename__ = "timestamp"

    searchee_id: Mapped[int] = mapped_column(
        ForeignKey("searchee.id", ondelete="CASCADE"), primary_key=True
    )
    indexer_id: Mapped[int] = mapped_column(
        ForeignKey("indexer.id", ondelete="CASCADE"), primary_key=True
    )
    first_searched: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    last_searched: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class Indexer(msgspec.Struct, frozen=True):
    """An indexer eligible to be searched."""

    id: int
    url: str
    name: str | None = None


class SeedwiseDatabase:
    """Async access to the search history database."""

    def __init__(self, url: str, engine: AsyncEngine | None = None) -> None:
        self.engine = engine or create_async_engine(url)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def upsert_indexer(
        self, url: str, name: str | None = None, active: bool = True
    ) -> int:
        """Insert an indexer or update the existing one with the same URL.

        Args:
            url: Indexer URL, unique.
            name: Optional display name.
            active: Whether the indexer is enabled.

        Returns:
            int: The indexer ID.
        """
        async with self.session_factory() as session, session.begin():
            record = await session.scalar(
                select(IndexerRecord).where(IndexerRecord.url == url)
            )
            if record is None:
                record = IndexerRecord(url=url, name=name, active=active)
                session.add(record)
            else:
                record.name = name
                record.active = active
            await session.flush()
            return record.id

    async def set_indexer_retry_after(
        self, indexer_id: int, retry_after: int | None
    ) -> None:
        """Snooze a rate limited indexer until ``retry_after`` (epoch ms)."""
        async with self.session_factory() as session, session.begin():
            record = await session.get(IndexerRecord, indexer_id)
            if record is None:
                logger.warning("Cannot snooze unknown indexer %s", indexer_id)
                return
            record.retry_after = retry_after

    async def get_enabled_indexers(self, now: int | None = None) -> list[Indexer]:
        """Get the indexers currently eligible to be searched.

        An indexer is enabled when it is active and not rate limited.

        Args:
            now: Reference time in epoch milliseconds, defaults to now.

        Returns:
            list[Indexer]: Enabled indexers ordered by ID.
        """
        reference = now_ms() if now is None else now
        async with self.session_factory() as session:
            records = await session.scalars(
                select(IndexerRecord)
                .where(
                    IndexerRecord.active.is_(True),
                    or_(
                        IndexerRecord.retry_after.is_(None),
                        IndexerRecord.retry_after < reference,
                    ),
                )
                .order_by(IndexerRecord.id)
            )
            return [Indexer(id=r.id, url=r.url, name=r.name) for r in records]

    async def get_timestamp_aggregate(
        self, searchee_name: str, indexer_ids: list[int]
    ) -> TimestampAggregate:
        """Aggregate the search history of a searchee over some indexers.

        Missing rows count as never searched, so a searchee unknown to the
        database yields the sentinel values rather than an error.

        Args:
            searchee_name: Name of the searchee.
            indexer_ids: Indexers to aggregate over.

        Returns:
            TimestampAggregate: Earliest first search and latest last search.
        """
        if not indexer_ids:
            return TimestampAggregate()

        stmt = (
            select(
                func.min(
                    func.coalesce(TimestampRecord.first_searched, NEVER_FIRST_SEARCHED)
                ),
                func.max(
                    func.coalesce(TimestampRecord.last_searched, NEVER_LAST_SEARCHED)
                ),
            )
            .select_from(SearcheeRecord)
            .join(TimestampRecord, TimestampRecord.searchee_id == SearcheeRecord.id)
            .where(
                SearcheeRecord.name == searchee_name,
                TimestampRecord.indexer_id.in_(indexer_ids),
            )
        )
        async with self.session_factory() as session:
            first_searched_any, last_searched_all = (await session.execute(stmt)).one()

        return TimestampAggregate(
            first_searched_any=(
                NEVER_FIRST_SEARCHED if first_searched_any is None else first_searched_any
            ),
            last_searched_all=(
                NEVER_LAST_SEARCHED if last_searched_all is None else last_searched_all
            ),
        )

    async def record_search(
        self, searchee_name: str, indexer_id: int, searched_at: int | None = None
    ) -> None:
        """Record that a searchee was searched on an indexer.

        The first search time is set once, the last search time is always
        updated.

        Args:
            searchee_name: Name of the searchee.
            indexer_id: ID of the searched indexer.
            searched_at: Search time in epoch milliseconds, defaults to now.
        """
        timestamp = now_ms() if searched_at is None else searched_at
        async with self.session_factory() as session, session.begin():
            searchee = await session.scalar(
                select(SearcheeRecord).where(SearcheeRecord.name == searchee_name)
            )
            if searchee is None:
                searchee = SearcheeRecord(name=searchee_name)
                session.add(searchee)
                await session.flush()

            record = await session.get(TimestampRecord, (searchee.id, indexer_id))
            if record is None:
                session.add(
                    TimestampRecord(
                        searchee_id=searchee.id,
                        indexer_id=indexer_id,
                        first_searched=timestamp,
                        last_searched=timestamp,
                    )
                )
            else:
                if record.first_searched is None:
                    record.first_searched = timestamp
                record.last_searched = timestamp


# Global database instance
_database_instance: SeedwiseDatabase | None = None
_database_lock = anyio.Lock()


async def init_database(url: str) -> SeedwiseDatabase:
    """Initialize global database instance and create missing tables.

    Args:
        url: SQLAlchemy async database URL.

    Returns:
        SeedwiseDatabase: The database instance.

    Raises:
        RuntimeError: If already initialized.
    """
    global _database_instance
    async with _database_lock:
        if _database_instance is not None:
            raise RuntimeError("Database already initialized.")

        database = SeedwiseDatabase(url)
        await database.create_tables()
        _database_instance = database
        return database


def get_database() -> SeedwiseDatabase:
    """Get global database instance.

    Raises:
        RuntimeError: If the database has not been initialized.
    """
    if _database_instance is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _database_instance
