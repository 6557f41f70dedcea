import logging
import os

from sqlalchemy import event, inspect, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from wedsnap.config import settings

logger = logging.getLogger(__name__)

# Default quota of the first schema revision; guests still holding it are bumped.
LEGACY_PHOTO_QUOTA = 10


def _get_database_url() -> str:
    url = settings.database_url
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _is_sqlite() -> bool:
    return settings.database_url.startswith("sqlite")


_database_url = _get_database_url()

_engine_kwargs: dict = {"echo": False}
if _is_sqlite():
    # aiosqlite connections are bound to the loop that opened them
    _engine_kwargs["poolclass"] = NullPool
else:
    _engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

engine = create_async_engine(_database_url, **_engine_kwargs)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

if _is_sqlite():
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Base(DeclarativeBase):
    pass


async def create_tables():
    if _is_sqlite():
        os.makedirs(settings.data_dir, exist_ok=True)
    async with engine.begin() as conn:
        from wedsnap.models import user, wedding_event, guest, photo  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)


def _unique_column_sets(sync_conn, table: str) -> set[tuple[str, ...]]:
    inspector = inspect(sync_conn)
    sets = {tuple(c["column_names"]) for c in inspector.get_unique_constraints(table)}
    sets |= {tuple(i["column_names"]) for i in inspector.get_indexes(table) if i.get("unique")}
    return sets


async def run_migrations():
    """Bring databases created by older revisions up to the current schema."""
    async with engine.connect() as conn:
        columns = await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns("photos")}
        )
        if "caption" not in columns:
            logger.info("Adding caption column to photos table")
            await conn.execute(text("ALTER TABLE photos ADD COLUMN caption VARCHAR(150)"))
            await conn.commit()

        unique_sets = await conn.run_sync(_unique_column_sets, "wedding_events")
        if ("couple_user_id",) not in unique_sets:
            logger.info("Adding one-event-per-couple unique index")
            await conn.execute(
                text(
                    "CREATE UNIQUE INDEX IF NOT EXISTS uq_wedding_events_couple_user_id "
                    "ON wedding_events (couple_user_id)"
                )
            )
            await conn.commit()

        if settings.default_photo_quota != LEGACY_PHOTO_QUOTA:
            # Only guests that never uploaded still sit exactly on the old default
            result = await conn.execute(
                text(
                    "UPDATE guests SET photos_remaining = :quota "
                    "WHERE photos_remaining = :legacy AND has_unlocked_feed = :locked"
                ),
                {"quota": settings.default_photo_quota, "legacy": LEGACY_PHOTO_QUOTA, "locked": False},
            )
            await conn.commit()
            if result.rowcount:
                logger.info("Raised quota of %d guests to %d", result.rowcount, settings.default_photo_quota)


async def get_db():
    async with async_session() as session:
        yield session
