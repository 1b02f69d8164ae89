import logging
import os

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from palina.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(settings.database_url)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
    """FastAPI dependency: one session per request"""
    async with AsyncSessionLocal() as session:
        yield session


def _ensure_sqlite_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database:
        return
    if url.database == ":memory:":
        return
    directory = os.path.dirname(url.database)
    if directory:
        os.makedirs(directory, exist_ok=True)


async def init_db() -> None:
    """Create tables and seed the catalog on first start."""
    # Imported here so every model is registered on Base.metadata
    from palina import models  # noqa: F401
    from palina.services.booking_store import BookingStore

    _ensure_sqlite_dir(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        seeded = await BookingStore(session).seed_catalog()
        if seeded:
            logger.info("Catalog seeded with default cabin and day pass pricing")
