# db.py
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from config import settings
from config.database import to_async_url
from db_base import Base  # <- import Base from separate module


# ---------- Engine & Session (async) ----------

def build_engine(database_url: str | None = None, *, echo: bool | None = None) -> AsyncEngine:
    """
    Create the async engine for the remote store.

    Falls back to settings.DATABASE_URL, e.g. postgresql+asyncpg://...
    """
    url = database_url or settings.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not configured")
    return create_async_engine(
        to_async_url(url),
        echo=settings.DEBUG if echo is None else echo,
        future=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


# ---------- Optional init helper (for dev only) ----------

async def init_db(engine: AsyncEngine) -> None:
    """
    Optional helper to create tables from ORM metadata.

    In production the hosted store owns its schema.
    """
    # Import models so they are registered on Base.metadata
    import db_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
