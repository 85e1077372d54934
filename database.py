"""
Async engine and sessions for the loan store.

Converted LoanJSON records are persisted in the `loan_records` table (models.StoredLoan).
Tables are created on app startup; there are no migrations. Routes get a request-scoped
session from get_db, which commits once the handler returns.
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from config import settings


def _engine_kwargs(database_url: str) -> dict:
    kwargs = {"echo": settings.debug}
    if database_url.startswith("sqlite"):
        # One shared connection: an in-memory database exists only on the connection that created it
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def make_engine(database_url: str):
    return create_async_engine(database_url, **_engine_kwargs(database_url))


engine = make_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind=None):
    """Create the loan store tables on the given engine (the app engine by default)."""
    # Import registers the tables on Base.metadata
    import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    await engine.dispose()
