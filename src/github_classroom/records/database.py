"""Database connection and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from github_classroom.records.models import Base
from github_classroom.settings import get_database_url


class DatabaseConnection:
    """Owns the engine and hands out sessions for provisioning workflows."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    def __init__(self, database_url: str | None = None, echo: bool = False, **engine_options: Any):  # pyright: ignore[reportAny]
        self.engine = create_async_engine(database_url or get_database_url(), echo=echo, **engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        await self.engine.dispose()
