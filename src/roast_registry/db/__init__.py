# SPDX-License-Identifier: MIT
"""Database module for the Roast registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base

if TYPE_CHECKING:
    from ..config import DatabaseConfig

__all__ = [
    "Base",
    "Database",
    "async_url",
]


def async_url(url: str) -> str:
    """Convert a sync database URL to its async driver form."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///")
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://")
    return url


class Database:
    """Owns the async engine and session factory."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(cls, config: "DatabaseConfig") -> "Database":
        url = async_url(config.url)
        kwargs: dict = {"echo": config.echo}
        if "sqlite" not in url:
            kwargs["pool_size"] = config.pool_size
            kwargs["max_overflow"] = config.max_overflow
        return cls(create_async_engine(url, **kwargs))

    async def create_all(self) -> None:
        """Create tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def dispose(self) -> None:
        await self.engine.dispose()
