from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db.engine import database


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields an async DB session and ensures it's closed."""
    async with database.session_maker() as session:
        yield session


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency. Фабрика сессий для сервисов, которые сами управляют транзакциями."""
    return database.session_maker
