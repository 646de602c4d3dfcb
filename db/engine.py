from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine, AsyncSession

from config import settings


class Base(DeclarativeBase):
    __abstract__ = True


class Database:
    """Подключение к БД: engine и фабрика сессий на всё время жизни процесса"""

    def __init__(self):
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    def connect(self, url: str | None = None, **engine_kwargs) -> None:
        """Создать engine (вызывается при старте приложения)"""
        self._engine = create_async_engine(url or settings.database_url, **engine_kwargs)
        # expire_on_commit=False: объекты остаются читаемыми после коммита
        self._session_maker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def disconnect(self) -> None:
        """Закрыть пул соединений"""
        if self._engine:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None

    @property
    def engine(self) -> AsyncEngine:
        if not self._engine:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if not self._session_maker:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._session_maker


# Глобальный экземпляр
database = Database()
