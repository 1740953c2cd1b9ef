# passport_backend/database.py
"""
Подключение к базе данных и сессии
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from passport_shared.config import config
from passport_shared.models import Base

# Асинхронный движок
engine = create_async_engine(config.clean_database_url, echo=config.SQL_ECHO)

# Фабрика сессий
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Зависимость для получения сессии базы данных.

    Роутеры сами делают commit после успешной операции; при любой
    ошибке вся работа запроса откатывается.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables() -> None:
    """Создание таблиц (для локального запуска без миграций)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    'Base',
    'engine',
    'AsyncSessionLocal',
    'get_db',
    'create_tables',
]
