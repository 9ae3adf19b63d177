from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config import Settings

settings = Settings()

engine = create_async_engine(
    settings.generate_postgres_url(),
    echo=settings.env.DEBUG,
    pool_pre_ping=True,
)

# expire_on_commit=False keeps loaded rows usable after the per-split commits of the reverser
async_session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session
