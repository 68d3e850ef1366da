from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pakproperty.config import settings
from pakproperty.models import Base

engine = create_async_engine(settings.DATABASE_URL)
async_session = async_sessionmaker(engine, expire_on_commit=False)

async def get_session():
    async with async_session() as session:
        yield session

async def create_tables(bind=engine):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

__all__ = ["AsyncSession", "async_session", "create_tables", "engine", "get_session"]
