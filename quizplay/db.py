from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from quizplay.core.config import settings
from quizplay import models  # noqa: F401


_engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_async_engine(settings.assembled_db_url, echo=False, future=True)
    return _engine


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def get_session(engine: Optional[AsyncEngine] = None):
    async_session = AsyncSession(engine or get_engine(), expire_on_commit=False)
    try:
        yield async_session
    finally:
        await async_session.close()
