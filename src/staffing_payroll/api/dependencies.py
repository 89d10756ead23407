"""FastAPI dependencies: database sessions and settings."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.config import Settings, get_settings
from staffing_payroll.database import init_db


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; routes commit explicitly."""
    _, session_factory = init_db()
    async with session_factory() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_settings)]
