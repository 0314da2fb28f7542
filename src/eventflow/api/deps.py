"""API dependencies."""

import logging
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventflow.db.base import async_session_factory
from eventflow.engine import PlanningEngine

logger = logging.getLogger("eventflow.api")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_engine(
    session: AsyncSession = Depends(get_db_session),
) -> PlanningEngine:
    """Planning engine bound to the request's session."""
    return PlanningEngine(session)
