"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from incubator.database import Database
from incubator.repository import SQLAlchemyStartupRepository, StartupRepository


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_session(database: Database = Depends(get_database)) -> AsyncIterator[AsyncSession]:
    async with database.session() as session:
        yield session


def get_repository(session: AsyncSession = Depends(get_session)) -> StartupRepository:
    return SQLAlchemyStartupRepository(session)
