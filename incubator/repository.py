"""
Persistence port for incubation records.

``StartupRepository`` is the capability interface the importer and the HTTP
routes talk to; ``SQLAlchemyStartupRepository`` implements it on top of an
``AsyncSession``. Implementations signal a conflicting write (duplicate email
and the like) with ``sqlalchemy.exc.IntegrityError``.
"""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from incubator.models import (
    Achievement,
    Document,
    Meeting,
    MeetingKind,
    ProgressHistory,
    RevenueEntry,
    StageTransition,
    Startup,
)


class StartupRepository(ABC):

    @abstractmethod
    def transaction(self):
        """Async context manager: commit on success, roll back on error."""

    @abstractmethod
    def savepoint(self):
        """Async context manager for a nested unit inside ``transaction()``."""

    # --- startups ---

    @abstractmethod
    async def find_startup(self, email: Optional[str], name: str, founder: str) -> Optional[Startup]:
        """Match by email when given, else by exact (name, founder)."""

    @abstractmethod
    async def get_startup(self, startup_id: str, with_children: bool = False) -> Optional[Startup]:
        pass

    @abstractmethod
    async def list_startups(self, stage: Optional[str] = None, search: Optional[str] = None) -> list[Startup]:
        pass

    @abstractmethod
    async def create_startup(self, fields: dict) -> Startup:
        pass

    @abstractmethod
    async def update_startup(self, startup: Startup, fields: dict) -> Startup:
        pass

    @abstractmethod
    async def delete_startup(self, startup: Startup):
        pass

    # --- children ---

    @abstractmethod
    async def find_achievement(
        self, startup_id: str, title: str, date: Optional[dt.datetime] = None
    ) -> Optional[Achievement]:
        """``date=None`` matches regardless of date."""

    @abstractmethod
    async def add_achievement(self, startup_id: str, fields: dict) -> Achievement:
        pass

    @abstractmethod
    async def find_progress(
        self, startup_id: str, metric: str, value: float, date: Optional[dt.datetime] = None
    ) -> Optional[ProgressHistory]:
        """``date=None`` matches regardless of date."""

    @abstractmethod
    async def add_progress(self, startup_id: str, fields: dict) -> ProgressHistory:
        pass

    @abstractmethod
    async def find_meeting(self, startup_id: str, kind: str, day: dt.date) -> Optional[Meeting]:
        """Any meeting of ``kind`` for the startup on that calendar day."""

    @abstractmethod
    async def add_meeting(self, startup_id: str, fields: dict) -> Meeting:
        pass

    @abstractmethod
    async def list_meetings(self, kind: Optional[str] = None, startup_id: Optional[str] = None) -> list[Meeting]:
        pass

    # --- bulk ---

    @abstractmethod
    async def counts(self) -> dict:
        pass

    @abstractmethod
    async def clear_all(self) -> dict:
        pass


class SQLAlchemyStartupRepository(StartupRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLAlchemyStartupRepository"]:
        try:
            yield self
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator["SQLAlchemyStartupRepository"]:
        async with self.session.begin_nested():
            yield self

    async def _first(self, stmt):
        return (await self.session.execute(stmt.limit(1))).scalars().first()

    # --- startups ---

    async def find_startup(self, email, name, founder):
        if email:
            found = await self._first(select(Startup).where(Startup.email == email))
            if found is not None:
                return found
        return await self._first(
            select(Startup)
            .where(Startup.name == name, Startup.founder == founder)
            .order_by(Startup.created_at)
        )

    async def get_startup(self, startup_id, with_children=False):
        stmt = select(Startup).where(Startup.id == startup_id)
        if with_children:
            stmt = stmt.options(
                selectinload(Startup.achievements),
                selectinload(Startup.progress_history),
                selectinload(Startup.meetings),
            )
        return await self._first(stmt)

    async def list_startups(self, stage=None, search=None):
        stmt = select(Startup).order_by(Startup.created_at.desc())
        if stage:
            stmt = stmt.where(Startup.stage == stage)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Startup.name).like(pattern),
                func.lower(Startup.founder).like(pattern),
                func.lower(Startup.email).like(pattern),
            ))
        return list((await self.session.execute(stmt)).scalars().all())

    async def create_startup(self, fields):
        startup = Startup(**fields)
        self.session.add(startup)
        await self.session.flush()
        return startup

    async def update_startup(self, startup, fields):
        for key, value in fields.items():
            setattr(startup, key, value)
        await self.session.flush()
        return startup

    async def delete_startup(self, startup):
        await self.session.delete(startup)
        await self.session.flush()

    # --- children ---

    async def find_achievement(self, startup_id, title, date=None):
        stmt = select(Achievement).where(
            Achievement.startup_id == startup_id,
            Achievement.title == title,
        )
        if date is not None:
            stmt = stmt.where(Achievement.date == date)
        return await self._first(stmt)

    async def add_achievement(self, startup_id, fields):
        row = Achievement(startup_id=startup_id, **fields)
        self.session.add(row)
        await self.session.flush()
        return row

    async def find_progress(self, startup_id, metric, value, date=None):
        stmt = select(ProgressHistory).where(
            ProgressHistory.startup_id == startup_id,
            ProgressHistory.metric == metric,
            ProgressHistory.value == value,
        )
        if date is not None:
            stmt = stmt.where(ProgressHistory.date == date)
        return await self._first(stmt)

    async def add_progress(self, startup_id, fields):
        row = ProgressHistory(startup_id=startup_id, **fields)
        self.session.add(row)
        await self.session.flush()
        return row

    async def find_meeting(self, startup_id, kind, day):
        start = dt.datetime.combine(day, dt.time.min)
        end = start + dt.timedelta(days=1)
        return await self._first(
            select(Meeting).where(
                Meeting.startup_id == startup_id,
                Meeting.kind == kind,
                Meeting.date >= start,
                Meeting.date < end,
            )
        )

    async def add_meeting(self, startup_id, fields):
        row = Meeting(startup_id=startup_id, **fields)
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_meetings(self, kind=None, startup_id=None):
        stmt = (
            select(Meeting)
            .options(selectinload(Meeting.startup))
            .order_by(Meeting.date.desc())
        )
        if kind:
            stmt = stmt.where(Meeting.kind == kind)
        if startup_id:
            stmt = stmt.where(Meeting.startup_id == startup_id)
        return list((await self.session.execute(stmt)).scalars().all())

    # --- bulk ---

    async def _count(self, column, *where) -> int:
        stmt = select(func.count(column))
        if where:
            stmt = stmt.where(*where)
        return (await self.session.execute(stmt)).scalar() or 0

    async def counts(self):
        return {
            "startups": await self._count(Startup.id),
            "achievements": await self._count(Achievement.id),
            "progress_records": await self._count(ProgressHistory.id),
            "smc_meetings": await self._count(Meeting.id, Meeting.kind == MeetingKind.SMC),
            "one_on_one_meetings": await self._count(
                Meeting.id, Meeting.kind == MeetingKind.ONE_ON_ONE
            ),
            "fmc_meetings": await self._count(Meeting.id, Meeting.kind == MeetingKind.FMC),
            "revenue_entries": await self._count(RevenueEntry.id),
            "documents": await self._count(Document.id),
            "stage_transitions": await self._count(StageTransition.id),
        }

    async def clear_all(self):
        # children first so it also works where FK cascades are off
        deleted = {}
        for key, model in (
            ("achievements", Achievement),
            ("progress_records", ProgressHistory),
            ("meetings", Meeting),
            ("revenue_entries", RevenueEntry),
            ("documents", Document),
            ("stage_transitions", StageTransition),
            ("startups", Startup),
        ):
            result = await self.session.execute(delete(model))
            deleted[key] = result.rowcount or 0
        return deleted
