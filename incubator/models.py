"""
SQLAlchemy ORM models -- incubation records schema.

Tables
------
startups            -- one row per incubated company
achievements        -- awards, milestones, press
progress_history    -- metric snapshots (revenue, funding, employees, customers)
meetings            -- SMC, one-on-one and FMC meetings
revenue_entries     -- individual revenue line items
documents           -- uploaded document metadata
stage_transitions   -- stage change log

Every child table is owned by exactly one startup and is removed with it.
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base


class Stage:
    ONBOARDED = "Onboarded"
    GRADUATED = "Graduated"
    INACTIVE = "Inactive"

    # stages the importer writes
    IMPORTED = (ONBOARDED, GRADUATED, INACTIVE)


class MeetingKind:
    SMC = "smc"
    ONE_ON_ONE = "one_on_one"
    FMC = "fmc"


class MeetingStatus:
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    NOT_DONE = "not_done"


def _new_id() -> str:
    return str(uuid.uuid4())


def _owned(target: str):
    return relationship(
        target,
        back_populates="startup",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


def _startup_fk():
    return Column(
        String(36),
        ForeignKey("startups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

class Startup(Base):
    __tablename__ = "startups"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(512), nullable=False)
    founder = Column(String(512), nullable=False)
    email = Column(String(320), unique=True, nullable=True)
    phone = Column(String(64), nullable=True)
    sector = Column(String(128), default="Other")
    stage = Column(String(32), default=Stage.ONBOARDED, index=True)
    description = Column(Text, nullable=True)
    website = Column(String(512), nullable=True)

    funding_received = Column(Float, default=0)
    employee_count = Column(Integer, default=0)
    revenue_generated = Column(Float, default=0)

    # DPIIT recognition
    dpiit_no = Column(String(64), nullable=True)
    recognition_date = Column(DateTime, nullable=True)
    bhaskar_id = Column(String(64), nullable=True)

    onboarded_date = Column(DateTime, nullable=True)
    graduated_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    achievements = _owned("Achievement")
    progress_history = _owned("ProgressHistory")
    meetings = _owned("Meeting")
    revenue_entries = _owned("RevenueEntry")
    documents = _owned("Document")
    stage_transitions = _owned("StageTransition")

    __table_args__ = (
        Index("ix_startups_name_founder", "name", "founder"),
    )


# ---------------------------------------------------------------------------
# Child records
# ---------------------------------------------------------------------------

class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = _startup_fk()
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(64), default="milestone")
    date = Column(DateTime, nullable=False)
    media_url = Column(String(1024), nullable=True)
    is_graduated = Column(Boolean, default=False)
    created_at = Column(DateTime, default=func.now())

    startup = relationship("Startup", back_populates="achievements")


class ProgressHistory(Base):
    __tablename__ = "progress_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = _startup_fk()
    metric = Column(String(64), nullable=False)
    value = Column(Float, default=0)
    date = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    startup = relationship("Startup", back_populates="progress_history")

    __table_args__ = (
        Index("ix_progress_startup_metric", "startup_id", "metric"),
    )


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = _startup_fk()
    kind = Column(String(16), nullable=False, index=True)  # smc, one_on_one, fmc
    date = Column(DateTime, nullable=False)
    status = Column(String(16), default=MeetingStatus.SCHEDULED)

    time_slot = Column(String(64), nullable=True)
    completion_time = Column(String(64), nullable=True)  # empty until completed
    stage_at_completion = Column(String(32), nullable=True)

    facilitator = Column(String(256), nullable=True)  # panelist or mentor
    topic = Column(Text, nullable=True)
    feedback = Column(Text, nullable=True)
    action_items = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    startup = relationship("Startup", back_populates="meetings")

    __table_args__ = (
        Index("ix_meetings_startup_kind_date", "startup_id", "kind", "date"),
    )


class RevenueEntry(Base):
    __tablename__ = "revenue_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = _startup_fk()
    amount = Column(Float, default=0)
    source = Column(String(256), nullable=True)
    date = Column(DateTime, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    startup = relationship("Startup", back_populates="revenue_entries")


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = _startup_fk()
    file_name = Column(String(512), nullable=False)
    file_url = Column(String(1024), nullable=True)
    mime_type = Column(String(128), nullable=True)
    size_bytes = Column(Integer, default=0)
    uploaded_at = Column(DateTime, default=func.now())

    startup = relationship("Startup", back_populates="documents")


class StageTransition(Base):
    __tablename__ = "stage_transitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = _startup_fk()
    from_stage = Column(String(32), nullable=True)
    to_stage = Column(String(32), nullable=False)
    changed_at = Column(DateTime, default=func.now())
    notes = Column(Text, nullable=True)

    startup = relationship("Startup", back_populates="stage_transitions")
