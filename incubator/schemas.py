"""Pydantic schemas for FastAPI request / response models."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

class ImportBundle(CamelModel):
    """Legacy export. Only the collections are looked at; entries stay raw."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    startups: list[Any] = Field(default_factory=list)
    smc_schedules: list[Any] = Field(default_factory=list)
    one_on_one_schedules: list[Any] = Field(default_factory=list)

    @field_validator("startups", "smc_schedules", "one_on_one_schedules", mode="before")
    @classmethod
    def _lists_only(cls, value):
        return value if isinstance(value, list) else []


class ImportRecordError(BaseModel):
    record: str
    message: str


class ImportSummary(CamelModel):
    startups_created: int = 0
    startups_updated: int = 0
    achievements_migrated: int = 0
    progress_records_migrated: int = 0
    smc_meetings_migrated: int = 0
    one_on_one_meetings_migrated: int = 0
    schedules_skipped: int = 0
    errors: list[ImportRecordError] = Field(default_factory=list)


class MigrationStats(CamelModel):
    startups_created: int = 0
    startups_updated: int = 0
    achievements_migrated: int = 0
    progress_records_migrated: int = 0
    smc_meetings_migrated: int = 0
    one_on_one_meetings_migrated: int = 0
    schedules_skipped: int = 0
    errors: int = 0

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "MigrationStats":
        data = summary.model_dump(exclude={"errors"})
        return cls(**data, errors=len(summary.errors))


class MigrationResponse(BaseModel):
    success: bool = True
    message: str = ""
    stats: MigrationStats
    errors: list[ImportRecordError] = Field(default_factory=list)


class DatabaseCounts(CamelModel):
    startups: int = 0
    achievements: int = 0
    progress_records: int = 0
    smc_meetings: int = 0
    one_on_one_meetings: int = 0
    fmc_meetings: int = 0
    revenue_entries: int = 0
    documents: int = 0
    stage_transitions: int = 0


class MigrationStatus(BaseModel):
    success: bool = True
    database: DatabaseCounts


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

class AchievementOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    type: Optional[str] = None
    date: dt.datetime
    media_url: Optional[str] = None
    is_graduated: bool = False


class ProgressOut(CamelModel):
    id: int
    metric: str
    value: float = 0
    date: dt.datetime
    notes: Optional[str] = None


class StartupRef(CamelModel):
    id: str
    name: str
    founder: str


class MeetingOut(CamelModel):
    id: int
    startup_id: str
    kind: str
    date: dt.date
    status: str
    time_slot: Optional[str] = None
    completion_time: Optional[str] = None
    stage_at_completion: Optional[str] = None
    facilitator: Optional[str] = None
    topic: Optional[str] = None
    feedback: Optional[str] = None
    action_items: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _day(cls, value):
        return value.date() if isinstance(value, dt.datetime) else value


class MeetingWithStartup(MeetingOut):
    startup: Optional[StartupRef] = None


class StartupBrief(CamelModel):
    id: str
    name: str
    founder: str
    email: Optional[str] = None
    phone: Optional[str] = None
    sector: Optional[str] = None
    stage: Optional[str] = None
    funding_received: float = 0
    employee_count: int = 0
    revenue_generated: float = 0
    onboarded_date: Optional[dt.datetime] = None
    graduated_date: Optional[dt.datetime] = None


class StartupDetail(StartupBrief):
    description: Optional[str] = None
    website: Optional[str] = None
    dpiit_no: Optional[str] = None
    recognition_date: Optional[dt.datetime] = None
    bhaskar_id: Optional[str] = None
    achievements: list[AchievementOut] = Field(default_factory=list)
    progress_history: list[ProgressOut] = Field(default_factory=list)
    meetings: list[MeetingOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

class ClearAllResponse(BaseModel):
    success: bool = True
    message: str = ""
    deleted: dict[str, int] = Field(default_factory=dict)
