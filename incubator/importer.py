"""
Reconciling importer: legacy export bundle -> relational store.

Both the HTTP route and the command-line script call ``import_bundle``.

Startups are matched on their natural key (email first, then the exact
name + founder pair) and either created or overwritten. Their embedded
achievements, revenue history and progress snapshots are inserted only when
an equivalent row is not already there, so running the same bundle twice
converges instead of duplicating. Each startup and its children commit as one
unit; a bad record is rolled back, reported in ``errors`` and the run moves on.

Meeting schedules are handled afterwards. They point at startups through the
bundle's own local ids, which are resolved back to a natural key via the
bundle and then looked up in the database. Schedules that cannot be resolved
are skipped and counted, not reported as errors.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Optional

from sqlalchemy.exc import (
    DataError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)

from incubator.models import MeetingKind, Startup
from incubator.normalize import (
    display_name,
    map_achievement,
    map_meeting,
    map_revenue_progress,
    map_startup_fields,
    progress_tracking_metrics,
    try_parse_date,
)
from incubator.repository import StartupRepository
from incubator.schemas import ImportBundle, ImportRecordError, ImportSummary

logger = logging.getLogger(__name__)

# Lost connection and friends: these abort the whole run.
INFRASTRUCTURE_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    ConnectionError,
)

# Write conflicts on a single child row; swallowed.
CHILD_CONFLICT_ERRORS = (IntegrityError, DataError)


def _require_mapping(value, what: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _entries(record: Mapping, key: str) -> list:
    value = record.get(key)
    return value if isinstance(value, list) else []


class Importer:
    """One import run over one bundle."""

    def __init__(self, repository: StartupRepository):
        self.repository = repository
        self.summary = ImportSummary()

    async def run(self, bundle: ImportBundle) -> ImportSummary:
        logger.info(
            "Importing %d startups, %d SMC schedules, %d one-on-one schedules",
            len(bundle.startups),
            len(bundle.smc_schedules),
            len(bundle.one_on_one_schedules),
        )

        for record in bundle.startups:
            await self._import_startup(record)

        local_index = self._index_local_startups(bundle.startups)
        for schedule in bundle.smc_schedules:
            await self._import_schedule(schedule, MeetingKind.SMC, local_index)
        for schedule in bundle.one_on_one_schedules:
            await self._import_schedule(schedule, MeetingKind.ONE_ON_ONE, local_index)

        s = self.summary
        logger.info(
            "Import finished: %d created, %d updated, %d achievements, "
            "%d progress records, %d SMC, %d one-on-one, %d schedules skipped, %d errors",
            s.startups_created, s.startups_updated, s.achievements_migrated,
            s.progress_records_migrated, s.smc_meetings_migrated,
            s.one_on_one_meetings_migrated, s.schedules_skipped, len(s.errors),
        )
        return s

    # ------------------------------------------------------------------
    # Startups
    # ------------------------------------------------------------------

    async def _import_startup(self, record):
        name = display_name(record)
        try:
            async with self.repository.transaction():
                created, achievements, progress = await self._upsert_startup(record)
        except INFRASTRUCTURE_ERRORS:
            raise
        except Exception as e:
            logger.warning("Startup %r not imported: %s", name, e)
            self.summary.errors.append(ImportRecordError(record=name, message=str(e)))
            return

        if created:
            self.summary.startups_created += 1
        else:
            self.summary.startups_updated += 1
        self.summary.achievements_migrated += achievements
        self.summary.progress_records_migrated += progress

    async def _upsert_startup(self, record) -> tuple[bool, int, int]:
        record = _require_mapping(record, "startup")
        fields = map_startup_fields(record)

        existing = await self.repository.find_startup(
            fields["email"], fields["name"], fields["founder"]
        )
        if existing is not None:
            startup = await self.repository.update_startup(existing, fields)
        else:
            startup = await self.repository.create_startup(fields)
        logger.debug("%s startup %s (%s)", "Updated" if existing else "Created", startup.id, fields["name"])

        achievements = await self._import_achievements(startup, record)
        progress = await self._import_revenue_history(startup, record)
        progress += await self._import_progress_tracking(startup, record)
        return existing is None, achievements, progress

    async def _insert_child(self, find, add) -> bool:
        """Insert unless an equivalent row exists. Conflicts count as not inserted."""
        try:
            async with self.repository.savepoint():
                if await find() is not None:
                    return False
                await add()
                return True
        except CHILD_CONFLICT_ERRORS as e:
            logger.debug("Skipped conflicting child row: %s", e)
            return False

    async def _import_achievements(self, startup: Startup, record: Mapping) -> int:
        repo = self.repository
        inserted = 0
        for entry in _entries(record, "achievements"):
            entry = _require_mapping(entry, "achievement")
            fields = map_achievement(entry)
            # undated entries are stamped with now; match them on title alone
            if await self._insert_child(
                lambda: repo.find_achievement(
                    startup.id, fields["title"], try_parse_date(entry.get("date"))
                ),
                lambda: repo.add_achievement(startup.id, fields),
            ):
                inserted += 1
        return inserted

    async def _import_revenue_history(self, startup: Startup, record: Mapping) -> int:
        repo = self.repository
        inserted = 0
        for entry in _entries(record, "revenueHistory"):
            entry = _require_mapping(entry, "revenue entry")
            fields = map_revenue_progress(entry)
            if await self._insert_child(
                lambda: repo.find_progress(
                    startup.id, fields["metric"], fields["value"], try_parse_date(entry.get("date"))
                ),
                lambda: repo.add_progress(startup.id, fields),
            ):
                inserted += 1
        return inserted

    async def _import_progress_tracking(self, startup: Startup, record: Mapping) -> int:
        tracking = record.get("progressTracking")
        if not tracking:
            return 0
        repo = self.repository
        inserted = 0
        for fields in progress_tracking_metrics(_require_mapping(tracking, "progressTracking")):
            # snapshots carry no date of their own; match on metric + value only
            if await self._insert_child(
                lambda: repo.find_progress(startup.id, fields["metric"], fields["value"]),
                lambda: repo.add_progress(startup.id, fields),
            ):
                inserted += 1
        return inserted

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    @staticmethod
    def _index_local_startups(records: list) -> dict:
        index = {}
        for record in records:
            if isinstance(record, Mapping) and record.get("id") is not None:
                index.setdefault(str(record["id"]), record)
        return index

    async def _resolve_schedule_startup(self, schedule: Mapping, local_index: dict) -> Optional[Startup]:
        local_id = schedule.get("startupId")
        local = local_index.get(str(local_id)) if local_id is not None else None
        if local is None:
            return None
        key = map_startup_fields(local)
        return await self.repository.find_startup(key["email"], key["name"], key["founder"])

    async def _import_schedule(self, schedule, kind: str, local_index: dict):
        try:
            async with self.repository.transaction():
                inserted = await self._insert_schedule(schedule, kind, local_index)
        except INFRASTRUCTURE_ERRORS:
            raise
        except Exception as e:
            logger.warning("Skipped %s schedule: %s", kind, e)
            self.summary.schedules_skipped += 1
            return

        if inserted is None:
            self.summary.schedules_skipped += 1
        elif inserted:
            if kind == MeetingKind.SMC:
                self.summary.smc_meetings_migrated += 1
            else:
                self.summary.one_on_one_meetings_migrated += 1

    async def _insert_schedule(self, schedule, kind: str, local_index: dict) -> Optional[bool]:
        """None when the startup cannot be resolved, else whether a row was added."""
        schedule = _require_mapping(schedule, "schedule")
        startup = await self._resolve_schedule_startup(schedule, local_index)
        if startup is None:
            logger.warning(
                "Skipped %s schedule: startup %r not resolvable", kind, schedule.get("startupId")
            )
            return None

        fields = map_meeting(schedule, kind)
        # one meeting per startup per kind per calendar day
        if await self.repository.find_meeting(startup.id, kind, fields["date"].date()):
            return False
        await self.repository.add_meeting(startup.id, fields)
        return True


async def import_bundle(bundle, repository: StartupRepository) -> ImportSummary:
    """Run one import. ``bundle`` may be an ``ImportBundle`` or its raw dict form."""
    if not isinstance(bundle, ImportBundle):
        bundle = ImportBundle.model_validate(bundle if isinstance(bundle, Mapping) else {})
    return await Importer(repository).run(bundle)
