"""Shared helpers: throwaway SQLite databases and sample export records."""

import os

from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool

from incubator.database import Database
from incubator.importer import import_bundle
from incubator.repository import SQLAlchemyStartupRepository


def temp_database(directory: str) -> Database:
    path = os.path.join(directory, "incubator_test.db")
    return Database(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)


async def run_import(database: Database, bundle):
    async with database.session() as session:
        return await import_bundle(bundle, SQLAlchemyStartupRepository(session))


async def counts(database: Database) -> dict:
    async with database.session() as session:
        return await SQLAlchemyStartupRepository(session).counts()


def connection_lost() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection lost"))


def startup_record(local_id, name, founder, email=None, **extra) -> dict:
    record = {
        "id": local_id,
        "companyName": name,
        "founderName": founder,
        "sector": "FinTech",
        "stage": "S1",
        "teamSize": "4",
        "fundingReceived": "250000",
        "onboardedDate": "2024-01-15",
    }
    if email:
        record["founderEmail"] = email
    record.update(extra)
    return record


def sample_bundle() -> dict:
    return {
        "startups": [
            startup_record(
                1, "Acme Robotics", "Asha Rao", "asha@acme.io",
                achievements=[{"title": "Pitch winner", "date": "2024-03-01", "type": "award"}],
                revenueHistory=[{"amount": "1200", "date": "2024-02-01", "source": "Pilot"}],
                progressTracking={"revenue": 5000, "employees": 4, "funding": None},
            ),
            startup_record(2, "Beta Foods", "Ravi Kumar", "ravi@betafoods.in", stage="Graduated"),
            startup_record(3, "Gamma Health", "Meera Iyer", stage="Rejected"),
        ],
        "smcSchedules": [
            {
                "id": "smc-1",
                "startupId": 1,
                "date": "2024-04-10",
                "timeSlot": "10:00 AM - 11:00 AM",
                "status": "Completed",
                "completionData": {
                    "time": "10:45 AM",
                    "panelistName": "Dr. Sen",
                    "feedback": "Strong traction",
                    "stageAtCompletion": "S2",
                },
            },
        ],
        "oneOnOneSchedules": [
            {
                "id": "oo-1",
                "startupId": 2,
                "date": "2024-04-12",
                "time": "02:00 PM",
                "status": "Scheduled",
            },
        ],
        "darkMode": True,
        "exportDate": "2024-05-01T09:00:00.000Z",
    }
