"""
Field mapping for legacy export records.

The legacy export was written by several generations of the frontend, so the
same attribute shows up under different keys (``companyName`` vs ``name``,
``teamSize`` vs ``employeeCount``) and numbers and dates arrive as loose
strings. Everything here is forgiving: a bad value falls back to a default,
it never raises.
"""

from __future__ import annotations

import datetime as dt
import json
import numbers
from typing import Mapping, Optional

import pandas as pd

from incubator.models import MeetingKind, MeetingStatus, Stage

STAGE_MAP = {
    "S0": Stage.ONBOARDED,
    "S1": Stage.ONBOARDED,
    "S2": Stage.ONBOARDED,
    "S3": Stage.ONBOARDED,
    "Active": Stage.ONBOARDED,
    "Onboarded": Stage.ONBOARDED,
    "Graduated": Stage.GRADUATED,
    "Inactive": Stage.INACTIVE,
    "Rejected": Stage.INACTIVE,
}

PROGRESS_TRACKING_METRICS = ("revenue", "funding", "employees", "customers")
PROGRESS_TRACKING_NOTE = "Migrated from localStorage"


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def pick(record: Mapping, *keys: str, default=None):
    """First non-empty value among ``keys``."""
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return default


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _text(value) -> Optional[str]:
    """Free-text column value. Objects and lists are kept as their JSON."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def to_float(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (str, numbers.Number)):
        return 0.0
    if isinstance(value, str):
        value = value.replace(" ", "").replace(",", "").strip()
        if not value:
            return 0.0
    try:
        num = pd.to_numeric(value, errors="coerce")
        if pd.isna(num):
            return 0.0
        return float(num)
    except (TypeError, ValueError):
        return 0.0


def to_int(value) -> int:
    num = to_float(value)
    if num in (float("inf"), float("-inf")):
        return 0
    return int(num)


def map_stage(value) -> str:
    if not isinstance(value, str):
        return Stage.ONBOARDED
    return STAGE_MAP.get(value.strip(), Stage.ONBOARDED)


def try_parse_date(value) -> Optional[dt.datetime]:
    """Parse anything date-like into a naive UTC datetime, or None."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            ts = pd.to_datetime(value, unit="ms", errors="coerce", utc=True)
        else:
            ts = pd.to_datetime(value, errors="coerce", utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(ts, pd.Timestamp):
        # NaT, or a collection instead of a scalar
        return None
    return ts.tz_convert(None).to_pydatetime()


def parse_date(value, now: Optional[dt.datetime] = None) -> dt.datetime:
    """Like try_parse_date, but falls back to now."""
    parsed = try_parse_date(value)
    if parsed is None:
        return now or utcnow()
    return parsed


def parse_optional_date(value) -> Optional[dt.datetime]:
    if not value:
        return None
    return parse_date(value)


def display_name(record) -> str:
    if isinstance(record, Mapping):
        name = pick(record, "companyName", "name")
        if name:
            return str(name)
    return "Unknown"


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

def map_startup_fields(record: Mapping) -> dict:
    """Full column set for a Startup row; absent fields get their defaults."""
    return {
        "name": str(pick(record, "companyName", "name", default="Unknown")),
        "founder": str(pick(record, "founderName", "founder", default="Unknown")),
        "email": _clean(pick(record, "founderEmail", "email")),
        "phone": _clean(pick(record, "founderMobile", "phone")),
        "sector": _text(pick(record, "sector")) or "Other",
        "stage": map_stage(pick(record, "stage", "status")),
        "description": _text(pick(record, "problemSolving", "solution", "description")),
        "website": _clean(record.get("website")),
        "funding_received": to_float(record.get("fundingReceived")),
        "employee_count": to_int(pick(record, "teamSize", "employeeCount")),
        "revenue_generated": to_float(record.get("totalRevenue")),
        "dpiit_no": _clean(record.get("dpiitNo")),
        "recognition_date": parse_optional_date(record.get("recognitionDate")),
        "bhaskar_id": _clean(record.get("bhaskarId")),
        "onboarded_date": parse_date(
            pick(record, "onboardedDate", "registeredDate", "createdAt")
        ),
        "graduated_date": parse_optional_date(record.get("graduatedDate")),
    }


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------

def map_achievement(entry: Mapping) -> dict:
    return {
        "title": str(entry.get("title") or "Achievement"),
        "description": _text(entry.get("description")),
        "type": _text(entry.get("type")) or "milestone",
        "date": parse_date(entry.get("date")),
        "media_url": _text(pick(entry, "mediaUrl", "media")),
        "is_graduated": bool(entry.get("isGraduated") or False),
    }


def map_revenue_progress(entry: Mapping) -> dict:
    return {
        "metric": "revenue",
        "value": to_float(entry.get("amount")),
        "date": parse_date(entry.get("date")),
        "notes": _text(pick(entry, "source", "description")),
    }


def progress_tracking_metrics(tracking: Mapping) -> list[dict]:
    """One progress row per metric present in a tracking snapshot."""
    now = utcnow()
    rows = []
    for metric in PROGRESS_TRACKING_METRICS:
        value = tracking.get(metric)
        if value is None:
            continue
        rows.append({
            "metric": metric,
            "value": to_float(value),
            "date": now,
            "notes": PROGRESS_TRACKING_NOTE,
        })
    return rows


# ---------------------------------------------------------------------------
# Meetings
# ---------------------------------------------------------------------------

def map_meeting_status(value) -> str:
    if value == "Completed":
        return MeetingStatus.COMPLETED
    if value == "Not Done":
        return MeetingStatus.NOT_DONE
    return MeetingStatus.SCHEDULED


def map_meeting(schedule: Mapping, kind: str) -> dict:
    completion = schedule.get("completionData")
    if not isinstance(completion, Mapping):
        completion = {}
    fields = {
        "kind": kind,
        "date": parse_date(schedule.get("date")),
        "status": map_meeting_status(schedule.get("status")),
        "completion_time": _clean(completion.get("time")),
        "stage_at_completion": _clean(completion.get("stageAtCompletion")),
        "feedback": _text(completion.get("feedback")),
    }
    if kind == MeetingKind.ONE_ON_ONE:
        fields.update({
            "time_slot": _clean(schedule.get("time")),
            "topic": _text(schedule.get("topic")),
            "facilitator": _text(completion.get("mentorName")),
            "action_items": _text(completion.get("progress")),
        })
    else:
        fields.update({
            "time_slot": _clean(schedule.get("timeSlot")),
            "topic": _text(schedule.get("agenda")),
            "facilitator": _text(completion.get("panelistName")),
        })
    return fields
