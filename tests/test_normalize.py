"""
Unit tests for incubator.normalize: stage table, tolerant dates, numeric
coercion and the legacy field aliases.
"""

import datetime as dt
import unittest

from incubator.models import MeetingKind, MeetingStatus, Stage
from incubator.normalize import (
    display_name,
    map_achievement,
    map_meeting,
    map_revenue_progress,
    map_stage,
    map_startup_fields,
    parse_date,
    parse_optional_date,
    pick,
    progress_tracking_metrics,
    to_float,
    try_parse_date,
    to_int,
    utcnow,
)


class TestMapStage(unittest.TestCase):

    def test_known_labels(self):
        for label in ("S0", "S1", "S2", "S3", "Active", "Onboarded"):
            self.assertEqual(map_stage(label), Stage.ONBOARDED, label)
        self.assertEqual(map_stage("Graduated"), Stage.GRADUATED)
        self.assertEqual(map_stage("Inactive"), Stage.INACTIVE)
        self.assertEqual(map_stage("Rejected"), Stage.INACTIVE)

    def test_always_returns_an_import_stage(self):
        for value in ("bogus", "", "graduated", "One-on-One", None, 3, ["S1"], {"stage": "S2"}):
            self.assertIn(map_stage(value), Stage.IMPORTED, repr(value))

    def test_unknown_defaults_to_onboarded(self):
        self.assertEqual(map_stage("bogus"), Stage.ONBOARDED)
        self.assertEqual(map_stage(""), Stage.ONBOARDED)
        self.assertEqual(map_stage(None), Stage.ONBOARDED)

    def test_whitespace_ignored(self):
        self.assertEqual(map_stage("  Graduated "), Stage.GRADUATED)


class TestParseDate(unittest.TestCase):

    def assertAboutNow(self, value):
        self.assertIsInstance(value, dt.datetime)
        self.assertLess(abs((value - utcnow()).total_seconds()), 5)

    def test_invalid_and_missing_resolve_to_now(self):
        for value in ("not-a-date", None, "", "2024-13-45", {"a": 1}, [1, 2], float("nan")):
            self.assertAboutNow(parse_date(value))

    def test_explicit_now_is_used_as_fallback(self):
        now = dt.datetime(2020, 1, 1, 12, 0)
        self.assertEqual(parse_date("garbage", now=now), now)

    def test_iso_date(self):
        self.assertEqual(parse_date("2024-03-01"), dt.datetime(2024, 3, 1))

    def test_timezone_converted_to_naive_utc(self):
        self.assertEqual(parse_date("2024-03-01T10:30:00Z"), dt.datetime(2024, 3, 1, 10, 30))
        self.assertEqual(
            parse_date("2024-03-01T10:30:00+05:30"), dt.datetime(2024, 3, 1, 5, 0)
        )

    def test_epoch_milliseconds(self):
        self.assertEqual(parse_date(1709251200000), dt.datetime(2024, 3, 1))

    def test_datetime_passthrough(self):
        value = dt.datetime(2023, 7, 4, 8, 15)
        self.assertEqual(parse_date(value), value)

    def test_optional_date(self):
        self.assertIsNone(parse_optional_date(None))
        self.assertIsNone(parse_optional_date(""))
        self.assertEqual(parse_optional_date("2024-06-30"), dt.datetime(2024, 6, 30))

    def test_try_parse_date_has_no_fallback(self):
        for value in (None, "", "not-a-date", {"a": 1}, True):
            self.assertIsNone(try_parse_date(value), repr(value))
        self.assertEqual(try_parse_date("2024-03-01"), dt.datetime(2024, 3, 1))


class TestNumbers(unittest.TestCase):

    def test_to_float(self):
        self.assertEqual(to_float("250000"), 250000.0)
        self.assertEqual(to_float(" 12.5 "), 12.5)
        self.assertEqual(to_float("1,200"), 1200.0)
        self.assertEqual(to_float(7), 7.0)

    def test_to_float_defaults_to_zero(self):
        for value in ("abc", "", None, True, {"x": 1}, [1], "12abc"):
            self.assertEqual(to_float(value), 0.0, repr(value))

    def test_to_int_truncates(self):
        self.assertEqual(to_int("12.7"), 12)
        self.assertEqual(to_int("-3.9"), -3)
        self.assertEqual(to_int("n/a"), 0)
        self.assertEqual(to_int("inf"), 0)


class TestPick(unittest.TestCase):

    def test_first_non_empty(self):
        record = {"companyName": "", "name": "Acme"}
        self.assertEqual(pick(record, "companyName", "name"), "Acme")

    def test_default(self):
        self.assertEqual(pick({}, "a", "b", default="x"), "x")
        self.assertEqual(pick({"a": 0, "b": None}, "a", "b", default="x"), "x")

    def test_display_name(self):
        self.assertEqual(display_name({"companyName": "Acme"}), "Acme")
        self.assertEqual(display_name({"name": "Beta"}), "Beta")
        self.assertEqual(display_name({}), "Unknown")
        self.assertEqual(display_name("not a record"), "Unknown")


class TestStartupFields(unittest.TestCase):

    def test_legacy_aliases(self):
        fields = map_startup_fields({
            "companyName": "Acme",
            "founderName": "Asha",
            "founderEmail": " asha@acme.io ",
            "founderMobile": "98450",
            "problemSolving": "Robots",
            "teamSize": "6",
            "fundingReceived": "1000.5",
            "totalRevenue": "20",
            "status": "Graduated",
            "registeredDate": "2024-01-02",
            "graduatedDate": "2024-09-01",
            "dpiitNo": "DIPP123",
            "recognitionDate": "2024-02-02",
        })
        self.assertEqual(fields["name"], "Acme")
        self.assertEqual(fields["founder"], "Asha")
        self.assertEqual(fields["email"], "asha@acme.io")
        self.assertEqual(fields["phone"], "98450")
        self.assertEqual(fields["description"], "Robots")
        self.assertEqual(fields["employee_count"], 6)
        self.assertEqual(fields["funding_received"], 1000.5)
        self.assertEqual(fields["revenue_generated"], 20.0)
        self.assertEqual(fields["stage"], Stage.GRADUATED)
        self.assertEqual(fields["onboarded_date"], dt.datetime(2024, 1, 2))
        self.assertEqual(fields["graduated_date"], dt.datetime(2024, 9, 1))
        self.assertEqual(fields["dpiit_no"], "DIPP123")
        self.assertEqual(fields["recognition_date"], dt.datetime(2024, 2, 2))

    def test_defaults_for_empty_record(self):
        fields = map_startup_fields({})
        self.assertEqual(fields["name"], "Unknown")
        self.assertEqual(fields["founder"], "Unknown")
        self.assertIsNone(fields["email"])
        self.assertEqual(fields["sector"], "Other")
        self.assertEqual(fields["stage"], Stage.ONBOARDED)
        self.assertEqual(fields["funding_received"], 0.0)
        self.assertEqual(fields["employee_count"], 0)
        self.assertIsNone(fields["graduated_date"])
        self.assertIsInstance(fields["onboarded_date"], dt.datetime)

    def test_stage_preferred_over_status(self):
        fields = map_startup_fields({"stage": "Inactive", "status": "Graduated"})
        self.assertEqual(fields["stage"], Stage.INACTIVE)


class TestChildFields(unittest.TestCase):

    def test_achievement_defaults(self):
        fields = map_achievement({"date": "2024-03-01", "media": "http://img"})
        self.assertEqual(fields["title"], "Achievement")
        self.assertEqual(fields["type"], "milestone")
        self.assertEqual(fields["media_url"], "http://img")
        self.assertFalse(fields["is_graduated"])

    def test_revenue_progress(self):
        fields = map_revenue_progress({"amount": "500", "date": "2024-02-01", "description": "Q1"})
        self.assertEqual(fields["metric"], "revenue")
        self.assertEqual(fields["value"], 500.0)
        self.assertEqual(fields["notes"], "Q1")

    def test_non_text_values_become_strings(self):
        fields = map_achievement({"title": "Grant", "description": {"x": 1}, "type": 5, "media": [1, 2]})
        self.assertEqual(fields["description"], '{"x": 1}')
        self.assertEqual(fields["type"], "5")
        self.assertEqual(fields["media_url"], "[1, 2]")

        fields = map_startup_fields({"companyName": "Odd", "description": 42, "sector": ["AI"]})
        self.assertEqual(fields["description"], "42")
        self.assertEqual(fields["sector"], '["AI"]')

    def test_progress_tracking_skips_missing(self):
        rows = progress_tracking_metrics({"revenue": 10, "funding": None, "customers": "3"})
        self.assertEqual([r["metric"] for r in rows], ["revenue", "customers"])
        self.assertEqual(rows[1]["value"], 3.0)


class TestMeetingFields(unittest.TestCase):

    def test_smc_completed(self):
        fields = map_meeting({
            "date": "2024-04-10",
            "timeSlot": "10:00 AM - 11:00 AM",
            "agenda": "Quarterly review",
            "status": "Completed",
            "completionData": {
                "time": "10:45 AM",
                "panelistName": "Dr. Sen",
                "feedback": "Good",
                "stageAtCompletion": "S2",
            },
        }, MeetingKind.SMC)
        self.assertEqual(fields["status"], MeetingStatus.COMPLETED)
        self.assertEqual(fields["time_slot"], "10:00 AM - 11:00 AM")
        self.assertEqual(fields["completion_time"], "10:45 AM")
        self.assertEqual(fields["stage_at_completion"], "S2")
        self.assertEqual(fields["facilitator"], "Dr. Sen")
        self.assertEqual(fields["topic"], "Quarterly review")
        self.assertEqual(fields["date"], dt.datetime(2024, 4, 10))

    def test_one_on_one_scheduled_has_no_completion(self):
        fields = map_meeting({"date": "2024-04-12", "time": "02:00 PM", "topic": "Hiring"},
                             MeetingKind.ONE_ON_ONE)
        self.assertEqual(fields["status"], MeetingStatus.SCHEDULED)
        self.assertEqual(fields["time_slot"], "02:00 PM")
        self.assertEqual(fields["topic"], "Hiring")
        self.assertIsNone(fields["completion_time"])
        self.assertIsNone(fields["facilitator"])

    def test_not_done_status(self):
        fields = map_meeting({"status": "Not Done"}, MeetingKind.SMC)
        self.assertEqual(fields["status"], MeetingStatus.NOT_DONE)

    def test_non_text_completion_values_become_strings(self):
        fields = map_meeting({
            "topic": 7,
            "completionData": {"feedback": {"score": 4}, "mentorName": 3, "progress": ["a", "b"]},
        }, MeetingKind.ONE_ON_ONE)
        self.assertEqual(fields["topic"], "7")
        self.assertEqual(fields["feedback"], '{"score": 4}')
        self.assertEqual(fields["facilitator"], "3")
        self.assertEqual(fields["action_items"], '["a", "b"]')

    def test_completion_data_must_be_an_object(self):
        fields = map_meeting({"status": "Completed", "completionData": ["10:45 AM"]}, MeetingKind.SMC)
        self.assertIsNone(fields["completion_time"])
        self.assertIsNone(fields["feedback"])


if __name__ == "__main__":
    unittest.main()
