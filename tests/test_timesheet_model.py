"""Tests for the timesheet entity, no database involved."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from worklog.models import Activity, Project, Tag, Timesheet, TimesheetMeta, User
from worklog.core.dates import utcnow


BERLIN = ZoneInfo("Europe/Berlin")


def make_entry(**kwargs):
    kwargs.setdefault("user", User(username="susan", email="susan@example.com", hashed_password="x"))
    kwargs.setdefault("project", Project(name="Website"))
    kwargs.setdefault("activity", Activity(name="Development"))
    return Timesheet(**kwargs)


class TestTimesheetCreation:
    def test_new_entry_is_empty(self):
        entry = Timesheet()

        assert entry.id is None
        assert entry.begin is None
        assert entry.end is None
        assert entry.tags == []
        assert entry.meta_fields == []
        assert entry.exported is False
        assert entry.stored_rate is None
        assert entry.duration == 0

    def test_begin_sets_timezone(self):
        entry = Timesheet()
        entry.begin = datetime(2024, 1, 1, 9, 0, tzinfo=BERLIN)

        assert entry.timezone == "Europe/Berlin"

    def test_end_overwrites_timezone(self):
        entry = Timesheet(begin=datetime(2024, 1, 1, 9, 0, tzinfo=BERLIN))
        entry.end = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

        assert entry.timezone == "UTC"

    def test_naive_begin_gets_default_zone(self):
        entry = Timesheet(begin=datetime(2024, 1, 1, 9, 0))

        assert entry.begin.tzinfo is not None
        assert entry.timezone == "UTC"


class TestDuration:
    def test_stored_duration_is_used(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc),
            duration=5400,
        )

        assert entry.duration == 5400

    def test_stored_duration_is_not_recomputed(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc),
            duration=60,
        )

        assert entry.duration == 60

    def test_running_entry_reports_elapsed_time(self):
        begin = utcnow() - timedelta(minutes=10)
        entry = make_entry(begin=begin)

        before = int((utcnow() - begin).total_seconds())
        duration = entry.duration
        after = int((utcnow() - begin).total_seconds())

        assert before <= duration <= after + 1

    def test_running_duration_never_decreases(self):
        entry = make_entry(begin=utcnow() - timedelta(seconds=30))

        readings = [entry.duration for _ in range(5)]

        assert readings == sorted(readings)
        assert readings[0] >= 30

    def test_clearing_end_resets_duration_and_rate(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
            duration=3600,
            rate=120.0,
        )

        entry.end = None

        assert entry.is_running is True
        assert entry._duration == 0
        assert entry.stored_rate is None


class TestRate:
    def test_stored_rate_wins(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
            duration=3600,
            rate=42.5,
            fixed_rate=10.0,
        )

        assert entry.rate == 42.5

    def test_stored_zero_rate_is_kept(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
            duration=3600,
            hourly_rate=100.0,
            rate=0.0,
        )

        assert entry.rate == 0.0

    def test_fixed_rate_short_circuits(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
            duration=3600,
            hourly_rate=100.0,
        )
        entry.project.fixed_rate = 25.0

        assert entry.rate == 25.0

    def test_zero_fixed_rate_is_a_valid_rate(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
            duration=3600,
            fixed_rate=0.0,
            hourly_rate=100.0,
        )

        assert entry.rate == 0.0

    def test_hourly_rate_times_duration(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc),
            duration=5400,
        )
        entry.activity.hourly_rate = 80.0

        assert entry.rate == 120.0

    def test_user_hourly_rate_is_the_last_fallback(self):
        entry = make_entry(
            begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc),
            duration=1800,
        )
        entry.user.hourly_rate = 50.0

        assert entry.rate == 25.0


class TestTags:
    def test_add_tag_links_both_sides(self):
        entry = make_entry(begin=utcnow())
        tag = Tag(name="billable")

        entry.add_tag(tag)

        assert entry.tags == [tag]
        assert tag.timesheets == [entry]

    def test_add_tag_twice_is_a_noop(self):
        entry = make_entry(begin=utcnow())
        tag = Tag(name="billable")

        entry.add_tag(tag)
        entry.add_tag(tag)

        assert entry.tags == [tag]
        assert tag.timesheets == [entry]

    def test_tag_side_add_links_entry(self):
        entry = make_entry(begin=utcnow())
        tag = Tag(name="review")

        tag.add_timesheet(entry)

        assert entry.tags == [tag]

    def test_remove_tag_unlinks_both_sides(self):
        entry = make_entry(begin=utcnow())
        tag = Tag(name="billable")
        entry.add_tag(tag)

        entry.remove_tag(tag)

        assert entry.tags == []
        assert tag.timesheets == []

    def test_remove_absent_tag_is_a_noop(self):
        entry = make_entry(begin=utcnow())
        kept = Tag(name="kept")
        entry.add_tag(kept)

        entry.remove_tag(Tag(name="absent"))

        assert entry.tags == [kept]

    def test_tags_as_list(self):
        entry = make_entry(begin=utcnow())
        entry.add_tag(Tag(name="a"))
        entry.add_tag(Tag(name="b"))

        assert entry.tags_as_list() == ["a", "b"]


class TestMetaFields:
    def test_new_meta_field_is_appended_and_bound(self):
        entry = make_entry(begin=utcnow())
        meta = TimesheetMeta(name="ticket", value="ABC-1")

        entry.set_meta_field(meta)

        assert len(entry.meta_fields) == 1
        assert meta.timesheet is entry
        assert entry.get_meta_field("ticket") is meta

    def test_same_name_merges_into_existing(self):
        entry = make_entry(begin=utcnow())
        existing = TimesheetMeta(name="ticket", value="ABC-1")
        entry.set_meta_field(existing)

        entry.set_meta_field(TimesheetMeta(name="ticket", value="ABC-2", visible=True))

        assert len(entry.meta_fields) == 1
        assert entry.get_meta_field("ticket") is existing
        assert existing.value == "ABC-2"
        assert existing.visible is True

    def test_unknown_meta_field_is_none(self):
        entry = make_entry(begin=utcnow())

        assert entry.get_meta_field("missing") is None

    def test_visible_meta_fields(self):
        entry = make_entry(begin=utcnow())
        entry.set_meta_field(TimesheetMeta(name="hidden", value="1"))
        entry.set_meta_field(TimesheetMeta(name="shown", value="2", visible=True))

        assert [meta.name for meta in entry.get_visible_meta_fields()] == ["shown"]


class TestLocalization:
    def _loaded_entry(self):
        # mimics a row coming back from the database: UTC values, zone column set
        entry = make_entry()
        entry._begin = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        entry._end = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        entry.timezone = "Europe/Berlin"
        return entry

    def test_dates_are_moved_into_stored_zone(self):
        entry = self._loaded_entry()

        assert entry.begin == datetime(2024, 1, 1, 9, 0, tzinfo=BERLIN)
        assert entry.begin.utcoffset() == timedelta(hours=1)
        assert entry.end.utcoffset() == timedelta(hours=1)

    def test_localization_happens_once(self):
        entry = self._loaded_entry()
        first = entry.begin

        entry.timezone = "America/New_York"

        assert entry.begin is first
        assert entry.end.utcoffset() == timedelta(hours=1)

    @pytest.mark.parametrize("accessor", ["begin", "end"])
    def test_either_accessor_localizes_both(self, accessor):
        entry = self._loaded_entry()

        getattr(entry, accessor)

        assert entry._begin.utcoffset() == timedelta(hours=1)
        assert entry._end.utcoffset() == timedelta(hours=1)


class TestFixedOffsets:
    PLUS_TWO = timezone(timedelta(hours=2))

    def test_offset_is_stored_as_zone_name(self):
        entry = Timesheet(begin=datetime(2024, 1, 1, 9, 0, tzinfo=self.PLUS_TWO))

        assert entry.timezone == "+02:00"

    def test_negative_half_hour_offset(self):
        entry = Timesheet(begin=datetime(2024, 1, 1, 9, 0, tzinfo=timezone(-timedelta(hours=3, minutes=30))))

        assert entry.timezone == "-03:30"

    def test_loaded_entry_is_moved_into_offset(self):
        entry = make_entry()
        entry._begin = datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)
        entry._end = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        entry.timezone = "+02:00"

        assert entry.begin == datetime(2024, 1, 1, 9, 0, tzinfo=self.PLUS_TWO)
        assert entry.begin.utcoffset() == timedelta(hours=2)
        assert entry.end.utcoffset() == timedelta(hours=2)


class TestZeroLengthEntry:
    def test_stopped_zero_length_entry_has_no_duration(self):
        moment = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        entry = make_entry(begin=moment, end=moment, duration=0, hourly_rate=100.0)

        assert entry.duration == 0
        assert entry.rate == 0.0
