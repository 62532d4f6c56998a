"""Tests for lessismore.models — buckets, streak maths, formatting."""

from datetime import date, datetime, timedelta

import pytest

from lessismore.models import (
    DayBucket,
    FilterStatistic,
    FilterStreak,
    FilterType,
    MonthBucket,
    UsageCategory,
    format_duration,
    format_duration_short,
    format_minutes,
)


class TestFormatting:
    @pytest.mark.parametrize("seconds,expected", [
        (0, "0m"),
        (59, "0m"),
        (60, "1m"),
        (3600, "1h 0m"),
        (3 * 3600 + 25 * 60 + 10, "3h 25m"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_duration_short(self):
        assert format_duration_short(45 * 60) == "45m"
        assert format_duration_short(3600) == "1h"
        assert format_duration_short(3600 + 5 * 60) == "1h 5m"

    def test_format_minutes(self):
        assert format_minutes(42) == "42min"
        assert format_minutes(125) == "2h 5min"


class TestDayBucket:
    def test_total_is_sum_of_categories(self):
        b = DayBucket(day=date(2026, 3, 2))
        b.add(UsageCategory.REELS, 30)
        b.add(UsageCategory.FEED, 12)
        b.add(UsageCategory.REELS)
        assert b.seconds_by_category[UsageCategory.REELS] == 31
        assert b.total_seconds == 43

    def test_zero_seconds_leave_no_key(self):
        b = DayBucket(day=date(2026, 3, 2))
        b.add(UsageCategory.EXPLORE, 0)
        assert UsageCategory.EXPLORE not in b.seconds_by_category

    def test_reset_redates_and_clears(self):
        b = DayBucket(day=date(2026, 3, 2), seconds_by_category={UsageCategory.FEED: 5})
        b.reset(date(2026, 3, 9))
        assert b.day == date(2026, 3, 9)
        assert b.total_seconds == 0

    def test_labels(self):
        b = DayBucket(day=date(2026, 3, 2))
        assert b.day_key == "2026-03-02"
        assert b.weekday == "Mon"

    def test_dict_round_trip(self):
        b = DayBucket(day=date(2026, 3, 2), seconds_by_category={UsageCategory.STORIES: 90})
        assert DayBucket.from_dict(b.to_dict()) == b

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            DayBucket.from_dict({"day": "2026-03-02", "seconds": {"Shorts": 4}})


class TestMonthBucket:
    def test_total(self):
        m = MonthBucket(week_number=2)
        m.add(UsageCategory.FEED, 10)
        m.add(UsageCategory.MESSAGES, 5)
        assert m.total_seconds == 15
        assert MonthBucket.from_dict(m.to_dict()) == m


class TestFilterStreak:
    def test_inactive_is_zero(self):
        s = FilterStreak(filter_id="reels")
        assert s.current_streak_days(datetime(2026, 3, 2)) == 0

    def test_first_day_counts_as_one(self):
        start = datetime(2026, 3, 2, 23, 50)
        s = FilterStreak(filter_id="reels", start_date=start, is_active=True)
        assert s.current_streak_days(start) == 1
        assert s.current_streak_days(datetime(2026, 3, 3, 0, 5)) == 2

    def test_active_flag_follows_start_date(self):
        s = FilterStreak(filter_id="stories", start_date=datetime(2026, 3, 2, 8), is_active=True,
                         longest_streak=4)
        restored = FilterStreak.from_dict(s.to_dict())
        assert restored == s
        inactive = FilterStreak.from_dict({"filter_type": "likes", "start_date": None,
                                           "is_active": True, "longest_streak": 2})
        assert inactive.is_active is False


class TestFilterType:
    def test_catalog_order(self):
        assert [f.value for f in FilterType] == [
            "reels", "explore", "stories", "suggestions", "likes", "following", "messages",
        ]

    def test_parse(self):
        assert FilterType.parse("Reels") is FilterType.REELS
        assert FilterType.parse(FilterType.LIKES) is FilterType.LIKES
        assert FilterType.parse("shorts") is None

    def test_lookup_tables(self):
        assert FilterType.REELS.daily_minutes_saved == 15
        assert FilterType.LIKES.display_name == "Like Counter"
        assert FilterType.MESSAGES.color == "cyan"


class TestFilterStatistic:
    def test_counts_calendar_days(self):
        """Activated late evening, a day is credited right after midnight."""
        stat = FilterStatistic(FilterType.REELS, 15, datetime(2026, 3, 2, 23, 50), "pink", False)
        assert stat.total_minutes_saved(datetime(2026, 3, 2, 23, 59)) == 0
        assert stat.total_minutes_saved(datetime(2026, 3, 3, 0, 10)) == 15

    def test_total_minutes_saved(self):
        now = datetime(2026, 3, 9, 12)
        stat = FilterStatistic(FilterType.REELS, 15, now - timedelta(days=3), "pink", False)
        assert stat.total_minutes_saved(now) == 45
        assert stat.total_hours_saved(now) == 0.75
        assert stat.formatted_time(now) == "45min"

    def test_future_activation_floors_at_zero(self):
        now = datetime(2026, 3, 9, 12)
        stat = FilterStatistic(FilterType.REELS, 15, now + timedelta(days=2), "pink", False)
        assert stat.total_minutes_saved(now) == 0

    def test_no_activation_date(self):
        stat = FilterStatistic(FilterType.REELS, 15, None, "pink", False)
        assert stat.total_minutes_saved(datetime(2026, 3, 9)) == 0
