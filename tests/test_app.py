"""Tests for lessismore.app — service wiring and filter toggling."""

from datetime import datetime

import pytest

import lessismore.config as config
from lessismore.app import build_services
from lessismore.clock import FixedClock
from lessismore.db import Database
from lessismore.filters import FilterToggleStore
from lessismore.models import FilterType, UsageCategory
from lessismore.snapshot import FileSnapshotSink
from lessismore.streaks import StreakLedger


@pytest.fixture
def db(tmp_path):
    d = Database(path=tmp_path / "test.db")
    d.open()
    yield d
    d.close()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 9, 0))


@pytest.fixture
def sink(tmp_path):
    return FileSnapshotSink(path=tmp_path / "snap.json", marker=tmp_path / "refresh")


@pytest.fixture
def services(db, clock, sink):
    return build_services(db, clock, sink)


class TestSetFilter:
    def test_enable_starts_streak_and_stamps_activation(self, services, clock):
        assert services.set_filter(FilterType.REELS, True) == 0
        assert services.toggles.is_enabled(FilterType.REELS)
        assert services.streaks.current_streak_days(FilterType.REELS) == 1
        assert services.toggles.activation_date(FilterType.REELS) == clock.now()

    def test_disable_returns_lost_days(self, services, clock):
        services.set_filter(FilterType.STORIES, True)
        clock.advance(days=3)
        assert services.set_filter(FilterType.STORIES, False) == 4
        assert services.streaks.longest_streak(FilterType.STORIES) == 4
        assert not services.toggles.is_enabled(FilterType.STORIES)

    def test_disabling_last_filter_returns_to_simulation(self, services):
        services.set_filter(FilterType.REELS, True)
        assert services.statistics.toggle_simulation_mode() is False
        services.set_filter(FilterType.REELS, False)
        assert services.statistics.is_simulation_mode is True


class TestLocation:
    def test_report_location_stores_category(self, services, db):
        assert services.report_location("https://www.instagram.com/reels/abc/") == UsageCategory.REELS
        assert db.get(config.CURRENT_CATEGORY_KEY) == "Reels"


class TestBuild:
    def test_streaks_reconciled_with_toggles(self, db, clock, sink):
        """A filter flipped while nothing was running is picked up on build."""
        FilterToggleStore(db).set_enabled(FilterType.LIKES, True)
        services = build_services(db, clock, sink)
        assert services.streaks.has_active_streak(FilterType.LIKES)

    def test_refresh_picks_up_other_writers(self, services, db, clock):
        other = StreakLedger(db, clock)
        other.load()
        other.activate(FilterType.EXPLORE)
        assert not services.streaks.has_active_streak(FilterType.EXPLORE)
        services.refresh()
        assert services.streaks.has_active_streak(FilterType.EXPLORE)

    def test_publisher_uses_given_sink(self, services, sink):
        services.publisher.publish()
        assert sink.read() is not None
