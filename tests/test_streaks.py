"""Tests for lessismore.streaks — activation, records, reconciliation."""

import threading
from datetime import datetime

import pytest

import lessismore.config as config
from lessismore.clock import FixedClock
from lessismore.db import Database
from lessismore.filters import FilterToggleStore
from lessismore.models import FilterType
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
def streaks(db, clock):
    s = StreakLedger(db, clock)
    s.load()
    return s


class TestActivation:
    def test_every_filter_starts_at_zero(self, streaks):
        for f in FilterType:
            assert streaks.current_streak_days(f) == 0
            assert streaks.longest_streak(f) == 0
            assert streaks.streak(f).is_active is False

    def test_streak_counts_calendar_days(self, streaks, clock):
        """Activated on day D, the streak reads 1, 2, 3 on D, D+1, D+2."""
        streaks.activate("reels")
        seen = []
        for _ in range(3):
            seen.append(streaks.current_streak_days("reels"))
            clock.advance(days=1)
        assert seen == [1, 2, 3]

    def test_activate_twice_keeps_start_date(self, streaks, clock):
        streaks.activate(FilterType.STORIES)
        start = streaks.streak(FilterType.STORIES).start_date
        clock.advance(days=2)
        streaks.activate(FilterType.STORIES)
        assert streaks.streak(FilterType.STORIES).start_date == start
        assert streaks.current_streak_days(FilterType.STORIES) == 3

    def test_week_long_reels_streak(self, streaks, clock):
        streaks.activate("reels")
        assert streaks.current_streak_days("reels") == 1
        clock.advance(days=6)
        assert streaks.current_streak_days("reels") == 7
        assert streaks.deactivate("reels") == 7
        assert streaks.longest_streak("reels") == 7
        assert streaks.streak("reels").start_date is None


class TestRecords:
    def test_shorter_streak_keeps_record(self, streaks, clock):
        streaks.activate("reels")
        clock.advance(days=4)
        assert streaks.deactivate("reels") == 5
        assert streaks.longest_streak("reels") == 5

        streaks.activate("reels")
        clock.advance(days=1)
        assert streaks.deactivate("reels") == 2
        assert streaks.longest_streak("reels") == 5

    def test_deactivate_inactive_returns_zero(self, streaks):
        assert streaks.deactivate("likes") == 0
        assert streaks.longest_streak("likes") == 0


class TestUnknownFilter:
    def test_mutations_are_noops(self, streaks):
        streaks.activate("shorts")
        assert streaks.deactivate("shorts") == 0
        assert streaks.all_active_streaks() == []

    def test_queries_return_zero(self, streaks):
        assert streaks.current_streak_days("shorts") == 0
        assert streaks.has_active_streak("shorts") is False


class TestRanking:
    def test_best_active_streak_none(self, streaks):
        assert streaks.best_active_streak() is None

    def test_best_and_all(self, streaks, clock):
        streaks.activate("stories")
        clock.advance(days=2)
        streaks.activate("reels")
        streaks.activate("likes")
        assert streaks.best_active_streak() == (FilterType.STORIES, 3)
        assert streaks.all_active_streaks() == [
            (FilterType.STORIES, 3),
            (FilterType.REELS, 1),
            (FilterType.LIKES, 1),
        ]

    def test_ties_go_to_catalog_order(self, streaks):
        streaks.activate("messages")
        streaks.activate("explore")
        assert streaks.best_active_streak() == (FilterType.EXPLORE, 1)


class TestSync:
    def test_sync_activates_and_deactivates(self, streaks, db, clock):
        toggles = FilterToggleStore(db)
        streaks.activate("likes")
        toggles.set_enabled(FilterType.REELS, True)
        clock.advance(days=1)

        streaks.sync_all(toggles)
        assert streaks.streak("reels").is_active is True
        assert streaks.streak("likes").is_active is False
        assert streaks.longest_streak("likes") == 2

    def test_sync_single_filter_noop_when_consistent(self, streaks):
        streaks.sync_with_external_state("reels", False)
        assert streaks.streak("reels").is_active is False
        streaks.activate("reels")
        streaks.sync_with_external_state("reels", True)
        assert streaks.current_streak_days("reels") == 1


class TestPersistence:
    def test_round_trip(self, streaks, db, clock):
        streaks.activate("reels")
        clock.advance(days=3)
        streaks.deactivate("reels")
        streaks.activate("stories")

        restored = StreakLedger(db, clock)
        restored.load()
        assert restored.longest_streak("reels") == 4
        assert restored.streak("stories").is_active is True
        assert restored.current_streak_days("stories") == 1

    def test_corrupt_data_is_fresh_start(self, db, clock):
        db.set(config.STREAKS_KEY, "{not json")
        s = StreakLedger(db, clock)
        s.load()
        assert s.best_active_streak() is None
        assert len([f for f in FilterType if s.longest_streak(f) == 0]) == len(FilterType)

    def test_missing_filters_get_zero_state(self, db, clock):
        db.set(config.STREAKS_KEY, '{"reels": {"filter_type": "reels", "start_date": null, '
                                   '"is_active": false, "longest_streak": 9}}')
        s = StreakLedger(db, clock)
        s.load()
        assert s.longest_streak("reels") == 9
        assert s.longest_streak("messages") == 0


class TestConcurrency:
    def test_toggling_from_many_threads(self, streaks, clock):
        """Each filter flipped on and off from its own thread ends consistent."""
        def worker(filter_type):
            for _ in range(50):
                streaks.activate(filter_type)
                streaks.deactivate(filter_type)
            streaks.activate(filter_type)

        threads = [threading.Thread(target=worker, args=(f,)) for f in FilterType]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [f for f, days in streaks.all_active_streaks()] == list(FilterType)
        assert all(streaks.longest_streak(f) == 1 for f in FilterType)
