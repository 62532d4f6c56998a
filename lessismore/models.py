"""Domain records: usage categories, the filter catalog, day/week buckets,
streaks, time-saved statistics and the widget snapshot.

Day arithmetic is by calendar day throughout, so a streak, a time-saved total
and a chart point all move forward together at local midnight.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from lessismore.clock import day_key, days_between, weekday_label


class UsageCategory(str, Enum):
    FEED = "Feed"
    REELS = "Reels"
    STORIES = "Stories"
    MESSAGES = "Messages"
    EXPLORE = "Explore"
    OTHER = "Other"


class FilterType(str, Enum):
    """Closed catalog of content filters, in definition order."""

    REELS = "reels"
    EXPLORE = "explore"
    STORIES = "stories"
    SUGGESTIONS = "suggestions"
    LIKES = "likes"
    FOLLOWING = "following"
    MESSAGES = "messages"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def daily_minutes_saved(self) -> int:
        return _DAILY_MINUTES_SAVED[self]

    @property
    def color(self) -> str:
        return _COLORS[self]

    @classmethod
    def parse(cls, value) -> "FilterType | None":
        """Return the matching filter, or None for an unknown id."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


_DISPLAY_NAMES = {
    FilterType.REELS: "Reels",
    FilterType.EXPLORE: "Explore",
    FilterType.STORIES: "Stories",
    FilterType.SUGGESTIONS: "Suggestions",
    FilterType.LIKES: "Like Counter",
    FilterType.FOLLOWING: "Following Only Mode",
    FilterType.MESSAGES: "Messages",
}

# Estimated average minutes a day each filter keeps the user off the feed
_DAILY_MINUTES_SAVED = {
    FilterType.REELS: 15,
    FilterType.STORIES: 10,
    FilterType.EXPLORE: 8,
    FilterType.SUGGESTIONS: 5,
    FilterType.LIKES: 3,
    FilterType.FOLLOWING: 5,
    FilterType.MESSAGES: 4,
}

_COLORS = {
    FilterType.REELS: "pink",
    FilterType.STORIES: "purple",
    FilterType.EXPLORE: "orange",
    FilterType.SUGGESTIONS: "blue",
    FilterType.LIKES: "red",
    FilterType.FOLLOWING: "green",
    FilterType.MESSAGES: "cyan",
}


def format_duration(seconds: int) -> str:
    """Format seconds as '1h 5m', '12m' or '0m'."""
    hours, rem = divmod(int(seconds), 3600)
    minutes = rem // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return "0m"


def format_duration_short(seconds: int) -> str:
    minutes = int(seconds) // 60
    if minutes >= 60:
        hours, rem = divmod(minutes, 60)
        return f"{hours}h {rem}m" if rem else f"{hours}h"
    return f"{minutes}m"


def format_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(int(total_minutes), 60)
    if hours > 0:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


@dataclass
class DayBucket:
    """One calendar day's accumulated seconds per category."""
    day: date
    seconds_by_category: dict[UsageCategory, int] = field(default_factory=dict)

    @property
    def day_key(self) -> str:
        return day_key(self.day)

    @property
    def weekday(self) -> str:
        return weekday_label(self.day)

    @property
    def total_seconds(self) -> int:
        return sum(self.seconds_by_category.values())

    @property
    def formatted_time(self) -> str:
        return format_duration(self.total_seconds)

    @property
    def formatted_time_short(self) -> str:
        return format_duration_short(self.total_seconds)

    def add(self, category: UsageCategory, seconds: int = 1) -> None:
        if seconds <= 0:
            return
        self.seconds_by_category[category] = self.seconds_by_category.get(category, 0) + seconds

    def reset(self, day: date) -> None:
        self.day = day
        self.seconds_by_category = {}

    def copy(self) -> "DayBucket":
        return DayBucket(day=self.day, seconds_by_category=dict(self.seconds_by_category))

    def to_dict(self) -> dict:
        return {
            "day": self.day_key,
            "seconds": {c.value: s for c, s in self.seconds_by_category.items() if s > 0},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayBucket":
        seconds = {UsageCategory(k): int(v) for k, v in data["seconds"].items() if int(v) > 0}
        return cls(day=date.fromisoformat(data["day"]), seconds_by_category=seconds)


@dataclass
class MonthBucket:
    """Accumulated seconds for one week-of-month partition."""
    week_number: int
    seconds_by_category: dict[UsageCategory, int] = field(default_factory=dict)

    @property
    def total_seconds(self) -> int:
        return sum(self.seconds_by_category.values())

    @property
    def formatted_time(self) -> str:
        return format_duration(self.total_seconds)

    def add(self, category: UsageCategory, seconds: int) -> None:
        if seconds <= 0:
            return
        self.seconds_by_category[category] = self.seconds_by_category.get(category, 0) + seconds

    def copy(self) -> "MonthBucket":
        return MonthBucket(week_number=self.week_number, seconds_by_category=dict(self.seconds_by_category))

    def to_dict(self) -> dict:
        return {
            "week": self.week_number,
            "seconds": {c.value: s for c, s in self.seconds_by_category.items() if s > 0},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MonthBucket":
        seconds = {UsageCategory(k): int(v) for k, v in data["seconds"].items() if int(v) > 0}
        return cls(week_number=int(data["week"]), seconds_by_category=seconds)


@dataclass
class FilterStreak:
    filter_id: str
    start_date: datetime | None = None
    is_active: bool = False
    longest_streak: int = 0

    def current_streak_days(self, now: datetime) -> int:
        """Days the filter has been on, counting the activation day as day 1."""
        if not self.is_active or self.start_date is None:
            return 0
        return max(0, days_between(self.start_date, now)) + 1

    def to_dict(self) -> dict:
        return {
            "filter_type": self.filter_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "is_active": self.is_active,
            "longest_streak": self.longest_streak,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FilterStreak":
        start = data.get("start_date")
        start_date = datetime.fromisoformat(start) if start else None
        return cls(
            filter_id=data["filter_type"],
            start_date=start_date,
            is_active=start_date is not None,
            longest_streak=max(0, int(data.get("longest_streak", 0))),
        )


@dataclass
class FilterStatistic:
    filter_type: FilterType
    daily_minutes_saved: int
    activation_date: datetime | None
    color: str
    is_simulated: bool

    def total_minutes_saved(self, now: datetime) -> int:
        """Minutes accrued over the calendar days since activation (today not yet counted)."""
        if self.activation_date is None:
            return 0
        days = days_between(self.activation_date, now)
        return max(0, days * self.daily_minutes_saved)

    def total_hours_saved(self, now: datetime) -> float:
        return self.total_minutes_saved(now) / 60.0

    def formatted_time(self, now: datetime) -> str:
        return format_minutes(self.total_minutes_saved(now))


@dataclass
class WidgetSnapshot:
    """Flat record handed to the widget surface."""
    today_seconds: int
    yesterday_seconds: int
    weekly_total_seconds: int
    percentage_change: float
    best_streak_days: int
    best_streak_filter_name: str
    best_streak_personal_record: int
    filter_streak_days: dict[str, int]
    last_update: str
