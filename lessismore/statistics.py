"""Statistics projector — time-saved estimates derived from the filter state.

Query-only: the one piece of state is the simulation-mode display flag. When
no filter is on, every view falls back to a simulated week with all filters
active.
"""

import logging
from datetime import date, datetime, timedelta

import lessismore.config as config
from lessismore.clock import days_between
from lessismore.filters import FilterToggleStore
from lessismore.models import FilterStatistic, FilterType, format_minutes

log = logging.getLogger(__name__)


class StatisticsProjector:
    def __init__(self, toggles: FilterToggleStore, clock):
        self.toggles = toggles
        self.clock = clock
        self.is_simulation_mode = True

    # ── datasets ────────────────────────────────────────────────────────

    def simulated_statistics(self) -> list[FilterStatistic]:
        """Every filter assumed active for exactly SIMULATED_DAYS days."""
        activated = self.clock.now() - timedelta(days=config.SIMULATED_DAYS)
        return [
            FilterStatistic(
                filter_type=f,
                daily_minutes_saved=f.daily_minutes_saved,
                activation_date=activated,
                color=f.color,
                is_simulated=True,
            )
            for f in FilterType
        ]

    def real_statistics(self) -> list[FilterStatistic]:
        stats = []
        for f in self.toggles.enabled_filters():
            stats.append(FilterStatistic(
                filter_type=f,
                daily_minutes_saved=f.daily_minutes_saved,
                activation_date=self.activation_date(f),
                color=f.color,
                is_simulated=False,
            ))
        return stats

    @property
    def has_real_data(self) -> bool:
        return bool(self.toggles.enabled_filters())

    def display_statistics(self) -> list[FilterStatistic]:
        if self.is_simulation_mode:
            return self.simulated_statistics()
        stats = self.real_statistics()
        return stats or self.simulated_statistics()

    def reload(self) -> None:
        """Re-check real data; with none, pin the view to simulation mode."""
        if not self.has_real_data and not self.is_simulation_mode:
            log.info("no active filters, switching statistics to simulation mode")
            self.is_simulation_mode = True

    def toggle_simulation_mode(self) -> bool:
        """Flip the display mode. Leaving simulation needs at least one active filter."""
        if self.is_simulation_mode and not self.has_real_data:
            return self.is_simulation_mode
        self.is_simulation_mode = not self.is_simulation_mode
        log.info("statistics simulation mode %s", "on" if self.is_simulation_mode else "off")
        return self.is_simulation_mode

    # ── activation dates ────────────────────────────────────────────────

    def activation_date(self, filter_type: FilterType) -> datetime | None:
        """Recorded activation date; an enabled filter without one is stamped now."""
        recorded = self.toggles.activation_date(filter_type)
        if recorded is None and self.toggles.is_enabled(filter_type):
            recorded = self.clock.now()
            self.toggles.set_activation_date(filter_type, recorded)
        return recorded

    def record_filter_activation(self, filter_type: FilterType) -> None:
        if self.toggles.activation_date(filter_type) is None:
            self.toggles.set_activation_date(filter_type, self.clock.now())
        self.reload()

    def reset_filter_activation(self, filter_type: FilterType) -> None:
        self.toggles.clear_activation_date(filter_type)
        self.reload()

    # ── aggregates ──────────────────────────────────────────────────────

    def _daily_total(self, stats: list[FilterStatistic]) -> int:
        return sum(s.daily_minutes_saved for s in stats)

    @property
    def total_minutes_saved(self) -> int:
        now = self.clock.now()
        return sum(s.total_minutes_saved(now) for s in self.display_statistics())

    @property
    def total_hours_saved(self) -> float:
        return self.total_minutes_saved / 60.0

    @property
    def formatted_total_time(self) -> str:
        return format_minutes(self.total_minutes_saved)

    @property
    def active_filters_count(self) -> int:
        return len(self.display_statistics())

    @property
    def weekly_minutes_saved(self) -> int:
        return self._daily_total(self.display_statistics()) * config.WEEK_DAYS

    @property
    def monthly_minutes_saved(self) -> int:
        return self._daily_total(self.display_statistics()) * config.MONTH_DAYS

    def sorted_statistics(self) -> list[FilterStatistic]:
        now = self.clock.now()
        return sorted(self.display_statistics(), key=lambda s: s.total_minutes_saved(now), reverse=True)

    # ── chart ───────────────────────────────────────────────────────────

    def daily_chart_data(self) -> list[tuple[date, int]]:
        """Cumulative minutes saved at each of the last CHART_POINTS days, oldest first."""
        today = self.clock.now().date()
        points = [today - timedelta(days=offset) for offset in range(config.CHART_POINTS - 1, -1, -1)]
        stats = self.display_statistics()

        if stats and stats[0].is_simulated:
            daily_total = self._daily_total(stats)
            return [(day, daily_total * index) for index, day in enumerate(points, start=1)]

        data = []
        for day in points:
            minutes = 0
            for s in stats:
                if s.activation_date is None or s.activation_date.date() > day:
                    continue
                minutes += max(0, days_between(s.activation_date, day)) * s.daily_minutes_saved
            data.append((day, minutes))
        return data

    def should_show_chart(self) -> bool:
        if self.is_simulation_mode or not self.has_real_data:
            return True
        data = self.daily_chart_data()
        return bool(data) and data[-1][1] > 0
