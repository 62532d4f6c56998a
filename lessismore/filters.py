"""Filter toggle store — the source of truth for which filters are on.

Also keeps the first-activation timestamp per filter, used by the
statistics projector to estimate time saved.
"""

import logging
from datetime import datetime

from lessismore.db import Database
from lessismore.models import FilterType

log = logging.getLogger(__name__)


def _enabled_key(filter_type: FilterType) -> str:
    return f"filter_{filter_type.value}"


def _activation_key(filter_type: FilterType) -> str:
    return f"filter_activation_{filter_type.value}"


class FilterToggleStore:
    def __init__(self, db: Database):
        self.db = db

    def is_enabled(self, filter_type: FilterType) -> bool:
        return self.db.get_bool(_enabled_key(filter_type))

    def set_enabled(self, filter_type: FilterType, enabled: bool) -> None:
        self.db.set_bool(_enabled_key(filter_type), enabled)
        log.info("filter %s toggled %s", filter_type.value, "on" if enabled else "off")

    def enabled_filters(self) -> list[FilterType]:
        return [f for f in FilterType if self.is_enabled(f)]

    # ── activation dates ────────────────────────────────────────────────

    def activation_date(self, filter_type: FilterType) -> datetime | None:
        raw = self.db.get(_activation_key(filter_type))
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            log.warning("discarding malformed activation date for %s: %r", filter_type.value, raw)
            return None

    def set_activation_date(self, filter_type: FilterType, when: datetime) -> None:
        self.db.set(_activation_key(filter_type), when.isoformat())

    def clear_activation_date(self, filter_type: FilterType) -> None:
        self.db.delete(_activation_key(filter_type))
