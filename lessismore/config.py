"""Central configuration for the lessismore accounting daemon."""

import os
from pathlib import Path

# ── Paths ──────────────────────────────────────────────────────────────
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Load .env from project root
_env_path = _PROJECT_ROOT / ".env"
if _env_path.exists():
    for _line in _env_path.read_text().splitlines():
        _line = _line.strip()
        if _line and not _line.startswith("#") and "=" in _line:
            _k, _, _v = _line.partition("=")
            os.environ.setdefault(_k.strip(), _v.strip())


def _default_data_dir() -> Path:
    env = os.environ.get("LESSISMORE_DATA_DIR")
    if env:
        return Path(env)
    if (_PROJECT_ROOT / "pyproject.toml").exists():
        return _PROJECT_ROOT / "data"
    return Path.home() / ".lessismore"


DATA_DIR = _default_data_dir()
DB_PATH = DATA_DIR / "lessismore.db"
LOG_PATH = DATA_DIR / "lessismore.log"
PID_PATH = DATA_DIR / "lessismore.pid"

# Shared directory read by the widget surface (App Group analogue)
SHARED_DIR = Path(os.environ.get("LESSISMORE_SHARED_DIR", str(DATA_DIR / "shared")))
SNAPSHOT_PATH = SHARED_DIR / "widget_snapshot.json"
REFRESH_MARKER_PATH = SHARED_DIR / "widget_refresh"

# ── Task intervals (seconds) ──────────────────────────────────────────
TICK_INTERVAL = 1
CHECKPOINT_EVERY_SECONDS = 30  # persist the usage ledger every N ticks
SNAPSHOT_INTERVAL = 60
HEALTH_HEARTBEAT_INTERVAL = 60

# ── Statistics ────────────────────────────────────────────────────────
SIMULATED_DAYS = 7
CHART_POINTS = 7
WEEK_DAYS = 7
MONTH_DAYS = 30

# ── Key-value store keys ──────────────────────────────────────────────
USAGE_WEEK_KEY = "usage_week_data"
USAGE_MONTH_KEY = "usage_month_data"
USAGE_LAST_DAY_KEY = "usage_last_date"
USAGE_LAST_MONTH_KEY = "usage_last_month"
STREAKS_KEY = "filter_streaks_data"
CURRENT_CATEGORY_KEY = "current_category"
