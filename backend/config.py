"""
config.py
---------
Central configuration for the itinerary scheduling engine.
Every value can be overridden from the environment (or a .env file that
sits next to this module); the defaults below are what the scheduler and
the estimators use when nothing is set.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.  Won't override vars already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)

# ── Day boundaries ("HH:MM", local clock) ─────────────────────────────────────
DAY_START: str = os.getenv("DAY_START", "09:00")
DAY_END:   str = os.getenv("DAY_END",   "21:00")

# ── Scheduling defaults (minutes) ─────────────────────────────────────────────
DEFAULT_VISIT_MINUTES:     int = int(os.getenv("DEFAULT_VISIT_MINUTES",     "90"))
TRANSITION_BUFFER_MINUTES: int = int(os.getenv("TRANSITION_BUFFER_MINUTES", "10"))

# ── Effective speeds (km/h) ───────────────────────────────────────────────────
# transit speed already folds in the average platform wait
WALK_SPEED_KMH:           float = float(os.getenv("WALK_SPEED_KMH",           "4.0"))
TRANSIT_SPEED_KMH:        float = float(os.getenv("TRANSIT_SPEED_KMH",        "20.0"))
TAXI_SPEED_KMH:           float = float(os.getenv("TAXI_SPEED_KMH",           "30.0"))
LONG_DISTANCE_SPEED_KMH:  float = float(os.getenv("LONG_DISTANCE_SPEED_KMH",  "200.0"))
AIRPORT_ACCESS_SPEED_KMH: float = float(os.getenv("AIRPORT_ACCESS_SPEED_KMH", "60.0"))

# ── Travel buffers (minutes) ──────────────────────────────────────────────────
TRANSIT_BUFFER_MINUTES:    int = int(os.getenv("TRANSIT_BUFFER_MINUTES",    "10"))
DEFAULT_BUFFER_MINUTES:    int = int(os.getenv("DEFAULT_BUFFER_MINUTES",    "5"))
ENTRY_POINT_DWELL_MINUTES: int = int(os.getenv("ENTRY_POINT_DWELL_MINUTES", "30"))

# Distance beyond which an entry-point leg is modelled as rail/flight.
LONG_DISTANCE_THRESHOLD_KM: float = float(os.getenv("LONG_DISTANCE_THRESHOLD_KM", "100.0"))

# Walk while the raw walking time stays at or below this (≈ 667 m at 4 km/h);
# anything longer switches to transit.
WALK_MAX_MINUTES: float = float(os.getenv("WALK_MAX_MINUTES", "10"))

# ── Route optimizer ───────────────────────────────────────────────────────────
TWO_OPT_ENABLED:    bool = os.getenv("TWO_OPT_ENABLED", "true").lower() in ("1", "true", "yes")
TWO_OPT_MAX_PASSES: int  = int(os.getenv("TWO_OPT_MAX_PASSES", "5"))

# ── Day-trip heuristic ────────────────────────────────────────────────────────
# remaining local inventory must cover this many days of activities
DAY_TRIP_INVENTORY_DAYS: int = int(os.getenv("DAY_TRIP_INVENTORY_DAYS", "5"))

# ── Rail pass ─────────────────────────────────────────────────────────────────
RAIL_PASS_MIN_DAYS:   int = int(os.getenv("RAIL_PASS_MIN_DAYS",   "3"))
RAIL_PASS_MIN_CITIES: int = int(os.getenv("RAIL_PASS_MIN_CITIES", "2"))

# ── Observability ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
# JSONL event logs; empty → logs/ beside the backend/ directory
LOGS_DIR:  str = os.getenv("LOGS_DIR", "")

# ── HTTP server ───────────────────────────────────────────────────────────────
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
