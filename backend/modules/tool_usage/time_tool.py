"""
modules/tool_usage/time_tool.py
---------------------------------
Clock helpers shared by the scheduler, the meal-gap detector and the API
serialisers.

Internally every clock value is an int of minutes since midnight; "HH:MM"
strings only exist at the edges (request payloads, config, responses).
"""

from __future__ import annotations

import re
from typing import Optional

MINUTES_IN_DAY: int = 24 * 60

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time(value: Optional[str]) -> Optional[int]:
    """
    Parse "HH:MM" into minutes since midnight.

    Returns None for empty, malformed or out-of-range input ("25:00",
    "12:75", "noon").  "24:00" is accepted as end-of-day (1440).
    """
    if not value or not isinstance(value, str):
        return None
    match = _HHMM_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        return None
    return hours * 60 + minutes


def format_time(total_minutes: Optional[int]) -> Optional[str]:
    """Format minutes since midnight as "HH:MM", wrapping past midnight."""
    if total_minutes is None:
        return None
    normalized = int(round(total_minutes)) % MINUTES_IN_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"
