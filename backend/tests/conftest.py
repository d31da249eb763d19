import os
import sys
import tempfile

import pytest

# backend/ root — modules, schemas and config are imported top-level.
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

# Keep JSONL event logs out of the source tree (read by config at import).
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="itinerary-logs-"))

from schemas.itinerary import (  # noqa: E402
    Coordinate,
    EntryPoint,
    NoteActivity,
    OperatingHours,
    OperatingPeriod,
    PlaceActivity,
    Weekday,
)
from modules.observability.logger import StructuredLogger  # noqa: E402

# 0.005° of latitude ≈ 556 m: a 14-minute walk with the default speeds/buffer.
STEP = 0.005
BASE = Coordinate(35.0, 135.75)


def north(n: float) -> Coordinate:
    return Coordinate(BASE.lat + n * STEP, BASE.lng)


def place(pid: str, coords=None, duration=60, hours=None, **kw) -> PlaceActivity:
    return PlaceActivity(
        id=pid,
        title=pid.title(),
        coordinates=coords,
        duration_minutes=duration,
        operating_hours=hours,
        **kw,
    )


def note(nid: str) -> NoteActivity:
    return NoteActivity(id=nid, title=f"Note {nid}")


def hours(day: Weekday, open_: str, close: str, overnight: bool = False) -> OperatingHours:
    return OperatingHours(periods=(OperatingPeriod(day, open_, close, overnight),))


@pytest.fixture
def hotel():
    return EntryPoint(id="hotel", name="Kyoto Hotel", coordinates=BASE, type="hotel", city_id="kyoto")


@pytest.fixture
def event_logger(tmp_path):
    logger = StructuredLogger(logs_dir=tmp_path)
    yield logger
    logger.close()
