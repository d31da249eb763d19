"""
modules/observability/logger.py
---------------------------------
Planner event log: one JSON object per line, one file per itinerary.

Usage:
    from modules.observability.logger import StructuredLogger

    events = StructuredLogger()
    events.log("trip_kansai", "SCHEDULE_SUMMARY", {"days": 4, "conflicts": 1})
    events.read("trip_kansai", event_type="PERFORMANCE")

Files land in config.LOGS_DIR, or logs/ beside the backend/ directory when
that is empty.  Itinerary ids are sanitised before use as file names.
"""

from __future__ import annotations

import json
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

import config

_DEFAULT_DIR: Path = (
    Path(config.LOGS_DIR) if config.LOGS_DIR
    else Path(__file__).resolve().parents[2] / "logs"
)
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _file_stem(session_id: str) -> str:
    return _UNSAFE.sub("_", session_id).strip("._") or "session"


class StructuredLogger:
    """Thread-safe JSONL writer; keeps one open handle per itinerary id."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._dir = Path(logs_dir) if logs_dir else _DEFAULT_DIR
        self._lock = threading.Lock()
        self._files: dict[str, TextIO] = {}

    def __enter__(self) -> "StructuredLogger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def logs_dir(self) -> Path:
        return self._dir

    @property
    def open_sessions(self) -> list[str]:
        """Ids that currently hold an open file handle."""
        with self._lock:
            return list(self._files)

    def path_for(self, session_id: str) -> Path:
        return self._dir / f"{_file_stem(session_id)}.jsonl"

    # ── writing ───────────────────────────────────────────────────────────────

    def log(self, session_id: str, event_type: str, payload: dict) -> None:
        """Append ``{timestamp, session_id, event_type, payload}``."""
        line = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "session_id": session_id,
                "event_type": event_type,
                "payload": payload,
            },
            default=str,
            ensure_ascii=False,
        )
        with self._lock:
            fh = self._files.get(session_id)
            if fh is None:
                self._dir.mkdir(parents=True, exist_ok=True)
                fh = open(self.path_for(session_id), "a", encoding="utf-8")  # noqa: SIM115
                self._files[session_id] = fh
            fh.write(line + "\n")
            fh.flush()

    # ── reading ───────────────────────────────────────────────────────────────

    def read(self, session_id: str, event_type: Optional[str] = None) -> list[dict]:
        """Records for *session_id* in write order, optionally one event type only."""
        path = self.path_for(session_id)
        if not path.exists():
            return []
        with self._lock:
            lines = path.read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines if line.strip()]
        if event_type is not None:
            records = [r for r in records if r.get("event_type") == event_type]
        return records

    def close(self, session_id: Optional[str] = None) -> None:
        with self._lock:
            ids = [session_id] if session_id else list(self._files)
            for sid in ids:
                fh = self._files.pop(sid, None)
                if fh is not None:
                    fh.close()
