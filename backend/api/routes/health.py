"""
api/routes/health.py
--------------------
Liveness probe.  Also reports which reference-table snapshot is loaded,
since schedules change whenever those tables do.
"""
from __future__ import annotations

from fastapi import APIRouter

from modules.tool_usage.reference_data import DEFAULT_TABLES

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    return {
        "status": "ok",
        "service": "itinerary-scheduler",
        "tables_version": DEFAULT_TABLES.version,
    }
