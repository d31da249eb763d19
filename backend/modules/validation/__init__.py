"""
modules/validation package — input-shape guards before planning.
"""
from modules.validation.ingestion_validator import (
    ValidationResult,
    validate_activity,
    validate_coordinates,
    validate_day,
    validate_day_entry_points,
    validate_itinerary_payload,
)

__all__ = [
    "ValidationResult",
    "validate_activity",
    "validate_coordinates",
    "validate_day",
    "validate_day_entry_points",
    "validate_itinerary_payload",
]
