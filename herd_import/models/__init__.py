"""Domain models for the herd CSV import pipeline.

Row shapes, per-row outcomes, persisted entities, import results and the
configuration dataclasses.
"""

from .config_models import DatabaseConfig, ImportConfig
from .entities import Animal, CalvingRecord, Event, Field, Property, SlaughterRecord, Vaccination
from .import_result import ImportResult, ImportStage
from .row_data import NormalizedRow, RawRow
from .row_result import RowErr, RowFailure, RowOk

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Row models
    "RawRow",
    "NormalizedRow",
    "RowOk",
    "RowErr",
    "RowFailure",
    # Entities
    "Animal",
    "Property",
    "Field",
    "Vaccination",
    "Event",
    "CalvingRecord",
    "SlaughterRecord",
    # Results
    "ImportResult",
    "ImportStage",
]
