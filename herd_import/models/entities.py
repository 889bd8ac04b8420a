from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar

"""Persisted entity shapes.

Relationships use surrogate ids (UUID4 strings) instead of the natural keys
(tag numbers, property names) found in CSV files. Field order is the column
order used for bulk inserts and CSV export; field names are the table column
names.
"""

__all__ = [
    "Entity",
    "Animal",
    "Property",
    "Field",
    "Vaccination",
    "Event",
    "CalvingRecord",
    "SlaughterRecord",
    "new_id",
]


def new_id() -> str:
    """Generate a surrogate id."""
    return str(uuid.uuid4())


class Entity:
    """Mixin for table mapping helpers shared by all entity dataclasses."""

    TABLE: ClassVar[str]

    @classmethod
    def column_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]  # type: ignore[arg-type]

    def as_row(self) -> tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self.column_names())

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class Animal(Entity):
    TABLE: ClassVar[str] = "animals"

    id: str
    tag_number: str  # unique
    name: str | None
    type: str  # dairy | beef
    sex: str  # male | female
    date_of_birth: date | None
    breeding_method: str | None  # live-cover | ai
    sire_id: str | None
    dam_id: str | None
    herd_name: str | None
    organic: bool = False


@dataclass(frozen=True)
class Property(Entity):
    TABLE: ClassVar[str] = "properties"

    id: str
    name: str
    is_leased: str  # yes | no
    lease_start_date: date | None
    lease_end_date: date | None
    leaseholder: str | None


@dataclass(frozen=True)
class Field(Entity):
    TABLE: ClassVar[str] = "fields"

    id: str
    name: str
    property_id: str
    capacity: int | None


@dataclass(frozen=True)
class Vaccination(Entity):
    TABLE: ClassVar[str] = "vaccinations"

    id: str
    animal_id: str
    vaccine_name: str
    administered_date: date
    administered_by: str | None
    next_due_date: date | None


@dataclass(frozen=True)
class Event(Entity):
    TABLE: ClassVar[str] = "events"

    id: str
    animal_id: str
    event_type: str
    event_date: date
    description: str | None


@dataclass(frozen=True)
class CalvingRecord(Entity):
    TABLE: ClassVar[str] = "calving_records"

    id: str
    dam_id: str
    calving_date: date
    calf_id: str | None
    calf_tag_number: str | None  # 解決できなくても元のタグは保持
    calf_sex: str | None
    notes: str | None


@dataclass(frozen=True)
class SlaughterRecord(Entity):
    TABLE: ClassVar[str] = "slaughter_records"

    id: str
    animal_id: str
    slaughter_date: date
    age_months: int | None
    live_weight: Decimal | None
    hanging_weight: Decimal | None
    processor: str | None
