from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from herd_import.models.entities import (
    Animal,
    CalvingRecord,
    Entity,
    Event,
    Field,
    Property,
    SlaughterRecord,
    Vaccination,
    new_id,
)
from herd_import.models.row_data import NormalizedRow
from herd_import.models.row_result import REFERENCE_NOT_FOUND, RowErr, RowFailure, RowOk

"""Natural-key reference resolution.

Replaces natural keys in a normalized row (animal tag numbers, property names)
with surrogate ids looked up among ALREADY PERSISTED records, and builds the
entity to insert. Other rows of the same batch are never consulted.

Required references (field -> property, vaccination/event/slaughter -> animal,
calving -> dam) fail the row when missing. Optional references (animal sire and
dam, calving calf) become None and the row still succeeds; each such drop is
logged at WARNING level.
"""

__all__ = [
    "ReferenceLookup",
    "ReferenceResolver",
    "ReferenceNotFound",
]

logger = logging.getLogger(__name__)


class ReferenceLookup(Protocol):
    """Read-only lookups against persisted entities."""

    def find_animal_id(self, tag_number: str) -> str | None: ...

    def find_property_id(self, name: str) -> str | None: ...


class ReferenceNotFound(Exception):
    """A required natural-key reference did not resolve (row-level)."""


class ReferenceResolver:
    """Builds entities from normalized rows via an injected lookup."""

    def __init__(self, lookup: ReferenceLookup) -> None:
        self.lookup = lookup
        self._builders: dict[str, Callable[[dict[str, Any], int], Entity]] = {
            "animals": self._animal,
            "properties": self._property,
            "fields": self._field,
            "vaccinations": self._vaccination,
            "events": self._event,
            "calving-records": self._calving_record,
            "slaughter-records": self._slaughter_record,
        }

    def resolve(self, row: NormalizedRow) -> RowOk[Entity] | RowErr:
        builder = self._builders[row.data_type]
        try:
            entity = builder(row.values, row.row_number)
        except ReferenceNotFound as e:
            return RowErr(RowFailure(
                row=row.row_number,
                data=row.raw.data,
                error=str(e),
                error_type=REFERENCE_NOT_FOUND,
            ))
        return RowOk(entity)

    # -- reference helpers -------------------------------------------------

    def _required_animal(self, tag: str, label: str = "Animal") -> str:
        animal_id = self.lookup.find_animal_id(tag)
        if animal_id is None:
            raise ReferenceNotFound(f'{label} with tag "{tag}" not found')
        return animal_id

    def _optional_animal(self, tag: str | None, column: str, row_number: int) -> str | None:
        if tag is None:
            return None
        animal_id = self.lookup.find_animal_id(tag)
        if animal_id is None:
            logger.warning(
                "row=%d %s=%s matches no existing animal; stored as null", row_number, column, tag
            )
        return animal_id

    # -- per kind builders -------------------------------------------------

    def _animal(self, v: dict[str, Any], row_number: int) -> Animal:
        return Animal(
            id=new_id(),
            tag_number=v["tagNumber"],
            name=v["name"],
            type=v["type"],
            sex=v["sex"],
            date_of_birth=v["dateOfBirth"],
            breeding_method=v["breedingMethod"],
            sire_id=self._optional_animal(v["sireTag"], "sireTag", row_number),
            dam_id=self._optional_animal(v["damTag"], "damTag", row_number),
            herd_name=v["herdName"],
            organic=v["organic"],
        )

    def _property(self, v: dict[str, Any], row_number: int) -> Property:
        return Property(
            id=new_id(),
            name=v["name"],
            is_leased=v["isLeased"],
            lease_start_date=v["leaseStartDate"],
            lease_end_date=v["leaseEndDate"],
            leaseholder=v["leaseholder"],
        )

    def _field(self, v: dict[str, Any], row_number: int) -> Field:
        property_id = self.lookup.find_property_id(v["propertyName"])
        if property_id is None:
            raise ReferenceNotFound(f'Property "{v["propertyName"]}" not found')
        return Field(
            id=new_id(),
            name=v["name"],
            property_id=property_id,
            capacity=v["capacity"],
        )

    def _vaccination(self, v: dict[str, Any], row_number: int) -> Vaccination:
        return Vaccination(
            id=new_id(),
            animal_id=self._required_animal(v["animalTag"]),
            vaccine_name=v["vaccineName"],
            administered_date=v["administeredDate"],
            administered_by=v["administeredBy"],
            next_due_date=v["nextDueDate"],
        )

    def _event(self, v: dict[str, Any], row_number: int) -> Event:
        return Event(
            id=new_id(),
            animal_id=self._required_animal(v["animalTag"]),
            event_type=v["eventType"],
            event_date=v["eventDate"],
            description=v["description"],
        )

    def _calving_record(self, v: dict[str, Any], row_number: int) -> CalvingRecord:
        return CalvingRecord(
            id=new_id(),
            dam_id=self._required_animal(v["damTag"], label="Dam"),
            calving_date=v["calvingDate"],
            calf_id=self._optional_animal(v["calfTag"], "calfTag", row_number),
            calf_tag_number=v["calfTag"],
            calf_sex=v["calfSex"],
            notes=v["notes"],
        )

    def _slaughter_record(self, v: dict[str, Any], row_number: int) -> SlaughterRecord:
        return SlaughterRecord(
            id=new_id(),
            animal_id=self._required_animal(v["animalTag"]),
            slaughter_date=v["slaughterDate"],
            age_months=v["ageMonths"],
            live_weight=v["liveWeight"],
            hanging_weight=v["hangingWeight"],
            processor=v["processor"],
        )
