from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from herd_import.models.entities import (
    Animal,
    CalvingRecord,
    Entity,
    Event,
    Field,
    Property,
    SlaughterRecord,
    Vaccination,
)
from herd_import.models.import_result import UnknownDataKindError

"""Importable data kinds and their CSV column rulesets.

Column names are matched case-sensitively and listed in template order. Each
kind renders its ruleset as a JSON Schema (see RowValidator); the custom
formats ``boolean``, ``whole-number`` and ``decimal`` are registered on the
validator's FormatChecker.
"""

__all__ = [
    "ColumnRule",
    "DataKind",
    "DATA_KINDS",
    "get_kind",
    "data_type_names",
]

TEXT = "text"
DATE = "date"
ENUM = "enum"
BOOLEAN = "boolean"
INTEGER = "integer"
DECIMAL = "decimal"

HERD_NAMES = ("wet", "nurse", "finish", "main", "grafting", "yearling", "missing", "bull")
SEXES = ("male", "female")


@dataclass(frozen=True)
class ColumnRule:
    name: str
    rule: str = TEXT
    required: bool = False
    choices: tuple[str, ...] = ()

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "string"}
        if self.rule == ENUM:
            schema["enum"] = list(self.choices)
        elif self.rule == DATE:
            schema["format"] = "date"
        elif self.rule == BOOLEAN:
            schema["format"] = "boolean"
        elif self.rule == INTEGER:
            schema["format"] = "whole-number"
        elif self.rule == DECIMAL:
            schema["format"] = "decimal"
        else:
            schema["minLength"] = 1
        return schema


@dataclass(frozen=True)
class DataKind:
    """One importable record kind."""
    name: str  # data type name used at the boundary (URL / config)
    entity: type[Entity]
    columns: tuple[ColumnRule, ...]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def required_columns(self) -> list[str]:
        return [c.name for c in self.columns if c.required]

    @property
    def optional_columns(self) -> list[str]:
        return [c.name for c in self.columns if not c.required]

    @property
    def table(self) -> str:
        return self.entity.TABLE

    def json_schema(self) -> dict[str, Any]:
        return {
            "$schema": "https://json-schema.org/draft/2020-12/schema",
            "title": self.name,
            "type": "object",
            "properties": {c.name: c.json_schema() for c in self.columns},
            "required": self.required_columns,
        }


def _col(name: str, rule: str = TEXT, *, required: bool = False, choices: tuple[str, ...] = ()) -> ColumnRule:
    return ColumnRule(name=name, rule=rule, required=required, choices=choices)


DATA_KINDS: dict[str, DataKind] = {
    kind.name: kind
    for kind in (
        DataKind(
            name="animals",
            entity=Animal,
            columns=(
                _col("tagNumber", required=True),
                _col("name"),
                _col("type", ENUM, required=True, choices=("dairy", "beef")),
                _col("sex", ENUM, required=True, choices=SEXES),
                _col("dateOfBirth", DATE),
                _col("breedingMethod", ENUM, choices=("live-cover", "ai")),
                _col("sireTag"),
                _col("damTag"),
                _col("herdName", ENUM, choices=HERD_NAMES),
                _col("organic", BOOLEAN),
            ),
        ),
        DataKind(
            name="properties",
            entity=Property,
            columns=(
                _col("name", required=True),
                _col("isLeased", ENUM, required=True, choices=("yes", "no")),
                _col("leaseStartDate", DATE),
                _col("leaseEndDate", DATE),
                _col("leaseholder"),
            ),
        ),
        DataKind(
            name="fields",
            entity=Field,
            columns=(
                _col("name", required=True),
                _col("propertyName", required=True),
                _col("capacity", INTEGER),
            ),
        ),
        DataKind(
            name="vaccinations",
            entity=Vaccination,
            columns=(
                _col("animalTag", required=True),
                _col("vaccineName", required=True),
                _col("administeredDate", DATE, required=True),
                _col("administeredBy"),
                _col("nextDueDate", DATE),
            ),
        ),
        DataKind(
            name="events",
            entity=Event,
            columns=(
                _col("animalTag", required=True),
                _col("eventType", required=True),
                _col("eventDate", DATE, required=True),
                _col("description"),
            ),
        ),
        DataKind(
            name="calving-records",
            entity=CalvingRecord,
            columns=(
                _col("damTag", required=True),
                _col("calvingDate", DATE, required=True),
                _col("calfTag"),
                _col("calfSex", ENUM, choices=SEXES),
                _col("notes"),
            ),
        ),
        DataKind(
            name="slaughter-records",
            entity=SlaughterRecord,
            columns=(
                _col("animalTag", required=True),
                _col("slaughterDate", DATE, required=True),
                _col("ageMonths", INTEGER),
                _col("liveWeight", DECIMAL),
                _col("hangingWeight", DECIMAL),
                _col("processor"),
            ),
        ),
    )
}


def data_type_names() -> list[str]:
    return list(DATA_KINDS)


def get_kind(data_type: str) -> DataKind:
    """Look up a data kind by its boundary name.

    Raises:
        UnknownDataKindError: name is not an importable kind
    """
    try:
        return DATA_KINDS[data_type]
    except KeyError:
        raise UnknownDataKindError(
            f"Invalid import type '{data_type}'. Expected one of: {', '.join(DATA_KINDS)}"
        ) from None
