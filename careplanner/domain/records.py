"""
Persisted care records as supplied by the storage collaborator.

A closed union discriminated by `kind`; every consumer dispatches with
`match` and `assert_never` so adding a record type is a type error until each
consumer handles it.
"""

from datetime import datetime
from typing import Annotated, Literal, assert_never
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from careplanner.domain.models import EventKind
from careplanner.domain.vocabulary import Vocabulary


class _RecordBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    date: datetime
    notes: str | None = None


class MedicationRecord(_RecordBase):
    kind: Literal["medication"] = "medication"
    name: str
    dosage: str | None = None
    frequency: str | None = None


class VaccineRecord(_RecordBase):
    kind: Literal["vaccine"] = "vaccine"
    name: str
    manufacturer: str | None = None


class DewormingRecord(_RecordBase):
    kind: Literal["deworming"] = "deworming"
    series_id: UUID | None = Field(default=None, description="Groups repeats of one course")
    rrule: str | None = Field(default=None, description="Recurrence rule text, if any")


class GroomingRecord(_RecordBase):
    kind: Literal["grooming"] = "grooming"
    location: str | None = None
    services: tuple[str, ...] = ()


class WeightRecord(_RecordBase):
    kind: Literal["weight"] = "weight"
    weight_kg: float = Field(gt=0.0)


CareRecord = Annotated[
    MedicationRecord | VaccineRecord | DewormingRecord | GroomingRecord | WeightRecord,
    Field(discriminator="kind"),
]

care_record_adapter: TypeAdapter[CareRecord] = TypeAdapter(CareRecord)


def display_type(record: CareRecord, vocabulary: Vocabulary) -> str:
    """Localized kind label."""
    match record:
        case MedicationRecord():
            kind = EventKind.MEDICATION
        case VaccineRecord():
            kind = EventKind.VACCINE
        case DewormingRecord():
            kind = EventKind.DEWORMING
        case GroomingRecord():
            kind = EventKind.GROOMING
        case WeightRecord():
            kind = EventKind.WEIGHT
        case _:
            assert_never(record)
    return vocabulary.kind_labels[kind]


def display_name(record: CareRecord, vocabulary: Vocabulary) -> str:
    """Human-facing title: the treatment name, or a fallback per kind."""
    match record:
        case MedicationRecord(name=name) | VaccineRecord(name=name):
            return name
        case DewormingRecord(notes=notes):
            return notes.strip() if notes and notes.strip() else vocabulary.deworming_fallback_name
        case GroomingRecord(notes=notes, location=location):
            for candidate in (notes, location):
                if candidate and candidate.strip():
                    return candidate.strip()
            return vocabulary.grooming_fallback_name
        case WeightRecord(weight_kg=weight_kg):
            return vocabulary.weight_display_template.format(weight_kg=weight_kg)
        case _:
            assert_never(record)
