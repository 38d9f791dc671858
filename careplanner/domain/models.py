"""
Domain models for care-event interpretation and schedule planning.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation; every value is immutable once built, the
consumer decides what (if anything) gets persisted.
"""

import re
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# " (dosis 2/3)" / " (dose 2/3)": the only suffix a full name may carry
_DOSE_SUFFIX = re.compile(r"^ \((\w+) (\d+)/(\d+)\)$")


class EventKind(str, Enum):
    """Closed set of care events the interpreter can propose."""

    MEDICATION = "medication"
    VACCINE = "vaccine"
    DEWORMING = "deworming"
    GROOMING = "grooming"
    WEIGHT = "weight"


class IntervalUnit(str, Enum):
    """Units used by frequency phrases, relative offsets and course planning."""

    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class ProposedEvent(BaseModel):
    """A single dated care event produced by the parser or the recommender."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    kind: EventKind
    base_name: str = Field(description="Treatment name without series suffix")
    full_name: str = Field(description="May include a ' (dosis i/n)' suffix")
    date: datetime
    dosage: str | None = None
    frequency: str | None = None
    notes: str | None = None
    manufacturer: str | None = None

    @model_validator(mode="after")
    def full_name_extends_base(self) -> "ProposedEvent":
        if self.full_name == self.base_name:
            return self
        if not self.full_name.startswith(self.base_name):
            raise ValueError("full_name must start with base_name")
        match = _DOSE_SUFFIX.match(self.full_name[len(self.base_name) :])
        if match is None:
            raise ValueError(f"unexpected series suffix in {self.full_name!r}")
        current, total = int(match.group(2)), int(match.group(3))
        if not 1 <= current <= total:
            raise ValueError(f"dose index {current}/{total} out of range")
        return self


class PrescriptionExtractionResult(BaseModel):
    """Best-effort, possibly incomplete read of prescription text."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind | None = None
    base_name: str | None = None
    full_name: str | None = None
    dosage: str | None = None
    frequency: str | None = None
    date: datetime | None = None
    manufacturer: str | None = None
    notes: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class QuickAddParseResult(BaseModel):
    """Outcome of parsing one line of free text."""

    model_config = ConfigDict(frozen=True)

    events: list[ProposedEvent] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class SeriesRule(BaseModel):
    """Primary-dose offsets (days from the anchor) plus an optional booster."""

    model_config = ConfigDict(frozen=True)

    offsets_days: tuple[int, ...] = Field(min_length=1)
    booster_months: int | None = Field(default=None, gt=0)

    @field_validator("offsets_days")
    @classmethod
    def offsets_strictly_increasing(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if v[0] != 0:
            raise ValueError("offsets_days must start at 0")
        if any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("offsets_days must be strictly increasing")
        return v


class DatedSuggestion(BaseModel):
    """Bare timestamp produced by the simple stepping recommender."""

    model_config = ConfigDict(frozen=True)

    date: datetime


class WeightSample(BaseModel):
    """One weight reading."""

    model_config = ConfigDict(frozen=True)

    date: datetime
    weight_kg: float = Field(gt=0.0)


class WeightAnomalyResult(BaseModel):
    """Z-score of the newest reading against a trailing baseline."""

    model_config = ConfigDict(frozen=True)

    is_anomalous: bool
    z_score: float
    mean: float
    std: float = Field(gt=0.0, description="Floored to a small epsilon")


class ScheduleSummary(BaseModel):
    """How many doses a planned course holds and when the last one falls."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=1)
    last: datetime


class VaccinePreview(BaseModel):
    """Dates of the current vaccine series and of each booster round."""

    model_config = ConfigDict(frozen=True)

    series_dates: list[datetime]
    booster_rounds: list[list[datetime]] = Field(default_factory=list)
