"""
Dose-series grouping over persisted care records.

Names produced by the recommender carry a " (dosis i/n)" suffix; everything
here strips that suffix to find the series a record belongs to, so a user can
act on "this and all future doses" at once.
"""

import re
from collections.abc import Callable, Iterable
from typing import assert_never

from adapters.spanish.vocabulary import SPANISH
from careplanner.domain.records import (
    CareRecord,
    DewormingRecord,
    GroomingRecord,
    MedicationRecord,
    VaccineRecord,
    WeightRecord,
    display_name,
)
from careplanner.domain.vocabulary import Vocabulary


class DoseSeries:
    """Suffix parsing plus series membership queries."""

    def __init__(self, vocabulary: Vocabulary = SPANISH) -> None:
        self.vocabulary = vocabulary
        # Literal, case-sensitive marker: "Rabia (DOSIS 1/3)" is not a generated suffix
        self._marker = re.compile(rf" \({re.escape(vocabulary.dose_word)} ")

    def _split_once(self, name: str) -> tuple[str, str] | None:
        """(base, text inside the parentheses) for the right-most dose suffix."""
        if not name.endswith(")"):
            return None
        markers = list(self._marker.finditer(name))
        if not markers:
            return None
        last = markers[-1]
        inside = name[last.start() + 2 : -1]
        return name[: last.start()].strip(), inside

    def split_dose_base(self, name: str) -> str:
        """'Rabia (dosis 2/3)' -> 'Rabia'. Names without a suffix come back unchanged."""
        base = name
        while (parts := self._split_once(base)) is not None:
            base = parts[0]
        return base

    def split_dose(self, name: str) -> tuple[str, str | None]:
        """'Rabia (dosis 2/3)' -> ('Rabia', 'Dosis 2/3')."""
        parts = self._split_once(name)
        if parts is None:
            return name, None
        base, inside = parts
        word = self.vocabulary.dose_word
        return base, word.capitalize() + inside[len(word) :]

    def parse_dose_numbers(self, name: str) -> tuple[int | None, int | None]:
        _, label = self.split_dose(name)
        if label is None:
            return None, None
        numbers = [int(n) for n in re.findall(r"\d+", label)]
        current = numbers[0] if len(numbers) > 0 else None
        total = numbers[1] if len(numbers) > 1 else None
        return current, total

    @staticmethod
    def normalize_notes(notes: str | None) -> str:
        return (notes or "").strip().lower()

    def series_key(self, record: CareRecord) -> str:
        """Identity shared by every record of one series."""
        match record:
            case MedicationRecord(name=name) | VaccineRecord(name=name):
                return self.split_dose_base(name)
            case DewormingRecord():
                if record.series_id is not None:
                    return f"series:{record.series_id}"
                if record.rrule:
                    return f"rrule:{record.rrule}"
                return f"notes:{self.normalize_notes(self.split_dose_base(record.notes or ''))}"
            case GroomingRecord() | WeightRecord():
                return self.normalize_notes(display_name(record, self.vocabulary))
            case _:
                assert_never(record)

    def _same_series(self, anchor: CareRecord) -> Callable[[CareRecord], bool]:
        if isinstance(anchor, DewormingRecord):
            # The anchor decides which attribute identifies the course
            if anchor.series_id is not None:
                return lambda r: isinstance(r, DewormingRecord) and r.series_id == anchor.series_id
            if anchor.rrule:
                return lambda r: isinstance(r, DewormingRecord) and r.rrule == anchor.rrule
            notes = self.normalize_notes(self.split_dose_base(anchor.notes or ""))
            return lambda r: isinstance(r, DewormingRecord) and (
                self.normalize_notes(self.split_dose_base(r.notes or "")) == notes
            )

        key = self.series_key(anchor)
        return lambda r: type(r) is type(anchor) and self.series_key(r) == key

    def future_series(
        self, anchor: CareRecord, candidates: Iterable[CareRecord]
    ) -> list[CareRecord]:
        """The anchor plus every later record of the same owner and series, by date."""
        same_series = self._same_series(anchor)
        related = [
            r
            for r in candidates
            if r.owner_id == anchor.owner_id and r.date >= anchor.date and same_series(r)
        ]
        if not related:
            return [anchor]
        return sorted(related, key=lambda r: r.date)

    def is_booster(
        self,
        vaccine: VaccineRecord,
        records: Iterable[CareRecord],
        threshold_days: int = 300,
    ) -> bool:
        """
        True when the previous dose of the same series is at least
        `threshold_days` earlier, which separates boosters from primary doses.
        """
        base = self.split_dose_base(vaccine.name)
        siblings = sorted(
            (
                r
                for r in records
                if isinstance(r, VaccineRecord)
                and r.owner_id == vaccine.owner_id
                and self.split_dose_base(r.name) == base
            ),
            key=lambda r: r.date,
        )
        index = next((i for i, r in enumerate(siblings) if r.id == vaccine.id), None)
        if index is None or index == 0:
            return False
        elapsed = vaccine.date - siblings[index - 1].date
        return elapsed.total_seconds() / 86400 >= threshold_days
