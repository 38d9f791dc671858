"""
Vocabulary: the swappable keyword and rule data behind every heuristic.

Control flow in the services never mentions a concrete word. Everything
locale-specific (keywords, phrase templates, rule tables) lives in a
Vocabulary instance; see adapters/spanish and adapters/english.
"""

import re
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from careplanner.domain.models import EventKind, IntervalUnit, SeriesRule


def word_alternation(words: Iterable[str]) -> str:
    """Regex alternation of escaped words, longest first so prefixes never shadow."""
    return "|".join(re.escape(w) for w in sorted(set(words), key=len, reverse=True))


class Vocabulary(BaseModel):
    """Keyword tables, phrase templates and rule tables for one language."""

    model_config = ConfigDict(frozen=True)

    locale: str = Field(min_length=2)

    # Kind classification: ordered rules, first match wins
    kind_rules: tuple[tuple[EventKind, tuple[str, ...]], ...]
    kind_labels: dict[EventKind, str]

    # Temporal phrases
    today_words: tuple[str, ...]
    tomorrow_words: tuple[str, ...]
    relative_prefixes: tuple[str, ...] = Field(description="'in' of 'in 3 days'")
    unit_words: dict[IntervalUnit, tuple[str, ...]]
    weekdays: dict[str, int] = Field(description="Weekday name -> Monday=0 .. Sunday=6")
    time_prefixes: tuple[str, ...] = Field(description="'at' of 'at 3pm'")

    # Entities
    frequency_prefixes: tuple[str, ...]
    frequency_phrases: dict[IntervalUnit, tuple[str, str]] = Field(
        description="(phrase for N=1, template for N>1 with {n})"
    )
    dose_markers: tuple[str, ...]
    dose_word: str
    dosage_units: tuple[str, ...] = ("mg", "ml", "mcg", "g", "ug", "μg")
    manufacturer_labels: tuple[str, ...]

    # User-facing strings
    empty_input_warning: str
    disabled_warning: str
    booster_frequency: str
    booster_note: str
    deworming_fallback_name: str
    grooming_fallback_name: str
    weight_display_template: str = Field(description="Formatted with weight_kg=")

    # Rule tables
    vaccine_rules: dict[str, SeriesRule] = Field(default_factory=dict)
    medication_default_hours: dict[str, int] = Field(default_factory=dict)
    fallback_medication_hours: int = Field(default=8, gt=0)

    @model_validator(mode="after")
    def tables_are_complete(self) -> "Vocabulary":
        missing = set(EventKind) - set(self.kind_labels)
        if missing:
            raise ValueError(f"kind_labels missing {sorted(k.value for k in missing)}")
        if set(self.frequency_phrases) != set(IntervalUnit) or set(self.unit_words) != set(
            IntervalUnit
        ):
            raise ValueError("unit_words and frequency_phrases must cover every IntervalUnit")
        if any(not 0 <= day <= 6 for day in self.weekdays.values()):
            raise ValueError("weekday numbers must be in 0..6")
        return self

    @staticmethod
    def normalize_key(name: str) -> str:
        return name.strip().lower()

    def unit_for(self, word: str) -> IntervalUnit | None:
        word = word.lower()
        for unit, words in self.unit_words.items():
            if word in words:
                return unit
        return None

    def format_frequency(self, count: int, unit: IntervalUnit) -> str:
        one, many = self.frequency_phrases[unit]
        return one.format(n=count) if count == 1 else many.format(n=count)

    def dose_suffix(self, index: int, total: int) -> str:
        return f" ({self.dose_word} {index}/{total})"

    def rule_for(self, base_name: str) -> SeriesRule | None:
        return self.vaccine_rules.get(self.normalize_key(base_name))

    def default_hours_for(self, base_name: str) -> int:
        return self.medication_default_hours.get(
            self.normalize_key(base_name), self.fallback_medication_hours
        )
