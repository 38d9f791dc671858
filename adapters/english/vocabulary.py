"""English vocabulary, same rule tables as the Spanish one under English names."""

from careplanner.domain.models import EventKind, IntervalUnit, SeriesRule
from careplanner.domain.vocabulary import Vocabulary

_CORE_VACCINE = SeriesRule(offsets_days=(0, 21, 42), booster_months=12)

ENGLISH = Vocabulary(
    locale="en",
    kind_rules=(
        (EventKind.VACCINE, ("vaccin", "rabies", "distemper", "parvovirus")),
        (EventKind.DEWORMING, ("deworm", "endogard", "drontal", "panacur", "milbemax")),
        (EventKind.GROOMING, ("bath", "haircut", "nail trim", "groom")),
        (EventKind.WEIGHT, ("weight", "kg")),
        (EventKind.MEDICATION, ("mg", "ml", "every ", "dose")),
    ),
    kind_labels={
        EventKind.MEDICATION: "Medication",
        EventKind.VACCINE: "Vaccine",
        EventKind.DEWORMING: "Deworming",
        EventKind.GROOMING: "Grooming",
        EventKind.WEIGHT: "Weight log",
    },
    today_words=("today",),
    tomorrow_words=("tomorrow",),
    relative_prefixes=("in",),
    unit_words={
        IntervalUnit.HOURS: ("h", "hour", "hours"),
        IntervalUnit.DAYS: ("d", "day", "days"),
        IntervalUnit.WEEKS: ("week", "weeks"),
        IntervalUnit.MONTHS: ("month", "months"),
    },
    weekdays={
        "monday": 0,
        "tuesday": 1,
        "wednesday": 2,
        "thursday": 3,
        "friday": 4,
        "saturday": 5,
        "sunday": 6,
    },
    time_prefixes=("at",),
    frequency_prefixes=("every",),
    frequency_phrases={
        IntervalUnit.HOURS: ("every {n} h", "every {n} h"),
        IntervalUnit.DAYS: ("every day", "every {n} days"),
        IntervalUnit.WEEKS: ("every week", "every {n} weeks"),
        IntervalUnit.MONTHS: ("every month", "every {n} months"),
    },
    dose_markers=("dose",),
    dose_word="dose",
    manufacturer_labels=("manufacturer", "brand"),
    empty_input_warning="Empty text",
    disabled_warning="Assistant disabled",
    booster_frequency="booster",
    booster_note="Recommended booster",
    deworming_fallback_name="Deworming",
    grooming_fallback_name="Grooming appointment",
    weight_display_template="Weight: {weight_kg:.1f} kg",
    vaccine_rules={
        "rabies": _CORE_VACCINE,
        "distemper": _CORE_VACCINE,
        "parvovirus": _CORE_VACCINE,
    },
    medication_default_hours={
        "amoxicillin": 8,
        "doxycycline": 12,
        "omeprazole": 24,
    },
)
