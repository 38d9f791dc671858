"""
Spanish vocabulary: the keyword set the application ships with.

Rule tables follow common veterinary practice:
- Core vaccines (rabia, moquillo, parvovirus): 3 doses 21 days apart,
  yearly booster after the last primary dose
- Antibiotics/antacids carry their usual dosing interval in hours
"""

from careplanner.domain.models import EventKind, IntervalUnit, SeriesRule
from careplanner.domain.vocabulary import Vocabulary

_CORE_VACCINE = SeriesRule(offsets_days=(0, 21, 42), booster_months=12)

SPANISH = Vocabulary(
    locale="es",
    kind_rules=(
        (EventKind.VACCINE, ("vacuna", "vacun", "rabia", "moquillo", "parvovirus")),
        (
            EventKind.DEWORMING,
            ("desparasit", "desparas", "endogard", "drontal", "panacur", "milbemax"),
        ),
        (EventKind.GROOMING, ("baño", "corte", "groom", "peluquer")),
        (EventKind.WEIGHT, ("peso", "kg")),
        (EventKind.MEDICATION, ("mg", "ml", "cada ", "dosis")),
    ),
    kind_labels={
        EventKind.MEDICATION: "Medicamento",
        EventKind.VACCINE: "Vacuna",
        EventKind.DEWORMING: "Desparasitación",
        EventKind.GROOMING: "Grooming",
        EventKind.WEIGHT: "Registro de peso",
    },
    today_words=("hoy",),
    tomorrow_words=("mañana", "manana"),
    relative_prefixes=("en",),
    unit_words={
        IntervalUnit.HOURS: ("h", "hora", "horas"),
        IntervalUnit.DAYS: ("d", "día", "dia", "días", "dias"),
        IntervalUnit.WEEKS: ("semana", "semanas"),
        IntervalUnit.MONTHS: ("mes", "meses"),
    },
    weekdays={
        "lunes": 0,
        "martes": 1,
        "miércoles": 2,
        "miercoles": 2,
        "jueves": 3,
        "viernes": 4,
        "sábado": 5,
        "sabado": 5,
        "domingo": 6,
    },
    time_prefixes=("a las", "a la"),
    frequency_prefixes=("cada",),
    frequency_phrases={
        IntervalUnit.HOURS: ("cada {n} h", "cada {n} h"),
        IntervalUnit.DAYS: ("cada día", "cada {n} días"),
        IntervalUnit.WEEKS: ("cada semana", "cada {n} semanas"),
        IntervalUnit.MONTHS: ("cada mes", "cada {n} meses"),
    },
    dose_markers=("dosis", "toma"),
    dose_word="dosis",
    manufacturer_labels=("fabricante", "marca"),
    empty_input_warning="Texto vacío",
    disabled_warning="Asistente desactivado",
    booster_frequency="refuerzo",
    booster_note="Refuerzo recomendado",
    deworming_fallback_name="Desparasitación",
    grooming_fallback_name="Cita de grooming",
    weight_display_template="Peso: {weight_kg:.1f} kg",
    vaccine_rules={
        "rabia": _CORE_VACCINE,
        "moquillo": _CORE_VACCINE,
        "parvovirus": _CORE_VACCINE,
    },
    medication_default_hours={
        "amoxicilina": 8,
        "doxiciclina": 12,
        "omeprazol": 24,
    },
)
