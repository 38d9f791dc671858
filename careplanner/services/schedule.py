"""
Schedule recommender: expands one anchor event into a dated series.

Vaccines follow the vocabulary's rule table (primary offsets plus a booster),
medications step by an hour interval, everything else is a single event.
The course planners below cover the interactive quick-add flows: an explicit
spacing and end date, a times-per-day regime, and vaccine previews with
booster rounds.
"""

from datetime import datetime
from typing import assert_never

import structlog

from adapters.spanish.vocabulary import SPANISH
from careplanner.domain.models import (
    DatedSuggestion,
    EventKind,
    IntervalUnit,
    ProposedEvent,
    ScheduleSummary,
    VaccinePreview,
)
from careplanner.domain.vocabulary import Vocabulary
from careplanner.services.temporal import shift_or_keep

logger = structlog.get_logger(__name__)

DEFAULT_MEDICATION_DOSES = 3
SIMPLE_WINDOW_HOURS = 72
SIMPLE_VACCINE_DOSES = 3
SIMPLE_VACCINE_SPACING_DAYS = 21


class ScheduleRecommender:
    """Rule-table driven series expansion."""

    def __init__(self, vocabulary: Vocabulary = SPANISH) -> None:
        self.vocabulary = vocabulary
        self.logger = logger.bind(component="schedule_recommender", locale=vocabulary.locale)

    def _event(
        self,
        kind: EventKind,
        base_name: str,
        date: datetime,
        index: int | None = None,
        total: int | None = None,
        **fields: str | None,
    ) -> ProposedEvent:
        full_name = base_name
        if index is not None and total is not None and total > 1:
            full_name = base_name + self.vocabulary.dose_suffix(index, total)
        return ProposedEvent(
            kind=kind, base_name=base_name, full_name=full_name, date=date, **fields
        )

    def recommend(
        self,
        kind: EventKind,
        base_name: str,
        start: datetime,
        dosage: str | None = None,
        hours_interval: int | None = None,
        total_doses: int | None = None,
    ) -> list[ProposedEvent]:
        match kind:
            case EventKind.VACCINE:
                return self.recommend_vaccine_series(base_name, start)
            case EventKind.MEDICATION:
                return self.recommend_medication_series(
                    base_name,
                    start,
                    hours_interval=hours_interval,
                    total_doses=DEFAULT_MEDICATION_DOSES if total_doses is None else total_doses,
                    dosage=dosage,
                )
            case EventKind.DEWORMING | EventKind.GROOMING | EventKind.WEIGHT:
                return [self._event(kind, base_name, start, dosage=dosage)]
            case _:
                assert_never(kind)

    def recommend_vaccine_series(self, base_name: str, start: datetime) -> list[ProposedEvent]:
        rule = self.vocabulary.rule_for(base_name)
        if rule is None:
            self.logger.debug("vaccine_rule_not_found", base_name=base_name)
            return [self._event(EventKind.VACCINE, base_name, start)]

        total = len(rule.offsets_days)
        events = [
            self._event(
                EventKind.VACCINE,
                base_name,
                shift_or_keep(start, offset, IntervalUnit.DAYS),
                index=i,
                total=total,
            )
            for i, offset in enumerate(rule.offsets_days, start=1)
        ]
        if rule.booster_months is not None:
            events.append(
                self._event(
                    EventKind.VACCINE,
                    base_name,
                    shift_or_keep(events[-1].date, rule.booster_months, IntervalUnit.MONTHS),
                    frequency=self.vocabulary.booster_frequency,
                    notes=self.vocabulary.booster_note,
                )
            )

        self.logger.debug(
            "vaccine_series_recommended",
            base_name=base_name,
            doses=total,
            booster=rule.booster_months is not None,
        )
        return events

    def recommend_medication_series(
        self,
        base_name: str,
        start: datetime,
        hours_interval: int | None = None,
        total_doses: int = DEFAULT_MEDICATION_DOSES,
        dosage: str | None = None,
    ) -> list[ProposedEvent]:
        interval = (
            hours_interval
            if hours_interval is not None and hours_interval > 0
            else self.vocabulary.default_hours_for(base_name)
        )
        total = max(1, total_doses)
        frequency = self.vocabulary.format_frequency(interval, IntervalUnit.HOURS)

        events = [
            self._event(
                EventKind.MEDICATION,
                base_name,
                shift_or_keep(start, interval * i, IntervalUnit.HOURS),
                index=i + 1,
                total=total,
                dosage=dosage,
                frequency=frequency,
            )
            for i in range(total)
        ]

        self.logger.debug(
            "medication_series_recommended",
            base_name=base_name,
            interval_hours=interval,
            doses=total,
        )
        return events

    def recommend_dates(
        self,
        kind: EventKind,
        start: datetime,
        hours_interval: int | None = None,
        total_doses: int | None = None,
    ) -> list[DatedSuggestion]:
        """Bare dates for treatments without a rule: a three-day window or a 3-dose vaccine."""
        match kind:
            case EventKind.MEDICATION:
                step = hours_interval if hours_interval and hours_interval > 0 else (
                    self.vocabulary.fallback_medication_hours
                )
                count = max(2, SIMPLE_WINDOW_HOURS // step) if total_doses is None else total_doses
                dates = self.generate_series(start, max(1, count), step, IntervalUnit.HOURS)
            case EventKind.VACCINE:
                dates = self.generate_series(
                    start, SIMPLE_VACCINE_DOSES, SIMPLE_VACCINE_SPACING_DAYS, IntervalUnit.DAYS
                )
            case EventKind.DEWORMING | EventKind.GROOMING | EventKind.WEIGHT:
                dates = [start]
            case _:
                assert_never(kind)
        return [DatedSuggestion(date=d) for d in dates]

    # Course planning

    def generate_series(
        self, start: datetime, count: int, spacing_value: int, spacing_unit: IntervalUnit
    ) -> list[datetime]:
        """`count` dates beginning at `start`, each `spacing` after the previous one."""
        if count < 1:
            return []
        dates = [start]
        for _ in range(count - 1):
            dates.append(shift_or_keep(dates[-1], spacing_value, spacing_unit))
        return dates

    def booster_starts(
        self, start: datetime, rounds: int, value: int, unit: IntervalUnit
    ) -> list[datetime]:
        """Start of each booster round; the anchor itself is not a round."""
        starts: list[datetime] = []
        last = start
        for _ in range(max(0, rounds)):
            last = shift_or_keep(last, value, unit)
            starts.append(last)
        return starts

    def _dates_until(
        self, start: datetime, until: datetime, step_value: int, step_unit: IntervalUnit
    ) -> list[datetime]:
        dates = [start]
        if step_value <= 0:
            return dates
        while True:
            candidate = shift_or_keep(dates[-1], step_value, step_unit)
            # A failed shift returns its input; stop rather than spin
            if candidate <= dates[-1] or candidate > until:
                return dates
            dates.append(candidate)

    def interval_summary(
        self, start: datetime, until: datetime, step_value: int, step_unit: IntervalUnit
    ) -> ScheduleSummary | None:
        """Dose count (anchor included) and last date of a course ending at `until`."""
        if until <= start or step_value <= 0:
            return None
        dates = self._dates_until(start, until, step_value, step_unit)
        return ScheduleSummary(total=len(dates), last=dates[-1])

    def vaccine_preview(
        self,
        start: datetime,
        extra_doses: int,
        spacing_value: int,
        spacing_unit: IntervalUnit,
        boosters_enabled: bool = False,
        booster_value: int = 12,
        booster_unit: IntervalUnit = IntervalUnit.MONTHS,
        booster_rounds: int = 1,
        booster_includes_series: bool = False,
    ) -> VaccinePreview:
        """
        Dates of a vaccine series plus its booster rounds.

        `extra_doses` counts doses after the anchor. A booster round is either
        a single date or, with `booster_includes_series`, a repeat of the whole
        series starting on the booster date.
        """
        series_count = max(1, extra_doses + 1)
        series = self.generate_series(start, series_count, spacing_value, spacing_unit)

        rounds: list[list[datetime]] = []
        if boosters_enabled:
            starts = self.booster_starts(start, booster_rounds, booster_value, booster_unit)
            for round_start in starts:
                if booster_includes_series:
                    rounds.append(
                        self.generate_series(round_start, series_count, spacing_value, spacing_unit)
                    )
                else:
                    rounds.append([round_start])

        return VaccinePreview(series_dates=series, booster_rounds=rounds)

    def plan_course(
        self,
        kind: EventKind,
        base_name: str,
        start: datetime,
        step_value: int,
        step_unit: IntervalUnit,
        until: datetime,
        dosage: str | None = None,
    ) -> list[ProposedEvent]:
        """
        Repeat an event every `step` until `until` (inclusive).

        Medication and vaccine courses are numbered; deworming and grooming
        repeats carry no suffix; a weight log never repeats.
        """
        dates = self._dates_until(start, until, step_value, step_unit)
        total = len(dates)
        frequency = (
            self.vocabulary.format_frequency(step_value, step_unit) if step_value > 0 else None
        )

        match kind:
            case EventKind.MEDICATION | EventKind.VACCINE:
                return [
                    self._event(
                        kind, base_name, d, index=i, total=total, dosage=dosage, frequency=frequency
                    )
                    for i, d in enumerate(dates, start=1)
                ]
            case EventKind.DEWORMING | EventKind.GROOMING:
                return [
                    self._event(kind, base_name, d, dosage=dosage, frequency=frequency)
                    for d in dates
                ]
            case EventKind.WEIGHT:
                return [self._event(kind, base_name, start)]
            case _:
                assert_never(kind)

    def plan_daily_course(
        self,
        base_name: str,
        start: datetime,
        times_per_day: int,
        duration_days: int,
        dosage: str | None = None,
    ) -> list[ProposedEvent]:
        """`times_per_day` medication doses for `duration_days`, evenly spaced in whole hours."""
        times_per_day = max(1, times_per_day)
        total = times_per_day * max(1, duration_days)
        step_hours = round(24 / times_per_day)
        frequency = self.vocabulary.format_frequency(step_hours, IntervalUnit.HOURS)

        return [
            self._event(
                EventKind.MEDICATION,
                base_name,
                d,
                index=i,
                total=total,
                dosage=dosage,
                frequency=frequency,
            )
            for i, d in enumerate(
                self.generate_series(start, total, step_hours, IntervalUnit.HOURS), start=1
            )
        ]
