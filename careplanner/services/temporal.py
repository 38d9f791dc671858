"""
Temporal resolver: relative and absolute date-time phrases to a timestamp.

Resolution runs in fixed stages, each refining the previous one:
1. today / tomorrow keywords
2. "in N days|weeks|months" offsets
3. named weekday (next occurrence strictly after the resolved base)
4. explicit time of day applied to whatever date the stages produced

Calendar arithmetic goes through dateutil's relativedelta so months respect
month length and day-based offsets are wall-clock. Hour steps on aware
datetimes are elapsed time, measured in UTC.
"""

import re
from datetime import UTC, datetime, timedelta
from typing import assert_never

import structlog
from dateutil.relativedelta import relativedelta

from adapters.spanish.vocabulary import SPANISH
from careplanner.domain.models import IntervalUnit
from careplanner.domain.vocabulary import Vocabulary, word_alternation

logger = structlog.get_logger(__name__)


def add_interval(moment: datetime, value: int, unit: IntervalUnit) -> datetime:
    """Calendar-aware addition. Raises ValueError/OverflowError past the datetime range."""
    match unit:
        case IntervalUnit.HOURS:
            if moment.tzinfo is not None:
                shifted = moment.astimezone(UTC) + timedelta(hours=value)
                return shifted.astimezone(moment.tzinfo)
            delta = relativedelta(hours=value)
        case IntervalUnit.DAYS:
            delta = relativedelta(days=value)
        case IntervalUnit.WEEKS:
            delta = relativedelta(weeks=value)
        case IntervalUnit.MONTHS:
            delta = relativedelta(months=value)
        case _:
            assert_never(unit)
    return moment + delta


def shift_or_keep(moment: datetime, value: int, unit: IntervalUnit) -> datetime:
    """add_interval that keeps the previous valid date when arithmetic fails."""
    try:
        return add_interval(moment, value, unit)
    except (OverflowError, ValueError) as e:
        logger.warning(
            "calendar_arithmetic_failed",
            moment=moment.isoformat(),
            value=value,
            unit=unit.value,
            error=str(e),
        )
        return moment


def build_time_pattern(vocabulary: Vocabulary) -> re.Pattern[str]:
    """HH:MM, H:MM am/pm or H am/pm, optionally preceded by 'a las' / 'at'."""
    prefixes = word_alternation(vocabulary.time_prefixes)
    return re.compile(
        rf"(?:\b(?:{prefixes})\s+)?"
        r"(?:\b(?P<hour>\d{1,2}):(?P<minute>\d{2})(?:\s*(?P<meridiem>am|pm))?"
        r"|\b(?P<bare_hour>\d{1,2})\s*(?P<bare_meridiem>am|pm))\b",
        re.IGNORECASE,
    )


def build_relative_pattern(vocabulary: Vocabulary) -> re.Pattern[str]:
    """'in N days|weeks|months'; hours are not a relative-date unit."""
    units = word_alternation(
        word
        for unit, words in vocabulary.unit_words.items()
        if unit is not IntervalUnit.HOURS
        for word in words
    )
    prefixes = word_alternation(vocabulary.relative_prefixes)
    return re.compile(rf"\b(?:{prefixes})\s+(\d+)\s*({units})\b", re.IGNORECASE)


class TemporalResolver:
    """Turns a natural-language fragment plus a reference instant into a timestamp."""

    def __init__(self, vocabulary: Vocabulary = SPANISH) -> None:
        self.vocabulary = vocabulary
        self.logger = logger.bind(component="temporal_resolver", locale=vocabulary.locale)

        self._today = re.compile(
            rf"\b(?:{word_alternation(vocabulary.today_words)})\b", re.IGNORECASE
        )
        self._tomorrow = re.compile(
            rf"\b(?:{word_alternation(vocabulary.tomorrow_words)})\b", re.IGNORECASE
        )
        self._relative = build_relative_pattern(vocabulary)
        self._weekday = re.compile(
            rf"\b({word_alternation(vocabulary.weekdays)})\b", re.IGNORECASE
        )
        self._time = build_time_pattern(vocabulary)

    def resolve(self, text: str, reference: datetime) -> datetime | None:
        """
        Resolve `text` against `reference`.

        Returns None when no temporal expression is found; the caller decides
        the default.
        """
        resolved: datetime | None = None

        # Stage 1: today wins over tomorrow when both appear
        if self._today.search(text):
            resolved = reference
        elif self._tomorrow.search(text):
            resolved = shift_or_keep(reference, 1, IntervalUnit.DAYS)

        # Stage 2
        if match := self._relative.search(text):
            unit = self.vocabulary.unit_for(match.group(2))
            if unit is not None:
                resolved = shift_or_keep(resolved or reference, int(match.group(1)), unit)

        # Stage 3
        if match := self._weekday.search(text):
            target = self.vocabulary.weekdays[match.group(1).lower()]
            resolved = self._next_weekday(resolved or reference, target)

        # Stage 4: an out-of-range time leaves the earlier stages untouched
        if (hour_minute := self.time_of_day(text)) is not None:
            resolved = self._at_time_of_day(resolved or reference, *hour_minute)

        return resolved

    def time_of_day(self, text: str) -> tuple[int, int] | None:
        """Hour and minute of the first time-of-day expression, normalized to 24h."""
        match = self._time.search(text)
        if match is None:
            return None
        return self._hour_minute(match)

    def _next_weekday(self, origin: datetime, target: int) -> datetime:
        try:
            return origin + relativedelta(
                days=+1, weekday=target, hour=0, minute=0, second=0, microsecond=0
            )
        except (OverflowError, ValueError) as e:
            self.logger.warning("weekday_resolution_failed", error=str(e))
            return origin

    @staticmethod
    def _at_time_of_day(day: datetime, hour: int, minute: int) -> datetime:
        return day.replace(hour=hour, minute=minute, second=0, microsecond=0)

    @staticmethod
    def _hour_minute(match: re.Match[str]) -> tuple[int, int] | None:
        if match.group("hour") is not None:
            hour, minute = int(match.group("hour")), int(match.group("minute"))
            meridiem = match.group("meridiem")
        else:
            hour, minute = int(match.group("bare_hour")), 0
            meridiem = match.group("bare_meridiem")

        if meridiem is not None:
            meridiem = meridiem.lower()
            if meridiem == "pm" and hour < 12:
                hour += 12
            elif meridiem == "am" and hour == 12:
                hour = 0

        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            return None
        return hour, minute
