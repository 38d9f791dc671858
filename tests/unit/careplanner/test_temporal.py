"""
Tests for the temporal resolver in `careplanner/services/temporal.py`.

Covers:
- today/tomorrow keywords and their precedence
- "in N units" offsets, including month-end clamping
- weekday resolution (midnight of the next matching day, strictly after the base)
- time-of-day parsing with am/pm normalization and invalid times
- calendar arithmetic that overflows keeps the previous date
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from adapters.english.vocabulary import ENGLISH
from careplanner.domain.models import IntervalUnit
from careplanner.services.temporal import TemporalResolver, add_interval, shift_or_keep

# Monday
REFERENCE = datetime(2024, 1, 1, 9, 0)


@pytest.fixture
def resolver() -> TemporalResolver:
    return TemporalResolver()


def test_no_temporal_expression_returns_none(resolver: TemporalResolver) -> None:
    assert resolver.resolve("vacuna rabia", REFERENCE) is None


def test_today_keeps_reference(resolver: TemporalResolver) -> None:
    assert resolver.resolve("hoy", REFERENCE) == REFERENCE


def test_tomorrow_with_and_without_tilde(resolver: TemporalResolver) -> None:
    expected = datetime(2024, 1, 2, 9, 0)
    assert resolver.resolve("mañana", REFERENCE) == expected
    assert resolver.resolve("MANANA", REFERENCE) == expected


def test_today_wins_over_tomorrow(resolver: TemporalResolver) -> None:
    assert resolver.resolve("hoy o mañana", REFERENCE) == REFERENCE


def test_tomorrow_at_3pm(resolver: TemporalResolver) -> None:
    resolved = resolver.resolve("vacuna rabia mañana a las 3pm", REFERENCE)
    assert resolved == datetime(2024, 1, 2, 15, 0)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("en 3 días", datetime(2024, 1, 4, 9, 0)),
        ("en 2 semanas", datetime(2024, 1, 15, 9, 0)),
        ("en 1 mes", datetime(2024, 2, 1, 9, 0)),
    ],
)
def test_relative_offsets(resolver: TemporalResolver, text: str, expected: datetime) -> None:
    assert resolver.resolve(text, REFERENCE) == expected


def test_relative_month_clamps_to_month_end(resolver: TemporalResolver) -> None:
    reference = datetime(2024, 1, 31, 10, 0)
    assert resolver.resolve("en 1 mes", reference) == datetime(2024, 2, 29, 10, 0)


def test_relative_offset_stacks_on_tomorrow(resolver: TemporalResolver) -> None:
    assert resolver.resolve("mañana y en 2 días", REFERENCE) == datetime(2024, 1, 4, 9, 0)


def test_weekday_is_next_occurrence_at_midnight(resolver: TemporalResolver) -> None:
    assert resolver.resolve("viernes", REFERENCE) == datetime(2024, 1, 5, 0, 0)


def test_same_weekday_moves_a_full_week(resolver: TemporalResolver) -> None:
    # REFERENCE is a Monday
    assert resolver.resolve("lunes", REFERENCE) == datetime(2024, 1, 8, 0, 0)


def test_weekday_searches_forward_from_tomorrow(resolver: TemporalResolver) -> None:
    assert resolver.resolve("mañana martes", REFERENCE) == datetime(2024, 1, 9, 0, 0)


def test_weekday_with_time(resolver: TemporalResolver) -> None:
    resolved = resolver.resolve("miércoles a las 10:30", REFERENCE)
    assert resolved == datetime(2024, 1, 3, 10, 30)


def test_time_alone_applies_to_reference_date(resolver: TemporalResolver) -> None:
    assert resolver.resolve("a las 18:45", REFERENCE) == datetime(2024, 1, 1, 18, 45)


def test_invalid_time_leaves_base_unchanged(resolver: TemporalResolver) -> None:
    assert resolver.resolve("mañana a las 25:00", REFERENCE) == datetime(2024, 1, 2, 9, 0)


def test_invalid_time_alone_is_unresolved(resolver: TemporalResolver) -> None:
    assert resolver.resolve("a las 25:00", REFERENCE) is None
    assert resolver.resolve("Rabia 24:30", REFERENCE) is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("3pm", (15, 0)),
        ("12pm", (12, 0)),
        ("12am", (0, 0)),
        ("7:05 PM", (19, 5)),
        ("08:15", (8, 15)),
        ("a las 9 am", (9, 0)),
    ],
)
def test_time_of_day_normalization(
    resolver: TemporalResolver, text: str, expected: tuple[int, int]
) -> None:
    assert resolver.time_of_day(text) == expected


def test_time_of_day_none_without_marker(resolver: TemporalResolver) -> None:
    assert resolver.time_of_day("cada 8 horas") is None
    assert resolver.time_of_day("99:99") is None


def test_english_vocabulary() -> None:
    resolver = TemporalResolver(ENGLISH)
    assert resolver.resolve("rabies tomorrow at 3pm", REFERENCE) == datetime(2024, 1, 2, 15, 0)
    assert resolver.resolve("in 2 weeks", REFERENCE) == datetime(2024, 1, 15, 9, 0)
    assert resolver.resolve("next friday", REFERENCE) == datetime(2024, 1, 5, 0, 0)


class TestCalendarArithmetic:
    def test_add_interval_units(self) -> None:
        start = datetime(2024, 1, 31, 8, 0)
        assert add_interval(start, 8, IntervalUnit.HOURS) == datetime(2024, 1, 31, 16, 0)
        assert add_interval(start, 1, IntervalUnit.DAYS) == datetime(2024, 2, 1, 8, 0)
        assert add_interval(start, 1, IntervalUnit.WEEKS) == datetime(2024, 2, 7, 8, 0)
        assert add_interval(start, 1, IntervalUnit.MONTHS) == datetime(2024, 2, 29, 8, 0)

    def test_add_interval_raises_past_range(self) -> None:
        with pytest.raises((OverflowError, ValueError)):
            add_interval(datetime(9999, 12, 31), 1, IntervalUnit.MONTHS)

    def test_shift_or_keep_returns_previous_date_on_failure(self) -> None:
        last = datetime(9999, 12, 31, 12, 0)
        assert shift_or_keep(last, 2, IntervalUnit.DAYS) == last
        assert shift_or_keep(last, 1, IntervalUnit.MONTHS) == last

    def test_hour_steps_are_elapsed_time_across_dst(self) -> None:
        new_york = ZoneInfo("America/New_York")
        # Clocks jump from 02:00 to 03:00 on 2024-03-10
        start = datetime(2024, 3, 9, 18, 30, tzinfo=new_york)

        shifted = add_interval(start, 8, IntervalUnit.HOURS)

        assert shifted.astimezone(UTC) - start.astimezone(UTC) == timedelta(hours=8)
        assert (shifted.hour, shifted.minute) == (3, 30)
        assert shifted.utcoffset() == timedelta(hours=-4)

    def test_day_steps_keep_wall_clock_across_dst(self) -> None:
        new_york = ZoneInfo("America/New_York")
        start = datetime(2024, 3, 9, 18, 30, tzinfo=new_york)

        shifted = add_interval(start, 1, IntervalUnit.DAYS)

        assert (shifted.day, shifted.hour, shifted.minute) == (10, 18, 30)
        assert shifted.astimezone(UTC) - start.astimezone(UTC) == timedelta(hours=23)
