"""
Tests for the weight anomaly detector in `careplanner/services/weight.py`.

Covers:
- z-score against a known baseline (mean 10, population std 1)
- insufficient samples, flat baselines and the trailing window
- filtering persisted records by owner
"""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from careplanner.domain.models import WeightSample
from careplanner.domain.records import VaccineRecord, WeightRecord
from careplanner.services.weight import WeightAnomalyDetector

START = datetime(2024, 1, 1)


def _samples(*weights: float) -> list[WeightSample]:
    """Chronological samples one week apart; the last weight is the newest."""
    return [
        WeightSample(date=START + timedelta(weeks=i), weight_kg=w) for i, w in enumerate(weights)
    ]


@pytest.fixture
def detector() -> WeightAnomalyDetector:
    return WeightAnomalyDetector()


def test_latest_three_deviations_away_is_anomalous(detector: WeightAnomalyDetector) -> None:
    result = detector.analyze(_samples(9.0, 11.0, 9.0, 11.0, 13.0))

    assert result is not None
    assert result.mean == pytest.approx(10.0)
    assert result.std == pytest.approx(1.0)
    assert result.z_score == pytest.approx(3.0)
    assert result.is_anomalous is True


def test_latest_close_to_mean_is_normal(detector: WeightAnomalyDetector) -> None:
    result = detector.analyze(_samples(9.0, 11.0, 9.0, 11.0, 10.5))

    assert result is not None
    assert result.z_score == pytest.approx(0.5)
    assert result.is_anomalous is False


def test_negative_deviation_is_anomalous(detector: WeightAnomalyDetector) -> None:
    result = detector.analyze(_samples(9.0, 11.0, 9.0, 11.0, 7.0))
    assert result is not None
    assert result.z_score == pytest.approx(-3.0)
    assert result.is_anomalous is True


def test_order_of_input_does_not_matter(detector: WeightAnomalyDetector) -> None:
    samples = _samples(9.0, 11.0, 9.0, 11.0, 13.0)
    result = detector.analyze(reversed(samples))
    assert result is not None
    assert result.z_score == pytest.approx(3.0)


def test_fewer_than_three_samples(detector: WeightAnomalyDetector) -> None:
    assert detector.analyze([]) is None
    assert detector.analyze(_samples(10.0, 12.0)) is None


def test_flat_baseline_uses_epsilon(detector: WeightAnomalyDetector) -> None:
    steady = detector.analyze(_samples(10.0, 10.0, 10.0, 10.0))
    assert steady is not None
    assert steady.std == pytest.approx(1e-4)
    assert steady.z_score == 0.0
    assert steady.is_anomalous is False

    bumped = detector.analyze(_samples(10.0, 10.0, 10.0, 10.01))
    assert bumped is not None
    assert bumped.is_anomalous is True


def test_only_the_trailing_window_counts() -> None:
    detector = WeightAnomalyDetector(window=2)
    # 50.0 falls outside the two-sample baseline
    result = detector.analyze(_samples(50.0, 9.0, 11.0, 10.0))

    assert result is not None
    assert result.mean == pytest.approx(10.0)
    assert result.is_anomalous is False


def test_threshold_is_configurable() -> None:
    lenient = WeightAnomalyDetector(threshold=4.0)
    result = lenient.analyze(_samples(9.0, 11.0, 9.0, 11.0, 13.0))
    assert result is not None
    assert result.is_anomalous is False


def test_analyze_records_filters_owner_and_kind(detector: WeightAnomalyDetector) -> None:
    owner, other = uuid4(), uuid4()
    records = [
        WeightRecord(owner_id=owner, date=s.date, weight_kg=s.weight_kg)
        for s in _samples(9.0, 11.0, 9.0, 11.0, 13.0)
    ]
    records.append(WeightRecord(owner_id=other, date=START + timedelta(weeks=10), weight_kg=40.0))
    records.append(VaccineRecord(owner_id=owner, date=START + timedelta(weeks=11), name="Rabia"))

    result = detector.analyze_records(records, owner)

    assert result is not None
    assert result.z_score == pytest.approx(3.0)
    assert detector.analyze_records(records, uuid4()) is None
