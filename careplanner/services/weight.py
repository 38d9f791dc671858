"""
Weight anomaly detection by z-score against a trailing baseline.

Stateless: every call recomputes from the full sample set it is given.
"""

from collections.abc import Iterable
from statistics import fmean, pstdev
from uuid import UUID

import structlog

from careplanner.domain.models import WeightAnomalyResult, WeightSample
from careplanner.domain.records import CareRecord, WeightRecord

logger = structlog.get_logger(__name__)


class WeightAnomalyDetector:
    """Flags the newest reading when it sits `threshold` deviations off the baseline."""

    def __init__(
        self,
        window: int = 6,
        threshold: float = 2.5,
        min_samples: int = 3,
        epsilon: float = 1e-4,
    ) -> None:
        self.window = window
        self.threshold = threshold
        self.min_samples = min_samples
        self.epsilon = epsilon
        self.logger = logger.bind(component="weight_anomaly_detector")

    def analyze(self, samples: Iterable[WeightSample]) -> WeightAnomalyResult | None:
        """
        Compare the newest sample to the `window` samples before it.

        Returns None when there are fewer than `min_samples` readings. The
        baseline uses the population standard deviation, floored at epsilon.
        """
        ordered = sorted(samples, key=lambda s: s.date, reverse=True)
        if len(ordered) < self.min_samples:
            self.logger.debug("weight_insufficient_samples", samples=len(ordered))
            return None

        latest = ordered[0].weight_kg
        baseline = [s.weight_kg for s in ordered[1 : 1 + self.window]]
        mean = fmean(baseline)
        std = max(pstdev(baseline, mu=mean), self.epsilon)
        z_score = (latest - mean) / std
        is_anomalous = abs(z_score) >= self.threshold

        if is_anomalous:
            self.logger.info(
                "weight_anomaly_detected",
                latest_kg=latest,
                mean_kg=round(mean, 3),
                z_score=round(z_score, 3),
            )

        return WeightAnomalyResult(is_anomalous=is_anomalous, z_score=z_score, mean=mean, std=std)

    def analyze_records(
        self, records: Iterable[CareRecord], owner_id: UUID
    ) -> WeightAnomalyResult | None:
        """Run `analyze` over one owner's weight records."""
        return self.analyze(
            WeightSample(date=r.date, weight_kg=r.weight_kg)
            for r in records
            if isinstance(r, WeightRecord) and r.owner_id == owner_id
        )
