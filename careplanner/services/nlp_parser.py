"""
Heuristic natural-language parser for quick-add text and OCR prescriptions.

Composes the temporal resolver, entity extractors and kind classifier. Both
entry points fail softly: blank input yields a warning, malformed input yields
a partially populated (lower confidence) result, never an exception.
"""

import re
from datetime import datetime, timedelta

import structlog

from adapters.spanish.vocabulary import SPANISH
from careplanner.domain.models import (
    EventKind,
    PrescriptionExtractionResult,
    ProposedEvent,
    QuickAddParseResult,
)
from careplanner.domain.vocabulary import Vocabulary, word_alternation
from careplanner.services.extractors import EntityExtractor, KindClassifier
from careplanner.services.temporal import (
    TemporalResolver,
    build_relative_pattern,
    build_time_pattern,
)

logger = structlog.get_logger(__name__)

# Independent partial signals of an OCR read; the sum is capped at 1.0
CONFIDENCE_WEIGHTS: dict[str, float] = {
    "kind": 0.25,
    "base_name": 0.25,
    "dosage": 0.15,
    "frequency": 0.15,
    "date": 0.20,
}


class NLPParser:
    """
    Turns one line of free text into a proposed event.

    The base name is the original text truncated at the earliest cut point.
    Cut points are listed explicitly in `cut_points`; the minimum start
    position among all of them wins.
    """

    def __init__(self, vocabulary: Vocabulary = SPANISH) -> None:
        self.vocabulary = vocabulary
        self.resolver = TemporalResolver(vocabulary)
        self.extractor = EntityExtractor(vocabulary)
        self.classifier = KindClassifier(vocabulary)
        self.logger = logger.bind(component="nlp_parser", locale=vocabulary.locale)

        date_keywords = word_alternation(vocabulary.today_words + vocabulary.tomorrow_words)
        relative_prefixes = word_alternation(vocabulary.relative_prefixes)
        self.cut_points: tuple[tuple[str, re.Pattern[str]], ...] = (
            (
                "dose_marker",
                re.compile(
                    rf"\b(?:{word_alternation(vocabulary.dose_markers)})\s*\d+(?:/\d+)?\b",
                    re.IGNORECASE,
                ),
            ),
            ("dosage", self.extractor.dosage_pattern),
            ("frequency", self.extractor.frequency_pattern),
            ("time_of_day", build_time_pattern(vocabulary)),
            ("relative_date", build_relative_pattern(vocabulary)),
            (
                "weekday",
                re.compile(rf"\b(?:{word_alternation(vocabulary.weekdays)})\b", re.IGNORECASE),
            ),
            (
                "date_keyword",
                re.compile(
                    rf"\b(?:{date_keywords})\b|\b(?:{relative_prefixes})\s", re.IGNORECASE
                ),
            ),
            ("manufacturer", self.extractor.manufacturer_pattern),
            ("parenthesis", re.compile(r"\(")),
            ("comma", re.compile(",")),
        )

    def base_name(self, text: str) -> str:
        """Text before the earliest cut point; never empty for non-empty input."""
        trimmed = text.strip()
        positions = [
            match.start() for _, pattern in self.cut_points if (match := pattern.search(trimmed))
        ]
        if not positions:
            return trimmed
        return trimmed[: min(positions)].strip() or trimmed

    def parse_quick_add(
        self,
        text: str,
        reference: datetime,
        default_kind: EventKind | None = None,
        default_offset: timedelta = timedelta(hours=1),
    ) -> QuickAddParseResult:
        """Parse one line of quick-add text into zero or one proposed event."""
        trimmed = text.strip()
        if not trimmed:
            self.logger.info("quick_add_empty_input")
            return QuickAddParseResult(events=[], warnings=[self.vocabulary.empty_input_warning])

        kind = self.classifier.classify(trimmed, default_kind)
        resolved = self.resolver.resolve(trimmed, reference)
        date = resolved if resolved is not None else reference + default_offset
        base_name = self.base_name(trimmed)

        event = ProposedEvent(
            kind=kind,
            base_name=base_name,
            full_name=base_name,
            date=date,
            dosage=self.extractor.dosage(trimmed),
            frequency=self.extractor.frequency(trimmed),
            manufacturer=self.extractor.manufacturer(trimmed),
        )

        self.logger.debug(
            "quick_add_parsed",
            kind=kind.value,
            base_name=base_name,
            date_resolved=resolved is not None,
            has_dosage=event.dosage is not None,
            has_frequency=event.frequency is not None,
        )
        return QuickAddParseResult(events=[event], warnings=[])

    def extract_from_ocr(self, text: str, reference: datetime) -> PrescriptionExtractionResult:
        """Best-effort read of OCR text; confidence reflects which fields were found."""
        normalized = text.replace("\r", "\n").replace("  ", " ")

        kind = self.classifier.match(normalized)
        first_line = next(
            (line.strip() for line in normalized.split("\n") if line.strip()), None
        )
        dosage = self.extractor.dosage(normalized)
        frequency = self.extractor.frequency(normalized)
        date = self.resolver.resolve(normalized, reference)

        found = {
            "kind": kind is not None,
            "base_name": bool(first_line),
            "dosage": bool(dosage),
            "frequency": bool(frequency),
            "date": date is not None,
        }
        score = sum(CONFIDENCE_WEIGHTS[signal] for signal, hit in found.items() if hit)
        confidence = round(min(1.0, score), 4)

        self.logger.info(
            "prescription_text_extracted",
            confidence=confidence,
            signals=[signal for signal, hit in found.items() if hit],
        )

        return PrescriptionExtractionResult(
            kind=kind,
            base_name=first_line,
            full_name=first_line,
            dosage=dosage,
            frequency=frequency,
            date=date,
            manufacturer=self.extractor.manufacturer(normalized),
            confidence=confidence,
        )
