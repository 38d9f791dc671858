"""
Entity extractors and the kind classifier.

Every extractor is a pure function of its input text: patterns are compiled
once per instance from the vocabulary, never per call, and matching is
case-insensitive so the original casing can be sliced back out.
"""

import re

from adapters.spanish.vocabulary import SPANISH
from careplanner.domain.models import EventKind
from careplanner.domain.vocabulary import Vocabulary, word_alternation


def build_dosage_pattern(vocabulary: Vocabulary) -> re.Pattern[str]:
    units = word_alternation(vocabulary.dosage_units)
    return re.compile(rf"\b(\d+(?:[.,]\d+)?)\s*({units})\b", re.IGNORECASE)


def build_frequency_pattern(vocabulary: Vocabulary) -> re.Pattern[str]:
    units = word_alternation(w for words in vocabulary.unit_words.values() for w in words)
    prefixes = word_alternation(vocabulary.frequency_prefixes)
    return re.compile(rf"\b(?:{prefixes})\s+(?:(\d+)\s*)?({units})\b", re.IGNORECASE)


def build_manufacturer_pattern(vocabulary: Vocabulary) -> re.Pattern[str]:
    labels = word_alternation(vocabulary.manufacturer_labels)
    return re.compile(rf"\b(?:{labels})[ \t]*[:\-]?[ \t]*([^\n,;]+)", re.IGNORECASE)


class EntityExtractor:
    """Pulls dosage, frequency and manufacturer substrings out of free text."""

    def __init__(self, vocabulary: Vocabulary = SPANISH) -> None:
        self.vocabulary = vocabulary
        self.dosage_pattern = build_dosage_pattern(vocabulary)
        self.frequency_pattern = build_frequency_pattern(vocabulary)
        self.manufacturer_pattern = build_manufacturer_pattern(vocabulary)

    def dosage(self, text: str) -> str | None:
        """First '<qty> <unit>' with a dot decimal separator, e.g. '2.5 ml'."""
        match = self.dosage_pattern.search(text)
        if match is None:
            return None
        quantity = match.group(1).replace(",", ".")
        return f"{quantity} {match.group(2).lower()}"

    def frequency(self, text: str) -> str | None:
        """First 'every N unit' phrase in canonical form; a missing N means 1."""
        match = self.frequency_pattern.search(text)
        if match is None:
            return None
        unit = self.vocabulary.unit_for(match.group(2))
        if unit is None:
            return None
        count = int(match.group(1)) if match.group(1) else 1
        return self.vocabulary.format_frequency(count, unit)

    def manufacturer(self, text: str) -> str | None:
        match = self.manufacturer_pattern.search(text)
        if match is None:
            return None
        value = match.group(1).strip()
        return value or None


class KindClassifier:
    """
    Keyword-containment classification, evaluated top to bottom.

    The rule order comes from the vocabulary and is significant: vaccine,
    deworming, grooming and weight keywords are checked before the generic
    medication signals.
    """

    def __init__(self, vocabulary: Vocabulary = SPANISH) -> None:
        self.rules = vocabulary.kind_rules

    def match(self, text: str) -> EventKind | None:
        lower = text.lower()
        for kind, keywords in self.rules:
            if any(keyword in lower for keyword in keywords):
                return kind
        return None

    def classify(self, text: str, default: EventKind | None = None) -> EventKind:
        return self.match(text) or default or EventKind.MEDICATION
