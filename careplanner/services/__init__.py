"""
Core services for the application.

This package contains the main service implementations: text interpretation,
series planning, dose grouping, weight analysis and the dispatch facade.
"""

from .ai_engine import (
    AdvancedBackend,
    AdvancedBackendError,
    AdvancedBackendFailed,
    AdvancedBackendUnavailable,
    CareEventEngine,
    PydanticAIBackend,
    UnavailableBackend,
)
from .collaborators import ImageDecodeError, ReminderScheduler, Result, TextRecognizer
from .dose_series import DoseSeries
from .nlp_parser import NLPParser
from .schedule import ScheduleRecommender
from .weight import WeightAnomalyDetector

__all__ = [
    "AdvancedBackend",
    "AdvancedBackendError",
    "AdvancedBackendFailed",
    "AdvancedBackendUnavailable",
    "CareEventEngine",
    "DoseSeries",
    "ImageDecodeError",
    "NLPParser",
    "PydanticAIBackend",
    "ReminderScheduler",
    "Result",
    "ScheduleRecommender",
    "TextRecognizer",
    "UnavailableBackend",
    "WeightAnomalyDetector",
]
