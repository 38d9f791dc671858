"""
Care-event engine: one entry point over the heuristic services and an
optional advanced (LLM) backend.

Key architectural decisions:
- Explicit feature snapshot: an immutable EngineConfig is passed in at
  construction and may be overridden per call, so no global flags exist
- Kill switch, not fallback: a disabled engine returns placeholders without
  running any heuristic
- Single attempt: when the advanced backend is preferred and available it is
  awaited once, bounded by a timeout; any failure is logged and the heuristic
  result is returned from the same call
- Type-safe AI responses: the pydantic-ai agents return the same Pydantic
  models as the heuristics, so callers cannot tell the paths apart
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timedelta
from typing import Protocol, TypeVar
from zoneinfo import ZoneInfo

import structlog
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from adapters.spanish.vocabulary import SPANISH
from careplanner.config import (
    AdvancedBackendConfig,
    AppConfig,
    EngineConfig,
    get_config,
    vocabulary_for,
)
from careplanner.domain.models import (
    DatedSuggestion,
    EventKind,
    PrescriptionExtractionResult,
    ProposedEvent,
    QuickAddParseResult,
    WeightAnomalyResult,
    WeightSample,
)
from careplanner.domain.vocabulary import Vocabulary
from careplanner.services.collaborators import ReminderScheduler, TextRecognizer
from careplanner.services.nlp_parser import NLPParser
from careplanner.services.schedule import ScheduleRecommender
from careplanner.services.weight import WeightAnomalyDetector

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class AdvancedBackendError(Exception):
    """Base class for failures of the advanced backend."""


class AdvancedBackendUnavailable(AdvancedBackendError):
    """No advanced backend is installed or it cannot be reached."""


class AdvancedBackendFailed(AdvancedBackendError):
    """The advanced backend was reached but did not produce a usable answer."""


class AdvancedBackend(Protocol):
    """
    Richer interpretation backend, async-first.

    Implementations raise AdvancedBackendError subclasses; the engine never
    lets them reach its callers.
    """

    async def parse_quick_add(
        self, text: str, reference: datetime, default_kind: EventKind | None
    ) -> QuickAddParseResult: ...

    async def recommend_series(
        self,
        kind: EventKind,
        base_name: str,
        start: datetime,
        dosage: str | None,
        hours_interval: int | None,
        total_doses: int | None,
    ) -> list[ProposedEvent]: ...

    async def extract_prescription(
        self, text: str, reference: datetime
    ) -> PrescriptionExtractionResult: ...


class UnavailableBackend:
    """Stand-in used when no advanced backend is configured; every call is unavailable."""

    async def parse_quick_add(
        self, text: str, reference: datetime, default_kind: EventKind | None
    ) -> QuickAddParseResult:
        raise AdvancedBackendUnavailable("no advanced backend configured")

    async def recommend_series(
        self,
        kind: EventKind,
        base_name: str,
        start: datetime,
        dosage: str | None,
        hours_interval: int | None,
        total_doses: int | None,
    ) -> list[ProposedEvent]:
        raise AdvancedBackendUnavailable("no advanced backend configured")

    async def extract_prescription(
        self, text: str, reference: datetime
    ) -> PrescriptionExtractionResult:
        raise AdvancedBackendUnavailable("no advanced backend configured")


class PydanticAIBackend:
    """
    Advanced backend built on pydantic-ai agents, one per operation.

    Each agent returns a validated domain model; provider or validation errors
    surface as AdvancedBackendFailed.
    """

    def __init__(self, config: AdvancedBackendConfig, vocabulary: Vocabulary = SPANISH) -> None:
        self.config = config
        self.vocabulary = vocabulary
        self.logger = logger.bind(component="pydantic_ai_backend", model=config.model_name)

        settings = ModelSettings(temperature=config.temperature)
        self.quick_add_agent = Agent(
            model=config.model_name,
            output_type=QuickAddParseResult,
            system_prompt=self._quick_add_prompt(),
            model_settings=settings,
            retries=config.retries,
            defer_model_check=True,
        )
        self.series_agent = Agent(
            model=config.model_name,
            output_type=list[ProposedEvent],
            system_prompt=self._series_prompt(),
            model_settings=settings,
            retries=config.retries,
            defer_model_check=True,
        )
        self.prescription_agent = Agent(
            model=config.model_name,
            output_type=PrescriptionExtractionResult,
            system_prompt=self._prescription_prompt(),
            model_settings=settings,
            retries=config.retries,
            defer_model_check=True,
        )

    def _kinds(self) -> str:
        labels = self.vocabulary.kind_labels
        return ", ".join(f"{kind.value} ({label})" for kind, label in labels.items())

    def _quick_add_prompt(self) -> str:
        return f"""You turn short pet-care notes into structured calendar events.

Notes are written in locale '{self.vocabulary.locale}'. Event kinds: {self._kinds()}.

Rules:
1. Return at most one event per note
2. base_name is the treatment name only, without dates, times, doses or frequencies
3. full_name equals base_name
4. Resolve relative dates ("tomorrow", weekdays, "in 3 days") against the reference time
5. When no date is present use the reference time plus one hour
6. Write dosage as "<amount> <unit>" with a dot decimal separator
7. If the note is empty return no events and this warning: {self.vocabulary.empty_input_warning}
"""

    def _series_prompt(self) -> str:
        return f"""You plan recurring pet-care treatments.

Event kinds: {self._kinds()}.

Rules:
1. The first event is dated at the start time given
2. Numbered doses append a suffix such as "{self.vocabulary.dose_suffix(1, 3)}" to base_name,
   counting from 1
3. A booster is a final unnumbered event with frequency "{self.vocabulary.booster_frequency}"
4. Only medication and vaccine treatments form series; other kinds return one event"""

    def _prescription_prompt(self) -> str:
        return f"""You read OCR text from veterinary prescriptions.

Event kinds: {self._kinds()}.

Extract the treatment name, dosage, frequency, manufacturer and first administration
date. Leave fields you cannot read empty. confidence is your certainty in [0, 1]."""

    async def parse_quick_add(
        self, text: str, reference: datetime, default_kind: EventKind | None
    ) -> QuickAddParseResult:
        prompt = f"Reference time: {reference.isoformat()}\n"
        if default_kind is not None:
            prompt += f"Kind when unclear: {default_kind.value}\n"
        prompt += f"Note: {text}"
        return await self._run(self.quick_add_agent, prompt, "parse_quick_add")

    async def recommend_series(
        self,
        kind: EventKind,
        base_name: str,
        start: datetime,
        dosage: str | None,
        hours_interval: int | None,
        total_doses: int | None,
    ) -> list[ProposedEvent]:
        prompt = (
            f"Kind: {kind.value}\nTreatment: {base_name}\nStart: {start.isoformat()}\n"
            f"Dosage: {dosage or 'unknown'}\n"
            f"Interval hours: {hours_interval or 'unknown'}\n"
            f"Total doses: {total_doses or 'unknown'}"
        )
        return await self._run(self.series_agent, prompt, "recommend_series")

    async def extract_prescription(
        self, text: str, reference: datetime
    ) -> PrescriptionExtractionResult:
        prompt = f"Reference time: {reference.isoformat()}\nPrescription text:\n{text}"
        return await self._run(self.prescription_agent, prompt, "extract_prescription")

    async def _run(self, agent: Agent[None, T], prompt: str, operation: str) -> T:
        try:
            result = await agent.run(prompt)
        except Exception as e:
            raise AdvancedBackendFailed(f"{operation}: {e}") from e
        self.logger.debug("advanced_backend_answered", operation=operation)
        return result.output


class CareEventEngine:
    """
    Facade used by the application.

    Async operations may consult the advanced backend; the sync ones are
    always heuristic.
    """

    def __init__(
        self,
        vocabulary: Vocabulary = SPANISH,
        features: EngineConfig | None = None,
        advanced: AdvancedBackend | None = None,
        recognizer: TextRecognizer | None = None,
        weight_detector: WeightAnomalyDetector | None = None,
        timezone: str = "UTC",
        timeout_seconds: float = 10.0,
        default_offset: timedelta = timedelta(hours=1),
    ) -> None:
        self.vocabulary = vocabulary
        self.features = features or EngineConfig()
        self.advanced: AdvancedBackend = advanced or UnavailableBackend()
        self.recognizer = recognizer
        self.weight_detector = weight_detector or WeightAnomalyDetector()
        self.timezone = ZoneInfo(timezone)
        self.timeout_seconds = timeout_seconds
        self.default_offset = default_offset

        self.parser = NLPParser(vocabulary)
        self.recommender = ScheduleRecommender(vocabulary)
        self.logger = logger.bind(component="care_event_engine", locale=vocabulary.locale)

    @classmethod
    def from_config(
        cls,
        config: AppConfig | None = None,
        advanced: AdvancedBackend | None = None,
        recognizer: TextRecognizer | None = None,
    ) -> "CareEventEngine":
        """Build an engine from the application configuration."""
        config = config or get_config()
        vocabulary = vocabulary_for(config.parsing.locale)
        if advanced is None and config.engine.advanced_available:
            advanced = PydanticAIBackend(config.advanced, vocabulary)

        return cls(
            vocabulary=vocabulary,
            features=config.engine,
            advanced=advanced,
            recognizer=recognizer,
            weight_detector=WeightAnomalyDetector(
                window=config.weight.window,
                threshold=config.weight.threshold,
                min_samples=config.weight.min_samples,
                epsilon=config.weight.epsilon,
            ),
            timezone=config.parsing.timezone,
            timeout_seconds=config.advanced.timeout_seconds,
            default_offset=timedelta(hours=config.parsing.default_offset_hours),
        )

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    async def _dispatch(
        self,
        operation: str,
        features: EngineConfig,
        advanced_call: Callable[[], Awaitable[T]],
        heuristic: Callable[[], T],
    ) -> T:
        """Advanced backend once when preferred and available, then the heuristic."""
        if features.prefer_advanced and features.advanced_available:
            try:
                return await asyncio.wait_for(advanced_call(), timeout=self.timeout_seconds)
            except Exception as e:
                self.logger.warning(
                    "advanced_backend_failed",
                    operation=operation,
                    error_type=type(e).__name__,
                    error=str(e),
                )
        return heuristic()

    def _disabled(self, operation: str) -> None:
        self.logger.info("engine_disabled", operation=operation)

    def _empty_extraction(self) -> PrescriptionExtractionResult:
        return PrescriptionExtractionResult(confidence=0.0)

    async def parse_quick_add(
        self,
        text: str,
        reference: datetime | None = None,
        default_kind: EventKind | None = None,
        features: EngineConfig | None = None,
    ) -> QuickAddParseResult:
        features = features or self.features
        if not features.enabled:
            self._disabled("parse_quick_add")
            return QuickAddParseResult(events=[], warnings=[self.vocabulary.disabled_warning])

        when = reference or self.now()
        return await self._dispatch(
            "parse_quick_add",
            features,
            lambda: self.advanced.parse_quick_add(text, when, default_kind),
            lambda: self.parser.parse_quick_add(text, when, default_kind, self.default_offset),
        )

    async def recommend_series(
        self,
        kind: EventKind,
        base_name: str,
        start: datetime,
        dosage: str | None = None,
        hours_interval: int | None = None,
        total_doses: int | None = None,
        features: EngineConfig | None = None,
    ) -> list[ProposedEvent]:
        features = features or self.features
        if not features.enabled:
            self._disabled("recommend_series")
            return []

        return await self._dispatch(
            "recommend_series",
            features,
            lambda: self.advanced.recommend_series(
                kind, base_name, start, dosage, hours_interval, total_doses
            ),
            lambda: self.recommender.recommend(
                kind, base_name, start, dosage, hours_interval, total_doses
            ),
        )

    async def extract_prescription(
        self,
        image_bytes: bytes,
        reference: datetime | None = None,
        features: EngineConfig | None = None,
    ) -> PrescriptionExtractionResult:
        """Image -> OCR collaborator -> prescription reader."""
        features = features or self.features
        if not features.enabled:
            self._disabled("extract_prescription")
            return self._empty_extraction()
        if self.recognizer is None:
            self.logger.warning("text_recognizer_missing")
            return self._empty_extraction()

        recognized = await self.recognizer.recognize_text(image_bytes)
        if recognized.is_err():
            error = recognized.unwrap_err()
            self.logger.warning(
                "prescription_image_unreadable", error_type=type(error).__name__, error=str(error)
            )
            return self._empty_extraction()

        text = recognized.unwrap()
        when = reference or self.now()
        return await self._dispatch(
            "extract_prescription",
            features,
            lambda: self.advanced.extract_prescription(text, when),
            lambda: self.parser.extract_from_ocr(text, when),
        )

    def extract_from_text(
        self,
        text: str,
        reference: datetime | None = None,
        features: EngineConfig | None = None,
    ) -> PrescriptionExtractionResult:
        features = features or self.features
        if not features.enabled:
            self._disabled("extract_from_text")
            return self._empty_extraction()
        return self.parser.extract_from_ocr(text, reference or self.now())

    def recommend_dates(
        self,
        kind: EventKind,
        start: datetime,
        hours_interval: int | None = None,
        total_doses: int | None = None,
        features: EngineConfig | None = None,
    ) -> list[DatedSuggestion]:
        features = features or self.features
        if not features.enabled:
            self._disabled("recommend_dates")
            return []
        return self.recommender.recommend_dates(kind, start, hours_interval, total_doses)

    def analyze_weight(self, samples: Iterable[WeightSample]) -> WeightAnomalyResult | None:
        """Statistics only; not subject to the feature switch."""
        return self.weight_detector.analyze(samples)

    def schedule_reminders(
        self,
        events: Iterable[ProposedEvent],
        scheduler: ReminderScheduler,
        owner_name: str,
        lead_time: timedelta = timedelta(hours=1),
    ) -> int:
        """Hand each event to the reminder scheduler; returns how many were scheduled."""
        count = 0
        for event in events:
            scheduler.schedule(
                id=event.id,
                title=self.vocabulary.kind_labels[event.kind],
                body=f"{owner_name} – {event.full_name}",
                fire_at=event.date,
                lead_time=lead_time,
            )
            count += 1
        self.logger.info(
            "reminders_scheduled", count=count, lead_time_seconds=lead_time.total_seconds()
        )
        return count
