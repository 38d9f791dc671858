"""
Configuration management with environment variable support and validation.

Design principles:
- One immutable snapshot per process, threaded into services explicitly
- Validation at startup (fail fast)
- Type safety with Pydantic
- Heuristics work with no configuration at all; the advanced backend is opt-in
"""

import logging
import os
from functools import lru_cache
from typing import Literal, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from structlog.typing import Processor

from adapters.english.vocabulary import ENGLISH
from adapters.spanish.vocabulary import SPANISH
from careplanner.domain.vocabulary import Vocabulary

# Load environment variables from .env file
load_dotenv()

Locale = Literal["es", "en"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

VOCABULARIES: dict[str, Vocabulary] = {"es": SPANISH, "en": ENGLISH}


class EngineConfig(BaseModel):
    """Feature switches of the dispatch facade; a snapshot, never mutated."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Hard kill switch for every engine call")
    prefer_advanced: bool = Field(default=False, description="Try the advanced backend first")
    advanced_available: bool = Field(
        default=False, description="Whether an advanced backend is installed and reachable"
    )


class AdvancedBackendConfig(BaseModel):
    """Model settings for the pydantic-ai backend."""

    model_name: str = Field(
        default="openai:gpt-4o-mini", description="Model used by the advanced backend"
    )
    timeout_seconds: float = Field(
        default=10.0, gt=0.0, description="Upper bound for one advanced attempt"
    )
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)
    retries: int = Field(default=1, ge=0, description="Output validation retries inside the agent")


class ParsingConfig(BaseModel):
    """Locale and clock used when callers do not pass their own."""

    locale: Locale = Field(default="es", description="Keyword set used by the heuristics")
    timezone: str = Field(default="UTC", description="IANA zone for the default reference time")
    default_offset_hours: int = Field(
        default=1, ge=0, description="Offset applied when no date is found in the text"
    )

    @field_validator("timezone")
    @classmethod
    def timezone_exists(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {v}") from e
        return v


class WeightConfig(BaseModel):
    """Weight anomaly detector tuning."""

    window: int = Field(default=6, gt=0, description="Baseline samples before the newest one")
    threshold: float = Field(default=2.5, gt=0.0, description="|z| at which a reading is flagged")
    min_samples: int = Field(default=3, ge=2)
    epsilon: float = Field(default=1e-4, gt=0.0, description="Floor for the baseline std")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    engine: EngineConfig = Field(default_factory=EngineConfig)
    advanced: AdvancedBackendConfig = Field(default_factory=AdvancedBackendConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    weight: WeightConfig = Field(default_factory=WeightConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> LogLevel:
        v = val.strip().upper()
        return cast(
            LogLevel, v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO"
        )

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    engine_config = EngineConfig(
        enabled=_parse_bool(os.getenv("CARE_AI_ENABLED"), True),
        prefer_advanced=_parse_bool(os.getenv("CARE_AI_PREFER_ADVANCED"), False),
        advanced_available=_parse_bool(os.getenv("CARE_AI_ADVANCED_AVAILABLE"), False),
    )

    advanced_config = AdvancedBackendConfig(
        model_name=os.getenv("ADVANCED_MODEL", "openai:gpt-4o-mini"),
        timeout_seconds=float(os.getenv("ADVANCED_TIMEOUT_SECONDS", "10.0")),
    )

    parsing_config = ParsingConfig(
        locale=cast(Locale, os.getenv("CARE_LOCALE", "es").strip().lower()),
        timezone=os.getenv("CARE_TIMEZONE", "UTC"),
    )

    weight_config = WeightConfig(
        window=int(os.getenv("WEIGHT_WINDOW", "6")),
        threshold=float(os.getenv("WEIGHT_THRESHOLD", "2.5")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        engine=engine_config,
        advanced=advanced_config,
        parsing=parsing_config,
        weight=weight_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def vocabulary_for(locale: str) -> Vocabulary:
    """Vocabulary registered for `locale`; raises KeyError for unknown locales."""
    return VOCABULARIES[locale]


def configure_logging(config: LoggingConfig) -> None:
    """Install the structlog processor chain over the stdlib logging backend."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, config.level))

    renderer: Processor = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\nENGINE")
    print(f"Enabled: {config.engine.enabled}")
    print(f"Prefer Advanced: {config.engine.prefer_advanced}")
    print(f"Advanced Available: {config.engine.advanced_available}")
    print(f"Advanced Model: {config.advanced.model_name} ({config.advanced.timeout_seconds}s)")

    print("\nPARSING")
    print(f"Locale: {config.parsing.locale}")
    print(f"Timezone: {config.parsing.timezone}")

    print("\nWEIGHT")
    print(f"Window: {config.weight.window}")
    print(f"Threshold: {config.weight.threshold}")


if __name__ == "__main__":
    print_config_summary()
