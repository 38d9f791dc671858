"""
Tests for configuration management in `careplanner/config.py`.

Covers:
- Environment parsing and debug defaults
- Feature switch boolean parsing
- Logging level coercion to the expected Literal
- Timezone and locale validation
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog
from pydantic import ValidationError

from adapters.english.vocabulary import ENGLISH
from adapters.spanish.vocabulary import SPANISH
from careplanner.config import (
    AppConfig,
    LoggingConfig,
    ParsingConfig,
    configure_logging,
    get_config,
    load_config_from_env,
    print_config_summary,
    vocabulary_for,
)

_CARE_ENV = (
    "CARE_AI_ENABLED",
    "CARE_AI_PREFER_ADVANCED",
    "CARE_AI_ADVANCED_AVAILABLE",
    "ADVANCED_MODEL",
    "ADVANCED_TIMEOUT_SECONDS",
    "CARE_LOCALE",
    "CARE_TIMEZONE",
    "WEIGHT_WINDOW",
    "WEIGHT_THRESHOLD",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _CARE_ENV:
        monkeypatch.delenv(name, raising=False)


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.engine.enabled is True
    assert config.engine.prefer_advanced is False
    assert config.engine.advanced_available is False
    assert config.parsing.locale == "es"
    assert config.parsing.timezone == "UTC"
    assert config.weight.window == 6
    assert config.weight.threshold == 2.5


def test_production_uses_json_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_feature_switch_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.setenv("CARE_AI_ENABLED", "off")
    monkeypatch.setenv("CARE_AI_PREFER_ADVANCED", "yes")
    monkeypatch.setenv("CARE_AI_ADVANCED_AVAILABLE", "1")

    engine = load_config_from_env().engine

    assert engine.enabled is False
    assert engine.prefer_advanced is True
    assert engine.advanced_available is True


def test_advanced_and_weight_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.setenv("ADVANCED_MODEL", "test")
    monkeypatch.setenv("ADVANCED_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("WEIGHT_WINDOW", "4")
    monkeypatch.setenv("WEIGHT_THRESHOLD", "3")

    config = load_config_from_env()

    assert config.advanced.model_name == "test"
    assert config.advanced.timeout_seconds == 2.5
    assert config.weight.window == 4
    assert config.weight.threshold == 3.0


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    assert load_config_from_env().logging.level == "INFO"

    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_config_from_env().logging.level == "DEBUG"


def test_locale_and_timezone_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("CARE_LOCALE", " EN ")
    monkeypatch.setenv("CARE_TIMEZONE", "Europe/Madrid")

    parsing = load_config_from_env().parsing

    assert parsing.locale == "en"
    assert parsing.timezone == "Europe/Madrid"


def test_unknown_locale_fails_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("CARE_LOCALE", "fr")

    with pytest.raises(ValidationError):
        load_config_from_env()


def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(ValidationError, match="unknown timezone"):
        ParsingConfig(timezone="Mars/Olympus_Mons")


def test_get_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(environment="production", debug=True)


def test_engine_switches_are_frozen() -> None:
    config = AppConfig()
    with pytest.raises(ValidationError):
        config.engine.enabled = False  # type: ignore[misc]


def test_vocabulary_for() -> None:
    assert vocabulary_for("es") is SPANISH
    assert vocabulary_for("en") is ENGLISH
    with pytest.raises(KeyError):
        vocabulary_for("fr")


@pytest.mark.parametrize("fmt", ["json", "console"])
def test_configure_logging(fmt: str) -> None:
    configure_logging(LoggingConfig(level="DEBUG", format=fmt))  # type: ignore[arg-type]
    try:
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()


def test_print_config_summary(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("CARE_LOCALE", "en")

    print_config_summary()

    out = capsys.readouterr().out
    assert "CONFIGURATION SUMMARY" in out
    assert "Locale: en" in out
    assert "Environment: development" in out
