"""Tests for domain errors, configuration loading and logging setup."""

import json
import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from trip_planner.config import get_config, reset_config
from trip_planner.domain.errors import (
    CityResolutionError,
    InvalidRequestError,
    LLMError,
    PlannerError,
    ProviderError,
    SessionNotFoundError,
    error_payload,
    is_input_error,
)
from trip_planner.logging_setup import JsonFormatter, configure_logging


class TestErrors:
    @pytest.mark.parametrize(
        "error,code",
        [
            (CityResolutionError("Which city?", reason="MISSING_CITY"), "MISSING_CITY"),
            (CityResolutionError("No such city", reason="CITY_NOT_FOUND", city="Atlantis"), "CITY_NOT_FOUND"),
            (SessionNotFoundError("gone", session_id="s"), "SESSION_NOT_FOUND"),
            (InvalidRequestError("empty", field_name="utterance"), "INVALID_REQUEST"),
        ],
    )
    def test_input_errors_keep_code_and_message(self, error, code):
        assert is_input_error(error)
        payload = error_payload(error, include_trace=True)
        assert payload == {"code": code, "message": error.message}

    def test_internal_error_trace_only_when_requested(self):
        error = ProviderError("Overpass down", provider="overpass", reason="http")
        assert "details" not in error_payload(error)
        assert "details" in error_payload(error, include_trace=True)
        assert error_payload(error)["code"] == "PROVIDER_ERROR"

    def test_unexpected_exception_is_internal(self):
        payload = error_payload(RuntimeError("secret detail"))
        assert payload == {"code": "INTERNAL_ERROR", "message": "Internal error"}

    def test_cause_in_str(self):
        error = LLMError("Chat completion failed", cause=TimeoutError("8s"), model="m")
        assert str(error) == "Chat completion failed: 8s"
        assert isinstance(error, PlannerError)


class TestConfig:
    def test_defaults(self):
        config = get_config()
        assert config.planner.min_days == 2
        assert config.planner.max_days == 5
        assert config.planner.default_days == 3
        assert config.planner.default_interests == ["culture", "food"]
        assert config.llm.temperature == 0.0
        assert not config.is_production

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PLANNER_CORE_MAX_DAYS", "4")
        monkeypatch.setenv("PLANNER_LLM_API_KEY", "secret")
        monkeypatch.setenv("PLANNER_ROUTING_ENABLED", "false")
        reset_config()
        config = get_config()
        assert config.planner.max_days == 4
        assert config.llm.is_available
        assert not config.routing.enabled

    def test_llm_unavailable_when_disabled(self, monkeypatch):
        monkeypatch.setenv("PLANNER_LLM_API_KEY", "secret")
        monkeypatch.setenv("PLANNER_LLM_ENABLED", "false")
        reset_config()
        assert not get_config().llm.is_available

    def test_config_is_cached(self):
        assert get_config() is get_config()

    def test_seed_file_exists(self):
        assert get_config().poi.seed_file.is_file()


class TestLogging:
    def test_json_formatter_includes_extras(self):
        record = logging.LogRecord("trip_planner.test", logging.WARNING, __file__, 1, "POI search using static fallback", (), None)
        record.city = "Jaipur"
        record.reason = "NO_ELEMENTS"
        payload = json.loads(JsonFormatter().format(record))
        assert payload["message"] == "POI search using static fallback"
        assert payload["city"] == "Jaipur"
        assert payload["reason"] == "NO_ELEMENTS"
        assert payload["level"] == "WARNING"

    def test_configure_logging_structured(self, monkeypatch):
        monkeypatch.setenv("PLANNER_LOG_STRUCTURED", "true")
        monkeypatch.setenv("PLANNER_LOG_LEVEL", "debug")
        reset_config()
        root = logging.getLogger()
        saved = (list(root.handlers), root.level)
        try:
            configure_logging()
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
            for handler in saved[0]:
                root.addHandler(handler)
            root.setLevel(saved[1])
