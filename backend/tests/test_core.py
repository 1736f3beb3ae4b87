"""Tests for settings, logging and the error envelope."""

import inspect
import json
import logging
from datetime import timezone

import pytest

from mindgraph.core import config as core_config
from mindgraph.core.config import Settings, default_graph_settings, make_rng, user_timezone
from mindgraph.core.errors import (
    ConfigurationError,
    InvalidCycle,
    InvalidDateRange,
    InvalidRating,
    SchedulingError,
    UnknownSubject,
    require_rating,
    to_error_response,
)
from mindgraph.core.logging import CustomJsonFormatter, get_logger, setup_logging
from mindgraph.learning_engine import config as engine_config
from mindgraph.learning_engine.config import SourcedValue, validate_all_constants


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        """Test default values without any environment."""
        settings = Settings(_env_file=None)
        assert settings.ENV == "dev"
        assert settings.DEFAULT_PRESET == "balanced"
        assert settings.JITTER_SEED is None

    def test_env_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DEFAULT_PRESET", "intensive")
        monkeypatch.setenv("log_level", "debug")
        settings = Settings(_env_file=None)
        assert settings.DEFAULT_PRESET == "intensive"
        assert settings.LOG_LEVEL == "DEBUG"

    def test_seed_forbidden_in_prod(self):
        """Test production refuses deterministic jitter."""
        with pytest.raises(ValueError):
            Settings(_env_file=None, ENV="prod", JITTER_SEED=3)

    def test_default_graph_settings(self):
        """Test per-graph settings are built from process defaults."""
        graph_settings = default_graph_settings()
        assert graph_settings.propagation_depth == 2
        assert graph_settings.horizon_days == 14
        assert graph_settings.ensure_valid() is graph_settings

    def test_user_timezone(self, monkeypatch):
        """Test USER_TZ resolves to a tzinfo, UTC case-insensitively."""
        monkeypatch.setattr(core_config.settings, "USER_TZ", "utc")
        assert user_timezone() is timezone.utc

    def test_make_rng_seeded(self):
        """Test explicit seeds give reproducible sequences."""
        assert make_rng(5).random() == make_rng(5).random()


class TestErrors:
    """Test the error hierarchy and envelope."""

    @pytest.mark.parametrize(
        "exc_class,code",
        [
            (InvalidRating, "INVALID_RATING"),
            (UnknownSubject, "UNKNOWN_SUBJECT"),
            (InvalidDateRange, "INVALID_DATE_RANGE"),
            (ConfigurationError, "CONFIGURATION_ERROR"),
            (InvalidCycle, "INVALID_CYCLE"),
        ],
    )
    def test_codes(self, exc_class, code):
        """Test every error carries a stable code."""
        exc = exc_class("boom", details={"x": 1})
        assert isinstance(exc, SchedulingError)
        assert exc.code == code
        assert str(exc) == "boom"

    def test_error_response(self):
        """Test conversion to the envelope."""
        response = to_error_response(UnknownSubject("Node 7 not found", details={"node_id": 7}))
        assert response.model_dump() == {
            "error_code": "UNKNOWN_SUBJECT",
            "message": "Node 7 not found",
            "details": {"node_id": 7},
        }

    def test_require_rating(self):
        """Test accepted ratings pass through."""
        assert [require_rating(r) for r in range(1, 6)] == [1, 2, 3, 4, 5]
        with pytest.raises(InvalidRating):
            require_rating(False)


class TestLogging:
    """Test JSON logging setup."""

    def test_json_formatter_fields(self):
        """Test the formatter emits the standard fields."""
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(logger)s")
        record = logging.LogRecord(
            name="mindgraph.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Node %s reviewed",
            args=("A",),
            exc_info=None,
        )
        payload = json.loads(formatter.format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "mindgraph.test"
        assert payload["event"] == "Node A reviewed"
        assert "message" not in payload

    def test_setup_logging_sets_level(self):
        """Test the root logger level follows the argument."""
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("warning")
            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_get_logger(self):
        """Test named loggers."""
        assert get_logger("mindgraph.x").name == "mindgraph.x"


class TestConstantsProvenance:
    """Test every algorithm constant documents its source."""

    def test_all_constants_sourced(self):
        """Test SourcedValue instances carry a non-empty source."""
        constants = [
            obj for _, obj in inspect.getmembers(engine_config) if isinstance(obj, SourcedValue)
        ]
        assert len(constants) > 10
        assert all(c.source.strip() for c in constants)

    def test_empty_source_rejected(self):
        """Test provenance is enforced at construction."""
        with pytest.raises(ValueError):
            SourcedValue(value=1, source=" ")

    def test_validation_passes(self):
        """Test the shipped constants validate."""
        validate_all_constants()
