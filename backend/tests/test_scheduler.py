"""Tests for the interval scheduler."""

import random
from datetime import date, timedelta

import pytest

from mindgraph.core.errors import ConfigurationError, InvalidCycle, InvalidRating
from mindgraph.learning_engine.config import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_PROPAGATION_DEPTH,
    DEFAULT_WEAK_THRESHOLD,
    get_preset_defaults,
)
from mindgraph.learning_engine.constants import Preset
from mindgraph.learning_engine.contracts import GraphSettings
from mindgraph.learning_engine.revision.scheduler import (
    compute_interval_days,
    describe_due,
    next_stability,
    preview_schedule,
    reconstruct_stability,
    schedule_review,
)

TODAY = date(2026, 3, 10)


class TestGraphSettings:
    """Test preset resolution and validation."""

    def test_preset_defaults(self):
        """Test that each preset seeds s_max and g_factor."""
        assert GraphSettings.from_preset("gentle").s_max == 240
        assert GraphSettings.from_preset("balanced").g_factor == 1.0
        intensive = GraphSettings.from_preset(Preset.INTENSIVE)
        assert (intensive.s_max, intensive.g_factor) == (120, 0.9)

    def test_default_settings(self):
        """Test the settings a new graph starts with."""
        settings = GraphSettings()
        assert settings.preset == Preset.BALANCED
        assert settings.s_max == 180
        assert settings.propagation_depth == 2
        assert settings.horizon_days == 14
        assert settings.weak_threshold == 0.4
        assert settings.jitter_enabled is True

    def test_defaults_follow_sourced_constants(self):
        """Test field defaults and presets come from the tracked constants."""
        settings = GraphSettings()
        assert settings.propagation_depth == DEFAULT_PROPAGATION_DEPTH.value
        assert settings.horizon_days == DEFAULT_HORIZON_DAYS.value
        assert settings.weak_threshold == DEFAULT_WEAK_THRESHOLD.value
        for preset in Preset:
            defaults = get_preset_defaults(preset.value)
            built = GraphSettings.from_preset(preset)
            switched = GraphSettings().with_preset(preset)
            assert (built.s_max, built.g_factor) == (defaults["s_max"], defaults["g_factor"])
            assert (switched.s_max, switched.g_factor) == (defaults["s_max"], defaults["g_factor"])

    def test_overrides_beat_preset(self):
        """Test explicit s_max/g_factor win over the preset."""
        settings = GraphSettings.from_preset("intensive", s_max=30, g_factor=2.0)
        assert settings.s_max == 30
        assert settings.g_factor == 2.0

    def test_camel_case_override(self):
        """Test overrides given with JSON field names."""
        settings = GraphSettings.model_validate({"preset": "gentle", "sMax": 60})
        assert settings.s_max == 60
        assert settings.g_factor == 1.1

    def test_with_preset_resets_parameters(self):
        """Test switching preset replaces s_max/g_factor."""
        settings = GraphSettings.from_preset("balanced", s_max=10).with_preset("gentle")
        assert settings.preset == Preset.GENTLE
        assert settings.s_max == 240

    @pytest.mark.parametrize(
        "overrides",
        [
            {"s_max": 0},
            {"s_max": 1.5},
            {"g_factor": -1},
            {"propagation_depth": -1},
            {"horizon_days": -3},
            {"weak_threshold": 1.5},
        ],
    )
    def test_invalid_settings_rejected(self, overrides):
        """Test that out-of-domain settings raise ConfigurationError."""
        settings = GraphSettings.from_preset("balanced", **overrides)
        with pytest.raises(ConfigurationError) as exc_info:
            schedule_review(4, 0, None, settings, TODAY)
        assert exc_info.value.code == "CONFIGURATION_ERROR"


class TestStability:
    """Test stability evolution."""

    def test_first_review_seeded_from_rating(self, graph_settings):
        """Test first-review stabilities increase with rating."""
        seeds = [next_stability(r, 0, None, graph_settings) for r in range(1, 6)]
        assert seeds == [1.0, 1.0, 2.0, 3.0, 5.0]

    def test_success_grows_stability(self, graph_settings):
        """Test growth 1 + g * gain for ratings 3..5 at g=1."""
        assert next_stability(3, 2, 4.0, graph_settings) == pytest.approx(8.0)
        assert next_stability(4, 2, 4.0, graph_settings) == pytest.approx(10.0)
        assert next_stability(5, 2, 4.0, graph_settings) == pytest.approx(12.0)

    def test_failures_shrink_stability(self, graph_settings):
        """Test rating 1 resets and rating 2 halves."""
        assert next_stability(1, 5, 40.0, graph_settings) == 1.0
        assert next_stability(2, 5, 40.0, graph_settings) == 20.0
        assert next_stability(2, 5, 1.5, graph_settings) == 1.0

    def test_stability_capped_at_s_max(self):
        """Test stability never exceeds s_max."""
        settings = GraphSettings.from_preset("intensive", jitter_enabled=False)
        assert next_stability(5, 10, 100.0, settings) == 120.0

    def test_invalid_stored_stability_ignored(self, graph_settings):
        """Test that a corrupt stability falls back to the cycle estimate."""
        assert next_stability(3, 0, -4.0, graph_settings) == 2.0

    def test_reconstructed_stability_for_legacy_items(self, graph_settings):
        """Test items with cycles but no stability get an estimate."""
        assert reconstruct_stability(1, 1.0) == 2.0
        assert reconstruct_stability(3, 1.0) == 8.0
        assert next_stability(3, 3, None, graph_settings) == 16.0


class TestScheduleReview:
    """Test full scheduling output."""

    def test_next_cycle_and_date(self, graph_settings):
        """Test cycle increments and due date = today + interval."""
        result = schedule_review(4, 0, None, graph_settings, TODAY)
        assert result.next_cycle == 1
        assert result.interval_days == 3
        assert result.next_due_date == TODAY + timedelta(days=3)
        assert result.next_stability == 3.0

    def test_failed_rating_due_tomorrow(self, graph_settings):
        """Test ratings 1-2 always come back the next day."""
        for rating in (1, 2):
            result = schedule_review(rating, 6, 50.0, graph_settings, TODAY)
            assert result.interval_days == 1
            assert result.next_due_date == TODAY + timedelta(days=1)

    def test_success_at_least_two_days(self, graph_settings):
        """Test successful intervals never collapse onto the failed interval."""
        result = schedule_review(3, 0, None, graph_settings, TODAY)
        assert result.interval_days >= 2

    def test_failed_sooner_than_success(self, graph_settings):
        """Test ratings 1-2 are strictly sooner than 4-5 from the same state."""
        for cycle, stability in [(0, None), (1, 2.0), (4, 30.0)]:
            failed = max(schedule_review(r, cycle, stability, graph_settings, TODAY).interval_days for r in (1, 2))
            passed = min(schedule_review(r, cycle, stability, graph_settings, TODAY).interval_days for r in (4, 5))
            assert failed < passed

    def test_interval_capped_at_s_max(self):
        """Test intervals never exceed s_max, jitter included."""
        settings = GraphSettings.from_preset("balanced", s_max=30)
        rng = random.Random(7)
        for _ in range(50):
            result = schedule_review(5, 8, 29.0, settings, TODAY, rng)
            assert result.interval_days <= 30

    @pytest.mark.parametrize("s_max", [0.5, 1.5])
    def test_s_max_below_minimum_interval_rejected(self, s_max):
        """Test an s_max shorter than the two-day success floor is refused."""
        settings = GraphSettings.from_preset("balanced", s_max=s_max, jitter_enabled=False)
        with pytest.raises(ConfigurationError):
            schedule_review(5, 3, 10.0, settings, TODAY)

    def test_smallest_s_max_still_beats_failure(self):
        """Test s_max = 2 caps success at two days, still after a failed review."""
        settings = GraphSettings.from_preset("balanced", s_max=2.0, jitter_enabled=False)
        assert schedule_review(5, 3, 10.0, settings, TODAY).interval_days == 2
        assert schedule_review(1, 3, 10.0, settings, TODAY).interval_days == 1

    def test_intensive_sooner_than_gentle(self):
        """Test the same history is due sooner on the intensive preset."""
        gentle = GraphSettings.from_preset("gentle", jitter_enabled=False)
        intensive = GraphSettings.from_preset("intensive", jitter_enabled=False)
        gentle_stability = intensive_stability = None
        for cycle in range(6):
            g = schedule_review(4, cycle, gentle_stability, gentle, TODAY)
            i = schedule_review(4, cycle, intensive_stability, intensive, TODAY)
            gentle_stability, intensive_stability = g.next_stability, i.next_stability
        assert i.interval_days < g.interval_days

    def test_jitter_within_ten_percent(self):
        """Test jittered intervals stay within +/-10% of the stability."""
        settings = GraphSettings.from_preset("balanced", jitter_enabled=True)
        rng = random.Random(42)
        intervals = {
            compute_interval_days(3, 50.0, settings, rng)
            for _ in range(200)
        }
        assert min(intervals) >= 45
        assert max(intervals) <= 55
        assert len(intervals) > 1

    def test_seeded_jitter_reproducible(self):
        """Test the same seed produces the same schedule."""
        settings = GraphSettings.from_preset("balanced")
        first = schedule_review(5, 4, 20.0, settings, TODAY, random.Random(99))
        second = schedule_review(5, 4, 20.0, settings, TODAY, random.Random(99))
        assert first == second

    @pytest.mark.parametrize("rating", [None, 0, 6, -1, 3.5, "4", True])
    def test_invalid_rating(self, rating, graph_settings):
        """Test that anything but an integer 1..5 is rejected."""
        with pytest.raises(InvalidRating) as exc_info:
            schedule_review(rating, 0, None, graph_settings, TODAY)
        assert exc_info.value.code == "INVALID_RATING"

    def test_negative_cycle_rejected(self, graph_settings):
        """Test a corrupt cycle counter fails fast."""
        with pytest.raises(InvalidCycle):
            schedule_review(3, -1, None, graph_settings, TODAY)


class TestPreviewAndDescribe:
    """Test rating previews and relative due text."""

    def test_preview_covers_all_ratings(self, graph_settings):
        """Test a deterministic preview for every rating button."""
        preview = preview_schedule(2, 4.0, graph_settings.model_copy(update={"jitter_enabled": True}), TODAY)
        assert sorted(preview) == [1, 2, 3, 4, 5]
        assert preview[1].interval_days == 1
        assert preview[5].interval_days == 12
        assert preview[3].interval_days < preview[4].interval_days < preview[5].interval_days

    @pytest.mark.parametrize(
        "offset,text",
        [(-2, "Overdue"), (0, "Due today"), (1, "Due tomorrow"), (5, "Due in 5 days")],
    )
    def test_describe_due(self, offset, text):
        """Test relative due descriptions."""
        assert describe_due(TODAY + timedelta(days=offset), TODAY) == text
