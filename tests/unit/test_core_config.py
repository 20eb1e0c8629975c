"""
Unit tests for configuration management (flat Settings).

Tests cover:
- Default admission values (tiers, ladder, windows)
- Loading from GATEKEEPER_* environment variables
- Validation (namespace, warn percentage, durations, threshold ordering)
- Cached singleton behavior
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from gatekeeper.core.config import Settings, get_settings
from gatekeeper.core.enums import Environment
from gatekeeper.domain.enums import BanLevel
from gatekeeper.domain.value_objects import BanEscalationPolicy
from gatekeeper.infrastructure.admission import build_tier_rules


@pytest.fixture(autouse=True)
def reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
class TestEnvironmentEnum:
    def test_environment_values(self):
        """Test that all expected environments are defined."""
        assert Environment.DEVELOPMENT == "development"
        assert Environment.TESTING == "testing"
        assert Environment.CI == "ci"
        assert Environment.PRODUCTION == "production"


@pytest.mark.unit
class TestSettingsDefaults:
    """Test default values match the production admission policy."""

    def test_admission_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.admission_namespace == "ratelimit"
        assert settings.default_window_ms == 60_000
        assert settings.free_requests_per_minute == 10
        assert settings.pro_requests_per_minute == 100
        assert settings.enterprise_requests_per_minute == -1
        assert settings.violation_window_ms == 7 * 24 * 60 * 60 * 1000
        assert (
            settings.ban_threshold_first,
            settings.ban_threshold_second,
            settings.ban_threshold_permanent,
        ) == (5, 7, 12)
        assert settings.ban_duration_first_seconds == 300
        assert settings.warn_percentage == 80

    def test_tier_rules_from_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            rules = build_tier_rules(Settings())

        assert rules["free"].limit == 10
        assert rules["pro"].limit == 100
        assert rules["enterprise"].enabled is False

    def test_escalation_ladder_from_settings(self):
        env = {
            "GATEKEEPER_BAN_THRESHOLD_FIRST": "2",
            "GATEKEEPER_BAN_DURATION_FIRST_SECONDS": "30",
        }
        with patch.dict(os.environ, env, clear=True):
            policy = BanEscalationPolicy.from_settings(Settings())

        step = policy.step_for(2)
        assert step is not None
        assert step.level is BanLevel.FIVE_MINUTES
        assert step.duration_ms == 30_000
        assert policy.step_for(7).level is BanLevel.ONE_DAY


@pytest.mark.unit
class TestSettingsValidation:
    """Test Settings field validation."""

    def test_env_prefix_is_applied(self):
        env = {"GATEKEEPER_FREE_REQUESTS_PER_MINUTE": "25"}
        with patch.dict(os.environ, env, clear=True):
            assert Settings().free_requests_per_minute == 25

    def test_namespace_separators_stripped(self):
        with patch.dict(os.environ, {"GATEKEEPER_ADMISSION_NAMESPACE": ":gw:"}, clear=True):
            assert Settings().admission_namespace == "gw"

    def test_empty_namespace_rejected(self):
        with patch.dict(os.environ, {"GATEKEEPER_ADMISSION_NAMESPACE": ":::"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

        assert "admission_namespace must not be empty" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["0", "101"])
    def test_warn_percentage_out_of_range(self, value):
        with patch.dict(os.environ, {"GATEKEEPER_WARN_PERCENTAGE": value}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

        assert "warn_percentage must be between 1 and 100" in str(exc_info.value)

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("GATEKEEPER_FREE_REQUESTS_PER_MINUTE", "0"),
            ("GATEKEEPER_PRO_REQUESTS_PER_MINUTE", "0"),
            ("GATEKEEPER_ENTERPRISE_REQUESTS_PER_MINUTE", "-2"),
        ],
    )
    def test_invalid_tier_limit_rejected(self, field, value):
        with patch.dict(os.environ, {field: value}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

        assert "tier limits must be positive, or -1 for unlimited" in str(exc_info.value)

    def test_unlimited_tier_limit_accepted(self):
        env = {"GATEKEEPER_PRO_REQUESTS_PER_MINUTE": "-1"}
        with patch.dict(os.environ, env, clear=True):
            assert Settings().pro_requests_per_minute == -1

    def test_non_positive_window_rejected(self):
        with patch.dict(os.environ, {"GATEKEEPER_DEFAULT_WINDOW_MS": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_thresholds_must_ascend(self):
        env = {
            "GATEKEEPER_BAN_THRESHOLD_FIRST": "7",
            "GATEKEEPER_BAN_THRESHOLD_SECOND": "7",
        }
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

        assert "0 < first < second < permanent" in str(exc_info.value)


@pytest.mark.unit
class TestSettingsEnvironment:
    def test_environment_properties(self):
        with patch.dict(os.environ, {"GATEKEEPER_ENVIRONMENT": "production"}, clear=True):
            settings = Settings()

        assert settings.is_production is True
        assert settings.is_development is False

    def test_get_settings_is_cached(self):
        with patch.dict(os.environ, {}, clear=True):
            first = get_settings()
            second = get_settings()

        assert first is second
