"""Unit tests for environment-driven run configuration."""

import pytest

from loadtest.config import (
    DEFAULT_BASE_URL,
    LoadTestConfig,
    get_config,
    normalize_base_url,
)
from loadtest.profiles import PROFILES, Profile

pytestmark = pytest.mark.unit


class TestFromEnv:
    """Tests for building a configuration from environment variables."""

    def test_defaults_when_nothing_is_set(self):
        """Test the defaults: local target, stress profile, 100ms think time."""
        # Act
        config = LoadTestConfig.from_env({})

        # Assert
        assert config == LoadTestConfig(
            base_url="http://localhost:1323",
            profile=Profile.STRESS,
            think_time=0.1,
            request_timeout=60.0,
        )

    def test_empty_base_url_falls_back_to_default(self):
        assert LoadTestConfig.from_env({"BASE_URL": ""}).base_url == DEFAULT_BASE_URL

    def test_base_url_override(self):
        config = LoadTestConfig.from_env({"BASE_URL": "https://staging.example.com/"})
        assert config.base_url == "https://staging.example.com"

    def test_profile_selection_is_explicit(self):
        """Test that LOAD_PROFILE picks the active profile by name."""
        # Act
        config = LoadTestConfig.from_env({"LOAD_PROFILE": "Spike"})

        # Assert
        assert config.profile is Profile.SPIKE
        assert config.scenario is PROFILES[Profile.SPIKE]

    def test_unknown_profile_raises(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            LoadTestConfig.from_env({"LOAD_PROFILE": "soak"})

    def test_numeric_overrides(self):
        config = LoadTestConfig.from_env(
            {"THINK_TIME_SECONDS": "0.25", "REQUEST_TIMEOUT_SECONDS": "5"}
        )
        assert config.think_time == pytest.approx(0.25)
        assert config.request_timeout == pytest.approx(5.0)

    @pytest.mark.parametrize("value", ["fast", "-1"])
    def test_bad_numeric_values_raise(self, value):
        with pytest.raises(ValueError, match="THINK_TIME_SECONDS"):
            LoadTestConfig.from_env({"THINK_TIME_SECONDS": value})

    def test_config_is_immutable(self):
        config = LoadTestConfig()
        with pytest.raises(AttributeError):
            config.base_url = "http://elsewhere"


class TestHelpers:
    """Tests for module-level helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, DEFAULT_BASE_URL),
            ("   ", DEFAULT_BASE_URL),
            ("http://a:1//", "http://a:1"),
        ],
    )
    def test_normalize_base_url(self, value, expected):
        assert normalize_base_url(value) == expected

    def test_get_config_is_cached(self):
        assert get_config() is get_config()
