"""
Unit tests for the staged virtual-user schedule and its Locust shape.

Key SDET Concepts Demonstrated:
- Testing time-based logic by feeding explicit timestamps
- Overriding a single method on an instance to freeze the clock
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from loadtest.config import get_config
from loadtest.profiles import PROFILES, Profile, Stage
from loadtest.scheduler import StagedLoadShape, StagedSchedule, active_profile

pytestmark = pytest.mark.unit


@pytest.fixture
def stress_schedule() -> StagedSchedule:
    return StagedSchedule.for_profile(PROFILES[Profile.STRESS])


class TestStagedSchedule:
    """Tests for k6-style linear ramps."""

    def test_starts_from_zero_users(self, stress_schedule):
        """Test that the first stage ramps up from nothing."""
        # Act
        user_count, spawn_rate = stress_schedule.tick(0)

        # Assert
        assert user_count == 0
        assert spawn_rate == pytest.approx(100 / 60)

    def test_interpolates_within_a_stage(self, stress_schedule):
        """Test the halfway point of the first ramp."""
        assert stress_schedule.tick(30)[0] == 50

    def test_interpolates_from_previous_target(self, stress_schedule):
        """Test the halfway point of the 100 -> 200 ramp."""
        assert stress_schedule.tick(120)[0] == 150

    @pytest.mark.parametrize("profile", list(Profile))
    def test_stage_targets_reached_at_boundaries(self, profile):
        """Test that each stage ends exactly on its target."""
        # Arrange
        stages = PROFILES[profile].stages
        schedule = StagedSchedule(stages)

        # Act / Assert
        boundary = 0.0
        for stage in stages[:-1]:
            boundary += stage.duration
            assert schedule.tick(boundary)[0] == stage.target

    def test_ramp_down_rate(self, stress_schedule):
        """Test the spawn rate of the final 400 -> 0 ramp."""
        # Act
        user_count, spawn_rate = stress_schedule.tick(450)

        # Assert
        assert user_count == 200
        assert spawn_rate == pytest.approx(400 / 60)

    def test_hold_stage_spawns_at_least_one_user_per_second(self):
        """Test that a flat stage still reports a usable spawn rate."""
        # Arrange
        schedule = StagedSchedule([Stage(10, 5), Stage(60, 5)])

        # Act / Assert
        assert schedule.tick(30) == (5, 1.0)

    def test_returns_none_after_last_stage(self, stress_schedule):
        """Test that the schedule ends after its total duration."""
        assert stress_schedule.total_duration == 480
        assert stress_schedule.tick(480) is None
        assert stress_schedule.tick(10_000) is None

    def test_requires_stages(self):
        with pytest.raises(ValueError):
            StagedSchedule([])


class TestActiveProfile:
    """Tests for resolving the profile of a Locust run."""

    def test_command_line_option_wins(self):
        environment = SimpleNamespace(parsed_options=SimpleNamespace(profile="smoke"))
        assert active_profile(environment) is PROFILES[Profile.SMOKE]

    def test_falls_back_to_configuration(self):
        environment = SimpleNamespace(parsed_options=None)
        assert active_profile(environment) is get_config().scenario


class TestStagedLoadShape:
    """Tests for the Locust load shape adapter."""

    def _shape(self, profile: str, run_time: float) -> StagedLoadShape:
        shape = StagedLoadShape()
        shape.runner = MagicMock()
        shape.runner.environment.parsed_options.profile = profile
        shape.get_run_time = lambda: run_time
        return shape

    def test_tick_follows_selected_profile(self):
        """Test the smoke profile halfway through its single ramp."""
        # Arrange
        shape = self._shape("smoke", 30.0)

        # Act / Assert
        assert shape.tick() == (5, 1.0)

    def test_tick_stops_after_profile_duration(self):
        """Test that the shape ends the run once the profile is over."""
        assert self._shape("smoke", 60.0).tick() is None
