"""
Staged virtual-user scheduling.

The iteration runner never decides how many users run.  That belongs
to a :class:`LoadScheduler`: given the elapsed run time, it answers
"how many users should be running now, and how fast may they be
spawned?".

:class:`StagedSchedule` implements k6 ``ramping-vus`` semantics.  Each
stage moves the user count linearly from the previous stage's target
(``0`` for the first stage) to its own target over the stage duration.
:class:`StagedLoadShape` hands that schedule to Locust as a
``LoadTestShape``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from locust import LoadTestShape

from loadtest.config import get_config
from loadtest.profiles import ScenarioProfile, Stage, get_profile

logger = logging.getLogger(__name__)


class LoadScheduler(Protocol):
    """Capability that decides the virtual-user count over time."""

    def tick(self, run_time: float) -> tuple[int, float] | None:
        """
        Return ``(user_count, spawn_rate)`` at *run_time* seconds.

        ``None`` means the schedule is over and the run should stop.
        """
        ...


class StagedSchedule:
    """Linear ramps between consecutive stage targets."""

    def __init__(self, stages: Sequence[Stage]):
        if not stages:
            raise ValueError("A staged schedule needs at least one stage")
        self.stages = tuple(stages)

    @classmethod
    def for_profile(cls, profile: ScenarioProfile) -> StagedSchedule:
        return cls(profile.stages)

    @property
    def total_duration(self) -> float:
        return sum(stage.duration for stage in self.stages)

    def tick(self, run_time: float) -> tuple[int, float] | None:
        stage_start = 0.0
        previous_target = 0
        for stage in self.stages:
            stage_end = stage_start + stage.duration
            if run_time < stage_end:
                progress = max(run_time - stage_start, 0.0) / stage.duration
                delta = stage.target - previous_target
                user_count = round(previous_target + delta * progress)
                spawn_rate = max(abs(delta) / stage.duration, 1.0)
                return user_count, spawn_rate
            previous_target = stage.target
            stage_start = stage_end
        return None


def active_profile(environment: Any) -> ScenarioProfile:
    """
    Resolve the profile for a Locust run.

    The ``--profile`` command line option wins; otherwise the
    ``LOAD_PROFILE`` configuration applies.
    """
    parsed_options = getattr(environment, "parsed_options", None)
    selected = getattr(parsed_options, "profile", None)
    if selected:
        return get_profile(selected)
    return get_config().scenario


class StagedLoadShape(LoadTestShape):
    """
    Locust load shape driven by the active scenario profile.

    The schedule is built on the first tick because the parsed command
    line options only exist once the runner is attached.
    """

    schedule: StagedSchedule | None = None

    def tick(self) -> tuple[int, float] | None:
        if self.schedule is None:
            profile = active_profile(self.runner.environment)
            self.schedule = StagedSchedule.for_profile(profile)
            logger.info(
                "Running '%s' profile: %d stages, peak %d users, %.0fs total",
                profile.name,
                len(profile.stages),
                profile.peak_users,
                profile.total_duration,
            )
        return self.schedule.tick(self.get_run_time())
