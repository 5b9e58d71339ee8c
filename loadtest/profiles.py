"""
Scenario profiles for the favorite-number load test.

Each profile is an ordered list of ramp stages plus an optional set of
thresholds.  Stages use the same notation as k6 ``ramping-vus`` stages
(``{"duration": "30s", "target": 50}``) and thresholds use k6 metric
names and expressions (``http_req_duration: ["p(95)<2000"]``), so the
numbers can be copied between tools without translation.

Four profiles ship with the suite:

- **smoke**: verify the system works under minimal load
- **load**: normal load performance
- **stress**: step up until the breaking point shows
- **spike**: sudden traffic increase and recovery

Exactly one profile is active per run; see :mod:`loadtest.config`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

HTTP_REQ_DURATION = "http_req_duration"
HTTP_REQ_FAILED = "http_req_failed"

# Aggregations each metric accepts.
_METRIC_AGGREGATIONS = {
    HTTP_REQ_DURATION: ("p", "avg", "med", "max"),
    HTTP_REQ_FAILED: ("rate",),
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}

_THRESHOLD_EXPRESSION = re.compile(
    r"^\s*(?:p\(\s*(?P<percentile>\d+(?:\.\d+)?)\s*\)|(?P<aggregation>avg|med|max|rate))"
    r"\s*(?P<operator><=|<)\s*(?P<limit>\d+(?:\.\d+)?)\s*$"
)


class Profile(str, Enum):
    """Names of the built-in scenario profiles."""

    SMOKE = "smoke"
    LOAD = "load"
    STRESS = "stress"
    SPIKE = "spike"


@dataclass(frozen=True)
class Stage:
    """
    One ramp segment of a scenario.

    Attributes:
        duration: Length of the segment in seconds.
        target: Virtual-user count reached at the end of the segment.
    """

    duration: float
    target: int

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError(f"Stage duration must be positive, got {self.duration}")
        if self.target < 0:
            raise ValueError(f"Stage target must not be negative, got {self.target}")

    @classmethod
    def parse(cls, duration: str | float, target: int) -> Stage:
        """Build a stage from a k6-style duration string such as ``"1m30s"``."""
        if isinstance(duration, str):
            duration = parse_duration(duration)
        return cls(duration=float(duration), target=int(target))


@dataclass(frozen=True)
class Threshold:
    """
    A pass/fail condition over an aggregated metric.

    Attributes:
        metric: ``http_req_duration`` (milliseconds) or ``http_req_failed``
            (fraction of failed requests).
        aggregation: ``p`` (percentile), ``avg``, ``med``, ``max`` or ``rate``.
        limit: Right-hand side of the comparison.
        percentile: Percentile in ``(0, 100]`` when ``aggregation == "p"``.
        inclusive: ``True`` for ``<=``, ``False`` for ``<``.
    """

    metric: str
    aggregation: str
    limit: float
    percentile: float | None = None
    inclusive: bool = False

    @property
    def expression(self) -> str:
        """Render the condition back to k6 notation, e.g. ``p(95)<2000``."""
        if self.aggregation == "p":
            lhs = f"p({self.percentile:g})"
        else:
            lhs = self.aggregation
        operator = "<=" if self.inclusive else "<"
        return f"{lhs}{operator}{self.limit:g}"

    def holds(self, observed: float) -> bool:
        """Return True when *observed* satisfies the condition."""
        if self.inclusive:
            return observed <= self.limit
        return observed < self.limit

    def __str__(self) -> str:
        return f"{self.metric}: {self.expression}"


@dataclass(frozen=True)
class ScenarioProfile:
    """An ordered ramp schedule plus the thresholds the run must meet."""

    name: str
    stages: tuple[Stage, ...]
    thresholds: tuple[Threshold, ...] = ()

    @property
    def total_duration(self) -> float:
        """Total scheduled run time in seconds."""
        return sum(stage.duration for stage in self.stages)

    @property
    def peak_users(self) -> int:
        return max((stage.target for stage in self.stages), default=0)


def parse_duration(text: str) -> float:
    """
    Convert a k6 duration string to seconds.

    Accepts one or more ``<number><unit>`` parts with units ``ms``, ``s``,
    ``m`` and ``h`` (``"500ms"``, ``"30s"``, ``"2m30s"``, ``"1h"``).

    Raises:
        ValueError: If *text* is empty or contains anything else.
    """
    cleaned = text.strip()
    if not cleaned:
        raise ValueError("Duration must not be empty")

    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(cleaned):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(cleaned):
        raise ValueError(f"Invalid duration: {text!r}")
    return seconds


def parse_threshold(metric: str, expression: str) -> Threshold:
    """
    Parse one k6 threshold expression for *metric*.

    Args:
        metric: ``http_req_duration`` or ``http_req_failed``.
        expression: Condition such as ``"p(95)<2000"`` or ``"rate<0.1"``.

    Raises:
        ValueError: On an unknown metric, a malformed expression, or an
            aggregation the metric does not support.
    """
    if metric not in _METRIC_AGGREGATIONS:
        raise ValueError(
            f"Unknown threshold metric {metric!r}; expected one of {sorted(_METRIC_AGGREGATIONS)}"
        )

    match = _THRESHOLD_EXPRESSION.match(expression)
    if match is None:
        raise ValueError(f"Invalid threshold expression for {metric}: {expression!r}")

    percentile = None
    if match.group("percentile") is not None:
        aggregation = "p"
        percentile = float(match.group("percentile"))
        if not 0 < percentile <= 100:
            raise ValueError(f"Percentile must be in (0, 100], got {percentile:g}")
    else:
        aggregation = match.group("aggregation")

    if aggregation not in _METRIC_AGGREGATIONS[metric]:
        raise ValueError(f"{metric} does not support {aggregation!r} thresholds")

    return Threshold(
        metric=metric,
        aggregation=aggregation,
        limit=float(match.group("limit")),
        percentile=percentile,
        inclusive=match.group("operator") == "<=",
    )


def thresholds_from_mapping(data: Mapping[str, Iterable[str]]) -> tuple[Threshold, ...]:
    """Parse a ``{metric: [expression, ...]}`` mapping (k6 ``thresholds`` block)."""
    thresholds: list[Threshold] = []
    for metric, expressions in data.items():
        if isinstance(expressions, str):
            expressions = [expressions]
        thresholds.extend(parse_threshold(metric, expression) for expression in expressions)
    return tuple(thresholds)


def build_profile(
    name: str,
    stages: Iterable[Mapping[str, Any]],
    thresholds: Mapping[str, Iterable[str]] | None = None,
) -> ScenarioProfile:
    """Build a :class:`ScenarioProfile` from k6-shaped stage and threshold data."""
    return ScenarioProfile(
        name=name,
        stages=tuple(Stage.parse(stage["duration"], stage["target"]) for stage in stages),
        thresholds=thresholds_from_mapping(thresholds or {}),
    )


PROFILES: Mapping[Profile, ScenarioProfile] = MappingProxyType(
    {
        Profile.SMOKE: build_profile(
            Profile.SMOKE.value,
            stages=[{"duration": "1m", "target": 10}],
            thresholds={
                HTTP_REQ_DURATION: ["p(95)<500"],
                HTTP_REQ_FAILED: ["rate<0.01"],
            },
        ),
        Profile.LOAD: build_profile(
            Profile.LOAD.value,
            stages=[
                {"duration": "30s", "target": 50},  # ramp up to 50 users
                {"duration": "1m", "target": 50},
                {"duration": "30s", "target": 100},  # ramp up to 100 users
                {"duration": "1m", "target": 100},
                {"duration": "30s", "target": 0},  # ramp down
            ],
            thresholds={
                HTTP_REQ_DURATION: ["p(95)<1000", "p(99)<2000"],
                HTTP_REQ_FAILED: ["rate<0.05"],
            },
        ),
        Profile.STRESS: build_profile(
            Profile.STRESS.value,
            stages=[
                {"duration": "1m", "target": 100},
                {"duration": "2m", "target": 200},
                {"duration": "2m", "target": 300},
                {"duration": "2m", "target": 400},
                {"duration": "1m", "target": 0},
            ],
            thresholds={
                HTTP_REQ_DURATION: ["p(95)<2000"],
                HTTP_REQ_FAILED: ["rate<0.1"],
            },
        ),
        Profile.SPIKE: build_profile(
            Profile.SPIKE.value,
            stages=[
                {"duration": "10s", "target": 50},
                {"duration": "1m", "target": 50},
                {"duration": "10s", "target": 500},  # spike
                {"duration": "1m", "target": 500},
                {"duration": "10s", "target": 50},
                {"duration": "1m", "target": 50},
                {"duration": "10s", "target": 0},
            ],
        ),
    }
)


def get_profile(profile: Profile | str) -> ScenarioProfile:
    """
    Look up a built-in profile by enum member or case-insensitive name.

    Raises:
        ValueError: If *profile* does not name a known profile.
    """
    if not isinstance(profile, Profile):
        try:
            profile = Profile(str(profile).strip().lower())
        except ValueError as exc:
            valid = ", ".join(p.value for p in Profile)
            raise ValueError(f"Unknown profile {profile!r}; expected one of: {valid}") from exc
    return PROFILES[profile]
