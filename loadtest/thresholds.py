"""
Run-end threshold gate.

When a Locust run quits, the active profile's thresholds are compared
against the aggregates Locust has already computed.  The gate always
sets the process exit code: ``1`` on any breach so CI can fail the
build, ``0`` otherwise.  Failed checks are reported as request errors,
and Locust would turn those into a failing exit code on its own, so the
thresholds alone decide whether the run failed.

Only real HTTP samples count.  The ``CHECK`` rows written by
:class:`~loadtest.checks.LocustCheckRecorder` carry a response time of
zero and would otherwise drag every percentile down.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from locust.runners import WorkerRunner
from locust.stats import RequestStats, StatsEntry

from loadtest.checks import CHECK_REQUEST_TYPE
from loadtest.profiles import HTTP_REQ_FAILED, ScenarioProfile, Threshold
from loadtest.scheduler import active_profile

logger = logging.getLogger(__name__)

EXIT_THRESHOLDS_PASSED = 0
EXIT_THRESHOLD_BREACH = 1


@dataclass(frozen=True)
class ThresholdResult:
    threshold: Threshold
    observed: float

    @property
    def passed(self) -> bool:
        return self.threshold.holds(self.observed)


def http_entry(stats: RequestStats) -> StatsEntry:
    """Combine every non-check stats entry into one aggregate entry."""
    combined = StatsEntry(stats, "HTTP", "", use_response_times_cache=False)
    for entry in stats.entries.values():
        if entry.method != CHECK_REQUEST_TYPE:
            combined.extend(entry)
    return combined


def observe(threshold: Threshold, entry: StatsEntry) -> float:
    """Read the value *threshold* is judged on from *entry*."""
    if threshold.metric == HTTP_REQ_FAILED:
        return entry.fail_ratio
    if threshold.aggregation == "p":
        return entry.get_response_time_percentile(threshold.percentile / 100.0)
    if threshold.aggregation == "avg":
        return entry.avg_response_time
    if threshold.aggregation == "med":
        return entry.median_response_time
    return entry.max_response_time


def evaluate_thresholds(profile: ScenarioProfile, stats: RequestStats) -> list[ThresholdResult]:
    """Evaluate every threshold of *profile* against *stats*, in order."""
    entry = http_entry(stats)
    return [ThresholdResult(threshold, observe(threshold, entry)) for threshold in profile.thresholds]


def enforce_thresholds(environment: Any) -> bool:
    """
    Evaluate the active profile's thresholds at the end of a run.

    Worker processes are skipped; only the master (or a standalone
    runner) holds the complete statistics.

    Returns:
        ``True`` when every threshold held.  ``environment.process_exit_code``
        is set to ``0`` in that case and to ``1`` on a breach.
    """
    if isinstance(environment.runner, WorkerRunner):
        return True

    profile = active_profile(environment)
    results = evaluate_thresholds(profile, environment.stats)
    for result in results:
        if result.passed:
            logger.info("Threshold passed: %s (observed %.4g)", result.threshold, result.observed)
        else:
            logger.error("Threshold breached: %s (observed %.4g)", result.threshold, result.observed)

    passed = all(result.passed for result in results)
    environment.process_exit_code = EXIT_THRESHOLDS_PASSED if passed else EXIT_THRESHOLD_BREACH
    return passed
