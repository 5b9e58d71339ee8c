"""
Named per-response checks and the recorders that collect them.

A check is a named boolean assertion on one response.  A failing check
is recorded and counted, but it never raises into the calling task.
The iteration that produced it carries on.

In a Locust run, :class:`LocustCheckRecorder` turns every check into a
``CHECK`` request event, so each check shows up as its own row in the
statistics table and CSV output, with failures counted like any other
failed request.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)

CHECK_REQUEST_TYPE = "CHECK"


class CheckFailed(Exception):
    """Attached to the request event of a failed check."""

    def __init__(self, name: str):
        super().__init__(f"Check failed: {name}")
        self.name = name


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool


@dataclass(frozen=True)
class Check:
    """A named predicate over a response object."""

    name: str
    predicate: Callable[[Any], bool]


class CheckRecorder(Protocol):
    """Anything that can store check outcomes."""

    def record(self, result: CheckResult) -> None: ...


def elapsed_ms(response: Any) -> float:
    """Return the response's elapsed time in milliseconds."""
    return response.elapsed.total_seconds() * 1000.0


def transport_failed(response: Any) -> bool:
    """
    Return True when no HTTP response was received at all.

    Locust's ``HttpSession`` reports connection errors and timeouts as a
    response with status code ``0``.
    """
    return not response.status_code


def status_is(expected: int) -> Callable[[Any], bool]:
    return lambda response: response.status_code == expected


def responds_within(limit_ms: float) -> Callable[[Any], bool]:
    return lambda response: elapsed_ms(response) < limit_ms


def evaluate(response: Any, checks: Iterable[Check]) -> list[CheckResult]:
    """
    Evaluate *checks* against *response* in declaration order.

    When the request never produced an HTTP response, every check fails
    without its predicate being consulted; there is no status or timing
    to judge.
    """
    if transport_failed(response):
        return [CheckResult(check.name, False) for check in checks]
    return [CheckResult(check.name, bool(check.predicate(response))) for check in checks]


class LocustCheckRecorder:
    """
    Record checks through Locust's ``request`` event hook.

    Args:
        request_event: Usually ``environment.events.request``.
    """

    def __init__(self, request_event: Any):
        self._request_event = request_event

    def record(self, result: CheckResult) -> None:
        if not result.passed:
            logger.debug("Check failed: %s", result.name)
        self._request_event.fire(
            request_type=CHECK_REQUEST_TYPE,
            name=result.name,
            response_time=0,
            response_length=0,
            exception=None if result.passed else CheckFailed(result.name),
            context={},
        )


class CheckTally:
    """In-memory recorder that counts passes and failures per check name."""

    def __init__(self) -> None:
        self.results: list[CheckResult] = []
        self._passes: Counter[str] = Counter()
        self._fails: Counter[str] = Counter()

    def record(self, result: CheckResult) -> None:
        self.results.append(result)
        if result.passed:
            self._passes[result.name] += 1
        else:
            self._fails[result.name] += 1

    def passes(self, name: str) -> int:
        return self._passes[name]

    def fails(self, name: str) -> int:
        return self._fails[name]

    @property
    def all_passed(self) -> bool:
        return all(result.passed for result in self.results)
