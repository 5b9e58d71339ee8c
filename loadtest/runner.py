"""
Iteration runner and invalid-payload prober.

:class:`IterationRunner` holds everything one virtual user needs to
exercise the favorite-number endpoint:

- :meth:`~IterationRunner.run_iteration` sends one randomised valid
  request, records the three response checks, then pauses for the
  think time.
- :meth:`~IterationRunner.test_invalid_data` sends the four known-bad
  payloads in order and checks that each is rejected with ``400``.

The runner knows nothing about concurrency.  Whoever owns it (a Locust
user, a test, a one-off script) decides how often to call it and from
how many places.

Key Concepts Demonstrated:
- ``catch_response=True`` so the HTTP sample and the named checks are
  judged separately
- Checks that record instead of raising, so one slow or failed request
  never aborts the iteration
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from loadtest.checks import (
    Check,
    CheckRecorder,
    CheckResult,
    CheckTally,
    evaluate,
    responds_within,
    status_is,
)
from loadtest.config import (
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_THINK_TIME_SECONDS,
    normalize_base_url,
)
from loadtest.payloads import invalid_favorite_payloads, random_favorite_payload

logger = logging.getLogger(__name__)

FAVORITE_ENDPOINT = "/api/v1/favorite"
JSON_HEADERS = {"Content-Type": "application/json"}

ITERATION_CHECKS = (
    Check("status is 200", status_is(200)),
    Check("response time < 500ms", responds_within(500)),
    Check("response time < 1000ms", responds_within(1000)),
)
INVALID_REQUEST_CHECKS = (Check("invalid request returns 400", status_is(400)),)


class IterationRunner:
    """
    Send favorite-number requests and record their checks.

    Args:
        client: HTTP client with a ``requests``-style ``post`` that
            supports Locust's ``catch_response`` protocol (normally the
            user's ``HttpSession``).
        base_url: Target host; blank means ``http://localhost:1323``.
        recorder: Where check results go.  Defaults to a fresh
            :class:`~loadtest.checks.CheckTally`.
        think_time: Seconds to pause after each valid iteration.
        request_timeout: Client timeout in seconds for each request.
        sleep: Pause function, default :func:`time.sleep`, looked up
            when the runner is built so that Locust's gevent patch applies.
    """

    def __init__(
        self,
        client: Any,
        base_url: str = DEFAULT_BASE_URL,
        recorder: CheckRecorder | None = None,
        *,
        think_time: float = DEFAULT_THINK_TIME_SECONDS,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] | None = None,
    ):
        self.client = client
        self.url = f"{normalize_base_url(base_url)}{FAVORITE_ENDPOINT}"
        self.recorder = recorder if recorder is not None else CheckTally()
        self.think_time = think_time
        self.request_timeout = request_timeout
        self.sleep = sleep if sleep is not None else time.sleep

    def run_iteration(self) -> list[CheckResult]:
        """
        Run one load-test iteration.

        POSTs a fresh random payload, evaluates ``status is 200``,
        ``response time < 500ms`` and ``response time < 1000ms``, records
        each result, then sleeps for :attr:`think_time`.

        Returns:
            The three check results, in the order above.
        """
        payload = random_favorite_payload()
        with self._post(payload, name=f"{FAVORITE_ENDPOINT} [POST]") as response:
            results = evaluate(response, ITERATION_CHECKS)
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Expected 200, got {response.status_code}")

        self._record(results)
        self.sleep(self.think_time)
        return results

    def test_invalid_data(self) -> list[CheckResult]:
        """
        Probe the endpoint's validation with the four invalid payloads.

        Every payload is sent even when an earlier one is not rejected,
        so a call always issues exactly four requests.

        Returns:
            One ``invalid request returns 400`` result per payload, in
            payload order.
        """
        results: list[CheckResult] = []
        for payload in invalid_favorite_payloads():
            with self._post(payload, name=f"{FAVORITE_ENDPOINT} [POST invalid]") as response:
                outcome = evaluate(response, INVALID_REQUEST_CHECKS)
                if response.status_code == 400:
                    response.success()
                else:
                    response.failure(f"Expected 400, got {response.status_code}")

            self._record(outcome)
            results.extend(outcome)
        return results

    def _post(self, payload: dict[str, Any], *, name: str) -> Any:
        return self.client.post(
            self.url,
            data=json.dumps(payload),
            headers=JSON_HEADERS,
            name=name,
            timeout=self.request_timeout,
            catch_response=True,
        )

    def _record(self, results: list[CheckResult]) -> None:
        for result in results:
            self.recorder.record(result)
