"""
Locust user classes for the favorite-number endpoint.

- :class:`FavoriteUser` is the default workload, one randomised valid
  request per iteration, followed by the runner's think time.
- :class:`InvalidPayloadUser` is the validation probe, four known-bad
  requests per iteration, each expected to come back ``400``.  Only
  spawned when asked for with ``--tags invalid``.

Both classes hand the actual request work to
:class:`~loadtest.runner.IterationRunner` and only wire it to Locust's
session, host and event hooks.
"""

from __future__ import annotations

from locust import HttpUser, constant, tag, task

from loadtest.checks import LocustCheckRecorder
from loadtest.config import get_config
from loadtest.runner import IterationRunner


class FavoriteApiUser(HttpUser):
    """
    Base user that builds an :class:`IterationRunner` at startup.

    ``wait_time`` is zero because the runner already sleeps for the
    configured think time after each valid iteration.
    """

    abstract = True
    host = get_config().base_url
    wait_time = constant(0)

    iteration_runner: IterationRunner

    def on_start(self) -> None:
        """Bind a runner to this user's session and the run's event hooks."""
        config = get_config()
        self.iteration_runner = IterationRunner(
            self.client,
            self.host,
            LocustCheckRecorder(self.environment.events.request),
            think_time=config.think_time,
            request_timeout=config.request_timeout,
        )


@tag("favorite")
class FavoriteUser(FavoriteApiUser):
    """Send valid favorite-number requests at the configured pace."""

    @task
    def submit_favorite(self) -> None:
        self.iteration_runner.run_iteration()


@tag("invalid")
class InvalidPayloadUser(FavoriteApiUser):
    """
    Check that every malformed payload is rejected.

    The four invalid requests are sent back to back, so the pause comes
    from ``wait_time`` instead of the runner.
    """

    wait_time = constant(get_config().think_time)

    @task
    def submit_invalid_payloads(self) -> None:
        self.iteration_runner.test_invalid_data()
