"""
Run configuration for the load-test suite.

All settings are read once from environment variables and frozen for
the rest of the run:

- ``BASE_URL``: target host (default ``http://localhost:1323``)
- ``LOAD_PROFILE``: active scenario profile (default ``stress``)
- ``THINK_TIME_SECONDS``: pause after each iteration (default ``0.1``)
- ``REQUEST_TIMEOUT_SECONDS``: per-request client timeout (default ``60``)

The active profile can also be chosen per run with Locust's
``--profile`` option, which takes precedence over ``LOAD_PROFILE``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from loadtest.profiles import Profile, ScenarioProfile, get_profile

DEFAULT_BASE_URL = "http://localhost:1323"
DEFAULT_PROFILE = Profile.STRESS
DEFAULT_THINK_TIME_SECONDS = 0.1
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0


def normalize_base_url(value: str | None) -> str:
    """Return *value* without trailing slashes, or the default when blank."""
    cleaned = (value or "").strip().rstrip("/")
    return cleaned or DEFAULT_BASE_URL


def _float_setting(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class LoadTestConfig:
    """
    Immutable settings for one load-test run.

    Attributes:
        base_url: Scheme, host and port of the service under test.
        profile: Which built-in scenario profile drives the run.
        think_time: Seconds each virtual user pauses after an iteration.
        request_timeout: Seconds before the HTTP client gives up on a
            request.
    """

    base_url: str = DEFAULT_BASE_URL
    profile: Profile = DEFAULT_PROFILE
    think_time: float = DEFAULT_THINK_TIME_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    @property
    def scenario(self) -> ScenarioProfile:
        """The stages and thresholds of the selected profile."""
        return get_profile(self.profile)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoadTestConfig:
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from.  Defaults to ``os.environ``.

        Raises:
            ValueError: If ``LOAD_PROFILE`` names an unknown profile or a
                numeric setting is malformed.
        """
        if environ is None:
            environ = os.environ

        profile_name = environ.get("LOAD_PROFILE", "").strip() or DEFAULT_PROFILE.value
        return cls(
            base_url=normalize_base_url(environ.get("BASE_URL")),
            profile=Profile(get_profile(profile_name).name),
            think_time=_float_setting(
                environ, "THINK_TIME_SECONDS", DEFAULT_THINK_TIME_SECONDS
            ),
            request_timeout=_float_setting(
                environ, "REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> LoadTestConfig:
    """Return the process-wide configuration, read from the environment once."""
    return LoadTestConfig.from_env()
