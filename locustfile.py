"""
Locust entrypoint for the favorite-number load test.

This is the file the ``locust`` CLI discovers and loads.  It exposes the
user classes and the staged load shape, adds a ``--profile`` option
that picks the scenario, maps ``--tags`` values to user classes, and
installs the threshold gate that runs when Locust quits.

Usage examples::

    # Stress profile (the default) against a local service:
    locust -f locustfile.py --headless

    # Smoke profile against another host:
    BASE_URL=http://staging:1323 locust -f locustfile.py --headless --profile smoke

    # Probe input validation instead of the normal workload:
    locust -f locustfile.py --headless --profile smoke --tags invalid

``--users``, ``--spawn-rate`` and ``--run-time`` are ignored: the
selected profile's stages decide the user count and run length.
"""

from __future__ import annotations

from locust import events

from loadtest.config import get_config
from loadtest.profiles import Profile
from loadtest.scheduler import StagedLoadShape
from loadtest.thresholds import enforce_thresholds
from loadtest.users import FavoriteUser, InvalidPayloadUser

__all__ = ["FavoriteUser", "InvalidPayloadUser", "StagedLoadShape"]

# Maps CLI ``--tags`` values to concrete user classes.  Without tags
# only ``FavoriteUser`` runs; the invalid-payload probe is opt-in.
TAG_TO_USER_CLASS = {
    "favorite": FavoriteUser,
    "invalid": InvalidPayloadUser,
}
DEFAULT_USER_CLASSES = [FavoriteUser]


@events.init_command_line_parser.add_listener
def _add_profile_option(parser, **_kwargs):
    parser.add_argument(
        "--profile",
        choices=[profile.value for profile in Profile],
        default=get_config().profile.value,
        help="Scenario profile that drives the stages and thresholds (env: LOAD_PROFILE)",
    )


@events.init.add_listener
def _select_user_classes(environment, **_kwargs):
    """
    Spawn only the user classes the operator asked for.

    Locust's tag filtering hides ``@task`` methods but still
    instantiates every user class, so the class list is replaced here.
    User classes named explicitly on the command line are left alone.
    """
    parsed_options = environment.parsed_options
    if parsed_options is not None and getattr(parsed_options, "user_classes", None):
        return

    selected_tags = set(getattr(parsed_options, "tags", None) or [])
    selected_classes = [
        user_class
        for tag, user_class in TAG_TO_USER_CLASS.items()
        if tag in selected_tags
    ]
    environment.user_classes = selected_classes or DEFAULT_USER_CLASSES


@events.quitting.add_listener
def _check_thresholds(environment, **_kwargs):
    enforce_thresholds(environment)
