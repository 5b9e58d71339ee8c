"""
Payload factories for the favorite-number endpoint.

Valid payloads are randomised on every call so the server sees a fresh
user id each time and a spread of numbers, rather than one cached path.
The invalid payloads are a fixed list, one per validation rule the
endpoint enforces.
"""

from __future__ import annotations

import random
import uuid
from typing import Any

FAV_NUM_MIN = 1
FAV_NUM_MAX = 100


def random_fav_num() -> int:
    """Pick a favorite number uniformly from ``[1, 100]``."""
    return random.randint(FAV_NUM_MIN, FAV_NUM_MAX)


def random_favorite_payload() -> dict[str, Any]:
    """Build a valid request body with a fresh UUID v4 and a random number."""
    return {
        "userId": str(uuid.uuid4()),
        "favNum": random_fav_num(),
    }


def invalid_favorite_payloads() -> list[dict[str, Any]]:
    """
    Return the four request bodies the endpoint must reject with ``400``.

    Each entry breaks exactly one rule, in this order:

    1. ``userId`` is not a UUID
    2. ``favNum`` is negative
    3. ``favNum`` is zero
    4. ``userId`` is empty
    """
    return [
        {"userId": "invalid-uuid", "favNum": 42},
        {"userId": str(uuid.uuid4()), "favNum": -1},
        {"userId": str(uuid.uuid4()), "favNum": 0},
        {"userId": "", "favNum": 42},
    ]
