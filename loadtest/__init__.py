"""
Load-test suite for the favorite-number API (Locust-based).

Contains the scenario profiles, the per-iteration request runner, the
invalid-payload prober, and the glue that hands all of it to Locust:
user classes, a staged load shape, and a run-end threshold gate.

Traffic targets a single endpoint, ``POST /api/v1/favorite``, on the
host named by ``BASE_URL`` (default ``http://localhost:1323``).

Key Concepts Demonstrated:
- Staged virtual-user ramps expressed as data, selected by name
- Named per-response checks recorded as Locust statistics rows
- Threshold gates that turn a breached run into a non-zero exit code
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
