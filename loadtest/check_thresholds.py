"""
Validate Locust CSV output against a scenario profile's thresholds.

After a headless run with ``--csv``, CI can invoke this script to gate
the build on the ``*_stats.csv`` file instead of the live exit code
(useful when the CSV is archived and re-checked later, or checked
against stricter limits than the run used).

Thresholds come from the selected profile, or from a YAML file in k6
``thresholds`` shape::

    http_req_duration: ["p(95)<2000", "p(99)<3000"]
    http_req_failed: ["rate<0.1"]

``CHECK`` rows are ignored; only HTTP rows count.  Percentiles cannot
be merged from CSV columns, so ``p(N)`` is judged on the slowest HTTP
row, an upper bound on the combined percentile.

Exit codes follow a three-state convention so that CI can distinguish
"thresholds breached" from "script crashed":

- ``0``: all thresholds passed
- ``1``: at least one threshold was breached
- ``2``: the script itself failed (missing file, bad YAML, etc.)
"""

from __future__ import annotations

import argparse
import csv
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml

from loadtest.checks import CHECK_REQUEST_TYPE
from loadtest.config import get_config
from loadtest.profiles import (
    HTTP_REQ_FAILED,
    Profile,
    Threshold,
    get_profile,
    thresholds_from_mapping,
)

# Three-state exit codes so CI can tell "test failed" from "script crashed".
EXIT_PASS = 0
EXIT_THRESHOLD_BREACH = 1
EXIT_SCRIPT_ERROR = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the threshold checker."""
    parser = argparse.ArgumentParser(
        description="Check Locust stats CSV against load-test thresholds."
    )
    parser.add_argument(
        "--stats",
        required=True,
        type=Path,
        help="Path to Locust *_stats.csv file",
    )
    parser.add_argument(
        "--profile",
        choices=[profile.value for profile in Profile],
        default=None,
        help="Scenario profile whose thresholds apply (default: LOAD_PROFILE or stress)",
    )
    parser.add_argument(
        "--thresholds",
        type=Path,
        default=None,
        help="YAML file of k6-style thresholds, overriding the profile's",
    )
    return parser.parse_args(argv)


def _load_thresholds(path: Path) -> tuple[Threshold, ...]:
    """
    Read thresholds from a YAML mapping of metric name to expressions.

    Raises:
        ValueError: If the file is not a mapping or holds an invalid
            expression.
    """
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ValueError("Thresholds file must be a mapping of metric name to expressions")
    return thresholds_from_mapping(data)


def _load_http_rows(stats_path: Path) -> list[dict[str, str]]:
    """
    Return the per-endpoint HTTP rows from a Locust stats CSV.

    The ``Aggregated`` summary row and the ``CHECK`` rows are dropped.

    Raises:
        ValueError: If no HTTP rows are present.
    """
    with stats_path.open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))

    http_rows = [
        row
        for row in rows
        if row.get("Name") != "Aggregated"
        and row.get("Type") not in ("Aggregated", CHECK_REQUEST_TYPE)
    ]
    if not http_rows:
        raise ValueError("No HTTP rows found in stats CSV")
    return http_rows


def _parse_float(value: Any, field_name: str) -> float:
    """
    Coerce *value* to ``float``, stripping ``%`` suffixes if present.

    Raises:
        ValueError: If the value is missing, empty, or non-numeric.
    """
    if value is None:
        raise ValueError(f"Missing field: {field_name}")

    text = str(value).strip().replace("%", "")
    if text == "":
        raise ValueError(f"Empty value for field: {field_name}")

    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Non-numeric value for {field_name}: {value}") from exc


def _percentile_ms(row: dict[str, str], percentile: float) -> float:
    """Read the ``N%`` column of *row*, tolerating older ``N%ile`` headers."""
    candidates = (f"{percentile:g}%", f"{percentile:g}%ile")
    for candidate in candidates:
        if row.get(candidate) not in (None, ""):
            return _parse_float(row[candidate], candidate)
    raise ValueError(f"Could not find p({percentile:g}) column in stats CSV")


def _observe(threshold: Threshold, rows: list[dict[str, str]]) -> float:
    """Compute the value *threshold* is judged on from the HTTP rows."""
    counts = [_parse_float(row.get("Request Count"), "Request Count") for row in rows]
    total_requests = sum(counts)

    if threshold.metric == HTTP_REQ_FAILED:
        failures = sum(_parse_float(row.get("Failure Count"), "Failure Count") for row in rows)
        return failures / total_requests if total_requests > 0 else 0.0

    if total_requests <= 0:
        raise ValueError("Request Count must be > 0 for latency threshold checks")

    if threshold.aggregation == "p":
        return max(_percentile_ms(row, threshold.percentile) for row in rows)
    if threshold.aggregation == "avg":
        weighted = sum(
            _parse_float(row.get("Average Response Time"), "Average Response Time") * count
            for row, count in zip(rows, counts)
        )
        return weighted / total_requests
    if threshold.aggregation == "med":
        return max(
            _parse_float(row.get("Median Response Time"), "Median Response Time") for row in rows
        )
    return max(_parse_float(row.get("Max Response Time"), "Max Response Time") for row in rows)


def _print_summary(results: list[tuple[Threshold, float, bool]], passed: bool) -> None:
    """Print a human-readable results table to stdout for CI logs."""
    print("Load Test Threshold Check")
    print("-" * 72)
    print(f"{'Threshold':<36}{'Actual':>14}{'Status':>12}")
    print("-" * 72)
    for threshold, observed, ok in results:
        print(f"{str(threshold):<36}{observed:>14.4g}{'PASS' if ok else 'FAIL':>12}")
    print("-" * 72)
    print(f"Overall: {'PASS' if passed else 'FAIL'}")


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point: load thresholds, parse CSV, compare, and print results.

    Returns:
        ``EXIT_PASS`` (0) if all thresholds are met,
        ``EXIT_THRESHOLD_BREACH`` (1) if any are exceeded, or
        ``EXIT_SCRIPT_ERROR`` (2) on unexpected failures.
    """
    args = parse_args(argv)

    try:
        if args.thresholds is not None:
            thresholds = _load_thresholds(args.thresholds)
        elif args.profile is not None:
            thresholds = get_profile(args.profile).thresholds
        else:
            thresholds = get_config().scenario.thresholds

        rows = _load_http_rows(args.stats)
        results = []
        for threshold in thresholds:
            observed = _observe(threshold, rows)
            results.append((threshold, observed, threshold.holds(observed)))

        passed = all(ok for _, _, ok in results)
        _print_summary(results, passed)
        return EXIT_PASS if passed else EXIT_THRESHOLD_BREACH
    except Exception as exc:  # pragma: no cover - defensive CLI guard
        print(f"Threshold check failed: {exc}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
