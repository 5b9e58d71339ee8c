"""
Request validation for the favorite-number endpoint.

Rules mirror the struct tags the endpoint has always enforced:

- ``userId``: ``required`` (non-empty) and ``uuid_rfc4122``
- ``favNum``: ``required`` (non-zero) and ``gt=0``

Each field reports at most one error: the first rule it breaks.
Rejected fields are appended to a CSV log so bad clients can be traced
after a load run.
"""

from __future__ import annotations

import csv
import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

REQUEST_STRUCT = "FavoriteNumRequest"
CSV_HEADER = ["timestamp", "struct_and_field_name", "error_tag"]

_UUID_RFC4122 = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


class BindError(ValueError):
    """The body could not be read into a :class:`FavoriteNumRequest`."""


@dataclass(frozen=True)
class FavoriteNumRequest:
    user_id: str = ""
    fav_num: int = 0

    @classmethod
    def from_json(cls, data: Any) -> FavoriteNumRequest:
        """
        Bind a decoded JSON body.

        Missing and ``null`` fields take their zero value; unknown fields
        are ignored.

        Raises:
            BindError: If the body is not an object or a field has the
                wrong JSON type.
        """
        if not isinstance(data, dict):
            raise BindError("Request body must be a JSON object")

        user_id = data.get("userId")
        if user_id is None:
            user_id = ""
        elif not isinstance(user_id, str):
            raise BindError("userId must be a string")

        fav_num = data.get("favNum")
        if fav_num is None:
            fav_num = 0
        elif isinstance(fav_num, bool) or not isinstance(fav_num, int):
            raise BindError("favNum must be an integer")

        return cls(user_id=user_id, fav_num=fav_num)


@dataclass(frozen=True)
class FieldError:
    """One rejected field, e.g. ``FavoriteNumRequest.UserID`` / ``uuid_rfc4122``."""

    field: str
    tag: str

    @property
    def namespace(self) -> str:
        return f"{REQUEST_STRUCT}.{self.field}"


def validate_favorite(req: FavoriteNumRequest) -> list[FieldError]:
    """Return every field error in *req*; an empty list means valid."""
    errors: list[FieldError] = []

    if not req.user_id:
        errors.append(FieldError("UserID", "required"))
    elif not _UUID_RFC4122.fullmatch(req.user_id):
        errors.append(FieldError("UserID", "uuid_rfc4122"))

    if req.fav_num == 0:
        errors.append(FieldError("FavNum", "required"))
    elif req.fav_num <= 0:
        errors.append(FieldError("FavNum", "gt"))

    return errors


class ValidationErrorLog:
    """
    Append-only CSV log of validation failures.

    The header row is written only when the file is created.  Writes are
    serialised with a lock because the server handles requests on
    several threads.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def write(self, errors: list[FieldError]) -> None:
        """
        Append one row per error, all sharing the same timestamp.

        Raises:
            OSError: If the file cannot be opened or written.
        """
        timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        rows = [[timestamp, error.namespace, error.tag] for error in errors]

        with self._lock:
            is_new = not self.path.exists()
            with self.path.open("a", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle)
                if is_new:
                    writer.writerow(CSV_HEADER)
                writer.writerows(rows)
