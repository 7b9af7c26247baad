"""Timestamp and random-data helpers shared by payloads, pages and screenshots."""

import random
import string
from datetime import datetime, timezone
from typing import Optional

ALPHANUMERIC = string.ascii_letters + string.digits


def current_timestamp(now: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision.

    Example: ``2026-10-19T08:15:30.123Z``
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp safe for file names (``:`` and ``.`` replaced by ``-``)."""
    return current_timestamp(now).replace(":", "-").replace(".", "-")


def random_string(length: int = 8, charset: str = ALPHANUMERIC) -> str:
    return "".join(random.choice(charset) for _ in range(length))
