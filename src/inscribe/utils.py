from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Any, Iterable

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sorted_unique(values: Iterable[str]) -> list[str]:
    return sorted(set(values))


def parse_time(value: Any) -> int:
    """Return epoch seconds for an ISO string, datetime or epoch int."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid time: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1]
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid time: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def format_time(epoch_seconds: int) -> str:
    dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return dt.strftime(TIME_FORMAT)


def add_seconds(value: Any, seconds: int) -> str:
    return format_time(parse_time(value) + int(seconds))
