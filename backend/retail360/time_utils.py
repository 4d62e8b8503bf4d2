"""
UTC helpers.

Timestamps are stored naive and in UTC. They leave the process as ISO-8601
strings with a trailing Z, truncated to whole seconds.
"""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_due_date(text: str | None) -> datetime | None:
    """
    Parse a due date given on the command line.

    Accepts a bare date (midnight UTC) or a full ISO datetime; an offset or
    trailing Z is converted to UTC. Blank input means no due date. Raises
    ValueError on anything else.
    """
    if text is None or not text.strip():
        return None
    text = text.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    return as_naive_utc(datetime.fromisoformat(text))


def isoformat_utc(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    moment = as_naive_utc(moment).replace(microsecond=0)
    return moment.isoformat() + "Z"
