from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    # Normalize to UTC-naive
    if dt.tzinfo is None:
        # interpret naive as UTC
        return dt.replace(tzinfo=None)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_range_bound(value: Optional[str], *, end: bool, tz_name: str = "UTC") -> Optional[datetime]:
    """
    Parse one side of an inclusive date window into a UTC-naive datetime.

    A bare "YYYY-MM-DD" is a calendar day in tz_name: as a start bound it
    means 00:00 of that day, as an end bound the last instant of that day.
    Anything else goes through parse_iso_datetime.

    Raises ValueError for unparseable input.
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    if _DATE_ONLY.match(s):
        day = date.fromisoformat(s)
        local = datetime.combine(day, time.max if end else time.min, tzinfo=ZoneInfo(tz_name))
        return local.astimezone(timezone.utc).replace(tzinfo=None)

    return parse_iso_datetime(s)


def local_date(dt: datetime, tz_name: str = "UTC") -> date:
    """Calendar date of a UTC-naive datetime as seen in tz_name."""
    return dt.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name)).date()


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def parse_date_window(args, tz_name: str = "UTC") -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Read an inclusive [start, end] window from query args.

    Accepts startDate/endDate as well as start_date/end_date.
    Raises ValueError naming the offending parameter.
    """
    bounds = []
    for camel, snake, end in (("startDate", "start_date", False), ("endDate", "end_date", True)):
        raw = args.get(camel) or args.get(snake)
        try:
            bounds.append(parse_range_bound(raw, end=end, tz_name=tz_name))
        except ValueError:
            raise ValueError(f"Invalid {camel}: {raw!r}")
    start, end = bounds
    if start is not None and end is not None and start > end:
        raise ValueError("startDate must not be after endDate")
    return start, end
