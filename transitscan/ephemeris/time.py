"""Julian day and ISO-8601 conversions for UTC instants."""

from __future__ import annotations

import datetime as _dt
from typing import Final

__all__ = [
    "UNIX_EPOCH_JD",
    "SECONDS_PER_DAY",
    "ensure_utc",
    "parse_iso",
    "julian_day",
    "jd_to_datetime",
    "jd_to_iso",
    "jd_to_date_str",
]

UNIX_EPOCH_JD: Final[float] = 2440587.5  # JD at 1970-01-01T00:00:00Z
SECONDS_PER_DAY: Final[float] = 86_400.0
_EPOCH: Final[_dt.datetime] = _dt.datetime(1970, 1, 1, tzinfo=_dt.timezone.utc)


def ensure_utc(moment: _dt.datetime) -> _dt.datetime:
    """Return ``moment`` converted to UTC; naive values are taken as UTC."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=_dt.timezone.utc)
    return moment.astimezone(_dt.timezone.utc)


def parse_iso(value: str) -> _dt.datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted) into UTC."""

    return ensure_utc(_dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def julian_day(moment: _dt.datetime) -> float:
    """Return the Julian day (UT) of ``moment``."""

    delta = ensure_utc(moment) - _EPOCH
    return UNIX_EPOCH_JD + delta.total_seconds() / SECONDS_PER_DAY


def jd_to_datetime(jd: float) -> _dt.datetime:
    """Convert a Julian day (UT) to an aware UTC ``datetime``."""

    return _EPOCH + _dt.timedelta(seconds=(jd - UNIX_EPOCH_JD) * SECONDS_PER_DAY)


def jd_to_iso(jd: float) -> str:
    """Convert a Julian day (UT) to an ISO-8601 UTC timestamp with second precision."""

    moment = jd_to_datetime(jd)
    return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def jd_to_date_str(jd: float) -> str:
    """Return the UTC calendar date of ``jd`` as ``YYYY-MM-DD``."""

    return jd_to_datetime(jd).date().isoformat()
