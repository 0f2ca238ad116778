"""Date/time normalization for appointment slots.

Times are kept as zero-padded 24-hour "HH:MM" strings everywhere so that
comparing two of them as strings gives the same answer as comparing them
chronologically. Dates are ISO "YYYY-MM-DD" strings.
"""
import os
import re
import time as _time
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...exceptions import InvalidInputError


WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?: ?([AaPp][Mm]))?$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DMY_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def normalize_time(raw) -> Optional[str]:
    """Return the canonical "HH:MM" form of ``raw`` or None if it is not a time.

    Accepts "H:MM" and "HH:MM" in 24-hour form, or the same followed by
    AM/PM (any case, optionally separated by one space).
    """
    if raw is None:
        return None
    match = _TIME_RE.match(str(raw).strip())
    if not match:
        return None
    hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
    if minute > 59:
        return None
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12
        if meridiem.upper() == "PM":
            hour += 12
    elif hour > 23:
        return None
    return f"{hour:02d}:{minute:02d}"


def normalize_date(raw) -> Optional[str]:
    """Return the ISO form of ``raw`` or None.

    Slash-separated dates are always read day first (D/M/YYYY); there is no
    month-first fallback.
    """
    if raw is None:
        return None
    s = str(raw).strip()
    match = _ISO_DATE_RE.match(s)
    if match:
        year, month, day = int(match.group(1)), int(match.group(2)), int(match.group(3))
    else:
        match = _DMY_DATE_RE.match(s)
        if not match:
            return None
        day, month, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def weekday_of(iso_date: str) -> str:
    # Calendar arithmetic only, so no timezone can shift the day.
    return WEEKDAYS[date.fromisoformat(iso_date).weekday()]


class HostLocalTimezone(tzinfo):
    """The host's local zone, asking the C library for the offset of each date.

    Used only when the host zone has no IANA key we can hand to ZoneInfo.
    """

    def _local(self, dt):
        stamp = _time.mktime((dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, 0, 0, -1))
        return _time.localtime(stamp)

    def utcoffset(self, dt):
        return timedelta(seconds=self._local(dt).tm_gmtoff)

    def dst(self, dt):
        local = self._local(dt)
        if local.tm_isdst <= 0:
            return timedelta(0)
        return timedelta(seconds=local.tm_gmtoff + _time.timezone)

    def tzname(self, dt):
        return _time.tzname[self._local(dt).tm_isdst > 0]

    def fromutc(self, dt):
        stamp = (dt.replace(tzinfo=None) - datetime(1970, 1, 1)).total_seconds()
        return dt + timedelta(seconds=_time.localtime(stamp).tm_gmtoff)

    def __repr__(self):
        return "HostLocalTimezone()"

    __str__ = __repr__


def _host_zone_key() -> Optional[str]:
    key = os.environ.get("TZ", "").lstrip(":")
    if key:
        return key
    target = os.path.realpath("/etc/localtime")
    if "/zoneinfo/" in target:
        return target.split("/zoneinfo/", 1)[1]
    return None


def resolve_timezone(name: Optional[str] = None) -> tzinfo:
    """Return the zone called ``name``, or the host zone when no name is given.

    The host zone keeps its DST rules, so dates on the other side of a
    transition get their own offset.
    """
    if not name:
        key = _host_zone_key()
        if key:
            try:
                return ZoneInfo(key)
            except (ZoneInfoNotFoundError, ValueError, OSError):
                pass
        return HostLocalTimezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInputError(f"Unknown timezone: {name}")


def now_in(tz: tzinfo) -> datetime:
    return datetime.now(tz)


def compose_instant(iso_date: str, canonical_time: str, tz: tzinfo) -> datetime:
    hour, minute = (int(part) for part in canonical_time.split(":"))
    return datetime.combine(date.fromisoformat(iso_date), time(hour, minute), tzinfo=tz)


def is_future_instant(iso_date: str, canonical_time: str, tz: tzinfo, now: datetime) -> bool:
    return compose_instant(iso_date, canonical_time, tz) > now


def is_pure_date_future(iso_date: str, tz: tzinfo, now: datetime) -> bool:
    """True when ``iso_date`` is today or later in ``tz``, ignoring time of day."""
    return date.fromisoformat(iso_date) >= now.astimezone(tz).date()
