# fitfeed/services/periods.py
"""
Calendar helpers for the reference time zone.

Every timestamp stored by the app is a naive UTC datetime. Days, quarters and
time-of-day buckets are computed after shifting into a fixed UTC offset, so a
post at 23:30 UTC counts towards the next local day when the offset is +9.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

TIME_OF_DAY_LABELS = ("dawn", "morning", "afternoon", "night")


@dataclass(frozen=True)
class Period:
    year: int
    quarter: int

    def to_dict(self):
        return {"year": self.year, "quarter": self.quarter}


def utcnow() -> datetime:
    """Naive UTC now, the format used for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def to_local(ts: datetime, utc_offset_hours: int) -> datetime:
    return _as_naive_utc(ts) + timedelta(hours=utc_offset_hours)


def resolve_period(ts: datetime, utc_offset_hours: int) -> Period:
    local = to_local(ts, utc_offset_hours)
    return Period(year=local.year, quarter=(local.month - 1) // 3 + 1)


def time_of_day_label(ts: datetime, utc_offset_hours: int) -> str:
    hour = to_local(ts, utc_offset_hours).hour
    if hour < 6:
        return "dawn"
    if hour < 12:
        return "morning"
    if hour < 18:
        return "afternoon"
    return "night"


def local_date(ts: datetime, utc_offset_hours: int) -> date:
    return to_local(ts, utc_offset_hours).date()


def local_day_bounds(ts: datetime, utc_offset_hours: int) -> tuple[datetime, datetime]:
    """
    Returns the naive UTC half-open interval [start, end) covering the local
    calendar day that contains ts.
    """
    day = local_date(ts, utc_offset_hours)
    start = datetime(day.year, day.month, day.day) - timedelta(hours=utc_offset_hours)
    return start, start + timedelta(days=1)
