"""Calendar-aligned date windows for reporting periods.

Windows are computed on the local calendar day; no timezone conversion
happens here.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Union

from ..models import Period

DEFAULT_WEEK_START = "sunday"

WEEKDAYS = {
    "sunday": 6,
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
}


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive date bounds in ``YYYYMMDD`` form."""

    since: str
    until: str

    @property
    def since_iso(self) -> str:
        return to_iso_date(self.since)

    @property
    def until_iso(self) -> str:
        return to_iso_date(self.until)

    @property
    def target_month(self) -> str:
        """The ``YYYY-MM`` month containing ``since``."""
        return f"{self.since[:4]}-{self.since[4:6]}"

    def contains(self, compact_date: str) -> bool:
        """Check whether a ``YYYYMMDD`` date falls inside the window."""
        return self.since <= compact_date <= self.until


def format_compact(day: date) -> str:
    """Format a date as ``YYYYMMDD``."""
    return day.strftime("%Y%m%d")


def to_iso_date(compact: str) -> str:
    """Convert ``YYYYMMDD`` to ``YYYY-MM-DD``."""
    return f"{compact[:4]}-{compact[4:6]}-{compact[6:8]}"


def compact_date(value: str) -> str:
    """Strip separators from a date string (``2024-01-05`` -> ``20240105``)."""
    return value.replace("-", "").replace("/", "")


def normalize_week_start(week_start_day: Optional[str]) -> str:
    """Return a known weekday name, falling back to Sunday.

    Unknown names are not an error; they silently use the default.
    """
    if not week_start_day:
        return DEFAULT_WEEK_START
    name = week_start_day.strip().lower()
    return name if name in WEEKDAYS else DEFAULT_WEEK_START


def get_week_start(day: date, week_start_day: Optional[str] = None) -> date:
    """Most recent occurrence of the week-start weekday on or before ``day``."""
    target = WEEKDAYS[normalize_week_start(week_start_day)]
    diff = (day.weekday() - target) % 7
    return day - timedelta(days=diff)


def resolve_window(
    period: Union[Period, str],
    week_start_day: Optional[str] = None,
    today: Optional[date] = None,
) -> PeriodWindow:
    """
    Compute the inclusive window for a period relative to today.

    Args:
        period: Reporting period
        week_start_day: Weekday name the week starts on (weekly only)
        today: Override for the current local date

    Returns:
        PeriodWindow with ``since`` and ``until`` as ``YYYYMMDD``
    """
    period = Period(period)
    today = today or date.today()
    until = format_compact(today)

    if period is Period.DAILY:
        return PeriodWindow(since=until, until=until)

    if period is Period.WEEKLY:
        return PeriodWindow(
            since=format_compact(get_week_start(today, week_start_day)),
            until=until,
        )

    # Monthly, session and blocks all cover the current month
    return PeriodWindow(since=format_compact(today.replace(day=1)), until=until)
