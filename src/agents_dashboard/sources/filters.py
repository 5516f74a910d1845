"""Date filtering for reports whose upstream cannot filter by date itself.

The OpenCode CLI returns its whole history for every period, and the
in-process Claude loader returns every bucket it finds. Filters are
lenient: missing lists are treated as empty and entries without a usable
date simply do not match.
"""

from typing import Any, Dict, List, Mapping, Sequence, Union

from ..models import Period
from ..parsers.fields import entries_from, lookup
from ..utils.periods import PeriodWindow, compact_date


def _entry_date(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return compact_date(str(value)) if value else ""


def _activity_date(entry: Mapping[str, Any]) -> str:
    value = lookup(entry, "last_activity")
    return compact_date(str(value)[:10]) if value else ""


def filter_in_window(
    entries: Sequence[Mapping[str, Any]], key: str, window: PeriodWindow
) -> List[Mapping[str, Any]]:
    """Keep entries whose ``key`` date lies inside the window."""
    return [entry for entry in entries if window.contains(_entry_date(entry, key))]


def filter_sessions_in_window(
    entries: Sequence[Mapping[str, Any]], window: PeriodWindow
) -> List[Mapping[str, Any]]:
    """Keep sessions whose last-activity date lies inside the window."""
    return [entry for entry in entries if window.contains(_activity_date(entry))]


def filter_target_month(
    entries: Sequence[Mapping[str, Any]], window: PeriodWindow
) -> List[Mapping[str, Any]]:
    """Entries for the window's month; may be empty."""
    target = window.target_month
    return [entry for entry in entries if entry.get("month") == target]


def latest_bucket(entries: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return list(entries[-1:])


def filter_payload(
    raw: Any, period: Union[Period, str], window: PeriodWindow
) -> Union[Dict[str, List[Mapping[str, Any]]], Any]:
    """
    Restrict an OpenCode report to the requested window.

    - daily: entries dated inside the window
    - weekly: only the most recent week, whatever the window
    - monthly: entries for the window's month, else the most recent month
    - session: sessions last active inside the window

    Args:
        raw: Parsed CLI output
        period: Reporting period
        window: Resolved date window

    Returns:
        The filtered report wrapped under its period key; other periods
        are returned unchanged
    """
    period = Period(period)

    if period is Period.DAILY:
        return {"daily": filter_in_window(entries_from(raw, ("daily",)), "date", window)}

    if period is Period.WEEKLY:
        return {"weekly": latest_bucket(entries_from(raw, ("weekly",)))}

    if period is Period.MONTHLY:
        entries = entries_from(raw, ("monthly",))
        return {"monthly": filter_target_month(entries, window) or latest_bucket(entries)}

    if period is Period.SESSION:
        return {"sessions": filter_sessions_in_window(entries_from(raw, ("sessions",)), window)}

    return raw


def filter_records(
    records: Sequence[Mapping[str, Any]], period: Union[Period, str], window: PeriodWindow
) -> List[Mapping[str, Any]]:
    """
    Restrict in-process loader records to the requested window.

    Monthly records fall back to the full list when the target month has
    no entries.
    """
    period = Period(period)

    if period is Period.DAILY:
        return filter_in_window(records, "date", window)
    if period is Period.WEEKLY:
        return filter_in_window(records, "week", window)
    if period is Period.MONTHLY:
        return filter_target_month(records, window) or list(records)
    if period is Period.SESSION:
        return filter_sessions_in_window(records, window)
    return list(records)
