"""Normalizers for the periodic (daily, weekly, monthly) usage reports."""

from typing import Any, Dict, List, Mapping, Sequence

from ..models import NormalizedData, SeriesPoint, Summary
from .fields import (
    as_float,
    as_str,
    cost,
    entries_from,
    lookup,
    token_count,
    total_tokens,
    totals_from,
)

DAILY_KEYS = ("daily", "data")
WEEKLY_KEYS = ("weekly", "data")
MONTHLY_KEYS = ("monthly", "data")


def build_series(entries: Sequence[Mapping[str, Any]], label_key: str) -> List[SeriesPoint]:
    """One chart point per entry, in upstream order."""
    return [
        SeriesPoint(
            label=as_str(entry.get(label_key)),
            cost_usd=cost(entry),
            total_tokens=total_tokens(entry),
        )
        for entry in entries
    ]


def compute_totals(entries: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Recompute aggregate totals locally from a list of entries.

    Returns:
        Totals keyed with the upstream field names so the same alias
        lookups apply to them as to upstream-provided totals
    """
    input_tokens = sum(token_count(entry, "input_tokens") for entry in entries)
    output_tokens = sum(token_count(entry, "output_tokens") for entry in entries)
    cache_creation = sum(token_count(entry, "cache_creation_tokens") for entry in entries)
    cache_read = sum(token_count(entry, "cache_read_tokens") for entry in entries)

    return {
        "inputTokens": input_tokens,
        "outputTokens": output_tokens,
        "cacheCreationTokens": cache_creation,
        "cacheReadTokens": cache_read,
        "totalTokens": sum(total_tokens(entry) for entry in entries),
        "totalCost": sum(cost(entry) for entry in entries),
    }


def build_summary(period: str, start: str, totals: Mapping[str, Any]) -> Summary:
    return Summary(
        period=period,
        start=start,
        total_tokens=total_tokens(totals),
        total_input_tokens=token_count(totals, "input_tokens"),
        total_output_tokens=token_count(totals, "output_tokens"),
        total_cost_usd=as_float(lookup(totals, "cost")),
    )


def _normalize_aggregate(
    raw: Any,
    period: str,
    entry_keys: Sequence[str],
    totals_keys: Sequence[str],
    label_key: str,
) -> NormalizedData:
    entries = entries_from(raw, entry_keys)
    series = build_series(entries, label_key)

    if not entries:
        return NormalizedData(summary=Summary(period=period, start=""), series=series)

    totals = totals_from(raw, totals_keys) or compute_totals(entries)
    summary = build_summary(period, as_str(entries[0].get(label_key)), totals)
    return NormalizedData(summary=summary, series=series)


def normalize_daily(raw: Any) -> NormalizedData:
    """
    Normalize a daily report.

    The summary reflects the most recent (last) entry; it is None when the
    report has no entries.
    """
    entries = entries_from(raw, DAILY_KEYS)
    series = build_series(entries, "date")
    if not entries:
        return NormalizedData(summary=None, series=series)

    latest = entries[-1]
    summary = build_summary("daily", as_str(latest.get("date")), latest)
    return NormalizedData(summary=summary, series=series)


def normalize_weekly(raw: Any) -> NormalizedData:
    """Normalize a weekly report; the summary aggregates every week."""
    return _normalize_aggregate(raw, "weekly", WEEKLY_KEYS, ("totals",), "week")


def normalize_monthly(raw: Any) -> NormalizedData:
    """Normalize a monthly report; the summary aggregates every month."""
    return _normalize_aggregate(
        raw, "monthly", MONTHLY_KEYS, ("summary", "totals"), "month"
    )
