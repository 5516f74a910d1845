"""Tests for the daily, weekly and monthly normalizers."""

from agents_dashboard.models import SeriesPoint, Summary
from agents_dashboard.parsers.reports import (
    compute_totals,
    normalize_daily,
    normalize_monthly,
    normalize_weekly,
)

DAILY_ENTRIES = [
    {"date": "2024-01-01", "inputTokens": 10, "outputTokens": 5},
    {"date": "2024-01-02", "totalTokens": 20, "totalCost": 1.5},
]


class TestNormalizeDaily:
    """Tests for normalize_daily()."""

    def test_series_and_latest_summary(self) -> None:
        result = normalize_daily(DAILY_ENTRIES)

        assert result.series == [
            SeriesPoint(label="2024-01-01", cost_usd=0.0, total_tokens=15),
            SeriesPoint(label="2024-01-02", cost_usd=1.5, total_tokens=20),
        ]
        assert result.summary.period == "daily"
        assert result.summary.start == "2024-01-02"
        assert result.summary.total_tokens == 20
        assert result.summary.total_cost_usd == 1.5
        assert result.sessions == []
        assert result.blocks == []

    def test_wrapped_payload(self) -> None:
        result = normalize_daily({"daily": DAILY_ENTRIES, "totals": {"totalTokens": 99}})
        assert [point.label for point in result.series] == ["2024-01-01", "2024-01-02"]
        assert result.summary.total_tokens == 20

    def test_empty_has_null_summary(self) -> None:
        assert normalize_daily([]).summary is None
        assert normalize_daily({}).summary is None
        assert normalize_daily({"daily": []}).series == []

    def test_cost_alias(self) -> None:
        result = normalize_daily([{"date": "2024-01-03", "costUSD": 0.25, "inputTokens": 1}])
        assert result.series[0].cost_usd == 0.25
        assert result.summary.total_cost_usd == 0.25

    def test_zero_total_falls_back_to_derived(self) -> None:
        entry = {
            "date": "2024-01-03",
            "totalTokens": 0,
            "inputTokens": 1,
            "outputTokens": 2,
            "cacheCreationTokens": 3,
            "cacheReadTokens": 4,
        }
        result = normalize_daily([entry])
        assert result.series[0].total_tokens == 10
        assert result.summary.total_tokens == 10
        assert result.summary.total_input_tokens == 1
        assert result.summary.total_output_tokens == 2

    def test_series_keeps_upstream_order(self) -> None:
        entries = [{"date": "2024-01-05"}, {"date": "2024-01-01"}]
        result = normalize_daily(entries)
        assert [point.label for point in result.series] == ["2024-01-05", "2024-01-01"]
        assert result.summary.start == "2024-01-01"

    def test_malformed_values_default_to_zero(self) -> None:
        result = normalize_daily([{"date": "2024-01-01", "inputTokens": "n/a", "totalCost": None}, "junk"])
        assert result.series == [SeriesPoint(label="2024-01-01", cost_usd=0.0, total_tokens=0)]

    def test_non_collection_payload(self) -> None:
        assert normalize_daily("not json").series == []
        assert normalize_daily(None).summary is None


class TestNormalizeWeekly:
    """Tests for normalize_weekly()."""

    def test_aggregates_all_weeks(self) -> None:
        raw = [
            {"week": "2024-01-07", "inputTokens": 10, "outputTokens": 5, "totalCost": 1.0},
            {"week": "2024-01-14", "inputTokens": 20, "outputTokens": 5, "costUSD": 2.0},
        ]
        result = normalize_weekly(raw)

        assert result.summary == Summary(
            period="weekly",
            start="2024-01-07",
            total_tokens=40,
            total_input_tokens=30,
            total_output_tokens=10,
            total_cost_usd=3.0,
        )
        assert [point.label for point in result.series] == ["2024-01-07", "2024-01-14"]

    def test_upstream_totals_take_precedence(self) -> None:
        raw = {
            "weekly": [{"week": "2024-01-07", "inputTokens": 10}],
            "totals": {"inputTokens": 100, "outputTokens": 50, "totalTokens": 150, "totalCost": 9.5},
        }
        summary = normalize_weekly(raw).summary
        assert summary.total_tokens == 150
        assert summary.total_input_tokens == 100
        assert summary.total_cost_usd == 9.5

    def test_totals_without_total_tokens_are_derived(self) -> None:
        raw = {
            "weekly": [{"week": "2024-01-07"}],
            "totals": {"inputTokens": 1, "outputTokens": 2, "cacheCreationTokens": 3, "cacheReadTokens": 4},
        }
        assert normalize_weekly(raw).summary.total_tokens == 10

    def test_data_envelope(self) -> None:
        result = normalize_weekly({"data": [{"week": "2024-01-07", "totalTokens": 5}]})
        assert result.series[0].total_tokens == 5

    def test_empty_gives_zero_summary(self) -> None:
        result = normalize_weekly([])
        assert result.summary == Summary(period="weekly", start="")
        assert result.summary.total_tokens == 0
        assert result.series == []


class TestNormalizeMonthly:
    """Tests for normalize_monthly()."""

    def test_summary_key_precedes_totals(self) -> None:
        raw = {
            "monthly": [{"month": "2024-01", "totalTokens": 5}],
            "summary": {"totalTokens": 7, "totalCostUSD": 1.0},
            "totals": {"totalTokens": 9},
        }
        summary = normalize_monthly(raw).summary
        assert summary.start == "2024-01"
        assert summary.total_tokens == 7
        assert summary.total_cost_usd == 1.0

    def test_bare_list(self) -> None:
        result = normalize_monthly([{"month": "2024-01", "totalTokens": 5, "totalCost": 0.5}])
        assert result.summary.total_tokens == 5
        assert result.series == [SeriesPoint(label="2024-01", cost_usd=0.5, total_tokens=5)]

    def test_empty_gives_zero_summary(self) -> None:
        assert normalize_monthly({"monthly": []}).summary == Summary(period="monthly", start="")


class TestComputeTotals:
    """Tests for compute_totals()."""

    def test_explicit_totals_summed(self) -> None:
        totals = compute_totals([{"totalTokens": 5}, {"totalTokens": 6, "inputTokens": 1}])
        assert totals["totalTokens"] == 11
        assert totals["inputTokens"] == 1

    def test_derived_when_no_explicit_totals(self) -> None:
        totals = compute_totals([{"inputTokens": 5, "cacheReadTokens": 2}])
        assert totals["totalTokens"] == 7
        assert totals["totalCost"] == 0.0

    def test_mixed_explicit_and_derived_totals_match_series(self) -> None:
        entries = [
            {"week": "2024-01-07", "totalTokens": 20},
            {"week": "2024-01-14", "inputTokens": 10, "outputTokens": 5},
        ]
        result = normalize_weekly(entries)
        assert compute_totals(entries)["totalTokens"] == 35
        assert result.summary.total_tokens == sum(point.total_tokens for point in result.series)
