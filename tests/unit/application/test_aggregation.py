from __future__ import annotations

from datetime import datetime, timezone

from src.application.analytics.aggregation import (
    bucket_by_month,
    compute_change,
    filter_by_date_range,
    month_windows,
    round_half_up,
    safe_ratio,
    sort_by_date,
)
from src.domain.value_objects.trend import Trend
from src.utils.datetime_tz import add_months, as_datetime, days_between

UTC = timezone.utc


def test_compute_change_zero_baseline_is_stable():
    change = compute_change(10, 0)
    assert change.change == 10
    assert change.percentage_change == 0
    assert change.trend == Trend.STABLE


def test_compute_change_stable_band_is_inclusive():
    assert compute_change(102, 100).trend == Trend.STABLE
    assert compute_change(98, 100).trend == Trend.STABLE
    assert compute_change(103, 100).trend == Trend.UP
    assert compute_change(97, 100).trend == Trend.DOWN


def test_compute_change_keeps_difference_invariant():
    for current, previous in [(5, 3), (0, 7), (12.5, 12.5), (-4, 2)]:
        change = compute_change(current, previous)
        assert change.change == current - previous


def test_round_half_up_matches_display_rounding():
    assert round_half_up(87.5) == 88
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(12.345, 1) == 12.3
    assert isinstance(round_half_up(1.2), int)


def test_safe_ratio_returns_zero_for_zero_denominator():
    assert safe_ratio(5, 0) == 0.0
    assert safe_ratio(6, 3) == 2.0


def test_month_windows_roll_over_year_boundary():
    windows = month_windows(2, datetime(2026, 1, 10, tzinfo=UTC))
    assert [w.label for w in windows] == ["Nov 2025", "Dec 2025", "Jan 2026"]
    assert windows[0].start == datetime(2025, 11, 1, tzinfo=UTC)
    for earlier, later in zip(windows, windows[1:]):
        assert earlier.end < later.start
        assert (later.start - earlier.end).total_seconds() < 1


def test_month_windows_count():
    windows = month_windows(11, datetime(2026, 2, 15, tzinfo=UTC))
    assert len(windows) == 12
    assert windows[0].label == "Mar 2025"
    assert windows[-1].label == "Feb 2026"


def test_filter_by_date_range_is_inclusive_and_drops_bad_dates():
    records = [
        {"id": 1, "date": "2026-03-01"},
        {"id": 2, "date": "2026-03-31T23:59:59Z"},
        {"id": 3, "date": "not-a-date"},
        {"id": 4, "date": None},
        {"id": 5, "date": "2026-04-01"},
    ]
    kept = filter_by_date_range(
        records,
        lambda r: r["date"],
        datetime(2026, 3, 1, tzinfo=UTC),
        datetime(2026, 3, 31, 23, 59, 59, tzinfo=UTC),
    )
    assert [r["id"] for r in kept] == [1, 2]


def test_bucket_by_month_places_month_end_in_its_own_month():
    now = datetime(2026, 1, 15, tzinfo=UTC)
    records = ["2025-12-31T23:59:00", "2026-01-01T00:00:00", "2025-06-01", "garbage"]
    buckets = bucket_by_month(records, lambda r: r, 1, now)
    assert [b.label for b in buckets] == ["Dec 2025", "Jan 2026"]
    assert buckets[0].items == ["2025-12-31T23:59:00"]
    assert buckets[1].items == ["2026-01-01T00:00:00"]


def test_sort_by_date_is_stable_and_drops_undated():
    records = [("b", "2026-02-01"), ("a", "2026-01-01"), ("c", "2026-02-01"), ("x", None)]
    ordered = sort_by_date(records, lambda r: r[1])
    assert [r[0] for r in ordered] == ["a", "b", "c"]


def test_add_months_clamps_day():
    assert add_months(datetime(2026, 3, 31, tzinfo=UTC), -1) == datetime(2026, 2, 28, tzinfo=UTC)
    assert add_months(datetime(2025, 12, 15, tzinfo=UTC), 1) == datetime(2026, 1, 15, tzinfo=UTC)


def test_as_datetime_normalizes_inputs():
    assert as_datetime("2026-05-04") == datetime(2026, 5, 4, tzinfo=UTC)
    assert as_datetime(datetime(2026, 5, 4, 8, 30)) == datetime(2026, 5, 4, 8, 30, tzinfo=UTC)
    assert as_datetime("31/12/2026") is None
    assert as_datetime("") is None


def test_days_between_truncates():
    start = datetime(2026, 1, 1, tzinfo=UTC)
    assert days_between(start, datetime(2026, 1, 2, 23, 0, tzinfo=UTC)) == 1
    assert days_between(start, datetime(2025, 12, 31, 1, 0, tzinfo=UTC)) == 0
