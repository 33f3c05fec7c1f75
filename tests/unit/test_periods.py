"""Unit tests for period resolution and bucket generation"""

import pytest
from datetime import datetime, timedelta, timezone
from fairshare_gateway.domain.models import TimeGranularity, TimePeriod
from fairshare_gateway.domain.periods import granularity_for, resolve
from fairshare_gateway.utils.date_utils import add_months, bucket_label, days_between, generate_buckets, to_local_naive

NOW = datetime(2024, 3, 15, 14, 30)


def test_resolve_this_month():
    """Current month runs to now; previous window has the same length"""
    r = resolve(TimePeriod.THIS_MONTH, now=NOW)

    assert r.start == datetime(2024, 3, 1)
    assert r.end == NOW
    assert r.previous_end == r.start
    assert r.end - r.start == r.previous_end - r.previous_start
    assert r.has_previous


def test_resolve_last_month_spans_whole_calendar_month():
    r = resolve(TimePeriod.LAST_MONTH, now=NOW)

    assert r.start == datetime(2024, 2, 1)
    assert r.end == datetime(2024, 3, 1)
    assert r.previous_start == datetime(2024, 1, 1)
    assert r.previous_end == datetime(2024, 2, 1)


def test_resolve_last_month_across_year_boundary():
    r = resolve(TimePeriod.LAST_MONTH, now=datetime(2024, 1, 10))

    assert r.start == datetime(2023, 12, 1)
    assert r.end == datetime(2024, 1, 1)
    assert r.previous_start == datetime(2023, 11, 1)


def test_resolve_this_year_truncates_previous_year():
    r = resolve(TimePeriod.THIS_YEAR, now=NOW)

    assert r.start == datetime(2024, 1, 1)
    assert r.end == NOW
    assert r.previous_start == datetime(2023, 1, 1)
    assert r.previous_end - r.previous_start == NOW - r.start
    assert r.previous_end <= r.start


def test_resolve_all_time_has_no_previous_window():
    r = resolve(TimePeriod.ALL_TIME, now=NOW, all_time_start=datetime(2000, 1, 1))

    assert r.start == datetime(2000, 1, 1)
    assert r.end == NOW
    assert r.has_previous is False


@pytest.mark.parametrize(
    "period, expected",
    [
        (TimePeriod.THIS_MONTH, TimeGranularity.DAILY),
        (TimePeriod.LAST_MONTH, TimeGranularity.DAILY),
        (TimePeriod.THIS_YEAR, TimeGranularity.MONTHLY),
        (TimePeriod.ALL_TIME, TimeGranularity.MONTHLY),
    ],
)
def test_granularity_for_period(period, expected):
    assert granularity_for(period) == expected


def test_daily_buckets_cover_partial_last_day():
    """15 March at 14:30 still gets its own bucket"""
    buckets = generate_buckets(datetime(2024, 3, 1), NOW, TimeGranularity.DAILY)

    assert len(buckets) == 15
    assert buckets[0] == datetime(2024, 3, 1)
    assert buckets[-1] == datetime(2024, 3, 15)


def test_daily_buckets_exclusive_end_at_midnight():
    buckets = generate_buckets(datetime(2024, 2, 1), datetime(2024, 3, 1), TimeGranularity.DAILY)
    assert len(buckets) == 29  # leap year


def test_monthly_buckets_without_gaps():
    buckets = generate_buckets(datetime(2023, 11, 1), NOW, TimeGranularity.MONTHLY)

    assert buckets == [
        datetime(2023, 11, 1),
        datetime(2023, 12, 1),
        datetime(2024, 1, 1),
        datetime(2024, 2, 1),
        datetime(2024, 3, 1),
    ]


def test_weekly_buckets_are_monday_aligned():
    buckets = generate_buckets(datetime(2024, 3, 1), NOW, TimeGranularity.WEEKLY)

    assert buckets[0] == datetime(2024, 2, 26)
    assert all(b.weekday() == 0 for b in buckets)
    assert all(later - earlier == timedelta(days=7) for earlier, later in zip(buckets, buckets[1:]))


def test_empty_range_has_no_buckets():
    assert generate_buckets(NOW, NOW, TimeGranularity.DAILY) == []
    assert days_between(NOW, NOW) == 1


def test_add_months_negative_offset():
    assert add_months(datetime(2024, 2, 29, 10), -3) == datetime(2023, 11, 1)


def test_bucket_labels():
    assert bucket_label(datetime(2024, 1, 5), TimeGranularity.DAILY) == "Jan 5"
    assert bucket_label(datetime(2024, 12, 1), TimeGranularity.MONTHLY) == "Dec"


def test_to_local_naive_converts_offset_instead_of_dropping_it():
    aware = datetime(2024, 3, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

    local = to_local_naive(aware)

    assert local.tzinfo is None
    assert local == datetime.fromtimestamp(aware.timestamp())


def test_to_local_naive_keeps_naive_input():
    assert to_local_naive(NOW) is NOW
