"""Date manipulation utilities"""

from datetime import datetime, timedelta
from typing import List

from fairshare_gateway.domain.models import TimeGranularity

MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def to_local_naive(moment: datetime) -> datetime:
    """Convert an aware datetime to naive server-local time; naive input is taken as local already"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift to the first day of the month `months` away (negative allowed)"""
    index = moment.year * 12 + (moment.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)


def bucket_floor(moment: datetime, granularity: TimeGranularity) -> datetime:
    """Start of the calendar bucket containing moment"""
    day = start_of_day(moment)
    if granularity == TimeGranularity.DAILY:
        return day
    if granularity == TimeGranularity.WEEKLY:
        return day - timedelta(days=day.weekday())
    return day.replace(day=1)


def next_bucket(bucket_start: datetime, granularity: TimeGranularity) -> datetime:
    if granularity == TimeGranularity.DAILY:
        return bucket_start + timedelta(days=1)
    if granularity == TimeGranularity.WEEKLY:
        return bucket_start + timedelta(days=7)
    return add_months(bucket_start, 1)


def generate_buckets(start: datetime, end: datetime, granularity: TimeGranularity) -> List[datetime]:
    """Bucket starts for every calendar bucket overlapping [start, end)"""
    buckets: List[datetime] = []
    if start >= end:
        return buckets
    current = bucket_floor(start, granularity)
    while current < end:
        buckets.append(current)
        current = next_bucket(current, granularity)
    return buckets


def bucket_label(bucket_start: datetime, granularity: TimeGranularity) -> str:
    """Short chart label, e.g. 'Jan 5' for daily buckets and 'Jan' for monthly ones"""
    month = MONTH_ABBREVIATIONS[bucket_start.month - 1]
    if granularity == TimeGranularity.MONTHLY:
        return month
    return f"{month} {bucket_start.day}"


def days_between(start: datetime, end: datetime) -> int:
    """Number of calendar days touched by [start, end), at least 1"""
    return max(1, len(generate_buckets(start, end, TimeGranularity.DAILY)))
