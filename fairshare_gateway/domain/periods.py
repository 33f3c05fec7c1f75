"""Period resolution - maps a named period to concrete report windows"""

from datetime import datetime

from fairshare_gateway.domain.models import DateRange, TimeGranularity, TimePeriod
from fairshare_gateway.utils.date_utils import add_months

DEFAULT_ALL_TIME_START = datetime(2000, 1, 1)


def resolve(
    period: TimePeriod,
    now: datetime | None = None,
    all_time_start: datetime = DEFAULT_ALL_TIME_START,
) -> DateRange:
    """
    Resolve a period into current and previous half-open ranges.

    - this_month: [1st of month, now), previous is the same-length window before it
    - last_month: the whole previous calendar month, previous is the month before
    - this_year:  [Jan 1, now), previous is the prior year truncated to the same length
    - all_time:   [all_time_start, now), no previous window
    """
    if now is None:
        now = datetime.now()

    if period == TimePeriod.THIS_MONTH:
        start = add_months(now, 0)
        length = now - start
        return DateRange(start=start, end=now, previous_start=start - length, previous_end=start)

    if period == TimePeriod.LAST_MONTH:
        start = add_months(now, -1)
        end = add_months(now, 0)
        return DateRange(start=start, end=end, previous_start=add_months(now, -2), previous_end=start)

    if period == TimePeriod.THIS_YEAR:
        start = datetime(now.year, 1, 1)
        previous_start = datetime(now.year - 1, 1, 1)
        previous_end = min(previous_start + (now - start), start)
        return DateRange(start=start, end=now, previous_start=previous_start, previous_end=previous_end)

    if period == TimePeriod.ALL_TIME:
        return DateRange(start=all_time_start, end=now, previous_start=all_time_start, previous_end=all_time_start)

    raise ValueError(f"Unknown period: {period}")


def granularity_for(period: TimePeriod) -> TimeGranularity:
    """Monthly windows chart daily, longer windows chart monthly"""
    if period in (TimePeriod.THIS_MONTH, TimePeriod.LAST_MONTH):
        return TimeGranularity.DAILY
    return TimeGranularity.MONTHLY
