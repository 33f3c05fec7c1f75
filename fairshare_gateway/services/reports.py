"""Report orchestration - one fetch, five views computed concurrently"""

import asyncio
from datetime import datetime
from typing import Callable, List

from fairshare_gateway.domain.export import export_to_csv
from fairshare_gateway.domain.models import DateRange, Expense, ReportDefaults, SpendingReport, TimeGranularity
from fairshare_gateway.domain.reporting import (
    partition,
    spending_by_category,
    spending_by_group,
    spending_over_time,
    summarize,
    top_expenses,
)

ExpenseFetcher = Callable[[str, datetime, datetime], List[Expense]]


async def build_report(
    fetch: ExpenseFetcher,
    user_id: str,
    date_range: DateRange,
    granularity: TimeGranularity,
    defaults: ReportDefaults | None = None,
) -> SpendingReport:
    """
    Build every report view for a user.

    Flow:
    1. Single fetch covering [previous_start, end)
    2. Partition into current and previous sets
    3. Compute the five views concurrently; the first failure propagates
       and no partial report is returned

    Raises:
        FetchFailureError: The expense store could not be read
    """
    defaults = defaults or ReportDefaults()
    expenses = fetch(user_id, min(date_range.previous_start, date_range.start), date_range.end)
    current, previous = partition(expenses, date_range)

    summary, by_category, by_group, trend, top = await asyncio.gather(
        asyncio.to_thread(summarize, current, previous, user_id, date_range),
        asyncio.to_thread(spending_by_category, current, user_id, defaults),
        asyncio.to_thread(spending_by_group, current, user_id),
        asyncio.to_thread(spending_over_time, current, user_id, date_range, granularity),
        asyncio.to_thread(top_expenses, current, user_id, defaults),
    )

    return SpendingReport(
        date_range=date_range,
        granularity=granularity,
        summary=summary,
        by_category=by_category,
        by_group=by_group,
        trend=trend,
        top_expenses=top,
    )


def export_report_csv(
    fetch: ExpenseFetcher,
    user_id: str,
    date_range: DateRange,
    defaults: ReportDefaults | None = None,
) -> str:
    """CSV of the current-period expenses"""
    return export_to_csv(fetch(user_id, date_range.start, date_range.end), defaults)
