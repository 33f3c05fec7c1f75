"""Spending report aggregation - core reporting logic over a fetched expense set"""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Tuple

from fairshare_gateway.domain.models import (
    CategorySpending,
    DateRange,
    Expense,
    GroupSpending,
    ReportDefaults,
    SpendingSummary,
    TimeGranularity,
    TimeSeriesDataPoint,
    TopExpenseItem,
)
from fairshare_gateway.utils.date_utils import bucket_floor, bucket_label, days_between, generate_buckets

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def partition(expenses: List[Expense], date_range: DateRange) -> Tuple[List[Expense], List[Expense]]:
    """Split one fetched set into (current, previous) by date"""
    current = [e for e in expenses if date_range.start <= e.date < date_range.end]
    previous = [e for e in expenses if date_range.previous_start <= e.date < date_range.previous_end]
    return current, previous


def summarize(
    current: List[Expense],
    previous: List[Expense],
    user_id: str,
    date_range: DateRange,
) -> SpendingSummary:
    """
    Build the headline summary.

    percent_change is None when the previous total is zero (undefined);
    is_increase / is_decrease follow the sign of the difference only.
    """
    total_spent = sum((e.share_for(user_id) for e in current), ZERO)
    previous_total = sum((e.share_for(user_id) for e in previous), ZERO)

    days = days_between(date_range.start, date_range.end)
    average_per_day = (total_spent / days).quantize(CENTS, rounding=ROUND_HALF_UP)

    difference = total_spent - previous_total
    percent_change = float(difference / previous_total * 100) if previous_total > 0 else None

    return SpendingSummary(
        total_spent=total_spent,
        transaction_count=len(current),
        average_per_day=average_per_day,
        previous_period_total=previous_total,
        percent_change=percent_change,
        is_increase=difference > 0,
        is_decrease=difference < 0,
        has_comparison=date_range.has_previous,
    )


def spending_by_category(
    current: List[Expense],
    user_id: str,
    defaults: ReportDefaults,
) -> Dict[str, CategorySpending]:
    """Totals per category; records without a category land in the default bucket"""
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[str, int] = defaultdict(int)
    for expense in current:
        key = expense.category or defaults.default_category
        totals[key] += expense.share_for(user_id)
        counts[key] += 1

    grand_total = sum(totals.values(), ZERO)
    return {
        key: CategorySpending(
            category=key,
            total=total,
            count=counts[key],
            percentage=float(total / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for key, total in totals.items()
    }


def spending_by_group(current: List[Expense], user_id: str) -> Dict[str, GroupSpending]:
    """Totals per group; direct expenses are left out rather than given a synthetic key"""
    result: Dict[str, GroupSpending] = {}
    for expense in current:
        if expense.group_id is None:
            continue
        entry = result.get(expense.group_id)
        if entry is None:
            entry = GroupSpending(
                group_id=expense.group_id,
                name=expense.group_name or expense.group_id,
                total=ZERO,
                count=0,
            )
            result[expense.group_id] = entry
        entry.total += expense.share_for(user_id)
        entry.count += 1
    return result


def spending_over_time(
    current: List[Expense],
    user_id: str,
    date_range: DateRange,
    granularity: TimeGranularity,
) -> List[TimeSeriesDataPoint]:
    """One point per calendar bucket in [start, end), empty buckets included"""
    buckets = generate_buckets(date_range.start, date_range.end, granularity)
    totals: Dict = {bucket: ZERO for bucket in buckets}

    for expense in current:
        key = bucket_floor(expense.date, granularity)
        if key in totals:
            totals[key] += expense.share_for(user_id)

    return [
        TimeSeriesDataPoint(bucket_start=bucket, total=totals[bucket], label=bucket_label(bucket, granularity))
        for bucket in buckets
    ]


def top_expenses(current: List[Expense], user_id: str, defaults: ReportDefaults) -> List[TopExpenseItem]:
    """Largest expenses first; equal amounts ordered by earliest date, then id"""
    ranked = sorted(current, key=lambda e: (-e.share_for(user_id), e.date, e.expense_id))
    return [
        TopExpenseItem(
            expense_id=e.expense_id,
            description=e.description,
            category=e.category or defaults.default_category,
            amount=e.share_for(user_id),
            date=e.date,
            group_name=e.group_name,
        )
        for e in ranked[: defaults.top_n]
    ]
