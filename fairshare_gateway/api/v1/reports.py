"""GET /v1/reports - spending reports and CSV export"""

import time
import logging
from dataclasses import asdict
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from fairshare_gateway.api.v1.schemas import SpendingReportResponse
from fairshare_gateway.api.dependencies import get_current_user_id, get_report_defaults, get_request_id
from fairshare_gateway.config import settings
from fairshare_gateway.domain.exceptions import FetchFailureError
from fairshare_gateway.domain.models import ReportDefaults, TimeGranularity, TimePeriod
from fairshare_gateway.domain.periods import granularity_for, resolve
from fairshare_gateway.infrastructure.database.repositories import ExpenseRepository
from fairshare_gateway.infrastructure.database.session import get_db
from fairshare_gateway.infrastructure.observability.logging import log_report
from fairshare_gateway.infrastructure.observability.metrics import (
    record_report,
    report_export_counter,
    report_fetch_failures_counter,
)
from fairshare_gateway.services.reports import build_report, export_report_csv

router = APIRouter()


@router.get("/reports", response_model=SpendingReportResponse)
async def get_report(
    request: Request,
    period: TimePeriod = Query(TimePeriod.THIS_MONTH, description="Report period"),
    granularity: TimeGranularity | None = Query(None, description="Override trend bucket width"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    defaults: ReportDefaults = Depends(get_report_defaults),
):
    """
    Spending report for the authenticated user.

    Flow:
    1. Resolve the period into current and previous windows
    2. Fetch expenses once and compute all views concurrently
    3. Return summary, breakdowns, trend series and top expenses
    """
    start_time = time.time()
    request_id = get_request_id(request)

    date_range = resolve(period, all_time_start=settings.all_time_start)
    bucket_width = granularity or granularity_for(period)

    try:
        report = await build_report(
            ExpenseRepository(db).list_for_user,
            user_id,
            date_range,
            bucket_width,
            defaults,
        )

    except FetchFailureError as e:
        report_fetch_failures_counter.inc()
        logging.error(f"Report fetch failed: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=503, detail="Unable to load report, please refresh")

    duration_ms = (time.time() - start_time) * 1000
    record_report(period.value)
    log_report(request_id, user_id, period.value, report.summary.transaction_count, duration_ms)

    return SpendingReportResponse(
        user_id=user_id,
        period=period.value,
        granularity=bucket_width.value,
        start=date_range.start,
        end=date_range.end,
        previous_start=date_range.previous_start,
        previous_end=date_range.previous_end,
        summary=asdict(report.summary),
        by_category={key: asdict(value) for key, value in report.by_category.items()},
        by_group={key: asdict(value) for key, value in report.by_group.items()},
        trend=[asdict(point) for point in report.trend],
        top_expenses=[asdict(item) for item in report.top_expenses],
    )


@router.get("/reports/export.csv")
def export_report(
    request: Request,
    period: TimePeriod = Query(TimePeriod.THIS_MONTH, description="Report period"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    defaults: ReportDefaults = Depends(get_report_defaults),
):
    """Current-period expenses as a CSV download"""
    date_range = resolve(period, all_time_start=settings.all_time_start)

    try:
        content = export_report_csv(ExpenseRepository(db).list_for_user, user_id, date_range, defaults)
    except FetchFailureError as e:
        report_fetch_failures_counter.inc()
        logging.error(f"Export fetch failed: {e}", extra={"request_id": get_request_id(request), "user_id": user_id})
        raise HTTPException(status_code=503, detail="Unable to export expenses, please retry")

    report_export_counter.inc()
    filename = f"fairshare_expenses_{int(datetime.now().timestamp() * 1000)}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
