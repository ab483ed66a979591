"""/v1/reports - spending trend and dashboard totals converted to the reporting currency"""

import time
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ledgerly.api.v1.schemas import TrendItem, DashboardSummaryResponse
from ledgerly.api.dependencies import get_current_user_id, get_normalizer, get_request_id
from ledgerly.api.responses import error_response
from ledgerly.config import settings
from ledgerly.infrastructure.database.session import get_db
from ledgerly.infrastructure.database.repositories import TransactionRepository
from ledgerly.infrastructure.observability.metrics import record_report
from ledgerly.infrastructure.observability.logging import log_report
from ledgerly.domain.conversion import TransactionNormalizer
from ledgerly.domain.models import ReportFilters
from ledgerly.domain.reporting import build_trend_report, build_dashboard_summary
from ledgerly.utils.date_utils import parse_query_datetime

router = APIRouter()


def _parse_tags(tags: Optional[str]) -> Optional[frozenset]:
    if not tags:
        return None
    return frozenset(tag.strip() for tag in tags.split(","))


@router.get("/reports/spending-trend-converted", response_model=List[TrendItem])
def get_spending_trend_report(
    request: Request,
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO date, inclusive"),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO date, inclusive"),
    group_by: str = Query("monthly", alias="groupBy", description="daily or monthly"),
    type: Optional[str] = Query(None, description="income or expense"),
    category: Optional[str] = None,
    tags: Optional[str] = Query(None, description="Comma separated; any match includes the record"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    normalizer: TransactionNormalizer = Depends(get_normalizer),
):
    """
    Totals and counts per day or month, converted to the reporting currency.

    Amounts whose currency cannot be converted are counted as-is rather than
    failing the report.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        filters = ReportFilters(
            start=parse_query_datetime(start_date),
            end=parse_query_datetime(end_date),
            type=type,
            category=category,
            tags=_parse_tags(tags),
        )
        records = TransactionRepository(db).get_records(user_id)
        report = build_trend_report(records, filters, group_by, settings.reporting_currency, normalizer)

    except Exception as e:
        logging.error(f"Spending trend report failed: {e}", extra={"request_id": request_id})
        return error_response(500, "Server Error", str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_report("spending_trend", normalizer.fallbacks)
    log_report(request_id, user_id, "spending_trend", len(records), normalizer.fallbacks, duration_ms)

    return [TrendItem(group=b.group, total=b.total, count=b.count) for b in report]


@router.get("/reports/dashboard-summary-converted", response_model=DashboardSummaryResponse)
def get_dashboard_summary(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    normalizer: TransactionNormalizer = Depends(get_normalizer),
):
    """All-time income, expense and net balance in the reporting currency"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        records = TransactionRepository(db).get_records(user_id)
        summary = build_dashboard_summary(records, settings.reporting_currency, normalizer)

    except Exception as e:
        logging.error(f"Dashboard summary failed: {e}", extra={"request_id": request_id})
        return error_response(500, "Server Error", str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_report("dashboard_summary", normalizer.fallbacks)
    log_report(request_id, user_id, "dashboard_summary", len(records), normalizer.fallbacks, duration_ms)

    return DashboardSummaryResponse(
        totalIncome=summary.total_income,
        totalExpense=summary.total_expense,
        netBalance=summary.net_balance,
    )
