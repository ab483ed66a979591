"""Reporting engine - bucketing and aggregation of converted amounts"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from ledgerly.domain.conversion import TransactionNormalizer
from ledgerly.domain.models import DashboardSummary, MonetaryRecord, ReportFilters, TrendBucket
from ledgerly.utils.date_utils import as_utc


def bucket_key(when: datetime, granularity: str) -> str:
    """
    Group key for a record date, e.g. "2025-1" (monthly) or "2025-1-9" (daily).

    Month and day are not zero padded, so "2025-10" sorts before "2025-2".
    Anything other than "daily" groups by month.
    """
    utc = as_utc(when)
    if granularity == "daily":
        return f"{utc.year}-{utc.month}-{utc.day}"
    return f"{utc.year}-{utc.month}"


def matches_filters(record: MonetaryRecord, filters: ReportFilters) -> bool:
    """Date range is inclusive on both ends; tags match on any overlap"""
    if filters.start is not None and as_utc(record.date) < as_utc(filters.start):
        return False
    if filters.end is not None and as_utc(record.date) > as_utc(filters.end):
        return False
    if filters.type is not None and record.type != filters.type:
        return False
    if filters.category is not None and record.category != filters.category:
        return False
    if filters.tags is not None and not filters.tags.intersection(record.tags or ()):
        return False
    return True


def build_trend_report(
    records: Iterable[MonetaryRecord],
    filters: ReportFilters,
    granularity: str,
    reporting_currency: str,
    normalizer: TransactionNormalizer,
) -> List[TrendBucket]:
    """
    Filter, convert and bucket records into per-period totals.

    Returns buckets sorted by ascending group key (plain string order).
    """
    accumulator: Dict[str, Tuple[Decimal, int]] = {}

    for record in records:
        if not matches_filters(record, filters):
            continue
        amount = normalizer.normalize(record, reporting_currency)
        key = bucket_key(record.date, granularity)
        total, count = accumulator.get(key, (Decimal(0), 0))
        accumulator[key] = (total + amount, count + 1)

    return [
        TrendBucket(group=key, total=accumulator[key][0], count=accumulator[key][1])
        for key in sorted(accumulator)
    ]


def build_dashboard_summary(
    records: Iterable[MonetaryRecord],
    reporting_currency: str,
    normalizer: TransactionNormalizer,
) -> DashboardSummary:
    """All-time income, expense and net balance in the reporting currency"""
    total_income = Decimal(0)
    total_expense = Decimal(0)

    for record in records:
        if record.type == "income":
            total_income += normalizer.normalize(record, reporting_currency)
        elif record.type == "expense":
            total_expense += normalizer.normalize(record, reporting_currency)

    return DashboardSummary(
        total_income=total_income,
        total_expense=total_expense,
        net_balance=total_income - total_expense,
    )
